"""
Command execution utilities.

This module provides tools for executing external commands with simulation support.
"""
import logging
import os
import subprocess
import uuid
from enum import Enum
from typing import Dict, List

from slotctl.core.exceptions import CommandError
from slotctl.utils.format import TermColors, colorize

logger = logging.getLogger('slotctl')


class SimulationMode(Enum):
    """Enumeration for simulation modes"""
    DISABLED = 0  # Normal operation
    SIMULATE = 1  # Simulate operations


class CommandRunner:
    """
    Class responsible for command execution with simulation support.
    Acts as a wrapper around subprocess.run with additional functionality.
    """
    def __init__(self, simulation_mode: SimulationMode, colored_output: bool = True):
        """
        Initialize the command runner.

        Args:
            simulation_mode: Simulation mode to operate in
            colored_output: Whether to use colored output in terminal
        """
        self.simulation_mode = simulation_mode
        self.colored_output = colored_output
        self.commands_run = []

        # Generate a unique simulation ID
        self.simulation_id = str(uuid.uuid4())[:8]

    @property
    def simulating(self) -> bool:
        return self.simulation_mode == SimulationMode.SIMULATE

    def run(self, cmd: List[str], check: bool = True, **kwargs) -> subprocess.CompletedProcess:
        """
        Run a command or simulate running it.

        Args:
            cmd: Command to run as list of strings
            check: Whether to check for non-zero return code
            **kwargs: Additional arguments to pass to subprocess.run

        Returns:
            CompletedProcess instance from subprocess.run

        Raises:
            CommandError: If the command cannot be started or fails with check=True
        """
        cmd_str = ' '.join(cmd)
        logger.debug(f"Command requested: {cmd_str}")
        self._record(cmd, self.simulating)

        if self.simulating:
            sim_prefix = colorize(f"[SIM:{self.simulation_id}]", TermColors.SIM, self.colored_output)
            logger.info(f"{sim_prefix} Would execute: {cmd_str}")
            return self._simulate_command(cmd)

        return self._execute(cmd, check, "Command failed", **kwargs)

    def run_real(self, cmd: List[str], check: bool = True, **kwargs) -> subprocess.CompletedProcess:
        """
        Run a command for real, even in simulation mode.
        This is used for read-only queries such as sgdisk --pretend --info.

        Args:
            cmd: Command to run as list of strings
            check: Whether to check for non-zero return code
            **kwargs: Additional arguments to pass to subprocess.run

        Returns:
            CompletedProcess instance from subprocess.run

        Raises:
            CommandError: If the command cannot be started or fails with check=True
        """
        logger.debug(f"Running real command: {' '.join(cmd)}")
        self._record(cmd, False)
        return self._execute(cmd, check, "Real command failed", **kwargs)

    def _record(self, cmd: List[str], simulated: bool) -> None:
        self.commands_run.append({
            "command": cmd.copy(),
            "simulated": simulated
        })

    def _execute(self, cmd: List[str], check: bool, failure: str, **kwargs) -> subprocess.CompletedProcess:
        cmd_str = ' '.join(cmd)
        if "stdout" not in kwargs and "stderr" not in kwargs:
            kwargs["capture_output"] = True
        try:
            return subprocess.run(
                cmd,
                check=check,
                text=True,
                **kwargs
            )

        except FileNotFoundError as e:
            logger.error(colorize(f"Command not found: {cmd[0]}", TermColors.ERROR, self.colored_output))
            raise CommandError(f"Command not found: {cmd[0]}") from e

        except subprocess.CalledProcessError as e:
            logger.error(colorize(f"{failure}: {cmd_str}", TermColors.ERROR, self.colored_output))
            logger.error(f"Return code: {e.returncode}")
            logger.error(f"Stdout: {e.stdout}")
            logger.error(f"Stderr: {e.stderr}")
            raise CommandError(f"{failure} with return code {e.returncode}: {cmd_str}") from e

    def _simulate_command(self, cmd: List[str]) -> subprocess.CompletedProcess:
        """
        Generate simulated output for a command.

        Args:
            cmd: Command to simulate

        Returns:
            CompletedProcess with simulated output
        """
        result = subprocess.CompletedProcess(
            args=cmd,
            returncode=0,
            stdout="",
            stderr=""
        )

        cmd_name = os.path.basename(cmd[0]) if cmd else ""
        if cmd_name == "sgdisk":
            return self._handle_sgdisk_simulation(cmd, result)

        return result

    def _handle_sgdisk_simulation(self, cmd: List[str], result: subprocess.CompletedProcess) -> subprocess.CompletedProcess:
        """Simulate sgdisk command output"""
        if any(arg.startswith("--attributes=") for arg in cmd):
            result.stdout = "The operation has completed successfully.\n"

        return result

    def get_simulation_report(self) -> str:
        """
        Generate a report of all simulated commands.

        Returns:
            Formatted string with report of simulated commands
        """
        if not self.simulating:
            return "Simulation mode is not active."

        report = []
        report.append("=" * 80)
        report.append(f"SIMULATION REPORT [ID: {self.simulation_id}]")
        report.append("=" * 80)
        report.append("")

        # Group simulated commands by tool
        command_groups: Dict[str, List[List[str]]] = {}
        for cmd_record in self.commands_run:
            if not cmd_record["simulated"]:
                continue
            cmd = cmd_record["command"]
            cmd_type = os.path.basename(cmd[0]) if cmd else "unknown"
            command_groups.setdefault(cmd_type, []).append(cmd)

        for cmd_type, cmds in command_groups.items():
            report.append(f"{cmd_type.upper()} COMMANDS:")
            report.append("-" * 40)

            for i, cmd in enumerate(cmds, 1):
                report.append(f"{i}. {' '.join(cmd)}")

            report.append("")

        simulated = sum(len(cmds) for cmds in command_groups.values())
        report.append("-" * 80)
        report.append(f"Total commands simulated: {simulated}")
        report.append("=" * 80)

        return "\n".join(report)
