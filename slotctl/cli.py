"""
Command-line interface for slotctl.

This module handles argument parsing, prints the slot report and orchestrates
the mark-successful transition.
"""
import argparse
import logging
import os
import sys
from typing import List, Optional

from slotctl.utils.logging import setup_logging
from slotctl.utils.command import CommandRunner, SimulationMode
from slotctl.utils.format import TermColors, colorize, format_slot_report
from slotctl.utils.types import BootSlotAttributes
from slotctl.utils.validation import check_prerequisites
from slotctl.core.bootparams import ActiveSlotResolver, CMDLINE_PATH
from slotctl.core.gpt import SgdiskGateway, SGDISK
from slotctl.core.locator import PartitionLocator, PARTLABEL_DIR
from slotctl.core.service import BootControlService
from slotctl.core.exceptions import SlotctlError

logger = logging.getLogger('slotctl')


def parse_arguments(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """
    Parse command-line arguments.

    Args:
        argv: Arguments to parse, defaults to sys.argv[1:]

    Returns:
        Namespace containing parsed arguments
    """
    parser = argparse.ArgumentParser(
        description="Report the A/B boot slot state of a Qualcomm GPT device and mark the booted slot successful"
    )

    parser.add_argument(
        "--mark-successful",
        action="store_true",
        help="Mark the booted slot as successfully booted"
    )

    parser.add_argument(
        "-s", "--simulate",
        action="store_true",
        help="Read the real slot state but only log the changes that would be made"
    )

    parser.add_argument(
        "--no-color",
        action="store_true",
        help="Disable colored output in simulation mode"
    )

    parser.add_argument(
        "--debug",
        action="store_true",
        help="Enable debug logging"
    )

    advanced_group = parser.add_argument_group('Advanced options')
    advanced_group.add_argument(
        "--sgdisk",
        default=SGDISK,
        help=f"sgdisk executable to use (default: {SGDISK})"
    )

    advanced_group.add_argument(
        "--labels-dir",
        default=PARTLABEL_DIR,
        help=f"Directory of partition label symlinks (default: {PARTLABEL_DIR})"
    )

    advanced_group.add_argument(
        "--cmdline-file",
        default=CMDLINE_PATH,
        help=f"File holding the kernel command line (default: {CMDLINE_PATH})"
    )

    return parser.parse_args(argv)


def build_service(args: argparse.Namespace, cmd_runner: CommandRunner) -> BootControlService:
    """
    Create the boot control service from command-line arguments.
    The partition label snapshot is taken here, once per invocation.
    """
    return BootControlService(
        gateway=SgdiskGateway(cmd_runner, args.sgdisk),
        locator=PartitionLocator.from_directory(args.labels_dir),
        slot_resolver=ActiveSlotResolver(args.cmdline_file)
    )


def report(state: BootSlotAttributes) -> None:
    print(format_slot_report(state))
    print("")


def display_simulation_summary(cmd_runner: CommandRunner) -> None:
    """
    Display a summary of the simulation.

    Args:
        cmd_runner: CommandRunner instance for executing commands
    """
    if not cmd_runner.simulating:
        return

    try:
        terminal_width = os.get_terminal_size().columns
    except (AttributeError, OSError):
        terminal_width = 80

    stars = "*" * terminal_width
    print(f"\n{colorize(stars, TermColors.SIM, cmd_runner.colored_output)}")
    print(colorize("SIMULATION COMPLETE - NO CHANGES WERE MADE", TermColors.SIM + TermColors.BOLD, cmd_runner.colored_output))
    print(f"{colorize(stars, TermColors.SIM, cmd_runner.colored_output)}\n")
    print(cmd_runner.get_simulation_report())


def main(argv: Optional[List[str]] = None) -> int:
    """
    Main function.

    Args:
        argv: Command-line arguments, defaults to sys.argv[1:]

    Returns:
        Exit code (0 for success, non-zero for errors)
    """
    try:
        args = parse_arguments(argv)

        setup_logging(args.debug)

        cmd_runner = CommandRunner(
            SimulationMode.SIMULATE if args.simulate else SimulationMode.DISABLED,
            not args.no_color
        )

        if args.simulate:
            logger.info("Running in simulation mode - NO CHANGES WILL BE MADE")

        try:
            check_prerequisites(cmd_runner, args.sgdisk, args.labels_dir)
        except RuntimeError as e:
            logger.error(str(e))
            return 1

        try:
            service = build_service(args, cmd_runner)
            report(service.current_state())

            if args.mark_successful:
                result = service.mark_successful()
                if result.changed:
                    print("Marking successful...")
                    # Print the report again
                    report(result.after)
                else:
                    print("Already successful, doing nothing...")

            display_simulation_summary(cmd_runner)
            return 0

        except SlotctlError as e:
            logger.error(str(e))
            return 1

    except KeyboardInterrupt:
        logger.error("Operation cancelled by user")
        return 130

    except Exception as e:
        logger.error(f"Unexpected error: {e}")
        if 'args' in locals() and args.debug:
            import traceback
            traceback.print_exc()
        return 1


# For module import compatibility
if __name__ == "__main__":
    sys.exit(main())
