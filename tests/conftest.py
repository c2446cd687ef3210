"""Shared fixtures: an in-memory sgdisk and a booted device layout."""

import subprocess
from typing import Any, Callable, Dict, List, Tuple

import pytest

from slotctl.core.bootparams import ActiveSlotResolver
from slotctl.core.gpt import SgdiskGateway
from slotctl.core.locator import PartitionLabelMap, PartitionLocator
from slotctl.core.service import BootControlService

CANONICAL_ATTRIBUTES = 0x003B000000000000
SUCCESSFUL_ATTRIBUTES = 0x0077000000000000

BOOT_LABELS = {
    "boot_a": "/dev/mmcblk0p7",
    "boot_b": "/dev/mmcblk0p8",
    "userdata": "/dev/mmcblk0p12",
}


def render_report(attributes: int, name: str = "boot_a", banner: bool = False) -> str:
    """Render text the way ``sgdisk --info`` prints it."""
    lines = [
        "Partition GUID code: 77036CD4-03D5-42BB-8ED1-37E5A88BAA34 (Unknown)",
        "Partition unique GUID: 326AD371-C287-2DC5-FFA8-CD86CEC4BF5D",
        "First sector: 54150 (at 211.5 MiB)",
        "Last sector: 70533 (at 275.5 MiB)",
        "Partition size: 16384 sectors (64.0 MiB)",
        f"Attribute flags: {attributes:016X}",
        f"Partition name: '{name}'",
    ]
    text = "\n".join(lines) + "\n"
    if banner:
        text = (
            "\n***************************************************************\n"
            "Found invalid GPT and valid MBR; converting MBR to GPT format\n"
            "in memory.\n"
            "***************************************************************\n\n"
        ) + text
    return text


class FakeSgdiskRunner:
    """Command runner double that emulates sgdisk on an in-memory table."""

    simulating = False

    def __init__(self, partitions: Dict[Tuple[str, int], int]) -> None:
        self.partitions = dict(partitions)
        self.commands_run: List[List[str]] = []
        self.mutations: List[List[str]] = []

    def run_real(self, cmd: List[str], check: bool = True, **kwargs: Any) -> subprocess.CompletedProcess:
        self.commands_run.append(list(cmd))
        assert "--pretend" in cmd
        disk = cmd[cmd.index("--pretend") + 1]
        index = int(cmd[cmd.index("--info") + 1])
        if (disk, index) not in self.partitions:
            return subprocess.CompletedProcess(cmd, 4, stdout="", stderr=None)
        return subprocess.CompletedProcess(cmd, 0, stdout=render_report(self.partitions[(disk, index)]), stderr=None)

    def run(self, cmd: List[str], check: bool = True, **kwargs: Any) -> subprocess.CompletedProcess:
        self.commands_run.append(list(cmd))
        self.mutations.append(list(cmd))
        option = next(arg for arg in cmd if arg.startswith("--attributes="))
        index, operation, bit = option.split("=", 1)[1].split(":")
        assert operation == "set"
        key = (cmd[-1], int(index))
        self.partitions[key] |= 1 << int(bit)
        return subprocess.CompletedProcess(cmd, 0, stdout="The operation has completed successfully.\n", stderr="")


@pytest.fixture
def report() -> Callable[..., str]:
    """Return the sgdisk report renderer."""
    return render_report


@pytest.fixture
def cmdline_file(tmp_path: Any) -> Any:
    """Write a kernel command line booted from slot _a."""
    path = tmp_path / "cmdline"
    path.write_text("console=ttyMSM0,115200 androidboot.slot_suffix=_a androidboot.hardware=qcom quiet\n")
    return path


def _service(attributes: int, cmdline_file: Any) -> Tuple[BootControlService, FakeSgdiskRunner]:
    runner = FakeSgdiskRunner({("/dev/mmcblk0", 7): attributes, ("/dev/mmcblk0", 8): 0})
    service = BootControlService(
        gateway=SgdiskGateway(runner),  # type: ignore[arg-type]
        locator=PartitionLocator(PartitionLabelMap(BOOT_LABELS)),
        slot_resolver=ActiveSlotResolver(str(cmdline_file)),
    )
    return service, runner


@pytest.fixture
def pending_service(cmdline_file: Any) -> Tuple[BootControlService, FakeSgdiskRunner]:
    """Booted slot _a with the successful flag unset."""
    return _service(CANONICAL_ATTRIBUTES, cmdline_file)


@pytest.fixture
def successful_service(cmdline_file: Any) -> Tuple[BootControlService, FakeSgdiskRunner]:
    """Booted slot _a already marked successful."""
    return _service(SUCCESSFUL_ATTRIBUTES, cmdline_file)
