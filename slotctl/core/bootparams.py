"""
Kernel boot parameter access.

This module finds the booted A/B slot from the androidboot.slot_suffix
parameter on the kernel command line.
See https://android.googlesource.com/platform/hardware/libhardware/+/master/include/hardware/boot_control.h
"""
import logging
from typing import Dict

from slotctl.core.exceptions import SlotSuffixError

logger = logging.getLogger('slotctl')

# Constants
CMDLINE_PATH = "/proc/cmdline"
SLOT_SUFFIX_PARAM = "androidboot.slot_suffix"
BOOT_LABEL_PREFIX = "boot"


def parse_boot_parameters(line: str) -> Dict[str, str]:
    """
    Parse a kernel command line into key/value pairs.
    Flags without a value map to an empty string; the first occurrence wins.

    Args:
        line: Whitespace separated kernel parameters

    Returns:
        Dict of parameter names to values
    """
    params: Dict[str, str] = {}
    for token in line.split():
        key, _, value = token.partition("=")
        params.setdefault(key, value)
    return params


class ActiveSlotResolver:
    """
    Reads the booted slot suffix from the kernel command line.
    """
    def __init__(self, cmdline_path: str = CMDLINE_PATH):
        self.cmdline_path = cmdline_path

    def read_cmdline(self) -> str:
        try:
            with open(self.cmdline_path, "r") as f:
                return f.read()
        except OSError as e:
            raise SlotSuffixError(f"Could not read kernel command line from {self.cmdline_path}: {e}")

    def booted_slot_suffix(self) -> str:
        """
        Return the suffix of the booted slot, e.g. "_a".

        Raises:
            SlotSuffixError: If the parameter is absent or has no value
        """
        params = parse_boot_parameters(self.read_cmdline())
        if SLOT_SUFFIX_PARAM not in params:
            raise SlotSuffixError(f"{SLOT_SUFFIX_PARAM} not found in {self.cmdline_path}")

        suffix = params[SLOT_SUFFIX_PARAM]
        if not suffix:
            raise SlotSuffixError(f"{SLOT_SUFFIX_PARAM} has no value in {self.cmdline_path}")
        logger.debug(f"Booted slot suffix: {suffix!r}")
        return suffix

    def boot_label(self, prefix: str = BOOT_LABEL_PREFIX) -> str:
        """Partition label of the booted slot, e.g. "boot_a" """
        return prefix + self.booted_slot_suffix()
