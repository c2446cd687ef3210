"""
Formatting utilities.

This module provides the slot report layout and consistent terminal output
formatting.
"""
from slotctl.utils.types import BootSlotAttributes, PartitionInfo


# ANSI Terminal Colors
class TermColors:
    """ANSI color codes for terminal output"""
    INFO = '\033[94m'     # Blue for informational messages
    SUCCESS = '\033[92m'  # Green for success messages
    WARNING = '\033[93m'  # Yellow for warnings
    ERROR = '\033[91m'    # Red for errors
    SIM = '\033[96m'      # Cyan for simulation messages
    BOLD = '\033[1m'      # Bold text
    ENDC = '\033[0m'      # End color


REPORT_LABEL_WIDTH = 15


def colorize(message: str, color: str, enabled: bool = True) -> str:
    """
    Add color to a message if color output is enabled.

    Args:
        message: The message to colorize
        color: The color to use (from TermColors)
        enabled: Whether colorization is enabled

    Returns:
        Colorized message or original message if colors disabled
    """
    if not enabled:
        return message
    return f"{color}{message}{TermColors.ENDC}"


def format_slot_report(state: BootSlotAttributes) -> str:
    """
    Render the four-line slot report.

    Args:
        state: Decoded boot slot attributes

    Returns:
        Report lines joined by newlines, labels right-aligned
    """
    rows = [
        ("Tries remaining", str(state.tries_remaining)),
        ("unbootable?", str(state.unbootable)),
        ("active?", str(state.active)),
        ("successful?", str(state.successful)),
    ]
    return "\n".join(f"{label.rjust(REPORT_LABEL_WIDTH)}: {value}" for label, value in rows)


def describe_partition(info: PartitionInfo) -> str:
    """One-line summary of a partition, used in debug logs"""
    return (f"'{info.name}' sectors {info.first_sector}-{info.last_sector} "
            f"({info.size_sectors} sectors), attributes {info.attributes}")
