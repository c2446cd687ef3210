"""
Base exceptions for slotctl.

This module defines the hierarchy of exceptions used by slotctl. Every failure
raised by the core belongs to one of four kinds: bit range, parse, resolution
and command errors.
"""

class SlotctlError(Exception):
    """Base exception for slotctl errors"""
    pass


class BitRangeError(SlotctlError):
    """Exception raised when a bit index falls outside a bitfield"""
    pass


class ParseError(SlotctlError):
    """Exception raised when partition tool output cannot be parsed"""
    pass


class StanzaError(ParseError):
    """Exception raised when an attribute stanza is rejected"""
    pass


class ResolutionError(SlotctlError):
    """Exception raised when the booted partition cannot be located"""
    pass


class UnknownLabelError(ResolutionError):
    """Exception raised when a partition label is not in the label map"""
    pass


class DevicePathError(ResolutionError):
    """Exception raised when a device path carries no partition number"""
    pass


class SlotSuffixError(ResolutionError):
    """Exception raised when the booted slot suffix cannot be determined"""
    pass


class CommandError(SlotctlError):
    """Exception raised when an external command cannot be run or fails"""
    pass
