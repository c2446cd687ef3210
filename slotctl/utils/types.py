"""
Type definitions for slotctl.

This module provides the immutable records passed between the partition
tool gateway, the slot decoder and the command-line interface.
"""
from typing import NamedTuple

from slotctl.utils.bitfield import Bitfield


class DiskLocation(NamedTuple):
    """A partition addressed as a disk device and a partition number"""
    disk: str
    index: int


class PartitionInfo(NamedTuple):
    """Information about a single partition, as reported by sgdisk --info"""
    guid: str
    uuid: str
    first_sector: int
    last_sector: int
    size_sectors: int
    attributes: Bitfield
    name: str


class BootSlotAttributes(NamedTuple):
    """A/B boot state decoded from the private attribute byte of a partition"""
    active: bool
    successful: bool
    unbootable: bool
    tries_remaining: int
    private_byte: int


class MarkSuccessfulResult(NamedTuple):
    """Outcome of a mark-successful request"""
    changed: bool
    before: BootSlotAttributes
    after: BootSlotAttributes
