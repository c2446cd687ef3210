"""
Partition label resolution.

This module maps GPT partition labels to a disk device and partition number
using the /dev/disk/by-partlabel symlinks. The label map is a snapshot taken
once and handed to the locator; later relabeling is not observed unless the
snapshot is refreshed explicitly.
"""
import logging
import os
import re
from typing import Dict, Iterator, Mapping, Optional

from slotctl.utils.types import DiskLocation
from slotctl.core.exceptions import DevicePathError, UnknownLabelError

logger = logging.getLogger('slotctl')

# Constants
PARTLABEL_DIR = "/dev/disk/by-partlabel"

PARTITION_DEVICE = re.compile(r"^(?P<prefix>.*?)(?P<index>[0-9]+)$")


def split_partition_device(path: str) -> DiskLocation:
    """
    Split a partition device path into its disk device and partition number.
    Disks whose name ends in a digit use a "p" separator before the number.

    Examples:
        /dev/sda7        -> (/dev/sda, 7)
        /dev/mmcblk0p12  -> (/dev/mmcblk0, 12)
        /dev/nvme0n1p3   -> (/dev/nvme0n1, 3)

    Args:
        path: Partition device path

    Returns:
        DiskLocation of the partition

    Raises:
        DevicePathError: If the path does not end in a partition number
    """
    match = PARTITION_DEVICE.match(path)
    if not match or not match.group("prefix"):
        raise DevicePathError(f"Device path has no partition number: {path}")

    disk = match.group("prefix")
    if re.search(r"[0-9]p$", disk):
        disk = disk[:-1]

    return DiskLocation(disk=disk, index=int(match.group("index")))


class PartitionLabelMap(Mapping[str, str]):
    """
    Immutable snapshot mapping partition labels to real device paths.
    """
    def __init__(self, labels: Optional[Mapping[str, str]] = None):
        self._labels: Dict[str, str] = dict(labels or {})

    @classmethod
    def from_directory(cls, path: str = PARTLABEL_DIR) -> "PartitionLabelMap":
        """
        Build a snapshot from a directory of label symlinks.

        Args:
            path: Directory holding one symlink per partition label

        Returns:
            PartitionLabelMap of every entry, resolved to its real path
        """
        labels = {}
        if not os.path.isdir(path):
            logger.warning(f"Partition label directory not found: {path}")
            return cls(labels)

        for entry in sorted(os.listdir(path)):
            labels[entry] = os.path.realpath(os.path.join(path, entry))

        logger.debug(f"Found {len(labels)} partition labels in {path}")
        return cls(labels)

    def __getitem__(self, label: str) -> str:
        return self._labels[label]

    def __iter__(self) -> Iterator[str]:
        return iter(self._labels)

    def __len__(self) -> int:
        return len(self._labels)

    def __repr__(self) -> str:
        return f"PartitionLabelMap({self._labels!r})"


class PartitionLocator:
    """
    Resolves partition labels against a label map snapshot.
    """
    def __init__(self, label_map: PartitionLabelMap, labels_dir: str = PARTLABEL_DIR):
        """
        Initialize the locator.

        Args:
            label_map: Snapshot used for every lookup
            labels_dir: Directory used by refresh_snapshot()
        """
        self.label_map = label_map
        self.labels_dir = labels_dir

    @classmethod
    def from_directory(cls, labels_dir: str = PARTLABEL_DIR) -> "PartitionLocator":
        return cls(PartitionLabelMap.from_directory(labels_dir), labels_dir)

    def refresh_snapshot(self) -> None:
        """Rebuild the label map from the label directory"""
        self.label_map = PartitionLabelMap.from_directory(self.labels_dir)

    def resolve(self, label: str) -> DiskLocation:
        """
        Resolve a partition label to its disk and partition number.

        Args:
            label: GPT partition label, e.g. "boot_a"

        Returns:
            DiskLocation of the partition

        Raises:
            UnknownLabelError: If the label is not in the snapshot
            DevicePathError: If the device path has no partition number
        """
        try:
            path = self.label_map[label]
        except KeyError:
            raise UnknownLabelError(f"No partition labelled '{label}' in {self.labels_dir}")

        location = split_partition_device(path)
        logger.debug(f"Partition label '{label}' resolved to {path} (disk {location.disk}, partition {location.index})")
        return location
