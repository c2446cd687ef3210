"""Tests for resolving partition labels to disk devices."""

import os
from pathlib import Path

import pytest

from slotctl.core.exceptions import DevicePathError, ResolutionError, UnknownLabelError
from slotctl.core.locator import PartitionLabelMap, PartitionLocator, split_partition_device


class TestSplitPartitionDevice:
    """Verify where the disk name ends and the partition number begins."""

    def test_mmc_device(self) -> None:
        """The p separator after a digit belongs to neither part."""
        location = split_partition_device("/dev/mmcblk0p7")
        assert location.disk == "/dev/mmcblk0"
        assert location.index == 7

    def test_multi_digit_partition(self) -> None:
        """All trailing digits form the partition number."""
        assert split_partition_device("/dev/mmcblk0p12") == ("/dev/mmcblk0", 12)

    def test_nvme_device(self) -> None:
        """NVMe namespaces keep their digits in the disk name."""
        assert split_partition_device("/dev/nvme0n1p3") == ("/dev/nvme0n1", 3)

    def test_scsi_device(self) -> None:
        """Disks whose name ends in a letter have no separator."""
        assert split_partition_device("/dev/sda12") == ("/dev/sda", 12)
        assert split_partition_device("/dev/sdp2") == ("/dev/sdp", 2)

    @pytest.mark.parametrize("path", ["/dev/mmcblk0p", "/dev/sda", "12"])
    def test_path_without_number_fails(self, path: str) -> None:
        """Paths not ending in a partition number cannot be split."""
        with pytest.raises(DevicePathError):
            split_partition_device(path)


class TestPartitionLabelMap:
    """Verify the label snapshot."""

    def test_from_directory_resolves_symlinks(self, tmp_path: Path) -> None:
        """Each symlink is recorded under its name with its real path."""
        devices = tmp_path / "dev"
        labels = tmp_path / "by-partlabel"
        devices.mkdir()
        labels.mkdir()
        (devices / "mmcblk0p7").touch()
        (devices / "mmcblk0p8").touch()
        os.symlink("../dev/mmcblk0p7", labels / "boot_a")
        os.symlink(str(devices / "mmcblk0p8"), labels / "boot_b")

        label_map = PartitionLabelMap.from_directory(str(labels))
        assert len(label_map) == 2
        assert label_map["boot_a"] == os.path.realpath(devices / "mmcblk0p7")
        assert label_map["boot_b"] == os.path.realpath(devices / "mmcblk0p8")

    def test_missing_directory_is_empty(self, tmp_path: Path) -> None:
        """A device without label links yields an empty snapshot."""
        assert len(PartitionLabelMap.from_directory(str(tmp_path / "absent"))) == 0

    def test_snapshot_is_a_copy(self) -> None:
        """Later changes to the source mapping are not observed."""
        source = {"boot_a": "/dev/sda1"}
        label_map = PartitionLabelMap(source)
        source["boot_b"] = "/dev/sda2"
        assert "boot_b" not in label_map


class TestPartitionLocator:
    """Verify label resolution and snapshot refresh."""

    def test_resolve_label(self) -> None:
        """A known label resolves to disk and partition number."""
        locator = PartitionLocator(PartitionLabelMap({"boot_b": "/dev/mmcblk0p12"}))
        assert locator.resolve("boot_b") == ("/dev/mmcblk0", 12)

    def test_unknown_label_fails(self) -> None:
        """Labels absent from the snapshot raise a resolution error."""
        locator = PartitionLocator(PartitionLabelMap({}))
        with pytest.raises(UnknownLabelError):
            locator.resolve("boot_a")
        assert issubclass(UnknownLabelError, ResolutionError)

    def test_snapshot_is_not_refreshed_implicitly(self, tmp_path: Path) -> None:
        """New labels appear only after refresh_snapshot()."""
        (tmp_path / "sda1").touch()
        labels = tmp_path / "labels"
        labels.mkdir()
        locator = PartitionLocator.from_directory(str(labels))

        os.symlink(str(tmp_path / "sda1"), labels / "boot_a")
        with pytest.raises(UnknownLabelError):
            locator.resolve("boot_a")

        locator.refresh_snapshot()
        assert locator.resolve("boot_a") == (os.path.realpath(tmp_path / "sda"), 1)
