"""
GPT partition attribute access through sgdisk.

This module reads partition information with sgdisk in pretend mode and
requests attribute bit changes on the booted partition.
"""
import logging
import re
import subprocess
from typing import Dict, Optional

from slotctl.utils.bitfield import Bitfield
from slotctl.utils.command import CommandRunner
from slotctl.utils.format import describe_partition
from slotctl.utils.types import PartitionInfo
from slotctl.core.exceptions import ParseError, StanzaError, BitRangeError

logger = logging.getLogger('slotctl')

# Constants
SGDISK = "sgdisk"
ATTRIBUTE_FIELD_WIDTH = 64

# sgdisk frames warnings (e.g. about a protective MBR) with lines of asterisks
BANNER_SEPARATOR = re.compile(r"\*+\n")
FIELD_SEPARATOR = re.compile(r":\s+")

# Keys of the sgdisk --info report
KEY_TYPE_GUID = "Partition GUID code"
KEY_UNIQUE_GUID = "Partition unique GUID"
KEY_FIRST_SECTOR = "First sector"
KEY_LAST_SECTOR = "Last sector"
KEY_SIZE = "Partition size"
KEY_ATTRIBUTES = "Attribute flags"
KEY_NAME = "Partition name"


def parse_report_fields(report: str) -> Dict[str, str]:
    """
    Split an sgdisk --info report into key/value pairs.

    Args:
        report: Standard output of sgdisk --info

    Returns:
        Dict mapping field names to their raw values
    """
    block = BANNER_SEPARATOR.split(report)[-1]
    fields = {}
    for line in block.splitlines():
        parts = FIELD_SEPARATOR.split(line.strip(), maxsplit=1)
        if len(parts) == 2:
            fields[parts[0]] = parts[1]
    return fields


def _first_token(fields: Dict[str, str], key: str) -> str:
    value = fields.get(key)
    if value is None or not value.split():
        raise ParseError(f"Missing '{key}' in partition report")
    return value.split()[0]


def _sector_count(fields: Dict[str, str], key: str) -> int:
    token = _first_token(fields, key)
    if not re.fullmatch(r"[0-9]+", token):
        raise ParseError(f"Invalid value for '{key}': {fields[key]}")
    return int(token)


def parse_partition_info(report: str) -> PartitionInfo:
    """
    Build a PartitionInfo from an sgdisk --info report.

    Example report:

        Partition GUID code: 77036CD4-03D5-42BB-8ED1-37E5A88BAA34 (Unknown)
        Partition unique GUID: 326AD371-C287-2DC5-FFA8-CD86CEC4BF5D
        First sector: 54150 (at 211.5 MiB)
        Last sector: 70533 (at 275.5 MiB)
        Partition size: 16384 sectors (64.0 MiB)
        Attribute flags: 003B000000000000
        Partition name: 'boot_a'

    Args:
        report: Standard output of sgdisk --info

    Returns:
        PartitionInfo for the reported partition

    Raises:
        ParseError: If a required field is missing or malformed
    """
    fields = parse_report_fields(report)

    raw_attributes = _first_token(fields, KEY_ATTRIBUTES)
    try:
        attributes = int(raw_attributes, 16)
    except ValueError:
        raise ParseError(f"Attribute flags are not hexadecimal: {raw_attributes}")
    if attributes < 0 or attributes >= 1 << ATTRIBUTE_FIELD_WIDTH:
        raise ParseError(f"Attribute flags do not fit in {ATTRIBUTE_FIELD_WIDTH} bits: {raw_attributes}")

    first_sector = _sector_count(fields, KEY_FIRST_SECTOR)
    last_sector = _sector_count(fields, KEY_LAST_SECTOR)
    if first_sector > last_sector:
        raise ParseError(f"First sector {first_sector} is after last sector {last_sector}")

    if KEY_NAME not in fields:
        raise ParseError(f"Missing '{KEY_NAME}' in partition report")
    name = re.sub(r"^'|'$", "", fields[KEY_NAME])

    return PartitionInfo(
        guid=_first_token(fields, KEY_TYPE_GUID),
        uuid=_first_token(fields, KEY_UNIQUE_GUID),
        first_sector=first_sector,
        last_sector=last_sector,
        size_sectors=_sector_count(fields, KEY_SIZE),
        attributes=Bitfield(attributes, width=ATTRIBUTE_FIELD_WIDTH),
        name=name,
    )


class SgdiskGateway:
    """
    Partition attribute gateway backed by the sgdisk command.
    """
    def __init__(self, cmd_runner: CommandRunner, sgdisk: Optional[str] = None):
        """
        Initialize the gateway.

        Args:
            cmd_runner: CommandRunner instance for executing commands
            sgdisk: sgdisk executable to invoke
        """
        self.cmd_runner = cmd_runner
        self.sgdisk = sgdisk or SGDISK

    def read(self, disk: str, index: int) -> PartitionInfo:
        """
        Query a partition without modifying the disk.

        Errors from sgdisk are not reported here: stderr is discarded and a
        failed query yields an empty report, which then fails to parse.

        Args:
            disk: Path to the disk device
            index: Partition number

        Returns:
            PartitionInfo of the partition

        Raises:
            ParseError: If the report cannot be parsed
            CommandError: If sgdisk cannot be started
        """
        result = self.cmd_runner.run_real(
            [self.sgdisk, "--pretend", disk, "--info", str(index)],
            check=False,
            stdout=subprocess.PIPE,
            stderr=subprocess.DEVNULL,
        )
        if result.returncode != 0:
            logger.debug(f"sgdisk --info returned {result.returncode} for {disk} partition {index}")

        info = parse_partition_info(result.stdout or "")
        logger.debug(f"Partition {index} on {disk}: {describe_partition(info)}")
        return info

    def apply_attribute_stanza(self, disk: str, index: int, stanza: str) -> None:
        """
        Apply an sgdisk attribute stanza (e.g. "set:54") to a partition.

        Args:
            disk: Path to the disk device
            index: Partition number
            stanza: Attribute operation understood by sgdisk --attributes

        Raises:
            StanzaError: If the stanza contains whitespace
            CommandError: If sgdisk fails
        """
        if re.search(r"\s", stanza):
            raise StanzaError(f"Stanza is probably bad: {stanza!r}")

        self.cmd_runner.run([self.sgdisk, f"--attributes={index}:{stanza}", disk])

    def set_attribute_bit(self, disk: str, index: int, bit_index: int) -> None:
        """
        Set one bit of a partition's attribute flags. There is no clear counterpart.

        Args:
            disk: Path to the disk device
            index: Partition number
            bit_index: Bit to set, 0 being the least significant bit

        Raises:
            BitRangeError: If bit_index is outside the attribute field
            CommandError: If sgdisk fails
        """
        if bit_index < 0 or bit_index >= ATTRIBUTE_FIELD_WIDTH:
            raise BitRangeError(f"Bit {bit_index} reaches outside the width of {ATTRIBUTE_FIELD_WIDTH} bits.")

        logger.debug(f"Setting attribute bit {bit_index} of partition {index} on {disk}")
        self.apply_attribute_stanza(disk, index, f"set:{bit_index}")
