"""
Qualcomm A/B boot slot attribute decoding.

The Qualcomm bootloader keeps the A/B state of each boot partition in the
second most significant byte of its GPT attribute flags (bits 48 to 55):

    00000000 01110111 00000000 00000000 00000000 00000000 00000000 00000000
             ^^^^^^^^

From the most significant bit of that byte down:

    - 1 bit:  unbootable flag (bit 55)
    - 1 bit:  successful flag (bit 54)
    - 3 bits: tries remaining (bits 51, 52, 53)
    - 1 bit:  active flag     (bit 50)
    - 2 bits: unknown         (bits 48, 49)

In the example above the slot is active, marked successful, and has 6 tries
left before the bootloader marks it unbootable.

References:
    - https://github.com/LineageOS/android_hardware_qcom_bootctrl/blob/69f2d8d08699fdec49605c6b95fc06163952b6fa/boot_control.cpp#L212-L227
    - https://github.com/LineageOS/android_device_google_bonito/blob/4f1b691694a1788941cad03dba95102d93437654/gpt-utils/gpt-utils.h#L65-L88
"""
import logging
from typing import Union

from slotctl.utils.bitfield import Bitfield
from slotctl.utils.types import BootSlotAttributes

logger = logging.getLogger('slotctl')

# Position and width of the private byte in the 64-bit attribute field
ATTRIBUTE_FLAGS_START = 48
ATTRIBUTE_FLAGS_WIDTH = 8

# Masks within the private byte
AB_PARTITION_ATTR_SLOT_ACTIVE = 0x1 << 2
AB_PARTITION_ATTR_BOOT_SUCCESSFUL = 0x1 << 6
AB_PARTITION_ATTR_UNBOOTABLE = 0x1 << 7
AB_PARTITION_ATTR_TRIES_SHIFT = 3
AB_PARTITION_ATTR_TRIES_WIDTH = 3
AB_PARTITION_ATTR_TRIES_MASK = ((0x1 << AB_PARTITION_ATTR_TRIES_WIDTH) - 1) << AB_PARTITION_ATTR_TRIES_SHIFT

MAX_TRIES = (0x1 << AB_PARTITION_ATTR_TRIES_WIDTH) - 1

# Positions in the full attribute field
BOOT_SUCCESSFUL_BIT = ATTRIBUTE_FLAGS_START + AB_PARTITION_ATTR_BOOT_SUCCESSFUL.bit_length() - 1


def private_bits(attributes: Union[Bitfield, int]) -> Bitfield:
    """
    Extract the bootloader private byte from a partition attribute field.
    
    Args:
        attributes: 64-bit attribute flags, as a Bitfield or an integer
        
    Returns:
        8-bit Bitfield holding bits 48 to 55 of the attribute field
    """
    value = int(attributes)
    byte = (value >> ATTRIBUTE_FLAGS_START) % (0x1 << ATTRIBUTE_FLAGS_WIDTH)
    return Bitfield(byte, width=ATTRIBUTE_FLAGS_WIDTH)


def _flag(byte: int, mask: int) -> bool:
    return byte & mask == mask


def decode_slot_attributes(attributes: Union[Bitfield, int]) -> BootSlotAttributes:
    """
    Decode the A/B boot state of a partition.
    
    Args:
        attributes: 64-bit attribute flags, as a Bitfield or an integer
        
    Returns:
        BootSlotAttributes derived from the private byte
    """
    byte = private_bits(attributes).to_integer()
    state = BootSlotAttributes(
        active=_flag(byte, AB_PARTITION_ATTR_SLOT_ACTIVE),
        successful=_flag(byte, AB_PARTITION_ATTR_BOOT_SUCCESSFUL),
        unbootable=_flag(byte, AB_PARTITION_ATTR_UNBOOTABLE),
        tries_remaining=(byte & AB_PARTITION_ATTR_TRIES_MASK) >> AB_PARTITION_ATTR_TRIES_SHIFT,
        private_byte=byte,
    )
    logger.debug(f"Private attribute byte {byte:#04x} decoded to {state}")
    return state
