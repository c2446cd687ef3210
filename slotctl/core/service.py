"""
Boot control for the booted A/B slot.

This module ties the slot resolver, the label locator and the partition
attribute gateway together. Only the booted slot can be inspected or marked;
the other slot is out of reach.
"""
import logging

from slotctl.utils.types import BootSlotAttributes, DiskLocation, MarkSuccessfulResult, PartitionInfo
from slotctl.core.bootparams import ActiveSlotResolver, BOOT_LABEL_PREFIX
from slotctl.core.gpt import SgdiskGateway
from slotctl.core.locator import PartitionLocator
from slotctl.core.slot import BOOT_SUCCESSFUL_BIT, decode_slot_attributes

logger = logging.getLogger('slotctl')


class BootControlService:
    """
    Qualcomm GPT boot control for the booted slot.
    """
    def __init__(
        self,
        gateway: SgdiskGateway,
        locator: PartitionLocator,
        slot_resolver: ActiveSlotResolver,
        label_prefix: str = BOOT_LABEL_PREFIX
    ):
        """
        Initialize the service.

        Args:
            gateway: Reads and changes partition attributes
            locator: Resolves partition labels to disk and partition number
            slot_resolver: Provides the booted slot suffix
            label_prefix: Label of the boot partition without its slot suffix
        """
        self.gateway = gateway
        self.locator = locator
        self.slot_resolver = slot_resolver
        self.label_prefix = label_prefix

    def active_partition(self) -> DiskLocation:
        """Locate the boot partition of the booted slot"""
        return self.locator.resolve(self.slot_resolver.boot_label(self.label_prefix))

    def partition_info(self) -> PartitionInfo:
        location = self.active_partition()
        return self.gateway.read(location.disk, location.index)

    def current_state(self) -> BootSlotAttributes:
        """
        Read and decode the A/B state of the booted slot.

        Returns:
            BootSlotAttributes of the booted boot partition
        """
        info = self.partition_info()
        logger.debug(f"Attribute flags of '{info.name}': {info.attributes}")
        return decode_slot_attributes(info.attributes)

    def mark_successful(self) -> MarkSuccessfulResult:
        """
        Set the successful flag of the booted slot if it is not set yet.
        The flag is never cleared; tries and the active flag belong to the bootloader.

        Returns:
            MarkSuccessfulResult with the state before and after the request
        """
        location = self.active_partition()
        before = decode_slot_attributes(self.gateway.read(location.disk, location.index).attributes)
        if before.successful:
            logger.info("Slot already marked successful")
            return MarkSuccessfulResult(changed=False, before=before, after=before)

        logger.info(f"Setting attribute bit {BOOT_SUCCESSFUL_BIT} on {location.disk} partition {location.index}")
        self.gateway.set_attribute_bit(location.disk, location.index, BOOT_SUCCESSFUL_BIT)

        after = decode_slot_attributes(self.gateway.read(location.disk, location.index).attributes)
        if not after.successful and not self.gateway.cmd_runner.simulating:
            logger.warning("Successful flag still unset after sgdisk reported success")

        return MarkSuccessfulResult(changed=True, before=before, after=after)
