"""
Validation utilities.

This module provides functions for validating prerequisites before touching
the partition table.
"""
import os
import shutil
import logging

from slotctl.utils.command import CommandRunner

logger = logging.getLogger('slotctl')


def check_prerequisites(cmd_runner: CommandRunner, sgdisk: str, labels_dir: str) -> None:
    """
    Check for required tools, paths and permissions.

    Args:
        cmd_runner: CommandRunner instance for executing commands
        sgdisk: sgdisk executable that will be invoked
        labels_dir: Directory of partition label symlinks

    Raises:
        RuntimeError: If prerequisites are not met
    """
    # sgdisk needs raw disk access even for --pretend queries
    if os.geteuid() != 0:
        if cmd_runner.simulating:
            logger.warning("Not running as root, reading partition attributes will likely fail")
        else:
            raise RuntimeError("This script must be run as root")

    if not shutil.which(sgdisk):
        raise RuntimeError(
            f"Missing required tool: {sgdisk}\n"
            "Please install gdisk (gptfdisk) for your distribution and try again"
        )

    if not os.path.isdir(labels_dir):
        raise RuntimeError(
            f"Partition label directory not found: {labels_dir}\n"
            "Is this a GPT device with udev partition label links?"
        )
