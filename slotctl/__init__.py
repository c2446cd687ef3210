"""
slotctl - A/B boot slot control for Qualcomm GPT devices

This package inspects the boot slot state that the Qualcomm bootloader keeps
in the GPT attribute flags of the booted partition, and can mark the running
slot as successfully booted.
"""

__version__ = "0.1.0"
