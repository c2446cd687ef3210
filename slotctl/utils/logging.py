"""
Logging configuration utilities.

This module provides functions for setting up and configuring logging.
Log records go to stderr so the slot report on stdout stays readable.
"""
import logging
import sys

DEFAULT_FORMAT = '%(levelname)s: %(message)s'
DEBUG_FORMAT = '%(asctime)s - %(levelname)s - %(message)s'


def setup_logging(debug: bool = False) -> None:
    """
    Configure logging for the application.
    
    Args:
        debug: Whether to enable debug logging (adds timestamps and command traces)
    """
    level = logging.DEBUG if debug else logging.INFO
    
    logging.basicConfig(
        level=level,
        stream=sys.stderr,
        format=DEBUG_FORMAT if debug else DEFAULT_FORMAT,
        datefmt='%Y-%m-%d %H:%M:%S'
    )
    
    logger = logging.getLogger('slotctl')
    logger.setLevel(level)
