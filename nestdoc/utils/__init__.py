"""
Utils module for nestdoc
"""

from .logger import logger, set_level, configure_logging

__all__ = [
    "logger",
    "set_level",
    "configure_logging",
]
