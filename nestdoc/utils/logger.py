"""
Logging setup

nestdoc logs through stdlib logging (module loggers under "nestdoc") and
renders records with rich.
"""

import logging
from typing import Union

from rich.console import Console
from rich.logging import RichHandler

logger = logging.getLogger("nestdoc")

_console = Console(stderr=True)


def configure_logging(level: Union[int, str] = logging.INFO) -> None:
    """
    Install a RichHandler on the root logger
    
    Does nothing when the root logger already has handlers (an application
    or test runner configured logging first).
    """
    logging.basicConfig(
        level=level,
        format="%(message)s",
        handlers=[RichHandler(
            console=_console,
            rich_tracebacks=True,
            show_time=True,
            show_path=False
        )]
    )


def set_level(level: Union[int, str]) -> None:
    """
    Set the verbosity of every nestdoc logger
    
    Args:
        level: logging level or its name ("DEBUG", "WARNING", ...)
    """
    if isinstance(level, str):
        level = level.upper()
    logger.setLevel(level)
