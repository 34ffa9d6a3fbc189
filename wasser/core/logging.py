"""
logging.py - logger setup
"""

import logging
from typing import Union

from rich.console import Console
from rich.logging import RichHandler


def setup_logger(name: str = "wasser", level: Union[int, str] = logging.INFO) -> logging.Logger:
    """Rich formatted logger

    `level` may be a logging constant or a name such as "DEBUG"
    (the form LOG_LEVEL arrives in from the environment).
    """
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            level = logging.INFO

    logger = logging.getLogger(name)
    logger.setLevel(level)

    if not any(isinstance(h, RichHandler) for h in logger.handlers):
        # stdout is reserved for command output
        handler = RichHandler(console=Console(stderr=True), rich_tracebacks=True, show_path=False)
        handler.setFormatter(logging.Formatter("%(message)s"))
        logger.addHandler(handler)

    return logger
