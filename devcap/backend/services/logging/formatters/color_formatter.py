# devcap/backend/services/logging/formatters/color_formatter.py

import logging
from typing import Dict, Optional, Tuple

from colorama import Fore

from devcap.utils.color_support import color_support


class ColorFormatter(logging.Formatter):
    """Console formatter that colours the level name and message."""

    # level -> (colour, bright)
    LEVEL_STYLES: Dict[int, Tuple[str, bool]] = {
        logging.DEBUG: (Fore.CYAN, False),
        logging.INFO: (Fore.GREEN, False),
        logging.WARNING: (Fore.YELLOW, True),
        logging.ERROR: (Fore.RED, True),
        logging.CRITICAL: (Fore.MAGENTA, True),
    }

    DEFAULT_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
    DEFAULT_DATEFMT = "%H:%M:%S"

    def __init__(self, fmt: Optional[str] = None, datefmt: Optional[str] = None) -> None:
        super().__init__(fmt or self.DEFAULT_FORMAT, datefmt or self.DEFAULT_DATEFMT)

    def format(self, record: logging.LogRecord) -> str:
        if not color_support.supports_color():
            return super().format(record)

        orig_levelname = record.levelname
        orig_msg = record.msg
        try:
            color, bright = self.LEVEL_STYLES.get(record.levelno, ("", False))
            record.levelname = color_support.colored(orig_levelname, color, bright=bright)
            if isinstance(record.msg, str) and record.levelno >= logging.WARNING:
                record.msg = color_support.colored(record.msg, color)
            return super().format(record)
        finally:
            record.levelname = orig_levelname
            record.msg = orig_msg
