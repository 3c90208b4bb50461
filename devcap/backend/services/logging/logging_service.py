import logging
import os
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Optional

from devcap.utils.color_support import color_support

from .formatters.color_formatter import ColorFormatter

FILE_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


def default_log_file() -> Path:
    """Per-user log location used by the tray application."""
    if sys.platform == "darwin":
        return Path.home() / "Library" / "Logs" / "devcap" / "devcap.log"
    if os.name == "nt":
        base = os.environ.get("LOCALAPPDATA") or str(Path.home() / "AppData" / "Local")
        return Path(base) / "devcap" / "logs" / "devcap.log"
    state = os.environ.get("XDG_STATE_HOME") or str(Path.home() / ".local" / "state")
    return Path(state) / "devcap" / "devcap.log"


def setup_logging(
    verbose: bool = False,
    log_file: Optional[str] = None,
    console_level: Optional[int] = None,
    max_bytes: int = 5 * 1024 * 1024,
    backup_count: int = 3,
    force_color: Optional[bool] = None,
    preserve_existing_handlers: bool = False,
) -> None:
    """Configure the root logger.

    Args:
        verbose: Log DEBUG records instead of INFO.
        log_file: Optional path of a rotating log file.
        console_level: Minimum level for the console handler; defaults to the
            root level.
        max_bytes: Size at which the log file rotates.
        backup_count: Rotated files to keep.
        force_color: ``True``/``False`` forces colours on/off, ``None`` detects.
        preserve_existing_handlers: Keep handlers that are already installed
            and reuse an existing stdout/stderr handler as the console handler.
    """
    color_support.set_force_color(force_color)

    root_logger = logging.getLogger()
    root_logger.setLevel(logging.DEBUG if verbose else logging.INFO)

    if not preserve_existing_handlers:
        for handler in list(root_logger.handlers):
            root_logger.removeHandler(handler)
            handler.close()

    console_handler: Optional[logging.Handler] = None
    if preserve_existing_handlers:
        for handler in root_logger.handlers:
            if isinstance(handler, logging.StreamHandler) and getattr(handler, "stream", None) in (sys.stdout, sys.stderr):
                console_handler = handler
                break

    if console_handler is None:
        console_handler = logging.StreamHandler(sys.stderr)
        console_handler.setFormatter(ColorFormatter())
        root_logger.addHandler(console_handler)
    if console_level is not None:
        console_handler.setLevel(console_level)

    if log_file:
        try:
            log_path = Path(log_file).expanduser()
            log_path.parent.mkdir(parents=True, exist_ok=True)
            file_handler = RotatingFileHandler(
                log_path, maxBytes=max_bytes, backupCount=backup_count, encoding="utf-8"
            )
            file_handler.setFormatter(logging.Formatter(FILE_FORMAT, datefmt="%Y-%m-%d %H:%M:%S"))
            root_logger.addHandler(file_handler)
            logging.debug("Log file initialized: %s", log_path)
        except OSError as exc:
            logging.error(color_support.error(f"Failed to initialize log file: {exc}"))

    logging.debug(
        "Color support: %s (%s)",
        color_support.supports_color(),
        "forced" if force_color is not None else "auto",
    )
