import logging

from devcap.backend.services.logging.logging_service import default_log_file, setup_logging


def setup_gui_logging(verbose: bool = False) -> None:
    """Log everything to the per-user log file, only warnings to the console."""
    setup_logging(
        verbose=verbose,
        log_file=str(default_log_file()),
        console_level=logging.WARNING,
    )
