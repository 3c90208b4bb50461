from .logging_service import default_log_file, setup_logging

__all__ = ["default_log_file", "setup_logging"]
