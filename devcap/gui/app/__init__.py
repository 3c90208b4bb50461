from .application import run_application, setup_application

__all__ = ["run_application", "setup_application"]
