#!/usr/bin/env python3
from typing import Optional

from .app.application import run_application


def main(config_path: Optional[str] = None) -> None:
    """Menubar application entry point."""
    run_application(config_path)


if __name__ == "__main__":
    main()
