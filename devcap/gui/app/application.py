# QApplication setup and controller wiring
import asyncio
import logging
import sys
from pathlib import Path
from typing import Optional, Tuple

from PyQt6.QtWidgets import QApplication, QSystemTrayIcon
from qasync import QEventLoop

from devcap import __version__
from devcap.backend.scanner import FfiScannerBridge
from devcap.config import ConfigError, Settings, UnifiedConfigManager
from devcap.core.controller import RefreshController
from devcap.core.scheduling import ExecutorScanDispatcher, loop_timer_factory

from .logger import setup_gui_logging

logger = logging.getLogger(__name__)


def setup_application() -> Tuple[QApplication, QEventLoop]:
    """Create the Qt application and install qasync as the asyncio loop."""
    app = QApplication(sys.argv)
    app.setApplicationName("devcap")
    app.setApplicationVersion(__version__)
    # the tray icon is the only surface; closing a dialog must not quit
    app.setQuitOnLastWindowClosed(False)

    loop = QEventLoop(app)
    asyncio.set_event_loop(loop)
    app.aboutToQuit.connect(loop.stop)
    return app, loop


def run_application(config_path: Optional[str] = None) -> None:
    from devcap.gui.tray import ActivityTray

    try:
        setup_gui_logging()
        app, loop = setup_application()

        if not QSystemTrayIcon.isSystemTrayAvailable():
            logger.error("No system tray available on this desktop")
            sys.exit(1)

        manager = UnifiedConfigManager(Path(config_path) if config_path else None)
        settings = Settings(manager)
        dispatcher = ExecutorScanDispatcher(loop)
        controller = RefreshController(
            settings,
            FfiScannerBridge(configured_path=settings.scanner_library_path),
            dispatcher,
            loop_timer_factory(loop),
        )

        tray = ActivityTray(controller, settings)
        tray.show()

        def shutdown() -> None:
            controller.shutdown()
            dispatcher.shutdown()

        app.aboutToQuit.connect(shutdown)
        loop.call_soon(controller.start)

        with loop:
            loop.run_forever()
        sys.exit(0)

    except ConfigError as e:
        logger.error(f"Invalid configuration: {e}")
        sys.exit(2)
    except Exception as e:
        logger.error(f"Application failed to start: {e}", exc_info=True)
        sys.exit(1)
