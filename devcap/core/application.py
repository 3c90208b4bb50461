import asyncio
import logging
import sys
from pathlib import Path
from typing import Any, List, Optional

from devcap.backend.scanner import FfiScannerBridge, encode_projects
from devcap.backend.services.logging.logging_service import setup_logging
from devcap.cli.parser import build_parser
from devcap.cli.render import render_projects, render_summary_line
from devcap.config import ConfigError, Settings, UnifiedConfigManager, default_scan_path
from devcap.config.toml_io import TOMLDecodeError, dumps, format_value, loads
from devcap.core import aggregation
from devcap.core.controller import ControllerSnapshot, RefreshController
from devcap.core.models import BadgeMode, Period
from devcap.core.scheduling import ExecutorScanDispatcher, loop_timer_factory
from devcap.utils.color_support import color_support

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_SCAN_FAILED = 1
EXIT_USAGE = 2


def _parse_config_value(raw: str) -> Any:
    """Interpret ``raw`` as a TOML literal, falling back to a plain string."""
    try:
        return loads(f"value = {raw}")["value"]
    except TOMLDecodeError:
        return raw


def run_scan(args, settings: Settings) -> int:
    path = args.path or settings.scan_path or default_scan_path()
    period = Period.parse(args.period) if args.period else settings.period
    bridge = FfiScannerBridge(configured_path=settings.scanner_library_path)
    author = args.author or None

    logger.info("Scanning %s (%s)", path, period.value)
    result = bridge.scan(str(Path(path).expanduser()), period, author)
    if not result.ok:
        logging.error(color_support.error(f"Scan failed: {result.error}"))
        return EXIT_SCAN_FAILED

    if args.json:
        print(encode_projects(result.projects, indent=2))
    elif args.badge is not None:
        mode = BadgeMode(args.badge)
        print(aggregation.format_badge(aggregation.badge_value(result.projects, mode)))
    else:
        print(
            render_projects(
                result.projects,
                period,
                show_diff_stats=settings.show_diff_stats,
                colored_commit_types=settings.colored_commit_types,
                show_origin=settings.show_origin_icons,
            )
        )
    return EXIT_OK


async def _watch(settings: Settings) -> None:
    loop = asyncio.get_running_loop()
    dispatcher = ExecutorScanDispatcher(loop)
    controller = RefreshController(
        settings,
        FfiScannerBridge(configured_path=settings.scanner_library_path),
        dispatcher,
        loop_timer_factory(loop),
    )
    last_printed = None

    def print_summary(snapshot: ControllerSnapshot) -> None:
        nonlocal last_printed
        if snapshot.is_loading or snapshot.last_refresh_at in (None, last_printed):
            return
        last_printed = snapshot.last_refresh_at
        stamp = snapshot.last_refresh_at.strftime("%H:%M:%S")
        print(
            f"[{stamp}] "
            + render_summary_line(snapshot.projects, snapshot.period, failed=snapshot.scan_failed),
            flush=True,
        )

    controller.subscribe(print_summary)
    controller.start()
    if not controller.auto_refresh_active:
        logger.warning("Auto-refresh is disabled; set refresh.interval_seconds to keep watching")
    try:
        await asyncio.Event().wait()
    finally:
        controller.shutdown()
        dispatcher.shutdown()


def run_watch(settings: Settings) -> int:
    try:
        asyncio.run(_watch(settings))
    except KeyboardInterrupt:
        logging.warning("Watch interrupted by user (CTRL+C).")
    return EXIT_OK


def run_config(args, manager: UnifiedConfigManager) -> int:
    action = args.config_command
    if action == "path":
        print(manager.config_path)
    elif action == "show":
        print(dumps(manager.get_raw_config()), end="")
    elif action == "get":
        value = manager.get_value(args.key)
        if value is None:
            logging.error("Unknown configuration key: %s", args.key)
            return EXIT_USAGE
        print(value if isinstance(value, str) else format_value(value))
    elif action == "set":
        manager.set_value(args.key, _parse_config_value(args.value))
        logger.info("Set %s in %s", args.key, manager.config_path)
    elif action == "reset":
        manager.reset_to_defaults()
        logger.info("Configuration reset to defaults")
    return EXIT_OK


def run(argv: Optional[List[str]] = None) -> None:
    parser = build_parser()
    args = parser.parse_args(argv)

    setup_logging(
        verbose=args.verbose,
        log_file=args.log_file,
        console_level=logging.DEBUG if args.verbose else logging.WARNING,
        force_color=args.force_color,
    )

    if args.command is None:
        parser.print_help()
        sys.exit(EXIT_USAGE)

    if args.command == "gui":
        from devcap.gui.main import main as gui_main

        gui_main(config_path=args.config)
        return

    try:
        manager = UnifiedConfigManager(Path(args.config) if args.config else None)
        settings = Settings(manager)
        if args.command == "scan":
            code = run_scan(args, settings)
        elif args.command == "watch":
            code = run_watch(settings)
        else:
            code = run_config(args, manager)
    except ConfigError as exc:
        logging.error(color_support.error(f"Configuration error: {exc}"))
        code = EXIT_USAGE
    sys.exit(code)
