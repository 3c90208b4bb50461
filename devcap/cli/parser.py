import argparse

from devcap.core.models import BadgeMode, Period

PERIOD_CHOICES = [period.value for period in Period] + ["7d"]
BADGE_CHOICES = [mode.value for mode in BadgeMode]


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="devcap",
        description="Summarise recent git activity across the repositories under a folder.",
        epilog=(
            "Examples:\n"
            "  devcap scan ~/Sites --period week\n"
            "  devcap scan --json > activity.json\n"
            "  devcap watch\n"
            "  devcap config set refresh.interval_seconds 0\n"
            "  devcap gui\n"
        ),
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("--config", type=str, default=None, help="Path to the configuration file")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    parser.add_argument("--log-file", type=str, default=None, help="Also write logs to this file")
    color = parser.add_mutually_exclusive_group()
    color.add_argument("--color", dest="force_color", action="store_true", default=None, help="Force coloured output")
    color.add_argument("--no-color", dest="force_color", action="store_false", help="Disable coloured output")

    commands = parser.add_subparsers(dest="command", metavar="COMMAND")

    scan = commands.add_parser("scan", help="Run one scan and print the result")
    _add_scan_arguments(scan)
    scan.add_argument("--author", type=str, default=None, help="Only count commits by this author")
    scan.add_argument("--json", action="store_true", help="Print the raw project list as JSON")
    scan.add_argument(
        "--badge",
        choices=BADGE_CHOICES,
        default=None,
        help="Print only the menubar badge value for this mode",
    )

    commands.add_parser(
        "watch",
        help="Re-scan on the configured interval and print a summary line",
    )

    config = commands.add_parser("config", help="Inspect or change configuration")
    config_commands = config.add_subparsers(dest="config_command", metavar="ACTION", required=True)
    config_commands.add_parser("show", help="Print the configuration file")
    config_commands.add_parser("path", help="Print the configuration file location")
    get = config_commands.add_parser("get", help="Print one value")
    get.add_argument("key", help="Dotted key, e.g. scan.period")
    set_ = config_commands.add_parser("set", help="Change one value")
    set_.add_argument("key", help="Dotted key, e.g. scan.period")
    set_.add_argument("value", help="TOML literal or bare string")
    config_commands.add_parser("reset", help="Restore all defaults")

    commands.add_parser("gui", help="Start the menubar application")
    return parser


def _add_scan_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("path", nargs="?", default=None, help="Folder to scan (defaults to scan.path)")
    parser.add_argument(
        "-p",
        "--period",
        choices=PERIOD_CHOICES,
        default=None,
        help="Time window (defaults to scan.period)",
    )
