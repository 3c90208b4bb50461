import importlib
import json
import logging
import sys
from types import ModuleType

import pytest

from devcap.backend.scanner import ScanCallError, ScanResult
from devcap.cli.parser import build_parser
from devcap.cli.render import render_projects, render_summary_line
from devcap.config import Settings, UnifiedConfigManager
from devcap.core import application
from devcap.core.models import Period
from devcap.utils.color_support import color_support

from helpers import branch, project


def reload_module(module_name: str) -> ModuleType:
    if module_name in sys.modules:
        del sys.modules[module_name]
    return importlib.import_module(module_name)


@pytest.fixture(autouse=True)
def no_color():
    previous = color_support._force_color
    color_support.set_force_color(False)
    yield
    color_support.set_force_color(previous)


def test_cli_parser_import_does_not_clear_existing_root_handlers():
    root_logger = logging.getLogger()
    sentinel_handler = logging.NullHandler()
    root_logger.addHandler(sentinel_handler)
    try:
        before_handlers = list(root_logger.handlers)
        reload_module("devcap.cli.parser")
        after_handlers = list(root_logger.handlers)
        assert after_handlers == before_handlers
    finally:
        root_logger.removeHandler(sentinel_handler)


def test_scan_arguments():
    args = build_parser().parse_args(["scan", "/code", "-p", "7d", "--badge", "commits"])
    assert args.command == "scan"
    assert args.path == "/code"
    assert args.period == "7d"
    assert args.badge == "commits"
    assert args.json is False


def test_global_flags():
    args = build_parser().parse_args(["--no-color", "-v", "config", "get", "scan.path"])
    assert args.force_color is False
    assert args.verbose is True
    assert args.config_command == "get"
    assert args.key == "scan.path"


def test_invalid_period_is_rejected():
    with pytest.raises(SystemExit):
        build_parser().parse_args(["scan", "--period", "month"])


@pytest.mark.parametrize(
    "raw, expected",
    [("300", 300), ("true", True), ('"week"', "week"), ("week", "week"), ("/srv/code", "/srv/code")],
)
def test_config_values_parse_as_toml_literals(raw, expected):
    assert application._parse_config_value(raw) == expected


def test_run_config_set_and_get(unified_manager: UnifiedConfigManager, capsys):
    parser = build_parser()
    code = application.run_config(
        parser.parse_args(["config", "set", "refresh.interval_seconds", "60"]), unified_manager
    )
    assert code == application.EXIT_OK
    assert unified_manager.get_value("refresh.interval_seconds") == 60

    application.run_config(parser.parse_args(["config", "get", "refresh.interval_seconds"]), unified_manager)
    assert capsys.readouterr().out.strip() == "60"


def test_run_config_get_unknown_key(unified_manager: UnifiedConfigManager):
    args = build_parser().parse_args(["config", "get", "scan.nothing"])
    assert application.run_config(args, unified_manager) == application.EXIT_USAGE


class _StaticBridge:
    result = ScanResult.success([project("app", [branch("main", ["c1", "c2"])], origin="github")])

    def __init__(self, library_path=None, configured_path=None):
        self.library_path = library_path or configured_path

    def scan(self, path, period, author=None):
        return self.result

    def default_author(self):
        return None


def test_run_scan_prints_json(settings: Settings, monkeypatch, capsys):
    monkeypatch.setattr(application, "FfiScannerBridge", _StaticBridge)
    args = build_parser().parse_args(["scan", "/code", "--json"])

    assert application.run_scan(args, settings) == application.EXIT_OK
    data = json.loads(capsys.readouterr().out)
    assert data[0]["project"] == "app"


def test_run_scan_prints_badge(settings: Settings, monkeypatch, capsys):
    monkeypatch.setattr(application, "FfiScannerBridge", _StaticBridge)
    args = build_parser().parse_args(["scan", "/code", "--badge", "branches"])

    application.run_scan(args, settings)
    assert capsys.readouterr().out.strip() == "1"


def test_run_scan_failure_exit_code(settings: Settings, monkeypatch):
    class FailingBridge(_StaticBridge):
        result = ScanResult.failure(ScanCallError("scanner crashed"))

    monkeypatch.setattr(application, "FfiScannerBridge", FailingBridge)
    args = build_parser().parse_args(["scan", "/code"])
    assert application.run_scan(args, settings) == application.EXIT_SCAN_FAILED


def test_render_projects_tree():
    output = render_projects(
        [project("app", [branch("main", ["c1", "c2"])], origin="github")],
        Period.TODAY,
    )
    lines = output.splitlines()
    assert lines[0].startswith("Today")
    assert "1 projects · 1 branches · 2 commits" in lines[0]
    assert "app (GitHub)  2" in output
    assert "c1 1 hour ago" in output


def test_render_empty_and_failed():
    assert "No commits found" in render_projects([], Period.WEEK)
    assert render_summary_line([], Period.WEEK, failed=True) == "This Week: scan failed"
    assert render_summary_line([], Period.TODAY).startswith("Today: 0 commits in 0 projects")
