from __future__ import annotations

import logging
from pathlib import Path

import pytest

from devcap.config import ConfigIOError, ConfigValidationError, Settings, UnifiedConfigManager
from devcap.config.toml_io import dumps, loads
from devcap.core.models import BadgeMode, Period


def test_default_file_is_created(unified_manager: UnifiedConfigManager) -> None:
    assert unified_manager.config_path.exists()
    assert unified_manager.get_value("scan.period") == "today"
    assert unified_manager.get_value("refresh.interval_seconds") == 900
    assert unified_manager.get_value("menubar.badge_mode") == "none"


def test_unified_manager_roundtrip(unified_manager: UnifiedConfigManager) -> None:
    unified_manager.set_value("scan.path", "/tmp/projects")
    unified_manager.set_value("refresh.interval_seconds", 300)
    unified_manager.reload()

    assert unified_manager.get_value("scan.path") == "/tmp/projects"
    assert unified_manager.get_value("refresh.interval_seconds") == 300

    on_disk = loads(unified_manager.config_path.read_text(encoding="utf-8"))
    assert on_disk["scan"]["path"] == "/tmp/projects"


def test_invalid_value_is_rejected_and_not_written(
    unified_manager: UnifiedConfigManager,
) -> None:
    before = unified_manager.config_path.read_text(encoding="utf-8")

    with pytest.raises(ConfigValidationError):
        unified_manager.set_value("scan.period", "fortnight")
    with pytest.raises(ConfigValidationError):
        unified_manager.set_value("refresh.interval_seconds", -5)

    assert unified_manager.get_value("scan.period") == "today"
    assert unified_manager.config_path.read_text(encoding="utf-8") == before


def test_unknown_key_returns_default(unified_manager: UnifiedConfigManager) -> None:
    assert unified_manager.get_value("scan.missing") is None
    assert unified_manager.get_value("scan.missing", "fallback") == "fallback"


def test_set_none_removes_key(unified_manager: UnifiedConfigManager) -> None:
    unified_manager.set_value("scanner.library_path", "/opt/lib/libdevcap_ffi.so")
    unified_manager.set_value("scanner.library_path", None)
    assert unified_manager.get_value("scanner.library_path") is None


def test_batch_updates_reduce_notifications(
    unified_manager: UnifiedConfigManager,
) -> None:
    events = 0

    def listener() -> None:
        nonlocal events
        events += 1

    unified_manager.add_change_listener(listener)

    unified_manager.set_values_batch(
        {
            "scan.period": "week",
            "menubar.badge_mode": "commits",
            "appearance.show_diff_stats": False,
        }
    )
    assert events == 1

    with unified_manager.batch_update():
        unified_manager.set_value("scan.period", "yesterday")
        unified_manager.set_value("menubar.badge_mode", "projects")
    assert events == 2

    unified_manager.set_values_batch({"scan.period": "today"}, notify=False)
    assert events == 2


def test_unchanged_value_does_not_notify(unified_manager: UnifiedConfigManager) -> None:
    events = []

    def listener() -> None:
        events.append(True)

    unified_manager.add_change_listener(listener)
    unified_manager.set_value("scan.period", "today")
    assert events == []


def test_removed_listener_is_not_called(unified_manager: UnifiedConfigManager) -> None:
    events = []

    def listener() -> None:
        events.append(True)

    unified_manager.add_change_listener(listener)
    unified_manager.remove_change_listener(listener)
    unified_manager.set_value("scan.period", "week")
    assert events == []


def test_corrupt_file_is_backed_up_and_replaced(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    config_file = tmp_path / "broken" / "config.toml"
    config_file.parent.mkdir(parents=True)
    config_file.write_text("[scan\npath = ", encoding="utf-8")

    UnifiedConfigManager._instance = None  # type: ignore[attr-defined]
    manager = UnifiedConfigManager(config_file)
    try:
        assert manager.get_value("scan.period") == "today"
        backups = list(config_file.parent.glob("config.toml.corrupt.*.bak"))
        assert len(backups) == 1
        assert loads(config_file.read_text(encoding="utf-8"))["scan"]["period"] == "today"
    finally:
        manager.cleanup()


def test_partial_file_is_merged_with_defaults(tmp_path: Path) -> None:
    config_file = tmp_path / "partial.toml"
    config_file.write_text('[scan]\npath = "/srv/code"\nperiod = "7d"\n', encoding="utf-8")

    UnifiedConfigManager._instance = None  # type: ignore[attr-defined]
    manager = UnifiedConfigManager(config_file)
    try:
        assert manager.get_value("scan.path") == "/srv/code"
        assert manager.get_value("scan.period") == "7d"
        assert manager.get_value("menubar.badge_mode") == "none"
    finally:
        manager.cleanup()


def test_reset_to_defaults(unified_manager: UnifiedConfigManager) -> None:
    unified_manager.set_value("menubar.badge_mode", "branches")
    unified_manager.reset_to_defaults()
    assert unified_manager.get_value("menubar.badge_mode") == "none"


def test_dumps_skips_none_and_nests_tables() -> None:
    rendered = dumps({"a": 1, "b": None, "t": {"s": "x\"y", "flag": True}})
    assert "b =" not in rendered
    assert loads(rendered) == {"a": 1, "t": {"s": 'x"y', "flag": True}}


def test_invalid_stored_values_fall_back_to_defaults(
    tmp_path: Path, caplog: pytest.LogCaptureFixture
) -> None:
    config_file = tmp_path / "hand_edited.toml"
    original = (
        '[scan]\npath = "/srv/code"\nperiod = "month"\n\n'
        "[refresh]\ninterval_seconds = -30\n\n"
        '[menubar]\nbadge_mode = "everything"\n'
    )
    config_file.write_text(original, encoding="utf-8")

    UnifiedConfigManager._instance = None  # type: ignore[attr-defined]
    with caplog.at_level(logging.WARNING):
        manager = UnifiedConfigManager(config_file)
    try:
        settings = Settings(manager)
        assert settings.period is Period.TODAY
        assert settings.refresh_interval_seconds == 900
        assert settings.badge_mode is BadgeMode.NONE
        assert settings.scan_path == "/srv/code"
        for key in ("scan.period", "refresh.interval_seconds", "menubar.badge_mode"):
            assert key in caplog.text
        assert config_file.read_text(encoding="utf-8") == original

        manager.set_value("scan.period", "week")
        assert loads(config_file.read_text(encoding="utf-8"))["scan"]["period"] == "week"
    finally:
        manager.cleanup()


def test_invalid_table_is_replaced_by_defaults(tmp_path: Path) -> None:
    config_file = tmp_path / "flat.toml"
    config_file.write_text('menubar = "commits"\n', encoding="utf-8")

    UnifiedConfigManager._instance = None  # type: ignore[attr-defined]
    manager = UnifiedConfigManager(config_file)
    try:
        assert manager.get_value("menubar.badge_mode") == "none"
    finally:
        manager.cleanup()


def test_failed_write_keeps_previous_value(
    unified_manager: UnifiedConfigManager, monkeypatch: pytest.MonkeyPatch
) -> None:
    events = []

    def listener() -> None:
        events.append(True)

    unified_manager.add_change_listener(listener)

    def refuse(data):
        raise ConfigIOError("disk full")

    monkeypatch.setattr(unified_manager.storage, "write", refuse)
    with pytest.raises(ConfigIOError):
        unified_manager.set_value("scan.path", "/srv/code")

    assert unified_manager.get_value("scan.path") == ""
    assert events == []
