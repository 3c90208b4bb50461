from __future__ import annotations

from pathlib import Path
from typing import Iterator

import pytest

from devcap.config import Settings, UnifiedConfigManager


@pytest.fixture
def unified_manager(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> Iterator[UnifiedConfigManager]:
    base = tmp_path / "config_env"
    monkeypatch.setenv("HOME", str(base / "home"))
    monkeypatch.setenv("XDG_CONFIG_HOME", str(base / "xdg"))
    monkeypatch.delenv("DEVCAP_CONFIG", raising=False)

    UnifiedConfigManager._instance = None  # type: ignore[attr-defined]
    manager = UnifiedConfigManager(base / "config" / "config.toml")

    try:
        yield manager
    finally:
        manager.cleanup()


@pytest.fixture
def settings(unified_manager: UnifiedConfigManager) -> Settings:
    return Settings(unified_manager)
