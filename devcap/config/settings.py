"""Typed accessors over the configuration store."""
from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Callable, Optional

from devcap.core.models import BadgeMode, Period

from .defaults import DEFAULT_CONFIG
from .unified import UnifiedConfigManager
from .utils import lookup

logger = logging.getLogger(__name__)

SCAN_PATH = "scan.path"
PERIOD = "scan.period"
REFRESH_INTERVAL = "refresh.interval_seconds"
BADGE_MODE = "menubar.badge_mode"
COLORED_COMMIT_TYPES = "appearance.colored_commit_types"
SHOW_ORIGIN_ICONS = "appearance.show_origin_icons"
SHOW_DIFF_STATS = "appearance.show_diff_stats"
SCANNER_LIBRARY_PATH = "scanner.library_path"
STALE_RESULTS = "scanner.stale_results"


def default_scan_path() -> str:
    """First-run scan root: the ``Sites`` folder in the user's home."""
    return str(Path.home() / "Sites")


class Settings:
    """Get/set/default view of the keys the refresh controller depends on.

    Invalid values in the file are reset to their defaults, with a warning,
    when the store loads it; the accessors fall back the same way for anything
    that still fails to parse. Neither path rewrites the file.
    """

    def __init__(self, manager: Optional[UnifiedConfigManager] = None) -> None:
        self._manager = manager or UnifiedConfigManager()

    @property
    def manager(self) -> UnifiedConfigManager:
        return self._manager

    def _get(self, path: str) -> Any:
        return self._manager.get_value(path, lookup(DEFAULT_CONFIG, path))

    @property
    def scan_path(self) -> str:
        return str(self._get(SCAN_PATH) or "")

    @scan_path.setter
    def scan_path(self, value: str) -> None:
        self._manager.set_value(SCAN_PATH, str(value))

    @property
    def period(self) -> Period:
        raw = self._get(PERIOD)
        try:
            return Period.parse(raw)
        except ValueError:
            logger.warning("Ignoring invalid period %r in configuration", raw)
            return Period(lookup(DEFAULT_CONFIG, PERIOD))

    @period.setter
    def period(self, value: "Period | str") -> None:
        self._manager.set_value(PERIOD, Period.parse(value).value)

    @property
    def refresh_interval_seconds(self) -> float:
        raw = self._get(REFRESH_INTERVAL)
        try:
            seconds = float(raw)
        except (TypeError, ValueError):
            seconds = -1.0
        if seconds < 0:
            logger.warning("Ignoring invalid refresh interval %r in configuration", raw)
            return float(lookup(DEFAULT_CONFIG, REFRESH_INTERVAL))
        return seconds

    @refresh_interval_seconds.setter
    def refresh_interval_seconds(self, value: float) -> None:
        if value < 0:
            raise ValueError("Refresh interval must be >= 0 seconds")
        stored = int(value) if float(value).is_integer() else float(value)
        self._manager.set_value(REFRESH_INTERVAL, stored)

    @property
    def badge_mode(self) -> BadgeMode:
        raw = self._get(BADGE_MODE)
        try:
            return BadgeMode(raw)
        except ValueError:
            logger.warning("Ignoring invalid badge mode %r in configuration", raw)
            return BadgeMode.NONE

    @badge_mode.setter
    def badge_mode(self, value: "BadgeMode | str") -> None:
        self._manager.set_value(BADGE_MODE, BadgeMode(value).value)

    @property
    def colored_commit_types(self) -> bool:
        return bool(self._get(COLORED_COMMIT_TYPES))

    @property
    def show_origin_icons(self) -> bool:
        return bool(self._get(SHOW_ORIGIN_ICONS))

    @property
    def show_diff_stats(self) -> bool:
        return bool(self._get(SHOW_DIFF_STATS))

    @property
    def scanner_library_path(self) -> Optional[str]:
        return self._get(SCANNER_LIBRARY_PATH) or None

    @property
    def stale_results(self) -> str:
        return str(self._get(STALE_RESULTS))

    def add_change_listener(self, callback: Callable[[], None]) -> None:
        self._manager.add_change_listener(callback)

    def remove_change_listener(self, callback: Callable[[], None]) -> None:
        self._manager.remove_change_listener(callback)


__all__ = [
    "BADGE_MODE",
    "PERIOD",
    "REFRESH_INTERVAL",
    "SCAN_PATH",
    "STALE_RESULTS",
    "Settings",
    "default_scan_path",
]
