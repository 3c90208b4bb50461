from __future__ import annotations

from typing import Any, Dict, List, Tuple

from .toml_io import loads

DEFAULT_CONFIG_TOML = """\
config_version = "1.0"

[scan]
# Root directory searched for git repositories; filled with ~/Sites on first run
path = ""
# today | yesterday | week | last_7_days
period = "today"

[refresh]
# Seconds between automatic scans, 0 disables auto-refresh
interval_seconds = 900

[menubar]
# none | projects | branches | commits
badge_mode = "none"

[appearance]
colored_commit_types = true
show_origin_icons = true
show_diff_stats = true

[scanner]
# Explicit path to the devcap_ffi shared library, empty for auto-discovery
library_path = ""
# discard | last_writer
stale_results = "discard"
"""

DEFAULT_CONFIG: Dict[str, Any] = loads(DEFAULT_CONFIG_TOML)

PERIOD_VALUES: List[str] = ["today", "yesterday", "week", "last_7_days"]
BADGE_MODE_VALUES: List[str] = ["none", "projects", "branches", "commits"]
STALE_RESULT_POLICIES: List[str] = ["discard", "last_writer"]

REFRESH_INTERVAL_CHOICES: List[Tuple[str, int]] = [
    ("Off", 0),
    ("5 minutes", 300),
    ("15 minutes", 900),
    ("30 minutes", 1800),
]

CONFIG_SCHEMA: Dict[str, Any] = {
    "type": "object",
    "properties": {
        "config_version": {"type": "string"},
        "scan": {
            "type": "object",
            "properties": {
                "path": {"type": "string"},
                "period": {"enum": PERIOD_VALUES + ["7d"]},
            },
            "required": ["path", "period"],
            "additionalProperties": True,
        },
        "refresh": {
            "type": "object",
            "properties": {
                "interval_seconds": {"type": "number", "minimum": 0},
            },
            "required": ["interval_seconds"],
            "additionalProperties": True,
        },
        "menubar": {
            "type": "object",
            "properties": {
                "badge_mode": {"enum": BADGE_MODE_VALUES},
            },
            "required": ["badge_mode"],
            "additionalProperties": True,
        },
        "appearance": {
            "type": "object",
            "properties": {
                "colored_commit_types": {"type": "boolean"},
                "show_origin_icons": {"type": "boolean"},
                "show_diff_stats": {"type": "boolean"},
            },
            "additionalProperties": True,
        },
        "scanner": {
            "type": "object",
            "properties": {
                "library_path": {"type": "string"},
                "stale_results": {"enum": STALE_RESULT_POLICIES},
            },
            "additionalProperties": True,
        },
    },
    "required": ["scan", "refresh", "menubar"],
    "additionalProperties": True,
}

__all__ = [
    "BADGE_MODE_VALUES",
    "CONFIG_SCHEMA",
    "DEFAULT_CONFIG",
    "DEFAULT_CONFIG_TOML",
    "PERIOD_VALUES",
    "REFRESH_INTERVAL_CHOICES",
    "STALE_RESULT_POLICIES",
]
