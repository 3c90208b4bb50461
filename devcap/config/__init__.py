from __future__ import annotations

from .exceptions import ConfigError, ConfigIOError, ConfigValidationError
from .settings import Settings, default_scan_path
from .unified import UnifiedConfigManager

__all__ = [
    "ConfigError",
    "ConfigIOError",
    "ConfigValidationError",
    "Settings",
    "UnifiedConfigManager",
    "default_scan_path",
]
