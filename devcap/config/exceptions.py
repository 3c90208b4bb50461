from __future__ import annotations


class ConfigError(Exception):
    """Base exception for configuration errors."""


class ConfigValidationError(ConfigError):
    """Raised when a configuration value or file fails schema validation."""


class ConfigIOError(ConfigError):
    """Raised when the configuration file cannot be read or written."""


__all__ = [
    "ConfigError",
    "ConfigValidationError",
    "ConfigIOError",
]
