from __future__ import annotations

from copy import deepcopy
from typing import Any, Dict, List

from jsonschema import Draft202012Validator

from .defaults import CONFIG_SCHEMA
from .exceptions import ConfigValidationError
from .utils import lookup

_validator = Draft202012Validator(CONFIG_SCHEMA)
_MISSING = object()


def validate_config(data: Dict[str, Any]) -> None:
    """Raise :class:`ConfigValidationError` describing the first schema violation."""
    errors = sorted(_validator.iter_errors(data), key=lambda e: list(e.path))
    if errors:
        first = errors[0]
        location = ".".join(str(part) for part in first.path)
        message = f"{location}: {first.message}" if location else first.message
        raise ConfigValidationError(message)


def repair_config(data: Dict[str, Any], defaults: Dict[str, Any]) -> List[str]:
    """Reset every schema-invalid value in ``data`` to its default, in place.

    Returns the dotted paths that were reset. Violations without a default to
    fall back on are raised as :class:`ConfigValidationError`.
    """
    repaired: List[str] = []
    errors = sorted(_validator.iter_errors(data), key=lambda e: len(e.path))
    for error in errors:
        parts = [str(part) for part in error.path]
        location = ".".join(parts)
        if any(location == done or location.startswith(done + ".") for done in repaired):
            continue
        fallback = lookup(defaults, location, _MISSING) if parts else _MISSING
        if fallback is _MISSING:
            message = f"{location}: {error.message}" if location else error.message
            raise ConfigValidationError(message)

        container = data
        for part in parts[:-1]:
            container = container[part]
        container[parts[-1]] = deepcopy(fallback)
        repaired.append(location)

    validate_config(data)
    return repaired


__all__ = ["repair_config", "validate_config"]
