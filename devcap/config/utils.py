from __future__ import annotations

from copy import deepcopy
from typing import Any, Dict, List, Tuple

_MISSING = object()


def deep_merge(base: Dict[str, Any], overrides: Dict[str, Any]) -> Dict[str, Any]:
    result = deepcopy(base)
    for key, value in overrides.items():
        if isinstance(value, dict) and isinstance(result.get(key), dict):
            result[key] = deep_merge(result[key], value)
        else:
            result[key] = deepcopy(value)
    return result


def split_path(path: str) -> Tuple[List[str], str]:
    """Split ``"a.b.c"`` into (["a", "b"], "c")."""
    if not path:
        raise ValueError("Configuration path must not be empty")
    parts = path.split(".")
    return parts[:-1], parts[-1]


def lookup(data: Dict[str, Any], path: str, default: Any = None) -> Any:
    cursor: Any = data
    for part in path.split("."):
        if not isinstance(cursor, dict):
            return default
        cursor = cursor.get(part, _MISSING)
        if cursor is _MISSING:
            return default
    return deepcopy(cursor)


__all__ = ["deep_merge", "lookup", "split_path"]
