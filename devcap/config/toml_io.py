from __future__ import annotations

import sys
from pathlib import Path
from typing import Any, Dict, List, Tuple

if sys.version_info >= (3, 11):
    import tomllib
else:  # pragma: no cover
    import tomli as tomllib


def _escape(value: str) -> str:
    return (
        value.replace("\\", "\\\\")
        .replace('"', '\\"')
        .replace("\n", "\\n")
        .replace("\t", "\\t")
    )


def format_value(value: Any) -> str:
    """Render a scalar or list as a TOML literal."""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (int, float)):
        return repr(value)
    if isinstance(value, str):
        return f'"{_escape(value)}"'
    if isinstance(value, (list, tuple)):
        return "[" + ", ".join(format_value(item) for item in value) + "]"
    raise TypeError(f"Unsupported value type for TOML serialization: {type(value)!r}")


def dumps(data: Dict[str, Any]) -> str:
    """Serialise nested dictionaries into TOML tables.

    ``None`` values are omitted because TOML has no null literal.
    """
    lines: List[str] = []

    def write_table(prefix: str, table: Dict[str, Any]) -> None:
        scalars: List[Tuple[str, Any]] = []
        tables: List[Tuple[str, Dict[str, Any]]] = []
        for key, value in table.items():
            if value is None:
                continue
            if isinstance(value, dict):
                tables.append((key, value))
            else:
                scalars.append((key, value))

        if prefix and (scalars or not tables):
            if lines:
                lines.append("")
            lines.append(f"[{prefix}]")
        for key, value in scalars:
            lines.append(f"{key} = {format_value(value)}")

        for key, value in tables:
            write_table(f"{prefix}.{key}" if prefix else key, value)

    write_table("", data)
    return "\n".join(lines) + "\n"


def loads(content: str) -> Dict[str, Any]:
    return tomllib.loads(content)


def load_file(path: Path) -> Dict[str, Any]:
    with path.open("rb") as fh:
        return tomllib.load(fh)


TOMLDecodeError = tomllib.TOMLDecodeError

__all__ = ["TOMLDecodeError", "dumps", "format_value", "load_file", "loads"]
