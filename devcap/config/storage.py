from __future__ import annotations

import logging
import os
import shutil
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Optional

from .exceptions import ConfigIOError
from .toml_io import dumps, load_file

logger = logging.getLogger(__name__)


class ConfigStorage:
    """Location, backup and raw read/write of the devcap TOML file."""

    def __init__(self, path: Optional[Path] = None) -> None:
        self._path = (path or self.default_path()).expanduser().resolve()

    @staticmethod
    def default_path() -> Path:
        override = os.environ.get("DEVCAP_CONFIG")
        if override:
            return Path(override)
        if os.name == "nt":
            appdata = os.environ.get("APPDATA")
            base = Path(appdata) if appdata else Path.home() / "AppData" / "Roaming"
            return base / "devcap" / "config.toml"
        xdg = os.environ.get("XDG_CONFIG_HOME")
        base = Path(xdg) if xdg else Path.home() / ".config"
        return base / "devcap" / "config.toml"

    @property
    def path(self) -> Path:
        return self._path

    def set_path(self, new_path: Path) -> None:
        self._path = Path(new_path).expanduser().resolve()

    def exists(self) -> bool:
        return self._path.exists()

    def ensure_directory(self) -> None:
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise ConfigIOError(
                f"Unable to create configuration directory: {exc}"
            ) from exc

    def backup(self, suffix: str = "backup") -> Optional[Path]:
        if not self._path.exists():
            return None
        stamp = datetime.now(timezone.utc).strftime("%Y%m%d%H%M%S")
        backup_path = self._path.with_name(f"{self._path.name}.{suffix}.{stamp}.bak")
        try:
            shutil.copy2(self._path, backup_path)
            return backup_path
        except OSError as exc:  # pragma: no cover
            logger.warning(
                "Failed to create configuration backup at %s: %s", backup_path, exc
            )
            return None

    def write(self, data: Dict[str, Any]) -> None:
        self.write_text(dumps(data))

    def write_text(self, content: str) -> None:
        self.ensure_directory()
        try:
            self._path.write_text(content, encoding="utf-8")
        except OSError as exc:
            raise ConfigIOError(f"Failed to write configuration file: {exc}") from exc

    def read(self) -> Dict[str, Any]:
        return load_file(self._path)


__all__ = ["ConfigStorage"]
