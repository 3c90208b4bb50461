from __future__ import annotations

import logging
import threading
from contextlib import contextmanager
from copy import deepcopy
from pathlib import Path
from typing import Any, Callable, ClassVar, Dict, Iterator, Optional

from .defaults import DEFAULT_CONFIG, DEFAULT_CONFIG_TOML
from .exceptions import ConfigError, ConfigIOError, ConfigValidationError
from devcap.utils.listeners import ListenerRegistry
from .storage import ConfigStorage
from .toml_io import TOMLDecodeError
from .utils import deep_merge, lookup, split_path
from .validation import repair_config, validate_config

logger = logging.getLogger(__name__)


class UnifiedConfigManager:
    """Process-wide key-value store backed by a single TOML file.

    Values are addressed by dotted paths (``"scan.period"``). Every effective
    change is validated, written to disk and announced to change listeners;
    :meth:`batch_update` coalesces several changes into one write and one
    notification.
    """

    _instance: ClassVar[Optional["UnifiedConfigManager"]] = None
    _lock: ClassVar[threading.RLock] = threading.RLock()

    def __new__(cls, config_path: Optional[Path] = None) -> "UnifiedConfigManager":
        with cls._lock:
            if cls._instance is None:
                cls._instance = super().__new__(cls)
                cls._instance._initialized = False
        return cls._instance

    def __init__(self, config_path: Optional[Path] = None) -> None:
        if getattr(self, "_initialized", False):
            if config_path is not None and Path(config_path).expanduser().resolve() != self.config_path:
                self.reload(config_path)
            return

        self.storage = ConfigStorage(Path(config_path) if config_path else None)
        self._raw_config: Dict[str, Any] = deepcopy(DEFAULT_CONFIG)
        self._listeners = ListenerRegistry("configuration")

        self._batch_depth = 0
        self._batch_dirty = False
        self._batch_notify = False

        self._load_or_create()
        self._initialized = True

    @property
    def config_path(self) -> Path:
        return self.storage.path

    def _load_or_create(self) -> None:
        self.storage.ensure_directory()

        if not self.storage.exists():
            logger.info("Creating default configuration at %s", self.storage.path)
            self.storage.write_text(DEFAULT_CONFIG_TOML)
            self._raw_config = deepcopy(DEFAULT_CONFIG)
            return

        try:
            loaded = self.storage.read()
            merged = deep_merge(DEFAULT_CONFIG, loaded)
            for path in repair_config(merged, DEFAULT_CONFIG):
                logger.warning(
                    "Ignoring invalid %s in %s, using the default", path, self.storage.path
                )
            self._raw_config = merged
        except FileNotFoundError:
            self._raw_config = deepcopy(DEFAULT_CONFIG)
        except TOMLDecodeError as exc:
            logger.error(
                "Configuration file %s is not valid TOML: %s", self.storage.path, exc
            )
            backup_path = self.storage.backup(suffix="corrupt")
            if backup_path:
                logger.error("Corrupt configuration backed up to %s", backup_path)
            self._raw_config = deepcopy(DEFAULT_CONFIG)
            self.storage.write(self._raw_config)
            logger.info("Restored default configuration after TOML decode failure")
        except (ConfigValidationError, ConfigIOError):
            raise
        except OSError as exc:
            raise ConfigIOError(f"Unable to load configuration: {exc}") from exc

    def reload(self, config_path: Optional[Path] = None) -> None:
        with self._lock:
            if config_path is not None:
                self.storage.set_path(Path(config_path))
            self._load_or_create()
            self._listeners.notify()

    def get_raw_config(self) -> Dict[str, Any]:
        return deepcopy(self._raw_config)

    def get_value(self, path: str, default: Any = None) -> Any:
        """Return the value at ``path``, ``default`` when it is not set."""
        with self._lock:
            return lookup(self._raw_config, path, default)

    def set_value(self, path: str, value: Any) -> None:
        """Set (or with ``None`` delete) the value at ``path``.

        The candidate configuration is validated before anything is written,
        so an invalid value leaves the stored configuration untouched.
        """
        parents, key = split_path(path)
        with self._lock:
            candidate = deepcopy(self._raw_config)
            container = candidate
            for part in parents:
                if value is None and part not in container:
                    return
                container = container.setdefault(part, {})
                if not isinstance(container, dict):
                    raise ConfigError(f"Configuration path '{path}' is not a table")

            if value is None:
                if key not in container:
                    return
                del container[key]
            else:
                if container.get(key) == value:
                    return
                container[key] = value

            validate_config(candidate)
            previous, self._raw_config = self._raw_config, candidate
            try:
                self._schedule_persist()
            except ConfigIOError:
                self._raw_config = previous
                raise

    def set_values_batch(self, updates: Dict[str, Any], notify: bool = True) -> None:
        if not updates:
            return
        with self.batch_update(notify=notify):
            for path, value in updates.items():
                self.set_value(path, value)

    def _schedule_persist(self) -> None:
        if self._batch_depth > 0:
            self._batch_dirty = True
            self._batch_notify = True
            return
        self.storage.write(self._raw_config)
        self._listeners.notify()

    def begin_batch_update(self) -> None:
        with self._lock:
            self._batch_depth += 1

    def end_batch_update(self, notify: bool = True) -> None:
        with self._lock:
            if self._batch_depth == 0:
                raise RuntimeError("end_batch_update called without matching begin_batch_update")
            self._batch_depth -= 1
            if not notify:
                self._batch_notify = False
            if self._batch_depth > 0:
                return
            try:
                if self._batch_dirty:
                    self.storage.write(self._raw_config)
                if self._batch_notify:
                    self._listeners.notify()
            finally:
                self._batch_dirty = False
                self._batch_notify = False

    @contextmanager
    def batch_update(self, notify: bool = True) -> Iterator[None]:
        self.begin_batch_update()
        try:
            yield
        finally:
            self.end_batch_update(notify=notify)

    def reset_to_defaults(self) -> None:
        with self._lock:
            self._raw_config = deepcopy(DEFAULT_CONFIG)
            self.storage.write(self._raw_config)
            self._listeners.notify()

    def add_change_listener(self, callback: Callable[[], None]) -> None:
        self._listeners.add(callback)

    def remove_change_listener(self, callback: Callable[[], None]) -> None:
        self._listeners.remove(callback)

    def cleanup(self) -> None:
        with self._lock:
            self._listeners.clear()
            self._initialized = False
            type(self)._instance = None  # reset singleton for future use


__all__ = ["UnifiedConfigManager"]
