"""Call contract of the external activity scanner and its ctypes binding."""
from __future__ import annotations

import ctypes
import ctypes.util
import logging
import os
import sys
import threading
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional, Protocol, Sequence, Tuple, runtime_checkable

from devcap.core.models import Period, Project

from .decoding import decode_projects
from .exceptions import ScanCallError, ScanDecodeError, ScanError, ScannerUnavailableError

logger = logging.getLogger(__name__)

LIBRARY_ENV_VAR = "DEVCAP_FFI_LIBRARY"
LIBRARY_NAME = "devcap_ffi"


@dataclass(frozen=True)
class ScanResult:
    """Outcome of one scanner call: either projects or the reason there are none."""

    projects: Tuple[Project, ...] = field(default_factory=tuple)
    error: Optional[ScanError] = None

    @classmethod
    def success(cls, projects: Sequence[Project]) -> "ScanResult":
        return cls(projects=tuple(projects))

    @classmethod
    def failure(cls, error: ScanError) -> "ScanResult":
        return cls(projects=(), error=error)

    @property
    def ok(self) -> bool:
        return self.error is None


@runtime_checkable
class ScannerBridge(Protocol):
    """Synchronous, stateless scanner. Implementations must not raise from ``scan``."""

    def scan(self, path: str, period: Period, author: Optional[str] = None) -> ScanResult:
        """Scan ``path`` for activity in ``period``, optionally filtered by author."""

    def default_author(self) -> Optional[str]:
        """Author the scanner uses when none is given, if it knows one."""


def _platform_library_names() -> Tuple[str, ...]:
    if sys.platform == "darwin":
        return (f"lib{LIBRARY_NAME}.dylib",)
    if os.name == "nt":
        return (f"{LIBRARY_NAME}.dll",)
    return (f"lib{LIBRARY_NAME}.so",)


def resolve_library_path(
    explicit: Optional[str] = None, configured: Optional[str] = None
) -> Optional[str]:
    """Locate the scanner library.

    Order: explicit path, ``DEVCAP_FFI_LIBRARY``, the configured
    ``scanner.library_path``, next to the running executable, then the
    system loader search path.
    """
    for candidate in (explicit, os.environ.get(LIBRARY_ENV_VAR), configured):
        if candidate:
            return str(Path(candidate).expanduser())

    exe_dir = Path(sys.executable).resolve().parent
    for name in _platform_library_names():
        bundled = exe_dir / name
        if bundled.exists():
            return str(bundled)

    return ctypes.util.find_library(LIBRARY_NAME)


class FfiScannerBridge:
    """Scanner backed by the ``devcap_ffi`` C ABI.

    The library is loaded lazily on first use. Strings returned by the library
    are copied into Python memory and released with ``devcap_free_string``.
    """

    def __init__(
        self, library_path: Optional[str] = None, configured_path: Optional[str] = None
    ) -> None:
        self._library_path = library_path
        self._configured_path = configured_path
        self._lib: Optional[ctypes.CDLL] = None
        self._load_lock = threading.Lock()

    def _load(self) -> ctypes.CDLL:
        with self._load_lock:
            if self._lib is not None:
                return self._lib
            path = resolve_library_path(self._library_path, self._configured_path)
            if not path:
                raise ScannerUnavailableError(
                    f"Scanner library '{LIBRARY_NAME}' not found; set {LIBRARY_ENV_VAR} "
                    "or scanner.library_path"
                )
            try:
                lib = ctypes.CDLL(path)
                lib.devcap_scan.argtypes = [ctypes.c_char_p, ctypes.c_char_p, ctypes.c_char_p]
                lib.devcap_scan.restype = ctypes.c_void_p
                lib.devcap_default_author.argtypes = []
                lib.devcap_default_author.restype = ctypes.c_void_p
                lib.devcap_free_string.argtypes = [ctypes.c_void_p]
                lib.devcap_free_string.restype = None
            except (OSError, AttributeError) as exc:
                raise ScannerUnavailableError(f"Unable to load scanner library {path}: {exc}") from exc
            logger.info("Loaded scanner library from %s", path)
            self._lib = lib
            return lib

    def _take_string(self, lib: ctypes.CDLL, pointer: Optional[int]) -> Optional[bytes]:
        if not pointer:
            return None
        try:
            return ctypes.string_at(pointer)
        finally:
            lib.devcap_free_string(pointer)

    def scan(self, path: str, period: Period, author: Optional[str] = None) -> ScanResult:
        period = Period.parse(period)
        try:
            lib = self._load()
            pointer = lib.devcap_scan(
                path.encode("utf-8"),
                period.value.encode("utf-8"),
                author.encode("utf-8") if author else None,
            )
            payload = self._take_string(lib, pointer)
            if payload is None:
                raise ScanCallError("Scanner returned no payload")
            projects = decode_projects(payload)
        except (ScannerUnavailableError, ScanCallError, ScanDecodeError) as exc:
            logger.debug("Scan of %s (%s) failed: %s", path, period.value, exc)
            return ScanResult.failure(exc)
        except Exception as exc:
            logger.debug("Scan of %s (%s) raised", path, period.value, exc_info=True)
            return ScanResult.failure(ScanCallError(str(exc)))

        logger.debug("Scan of %s (%s) returned %d projects", path, period.value, len(projects))
        return ScanResult.success(projects)

    def default_author(self) -> Optional[str]:
        try:
            lib = self._load()
        except ScannerUnavailableError as exc:
            logger.debug("Default author unavailable: %s", exc)
            return None
        payload = self._take_string(lib, lib.devcap_default_author())
        if payload is None:
            return None
        return payload.decode("utf-8", errors="replace") or None


__all__ = [
    "FfiScannerBridge",
    "LIBRARY_ENV_VAR",
    "ScanResult",
    "ScannerBridge",
    "resolve_library_path",
]
