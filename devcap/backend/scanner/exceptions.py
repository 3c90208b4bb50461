from __future__ import annotations


class ScanError(Exception):
    """Base class for everything that can make a scan unusable."""


class ScannerUnavailableError(ScanError):
    """The scanner library or one of its entry points could not be loaded."""


class ScanCallError(ScanError):
    """The scanner call itself failed or returned no payload."""


class ScanDecodeError(ScanError):
    """The scanner returned a payload that is not a valid project list."""


__all__ = [
    "ScanCallError",
    "ScanDecodeError",
    "ScanError",
    "ScannerUnavailableError",
]
