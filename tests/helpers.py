"""Builders for small activity trees and a stand-in scanner library used across tests."""
from __future__ import annotations

import ctypes
from typing import Optional, Sequence

from devcap.core.models import Branch, Commit, DiffStat, Project


def commit(hash: str, message: str = "feat: change", relative_time: str = "1 hour ago") -> Commit:
    return Commit(
        hash=hash,
        message=message,
        timestamp="2024-05-01T10:00:00+02:00",
        relative_time=relative_time,
    )


def branch(name: str, hashes: Sequence[str]) -> Branch:
    return Branch(name=name, commits=tuple(commit(h) for h in hashes))


def project(
    name: str,
    branches: Sequence[Branch],
    path: Optional[str] = None,
    origin: Optional[str] = None,
    diff_stat: Optional[DiffStat] = None,
) -> Project:
    return Project(
        project=name,
        path=path or f"/code/{name}",
        branches=tuple(branches),
        origin=origin,
        diff_stat=diff_stat,
    )


class FakeLibrary:
    """Stands in for the loaded ``devcap_ffi`` CDLL, handing out real C strings."""

    def __init__(self, payload: Optional[bytes], author: Optional[bytes] = None) -> None:
        self._buffers = {}
        self.payload = payload
        self.author = author
        self.freed = []
        self.scan_args = []

    def _pointer(self, data: Optional[bytes]) -> Optional[int]:
        if data is None:
            return None
        buffer = ctypes.create_string_buffer(data)
        address = ctypes.addressof(buffer)
        self._buffers[address] = buffer
        return address

    def devcap_scan(self, path, period, author):
        self.scan_args.append((path, period, author))
        return self._pointer(self.payload)

    def devcap_default_author(self):
        return self._pointer(self.author)

    def devcap_free_string(self, pointer):
        self.freed.append(pointer)
