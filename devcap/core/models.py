"""Activity hierarchy returned by the scanner: Project -> Branch -> Commit."""
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Iterator, List, Optional, Tuple


class Period(str, Enum):
    """Coarse time window applied by the scanner."""

    TODAY = "today"
    YESTERDAY = "yesterday"
    WEEK = "week"
    LAST_7_DAYS = "last_7_days"

    @property
    def label(self) -> str:
        return _PERIOD_LABELS[self]

    @classmethod
    def parse(cls, value: "str | Period") -> "Period":
        """Return the member for ``value``; accepts the legacy ``"7d"`` alias."""
        if isinstance(value, Period):
            return value
        normalised = str(value).strip().lower()
        normalised = _PERIOD_ALIASES.get(normalised, normalised)
        try:
            return cls(normalised)
        except ValueError:
            raise ValueError(f"Unknown period: {value!r}") from None


_PERIOD_LABELS: Dict[Period, str] = {
    Period.TODAY: "Today",
    Period.YESTERDAY: "Yesterday",
    Period.WEEK: "This Week",
    Period.LAST_7_DAYS: "Last 7 Days",
}

_PERIOD_ALIASES: Dict[str, str] = {"7d": "last_7_days"}


class BadgeMode(str, Enum):
    """Which count, if any, the menubar badge shows."""

    NONE = "none"
    PROJECTS = "projects"
    BRANCHES = "branches"
    COMMITS = "commits"


_ORIGIN_NAMES: Dict[str, str] = {
    "github": "GitHub",
    "gitlab": "GitLab",
    "gitlab-self-hosted": "GitLab",
    "bitbucket": "Bitbucket",
}


@dataclass(frozen=True)
class DiffStat:
    """Line-change summary. Never derived from children; treat as opaque."""

    files_changed: int = 0
    insertions: int = 0
    deletions: int = 0

    def __post_init__(self) -> None:
        for name in ("files_changed", "insertions", "deletions"):
            if getattr(self, name) < 0:
                raise ValueError(f"DiffStat.{name} must be >= 0")


@dataclass(frozen=True)
class Commit:
    hash: str
    message: str
    timestamp: str
    relative_time: str
    commit_type: Optional[str] = None
    url: Optional[str] = None
    diff_stat: Optional[DiffStat] = None

    def __post_init__(self) -> None:
        if not self.hash:
            raise ValueError("Commit.hash must not be empty")

    @property
    def id(self) -> str:
        return self.hash

    @property
    def display_message(self) -> str:
        """Subject of a ``type: subject`` message, or the whole message.

        Blank pieces around the first colon are ignored, so ``"feat:"`` and
        ``"feat: "`` both show as ``"feat"``.
        """
        pieces = [piece.strip() for piece in self.message.split(":", 1)]
        pieces = [piece for piece in pieces if piece]
        if not pieces:
            return self.message
        return pieces[-1]


@dataclass(frozen=True)
class Branch:
    name: str
    commits: Tuple[Commit, ...] = field(default_factory=tuple)
    url: Optional[str] = None
    diff_stat: Optional[DiffStat] = None

    @property
    def id(self) -> str:
        return self.name

    @property
    def latest_activity(self) -> Optional[str]:
        # commits arrive most recent first
        return self.commits[0].relative_time if self.commits else None


@dataclass(frozen=True)
class Project:
    project: str
    path: str
    branches: Tuple[Branch, ...] = field(default_factory=tuple)
    origin: Optional[str] = None
    remote_url: Optional[str] = None
    diff_stat: Optional[DiffStat] = None

    @property
    def id(self) -> str:
        return self.path

    def iter_commits(self) -> Iterator[Commit]:
        """All commits in scan order, shared history included."""
        for branch in self.branches:
            yield from branch.commits

    def unique_commits(self) -> List[Commit]:
        """Commits deduplicated by hash, first occurrence wins."""
        seen = set()
        unique: List[Commit] = []
        for commit in self.iter_commits():
            if commit.hash in seen:
                continue
            seen.add(commit.hash)
            unique.append(commit)
        return unique

    @property
    def total_commits(self) -> int:
        return len(self.unique_commits())

    @property
    def total_branches(self) -> int:
        return len(self.branches)

    @property
    def latest_activity(self) -> Optional[str]:
        first = next(self.iter_commits(), None)
        return first.relative_time if first is not None else None

    @property
    def origin_display_name(self) -> Optional[str]:
        if self.origin is None:
            return None
        return _ORIGIN_NAMES.get(self.origin, self.origin)


__all__ = [
    "BadgeMode",
    "Branch",
    "Commit",
    "DiffStat",
    "Period",
    "Project",
]
