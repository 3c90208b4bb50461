"""Rollups computed on demand from the current project list.

Nothing here is cached: consumers call these functions against whatever
snapshot they are rendering.
"""
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional, Sequence

from .models import BadgeMode, Project


@dataclass(frozen=True)
class ActivitySummary:
    projects: int
    branches: int
    commits: int
    insertions: int
    deletions: int


def total_commits(projects: Sequence[Project]) -> int:
    """Sum of per-project deduplicated totals.

    Hashes are only unique within one project's history, so the same hash in
    two projects is counted twice.
    """
    return sum(project.total_commits for project in projects)


def total_branches(projects: Sequence[Project]) -> int:
    return sum(project.total_branches for project in projects)


def badge_value(projects: Sequence[Project], mode: "BadgeMode | str") -> Optional[int]:
    """Count to show in the menubar badge, ``None`` when nothing should show.

    A zero count yields ``None`` rather than ``0``.
    """
    mode = BadgeMode(mode)
    if mode is BadgeMode.PROJECTS:
        count = len(projects)
    elif mode is BadgeMode.BRANCHES:
        count = total_branches(projects)
    elif mode is BadgeMode.COMMITS:
        count = total_commits(projects)
    else:
        return None
    return count or None


def format_badge(value: Optional[int]) -> str:
    if value is None:
        return ""
    return "99+" if value > 99 else str(value)


def summarize(projects: Sequence[Project]) -> ActivitySummary:
    insertions = 0
    deletions = 0
    for project in projects:
        if project.diff_stat is not None:
            insertions += project.diff_stat.insertions
            deletions += project.diff_stat.deletions
    return ActivitySummary(
        projects=len(projects),
        branches=total_branches(projects),
        commits=total_commits(projects),
        insertions=insertions,
        deletions=deletions,
    )


def refresh_age_label(last_refresh_at: Optional[datetime], now: datetime) -> Optional[str]:
    """``"Updated N min ago"`` for the header line, ``None`` before the first refresh."""
    if last_refresh_at is None:
        return None
    minutes = max(0, int((now - last_refresh_at).total_seconds() // 60))
    return f"Updated {minutes} min ago"


__all__ = [
    "ActivitySummary",
    "badge_value",
    "format_badge",
    "refresh_age_label",
    "summarize",
    "total_branches",
    "total_commits",
]
