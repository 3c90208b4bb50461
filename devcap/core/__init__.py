from .aggregation import (
    ActivitySummary,
    badge_value,
    summarize,
    total_branches,
    total_commits,
)
from .expansion import ExpansionMemory, ExpansionState
from .models import BadgeMode, Branch, Commit, DiffStat, Period, Project

__all__ = [
    "ActivitySummary",
    "BadgeMode",
    "Branch",
    "Commit",
    "DiffStat",
    "ExpansionMemory",
    "ExpansionState",
    "Period",
    "Project",
    "badge_value",
    "summarize",
    "total_branches",
    "total_commits",
]
