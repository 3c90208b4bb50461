"""Plain-text rendering of scan results for the terminal."""
from typing import List, Optional, Sequence

from devcap.core import aggregation
from devcap.core.models import DiffStat, Period, Project
from devcap.utils.color_support import color_support


def _diff(stat: Optional[DiffStat]) -> str:
    if stat is None:
        return ""
    return " " + color_support.success(f"+{stat.insertions}") + " " + color_support.error(f"-{stat.deletions}")


def render_projects(
    projects: Sequence[Project],
    period: Period,
    show_diff_stats: bool = True,
    colored_commit_types: bool = True,
    show_origin: bool = True,
) -> str:
    lines: List[str] = []
    summary = aggregation.summarize(projects)
    lines.append(
        color_support.colored(period.label, bright=True)
        + color_support.muted(
            f"  {summary.projects} projects · {summary.branches} branches · {summary.commits} commits"
        )
    )
    if not projects:
        lines.append(color_support.muted("No commits found"))
        return "\n".join(lines)

    for project in projects:
        header = color_support.colored(project.project, bright=True)
        if show_origin and project.origin_display_name:
            header += color_support.muted(f" ({project.origin_display_name})")
        header += f"  {project.total_commits}"
        if show_diff_stats:
            header += _diff(project.diff_stat)
        lines.append("")
        lines.append(header)
        for branch in project.branches:
            latest = branch.latest_activity
            branch_line = "  " + color_support.info(branch.name)
            branch_line += f"  {len(branch.commits)}"
            if latest:
                branch_line += color_support.muted(f"  {latest}")
            if show_diff_stats:
                branch_line += _diff(branch.diff_stat)
            lines.append(branch_line)
            for commit in branch.commits:
                tag = commit.commit_type or ""
                if tag and colored_commit_types:
                    tag = color_support.commit_type(tag)
                # pad on the raw width so escape codes do not skew alignment
                padding = " " * max(0, 8 - len(commit.commit_type or ""))
                lines.append(
                    f"    {padding}{tag} {commit.display_message}"
                    + color_support.muted(f"  {commit.hash} {commit.relative_time}")
                )
    return "\n".join(lines)


def render_summary_line(projects: Sequence[Project], period: Period, failed: bool = False) -> str:
    if failed:
        return color_support.warning(f"{period.label}: scan failed")
    summary = aggregation.summarize(projects)
    return (
        f"{period.label}: {summary.commits} commits in {summary.projects} projects "
        f"({summary.branches} branches, +{summary.insertions} -{summary.deletions})"
    )
