"""Wire format of the scanner: a JSON array of projects with snake_case keys."""
from __future__ import annotations

import json
from typing import Any, Dict, List, Optional, Sequence, Union

from jsonschema import Draft202012Validator

from devcap.core.models import Branch, Commit, DiffStat, Project

from .exceptions import ScanDecodeError

_OPTIONAL_STRING = {"type": ["string", "null"]}
_COUNT = {"type": "integer", "minimum": 0}

_DIFF_STAT_SCHEMA: Dict[str, Any] = {
    "type": ["object", "null"],
    "properties": {
        "files_changed": _COUNT,
        "insertions": _COUNT,
        "deletions": _COUNT,
    },
    "required": ["files_changed", "insertions", "deletions"],
}

PROJECTS_SCHEMA: Dict[str, Any] = {
    "type": "array",
    "items": {
        "type": "object",
        "properties": {
            "project": {"type": "string"},
            "path": {"type": "string"},
            "origin": _OPTIONAL_STRING,
            "remote_url": _OPTIONAL_STRING,
            "diff_stat": _DIFF_STAT_SCHEMA,
            "branches": {
                "type": "array",
                "items": {
                    "type": "object",
                    "properties": {
                        "name": {"type": "string"},
                        "url": _OPTIONAL_STRING,
                        "diff_stat": _DIFF_STAT_SCHEMA,
                        "commits": {
                            "type": "array",
                            "items": {
                                "type": "object",
                                "properties": {
                                    "hash": {"type": "string", "minLength": 1},
                                    "message": {"type": "string"},
                                    "commit_type": _OPTIONAL_STRING,
                                    "timestamp": {"type": "string"},
                                    "relative_time": {"type": "string"},
                                    "url": _OPTIONAL_STRING,
                                    "diff_stat": _DIFF_STAT_SCHEMA,
                                },
                                "required": ["hash", "message", "timestamp", "relative_time"],
                            },
                        },
                    },
                    "required": ["name", "commits"],
                },
            },
        },
        "required": ["project", "path", "branches"],
    },
}

_validator = Draft202012Validator(PROJECTS_SCHEMA)


def _diff_stat(data: Optional[Dict[str, Any]]) -> Optional[DiffStat]:
    if data is None:
        return None
    return DiffStat(
        files_changed=data["files_changed"],
        insertions=data["insertions"],
        deletions=data["deletions"],
    )


def _commit(data: Dict[str, Any]) -> Commit:
    return Commit(
        hash=data["hash"],
        message=data["message"],
        commit_type=data.get("commit_type"),
        timestamp=data["timestamp"],
        relative_time=data["relative_time"],
        url=data.get("url"),
        diff_stat=_diff_stat(data.get("diff_stat")),
    )


def _branch(data: Dict[str, Any]) -> Branch:
    return Branch(
        name=data["name"],
        url=data.get("url"),
        commits=tuple(_commit(item) for item in data["commits"]),
        diff_stat=_diff_stat(data.get("diff_stat")),
    )


def _project(data: Dict[str, Any]) -> Project:
    return Project(
        project=data["project"],
        path=data["path"],
        origin=data.get("origin"),
        remote_url=data.get("remote_url"),
        branches=tuple(_branch(item) for item in data["branches"]),
        diff_stat=_diff_stat(data.get("diff_stat")),
    )


def decode_projects(payload: Union[bytes, str]) -> List[Project]:
    """Decode a scanner payload, preserving project, branch and commit order.

    Raises:
        ScanDecodeError: if the payload is not UTF-8, not JSON, or does not
            match :data:`PROJECTS_SCHEMA`.
    """
    try:
        text = payload.decode("utf-8") if isinstance(payload, bytes) else payload
        data = json.loads(text)
    except (UnicodeDecodeError, ValueError) as exc:
        raise ScanDecodeError(f"Scanner payload is not valid JSON: {exc}") from exc

    errors = sorted(_validator.iter_errors(data), key=lambda e: list(e.path))
    if errors:
        first = errors[0]
        location = "/".join(str(part) for part in first.path) or "<root>"
        raise ScanDecodeError(f"Scanner payload invalid at {location}: {first.message}")

    return [_project(item) for item in data]


def _encode_diff_stat(stat: Optional[DiffStat]) -> Optional[Dict[str, int]]:
    if stat is None:
        return None
    return {
        "files_changed": stat.files_changed,
        "insertions": stat.insertions,
        "deletions": stat.deletions,
    }


def project_to_wire(project: Project) -> Dict[str, Any]:
    return {
        "project": project.project,
        "path": project.path,
        "origin": project.origin,
        "remote_url": project.remote_url,
        "diff_stat": _encode_diff_stat(project.diff_stat),
        "branches": [
            {
                "name": branch.name,
                "url": branch.url,
                "diff_stat": _encode_diff_stat(branch.diff_stat),
                "commits": [
                    {
                        "hash": commit.hash,
                        "message": commit.message,
                        "commit_type": commit.commit_type,
                        "timestamp": commit.timestamp,
                        "relative_time": commit.relative_time,
                        "url": commit.url,
                        "diff_stat": _encode_diff_stat(commit.diff_stat),
                    }
                    for commit in branch.commits
                ],
            }
            for branch in project.branches
        ],
    }


def encode_projects(projects: Sequence[Project], indent: Optional[int] = None) -> str:
    return json.dumps([project_to_wire(p) for p in projects], indent=indent, ensure_ascii=False)


__all__ = [
    "PROJECTS_SCHEMA",
    "decode_projects",
    "encode_projects",
    "project_to_wire",
]
