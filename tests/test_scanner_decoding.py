import json

import pytest

from devcap.backend.scanner import ScanDecodeError, decode_projects, encode_projects

PAYLOAD = [
    {
        "project": "app",
        "path": "/code/app",
        "origin": "github",
        "remote_url": "https://github.com/acme/app",
        "diff_stat": {"files_changed": 2, "insertions": 5, "deletions": 1},
        "branches": [
            {
                "name": "main",
                "url": "https://github.com/acme/app/tree/main",
                "commits": [
                    {
                        "hash": "a1b2c3d",
                        "message": "feat: add login",
                        "commit_type": "feat",
                        "timestamp": "2024-05-01T10:00:00+02:00",
                        "relative_time": "2 hours ago",
                        "url": "https://github.com/acme/app/commit/a1b2c3d",
                        "diff_stat": None,
                    },
                    {
                        "hash": "e4f5a6b",
                        "message": "tidy up",
                        "timestamp": "2024-05-01T09:00:00+02:00",
                        "relative_time": "3 hours ago",
                    },
                ],
            },
            {"name": "feature", "commits": []},
        ],
    },
    {"project": "lib", "path": "/code/lib", "branches": []},
]


def test_decode_preserves_order_and_fields():
    projects = decode_projects(json.dumps(PAYLOAD).encode("utf-8"))

    assert [p.project for p in projects] == ["app", "lib"]
    app = projects[0]
    assert app.origin == "github"
    assert app.diff_stat.insertions == 5
    assert [b.name for b in app.branches] == ["main", "feature"]
    first, second = app.branches[0].commits
    assert first.commit_type == "feat"
    assert first.display_message == "add login"
    assert first.diff_stat is None
    assert second.commit_type is None
    assert second.url is None
    assert projects[1].remote_url is None


def test_decode_accepts_empty_list():
    assert decode_projects("[]") == []


@pytest.mark.parametrize("payload", [b"not json", b"\xff\xfe", "{\"project\": 1"])
def test_malformed_payload_raises(payload):
    with pytest.raises(ScanDecodeError):
        decode_projects(payload)


def test_schema_violation_names_location():
    broken = json.loads(json.dumps(PAYLOAD))
    del broken[0]["branches"][0]["commits"][0]["relative_time"]
    with pytest.raises(ScanDecodeError) as excinfo:
        decode_projects(json.dumps(broken))
    assert "0/branches/0/commits/0" in str(excinfo.value)


def test_non_array_payload_is_rejected():
    with pytest.raises(ScanDecodeError):
        decode_projects(json.dumps({"projects": []}))


def test_encode_matches_wire_names():
    projects = decode_projects(json.dumps(PAYLOAD))
    encoded = json.loads(encode_projects(projects))
    assert encoded[0]["branches"][0]["commits"][0]["relative_time"] == "2 hours ago"
    assert encoded[1]["origin"] is None
    assert decode_projects(json.dumps(encoded)) == projects
