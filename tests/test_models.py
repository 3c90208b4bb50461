import pytest

from devcap.core.models import BadgeMode, Branch, DiffStat, Period

from helpers import branch, commit, project


@pytest.mark.parametrize(
    "message, expected",
    [
        ("feat: add login", "add login"),
        ("fix(api): handle 404", "handle 404"),
        ("plain message", "plain message"),
        ("feat:", "feat"),
        ("feat: ", "feat"),
        ("  : tidy up", "tidy up"),
        ("a: b: c", "b: c"),
        ("", ""),
    ],
)
def test_display_message(message, expected):
    assert commit("abc", message=message).display_message == expected


def test_commit_requires_hash():
    with pytest.raises(ValueError):
        commit("")


def test_diff_stat_rejects_negative_counts():
    with pytest.raises(ValueError):
        DiffStat(files_changed=1, insertions=-1, deletions=0)


def test_unique_commits_dedupes_shared_history():
    p = project("app", [branch("main", ["c1", "c2"]), branch("feature", ["c2", "c3"])])
    assert [c.hash for c in p.unique_commits()] == ["c1", "c2", "c3"]
    assert p.total_commits == 3
    assert p.total_branches == 2
    assert len(list(p.iter_commits())) == 4


def test_latest_activity_uses_first_commit():
    p = project(
        "app",
        [
            Branch(name="empty"),
            Branch(name="main", commits=(commit("c1", relative_time="5 minutes ago"),)),
        ],
    )
    assert p.branches[0].latest_activity is None
    assert p.latest_activity == "5 minutes ago"
    assert project("idle", []).latest_activity is None


def test_origin_display_name():
    assert project("a", [], origin="github").origin_display_name == "GitHub"
    assert project("b", [], origin="gitlab-self-hosted").origin_display_name == "GitLab"
    assert project("c", [], origin="gitea").origin_display_name == "gitea"
    assert project("d", []).origin_display_name is None


def test_ids_are_stable():
    p = project("app", [branch("main", ["c1"])], path="/code/app")
    assert p.id == "/code/app"
    assert p.branches[0].id == "main"
    assert p.branches[0].commits[0].id == "c1"


def test_period_parse():
    assert Period.parse("7d") is Period.LAST_7_DAYS
    assert Period.parse(" Week ") is Period.WEEK
    assert Period.parse(Period.TODAY) is Period.TODAY
    assert Period.LAST_7_DAYS.label == "Last 7 Days"
    with pytest.raises(ValueError):
        Period.parse("month")


def test_badge_mode_values():
    assert [mode.value for mode in BadgeMode] == ["none", "projects", "branches", "commits"]
