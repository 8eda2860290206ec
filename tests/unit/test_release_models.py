"""Unit tests for release data models."""

import pytest

from renote.release.models import (
    CommitRecord,
    IssueRecord,
    IssueRegistry,
    ReleaseWindow,
    SectionRule,
    SectionRules,
    section_key_for_label,
)


def test_registry_claim_once() -> None:
    """A number can be claimed only once."""
    registry = IssueRegistry([42])

    assert registry.claim(42) is True
    assert registry.claim(42) is False
    assert 42 not in registry


def test_registry_claim_unknown() -> None:
    """Claiming an unregistered number fails."""
    assert IssueRegistry([1]).claim(2) is False


def test_registry_retain() -> None:
    """retain keeps the intersection with the given numbers."""
    registry = IssueRegistry([1, 2, 3, 4])
    registry.retain([2, 3, 9])

    assert list(registry) == [2, 3]
    assert len(registry) == 2


def test_registry_copy_is_independent() -> None:
    """Claims on a copy do not affect the original."""
    registry = IssueRegistry([5, 1])
    copy = registry.copy()
    copy.claim(5)

    assert list(registry) == [1, 5]
    assert list(copy) == [1]
    assert repr(registry) == "IssueRegistry([1, 5])"


@pytest.mark.parametrize(
    "label,expected",
    [
        ("area/storage", "storage"),
        ("kind/bug-fix", "bug-fix"),
        ("org/area/network", "network"),
        ("documentation", "documentation"),
    ],
)
def test_section_key_for_label(label: str, expected: str) -> None:
    """The key is the last path segment of the label."""
    assert section_key_for_label(label) == expected


def test_section_rules_keys_in_order_with_misc_last() -> None:
    """Keys follow rule order, deduplicated, with misc appended once."""
    rules = SectionRules.from_labels(["area/storage", "kind/storage", "area/network"])

    assert rules.keys() == ["storage", "network", "misc"]
    assert len(rules) == 3


def test_section_rules_explicit_misc_not_duplicated() -> None:
    """An explicit misc section keeps its position."""
    rules = SectionRules([SectionRule("kind/other", "misc"), SectionRule("area/ui", "ui")])

    assert rules.keys() == ["misc", "ui"]
    assert rules.section_for(["kind/other"]) == "misc"


def test_section_rules_first_match_wins() -> None:
    """The first rule whose label is present decides the section."""
    rules = SectionRules.from_labels(["area/storage", "area/network"])

    assert rules.section_for(["area/network", "area/storage"]) == "storage"
    assert rules.section_for(["area/network"]) == "network"
    assert rules.section_for([]) == "misc"


def test_commit_record_from_api() -> None:
    """Only the subject line and the author login are kept."""
    record = CommitRecord.from_api(
        {
            "sha": "0123456789abcdef",
            "html_url": "https://github.com/acme/widgets/commit/0123456789abcdef",
            "commit": {"message": "Fix uploads\n\nLonger explanation."},
            "author": {"login": "alice"},
        }
    )

    assert record.subject == "Fix uploads"
    assert record.author == "alice"
    assert record.short_sha == "01234567"


def test_commit_record_from_api_without_author() -> None:
    """A commit not linked to a GitHub account has no author."""
    record = CommitRecord.from_api({"sha": "abc", "html_url": "u", "commit": {"message": ""}, "author": None})

    assert record.author is None
    assert record.subject == ""


def test_issue_record_pull_request_detection() -> None:
    """Pull requests are recognised by their URL."""
    pull = IssueRecord(number=1, title="t", url="https://github.com/acme/widgets/pull/1", labels=("kind/bug",))
    issue = IssueRecord(number=2, title="t", url="https://github.com/acme/widgets/issues/2")

    assert pull.is_pull_request is True
    assert issue.is_pull_request is False
    assert pull.has_label("kind/bug") is True


def test_release_window_repo_ref() -> None:
    """The repository reference combines owner and name."""
    assert ReleaseWindow(owner="acme", repo="widgets", branch="main", tag="v1.0.0").repo_ref == "acme/widgets"
