"""Unit tests for the IssueAggregator class and the issue filter hook."""

import asyncio
from datetime import datetime, timedelta
from pathlib import Path
from types import SimpleNamespace
from typing import Any, Callable

import pytest

from renote.release.exceptions import HookFailureError, MilestoneNotFoundError
from renote.release.issues import IssueAggregator, apply_filter_hook
from renote.release.models import IssueRecord, IssueRegistry


class FakeTracker:
    """Serves issue pages per search pass and records the requests made."""

    def __init__(self, label_pages: list[list[IssueRecord]], milestone_pages: list[list[IssueRecord]]) -> None:
        self.milestones = [SimpleNamespace(title="v1.0", number=3), SimpleNamespace(title="v2.0", number=7)]
        self.label_pages = label_pages
        self.milestone_pages = milestone_pages
        self.requests: list[dict[str, Any]] = []

    async def list_milestones(self, state: str = "all") -> list[Any]:
        assert state == "all"
        return self.milestones

    async def list_issues_page(
        self,
        page: int,
        since: datetime,
        labels: list[str] | None = None,
        milestone: int | None = None,
        state: str = "all",
    ) -> list[IssueRecord]:
        self.requests.append({"page": page, "since": since, "labels": labels, "milestone": milestone, "state": state})
        pages = self.label_pages if labels else self.milestone_pages
        return pages[page - 1] if page <= len(pages) else []


@pytest.mark.asyncio
async def test_resolve_milestone_by_title() -> None:
    """The milestone with the matching title is returned."""
    aggregator = IssueAggregator(FakeTracker([], []))
    milestone = await aggregator.resolve_milestone("v2.0")
    assert milestone.number == 7


@pytest.mark.asyncio
async def test_search_unknown_milestone(now: datetime) -> None:
    """An unknown milestone title fails the search."""
    aggregator = IssueAggregator(FakeTracker([], []), repo="acme/widgets")

    with pytest.raises(MilestoneNotFoundError) as exc_info:
        await aggregator.search(labels=["kind/bug"], milestone_title="v9.9", now=now)

    assert "v9.9 milestone not found" in str(exc_info.value)
    assert exc_info.value.repo == "acme/widgets"


@pytest.mark.asyncio
async def test_search_deduplicates_across_passes(now: datetime, make_issue: Callable[..., IssueRecord]) -> None:
    """An issue found by both passes is listed twice but registered once."""
    issue = make_issue(42)
    tracker = FakeTracker(label_pages=[[issue]], milestone_pages=[[issue, make_issue(43)]])

    registry, issues = await IssueAggregator(tracker).search(labels=["kind/bug"], milestone_title="v2.0", now=now)

    assert [found.number for found in issues] == [42, 42, 43]
    assert list(registry) == [42, 43]


@pytest.mark.asyncio
async def test_search_passes_filters_and_cutoff(now: datetime, make_issue: Callable[..., IssueRecord]) -> None:
    """Both passes query every state since the cutoff, with their own filter."""
    tracker = FakeTracker(label_pages=[[make_issue(1)], [make_issue(2)]], milestone_pages=[[make_issue(3)]])

    await IssueAggregator(tracker).search(labels=["kind/bug", "area/storage"], milestone_title="v2.0", since_days=7, now=now)

    cutoff = now - timedelta(days=7)
    assert tracker.requests == [
        {"page": 1, "since": cutoff, "labels": ["kind/bug", "area/storage"], "milestone": None, "state": "all"},
        {"page": 2, "since": cutoff, "labels": ["kind/bug", "area/storage"], "milestone": None, "state": "all"},
        {"page": 3, "since": cutoff, "labels": ["kind/bug", "area/storage"], "milestone": None, "state": "all"},
        {"page": 1, "since": cutoff, "labels": None, "milestone": 7, "state": "all"},
        {"page": 2, "since": cutoff, "labels": None, "milestone": 7, "state": "all"},
    ]


@pytest.mark.asyncio
async def test_search_without_labels_skips_label_pass(now: datetime, make_issue: Callable[..., IssueRecord]) -> None:
    """Only the milestone pass runs when no labels are given."""
    tracker = FakeTracker(label_pages=[[make_issue(1)]], milestone_pages=[[make_issue(2)]])

    registry, issues = await IssueAggregator(tracker).search(labels=[], milestone_title="v1.0", now=now)

    assert [issue.number for issue in issues] == [2]
    assert all(request["milestone"] == 3 for request in tracker.requests)


@pytest.mark.asyncio
async def test_search_drops_issues_closed_before_cutoff(now: datetime, make_issue: Callable[..., IssueRecord]) -> None:
    """Issues closed before the look-back window are left out; open ones stay."""
    stale = make_issue(1, closed_at=now - timedelta(days=30))
    recent = make_issue(2, closed_at=now - timedelta(days=1))
    still_open = make_issue(3)
    tracker = FakeTracker(label_pages=[], milestone_pages=[[stale, recent, still_open]])

    registry, issues = await IssueAggregator(tracker).search(labels=[], milestone_title="v2.0", since_days=14, now=now)

    assert [issue.number for issue in issues] == [2, 3]
    assert 1 not in registry


@pytest.mark.asyncio
async def test_search_drops_excluded_labels(now: datetime, make_issue: Callable[..., IssueRecord]) -> None:
    """Issues carrying any excluded label are left out."""
    tracker = FakeTracker(
        label_pages=[],
        milestone_pages=[[make_issue(1, labels=("wontfix",)), make_issue(2, labels=("kind/bug",)), make_issue(3, labels=("kind/bug", "duplicate"))]],
    )

    registry, issues = await IssueAggregator(tracker).search(labels=[], milestone_title="v2.0", exclude_labels=["wontfix", "duplicate"], now=now)

    assert [issue.number for issue in issues] == [2]
    assert list(registry) == [2]


@pytest.mark.asyncio
async def test_search_keeps_paging_past_filtered_pages(now: datetime, make_issue: Callable[..., IssueRecord]) -> None:
    """A page whose issues are all filtered out does not end the pass."""
    tracker = FakeTracker(
        label_pages=[],
        milestone_pages=[[make_issue(1, labels=("wontfix",))], [make_issue(2)]],
    )

    registry, issues = await IssueAggregator(tracker).search(labels=[], milestone_title="v2.0", exclude_labels=["wontfix"], now=now)

    assert [issue.number for issue in issues] == [2]


def write_hook(tmp_path: Path, body: str) -> str:
    """Write an executable shell hook and return its path."""
    hook = tmp_path / "filter-hook"
    hook.write_text("#!/bin/sh\n" + body)
    hook.chmod(0o755)
    return str(hook)


@pytest.mark.asyncio
async def test_filter_hook_retains_printed_numbers(tmp_path: Path, make_issue: Callable[..., IssueRecord]) -> None:
    """Only the numbers the hook prints are retained."""
    hook = write_hook(tmp_path, "grep -v '^2$'\n")
    issues = [make_issue(1), make_issue(2), make_issue(3), make_issue(1)]
    registry = IssueRegistry([1, 2, 3])

    filtered_registry, filtered_issues = await apply_filter_hook(hook, registry, issues)

    assert list(filtered_registry) == [1, 3]
    assert [issue.number for issue in filtered_issues] == [1, 3, 1]
    assert list(registry) == [1, 2, 3]


@pytest.mark.asyncio
async def test_filter_hook_receives_sorted_candidates(tmp_path: Path, make_issue: Callable[..., IssueRecord]) -> None:
    """Candidates are written to stdin one per line in ascending order."""
    captured = tmp_path / "stdin.txt"
    hook = write_hook(tmp_path, f"tee {captured}\n")

    await apply_filter_hook(hook, IssueRegistry([30, 4, 12]), [make_issue(4), make_issue(12), make_issue(30)])

    assert captured.read_text() == "4\n12\n30\n"


@pytest.mark.asyncio
async def test_filter_hook_accepts_hash_prefixed_numbers(tmp_path: Path, make_issue: Callable[..., IssueRecord]) -> None:
    """Numbers may be printed as '#N' and surrounded by blank lines."""
    hook = write_hook(tmp_path, "cat > /dev/null\nprintf '\\n #5 \\n\\n'\n")

    registry, issues = await apply_filter_hook(hook, IssueRegistry([5, 6]), [make_issue(5), make_issue(6)])

    assert list(registry) == [5]
    assert [issue.number for issue in issues] == [5]


@pytest.mark.asyncio
async def test_filter_hook_missing_retains_everything(tmp_path: Path, make_issue: Callable[..., IssueRecord]) -> None:
    """A hook that does not exist is ignored."""
    registry = IssueRegistry([1, 2])
    issues = [make_issue(1), make_issue(2)]

    filtered_registry, filtered_issues = await apply_filter_hook(str(tmp_path / "missing-hook"), registry, issues)

    assert list(filtered_registry) == [1, 2]
    assert filtered_issues == issues


@pytest.mark.asyncio
async def test_filter_hook_not_executable_retains_everything(tmp_path: Path, make_issue: Callable[..., IssueRecord]) -> None:
    """A hook without the executable bit is ignored."""
    hook = tmp_path / "filter-hook"
    hook.write_text("#!/bin/sh\nexit 1\n")
    hook.chmod(0o644)

    filtered_registry, _ = await apply_filter_hook(str(hook), IssueRegistry([1]), [make_issue(1)])

    assert list(filtered_registry) == [1]


@pytest.mark.asyncio
async def test_filter_hook_no_hook(make_issue: Callable[..., IssueRecord]) -> None:
    """No configured hook retains everything."""
    filtered_registry, filtered_issues = await apply_filter_hook(None, IssueRegistry([1]), [make_issue(1)])

    assert list(filtered_registry) == [1]
    assert [issue.number for issue in filtered_issues] == [1]


@pytest.mark.asyncio
async def test_filter_hook_non_zero_exit(tmp_path: Path, make_issue: Callable[..., IssueRecord]) -> None:
    """A failing hook aborts the release note."""
    hook = write_hook(tmp_path, "cat > /dev/null\necho 'no access' >&2\nexit 3\n")

    with pytest.raises(HookFailureError) as exc_info:
        await apply_filter_hook(hook, IssueRegistry([1]), [make_issue(1)], repo="acme/widgets")

    assert "exited with status 3" in str(exc_info.value)
    assert "no access" in str(exc_info.value)


@pytest.mark.asyncio
async def test_filter_hook_invalid_output(tmp_path: Path, make_issue: Callable[..., IssueRecord]) -> None:
    """Output that is not an issue number aborts the release note."""
    hook = write_hook(tmp_path, "cat > /dev/null\necho 'issue one'\n")

    with pytest.raises(HookFailureError) as exc_info:
        await apply_filter_hook(hook, IssueRegistry([1]), [make_issue(1)])

    assert "invalid issue number" in str(exc_info.value)


@pytest.mark.asyncio
async def test_filter_hook_cancelled_kills_hook(tmp_path: Path, make_issue: Callable[..., IssueRecord]) -> None:
    """A cancelled filter step stops the hook instead of leaving it running."""
    marker = tmp_path / "hook-finished"
    hook = write_hook(tmp_path, f"cat > /dev/null\nsleep 1\ntouch {marker}\n")

    task = asyncio.create_task(apply_filter_hook(hook, IssueRegistry([1]), [make_issue(1)]))
    await asyncio.sleep(0.2)
    task.cancel()

    with pytest.raises(asyncio.CancelledError):
        await task

    await asyncio.sleep(1.5)
    assert not marker.exists()
