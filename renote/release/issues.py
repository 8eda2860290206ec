"""Issue aggregation for release notes."""

import asyncio
import shutil
from collections.abc import Sequence
from datetime import datetime, timedelta, timezone
from typing import Any, Protocol

import structlog

from renote.utils.constants import DEFAULT_SINCE_DAYS

from .exceptions import HookFailureError, MilestoneNotFoundError
from .models import IssueRecord, IssueRegistry

logger = structlog.get_logger(__name__)


class IssueTracker(Protocol):
    """Issue tracker of one repository."""

    async def list_milestones(self, state: str = "all") -> list[Any]: ...

    async def list_issues_page(
        self,
        page: int,
        since: datetime,
        labels: list[str] | None = None,
        milestone: int | None = None,
        state: str = "all",
    ) -> list[IssueRecord]: ...


class IssueAggregator:
    """Collects the issues that belong in a release note.

    Issues are gathered by two independent searches, one by label set and one
    by milestone. An issue found by both appears twice in the returned list
    but only once in the returned registry; filing into sections claims from
    the registry, which drops the duplicate.
    """

    def __init__(self, tracker: IssueTracker, repo: str | None = None) -> None:
        """Initialize with the issue tracker to search."""
        self.tracker = tracker
        self.repo = repo

    async def resolve_milestone(self, milestone_title: str) -> Any:
        """Find a milestone by title."""
        milestones = await self.tracker.list_milestones(state="all")
        for milestone in milestones:
            if milestone.title == milestone_title:
                return milestone
        raise MilestoneNotFoundError(f"{milestone_title} milestone not found", repo=self.repo, operation="resolve_milestone")

    async def search(
        self,
        labels: Sequence[str],
        milestone_title: str,
        exclude_labels: Sequence[str] = (),
        since_days: int = DEFAULT_SINCE_DAYS,
        now: datetime | None = None,
    ) -> tuple[IssueRegistry, list[IssueRecord]]:
        """Search issues by labels and by milestone.

        Args:
            labels: Labels an issue must all carry to be found by the label
                search. The label search is skipped when empty.
            milestone_title: Title of the release milestone.
            exclude_labels: Issues carrying any of these labels are dropped.
            since_days: Issues not updated, or closed, within this many days
                are dropped.
            now: Reference time, defaults to the current time.

        Returns:
            The registry of found issue numbers and the found issues in search
            order, possibly with duplicates.

        Raises:
            MilestoneNotFoundError: If no milestone has the given title.
        """
        cutoff = (now or datetime.now(timezone.utc)) - timedelta(days=since_days)
        milestone = await self.resolve_milestone(milestone_title)
        logger.info("Searching issues", repo=self.repo, milestone=milestone.title, labels=list(labels), since=cutoff.isoformat())

        searches: list[tuple[str, dict[str, Any]]] = []
        if labels:
            searches.append(("label", {"labels": list(labels)}))
        searches.append(("milestone", {"milestone": milestone.number}))

        registry = IssueRegistry()
        issues: list[IssueRecord] = []
        excluded = set(exclude_labels)

        for search_type, filters in searches:
            page = 1
            while True:
                results = await self.tracker.list_issues_page(page=page, since=cutoff, state="all", **filters)
                if not results:
                    break
                for issue in results:
                    if issue.closed_at is not None and issue.closed_at < cutoff:
                        continue
                    if excluded.intersection(issue.labels):
                        continue
                    registry.add(issue.number)
                    issues.append(issue)
                page += 1
            logger.debug("Finished issue search", repo=self.repo, search_type=search_type, pages=page - 1, total_issues=len(issues))

        logger.info("Found issues", repo=self.repo, unique_issues=len(registry), total_issues=len(issues))
        return registry, issues


async def apply_filter_hook(
    hook: str | None,
    registry: IssueRegistry,
    issues: Sequence[IssueRecord],
    repo: str | None = None,
) -> tuple[IssueRegistry, list[IssueRecord]]:
    """Narrow the found issues with an external filter program.

    The candidate issue numbers are written to the hook's stdin, one per line;
    every non-blank line it prints is the number of an issue to retain. A
    missing or non-executable hook retains everything.

    Raises:
        HookFailureError: If the hook cannot be started, exits with a non-zero
            status, or prints something that is not an issue number.
    """
    if not hook:
        return registry, list(issues)

    executable = shutil.which(hook)
    if executable is None:
        logger.warning("Filter hook not found or not executable, retaining all issues", repo=repo, hook=hook)
        return registry, list(issues)

    logger.info("Filtering issues by hook", repo=repo, hook=executable, candidates=len(registry))
    candidates = "".join(f"{number}\n" for number in registry)
    try:
        process = await asyncio.create_subprocess_exec(
            executable,
            stdin=asyncio.subprocess.PIPE,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
        )
    except OSError as exc:
        raise HookFailureError(f"filter hook {hook} could not be run: {exc}", repo=repo, operation="filter_hook") from exc
    try:
        stdout, stderr = await process.communicate(candidates.encode("utf-8"))
    except asyncio.CancelledError:
        process.kill()
        await process.wait()
        raise

    if process.returncode != 0:
        raise HookFailureError(
            f"filter hook {hook} exited with status {process.returncode}: {stderr.decode('utf-8', errors='replace').strip()}",
            repo=repo,
            operation="filter_hook",
        )

    retained: set[int] = set()
    for line in stdout.decode("utf-8", errors="replace").splitlines():
        line = line.strip().lstrip("#")
        if not line:
            continue
        try:
            retained.add(int(line))
        except ValueError as exc:
            raise HookFailureError(f"filter hook {hook} printed an invalid issue number: {line!r}", repo=repo, operation="filter_hook") from exc

    filtered_registry = registry.copy()
    filtered_registry.retain(retained)
    filtered_issues = [issue for issue in issues if issue.number in retained]
    logger.info("Filtered issues by hook", repo=repo, retained=len(filtered_registry), dropped=len(registry) - len(filtered_registry))
    return filtered_registry, filtered_issues
