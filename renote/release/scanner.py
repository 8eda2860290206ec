"""Paginated commit history scanning between two tags."""

from datetime import datetime, timedelta, timezone
from typing import Protocol

import structlog

from renote.utils.constants import COMMITS_PER_PAGE

from .exceptions import UpstreamError
from .models import CommitRecord, CommitScan

logger = structlog.get_logger(__name__)


class CommitHistory(Protocol):
    """Source of paginated commit history for one repository."""

    async def list_commits_page(self, sha: str, since: datetime, page: int, per_page: int = COMMITS_PER_PAGE) -> list[CommitRecord]:
        """Return one page of commits reachable from `sha`, newest first."""
        ...


def resolve_since(previous_tag_time: datetime | None, since_days: int, now: datetime | None = None) -> datetime:
    """Lower time bound of the history query.

    The previous tag's commit time when it is known, otherwise `since_days`
    before now.
    """
    if previous_tag_time is not None:
        return previous_tag_time
    now = now or datetime.now(timezone.utc)
    return now - timedelta(days=since_days)


class CommitScanner:
    """Walks a branch's remote history and collects the commits of a release window.

    The window is the open interval (previous tag, tag]: recording starts at
    the tag commit and stops right before the previous tag commit. Commits are
    matched by hash prefix so that abbreviated hashes work as well.
    """

    def __init__(self, history: CommitHistory, repo: str | None = None, per_page: int = COMMITS_PER_PAGE) -> None:
        """Initialize with the commit history source."""
        self.history = history
        self.repo = repo
        self.per_page = per_page

    async def scan(self, branch: str, tag_sha: str, previous_tag_sha: str | None, since: datetime) -> CommitScan:
        """Collect the commits between `previous_tag_sha` (exclusive) and `tag_sha` (inclusive).

        Scanning stops at the previous tag commit, on an empty page, or when a
        page request fails. The last two outcomes leave the scan incomplete,
        which is logged but not raised: whatever was collected is returned.
        """
        result = CommitScan()
        page = 1
        reason = "history exhausted"

        while True:
            try:
                commits = await self.history.list_commits_page(sha=branch, since=since, page=page, per_page=self.per_page)
            except UpstreamError as exc:
                reason = f"page request failed: {exc}"
                break
            result.pages = page
            page += 1

            if not commits:
                break

            for commit in commits:
                if not result.tag_found:
                    if not commit.sha.startswith(tag_sha):
                        continue
                    result.tag_found = True
                    logger.debug("Found tag commit", repo=self.repo, sha=commit.sha, page=result.pages)
                if previous_tag_sha and commit.sha.startswith(previous_tag_sha):
                    result.boundary_found = True
                    break
                result.commits.append(commit)

            if result.boundary_found:
                break

        if result.complete:
            logger.info("Scanned commit history", repo=self.repo, branch=branch, pages=result.pages, commits=len(result.commits))
        else:
            logger.warning(
                "Previous tag boundary not reached, changelog may be incomplete",
                repo=self.repo,
                branch=branch,
                reason=reason,
                tag_found=result.tag_found,
                pages=result.pages,
                commits=len(result.commits),
            )
        return result
