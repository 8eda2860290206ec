"""Base ABC for GitHub clients."""

from abc import ABC, abstractmethod
from datetime import datetime
from typing import Any

from renote.release.models import CommitRecord, IssueRecord
from renote.utils.constants import COMMITS_PER_PAGE, ISSUES_PER_PAGE


class GitHubClientBase(ABC):
    """Base ABC for GitHub clients."""

    # Commit history
    @abstractmethod
    async def list_commits_page(self, sha: str, since: datetime, page: int, per_page: int = COMMITS_PER_PAGE) -> list[CommitRecord]:
        """List one page of commits reachable from a branch or commit."""
        pass

    # Issue tracking
    @abstractmethod
    async def list_milestones(self, state: str = "all") -> list[Any]:
        """List the milestones of the repository."""
        pass

    @abstractmethod
    async def list_issues_page(
        self,
        page: int,
        since: datetime,
        labels: list[str] | None = None,
        milestone: int | None = None,
        state: str = "all",
        per_page: int = ISSUES_PER_PAGE,
    ) -> list[IssueRecord]:
        """List one page of issues filtered by labels or milestone."""
        pass

    # Releases
    @abstractmethod
    async def create_release(
        self,
        tag_name: str,
        name: str,
        body: str,
        target_commitish: str | None = None,
        draft: bool = False,
        prerelease: bool = False,
    ) -> Any:
        """Create a release for an existing tag."""
        pass
