"""GitHub client adapter for the githubkit library."""

from datetime import datetime
from functools import wraps
from pathlib import Path
from typing import Any, Awaitable, Callable, Self, TypeVar

import structlog
from githubkit import Response
from githubkit.exception import GitHubException, RequestFailed
from githubkit.versions.latest.models import Issue, Milestone, Release

from renote.configuration.models import GitHubAuthenticationType
from renote.release.exceptions import UpstreamError
from renote.release.models import CommitRecord, IssueRecord
from renote.utils.constants import COMMITS_PER_PAGE, ISSUES_PER_PAGE

from .abc import GitHubClientBase
from .client import GitHubClient, get_github_client

logger = structlog.get_logger(__name__)

F = TypeVar("F", bound=Callable[..., Awaitable[Any]])


def handle_github_errors(func: F) -> F:
    """Decorator translating githubkit failures into UpstreamError, logging the details."""

    @wraps(func)
    async def wrapper(self: "GitHubKitAdapter", *args: Any, **kwargs: Any) -> Any:
        try:
            return await func(self, *args, **kwargs)
        except GitHubException as exc:
            status_code = exc.response.status_code if isinstance(exc, RequestFailed) else None
            logger.error(
                "GitHub request failed",
                function=func.__name__,
                repo=self.repo_ref,
                status_code=status_code,
                error=str(exc),
            )
            raise UpstreamError(f"GitHub request failed: {exc}", repo=self.repo_ref, operation=func.__name__) from exc

    return wrapper  # type: ignore


def _label_name(label: Any) -> str:
    """Labels come back either as plain strings or as label objects."""
    if isinstance(label, str):
        return label
    return getattr(label, "name", None) or ""


def issue_record_from_model(issue: Issue) -> IssueRecord:
    """Convert a githubkit issue model into an IssueRecord."""
    assignees = issue.assignees if isinstance(issue.assignees, list) else []
    closed_at = issue.closed_at if isinstance(issue.closed_at, datetime) else None
    return IssueRecord(
        number=issue.number,
        title=issue.title,
        url=str(issue.html_url),
        labels=tuple(name for name in (_label_name(label) for label in issue.labels or []) if name),
        assignees=tuple(assignee.login for assignee in assignees if assignee is not None),
        closed_at=closed_at,
    )


class GitHubKitAdapter(GitHubClientBase):
    """GitHub client adapter for the githubkit library."""

    def __init__(self, client: GitHubClient, owner: str, repo_name: str) -> None:
        """Initialize the GitHub client adapter with an already-initialized client."""
        self.client = client
        self.owner = owner
        self.repo_name = repo_name

    @property
    def repo_ref(self) -> str:
        """Return the repository in 'owner/repo' format."""
        return f"{self.owner}/{self.repo_name}"

    @classmethod
    def create(
        cls,
        owner: str,
        repo_name: str,
        github_auth_type: GitHubAuthenticationType,
        github_pat_token: str | None = None,
        github_app_id: int | None = None,
        github_app_private_key_path: Path | None = None,
        github_app_installation_id: int | None = None,
        github_api_url: str = "https://api.github.com",
    ) -> Self:
        """Create a new GitHub client adapter.

        Args:
            owner: Repository owner
            repo_name: Repository name
            github_auth_type: Type of authentication (PAT or APP)
            github_pat_token: Personal access token (required for PAT auth)
            github_app_id: GitHub App ID (required for APP auth)
            github_app_private_key_path: Path to private key file (required for APP auth)
            github_app_installation_id: Installation ID (required for APP auth)
            github_api_url: GitHub API URL (defaults to https://api.github.com)

        Returns:
            Configured GitHubKitAdapter instance
        """
        logger.info("Creating client for GitHub instance", github_api_url=github_api_url, owner=owner, repo_name=repo_name)
        client = get_github_client(
            github_auth_type=github_auth_type,
            github_api_url=github_api_url,
            github_pat_token=github_pat_token,
            github_app_id=github_app_id,
            github_app_private_key_path=github_app_private_key_path,
            github_app_installation_id=github_app_installation_id,
        )
        return cls(client, owner, repo_name)

    def with_repository(self, repo_name: str, owner: str | None = None) -> "GitHubKitAdapter":
        """Return an adapter for another repository sharing the same client."""
        return GitHubKitAdapter(self.client, owner or self.owner, repo_name)

    # Commit history
    @handle_github_errors
    async def list_commits_page(self, sha: str, since: datetime, page: int, per_page: int = COMMITS_PER_PAGE) -> list[CommitRecord]:
        """List one page of commits reachable from `sha`, newest first.

        The raw JSON is used instead of the parsed models: only a handful of
        fields are needed and the author may be null for unlinked emails.
        """
        logger.debug("Fetching commits page", repo=self.repo_ref, sha=sha, since=since.isoformat(), page=page)
        response = await self.client.rest.repos.async_list_commits(
            owner=self.owner,
            repo=self.repo_name,
            sha=sha,
            since=since,
            per_page=per_page,
            page=page,
        )
        commits: list[dict[str, Any]] = response.json()
        return [CommitRecord.from_api(commit) for commit in commits]

    # Issue tracking
    @handle_github_errors
    async def list_milestones(self, state: str = "all") -> list[Milestone]:
        """List all milestones of the repository, handling pagination."""
        all_milestones: list[Milestone] = []
        page: int = 1
        while True:
            response: Response[list[Milestone]] = await self.client.rest.issues.async_list_milestones(
                owner=self.owner,
                repo=self.repo_name,
                state=state,  # type: ignore[arg-type]
                per_page=ISSUES_PER_PAGE,
                page=page,
            )
            milestones: list[Milestone] = response.parsed_data
            if not milestones:
                break
            all_milestones.extend(milestones)
            if len(milestones) < ISSUES_PER_PAGE:
                break
            page += 1
        logger.debug("Fetched milestones", repo=self.repo_ref, total_milestones=len(all_milestones))
        return all_milestones

    @handle_github_errors
    async def list_issues_page(
        self,
        page: int,
        since: datetime,
        labels: list[str] | None = None,
        milestone: int | None = None,
        state: str = "all",
        per_page: int = ISSUES_PER_PAGE,
    ) -> list[IssueRecord]:
        """List one page of issues (pull requests included), most recently updated first."""
        params: dict[str, Any] = {}
        if labels:
            params["labels"] = ",".join(labels)
        if milestone is not None:
            params["milestone"] = str(milestone)
        logger.debug("Fetching issues page", repo=self.repo_ref, page=page, filters=params)
        response: Response[list[Issue]] = await self.client.rest.issues.async_list_for_repo(
            owner=self.owner,
            repo=self.repo_name,
            state=state,  # type: ignore[arg-type]
            sort="updated",
            since=since,
            per_page=per_page,
            page=page,
            **params,
        )
        return [issue_record_from_model(issue) for issue in response.parsed_data]

    # Releases
    @handle_github_errors
    async def create_release(
        self,
        tag_name: str,
        name: str,
        body: str,
        target_commitish: str | None = None,
        draft: bool = False,
        prerelease: bool = False,
    ) -> Release:
        """Create a release for an existing tag."""
        params: dict[str, Any] = {"target_commitish": target_commitish} if target_commitish else {}
        response: Response[Release] = await self.client.rest.repos.async_create_release(
            owner=self.owner,
            repo=self.repo_name,
            tag_name=tag_name,
            name=name,
            body=body,
            draft=draft,
            prerelease=prerelease,
            **params,
        )
        release = response.parsed_data
        logger.info("Created release", repo=self.repo_ref, tag_name=tag_name, release_url=release.html_url)
        return release
