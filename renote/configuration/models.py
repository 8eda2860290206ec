"""Configuration models resolved from CLI arguments and environment variables."""

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path

from renote.utils.constants import DEFAULT_SINCE_DAYS, DEFAULT_WORK_DIR


class GitHubAuthenticationType(str, Enum):
    """Enum for GitHub authentication types."""

    PAT = "pat"
    APP = "app"


@dataclass
class GitHubConfig:
    """Connection settings shared by every command."""

    github_api_url: str
    github_authentication_type: GitHubAuthenticationType
    github_pat_token: str | None = None
    github_app_id: int | None = None
    github_app_private_key_path: Path | None = None
    github_app_installation_id: int | None = None


@dataclass
class ChangelogConfig:
    """Configuration for the changelog command."""

    github: GitHubConfig
    owner: str
    repos: list[str]
    branch: str
    tag: str
    previous_tag: str | None = None
    since_days: int = DEFAULT_SINCE_DAYS
    public_only: bool = False
    fold: bool = False
    work_dir: Path = Path(DEFAULT_WORK_DIR)


@dataclass
class ReleaseConfig:
    """Configuration for the release command."""

    github: GitHubConfig
    owner: str
    repo: str
    tag: str
    milestone: str
    branch: str
    labels: list[str] = field(default_factory=list)
    exclude_labels: list[str] = field(default_factory=list)
    section_labels: list[str] = field(default_factory=list)
    contributors: list[str] = field(default_factory=list)
    pre_note: str | None = None
    post_note: str | None = None
    since_days: int = DEFAULT_SINCE_DAYS
    filter_issue_hook: str | None = None
    publish: bool = False
    note_title: str | None = None
    draft: bool = False
    pre_release: bool = False
