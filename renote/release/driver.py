"""Orchestrates the changelog and release workflows."""

import time
from pathlib import Path

import structlog

from renote.configuration.models import ChangelogConfig, GitHubConfig, ReleaseConfig
from renote.git.repository import GitRepository
from renote.github.adapter import GitHubKitAdapter
from renote.utils.github import clone_url_for_repository
from renote.utils.helpers import title_case

from .changelog import fan_out_reports, generate_repo_report
from .issues import IssueAggregator, apply_filter_hook
from .models import ReleaseWindow, SectionRules
from .notes import compose_release_note

logger: structlog.stdlib.BoundLogger = structlog.get_logger(__name__)


def create_adapter(github: GitHubConfig, owner: str, repo: str) -> GitHubKitAdapter:
    """Create the GitHub adapter for a repository from the resolved configuration."""
    return GitHubKitAdapter.create(
        owner=owner,
        repo_name=repo,
        github_auth_type=github.github_authentication_type,
        github_pat_token=github.github_pat_token,
        github_app_id=github.github_app_id,
        github_app_private_key_path=github.github_app_private_key_path,
        github_app_installation_id=github.github_app_installation_id,
        github_api_url=github.github_api_url,
    )


def read_note(value: str | None) -> str:
    """Read a pre/post note.

    A path to an existing file is read; any other value is used as the note
    text itself.
    """
    if not value:
        return ""
    path = Path(value)
    if path.is_file():
        logger.info("Reading note file", path=str(path))
        return path.read_text(encoding="utf-8")
    logger.warning("Note is not a readable file, using it as literal text", note=value)
    return value


async def run_changelog_workflow(config: ChangelogConfig) -> str:
    """Generate one changelog document covering every configured repository."""
    if not config.repos:
        raise ValueError("At least one repository is required to generate a changelog.")

    base_adapter = create_adapter(config.github, config.owner, config.repos[0])

    reports = (
        generate_repo_report(
            ReleaseWindow(
                owner=config.owner,
                repo=repo,
                branch=config.branch,
                tag=config.tag,
                previous_tag=config.previous_tag,
            ),
            GitRepository(
                owner=config.owner,
                repo=repo,
                work_dir=config.work_dir,
                clone_url=clone_url_for_repository(config.github.github_api_url, config.owner, repo),
            ),
            base_adapter.with_repository(repo),
            since_days=config.since_days,
            public_only=config.public_only,
            fold=config.fold,
        )
        for repo in config.repos
    )

    start_time = time.time()
    logger.info("Generating changelog", owner=config.owner, repos=config.repos, branch=config.branch, tag=config.tag)
    changelog = await fan_out_reports(reports)
    logger.info("Generated changelog", repo_count=len(config.repos), duration=round(time.time() - start_time, 2))
    return changelog


async def run_release_workflow(config: ReleaseConfig) -> str:
    """Generate the release note of one repository, and publish it when asked to."""
    adapter = create_adapter(config.github, config.owner, config.repo)

    aggregator = IssueAggregator(adapter, repo=adapter.repo_ref)
    registry, issues = await aggregator.search(
        labels=config.labels,
        milestone_title=config.milestone,
        exclude_labels=config.exclude_labels,
        since_days=config.since_days,
    )
    registry, issues = await apply_filter_hook(config.filter_issue_hook, registry, issues, repo=adapter.repo_ref)

    logger.info("Creating release note", repo=adapter.repo_ref, tag=config.tag)
    note = compose_release_note(
        registry,
        issues,
        SectionRules.from_labels(config.section_labels),
        extra_contributors=config.contributors,
        pre_note=read_note(config.pre_note),
        post_note=read_note(config.post_note),
    )

    if config.publish:
        title = config.note_title or f"{title_case(config.repo)} {config.tag}"
        await adapter.create_release(
            tag_name=config.tag,
            name=title,
            body=note,
            target_commitish=config.branch,
            draft=config.draft,
            prerelease=config.pre_release,
        )
    else:
        logger.info("Publishing disabled, release not created", repo=adapter.repo_ref, tag=config.tag)

    return note
