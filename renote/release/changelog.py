"""Changelog composition for one or many repositories."""

import asyncio
from collections.abc import Coroutine, Iterable, Sequence
from datetime import datetime
from typing import Any, Protocol

import structlog

from renote.utils.constants import (
    CHANGELOG_COMMIT_TEMPLATE,
    CHANGELOG_FOLDED_TEMPLATE,
    CHANGELOG_HEADING_TEMPLATE,
    DEFAULT_SINCE_DAYS,
)
from renote.utils.templates import construct_jinja2_template_from_string, render_template

from .exceptions import UpstreamError
from .models import CommitRecord, ReleaseWindow
from .scanner import CommitHistory, CommitScanner, resolve_since
from .tags import previous_tag

logger = structlog.get_logger(__name__)

_commit_template = construct_jinja2_template_from_string(CHANGELOG_COMMIT_TEMPLATE)
_folded_template = construct_jinja2_template_from_string(CHANGELOG_FOLDED_TEMPLATE)
_heading_template = construct_jinja2_template_from_string(CHANGELOG_HEADING_TEMPLATE)


class VersionControl(Protocol):
    """Local clone of a repository, as used by the changelog workflow."""

    async def sync(self, branch: str) -> None: ...

    async def tag_list(self) -> list[str]: ...

    async def resolve_ref(self, ref: str) -> str: ...

    async def branch_head(self, branch: str) -> str: ...

    async def commit_time(self, ref: str) -> datetime: ...


def compose_changelog(repo_name: str, commits: Sequence[CommitRecord], fold: bool = False) -> str:
    """Render the changelog fragment of one repository.

    Each commit becomes one bullet linking its short hash. The fragment is
    wrapped in a collapsible block when `fold` is set, otherwise it gets a
    level-3 heading. An empty commit list still produces the wrapper.
    """
    body = "".join(
        render_template(_commit_template, subject=commit.subject, short_sha=commit.short_sha, url=commit.url, author=commit.author)
        for commit in commits
    )
    template = _folded_template if fold else _heading_template
    return render_template(template, repo=repo_name, body=body)


async def generate_repo_report(
    window: ReleaseWindow,
    repository: VersionControl,
    history: CommitHistory,
    since_days: int = DEFAULT_SINCE_DAYS,
    public_only: bool = False,
    fold: bool = False,
) -> str:
    """Build the changelog fragment of one repository.

    The previous tag is derived from the repository's tags when the window
    does not name one. An empty tag stands for the head of the branch.
    """
    log = logger.bind(repo=window.repo_ref, branch=window.branch, tag=window.tag)

    await repository.sync(window.branch)

    previous = window.previous_tag
    if not previous:
        previous = previous_tag(await repository.tag_list(), window.tag, public_only=public_only, repo=window.repo_ref)
        log.info("Derived previous tag", previous_tag=previous, public_only=public_only)

    tag_sha = await repository.resolve_ref(window.tag) if window.tag else await repository.branch_head(window.branch)
    previous_sha = await repository.resolve_ref(previous)

    try:
        previous_time: datetime | None = await repository.commit_time(previous)
    except (UpstreamError, ValueError) as exc:
        log.warning("Could not read previous tag time, using look-back window", previous_tag=previous, since_days=since_days, error=str(exc))
        previous_time = None

    since = resolve_since(previous_time, since_days)
    scan = await CommitScanner(history, repo=window.repo_ref).scan(window.branch, tag_sha, previous_sha, since)
    return compose_changelog(window.repo_ref, scan.commits, fold=fold)


async def fan_out_reports(reports: Iterable[Coroutine[Any, Any, str]]) -> str:
    """Run one report task per repository and concatenate the fragments.

    Fragments are joined in completion order, which is not stable across
    runs. The first failing task aborts the whole batch: its error is raised
    unchanged, and every other task is cancelled and awaited before returning,
    so no partial document is ever produced.
    """
    tasks = [asyncio.ensure_future(report) for report in reports]
    fragments: list[str] = []
    try:
        for next_done in asyncio.as_completed(tasks):
            fragments.append(await next_done)
    except Exception as exc:
        logger.error("Repository report failed, cancelling remaining reports", error=str(exc), pending=sum(not task.done() for task in tasks))
        raise
    finally:
        for task in tasks:
            if not task.done():
                task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)
    return "".join(fragments)
