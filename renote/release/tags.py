"""Resolution of the tag that opens a release window."""

from collections.abc import Iterable

import semver
import structlog

from .exceptions import TagNotFoundError

logger = structlog.get_logger(__name__)


def is_public_release(tag: str) -> bool:
    """Check whether a tag names a public (non pre-release) semantic version.

    A single leading 'v' is ignored. Names that are not valid semantic
    versions are never public releases.
    """
    name = tag[1:] if tag.startswith("v") else tag
    try:
        parsed = semver.Version.parse(name)
    except (ValueError, TypeError):
        logger.debug("Tag is not a valid semantic version", tag=tag)
        return False
    return not parsed.prerelease


def previous_tag(
    tags_by_recency: Iterable[str],
    reference_tag: str | None = None,
    public_only: bool = False,
    repo: str | None = None,
) -> str:
    """Find the tag that marks the start of a release window.

    Args:
        tags_by_recency: Tag names ordered newest first.
        reference_tag: The tag being released. Tags up to and including it are
            skipped. When empty, the newest acceptable tag is returned.
        public_only: Only accept tags that are public semantic versions.
        repo: Repository reference, used for error reporting.

    Returns:
        The name of the previous tag.

    Raises:
        TagNotFoundError: If no tag satisfies the rule.
    """
    reference_seen = not reference_tag
    for tag in tags_by_recency:
        if not reference_seen:
            reference_seen = tag == reference_tag
            continue
        if public_only and not is_public_release(tag):
            continue
        logger.debug("Resolved previous tag", repo=repo, reference_tag=reference_tag, previous_tag=tag, public_only=public_only)
        return tag

    if not reference_seen:
        raise TagNotFoundError(f"reference tag {reference_tag} not found", repo=repo, operation="previous_tag")
    qualifier = "public release " if public_only else ""
    raise TagNotFoundError(f"previous {qualifier}tag not found", repo=repo, operation="previous_tag")
