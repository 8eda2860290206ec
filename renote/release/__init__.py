"""Release artifact synthesis: changelogs and release notes."""

from .changelog import compose_changelog, fan_out_reports, generate_repo_report
from .exceptions import (
    GitCommandError,
    HookFailureError,
    MilestoneNotFoundError,
    NotFoundError,
    ReleaseError,
    TagNotFoundError,
    UpstreamError,
)
from .issues import IssueAggregator, apply_filter_hook
from .models import (
    CommitRecord,
    CommitScan,
    IssueRecord,
    IssueRegistry,
    ReleaseWindow,
    SectionRule,
    SectionRules,
)
from .notes import ReleaseNote, build_release_note, compose_release_note
from .scanner import CommitScanner, resolve_since
from .tags import is_public_release, previous_tag

__all__ = [
    "ReleaseError",
    "NotFoundError",
    "TagNotFoundError",
    "MilestoneNotFoundError",
    "UpstreamError",
    "GitCommandError",
    "HookFailureError",
    "CommitRecord",
    "CommitScan",
    "IssueRecord",
    "IssueRegistry",
    "ReleaseWindow",
    "SectionRule",
    "SectionRules",
    "ReleaseNote",
    "CommitScanner",
    "IssueAggregator",
    "resolve_since",
    "is_public_release",
    "previous_tag",
    "compose_changelog",
    "generate_repo_report",
    "fan_out_reports",
    "apply_filter_hook",
    "build_release_note",
    "compose_release_note",
]
