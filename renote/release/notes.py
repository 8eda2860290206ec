"""Release note composition from aggregated issues."""

from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field

import structlog

from renote.utils.constants import RELEASE_NOTE_CONTRIBUTORS_TEMPLATE, RELEASE_NOTE_SECTION_TEMPLATE
from renote.utils.helpers import title_case
from renote.utils.templates import construct_jinja2_template_from_string, render_template

from .models import IssueRecord, IssueRegistry, SectionRules

logger = structlog.get_logger(__name__)

_section_template = construct_jinja2_template_from_string(RELEASE_NOTE_SECTION_TEMPLATE)
_contributors_template = construct_jinja2_template_from_string(RELEASE_NOTE_CONTRIBUTORS_TEMPLATE)


@dataclass
class ReleaseNote:
    """Issues filed into sections, plus the people who worked on them.

    Every section key stays present even when no issue was filed into it;
    empty sections are only left out when rendering.
    """

    sections: dict[str, list[IssueRecord]] = field(default_factory=dict)
    contributors: list[str] = field(default_factory=list)
    pre_note: str = ""
    post_note: str = ""

    @property
    def filed(self) -> int:
        """Number of issues filed into sections."""
        return sum(len(issues) for issues in self.sections.values())

    def render(self) -> str:
        """Render the note: pre note, sections, post note, then contributors."""
        note = self.pre_note
        for key, issues in self.sections.items():
            # Pull requests count toward contributors but are not listed.
            listed = [issue for issue in issues if not issue.is_pull_request]
            if not listed:
                continue
            note += render_template(_section_template, title=title_case(key), issues=listed)
        note += self.post_note
        note += render_template(_contributors_template, contributors=self.contributors)
        return note


def build_release_note(
    registry: IssueRegistry,
    issues: Sequence[IssueRecord],
    section_rules: SectionRules,
    extra_contributors: Iterable[str] = (),
    pre_note: str = "",
    post_note: str = "",
) -> ReleaseNote:
    """File issues into sections and collect contributors.

    Issues are taken in order. An issue is filed only if its number can be
    claimed from `registry`, so a duplicate is filed once; it goes into the
    section of the first rule whose label it carries, else into misc.
    """
    sections: dict[str, list[IssueRecord]] = {key: [] for key in section_rules.keys()}
    contributors: set[str] = {contributor for contributor in extra_contributors if contributor}

    for issue in issues:
        if not registry.claim(issue.number):
            continue
        contributors.update(issue.assignees)
        sections[section_rules.section_for(issue.labels)].append(issue)

    note = ReleaseNote(sections=sections, contributors=sorted(contributors), pre_note=pre_note, post_note=post_note)
    logger.info(
        "Composed release note",
        filed=note.filed,
        sections={key: len(filed) for key, filed in sections.items()},
        contributors=len(note.contributors),
    )
    return note


def compose_release_note(
    registry: IssueRegistry,
    issues: Sequence[IssueRecord],
    section_rules: SectionRules,
    extra_contributors: Iterable[str] = (),
    pre_note: str = "",
    post_note: str = "",
) -> str:
    """Build and render a release note in one step."""
    return build_release_note(registry, issues, section_rules, extra_contributors, pre_note, post_note).render()
