"""Data models for changelog and release note synthesis."""

from collections.abc import Iterable, Iterator, Sequence
from dataclasses import dataclass, field
from datetime import datetime

from renote.utils.constants import MISC_SECTION_KEY, SHORT_SHA_LENGTH


@dataclass(frozen=True)
class ReleaseWindow:
    """The tag range a changelog is generated for in one repository."""

    owner: str
    repo: str
    branch: str
    tag: str
    previous_tag: str | None = None

    @property
    def repo_ref(self) -> str:
        """Return the repository in 'owner/repo' format."""
        return f"{self.owner}/{self.repo}"


@dataclass(frozen=True)
class CommitRecord:
    """A single commit as reported by the commit history API."""

    sha: str
    subject: str
    url: str
    author: str | None = None

    @property
    def short_sha(self) -> str:
        """Return the abbreviated commit hash used in rendered output."""
        return self.sha[:SHORT_SHA_LENGTH]

    @classmethod
    def from_api(cls, data: dict) -> "CommitRecord":
        """Build a record from the raw JSON of the list-commits endpoint."""
        message: str = (data.get("commit") or {}).get("message") or ""
        lines = message.splitlines()
        author = data.get("author") or {}
        return cls(
            sha=data["sha"],
            subject=lines[0] if lines else "",
            url=data.get("html_url") or "",
            author=author.get("login") or None,
        )


@dataclass
class CommitScan:
    """Commits collected between a tag and its previous tag, newest first."""

    commits: list[CommitRecord] = field(default_factory=list)
    tag_found: bool = False
    boundary_found: bool = False
    pages: int = 0

    @property
    def complete(self) -> bool:
        """Whether the scan reached the previous tag boundary."""
        return self.boundary_found


@dataclass(frozen=True)
class IssueRecord:
    """An issue (or pull request) as returned by the issue tracker."""

    number: int
    title: str
    url: str
    labels: tuple[str, ...] = ()
    assignees: tuple[str, ...] = ()
    closed_at: datetime | None = None

    @property
    def is_pull_request(self) -> bool:
        """Pull requests share the issues API; they are told apart by URL."""
        return "pull" in self.url

    def has_label(self, label: str) -> bool:
        """Check whether the issue carries the given label."""
        return label in self.labels


class IssueRegistry:
    """Owned set of issue numbers that may still be filed into a release note.

    An issue can be claimed exactly once; a second claim for the same number
    returns False. This is what keeps an issue that surfaced in several search
    passes from being filed twice.
    """

    def __init__(self, numbers: Iterable[int] = ()) -> None:
        self._numbers: set[int] = set(numbers)

    def add(self, number: int) -> None:
        """Register an issue number."""
        self._numbers.add(number)

    def claim(self, number: int) -> bool:
        """Claim an issue number, returning True only the first time it is claimed."""
        if number not in self._numbers:
            return False
        self._numbers.remove(number)
        return True

    def retain(self, numbers: Iterable[int]) -> None:
        """Keep only the given issue numbers."""
        self._numbers &= set(numbers)

    def copy(self) -> "IssueRegistry":
        """Return an independent registry with the same numbers."""
        return IssueRegistry(self._numbers)

    def __contains__(self, number: object) -> bool:
        return number in self._numbers

    def __len__(self) -> int:
        return len(self._numbers)

    def __iter__(self) -> Iterator[int]:
        return iter(sorted(self._numbers))

    def __repr__(self) -> str:
        return f"IssueRegistry({sorted(self._numbers)!r})"


def section_key_for_label(label: str) -> str:
    """Derive a section key from a label ('area/storage' -> 'storage')."""
    return label.rsplit("/", 1)[-1]


@dataclass(frozen=True)
class SectionRule:
    """Files issues carrying `label` into the section named `key`."""

    label: str
    key: str


class SectionRules:
    """Ordered label-to-section rules, evaluated first match wins."""

    def __init__(self, rules: Sequence[SectionRule] = ()) -> None:
        self.rules: tuple[SectionRule, ...] = tuple(rules)

    @classmethod
    def from_labels(cls, labels: Iterable[str]) -> "SectionRules":
        """Build rules from section labels, keyed by their last path segment."""
        return cls([SectionRule(label=label, key=section_key_for_label(label)) for label in labels])

    def keys(self) -> list[str]:
        """Section keys in render order, with the misc section last."""
        keys = list(dict.fromkeys(rule.key for rule in self.rules))
        if MISC_SECTION_KEY not in keys:
            keys.append(MISC_SECTION_KEY)
        return keys

    def section_for(self, labels: Iterable[str]) -> str:
        """Return the section key of the first rule whose label is present."""
        present = set(labels)
        for rule in self.rules:
            if rule.label in present:
                return rule.key
        return MISC_SECTION_KEY

    def __len__(self) -> int:
        return len(self.rules)
