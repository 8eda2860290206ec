"""Fixtures for unit tests."""

from datetime import datetime, timezone
from typing import Any, Callable, Generator

import pytest
import structlog

from renote.release.models import CommitRecord, IssueRecord

NOW = datetime(2024, 6, 15, 12, 0, tzinfo=timezone.utc)


@pytest.fixture(autouse=True)
def configure_structlog_for_caplog() -> Generator[None, None, None]:
    """Configure structlog for use with caplog."""
    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )
    yield
    structlog.reset_defaults()


@pytest.fixture
def now() -> datetime:
    """A fixed reference time for time-window filtering."""
    return NOW


@pytest.fixture
def make_issue() -> Callable[..., IssueRecord]:
    """Factory for IssueRecord instances with sensible defaults."""

    def _make_issue(number: int, **overrides: Any) -> IssueRecord:
        values: dict[str, Any] = {
            "number": number,
            "title": f"Issue {number}",
            "url": f"https://github.com/acme/widgets/issues/{number}",
            "labels": (),
            "assignees": (),
            "closed_at": None,
        }
        values.update(overrides)
        return IssueRecord(**values)

    return _make_issue


@pytest.fixture
def make_commit() -> Callable[..., CommitRecord]:
    """Factory for CommitRecord instances named after their hash."""

    def _make_commit(sha: str, subject: str | None = None, author: str | None = "octocat") -> CommitRecord:
        return CommitRecord(
            sha=sha,
            subject=subject or f"commit {sha}",
            url=f"https://github.com/acme/widgets/commit/{sha}",
            author=author,
        )

    return _make_commit
