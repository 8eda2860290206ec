"""Utility modules for shared functionality."""

from .constants import (
    COMMITS_PER_PAGE,
    DEFAULT_SINCE_DAYS,
    ISSUES_PER_PAGE,
    MISC_SECTION_KEY,
    SHORT_SHA_LENGTH,
)
from .helpers import split_values, title_case

__all__ = [
    "COMMITS_PER_PAGE",
    "DEFAULT_SINCE_DAYS",
    "ISSUES_PER_PAGE",
    "MISC_SECTION_KEY",
    "SHORT_SHA_LENGTH",
    "split_values",
    "title_case",
]
