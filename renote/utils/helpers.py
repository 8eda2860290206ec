"""General utility functions and helper classes."""

import re

_WORD_PATTERN = re.compile(r"[A-Z]+(?![a-z])|[A-Z]?[a-z]+|[0-9]+")


def title_case(value: str) -> str:
    """Convert a section key to a title ('bug-fix' -> 'Bug Fix', 'apiChanges' -> 'Api Changes')."""
    words = _WORD_PATTERN.findall(value)
    return " ".join(word[:1].upper() + word[1:].lower() for word in words)


def split_values(values: list[str] | None) -> list[str]:
    """Flatten repeated and comma-separated CLI values, dropping blanks."""
    result: list[str] = []
    for value in values or []:
        result.extend(part.strip() for part in value.split(",") if part.strip())
    return result
