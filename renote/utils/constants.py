"""Shared constants used across the application."""

# Changelog Constants
# -------------------

SHORT_SHA_LENGTH = 8
"""Number of hash characters shown for a commit in a changelog."""

COMMITS_PER_PAGE = 100
"""Page size requested from the list-commits endpoint (GitHub maximum)."""

DEFAULT_SINCE_DAYS = 14
"""Default look-back window, in days, when no better lower bound is known."""

CHANGELOG_COMMIT_TEMPLATE = "- {{ subject }} [{{ short_sha }}]({{ url }}){% if author %} by @{{ author }}{% endif %}\n"
"""Template for one commit bullet of a changelog fragment."""

CHANGELOG_FOLDED_TEMPLATE = "<details>\n<summary>{{ repo }}</summary>\n\n{{ body }}\n</details>\n"
"""Template wrapping a repository fragment in a collapsible block."""

CHANGELOG_HEADING_TEMPLATE = "### {{ repo }}\n{{ body }}\n"
"""Template prefixing a repository fragment with a level-3 heading."""

# Release Note Constants
# ----------------------

ISSUES_PER_PAGE = 100
"""Page size requested from the list-issues endpoint (GitHub maximum)."""

MISC_SECTION_KEY = "misc"
"""Catch-all section for issues matching none of the section labels."""

RELEASE_NOTE_SECTION_TEMPLATE = (
    "\n### {{ title }}\n"
    "{% for issue in issues %}"
    "- {{ issue.title }} [{{ issue.number }}]({{ issue.url }})"
    "{% if issue.assignees %} - {{ issue.assignees | map('mention') | join(' ') }}{% endif %}\n"
    "{% endfor %}"
)
"""Template for one section of a release note."""

RELEASE_NOTE_CONTRIBUTORS_TEMPLATE = "\n## Contributors\n{% for contributor in contributors %}- {{ contributor | mention }}\n{% endfor %}"
"""Template for the trailing contributors block of a release note."""

# Local Workspace Constants
# -------------------------

DEFAULT_WORK_DIR = ".renote"
"""Directory, relative to the current directory, holding repository clones."""
