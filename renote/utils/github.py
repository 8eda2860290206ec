"""Contains utility functions for GitHub interactions."""

from urllib.parse import urlsplit

GITHUB_DOT_COM_API_URL = "https://api.github.com"


def clone_url_for_repository(github_api_url: str, owner: str, repo: str) -> str:
    """Derive the HTTPS clone URL of a repository from the API URL.

    github.com serves its API from api.github.com, while GitHub Enterprise
    Server serves it from <host>/api/v3 on the same host as the repositories.
    """
    if github_api_url.rstrip("/") == GITHUB_DOT_COM_API_URL:
        return f"https://github.com/{owner}/{repo}.git"
    parts = urlsplit(github_api_url)
    if not parts.scheme or not parts.netloc:
        raise ValueError(f"GitHub API URL must be an absolute URL, got {github_api_url!r}")
    return f"{parts.scheme}://{parts.netloc}/{owner}/{repo}.git"
