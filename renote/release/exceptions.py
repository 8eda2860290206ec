"""Custom exceptions raised while synthesizing release artifacts."""


class ReleaseError(Exception):
    """Base class for errors raised by the release engine.

    Every error names the repository and the operation that failed so the
    caller can tell which part of a multi-repository run went wrong.
    """

    def __init__(self, message: str, repo: str | None = None, operation: str | None = None) -> None:
        """Initializes the error with a message and the failing repository/operation."""
        self.message = message
        self.repo = repo
        self.operation = operation
        context = ", ".join(f"{key}={value}" for key, value in (("repo", repo), ("operation", operation)) if value)
        super().__init__(f"{message} ({context})" if context else message)


class NotFoundError(ReleaseError):
    """Raised when a required tag, reference or milestone does not exist."""

    pass


class TagNotFoundError(NotFoundError):
    """Raised when no tag qualifies as the previous release tag."""

    pass


class MilestoneNotFoundError(NotFoundError):
    """Raised when a milestone title cannot be resolved."""

    pass


class UpstreamError(ReleaseError):
    """Raised when the issue tracker or the version control system fails."""

    pass


class GitCommandError(UpstreamError):
    """Raised when a git command exits with a non-zero status."""

    def __init__(self, command: list[str], returncode: int, stderr: str, repo: str | None = None) -> None:
        """Initializes the error with the failed command and its output."""
        self.command = command
        self.returncode = returncode
        self.stderr = stderr
        super().__init__(
            f"git exited with status {returncode}: {stderr.strip() or '<no output>'}",
            repo=repo,
            operation=" ".join(command[:2]),
        )


class HookFailureError(ReleaseError):
    """Raised when the external issue filter hook fails or returns garbage."""

    pass
