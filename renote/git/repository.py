"""Local git clone used to list tags and resolve references."""

import asyncio
import shutil
from datetime import datetime, timezone
from pathlib import Path

import structlog

from renote.release.exceptions import GitCommandError, NotFoundError

logger = structlog.get_logger(__name__)


class GitRepository:
    """A repository cloned under a local working directory.

    Every git invocation runs as a subprocess so that several repositories can
    be processed concurrently from one event loop.
    """

    def __init__(self, owner: str, repo: str, work_dir: Path, clone_url: str | None = None) -> None:
        """Initialize the repository location.

        Args:
            owner: Repository owner.
            repo: Repository name.
            work_dir: Directory the repository is cloned into.
            clone_url: URL to clone from. Defaults to the github.com HTTPS URL.
        """
        self.owner = owner
        self.repo = repo
        self.work_dir = Path(work_dir)
        self.clone_url = clone_url or f"https://github.com/{owner}/{repo}.git"

    @property
    def repo_ref(self) -> str:
        """Return the repository in 'owner/repo' format."""
        return f"{self.owner}/{self.repo}"

    @property
    def repo_dir(self) -> Path:
        """Return the path of the local clone."""
        return self.work_dir / self.repo

    async def _git(self, *args: str, cwd: Path | None = None) -> str:
        """Run a git command and return its stripped stdout."""
        command = ["git", *args]
        cwd = cwd or self.repo_dir
        logger.debug("Running git command", repo=self.repo_ref, command=" ".join(command), cwd=str(cwd))
        process = await asyncio.create_subprocess_exec(
            *command,
            cwd=cwd,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
        )
        try:
            stdout, stderr = await process.communicate()
        except asyncio.CancelledError:
            process.kill()
            await process.wait()
            raise
        if process.returncode != 0:
            raise GitCommandError(command, process.returncode or 1, stderr.decode("utf-8", errors="replace"), repo=self.repo_ref)
        return stdout.decode("utf-8", errors="replace").strip()

    async def sync(self, branch: str) -> None:
        """Clone the repository, or fetch and reset an existing clone to `branch`."""
        if self.repo_dir.exists():
            logger.info("Fetching repository and resetting to branch", repo=self.repo_ref, branch=branch)
            await self._git("fetch", "--tags", "--force", "origin", branch)
            await self._git("reset", "--hard", f"origin/{branch}")
            await self._git("checkout", branch)
        else:
            logger.info("Cloning repository", repo=self.repo_ref, branch=branch)
            self.work_dir.mkdir(parents=True, exist_ok=True)
            try:
                await self._git("clone", "--branch", branch, self.clone_url, self.repo, cwd=self.work_dir)
            except asyncio.CancelledError:
                # Drop the partial clone so the next sync clones again.
                shutil.rmtree(self.repo_dir, ignore_errors=True)
                raise

    async def tag_list(self) -> list[str]:
        """List tag names, newest tagged commit first.

        Tags are ordered by the committer date of the commit they point at.
        Annotated tags are peeled first, so their own tagger date is ignored.
        """
        output = await self._git(
            "for-each-ref",
            "--sort=refname",
            "--format=%(refname:strip=2) %(committerdate:unix) %(*committerdate:unix)",
            "refs/tags",
        )
        dated: list[tuple[int, str]] = []
        for line in output.splitlines():
            # Lightweight tags fill the first date field, annotated tags the second.
            name, *dates = line.split()
            dated.append((int(dates[0]) if dates else 0, name))
        return [name for _, name in sorted(dated, key=lambda item: item[0], reverse=True)]

    async def resolve_ref(self, ref: str) -> str:
        """Resolve a tag or branch to the full hash of the commit it points at."""
        try:
            return await self._git("rev-parse", "--verify", "--quiet", f"{ref}^{{commit}}")
        except GitCommandError as exc:
            raise NotFoundError(f"reference {ref} not found", repo=self.repo_ref, operation="resolve_ref") from exc

    async def branch_head(self, branch: str) -> str:
        """Resolve the head commit of a local branch."""
        return await self.resolve_ref(f"refs/heads/{branch}")

    async def commit_time(self, ref: str) -> datetime:
        """Return the committer time of the commit `ref` points at."""
        output = await self._git("log", "-1", "--format=%ct", ref)
        return datetime.fromtimestamp(int(output), tz=timezone.utc)
