"""Git command-line transport for benchwatch.

This module implements VcsProtocol by running the ``git`` executable
in a working tree, authenticating remote operations with a GitHub token.
"""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path
from typing import TYPE_CHECKING
from urllib.parse import urlparse

from benchwatch.core.exceptions import PushRejectedError, VcsError

if TYPE_CHECKING:
    from benchwatch.core.types import RepositoryContext

logger = logging.getLogger(__name__)

DEFAULT_USER_NAME = "benchwatch"
DEFAULT_USER_EMAIL = "benchwatch@users.noreply.github.com"

# Markers git prints when the remote refuses a non-fast-forward update
REJECTION_MARKERS: tuple[str, ...] = ("[remote rejected]", "[rejected]")


class GitCli:
    """Version-control transport backed by the git executable.

    Remote operations use an authenticated HTTPS URL when a token is
    given, and the ``origin`` remote otherwise.

    Attributes:
        repo: Repository being benchmarked.
        workdir: Git working tree the commands run in.

    Example:
        >>> git = GitCli(RepositoryContext.from_env(), token=os.environ["GITHUB_TOKEN"])
        >>> await git.fetch("gh-pages")
    """

    def __init__(
        self,
        repo: RepositoryContext,
        token: str | None = None,
        workdir: Path | str | None = None,
        executable: str = "git",
        user_name: str = DEFAULT_USER_NAME,
        user_email: str = DEFAULT_USER_EMAIL,
    ) -> None:
        """Initialize the git transport.

        Args:
            repo: Repository being benchmarked.
            token: GitHub token for remote operations.
            workdir: Git working tree (default: current directory).
            executable: Git executable name or path.
            user_name: Committer name for generated commits.
            user_email: Committer email for generated commits.
        """
        self.repo = repo
        self.workdir = Path(workdir) if workdir is not None else Path.cwd()
        self._token = token
        self._executable = executable
        self._user_name = user_name
        self._user_email = user_email

    @property
    def remote(self) -> str:
        """Remote used for fetch, pull and push."""
        if not self._token:
            return "origin"
        host = urlparse(self.repo.server_url).netloc or "github.com"
        return f"https://x-access-token:{self._token}@{host}/{self.repo.owner}/{self.repo.name}.git"

    def _redact(self, text: str) -> str:
        """Hide the token in text shown to users."""
        if self._token:
            return text.replace(self._token, "***")
        return text

    async def run(self, *args: str) -> str:
        """Run a git command in the working tree.

        Args:
            *args: Arguments passed to git.

        Returns:
            Standard output of the command.

        Raises:
            VcsError: If git cannot be started or exits with a non-zero code.
        """
        command = [
            self._executable,
            "-c",
            f"user.name={self._user_name}",
            "-c",
            f"user.email={self._user_email}",
            *args,
        ]
        operation = args[0] if args else "git"
        logger.debug(f"Executing: {self._redact(' '.join(command))}")

        try:
            process = await asyncio.create_subprocess_exec(
                *command,
                cwd=self.workdir,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
        except OSError as e:
            msg = f"Failed to execute git {operation}: {e}"
            raise VcsError(msg, operation=operation) from e

        stdout, stderr = await process.communicate()
        out = stdout.decode("utf-8", errors="replace")
        err = stderr.decode("utf-8", errors="replace")

        if process.returncode != 0:
            detail = err.strip() or out.strip()
            command_text = " ".join(args)
            msg = self._redact(f"Command 'git {command_text}' failed with exit code {process.returncode}: {detail}")
            if operation == "push" and any(marker in err or marker in out for marker in REJECTION_MARKERS):
                raise PushRejectedError(msg, operation=operation)
            raise VcsError(msg, operation=operation)

        return out

    async def fetch(self, branch: str) -> None:
        """Fetch a branch, updating the local branch of the same name."""
        await self.run("fetch", self.remote, f"{branch}:{branch}")

    async def pull(self, branch: str) -> None:
        """Pull a branch into the working tree."""
        await self.run("pull", "--", self.remote, branch)

    async def switch_to(self, branch: str) -> None:
        """Switch to a branch."""
        await self.run("switch", branch)

    async def checkout_previous(self) -> None:
        """Check out the previous ref (``git switch`` cannot return to a detached HEAD)."""
        await self.run("checkout", "-")

    async def stage(self, path: Path | str) -> None:
        """Stage a file."""
        await self.run("add", str(path))

    async def commit(self, message: str) -> None:
        """Commit staged changes."""
        await self.run("commit", "-m", message)

    async def reset(self, steps_back: int) -> None:
        """Hard-reset the branch by a number of commits."""
        await self.run("reset", "--hard", f"HEAD~{steps_back}")

    async def push(self, branch: str) -> None:
        """Push a branch without running hooks."""
        await self.run("push", self.remote, f"{branch}:{branch}", "--no-verify")
