"""Protocol definitions for benchwatch.

This module defines the capability interfaces the core consumes from
version control and notification adapters. Using protocols enables
duck typing and lets tests inject fakes.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from pathlib import Path

    from benchwatch.core.types import CommentResult


@runtime_checkable
class VcsProtocol(Protocol):
    """Protocol for version-control transports.

    Every method may fail with VcsError. A push rejected because the
    remote branch advanced fails with PushRejectedError specifically.

    Example:
        >>> class FakeVcs:
        ...     async def fetch(self, branch: str) -> None: ...
        ...     # ... implement other methods
    """

    async def fetch(self, branch: str) -> None:
        """Fetch a branch from the remote."""
        ...

    async def pull(self, branch: str) -> None:
        """Pull the latest remote state of a branch into the working tree."""
        ...

    async def switch_to(self, branch: str) -> None:
        """Switch the working tree to a branch."""
        ...

    async def checkout_previous(self) -> None:
        """Return the working tree to the previously checked out ref."""
        ...

    async def stage(self, path: Path | str) -> None:
        """Stage a file for the next commit."""
        ...

    async def commit(self, message: str) -> None:
        """Create a commit from staged changes."""
        ...

    async def reset(self, steps_back: int) -> None:
        """Discard the last commits, resetting the working tree.

        Args:
            steps_back: Number of commits to drop.
        """
        ...

    async def push(self, branch: str) -> None:
        """Push a branch to the remote.

        Raises:
            PushRejectedError: If the remote has advanced.
            VcsError: On any other failure.
        """
        ...


@runtime_checkable
class NotifierProtocol(Protocol):
    """Protocol for notification targets.

    Example:
        >>> class PrintNotifier:
        ...     async def post_comment(self, commit_id: str, body: str) -> CommentResult:
        ...         print(body)
        ...         return CommentResult(url="stdout")
        >>> isinstance(PrintNotifier(), NotifierProtocol)
        True
    """

    async def post_comment(self, commit_id: str, body: str) -> CommentResult:
        """Post a comment on a commit.

        Args:
            commit_id: Commit SHA to comment on.
            body: Markdown body of the comment.

        Returns:
            The created comment.

        Raises:
            NotificationError: If the comment cannot be posted.
        """
        ...
