"""GitHub commit comment notifier for benchwatch.

This module provides an async client posting benchmark reports as
commit comments through the GitHub REST API, implementing
NotifierProtocol.
"""

from __future__ import annotations

import os
from contextlib import asynccontextmanager
from typing import TYPE_CHECKING

import httpx

from benchwatch.core.exceptions import NotificationError
from benchwatch.core.types import CommentResult

if TYPE_CHECKING:
    from collections.abc import AsyncIterator
    from types import TracebackType

    from benchwatch.core.types import RepositoryContext

# Default configuration
DEFAULT_API_URL = "https://api.github.com"
DEFAULT_TIMEOUT = 30.0


class GitHubNotifier:
    """Async client for GitHub commit comments.

    Uses httpx for async HTTP requests with connection pooling.

    Attributes:
        repo: Repository the comments are posted to.
        api_url: Base URL of the GitHub REST API.
        timeout: Request timeout in seconds.

    Example:
        Context manager (recommended for multiple calls):
            >>> async with GitHubNotifier(repo, token="...") as notifier:
            ...     result = await notifier.post_comment("abc123", "# Benchmark")

        Using environment variable:
            >>> # Set GITHUB_TOKEN in environment
            >>> notifier = GitHubNotifier(repo)
    """

    def __init__(
        self,
        repo: RepositoryContext,
        token: str | None = None,
        api_url: str = DEFAULT_API_URL,
        timeout: float = DEFAULT_TIMEOUT,
    ) -> None:
        """Initialize GitHubNotifier client.

        Args:
            repo: Repository the comments are posted to.
            token: GitHub token. If not provided, reads from GITHUB_TOKEN env var.
            api_url: Base URL of the GitHub REST API.
            timeout: Request timeout in seconds. Defaults to 30.0.

        Raises:
            ValueError: If no token is provided and GITHUB_TOKEN is not set.
        """
        self.token = token or os.environ.get("GITHUB_TOKEN")
        if not self.token:
            msg = "GitHub token required. Pass token or set GITHUB_TOKEN environment variable."
            raise ValueError(msg)

        self.repo = repo
        self.api_url = api_url.rstrip("/")
        self.timeout = timeout
        self._client: httpx.AsyncClient | None = None

    async def __aenter__(self) -> GitHubNotifier:
        """Enter async context manager, creating a reusable HTTP client."""
        self._client = httpx.AsyncClient(timeout=self.timeout)
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        """Exit async context manager, closing the HTTP client."""
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    def _get_headers(self) -> dict[str, str]:
        """Get headers for API requests."""
        return {
            "Authorization": f"Bearer {self.token}",
            "Accept": "application/vnd.github+json",
            "X-GitHub-Api-Version": "2022-11-28",
        }

    @asynccontextmanager
    async def _get_client(self) -> AsyncIterator[httpx.AsyncClient]:
        """Get an HTTP client for making requests."""
        if self._client is not None:
            yield self._client
        else:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                yield client

    async def post_comment(self, commit_id: str, body: str) -> CommentResult:
        """Post a comment on a commit.

        Args:
            commit_id: Commit SHA to comment on.
            body: Markdown body of the comment.

        Returns:
            The created comment.

        Raises:
            NotificationError: If the request fails.
        """
        url = f"{self.api_url}/repos/{self.repo.owner}/{self.repo.name}/commits/{commit_id}/comments"

        try:
            async with self._get_client() as client:
                response = await client.post(url, json={"body": body}, headers=self._get_headers())
                response.raise_for_status()
                data = response.json()
        except httpx.ConnectError as e:
            msg = f"Failed to connect to GitHub at {self.api_url}: {e}"
            raise NotificationError(msg) from e
        except httpx.TimeoutException as e:
            msg = f"Request to GitHub timed out after {self.timeout}s: {e}"
            raise NotificationError(msg) from e
        except httpx.HTTPStatusError as e:
            msg = f"GitHub API error: {e.response.status_code} - {e.response.text}"
            raise NotificationError(msg) from e
        except Exception as e:
            msg = f"Unexpected error calling GitHub: {e}"
            raise NotificationError(msg) from e

        commit_url = f"{self.repo.html_url}/commit/{commit_id}"
        return CommentResult(
            url=str(data.get("html_url") or commit_url),
            status_code=response.status_code,
        )
