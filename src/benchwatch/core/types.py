"""Core type definitions for benchwatch.

This module defines the data structures recorded in benchmark history:
individual benchmark results, the commit they were measured at, runs,
and the root document persisted to durable storage.
"""

from __future__ import annotations

import json
import os
import time
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from benchwatch.core.ordering import ToolType

DEFAULT_SERVER_URL = "https://github.com"


def now_millis() -> int:
    """Return the current time as epoch milliseconds."""
    return int(time.time() * 1000)


class BenchmarkResult(BaseModel):
    """A single named benchmark measurement within a run.

    Attributes:
        name: Benchmark name, unique within a run.
        value: Measured value.
        unit: Unit of the value (e.g. "ns/iter", "ops/sec").
        range: Optional variance range as reported by the tool.
        extra: Optional free-form details reported by the tool.

    Example:
        >>> result = BenchmarkResult(name="fib(20)", value=31.2, unit="ns/iter", range="+/- 1.1")
    """

    model_config = ConfigDict(frozen=True)

    name: str = Field(..., description="Benchmark name (unique within a run)")
    value: int | float = Field(..., description="Measured value (integers keep their JSON form)")
    unit: str = Field(..., description="Unit of the measured value")
    range: str | None = Field(default=None, description="Optional variance range")
    extra: str | None = Field(default=None, description="Optional extra details")


class CommitUser(BaseModel):
    """Author or committer of a commit."""

    model_config = ConfigDict(frozen=True, extra="allow")

    name: str | None = None
    username: str | None = None
    email: str | None = None


class Commit(BaseModel):
    """The commit a run was measured at.

    Unknown fields are preserved so that metadata written by other
    producers survives a load/store round trip.

    Attributes:
        id: Commit SHA.
        message: Commit message.
        timestamp: Commit timestamp as reported by the producer.
        url: Link to the commit.
        author: Commit author.
        committer: Commit committer.
    """

    model_config = ConfigDict(frozen=True, extra="allow")

    id: str = Field(..., description="Commit SHA")
    message: str = Field(default="", description="Commit message")
    timestamp: str | None = Field(default=None, description="Commit timestamp")
    url: str | None = Field(default=None, description="Link to the commit")
    author: CommitUser | None = Field(default=None, description="Commit author")
    committer: CommitUser | None = Field(default=None, description="Commit committer")


class Run(BaseModel):
    """One suite measured at one commit.

    A run is the atomic unit appended to history. It is never mutated
    after creation, only appended or trimmed away.

    Attributes:
        commit: The commit the run was measured at.
        tool: Benchmark tool that produced the results.
        benches: Benchmark results, in the order reported.
        date: When the run was recorded, as epoch milliseconds.

    Example:
        >>> run = Run(
        ...     commit=Commit(id="abc123", message="Speed up parser"),
        ...     tool=ToolType.CARGO,
        ...     benches=[BenchmarkResult(name="parse", value=120.0, unit="ns/iter")],
        ...     date=1700000000000,
        ... )
    """

    model_config = ConfigDict(frozen=True)

    commit: Commit = Field(..., description="Commit the run was measured at")
    tool: ToolType = Field(..., description="Benchmark tool")
    benches: list[BenchmarkResult] = Field(default_factory=list, description="Benchmark results")
    date: int = Field(default_factory=now_millis, description="Record time (epoch ms)")

    def find(self, name: str) -> BenchmarkResult | None:
        """Find a benchmark result by name.

        Args:
            name: Benchmark name.

        Returns:
            The matching result, or None if the run has no such benchmark.
        """
        for bench in self.benches:
            if bench.name == name:
                return bench
        return None


class DataDocument(BaseModel):
    """Root document holding the benchmark history of a repository.

    Attributes:
        last_update: Time of the last successful write (epoch ms).
        repo_url: Canonical URL of the repository.
        entries: Suite name to runs, oldest first.
    """

    model_config = ConfigDict(populate_by_name=True)

    last_update: int = Field(default=0, alias="lastUpdate", description="Last write (epoch ms)")
    repo_url: str = Field(default="", alias="repoUrl", description="Repository URL")
    entries: dict[str, list[Run]] = Field(default_factory=dict, description="Runs per suite")


class RepositoryContext(BaseModel):
    """Metadata about the repository being benchmarked.

    Passed explicitly to every component that needs the repository's
    identity instead of being read from a global.

    Attributes:
        owner: Repository owner (user or organization).
        name: Repository name.
        server_url: Base URL of the hosting server.
        is_private: Whether the repository is private.
        workflow: Name of the CI workflow producing the run.
    """

    model_config = ConfigDict(frozen=True)

    owner: str = Field(default="", description="Repository owner")
    name: str = Field(default="", description="Repository name")
    server_url: str = Field(default=DEFAULT_SERVER_URL, description="Hosting server URL")
    is_private: bool = Field(default=False, description="Whether the repository is private")
    workflow: str = Field(default="", description="CI workflow name")

    @property
    def html_url(self) -> str:
        """Canonical web URL of the repository."""
        if not self.owner or not self.name:
            return ""
        return f"{self.server_url.rstrip('/')}/{self.owner}/{self.name}"

    @classmethod
    def from_env(cls, environ: dict[str, str] | None = None) -> RepositoryContext:
        """Build the context from GitHub Actions environment variables.

        Reads GITHUB_REPOSITORY, GITHUB_SERVER_URL and GITHUB_WORKFLOW, and
        the event payload at GITHUB_EVENT_PATH for repository visibility.

        Args:
            environ: Environment mapping (default: os.environ).

        Returns:
            RepositoryContext for the current repository.
        """
        env = os.environ if environ is None else environ
        owner, _, name = env.get("GITHUB_REPOSITORY", "").partition("/")

        payload: dict[str, Any] = {}
        event_path = env.get("GITHUB_EVENT_PATH")
        if event_path and Path(event_path).is_file():
            try:
                payload = json.loads(Path(event_path).read_text(encoding="utf-8"))
            except (OSError, json.JSONDecodeError):
                payload = {}

        repository = payload.get("repository") or {}
        return cls(
            owner=owner,
            name=name,
            server_url=env.get("GITHUB_SERVER_URL") or DEFAULT_SERVER_URL,
            is_private=bool(repository.get("private", False)),
            workflow=env.get("GITHUB_WORKFLOW", ""),
        )


class CommentResult(BaseModel):
    """Result of posting a comment.

    Attributes:
        url: Web URL of the created comment.
        status_code: HTTP status code of the response, if any.
    """

    model_config = ConfigDict(frozen=True)

    url: str = Field(..., description="Web URL of the created comment")
    status_code: int | None = Field(default=None, description="HTTP status code")
