"""Shared fixtures for benchwatch unit tests."""

from __future__ import annotations

from collections.abc import Callable
from pathlib import Path

import pytest

from benchwatch.core.ordering import ToolType
from benchwatch.core.types import BenchmarkResult, Commit, RepositoryContext, Run

RunFactory = Callable[..., Run]


@pytest.fixture
def repo() -> RepositoryContext:
    """Repository context for a public GitHub repository."""
    return RepositoryContext(owner="octo", name="speedy", workflow="Benchmark")


@pytest.fixture
def make_run() -> RunFactory:
    """Factory creating runs from a commit id and benchmark values."""

    def _make_run(
        commit_id: str,
        values: dict[str, float] | None = None,
        tool: ToolType = ToolType.CARGO,
        unit: str = "ns/iter",
        date: int = 1_700_000_000_000,
    ) -> Run:
        benches = [
            BenchmarkResult(name=name, value=value, unit=unit)
            for name, value in (values if values is not None else {"bench_a": 100.0}).items()
        ]
        return Run(
            commit=Commit(
                id=commit_id,
                message=f"Commit {commit_id}",
                url=f"https://github.com/octo/speedy/commit/{commit_id}",
            ),
            tool=tool,
            benches=benches,
            date=date,
        )

    return _make_run


class FakeVcs:
    """In-memory version-control transport.

    Keeps the remote content of one data file. ``pull`` copies it into the
    working tree, ``reset`` restores the file as it was after the last
    pull, and ``push`` publishes the working tree file unless a scripted
    outcome says otherwise.
    """

    def __init__(self, data_path: Path, push_outcomes: list[Exception | None] | None = None) -> None:
        self.data_path = data_path
        self.remote_content: str | None = None
        self.push_outcomes = list(push_outcomes or [])
        self.calls: list[tuple[str, ...]] = []
        self.on_pull: list[Callable[[FakeVcs], None]] = []
        self.fail_on: dict[str, Exception] = {}
        self._pulled_content: str | None = None

    def _record(self, name: str, *args: str) -> None:
        self.calls.append((name, *args))
        if name in self.fail_on:
            raise self.fail_on[name]

    def count(self, name: str) -> int:
        return sum(1 for call in self.calls if call[0] == name)

    async def fetch(self, branch: str) -> None:
        self._record("fetch", branch)

    async def pull(self, branch: str) -> None:
        self._record("pull", branch)
        if self.on_pull:
            self.on_pull.pop(0)(self)
        if self.remote_content is not None:
            self.data_path.parent.mkdir(parents=True, exist_ok=True)
            self.data_path.write_text(self.remote_content, encoding="utf-8")
        self._pulled_content = self.remote_content

    async def switch_to(self, branch: str) -> None:
        self._record("switch_to", branch)

    async def checkout_previous(self) -> None:
        self._record("checkout_previous")

    async def stage(self, path: Path | str) -> None:
        self._record("stage", Path(path).name)

    async def commit(self, message: str) -> None:
        self._record("commit", message)

    async def reset(self, steps_back: int) -> None:
        self._record("reset", str(steps_back))
        if self._pulled_content is None:
            self.data_path.unlink(missing_ok=True)
        else:
            self.data_path.write_text(self._pulled_content, encoding="utf-8")

    async def push(self, branch: str) -> None:
        self._record("push", branch)
        outcome = self.push_outcomes.pop(0) if self.push_outcomes else None
        if outcome is not None:
            raise outcome
        self.remote_content = self.data_path.read_text(encoding="utf-8")


@pytest.fixture
def fake_vcs_factory() -> Callable[..., FakeVcs]:
    """Factory creating FakeVcs instances."""
    return FakeVcs
