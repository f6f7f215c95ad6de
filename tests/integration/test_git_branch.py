"""Integration tests for the branch backend against a real git repository."""

from __future__ import annotations

import shutil
import subprocess
from pathlib import Path

import pytest

from benchwatch.core.config import BenchmarkConfig
from benchwatch.core.ordering import ToolType
from benchwatch.core.types import BenchmarkResult, Commit, RepositoryContext, Run
from benchwatch.history import SCRIPT_PREFIX, from_script
from benchwatch.storage import GitBranchBackend
from benchwatch.vcs import GitCli

pytestmark = [
    pytest.mark.integration,
    pytest.mark.skipif(shutil.which("git") is None, reason="git executable not available"),
]

IDENTITY = ["-c", "user.name=Test", "-c", "user.email=test@example.com", "-c", "commit.gpgsign=false"]


def git(cwd: Path, *args: str) -> str:
    """Run git synchronously and return its output."""
    completed = subprocess.run(
        ["git", *IDENTITY, *args],
        cwd=cwd,
        check=True,
        capture_output=True,
        text=True,
    )
    return completed.stdout


@pytest.fixture
def workdir(tmp_path: Path) -> Path:
    """Clone of a bare remote that has a main and a gh-pages branch."""
    remote = tmp_path / "remote.git"
    remote.mkdir()
    git(remote, "init", "--bare", "--quiet")

    seed = tmp_path / "seed"
    seed.mkdir()
    git(seed, "init", "--quiet")
    git(seed, "checkout", "--quiet", "-b", "main")
    (seed / "README.md").write_text("speedy\n")
    git(seed, "add", "README.md")
    git(seed, "commit", "--quiet", "-m", "initial")
    git(seed, "checkout", "--quiet", "-b", "gh-pages")
    git(seed, "push", "--quiet", str(remote), "main", "gh-pages")

    work = tmp_path / "work"
    git(tmp_path, "clone", "--quiet", "--branch", "main", str(remote), str(work))
    return work


def make_run(commit_id: str, value: float) -> Run:
    return Run(
        commit=Commit(id=commit_id, message="Change"),
        tool=ToolType.CARGO,
        benches=[BenchmarkResult(name="parse", value=value, unit="ns/iter")],
        date=1_700_000_000_000,
    )


class TestGitBranchBackendWithGit:
    """Tests running the branch backend with the git executable."""

    @pytest.mark.asyncio
    async def test_commits_to_history_branch(self, workdir: Path) -> None:
        repo = RepositoryContext(owner="octo", name="speedy", workflow="Benchmark")
        config = BenchmarkConfig(tool=ToolType.CARGO)
        backend = GitBranchBackend(GitCli(repo, workdir=workdir), config, repo, workdir=workdir)

        prior = await backend.write(make_run("c1", 100.0))

        assert prior == []
        # The working tree is back on the branch it started from
        assert git(workdir, "rev-parse", "--abbrev-ref", "HEAD").strip() == "main"
        content = git(workdir, "show", "gh-pages:dev/bench/data.js")
        assert content.startswith(SCRIPT_PREFIX)
        assert [run.commit.id for run in from_script(content).entries["Benchmark"]] == ["c1"]
        assert "window.BENCHMARK_DATA" in git(workdir, "show", "gh-pages:dev/bench/index.html")
        message = git(workdir, "log", "-1", "--format=%s", "gh-pages").strip()
        assert message == "add Benchmark (cargo) benchmark result for c1"

    @pytest.mark.asyncio
    async def test_second_run_sees_first(self, workdir: Path) -> None:
        repo = RepositoryContext(owner="octo", name="speedy")
        first = BenchmarkConfig(tool=ToolType.CARGO)
        await GitBranchBackend(GitCli(repo, workdir=workdir), first, repo, workdir=workdir).write(make_run("c1", 100.0))

        # The local branch is ahead of the remote, so fetching would be refused
        second = BenchmarkConfig(tool=ToolType.CARGO, skip_fetch_gh_pages=True)
        backend = GitBranchBackend(GitCli(repo, workdir=workdir), second, repo, workdir=workdir)
        prior = await backend.write(make_run("c2", 90.0))

        assert [run.commit.id for run in prior] == ["c1"]
        assert git(workdir, "rev-list", "--count", "gh-pages").strip() == "3"
