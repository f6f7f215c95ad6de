"""Shared-branch backend for benchmark history.

This module stores the history document as data.js on a branch that
other CI runs write to concurrently. Conflicting writers only notice
each other when pushing: a rejected push drops the local commit and the
run is merged again on top of the new remote tip.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import TYPE_CHECKING

from benchwatch.core.exceptions import PushRejectedError, StorageError
from benchwatch.history import store
from benchwatch.storage.index_html import DEFAULT_INDEX_HTML

if TYPE_CHECKING:
    from benchwatch.core.config import BenchmarkConfig
    from benchwatch.core.protocols import VcsProtocol
    from benchwatch.core.types import RepositoryContext, Run

logger = logging.getLogger(__name__)

DEFAULT_MAX_RETRIES = 10


class GitBranchBackend:
    """Backend storing history on a shared git branch.

    Attributes:
        max_retries: How many times a rejected push is retried.

    Example:
        >>> backend = GitBranchBackend(GitCli(repo, token), config, repo)
        >>> prior = await backend.write(run)
    """

    def __init__(
        self,
        vcs: VcsProtocol,
        config: BenchmarkConfig,
        repo: RepositoryContext,
        workdir: Path | str | None = None,
        max_retries: int = DEFAULT_MAX_RETRIES,
    ) -> None:
        """Initialize the branch backend.

        Args:
            vcs: Version-control transport.
            config: Benchmark configuration.
            repo: Repository the history belongs to.
            workdir: Root of the git working tree (default: current directory).
            max_retries: How many times a rejected push is retried.
        """
        self._vcs = vcs
        self._config = config
        self._repo = repo
        self._workdir = Path(workdir) if workdir is not None else Path.cwd()
        self.max_retries = max_retries

    @property
    def data_dir(self) -> Path:
        """Directory holding data.js and index.html."""
        return self._workdir / self._config.benchmark_data_dir_path

    @property
    def data_path(self) -> Path:
        """Path of data.js."""
        return self.data_dir / "data.js"

    def _can_sync(self) -> bool:
        """Check whether the branch may be pulled before writing."""
        if self._config.skip_fetch_gh_pages:
            return False
        if self._repo.is_private and not self._config.github_token:
            logger.warning(
                "'git pull' was skipped. If you want to ensure GitHub Pages branch is up-to-date "
                "before generating a commit, please set 'github-token' input to pull GitHub pages branch"
            )
            return False
        return True

    async def _add_index_html_if_needed(self) -> None:
        """Create the default dashboard page unless one exists."""
        index_html = self.data_dir / "index.html"
        if index_html.exists():
            logger.debug(f"Skipped to create default index.html since it is already existing: {index_html}")
            return

        index_html.write_text(DEFAULT_INDEX_HTML, encoding="utf-8")
        await self._vcs.stage(index_html)
        logger.info(f"Created default index.html at {index_html}")

    async def _commit_run(self, run: Run) -> list[Run]:
        """Pull, append the run to data.js and commit it.

        Returns:
            Prior runs read from the branch during this attempt.
        """
        branch = self._config.gh_pages_branch
        if self._can_sync():
            await self._vcs.pull(branch)

        self.data_dir.mkdir(parents=True, exist_ok=True)

        document = store.load(self.data_path, script=True)
        prior = store.append(
            document,
            self._config.name,
            run,
            self._config.max_items_in_chart,
            self._repo,
        )

        self.data_path.write_text(store.to_script(document), encoding="utf-8")
        logger.debug(f"Overwrote {self.data_path} for adding new data")

        await self._vcs.stage(self.data_path)
        await self._add_index_html_if_needed()
        await self._vcs.commit(
            f"add {self._config.name} ({self._config.tool.value}) benchmark result for {run.commit.id}"
        )
        return prior

    async def _write_with_retry(self, run: Run) -> list[Run]:
        """Commit the run and push it, retrying when the remote advanced."""
        branch = self._config.gh_pages_branch
        retries_left = self.max_retries

        while True:
            prior = await self._commit_run(run)

            if not (self._config.github_token and self._config.auto_push):
                logger.debug(
                    f"Auto-push to {branch} is skipped because it requires both 'github-token' and 'auto-push' inputs"
                )
                return prior

            try:
                await self._vcs.push(branch)
            except PushRejectedError as e:
                logger.warning(f"Auto-push failed because the remote {branch} was updated after git pull")
                if retries_left <= 0:
                    msg = (
                        f"Auto-push failed {self.max_retries + 1} times since the remote branch {branch} "
                        f"rejected pushing all the time. Last exception was: {e}"
                    )
                    raise StorageError(msg) from e

                logger.debug("Rollback the auto-generated commit before retry")
                await self._vcs.reset(1)
                retries_left -= 1
                logger.warning(
                    f"Retrying to generate a commit and push to remote {branch} with retry count {retries_left}..."
                )
                continue

            logger.info(f"Automatically pushed the generated commit to {branch} branch")
            return prior

    async def write(self, run: Run) -> list[Run]:
        """Append a run to data.js on the shared branch.

        The working tree is switched to the branch for the duration of the
        write and always switched back, also when the write fails.

        Args:
            run: The new run.

        Returns:
            Prior runs of the suite with a different commit id.

        Raises:
            StorageError: If pushing keeps being rejected, or data.js is not
                a valid history document.
            VcsError: If any other version-control operation fails.
        """
        branch = self._config.gh_pages_branch
        if not self._config.skip_fetch_gh_pages:
            if self._repo.is_private and not self._config.github_token:
                logger.warning(f"Fetching private repository branch {branch} without 'github-token'")
            await self._vcs.fetch(branch)

        await self._vcs.switch_to(branch)
        try:
            return await self._write_with_retry(run)
        finally:
            await self._vcs.checkout_previous()
