"""Benchmark recording pipeline.

This module ties the pieces together for one invocation: store the run
durably, then compare it with history, comment, and fail the build when
a regression exceeds the failure threshold.

Storing happens first so that a failed push also aborts alerting, and no
comment ever refers to data that was not stored.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from benchwatch.core.exceptions import ConfigurationError, RegressionFailure
from benchwatch.history import best_of_history, previous_run
from benchwatch.regression import DetectionResult, RegressionDetector, RegressionThresholds
from benchwatch.reporters import MarkdownReporter, float_str
from benchwatch.storage import GitBranchBackend, LocalFileBackend

if TYPE_CHECKING:
    from pathlib import Path

    from benchwatch.core.config import BenchmarkConfig
    from benchwatch.core.protocols import NotifierProtocol, VcsProtocol
    from benchwatch.core.types import BenchmarkResult, RepositoryContext, Run
    from benchwatch.storage import PersistenceBackend

logger = logging.getLogger(__name__)


@dataclass
class WriteOutcome:
    """Outcome of recording one run.

    Attributes:
        prior: Prior runs of the suite with a different commit id.
        previous: The run compared against, if any.
        best: Best prior result per benchmark name.
        detection: Regression detection result, if alerting ran.
        comment_urls: URLs of posted comments.
    """

    prior: list[Run]
    previous: Run | None
    best: dict[str, BenchmarkResult]
    detection: DetectionResult | None = None
    comment_urls: list[str] = field(default_factory=list)


def select_backend(
    config: BenchmarkConfig,
    repo: RepositoryContext,
    vcs: VcsProtocol | None = None,
    workdir: Path | str | None = None,
) -> PersistenceBackend:
    """Select the persistence backend for a configuration.

    An external data file selects the local file backend, otherwise the
    history lives on the shared branch.

    Raises:
        ConfigurationError: If the branch backend is needed but no transport is given.
    """
    if config.external_data_json_path:
        return LocalFileBackend(
            config.external_data_json_path,
            config.name,
            repo=repo,
            max_items=config.max_items_in_chart,
            save=config.save_data_file,
        )
    if vcs is None:
        raise ConfigurationError("A version-control transport is required when 'external-data-json-path' is not set")
    return GitBranchBackend(vcs, config, repo, workdir=workdir)


class BenchmarkPipeline:
    """Record a benchmark run and report regressions.

    Example:
        >>> pipeline = BenchmarkPipeline(config, repo, backend, notifier)
        >>> outcome = await pipeline.run(run)
    """

    def __init__(
        self,
        config: BenchmarkConfig,
        repo: RepositoryContext,
        backend: PersistenceBackend,
        notifier: NotifierProtocol | None = None,
    ) -> None:
        """Initialize the pipeline.

        Args:
            config: Benchmark configuration.
            repo: Repository being benchmarked.
            backend: Where history is stored.
            notifier: Where comments are posted. Created from the config's
                token when needed and not given.
        """
        self.config = config
        self.repo = repo
        self.backend = backend
        self._notifier = notifier
        self.reporter = MarkdownReporter(repo, footer_text=config.comment_footer)

    def _require_notifier(self, flag: str) -> NotifierProtocol:
        """Return the notifier, checking the token a comment flag needs."""
        if not self.config.github_token:
            msg = f"'{flag}' input is set but 'github-token' input is not set"
            raise ConfigurationError(msg)

        if self._notifier is None:
            from benchwatch.notify import GitHubNotifier

            self._notifier = GitHubNotifier(self.repo, token=self.config.github_token)
        return self._notifier

    async def handle_comment(
        self,
        current: Run,
        previous: Run,
        best: dict[str, BenchmarkResult],
        outcome: WriteOutcome,
    ) -> None:
        """Comment the comparison when comment-always is enabled."""
        if not self.config.comment_always:
            logger.debug("Comment check was skipped because comment-always is disabled")
            return

        notifier = self._require_notifier("comment-always")
        logger.debug("Commenting about benchmark comparison")

        body = self.reporter.comparison(
            self.config.name,
            current,
            previous,
            best,
            compare_with_best=self.config.compare_with_best,
        )
        result = await notifier.post_comment(current.commit.id, body)
        logger.info(f"Comment was sent to {result.url}")
        outcome.comment_urls.append(result.url)

    async def handle_alert(
        self,
        current: Run,
        previous: Run,
        best: dict[str, BenchmarkResult],
        outcome: WriteOutcome,
    ) -> None:
        """Detect regressions, comment them and fail when configured.

        Raises:
            RegressionFailure: If fail-on-alert is set and an alert exceeds
                the failure threshold.
        """
        config = self.config
        if not config.comment_on_alert and not config.fail_on_alert:
            logger.debug("Alert check was skipped because both comment-on-alert and fail-on-alert were disabled")
            return

        detector = RegressionDetector(
            RegressionThresholds(alert=config.alert_threshold, fail=config.fail_threshold),
            compare_with_best=config.compare_with_best,
        )
        detection = detector.detect(current, previous, best)
        outcome.detection = detection

        if not detection.has_alerts:
            logger.debug("No performance alert found happily")
            return

        logger.debug(f"Found {len(detection.alerts)} alerts")
        body = self.reporter.alert(
            detection.alerts,
            config.name,
            current,
            previous,
            best,
            config.alert_threshold,
            compare_with_best=config.compare_with_best,
            cc_users=config.alert_comment_cc_users,
        )
        message = body

        if config.comment_on_alert:
            notifier = self._require_notifier("comment-on-alert")
            result = await notifier.post_comment(current.commit.id, body)
            outcome.comment_urls.append(result.url)
            message = f"{body}\nComment was generated at {result.url}"

        if not config.fail_on_alert:
            return

        failures = detection.failures
        if not failures:
            logger.debug(
                f"{len(detection.alerts)} alerts exceeding the alert threshold {config.alert_threshold} were found "
                f"but all of them did not exceed the failure threshold {float_str(config.fail_threshold)}"
            )
            return

        logger.debug("Mark this run as failed since one or more fatal alerts were found")
        if config.fail_threshold != config.alert_threshold:
            message = (
                f"{len(failures)} of {len(detection.alerts)} alerts exceeded the failure threshold "
                f"`{float_str(config.fail_threshold)}` specified by fail-threshold input:\n\n{message}"
            )
        raise RegressionFailure(message)

    async def run(self, run: Run) -> WriteOutcome:
        """Store a run and report on it.

        Args:
            run: The new run.

        Returns:
            WriteOutcome describing what was stored and reported.

        Raises:
            StorageError: If the run cannot be stored.
            ConfigurationError: If the run's tool differs from the configured
                tool, or a comment is requested without a token.
            RegressionFailure: If a regression exceeds the failure threshold.
        """
        if run.tool != self.config.tool:
            msg = (
                f"Run was produced by '{run.tool.value}' but 'tool' input is "
                f"'{self.config.tool.value}' for benchmark '{self.config.name}'"
            )
            raise ConfigurationError(msg)

        prior = await self.backend.write(run)

        previous = previous_run(prior)
        best = best_of_history(run, prior)
        outcome = WriteOutcome(prior=prior, previous=previous, best=best)

        if previous is None:
            logger.debug("Alert check was skipped because previous benchmark result was not found")
            return outcome

        await self.handle_comment(run, previous, best, outcome)
        await self.handle_alert(run, previous, best, outcome)
        return outcome


async def write_benchmark(
    run: Run,
    config: BenchmarkConfig,
    repo: RepositoryContext,
    vcs: VcsProtocol | None = None,
    notifier: NotifierProtocol | None = None,
    workdir: Path | str | None = None,
) -> WriteOutcome:
    """Record a benchmark run and report regressions.

    Args:
        run: The new run.
        config: Benchmark configuration.
        repo: Repository being benchmarked.
        vcs: Version-control transport for the shared branch backend.
        notifier: Where comments are posted.
        workdir: Root of the git working tree.

    Returns:
        WriteOutcome describing what was stored and reported.

    Example:
        >>> outcome = await write_benchmark(run, config, repo, vcs=GitCli(repo, token))
        >>> outcome.previous.commit.id
        'abc123'
    """
    backend = select_backend(config, repo, vcs=vcs, workdir=workdir)
    pipeline = BenchmarkPipeline(config, repo, backend, notifier=notifier)
    return await pipeline.run(run)
