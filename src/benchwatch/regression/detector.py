"""Regression detector for benchmark runs.

This module provides the RegressionDetector class comparing a run
against the previous run or the best results of the suite's history.
"""

from __future__ import annotations

import logging
import math
from typing import TYPE_CHECKING

from benchwatch.core.ordering import bigger_is_better
from benchwatch.regression.models import Alert, DetectionResult, RegressionThresholds

if TYPE_CHECKING:
    from benchwatch.core.ordering import ToolType
    from benchwatch.core.types import BenchmarkResult, Run

logger = logging.getLogger(__name__)


def compute_ratio(tool: ToolType, baseline: float, current: float) -> float:
    """Compute how many times worse a value is than its baseline.

    Args:
        tool: Benchmark tool, deciding whether bigger is better.
        baseline: Baseline value.
        current: Current value.

    Returns:
        The ratio; above 1 means a regression. A zero divisor gives
        infinity, or NaN when both values are zero.

    Example:
        >>> compute_ratio(ToolType.PYTEST, baseline=200, current=100)
        2.0
        >>> compute_ratio(ToolType.CARGO, baseline=100, current=200)
        2.0
    """
    if bigger_is_better(tool):
        numerator, divisor = baseline, current
    else:
        numerator, divisor = current, baseline

    if divisor == 0:
        if numerator == 0:
            return math.nan
        return math.copysign(math.inf, numerator)
    return numerator / divisor


class RegressionDetector:
    """Detect regressions of a run against prior runs.

    Attributes:
        thresholds: Alert and failure thresholds.
        compare_with_best: Use the best prior results as baseline instead
            of the previous run.

    Example:
        >>> detector = RegressionDetector(RegressionThresholds(alert=1.5, fail=2.0))
        >>> result = detector.detect(current, previous, best)
        >>> for alert in result.alerts:
        ...     print(alert.message)
    """

    def __init__(
        self,
        thresholds: RegressionThresholds | None = None,
        compare_with_best: bool = False,
    ) -> None:
        """Initialize detector.

        Args:
            thresholds: Ratio thresholds. Defaults to RegressionThresholds().
            compare_with_best: Compare with the best prior results.
        """
        self.thresholds = thresholds or RegressionThresholds()
        self.compare_with_best = compare_with_best

    def baseline_for(
        self,
        name: str,
        previous: Run,
        best: dict[str, BenchmarkResult],
    ) -> BenchmarkResult | None:
        """Select the baseline result for a benchmark."""
        if self.compare_with_best:
            return best.get(name)
        return previous.find(name)

    def find_alerts(
        self,
        current: Run,
        previous: Run,
        best: dict[str, BenchmarkResult],
    ) -> list[Alert]:
        """Find benchmarks whose ratio exceeds the alert threshold.

        Every benchmark of the run is checked. Benchmarks without a
        baseline are new and never alert.

        Args:
            current: The current run.
            previous: The previous run of the suite.
            best: Best prior result per benchmark name.

        Returns:
            Alerts in the order of the run's benchmarks.
        """
        if self.compare_with_best:
            logger.debug(f"Comparing current:{current.commit.id} and best results for alert")
        else:
            logger.debug(f"Comparing current:{current.commit.id} and prev:{previous.commit.id} for alert")

        alerts: list[Alert] = []
        for bench in current.benches:
            baseline = self.baseline_for(bench.name, previous, best)
            if baseline is None:
                logger.debug(f"Skipped because benchmark '{bench.name}' is not found in previous benchmarks")
                continue

            ratio = compute_ratio(current.tool, baseline.value, bench.value)
            if ratio > self.thresholds.alert:
                logger.warning(
                    f"Performance alert! Previous value was {baseline.value} and current value is {bench.value}. "
                    f"It is {ratio}x worse than previous exceeding a ratio threshold {self.thresholds.alert}"
                )
                alerts.append(Alert(current=bench, baseline=baseline, ratio=ratio))

        return alerts

    def detect(
        self,
        current: Run,
        previous: Run | None,
        best: dict[str, BenchmarkResult],
    ) -> DetectionResult:
        """Detect regressions of a run.

        Args:
            current: The current run.
            previous: The previous run of the suite, or None for a first run.
            best: Best prior result per benchmark name.

        Returns:
            DetectionResult with any alerts. Empty when there is no previous run.
        """
        result = DetectionResult(thresholds=self.thresholds, compare_with_best=self.compare_with_best)
        if previous is None:
            logger.debug("Alert check was skipped because previous benchmark result was not found")
            return result

        result.alerts = self.find_alerts(current, previous, best)
        return result
