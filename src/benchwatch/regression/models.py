"""Models for regression detection.

This module provides dataclasses for regression thresholds, alerts,
and detection results.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from benchwatch.core.types import BenchmarkResult


@dataclass(frozen=True)
class RegressionThresholds:
    """Ratio thresholds for regression detection.

    A ratio is how many times worse the current value is than the
    baseline value, so 1.0 means unchanged.

    Attributes:
        alert: Ratio above which an alert is raised (default 2x).
        fail: Ratio above which an alert fails the build. Must not be
            smaller than ``alert``.

    Example:
        >>> thresholds = RegressionThresholds(alert=1.5, fail=2.0)
        >>> thresholds.fail
        2.0
    """

    alert: float = 2.0
    fail: float = 2.0

    def __post_init__(self) -> None:
        if self.fail < self.alert:
            msg = f"Fail threshold {self.fail} must not be smaller than alert threshold {self.alert}"
            raise ValueError(msg)


@dataclass(frozen=True)
class Alert:
    """Alert for a benchmark whose ratio exceeds the alert threshold.

    Attributes:
        current: Result from the current run.
        baseline: Result the current one was compared against.
        ratio: How many times worse the current value is.

    Example:
        >>> alert = Alert(
        ...     current=BenchmarkResult(name="parse", value=200.0, unit="ns/iter"),
        ...     baseline=BenchmarkResult(name="parse", value=100.0, unit="ns/iter"),
        ...     ratio=2.0,
        ... )
        >>> alert.message
        "'parse' is 2.00x worse: baseline 100.0 ns/iter, current 200.0 ns/iter"
    """

    current: BenchmarkResult
    baseline: BenchmarkResult
    ratio: float

    @property
    def name(self) -> str:
        """Benchmark name."""
        return self.current.name

    @property
    def message(self) -> str:
        """Human-readable alert message."""
        return (
            f"'{self.name}' is {self.ratio:.2f}x worse: "
            f"baseline {self.baseline.value} {self.baseline.unit}, "
            f"current {self.current.value} {self.current.unit}"
        )


@dataclass
class DetectionResult:
    """Result of regression detection for one run.

    Attributes:
        alerts: Alerts exceeding the alert threshold, in benchmark order.
        thresholds: Thresholds the run was checked against.
        compare_with_best: Whether the best prior results were the baseline.

    Example:
        >>> result = detector.detect(current, previous, best)
        >>> if result.has_failures:
        ...     print(f"{len(result.failures)} of {len(result.alerts)} alerts failed")
    """

    alerts: list[Alert] = field(default_factory=list)
    thresholds: RegressionThresholds = field(default_factory=RegressionThresholds)
    compare_with_best: bool = False

    @property
    def failures(self) -> list[Alert]:
        """Alerts exceeding the failure threshold."""
        return [alert for alert in self.alerts if alert.ratio > self.thresholds.fail]

    @property
    def has_alerts(self) -> bool:
        """Check if any alerts were raised."""
        return len(self.alerts) > 0

    @property
    def has_failures(self) -> bool:
        """Check if any alert exceeds the failure threshold."""
        return len(self.failures) > 0

    def summary(self) -> str:
        """Generate a human-readable summary.

        Returns:
            Multi-line summary string.
        """
        if not self.alerts:
            return "No performance alerts."

        failures = self.failures
        lines = [
            f"Performance alerts: {len(self.alerts)} (failing: {len(failures)})",
            "",
        ]
        for alert in self.alerts:
            marker = "[FAIL]" if alert in failures else "[ALERT]"
            lines.append(f"  {marker} {alert.message}")

        return "\n".join(lines)
