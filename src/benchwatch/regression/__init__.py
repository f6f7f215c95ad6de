"""Regression detection module for benchwatch.

This module provides tools for detecting performance regressions of a
benchmark run compared to the previous run or the best run in history.

Example:
    >>> from benchwatch.regression import RegressionDetector, RegressionThresholds
    >>>
    >>> detector = RegressionDetector(RegressionThresholds(alert=1.5, fail=2.0))
    >>> result = detector.detect(current, previous, best)
    >>> if result.has_failures:
    ...     print("Benchmarks regressed beyond the failure threshold!")
"""

from __future__ import annotations

from benchwatch.regression.detector import RegressionDetector, compute_ratio
from benchwatch.regression.models import Alert, DetectionResult, RegressionThresholds

__all__ = [
    "Alert",
    "DetectionResult",
    "RegressionDetector",
    "RegressionThresholds",
    "compute_ratio",
]
