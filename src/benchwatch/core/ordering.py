"""Metric ordering policy.

Each benchmark tool reports values where either a larger or a smaller
number means better performance. This module maps tool identifiers to
that ordering.
"""

from __future__ import annotations

from enum import Enum


class ToolType(str, Enum):
    """Benchmark tools whose output can be recorded."""

    CARGO = "cargo"
    GO = "go"
    BENCHMARKJS = "benchmarkjs"
    BENCHMARKLUAU = "benchmarkluau"
    PYTEST = "pytest"
    GOOGLECPP = "googlecpp"
    CATCH2 = "catch2"
    JULIA = "julia"
    BENCHMARKDOTNET = "benchmarkdotnet"
    CUSTOM_BIGGER_IS_BETTER = "customBiggerIsBetter"
    CUSTOM_SMALLER_IS_BETTER = "customSmallerIsBetter"


# Tools reporting throughput-like values (ops/sec), everything else reports time
BIGGER_IS_BETTER: frozenset[ToolType] = frozenset(
    {
        ToolType.BENCHMARKJS,
        ToolType.PYTEST,
        ToolType.CUSTOM_BIGGER_IS_BETTER,
    }
)


def bigger_is_better(tool: ToolType) -> bool:
    """Check whether a larger value is better for a tool.

    Args:
        tool: The benchmark tool.

    Returns:
        True if larger values mean better performance.

    Example:
        >>> bigger_is_better(ToolType.PYTEST)
        True
        >>> bigger_is_better(ToolType.CARGO)
        False
    """
    return ToolType(tool) in BIGGER_IS_BETTER


def is_better(tool: ToolType, a: float, b: float) -> bool:
    """Check whether value ``a`` is strictly better than ``b`` for a tool."""
    return a > b if bigger_is_better(tool) else a < b
