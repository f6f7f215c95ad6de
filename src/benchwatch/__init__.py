"""benchwatch: Continuous benchmark history and regression alerts."""

from __future__ import annotations

from benchwatch.core.config import BenchmarkConfig
from benchwatch.core.ordering import ToolType
from benchwatch.core.types import BenchmarkResult, Commit, DataDocument, RepositoryContext, Run
from benchwatch.pipeline import BenchmarkPipeline, WriteOutcome, write_benchmark
from benchwatch.regression import RegressionDetector, RegressionThresholds

__version__ = "1.0.0"
__all__ = [
    # Data model
    "BenchmarkResult",
    "Commit",
    "DataDocument",
    "RepositoryContext",
    "Run",
    "ToolType",
    # Configuration
    "BenchmarkConfig",
    # Pipeline
    "BenchmarkPipeline",
    "WriteOutcome",
    "write_benchmark",
    # Regression detection
    "RegressionDetector",
    "RegressionThresholds",
    # Version
    "__version__",
]
