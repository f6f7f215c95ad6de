"""Core module for benchwatch.

This module contains the fundamental types, protocols, exceptions,
ordering policy and configuration used throughout the library.
"""

from __future__ import annotations

from benchwatch.core.config import BenchmarkConfig, Settings
from benchwatch.core.exceptions import (
    BenchwatchError,
    ConfigurationError,
    NotificationError,
    PushRejectedError,
    RegressionFailure,
    StorageError,
    VcsError,
)
from benchwatch.core.ordering import ToolType, bigger_is_better
from benchwatch.core.protocols import NotifierProtocol, VcsProtocol
from benchwatch.core.types import (
    BenchmarkResult,
    CommentResult,
    Commit,
    CommitUser,
    DataDocument,
    RepositoryContext,
    Run,
)

__all__ = [
    "BenchmarkConfig",
    "BenchmarkResult",
    "BenchwatchError",
    "CommentResult",
    "Commit",
    "CommitUser",
    "ConfigurationError",
    "DataDocument",
    "NotificationError",
    "NotifierProtocol",
    "PushRejectedError",
    "RegressionFailure",
    "RepositoryContext",
    "Run",
    "Settings",
    "StorageError",
    "ToolType",
    "VcsError",
    "VcsProtocol",
    "bigger_is_better",
]
