"""Custom exceptions for benchwatch.

This module defines the exception hierarchy used throughout the library.
All exceptions inherit from BenchwatchError for easy catching.
"""

from __future__ import annotations


class BenchwatchError(Exception):
    """Base exception for all benchwatch errors.

    All custom exceptions in benchwatch inherit from this class,
    making it easy to catch all library-specific errors.

    Example:
        >>> try:
        ...     await write_benchmark(run, config, repo, vcs, notifier)
        ... except BenchwatchError as e:
        ...     print(f"benchwatch error: {e}")
    """


class ConfigurationError(BenchwatchError):
    """Raised when configuration is invalid or missing.

    This exception is raised when required configuration is missing,
    such as a feature flag that needs a GitHub token when none is set.

    Example:
        >>> raise ConfigurationError("'comment-on-alert' input is set but 'github-token' input is not set")
    """


class StorageError(BenchwatchError):
    """Raised when benchmark history cannot be stored durably.

    Covers write failures on the local data file and exhausting the
    push retry budget on the shared branch.

    Example:
        >>> raise StorageError("Could not store benchmark data as JSON at out/data.json: ...")
    """


class VcsError(BenchwatchError):
    """Raised when a version-control operation fails.

    Attributes:
        operation: The operation that failed (e.g. "push", "fetch").
    """

    def __init__(self, message: str, operation: str | None = None) -> None:
        super().__init__(message)
        self.operation = operation


class PushRejectedError(VcsError):
    """Raised when a push is rejected because the remote branch advanced.

    This is the only version-control failure that is retried.
    """


class NotificationError(BenchwatchError):
    """Raised when posting a notification fails.

    Example:
        >>> raise NotificationError("GitHub API error: 404 - Not Found")
    """


class RegressionFailure(BenchwatchError):
    """Raised when one or more alerts exceed the failure threshold.

    The message is the full comparison report, so the failure itself
    documents the evidence.
    """
