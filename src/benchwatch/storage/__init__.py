"""Persistence backends for benchmark history.

This module provides the backends that store the history document
durably: a local JSON file, or data.js on a shared git branch.

Example:
    >>> from benchwatch.storage import LocalFileBackend
    >>> backend = LocalFileBackend("cache/benchmark-data.json", "Benchmark", repo=repo)
    >>> prior = await backend.write(run)
"""

from __future__ import annotations

from benchwatch.storage.base import PersistenceBackend
from benchwatch.storage.branch import DEFAULT_MAX_RETRIES, GitBranchBackend
from benchwatch.storage.index_html import DEFAULT_INDEX_HTML
from benchwatch.storage.local_file import LocalFileBackend

__all__ = [
    "DEFAULT_INDEX_HTML",
    "DEFAULT_MAX_RETRIES",
    "GitBranchBackend",
    "LocalFileBackend",
    "PersistenceBackend",
]
