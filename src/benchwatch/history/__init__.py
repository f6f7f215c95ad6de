"""History module for benchwatch.

This module provides the per-suite benchmark history document and the
operations to load, append to and serialize it.

Example:
    >>> from benchwatch.history import append, load, serialize
    >>>
    >>> document = load("benchmarks/data.json")
    >>> prior = append(document, "Benchmark", run, max_items=100, repo=repo)
    >>> Path("benchmarks/data.json").write_text(serialize(document))
"""

from __future__ import annotations

from benchwatch.history.store import (
    SCRIPT_PREFIX,
    append,
    best_of_history,
    deserialize,
    empty_document,
    from_script,
    load,
    previous_run,
    serialize,
    to_script,
)

__all__ = [
    "SCRIPT_PREFIX",
    "append",
    "best_of_history",
    "deserialize",
    "empty_document",
    "from_script",
    "load",
    "previous_run",
    "serialize",
    "to_script",
]
