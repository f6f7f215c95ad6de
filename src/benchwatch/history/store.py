"""History store for benchmark runs.

This module holds the append-only, bounded-retention model of benchmark
history: loading and saving the root document, appending a run to a
suite, and deriving the comparison baselines from prior runs.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import TYPE_CHECKING

from pydantic import ValidationError

from benchwatch.core.exceptions import StorageError
from benchwatch.core.ordering import is_better
from benchwatch.core.types import DataDocument, now_millis

if TYPE_CHECKING:
    from benchwatch.core.types import BenchmarkResult, RepositoryContext, Run

logger = logging.getLogger(__name__)

# Lets data.js be loaded directly by the dashboard page as a script
SCRIPT_PREFIX = "window.BENCHMARK_DATA = "


def empty_document() -> DataDocument:
    """Create the document used when no history exists yet."""
    return DataDocument(last_update=0, repo_url="", entries={})


def serialize(document: DataDocument) -> str:
    """Serialize a document to JSON text.

    Args:
        document: The document to serialize.

    Returns:
        Indented JSON using the on-disk field names.
    """
    data = document.model_dump(mode="json", by_alias=True, exclude_none=True)
    return json.dumps(data, indent=2)


def deserialize(text: str) -> DataDocument:
    """Parse a document from JSON text.

    Args:
        text: JSON text.

    Returns:
        The parsed document.

    Raises:
        ValueError: If the text is not a valid document.
    """
    return DataDocument.model_validate(json.loads(text))


def to_script(document: DataDocument) -> str:
    """Serialize a document as a script assigning it to a global variable."""
    return SCRIPT_PREFIX + serialize(document)


def from_script(text: str) -> DataDocument:
    """Parse a document written by :func:`to_script`.

    Raises:
        ValueError: If the prefix is missing or the payload is invalid.
    """
    return deserialize(_strip_prefix(text))


def _strip_prefix(text: str) -> str:
    if not text.startswith(SCRIPT_PREFIX):
        msg = f"Script does not start with {SCRIPT_PREFIX!r}"
        raise ValueError(msg)
    return text[len(SCRIPT_PREFIX) :]


def load(path: Path | str, script: bool = False) -> DataDocument:
    """Load a document from a file, falling back to an empty document.

    A missing or unparseable file is the expected state of a first run,
    so it is logged and never raised. A file holding valid JSON that does
    not match the document schema raises instead.

    Args:
        path: Path to the data file.
        script: Whether the file is a data.js script instead of plain JSON.

    Returns:
        The loaded document, or an empty one.

    Raises:
        StorageError: If the file is valid JSON but not a valid document.
    """
    path = Path(path)
    try:
        text = path.read_text(encoding="utf-8")
        payload = json.loads(_strip_prefix(text) if script else text)
    except (OSError, ValueError) as e:
        logger.warning(f"Could not load benchmark data at {path}. Using empty default: {e}")
        return empty_document()

    try:
        document = DataDocument.model_validate(payload)
    except ValidationError as e:
        msg = f"Benchmark data at {path} is not a valid benchmark history document, refusing to overwrite it: {e}"
        raise StorageError(msg) from e

    logger.debug(f"Loaded benchmark data at {path}")
    return document


def append(
    document: DataDocument,
    suite_name: str,
    run: Run,
    max_items: int | None,
    repo: RepositoryContext,
) -> list[Run]:
    """Append a run to a suite's history.

    Runs of the suite measured at the same commit as ``run`` are left out
    of the returned prior runs, so re-running a commit does not shift
    the comparison baseline. The stored list keeps them.

    Args:
        document: Document to mutate.
        suite_name: Suite the run belongs to.
        run: The new run.
        max_items: Maximum runs kept for the suite (None = unlimited).
        repo: Repository the history belongs to.

    Returns:
        Prior runs of the suite with a different commit id, oldest first.
    """
    document.last_update = now_millis()
    document.repo_url = repo.html_url

    runs = document.entries.get(suite_name)
    if runs is None:
        document.entries[suite_name] = [run]
        logger.debug(f"No suite was found for benchmark '{suite_name}' in existing data. Created")
        return []

    prior = [r for r in runs if r.commit.id != run.commit.id]
    runs.append(run)

    if max_items is not None and len(runs) > max_items:
        del runs[: len(runs) - max_items]
        logger.debug(f"Number of data items for '{suite_name}' was truncated to {max_items}")

    return prior


def previous_run(prior: list[Run]) -> Run | None:
    """Return the most recent prior run, if any."""
    return prior[-1] if prior else None


def best_of_history(run: Run, prior: list[Run]) -> dict[str, BenchmarkResult]:
    """Find the best prior result for each benchmark of a run.

    Args:
        run: The current run; its tool decides which value is better.
        prior: Prior runs of the suite.

    Returns:
        Benchmark name to best prior result. Benchmarks never seen
        before are absent.
    """
    best: dict[str, BenchmarkResult] = {}
    for bench in run.benches:
        for previous in prior:
            candidate = previous.find(bench.name)
            if candidate is None:
                continue
            current_best = best.get(bench.name)
            if current_best is None or is_better(run.tool, candidate.value, current_best.value):
                best[bench.name] = candidate
    return best
