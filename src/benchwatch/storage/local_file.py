"""Local JSON file backend for benchmark history.

This module stores the history document in a plain JSON file, for CI
jobs that keep benchmark data outside a shared branch (e.g. in a cache).
It has no protection against concurrent writers.
"""

from __future__ import annotations

import logging
import os
import tempfile
from pathlib import Path
from typing import TYPE_CHECKING

from benchwatch.core.exceptions import StorageError
from benchwatch.history import store

if TYPE_CHECKING:
    from benchwatch.core.types import RepositoryContext, Run

logger = logging.getLogger(__name__)


class LocalFileBackend:
    """JSON file backend for benchmark history.

    Uses atomic writes (temp file + rename) so a failed write never
    leaves a truncated document behind.

    Example:
        >>> backend = LocalFileBackend("cache/benchmark-data.json", "Benchmark", repo=repo)
        >>> prior = await backend.write(run)
    """

    def __init__(
        self,
        path: str | Path,
        suite_name: str,
        repo: RepositoryContext,
        max_items: int | None = None,
        save: bool = True,
    ) -> None:
        """Initialize the local file backend.

        Args:
            path: Path to the JSON file.
            suite_name: Suite the runs are recorded under.
            repo: Repository the history belongs to.
            max_items: Maximum runs kept per suite (None = unlimited).
            save: Write the file after appending. When False the run is
                only compared against history, never stored.
        """
        self._path = Path(path)
        self._suite_name = suite_name
        self._repo = repo
        self._max_items = max_items
        self._save = save

    @property
    def path(self) -> Path:
        """Path of the JSON file."""
        return self._path

    def _store(self, content: str) -> None:
        """Write content to the JSON file with an atomic rename."""
        self._path.parent.mkdir(parents=True, exist_ok=True)

        temp_fd, temp_path = tempfile.mkstemp(
            dir=self._path.parent,
            prefix=".benchmark_data_",
            suffix=".tmp",
        )
        try:
            with os.fdopen(temp_fd, "w", encoding="utf-8") as f:
                f.write(content)
            Path(temp_path).replace(self._path)
        except Exception:
            Path(temp_path).unlink(missing_ok=True)
            raise

    async def write(self, run: Run) -> list[Run]:
        """Append a run to the JSON file.

        Args:
            run: The new run.

        Returns:
            Prior runs of the suite with a different commit id.

        Raises:
            StorageError: If the file cannot be written, or holds data that
                is not a valid history document.
        """
        document = store.load(self._path)
        prior = store.append(document, self._suite_name, run, self._max_items, self._repo)

        if not self._save:
            logger.debug("Skipping storing benchmarks in external data file")
            return prior

        try:
            self._store(store.serialize(document))
        except OSError as e:
            msg = f"Could not store benchmark data as JSON at {self._path}: {e}"
            raise StorageError(msg) from e

        logger.info(f"Stored benchmark data for '{self._suite_name}' at {self._path}")
        return prior
