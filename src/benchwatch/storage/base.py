"""Base protocol for benchmark persistence backends.

This module defines the PersistenceBackend protocol that all backends
must implement.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from benchwatch.core.types import Run


@runtime_checkable
class PersistenceBackend(Protocol):
    """Protocol for persistence backends.

    A backend loads the history document, appends one run to the
    configured suite, stores the document durably and returns the
    suite's prior runs for comparison.

    Example:
        >>> class MemoryBackend:
        ...     async def write(self, run: Run) -> list[Run]: ...
        >>> isinstance(MemoryBackend(), PersistenceBackend)
        True
    """

    async def write(self, run: Run) -> list[Run]:
        """Append a run to history and persist it.

        Args:
            run: The new run.

        Returns:
            Prior runs of the suite with a different commit id, oldest first.

        Raises:
            StorageError: If the history cannot be stored.
        """
        ...
