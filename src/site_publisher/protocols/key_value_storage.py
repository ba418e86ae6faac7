"""Key-value storage protocol.

The enrichment cache keeps its whole store under a single namespaced key,
so the storage only needs string get/set/remove semantics.

Implementations can include:
- Redis (default)
- In-memory dictionary with an optional quota
"""

from typing import Protocol, runtime_checkable


@runtime_checkable
class KeyValueStorage(Protocol):
    """Protocol for string key-value storage backends.

    Implementations translate backend failures into ``StorageError``.
    """

    def get_item(self, key: str) -> str | None:
        """Read the value stored under ``key``, or None if missing."""
        ...

    def set_item(self, key: str, value: str) -> None:
        """Store ``value`` under ``key``, replacing any previous value."""
        ...

    def remove_item(self, key: str) -> None:
        """Delete ``key`` if present."""
        ...
