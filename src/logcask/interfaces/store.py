"""Protocol definition for the logcask store."""

from __future__ import annotations

from typing import Protocol

from ..core.types import Key, Value


class KVStore(Protocol):
    """Public API of the storage engine."""

    def put(self, key: Key, value: Value) -> None:
        """Append a write; visible to get() immediately, durable after flush()."""
        ...

    def get(self, key: Key) -> Value | None:
        """Return latest value for key or None if not present."""
        ...

    def flush(self) -> None:
        """Drain buffered writes to the active segment."""
        ...

    def close(self) -> None:
        """Flush and release resources."""
        ...
