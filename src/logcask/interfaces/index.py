"""Protocol definition for the key index."""

from __future__ import annotations

from typing import Protocol

from ..core.types import Key, KeyLocation


class KeyIndex(Protocol):
    """In-memory map from key to the location of its latest value."""

    def set(self, key: Key, location: KeyLocation) -> None:
        """Overwrite the location of ``key``."""
        ...

    def get(self, key: Key) -> KeyLocation | None:
        """Return the location of ``key`` or None."""
        ...
