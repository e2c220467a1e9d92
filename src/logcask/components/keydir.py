"""In-memory key index.

Maps each key to the location of its latest value. Uses
sortedcontainers.SortedDict so keys can be listed in order.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from sortedcontainers import SortedDict

if TYPE_CHECKING:
    from collections.abc import Iterator

    from ..core.types import Key, KeyLocation


class KeyDir:
    """Volatile key -> KeyLocation map.

    Invariants:
        - At most one entry per key
        - set() always replaces the previous entry (last write wins)
        - Nothing is persisted; a new instance starts empty
    """

    def __init__(self):
        self._entries: SortedDict = SortedDict()

    def set(self, key: Key, location: KeyLocation) -> None:
        """Record ``location`` as the current location of ``key``."""
        self._entries[key] = location

    def get(self, key: Key) -> KeyLocation | None:
        """Return the location of ``key``, or None if it was never written."""
        return self._entries.get(key)

    def __contains__(self, key: object) -> bool:
        return key in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def keys(self) -> Iterator[Key]:
        """Iterate keys in sorted order."""
        return iter(self._entries.keys())

    def items(self) -> Iterator[tuple[Key, KeyLocation]]:
        """Iterate (key, location) pairs in sorted key order."""
        return iter(self._entries.items())
