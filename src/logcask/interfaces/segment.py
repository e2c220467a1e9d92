"""Protocol definition for the segment store."""

from __future__ import annotations

from typing import Protocol

from ..core.types import SegmentHandle, SegmentId


class SegmentManager(Protocol):
    """Owns the on-disk segment files."""

    def active_segment(self) -> SegmentHandle:
        """Return the writable segment, creating one if none exists."""
        ...

    def append(self, segment: SegmentHandle, data: bytes) -> int:
        """Append bytes at the end of the segment; return their start offset.

        Invariants:
            - Bytes already written are never rewritten
            - The whole blob is written by one call
        """
        ...

    def rotate_if_needed(self, segment: SegmentHandle) -> SegmentHandle:
        """Return a new segment if ``segment`` exceeds the size limit, else ``segment``."""
        ...

    def read_at(self, segment_id: SegmentId, offset: int, length: int) -> bytes:
        """Read exactly ``length`` bytes at ``offset``."""
        ...
