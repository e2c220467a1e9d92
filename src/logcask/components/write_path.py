"""Batched write path.

Buffers encoded records, assigns their final on-disk offsets up front,
flushes the batch in one write and checks for segment rotation after
every flush.
"""

from __future__ import annotations

import logging

from ..core.clock import Clock, format_timestamp, utc_now
from ..core.types import Key, KeyLocation, SegmentHandle, SegmentId, Value
from ..interfaces.codec import Codec
from ..interfaces.index import KeyIndex
from ..interfaces.segment import SegmentManager
from .codec import TERMINATOR

logger = logging.getLogger(__name__)


class WritePath:
    """Accumulate records and flush them to the active segment.

    Args:
        segments: Segment store owning the files
        index: Key index updated on every put
        codec: Record codec
        batch_bytes: Buffered size that triggers a flush
        clock: Source of UTC datetimes for record timestamps

    Invariants:
        - The offset assigned to a buffered record is
          active.size + bytes buffered before it
        - A flush writes the whole buffer in one append, so a record is
          never split across writes or segments
        - Rotation is only checked right after a flush
        - The index is updated before the bytes reach disk
    """

    def __init__(
        self,
        segments: SegmentManager,
        index: KeyIndex,
        codec: Codec,
        batch_bytes: int,
        clock: Clock | None = None,
    ):
        self._segments = segments
        self._index = index
        self._codec = codec
        self.batch_bytes = batch_bytes
        self._clock = clock or utc_now

        self._active: SegmentHandle = segments.active_segment()
        self._buffer = bytearray()
        self.flush_count = 0
        self.rotation_count = 0

    @property
    def active(self) -> SegmentHandle:
        """Segment currently receiving writes."""
        return self._active

    @property
    def pending_bytes(self) -> int:
        """Bytes buffered but not yet written."""
        return len(self._buffer)

    def put(self, key: Key, value: Value) -> KeyLocation:
        """Buffer one write and index it; flush if the batch is full."""
        timestamp = format_timestamp(self._clock())
        record = self._codec.encode(key, value, timestamp)

        record_offset = self._active.size + len(self._buffer)
        location = KeyLocation(
            segment_id=self._active.segment_id,
            value_offset=record_offset + self._codec.value_offset(record, value),
            value_size=len(value),
            record_offset=record_offset,
            record_size=len(record),
            timestamp=timestamp,
        )

        self._buffer += record
        self._buffer += TERMINATOR
        self._index.set(key, location)

        if len(self._buffer) >= self.batch_bytes:
            self.flush()
        return location

    def flush(self) -> None:
        """Write the buffered batch, then rotate the segment if it is full.

        On failure the buffer is kept and the error propagates; index
        entries for the batch keep pointing at bytes that never landed.
        """
        if not self._buffer:
            return

        size = len(self._buffer)
        self._segments.append(self._active, bytes(self._buffer))
        self._buffer.clear()
        self.flush_count += 1
        logger.debug(f"Flushed {size} bytes to {self._active.segment_id}")

        segment = self._segments.rotate_if_needed(self._active)
        if segment is not self._active:
            self.rotation_count += 1
            self._active = segment

    def read_pending(self, segment_id: SegmentId, offset: int, length: int) -> bytes | None:
        """Serve a byte range that is still buffered, or None if it is on disk."""
        if segment_id != self._active.segment_id or not self._buffer:
            return None

        start = offset - self._active.size
        if start < 0 or start + length > len(self._buffer):
            return None
        return bytes(self._buffer[start:start + length])
