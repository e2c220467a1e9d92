"""Read path.

Resolves a key through the index and reads its value straight from the
recorded segment offset.
"""

from __future__ import annotations

import logging

from ..core.errors import CorruptionError
from ..core.types import Key, SegmentId, Value
from ..interfaces.codec import Codec
from ..interfaces.index import KeyIndex
from ..interfaces.segment import SegmentManager
from .write_path import WritePath

logger = logging.getLogger(__name__)


class ValueReader:
    """Look up values by key.

    Args:
        index: Key index
        segments: Segment store for positioned reads
        codec: Record codec, used when verifying
        write_path: Write path, consulted for ranges not yet flushed
        verify: Read and validate the whole record instead of the value slice

    The default read fetches only the value bytes and trusts the index;
    on-disk corruption of those bytes goes unnoticed. With ``verify`` the
    full record is read and its checksum checked, at the cost of a larger
    read and a decode.
    """

    def __init__(
        self,
        index: KeyIndex,
        segments: SegmentManager,
        codec: Codec,
        write_path: WritePath,
        verify: bool = False,
    ):
        self._index = index
        self._segments = segments
        self._codec = codec
        self._write_path = write_path
        self.verify = verify

    def _read(self, segment_id: SegmentId, offset: int, length: int) -> bytes:
        pending = self._write_path.read_pending(segment_id, offset, length)
        if pending is not None:
            return pending
        return self._segments.read_at(segment_id, offset, length)

    def get(self, key: Key) -> Value | None:
        """Return the latest value for ``key`` or None if it is unknown."""
        location = self._index.get(key)
        if location is None:
            return None

        if not self.verify:
            return self._read(location.segment_id, location.value_offset, location.value_size)

        raw = self._read(location.segment_id, location.record_offset, location.record_size)
        record = self._codec.decode(raw)
        if record.key != key:
            raise CorruptionError(
                f"Record at {location.segment_id}:{location.record_offset} "
                f"holds key {record.key!r}, expected {key!r}"
            )
        logger.debug(f"Verified record for {key!r} in {location.segment_id}")
        return record.value
