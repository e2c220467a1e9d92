"""Segment store implementation.

Manages the directory of append-only segment files: picks the active
segment, appends batches, rotates on size and serves positioned reads.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path

from sortedcontainers import SortedList

from ..core.clock import Clock, format_timestamp, is_timestamp, next_timestamp, utc_now
from ..core.errors import (
    SegmentError,
    SegmentNotFoundError,
    SegmentSealedError,
    ShortReadError,
    StorageIOError,
)
from ..core.types import SegmentHandle, SegmentId

logger = logging.getLogger(__name__)


class SegmentStore:
    """Directory of timestamp-named, append-only segment files.

    Args:
        data_dir: Directory holding the segments (created on demand)
        max_segment_bytes: Size that, once exceeded, seals a segment
        clock: Source of UTC datetimes used to name new segments
        fsync: Whether to fsync after every append

    Invariants:
        - Segment names sort lexicographically in creation order
        - Bytes are only ever appended at the bookkept end of a segment
        - Files are opened per operation and always closed
    """

    def __init__(
        self,
        data_dir: str | Path,
        max_segment_bytes: int,
        clock: Clock | None = None,
        fsync: bool = False,
    ):
        self.data_dir = Path(data_dir)
        self.max_segment_bytes = max_segment_bytes
        self.fsync = fsync
        self._clock = clock or utc_now
        self._segments: SortedList = SortedList()
        self._ignored: set[str] = set()

    def path_for(self, segment_id: SegmentId) -> Path:
        return self.data_dir / segment_id

    def list_segments(self) -> list[SegmentId]:
        """Return known segment names, oldest first."""
        self._scan()
        return list(self._segments)

    def _scan(self) -> None:
        """Refresh the known segments from the data directory."""
        try:
            entries = list(os.scandir(self.data_dir))
        except FileNotFoundError:
            self._segments.clear()
            return
        except OSError as e:
            raise StorageIOError(f"Cannot list {self.data_dir}: {e}") from e

        names = []
        for entry in entries:
            if not entry.is_file():
                continue
            if not is_timestamp(entry.name):
                if entry.name not in self._ignored:
                    self._ignored.add(entry.name)
                    logger.warning(f"Ignoring non-segment file {entry.path}")
                continue
            names.append(entry.name)
        self._segments = SortedList(names)

    def _ensure_data_dir(self) -> None:
        try:
            self.data_dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise StorageIOError(f"Cannot create data directory {self.data_dir}: {e}") from e

    def active_segment(self) -> SegmentHandle:
        """Return the segment new writes should go to.

        Reuses the most recent segment unless it already exceeds the size
        limit; creates the directory and a first segment when needed.
        """
        self._ensure_data_dir()
        self._scan()

        if not self._segments:
            return self.create_segment()

        latest = self._segments[-1]
        path = self.path_for(latest)
        try:
            size = path.stat().st_size
        except OSError as e:
            raise StorageIOError(f"Cannot stat segment {path}: {e}") from e

        if size > self.max_segment_bytes:
            logger.info(f"Latest segment {latest} is full ({size} bytes), starting a new one")
            return self.create_segment()

        logger.info(f"Reusing segment {latest} at offset {size}")
        return SegmentHandle(segment_id=latest, path=path, size=size)

    def _next_segment_id(self) -> SegmentId:
        candidate = format_timestamp(self._clock())
        if self._segments and candidate <= self._segments[-1]:
            # Same millisecond or the clock stepped back
            candidate = next_timestamp(self._segments[-1])
        return candidate

    def create_segment(self) -> SegmentHandle:
        """Create a new, empty segment named after the current time."""
        self._ensure_data_dir()
        segment_id = self._next_segment_id()
        path = self.path_for(segment_id)
        try:
            with open(path, "xb"):
                pass
        except OSError as e:
            raise StorageIOError(f"Cannot create segment {path}: {e}") from e

        self._segments.add(segment_id)
        logger.info(f"Created segment {segment_id}")
        return SegmentHandle(segment_id=segment_id, path=path)

    def append(self, segment: SegmentHandle, data: bytes) -> int:
        """Append ``data`` in one write; return the offset it starts at.

        Raises:
            SegmentSealedError: The segment was rotated out
            SegmentError: The file size disagrees with the bookkept size
            StorageIOError: The write failed
        """
        if segment.sealed:
            raise SegmentSealedError(f"Segment {segment.segment_id} is sealed")

        offset = segment.size
        try:
            with open(segment.path, "ab") as f:
                f.seek(0, os.SEEK_END)
                end = f.tell()
                if end != offset:
                    raise SegmentError(
                        f"Segment {segment.segment_id} is {end} bytes on disk, expected {offset}"
                    )
                f.write(data)
                f.flush()
                if self.fsync:
                    os.fsync(f.fileno())
        except OSError as e:
            raise StorageIOError(f"Failed to append to {segment.path}: {e}") from e

        segment.size = offset + len(data)
        logger.debug(f"Appended {len(data)} bytes to {segment.segment_id} at offset {offset}")
        return offset

    def rotate_if_needed(self, segment: SegmentHandle) -> SegmentHandle:
        """Seal ``segment`` and return a fresh one if it is over the limit."""
        if segment.size <= self.max_segment_bytes:
            return segment

        # The old segment stays writable until its replacement exists
        new_segment = self.create_segment()
        segment.sealed = True
        logger.info(
            f"Rotated segment {segment.segment_id} ({segment.size} bytes) -> {new_segment.segment_id}"
        )
        return new_segment

    def read_at(self, segment_id: SegmentId, offset: int, length: int) -> bytes:
        """Read exactly ``length`` bytes at ``offset`` from a segment.

        Raises:
            SegmentNotFoundError: The segment file does not exist
            ShortReadError: Fewer than ``length`` bytes are available
            StorageIOError: Any other filesystem failure
        """
        path = self.path_for(segment_id)
        try:
            with open(path, "rb") as f:
                f.seek(offset)
                data = f.read(length)
        except FileNotFoundError as e:
            raise SegmentNotFoundError(segment_id) from e
        except OSError as e:
            raise StorageIOError(f"Failed to read {path} at offset {offset}: {e}") from e

        if len(data) != length:
            raise ShortReadError(segment_id, offset, length, len(data))
        return data
