"""logcask store implementation - main public API.

Orchestrates the record codec, segment store, write path, key index and
read path.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Iterator

from ..components.codec import RecordCodec
from ..components.keydir import KeyDir
from ..components.reader import ValueReader
from ..components.segment import SegmentStore
from ..components.write_path import WritePath
from .clock import Clock
from .config import CaskConfig
from .errors import StoreClosedError
from .types import Key, KeyLocation, Value

logger = logging.getLogger(__name__)


def _check_bytes(name: str, data: object) -> None:
    if not isinstance(data, bytes):
        raise TypeError(f"{name} must be bytes, got {type(data).__name__}")


class CaskStore:
    """Log-structured key-value store.

    Args:
        config: Store configuration
        clock: Optional UTC clock, used for record timestamps and segment names

    Public API:
        - put(key, value): Append a write
        - get(key): Latest value or None
        - flush(): Drain the write buffer to disk
        - close(): Flush and release the store

    Invariants:
        - Writes are applied in call order; the latest put for a key wins
        - The index is volatile: a new store starts with an empty index
          even if segments already exist on disk
        - Single-threaded: no operation is safe to call concurrently
    """

    def __init__(self, config: CaskConfig, clock: Clock | None = None):
        self.config = config
        self.data_dir = Path(config.data_dir)
        self._closed = False

        self._codec = RecordCodec(config.checksum)
        self._index = KeyDir()
        self._segments = SegmentStore(
            self.data_dir,
            max_segment_bytes=config.max_segment_bytes,
            clock=clock,
            fsync=config.fsync_on_flush,
        )
        self._writer = WritePath(
            self._segments,
            self._index,
            self._codec,
            batch_bytes=config.write_batch_bytes,
            clock=clock,
        )
        self._reader = ValueReader(
            self._index,
            self._segments,
            self._codec,
            self._writer,
            verify=config.verify_on_read,
        )

        logger.info(f"Opened logcask store at {self.data_dir} (segment {self._writer.active.segment_id})")

    def _ensure_open(self) -> None:
        if self._closed:
            raise StoreClosedError("Store is closed")

    def put(self, key: Key, value: Value) -> None:
        """Insert or overwrite ``key`` with ``value``."""
        self._ensure_open()
        _check_bytes("key", key)
        _check_bytes("value", value)
        self._writer.put(key, value)

    def get(self, key: Key) -> Value | None:
        """Return the latest value for ``key``, or None if it was never written."""
        self._ensure_open()
        _check_bytes("key", key)
        return self._reader.get(key)

    def location(self, key: Key) -> KeyLocation | None:
        """Return the index entry for ``key``."""
        self._ensure_open()
        _check_bytes("key", key)
        return self._index.get(key)

    def flush(self) -> None:
        """Write any buffered records to the active segment."""
        self._ensure_open()
        self._writer.flush()

    def keys(self) -> Iterator[Key]:
        """Iterate indexed keys in sorted order."""
        self._ensure_open()
        return self._index.keys()

    def __contains__(self, key: object) -> bool:
        self._ensure_open()
        return key in self._index

    def __len__(self) -> int:
        self._ensure_open()
        return len(self._index)

    def stats(self) -> dict[str, Any]:
        """Return a snapshot of store state."""
        active = self._writer.active
        return {
            "data_dir": str(self.data_dir),
            "keys": len(self._index),
            "active_segment": active.segment_id,
            "active_segment_bytes": active.size,
            "pending_bytes": self._writer.pending_bytes,
            "flushes": self._writer.flush_count,
            "rotations": self._writer.rotation_count,
            "segments": len(self._segments.list_segments()),
            "checksum": self._codec.algorithm,
            "closed": self._closed,
        }

    def close(self) -> None:
        """Flush buffered writes and close the store."""
        if self._closed:
            return
        logger.info("Closing logcask store")
        self._writer.flush()
        self._closed = True

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False
