"""Common type definitions for logcask.

Defines fundamental types used across all components.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

# Core primitive types
Key = bytes
Value = bytes
SegmentId = str


@dataclass(frozen=True)
class Record:
    """A decoded, checksum-validated record.

    Wire layout: ``checksum,timestamp,key_size,key,value_size,value``
    """

    checksum: int
    timestamp: str
    key_size: int
    key: Key
    value_size: int
    value: Value


@dataclass(frozen=True)
class KeyLocation:
    """Where the latest value of a key lives on disk.

    Attributes:
        segment_id: Name of the segment file holding the record
        value_offset: Byte offset of the value payload within the segment
        value_size: Length of the value payload in bytes
        record_offset: Byte offset where the framed record starts
        record_size: Length of the framed record, excluding the terminator
        timestamp: Timestamp written into the record
    """

    segment_id: SegmentId
    value_offset: int
    value_size: int
    record_offset: int
    record_size: int
    timestamp: str


@dataclass
class SegmentHandle:
    """An append-only segment file.

    ``size`` is the number of bytes known to be on disk; it only grows,
    and only through SegmentStore.append.
    """

    segment_id: SegmentId
    path: Path
    size: int = 0
    sealed: bool = False
