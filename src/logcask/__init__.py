"""logcask - Bitcask-style log-structured key-value store in Python."""

from .core.config import CaskConfig
from .core.errors import (
    CaskError,
    ChecksumMismatchError,
    ConfigError,
    CorruptionError,
    MalformedRecordError,
    SegmentError,
    SegmentNotFoundError,
    SegmentSealedError,
    ShortReadError,
    StorageIOError,
    StoreClosedError,
)
from .core.store import CaskStore
from .core.types import Key, KeyLocation, Record, SegmentHandle, Value

__all__ = [
    "CaskConfig",
    "CaskError",
    "ChecksumMismatchError",
    "ConfigError",
    "CorruptionError",
    "MalformedRecordError",
    "SegmentError",
    "SegmentNotFoundError",
    "SegmentSealedError",
    "ShortReadError",
    "StorageIOError",
    "StoreClosedError",
    "CaskStore",
    "Key",
    "Value",
    "Record",
    "KeyLocation",
    "SegmentHandle",
]
