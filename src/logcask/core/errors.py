"""Exception hierarchy for logcask.

Defines all custom exceptions used throughout the implementation.
A missing key is not an error: lookups return None.
"""

from __future__ import annotations


class CaskError(Exception):
    """Base exception for all logcask errors."""
    pass


class ConfigError(CaskError):
    """Raised when configuration values are invalid."""
    pass


class StorageIOError(CaskError):
    """Raised when a filesystem operation (open/seek/read/write) fails."""
    pass


class SegmentNotFoundError(StorageIOError):
    """Raised when a referenced segment file does not exist."""

    def __init__(self, segment_id: str):
        self.segment_id = segment_id
        super().__init__(f"Segment not found: {segment_id}")


class SegmentError(CaskError):
    """Raised when segment bookkeeping disagrees with the file on disk."""
    pass


class SegmentSealedError(SegmentError):
    """Raised when appending to a segment that has been rotated out."""
    pass


class CorruptionError(CaskError):
    """Raised when a stored record cannot be trusted."""
    pass


class MalformedRecordError(CorruptionError):
    """Raised when a record does not split into the expected fields."""
    pass


class ChecksumMismatchError(CorruptionError):
    """Raised when a record's stored checksum does not match its contents."""

    def __init__(self, expected: int, actual: int):
        self.expected = expected
        self.actual = actual
        super().__init__(f"Checksum mismatch: stored {expected}, computed {actual}")


class ShortReadError(CaskError):
    """Raised when a segment holds fewer bytes than the index claims."""

    def __init__(self, segment_id: str, offset: int, expected: int, actual: int):
        self.segment_id = segment_id
        self.offset = offset
        self.expected = expected
        self.actual = actual
        super().__init__(
            f"Short read from {segment_id} at offset {offset}: "
            f"wanted {expected} bytes, got {actual}"
        )


class StoreClosedError(CaskError):
    """Raised when a closed store is used."""
    pass
