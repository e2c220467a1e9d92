"""Protocol definition for the record codec."""

from __future__ import annotations

from typing import Protocol

from ..core.types import Key, Record, Value


class Codec(Protocol):
    """Turns writes into checksummed records and back."""

    def encode(self, key: Key, value: Value, timestamp: str) -> bytes:
        """Encode a write into a record, without the terminator."""
        ...

    def decode(self, data: bytes) -> Record:
        """Decode a record.

        Raises:
            CorruptionError: The record is malformed or fails its checksum
        """
        ...

    def value_offset(self, record: bytes, value: Value) -> int:
        """Offset of the value payload inside an encoded record."""
        ...
