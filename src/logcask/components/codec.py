"""Record codec.

Encodes key/value writes into self-describing, checksummed records and
decodes them back with validation.
"""

from __future__ import annotations

import zlib
from collections.abc import Callable

from ..core.errors import ChecksumMismatchError, ConfigError, MalformedRecordError
from ..core.types import Key, Record, Value


# Record format (text fields, comma delimited, newline terminated on disk):
# [checksum],[timestamp],[key_len],[key],[value_len],[value]
# Keys and values must not contain the delimiter or the terminator; framing
# does no escaping.
DELIMITER = b","
TERMINATOR = b"\n"
FIELD_COUNT = 6


def crc32_checksum(data: bytes) -> int:
    """CRC32 of the canonical record bytes."""
    return zlib.crc32(data) & 0xFFFFFFFF


def codepoint_sum_checksum(data: bytes) -> int:
    """Sum of the Unicode code points of the canonical record, read as UTF-8.

    Invalid UTF-8 bytes count as U+FFFD. Weak: any permutation of the same
    characters yields the same checksum.
    """
    return sum(ord(c) for c in data.decode("utf-8", errors="replace"))


CHECKSUMS: dict[str, Callable[[bytes], int]] = {
    "crc32": crc32_checksum,
    "codepoint-sum": codepoint_sum_checksum,
}


def _parse_int(raw: bytes, field: str) -> int:
    if not raw.isdigit():
        raise MalformedRecordError(f"Field {field} is not a decimal integer: {raw[:32]!r}")
    return int(raw)


class RecordCodec:
    """Encode and decode delimiter-framed records.

    Args:
        checksum: Name of the checksum algorithm (see CHECKSUMS)

    Invariants:
        - The checksum covers timestamp, key length, key, value length
          and value, joined by the delimiter, and is stored first
        - decode() never returns a record whose checksum does not match
    """

    def __init__(self, checksum: str = "crc32"):
        if checksum not in CHECKSUMS:
            raise ConfigError(
                f"Unknown checksum algorithm {checksum!r}, expected one of {sorted(CHECKSUMS)}"
            )
        self.algorithm = checksum
        self._checksum_fn = CHECKSUMS[checksum]

    @staticmethod
    def canonical(timestamp: str, key: Key, value: Value) -> bytes:
        """Return the bytes the checksum is computed over."""
        return DELIMITER.join([
            timestamp.encode("ascii"),
            str(len(key)).encode("ascii"),
            key,
            str(len(value)).encode("ascii"),
            value,
        ])

    def checksum(self, timestamp: str, key: Key, value: Value) -> int:
        return self._checksum_fn(self.canonical(timestamp, key, value))

    def encode(self, key: Key, value: Value, timestamp: str) -> bytes:
        """Encode a write into a record (without the terminator)."""
        body = self.canonical(timestamp, key, value)
        checksum = self._checksum_fn(body)
        return str(checksum).encode("ascii") + DELIMITER + body

    @staticmethod
    def value_offset(record: bytes, value: Value) -> int:
        """Offset of the value payload inside an encoded record."""
        return len(record) - len(value)

    def decode(self, data: bytes) -> Record:
        """Decode and validate one record.

        A single trailing terminator is accepted and ignored.

        Raises:
            MalformedRecordError: Wrong field count or non-numeric fields
            ChecksumMismatchError: Stored checksum does not match contents
        """
        if data.endswith(TERMINATOR):
            data = data[:-1]

        parts = data.split(DELIMITER)
        if len(parts) != FIELD_COUNT:
            raise MalformedRecordError(
                f"Expected {FIELD_COUNT} fields, found {len(parts)}"
            )

        raw_checksum, raw_ts, raw_key_size, key, raw_value_size, value = parts
        stored = _parse_int(raw_checksum, "checksum")
        computed = self._checksum_fn(DELIMITER.join(parts[1:]))
        if stored != computed:
            raise ChecksumMismatchError(stored, computed)

        key_size = _parse_int(raw_key_size, "key_size")
        value_size = _parse_int(raw_value_size, "value_size")
        if key_size != len(key) or value_size != len(value):
            raise MalformedRecordError(
                f"Length fields ({key_size}, {value_size}) disagree with "
                f"payload ({len(key)}, {len(value)})"
            )

        try:
            timestamp = raw_ts.decode("ascii")
        except UnicodeDecodeError as e:
            raise MalformedRecordError(f"Invalid timestamp bytes: {e}") from e

        return Record(
            checksum=stored,
            timestamp=timestamp,
            key_size=key_size,
            key=key,
            value_size=value_size,
            value=value,
        )
