"""logcask components."""

from .codec import RecordCodec
from .keydir import KeyDir
from .reader import ValueReader
from .segment import SegmentStore
from .write_path import WritePath

__all__ = ["RecordCodec", "KeyDir", "ValueReader", "SegmentStore", "WritePath"]
