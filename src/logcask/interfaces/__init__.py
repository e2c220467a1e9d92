"""Protocols implemented by logcask components."""

from .codec import Codec
from .index import KeyIndex
from .segment import SegmentManager
from .store import KVStore

__all__ = ["Codec", "KeyIndex", "SegmentManager", "KVStore"]
