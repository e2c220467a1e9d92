"""logcask core package."""

from .store import CaskStore

__all__ = ["CaskStore"]
