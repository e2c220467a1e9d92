"""Configuration for logcask.

Defines all tunable parameters for the storage engine.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any

import yaml

from ..components.codec import CHECKSUMS
from .errors import ConfigError


@dataclass
class CaskConfig:
    """Configuration parameters for the logcask storage engine.

    Attributes:
        data_dir: Directory holding the segment files
        max_segment_bytes: Segment size that, once exceeded, triggers rotation
        write_batch_bytes: Buffered bytes that trigger a flush
        checksum: Record checksum algorithm ("crc32" or "codepoint-sum")
        fsync_on_flush: Whether to fsync the segment after every flush
        verify_on_read: Whether get() reads and validates the whole record
    """

    data_dir: str
    max_segment_bytes: int = 4 * 1024  # 4 KB
    write_batch_bytes: int = 1024  # 1 KB
    checksum: str = "crc32"
    fsync_on_flush: bool = False
    verify_on_read: bool = False

    def __post_init__(self) -> None:
        self.data_dir = str(self.data_dir)
        if not self.data_dir:
            raise ConfigError("data_dir must not be empty")
        for name in ("max_segment_bytes", "write_batch_bytes"):
            value = getattr(self, name)
            if not isinstance(value, int) or isinstance(value, bool):
                raise ConfigError(f"{name} must be an integer, got {value!r}")
            if value <= 0:
                raise ConfigError(f"{name} must be positive, got {value}")
        for name in ("fsync_on_flush", "verify_on_read"):
            if not isinstance(getattr(self, name), bool):
                raise ConfigError(f"{name} must be a boolean, got {getattr(self, name)!r}")
        if not isinstance(self.checksum, str) or self.checksum not in CHECKSUMS:
            raise ConfigError(
                f"Unknown checksum algorithm {self.checksum!r}, expected one of {sorted(CHECKSUMS)}"
            )

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> CaskConfig:
        """Build a config from a mapping, rejecting unknown keys."""
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(data) - known)
        if unknown:
            raise ConfigError(f"Unknown config keys: {', '.join(unknown)}")
        if "data_dir" not in data:
            raise ConfigError("data_dir is required")
        return cls(**data)

    @classmethod
    def from_yaml(cls, path: str | Path) -> CaskConfig:
        """Load a config from a YAML file."""
        path = Path(path)
        try:
            with path.open("r", encoding="utf-8") as f:
                data = yaml.safe_load(f) or {}
        except OSError as e:
            raise ConfigError(f"Cannot read config {path}: {e}") from e
        except yaml.YAMLError as e:
            raise ConfigError(f"Invalid YAML in {path}: {e}") from e

        if not isinstance(data, Mapping):
            raise ConfigError(f"Config {path} must contain a mapping")
        return cls.from_dict(data)
