"""Unit tests for the segment store."""

import logging
import os
import shutil
import tempfile
from datetime import datetime, timedelta, timezone
from pathlib import Path

import pytest

from logcask.components.segment import SegmentStore
from logcask.core.errors import (
    SegmentError,
    SegmentNotFoundError,
    SegmentSealedError,
    ShortReadError,
    StorageIOError,
)


class FakeClock:
    """Deterministic UTC clock that only moves when told to."""

    def __init__(self, start=datetime(2024, 1, 2, 3, 4, 5, 678000, tzinfo=timezone.utc)):
        self.now = start

    def __call__(self):
        return self.now

    def advance(self, ms=1):
        self.now += timedelta(milliseconds=ms)


@pytest.fixture
def temp_dir():
    """Create temporary directory for tests."""
    tmpdir = tempfile.mkdtemp()
    yield tmpdir
    shutil.rmtree(tmpdir, ignore_errors=True)


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def store_dir(temp_dir):
    """Data directory that does not exist yet."""
    return Path(temp_dir) / "segments"


def test_active_segment_creates_directory_and_file(store_dir, clock):
    """Test that the first call creates the directory and an empty segment."""
    segments = SegmentStore(store_dir, max_segment_bytes=100, clock=clock)
    active = segments.active_segment()

    assert store_dir.is_dir()
    assert active.segment_id == "2024-01-02T03-04-05.678Z"
    assert active.path.exists()
    assert active.size == 0
    assert segments.list_segments() == [active.segment_id]


def test_active_segment_picks_lexicographic_max(store_dir, clock):
    """Test that the newest-named segment is reused when it has room."""
    store_dir.mkdir()
    (store_dir / "2023-12-31T23-59-59.999Z").write_bytes(b"old\n")
    (store_dir / "2024-01-01T00-00-00.000Z").write_bytes(b"newer\n")
    (store_dir / "2023-06-01T00-00-00.000Z").write_bytes(b"oldest\n")

    segments = SegmentStore(store_dir, max_segment_bytes=100, clock=clock)
    active = segments.active_segment()

    assert active.segment_id == "2024-01-01T00-00-00.000Z"
    assert active.size == len(b"newer\n")


def test_active_segment_ignores_stray_files(store_dir, clock):
    """Test that files not named like segments are skipped."""
    store_dir.mkdir()
    (store_dir / "config.yaml").write_text("data_dir: .\n")
    (store_dir / "2024-01-01T00-00-00.000Z").write_bytes(b"")

    segments = SegmentStore(store_dir, max_segment_bytes=100, clock=clock)

    assert segments.active_segment().segment_id == "2024-01-01T00-00-00.000Z"
    assert segments.list_segments() == ["2024-01-01T00-00-00.000Z"]


def test_stray_file_warned_once(store_dir, clock, caplog):
    """Test that repeated scans log each stray file a single time."""
    store_dir.mkdir()
    (store_dir / "notes.txt").write_text("hello\n")
    segments = SegmentStore(store_dir, max_segment_bytes=100, clock=clock)

    with caplog.at_level(logging.WARNING, logger="logcask.components.segment"):
        segments.active_segment()
        segments.list_segments()
        segments.list_segments()

    warnings = [r for r in caplog.records if "notes.txt" in r.getMessage()]
    assert len(warnings) == 1


def test_full_latest_segment_starts_new_one(store_dir, clock):
    """Test that a latest segment over the limit is not reused."""
    store_dir.mkdir()
    (store_dir / "2024-01-01T00-00-00.000Z").write_bytes(b"x" * 101)

    segments = SegmentStore(store_dir, max_segment_bytes=100, clock=clock)
    active = segments.active_segment()

    assert active.segment_id == "2024-01-02T03-04-05.678Z"
    assert active.size == 0
    assert len(segments.list_segments()) == 2


def test_segment_at_limit_is_reused(store_dir, clock):
    """Test that a segment exactly at the limit is still active."""
    store_dir.mkdir()
    (store_dir / "2024-01-01T00-00-00.000Z").write_bytes(b"x" * 100)

    segments = SegmentStore(store_dir, max_segment_bytes=100, clock=clock)
    assert segments.active_segment().segment_id == "2024-01-01T00-00-00.000Z"


def test_append_returns_start_offsets(store_dir, clock):
    """Test that appends return exact, cumulative offsets."""
    segments = SegmentStore(store_dir, max_segment_bytes=1000, clock=clock)
    active = segments.active_segment()

    assert segments.append(active, b"first\n") == 0
    assert segments.append(active, b"second\n") == 6
    assert active.size == 13
    assert active.path.read_bytes() == b"first\nsecond\n"


def test_append_to_sealed_segment_fails(store_dir, clock):
    """Test that sealed segments reject writes."""
    segments = SegmentStore(store_dir, max_segment_bytes=4, clock=clock)
    active = segments.active_segment()
    segments.append(active, b"12345")
    segments.rotate_if_needed(active)

    with pytest.raises(SegmentSealedError):
        segments.append(active, b"more")


def test_append_detects_size_desync(store_dir, clock):
    """Test that bytes written behind the store's back are detected."""
    segments = SegmentStore(store_dir, max_segment_bytes=1000, clock=clock)
    active = segments.active_segment()
    segments.append(active, b"abc\n")

    with open(active.path, "ab") as f:
        f.write(b"rogue\n")

    with pytest.raises(SegmentError):
        segments.append(active, b"def\n")
    assert active.size == 4


def test_rotate_only_when_exceeded(store_dir, clock):
    """Test rotation happens strictly above the limit."""
    segments = SegmentStore(store_dir, max_segment_bytes=10, clock=clock)
    active = segments.active_segment()

    segments.append(active, b"x" * 10)
    assert segments.rotate_if_needed(active) is active

    clock.advance(5)
    segments.append(active, b"y")
    rotated = segments.rotate_if_needed(active)

    assert rotated is not active
    assert active.sealed
    assert not rotated.sealed
    assert rotated.size == 0
    assert rotated.segment_id > active.segment_id
    assert segments.list_segments() == [active.segment_id, rotated.segment_id]


def test_failed_rotation_leaves_segment_writable(store_dir, clock, monkeypatch):
    """Test that a segment is only sealed once its replacement exists."""
    segments = SegmentStore(store_dir, max_segment_bytes=10, clock=clock)
    active = segments.active_segment()
    segments.append(active, b"x" * 11)

    create_segment = segments.create_segment
    calls = []

    def flaky_create():
        calls.append(1)
        if len(calls) == 1:
            raise StorageIOError("disk full")
        return create_segment()

    monkeypatch.setattr(segments, "create_segment", flaky_create)

    with pytest.raises(StorageIOError):
        segments.rotate_if_needed(active)
    assert not active.sealed
    assert segments.append(active, b"y") == 11

    clock.advance(5)
    rotated = segments.rotate_if_needed(active)

    assert active.sealed
    assert rotated is not active
    assert segments.list_segments() == [active.segment_id, rotated.segment_id]


def test_rotation_within_same_millisecond_gets_unique_name(store_dir, clock):
    """Test that a frozen clock still yields distinct, increasing names."""
    segments = SegmentStore(store_dir, max_segment_bytes=1, clock=clock)
    first = segments.active_segment()
    segments.append(first, b"ab")
    second = segments.rotate_if_needed(first)
    segments.append(second, b"cd")
    third = segments.rotate_if_needed(second)

    assert first.segment_id == "2024-01-02T03-04-05.678Z"
    assert second.segment_id == "2024-01-02T03-04-05.679Z"
    assert third.segment_id == "2024-01-02T03-04-05.680Z"
    assert first.path.read_bytes() == b"ab"


def test_clock_going_backwards_keeps_order(store_dir, clock):
    """Test that new names stay after existing ones even if the clock lags."""
    store_dir.mkdir()
    (store_dir / "2030-01-01T00-00-00.000Z").write_bytes(b"z" * 50)

    segments = SegmentStore(store_dir, max_segment_bytes=10, clock=clock)
    active = segments.active_segment()

    assert active.segment_id == "2030-01-01T00-00-00.001Z"


def test_read_at(store_dir, clock):
    """Test positioned reads return exactly the requested range."""
    segments = SegmentStore(store_dir, max_segment_bytes=1000, clock=clock)
    active = segments.active_segment()
    segments.append(active, b"hello world\n")

    assert segments.read_at(active.segment_id, 6, 5) == b"world"
    assert segments.read_at(active.segment_id, 0, 0) == b""


def test_read_at_short_read(store_dir, clock):
    """Test reading past the end of a segment fails."""
    segments = SegmentStore(store_dir, max_segment_bytes=1000, clock=clock)
    active = segments.active_segment()
    segments.append(active, b"hello")

    with pytest.raises(ShortReadError) as exc_info:
        segments.read_at(active.segment_id, 3, 10)

    assert exc_info.value.expected == 10
    assert exc_info.value.actual == 2


def test_read_at_missing_segment(store_dir, clock):
    """Test reading from a segment that does not exist."""
    segments = SegmentStore(store_dir, max_segment_bytes=1000, clock=clock)
    segments.active_segment()

    with pytest.raises(SegmentNotFoundError) as exc_info:
        segments.read_at("1999-01-01T00-00-00.000Z", 0, 1)

    assert isinstance(exc_info.value, StorageIOError)
    assert exc_info.value.segment_id == "1999-01-01T00-00-00.000Z"


def test_fsync_append(store_dir, clock):
    """Test appends with fsync enabled."""
    segments = SegmentStore(store_dir, max_segment_bytes=1000, clock=clock, fsync=True)
    active = segments.active_segment()
    segments.append(active, b"durable\n")

    assert os.path.getsize(active.path) == 8
