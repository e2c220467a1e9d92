"""Wall-clock helpers.

Record timestamps and segment names share one fixed-width format,
``YYYY-MM-DDTHH-MM-SS.mmmZ``, so that lexicographic order of segment
names equals their chronological order.
"""

from __future__ import annotations

import re
from collections.abc import Callable
from datetime import datetime, timedelta, timezone

Clock = Callable[[], datetime]

TIMESTAMP_FORMAT = "%Y-%m-%dT%H-%M-%S"
TIMESTAMP_RE = re.compile(r"^\d{4}-\d{2}-\d{2}T\d{2}-\d{2}-\d{2}\.\d{3}Z$")


def utc_now() -> datetime:
    """Return the current time in UTC."""
    return datetime.now(timezone.utc)


def format_timestamp(moment: datetime) -> str:
    """Format a datetime as ``YYYY-MM-DDTHH-MM-SS.mmmZ`` in UTC."""
    if moment.tzinfo is not None:
        moment = moment.astimezone(timezone.utc)
    return f"{moment.strftime(TIMESTAMP_FORMAT)}.{moment.microsecond // 1000:03d}Z"


def parse_timestamp(text: str) -> datetime:
    """Parse a timestamp produced by format_timestamp."""
    if not TIMESTAMP_RE.match(text):
        raise ValueError(f"Not a timestamp: {text!r}")
    base, millis = text[:-1].split(".")
    moment = datetime.strptime(base, TIMESTAMP_FORMAT).replace(tzinfo=timezone.utc)
    return moment + timedelta(milliseconds=int(millis))


def is_timestamp(text: str) -> bool:
    return TIMESTAMP_RE.match(text) is not None


def next_timestamp(text: str) -> str:
    """Return the timestamp one millisecond after ``text``."""
    return format_timestamp(parse_timestamp(text) + timedelta(milliseconds=1))
