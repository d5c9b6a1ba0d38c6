# salon/core.py

import re
import threading
import time as _time
from datetime import date as _date
from typing import NamedTuple

from .errors import InvalidDate, InvalidDuration, InvalidTimeFormat

_DATE_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")


class Interval(NamedTuple):
    start: int  # minutes since midnight
    end: int


def parse_time(value: str) -> int:
    """'HH:MM' -> minutes since midnight."""
    if not isinstance(value, str):
        raise InvalidTimeFormat(value)
    parts = value.split(":")
    if len(parts) != 2 or not all(p.isascii() and p.isdigit() for p in parts):
        raise InvalidTimeFormat(value)
    hour, minute = int(parts[0]), int(parts[1])
    if not (0 <= hour <= 23 and 0 <= minute <= 59):
        raise InvalidTimeFormat(value)
    return hour * 60 + minute


def to_interval(time: str, duration_minutes: int) -> Interval:
    if isinstance(duration_minutes, bool) or not isinstance(duration_minutes, int) or duration_minutes <= 0:
        raise InvalidDuration(duration_minutes)
    start = parse_time(time)
    return Interval(start, start + duration_minutes)


def overlaps(start_a, end_a, start_b=None, end_b=None) -> bool:
    """Half-open overlap test: [a) and [b) overlap, touching ends do not.

    Accepts two Interval objects, or four bounds (minutes or datetimes).
    """
    if start_b is None and end_b is None:
        a, b = start_a, end_a
        return a.start < b.end and a.end > b.start
    return start_a < end_b and end_a > start_b


def validate_date(value: str) -> str:
    """Checks a local 'YYYY-MM-DD' date string and returns it unchanged."""
    if not isinstance(value, str) or not _DATE_RE.match(value):
        raise InvalidDate(value)
    try:
        _date.fromisoformat(value)
    except ValueError:
        raise InvalidDate(value)
    return value


def format_minutes(minutes: int) -> str:
    return f"{minutes // 60:02d}:{minutes % 60:02d}"


_id_lock = threading.Lock()
_last_id = 0


def new_id() -> str:
    """Timestamp-derived id; strictly increasing within the process."""
    global _last_id
    with _id_lock:
        candidate = _time.time_ns()
        if candidate <= _last_id:
            candidate = _last_id + 1
        _last_id = candidate
        return str(candidate)
