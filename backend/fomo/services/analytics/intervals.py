# backend/fomo/services/analytics/intervals.py
"""
Time intervals with explicit end semantics.

Every Interval states whether its end is inclusive. Closed periods (ended,
deactivated, downgraded) are half-open [start, end) so that an event at the
exact boundary of two adjacent periods lands in the second one only.
Open-ended periods are clamped to the query end and include it.
"""

from dataclasses import dataclass
from datetime import date, datetime, time, timedelta, timezone
from typing import Optional, Union

Timestamp = Union[datetime, str]


@dataclass(frozen=True)
class Interval:
    start: datetime
    end: datetime
    end_inclusive: bool

    def __post_init__(self):
        if self.start.tzinfo is None or self.end.tzinfo is None:
            raise ValueError("Interval bounds must be timezone-aware")
        if self.start > self.end:
            raise ValueError(f"Interval start {self.start} is after end {self.end}")


@dataclass(frozen=True)
class QueryRange:
    """Analytics query range; both ends inclusive."""
    start: datetime
    end: datetime

    def __post_init__(self):
        if self.start.tzinfo is None or self.end.tzinfo is None:
            raise ValueError("QueryRange bounds must be timezone-aware")
        if self.start > self.end:
            raise ValueError("QueryRange start must not be after end")

    @classmethod
    def last_days(cls, days: int, now: datetime | None = None) -> "QueryRange":
        now = now or datetime.now(timezone.utc)
        return cls(start=now - timedelta(days=days), end=now)


def parse_timestamp(value: Timestamp) -> datetime:
    """
    Parse an ISO-8601 value into an aware UTC datetime.

    Values without an offset are taken as UTC; date-only values mean
    midnight UTC. Raises ValueError when unparsable.
    """
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, date):
        parsed = datetime.combine(value, time.min)
    elif isinstance(value, str):
        raw = value.strip()
        if not raw:
            raise ValueError("Empty timestamp")
        if raw.endswith(("Z", "z")):
            raw = raw[:-1] + "+00:00"
        try:
            parsed = datetime.fromisoformat(raw)
        except ValueError:
            raise ValueError(f"Invalid timestamp: {value!r}")
    else:
        raise ValueError(f"Invalid timestamp type: {type(value).__name__}")

    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


def has_time_component(value: Timestamp) -> bool:
    if isinstance(value, datetime):
        return True
    if isinstance(value, date):
        return False
    return "T" in value or " " in value.strip()


def is_timestamp_within_window(timestamp: Timestamp, window: Interval) -> bool:
    """start <= t <= end when end_inclusive, else start <= t < end."""
    t = parse_timestamp(timestamp)
    if t < window.start:
        return False
    if window.end_inclusive:
        return t <= window.end
    return t < window.end


def clamp_to_range(interval: Interval, query_range: QueryRange) -> Optional[Interval]:
    """
    Restrict an interval to the query range.

    Returns None when nothing of the interval falls inside the range.
    Cutting an interval at the query end makes that end inclusive, since
    the range itself includes its end.
    """
    start = max(interval.start, query_range.start)

    if interval.end > query_range.end:
        end, inclusive = query_range.end, True
    else:
        end, inclusive = interval.end, interval.end_inclusive

    if start > end:
        return None
    if start == end and not inclusive:
        return None
    return Interval(start, end, inclusive)
