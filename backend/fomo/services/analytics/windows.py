# backend/fomo/services/analytics/windows.py
"""
Boost and paid-plan windows.

Boost rows encode their active window indirectly:

  hourly boosts: created_at .. created_at + duration_hours
  daily boosts:  start_date 00:00 UTC (never before created_at)
                 .. end_date (end of that day), or created_at + duration_hours

A deactivation (cancel/pause/early completion) cuts the planned end short.
Ended windows are half-open; a still-running window with no end is open
and runs to the end of the query range.
"""

import logging
from dataclasses import dataclass
from datetime import datetime, time, timedelta
from typing import Iterable, Optional

from ..statuses import BoostStatus, SubscriptionStatus
from .intervals import (
    Interval,
    QueryRange,
    Timestamp,
    clamp_to_range,
    has_time_component,
    parse_timestamp,
)

logger = logging.getLogger(__name__)

FREE_PLAN_SLUGS = frozenset({"", "free", "basic_free"})

# Statuses under which a boost never ran
_NEVER_RAN = (BoostStatus.PENDING,)
# Statuses where updated_at marks the moment the boost stopped
_STOPPED = (BoostStatus.CANCELED, BoostStatus.PAUSED, BoostStatus.COMPLETED)


@dataclass(frozen=True)
class BoostRecord:
    """A boost row as read from profile_boosts / offer_boosts / event_boosts."""
    entity_id: str
    status: Optional[BoostStatus]
    start_date: Optional[Timestamp] = None
    end_date: Optional[Timestamp] = None
    created_at: Optional[Timestamp] = None
    duration_mode: Optional[str] = None
    duration_hours: Optional[int] = None
    deactivated_at: Optional[Timestamp] = None


@dataclass(frozen=True)
class PlanRecord:
    """A row of a business's plan history."""
    plan_slug: str
    valid_from: Timestamp
    valid_to: Optional[Timestamp] = None


@dataclass(frozen=True)
class SubscriptionRecord:
    status: Optional[SubscriptionStatus]
    current_period_start: Timestamp
    current_period_end: Optional[Timestamp] = None
    canceled_at: Optional[Timestamp] = None


def compute_boost_window(record: BoostRecord, query_range: QueryRange) -> Optional[Interval]:
    """
    Concrete window of one boost, clamped to the query range.

    Returns None for boosts that never ran, have unparsable dates, or fall
    entirely outside the range.
    """
    if record.status in _NEVER_RAN:
        return None

    try:
        window = _raw_boost_window(record)
    except ValueError as e:
        logger.warning(f"Dropping boost for {record.entity_id}: {e}")
        return None

    if window is None:
        return None
    start, end, open_ended = window

    if open_ended:
        if start > query_range.end:
            return None
        return clamp_to_range(Interval(start, max(start, query_range.end), True), query_range)

    if start > end:
        return None
    return clamp_to_range(Interval(start, end, end_inclusive=False), query_range)


def _raw_boost_window(record: BoostRecord) -> Optional[tuple[datetime, Optional[datetime], bool]]:
    """(start, end, open_ended) before clamping."""
    created = parse_timestamp(record.created_at) if record.created_at else None
    deactivated = parse_timestamp(record.deactivated_at) if record.deactivated_at else None
    duration = timedelta(hours=record.duration_hours) if record.duration_hours else None

    if (record.duration_mode or "daily") == "hourly" and created is not None:
        start = created
        planned_end = created + duration if duration else None
    else:
        if record.start_date:
            start = _parse_boundary(record.start_date, end_of_day=False)
        elif created is not None:
            start = created
        else:
            raise ValueError("no start_date or created_at")

        # A boost cannot claim activity from before it was bought
        if created is not None and created > start:
            start = created

        if record.end_date:
            planned_end = _parse_boundary(record.end_date, end_of_day=True)
        elif created is not None and duration:
            planned_end = created + duration
        else:
            planned_end = None

    if deactivated is not None and (planned_end is None or deactivated < planned_end):
        return start, deactivated, False

    if planned_end is not None:
        return start, planned_end, False

    # No planned end: only a boost that is still running is open-ended
    if record.status in _STOPPED:
        return None
    return start, None, True


def _parse_boundary(value: Timestamp, end_of_day: bool) -> datetime:
    """Date-only end dates cover the whole day (exclusive next midnight)."""
    parsed = parse_timestamp(value)
    if has_time_component(value):
        return parsed
    if end_of_day:
        return datetime.combine(parsed.date() + timedelta(days=1), time.min, tzinfo=parsed.tzinfo)
    return parsed


def boost_windows(
    records: Iterable[BoostRecord],
    query_range: QueryRange,
) -> list[tuple[str, Interval]]:
    """(entity_id, window) for every boost that ran inside the range."""
    windows = []
    for record in records:
        window = compute_boost_window(record, query_range)
        if window is not None:
            windows.append((record.entity_id, window))
    return windows


def plan_history_windows(
    records: Iterable[PlanRecord],
    query_range: QueryRange,
) -> list[Interval]:
    """
    Paid-plan intervals from plan history.

    A row with valid_to is closed at valid_to (exclusive); the current row
    has no valid_to and stays open to the query end.
    """
    windows: list[Interval] = []
    for record in records:
        if (record.plan_slug or "").strip().lower() in FREE_PLAN_SLUGS:
            continue
        try:
            start = parse_timestamp(record.valid_from)
            end = parse_timestamp(record.valid_to) if record.valid_to else None
        except ValueError as e:
            logger.warning(f"Dropping plan history row ({record.plan_slug}): {e}")
            continue

        if end is None:
            if start > query_range.end:
                continue
            interval = Interval(start, query_range.end, end_inclusive=True)
        else:
            if start > end:
                logger.warning(f"Dropping plan history row ({record.plan_slug}): valid_from after valid_to")
                continue
            interval = Interval(start, end, end_inclusive=False)

        clamped = clamp_to_range(interval, query_range)
        if clamped is not None:
            windows.append(clamped)
    return windows


def subscription_window(
    record: SubscriptionRecord | None,
    query_range: QueryRange,
) -> Optional[Interval]:
    """
    Featured window from the current subscription row.

    Used when a business has no plan history: a live subscription is
    featured from its period start onwards; a canceled or paused one ends
    at canceled_at (or its period end).
    """
    if record is None:
        return None

    try:
        start = parse_timestamp(record.current_period_start)
        if record.status in (SubscriptionStatus.CANCELED, SubscriptionStatus.PAUSED):
            raw_end = record.canceled_at or record.current_period_end
            if not raw_end:
                return None
            interval = Interval(start, parse_timestamp(raw_end), end_inclusive=False)
        elif record.status is None:
            return None
        else:
            if start > query_range.end:
                return None
            interval = Interval(start, query_range.end, end_inclusive=True)
    except ValueError as e:
        logger.warning(f"Dropping subscription window: {e}")
        return None

    return clamp_to_range(interval, query_range)
