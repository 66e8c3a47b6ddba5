# backend/fomo/services/analytics/attribution.py
"""
Boost attribution: did an engagement event happen while its entity was boosted?
"""

import math
from collections import defaultdict
from dataclasses import dataclass
from datetime import datetime
from typing import Iterable

from .intervals import Interval, Timestamp, is_timestamp_within_window, parse_timestamp


@dataclass(frozen=True)
class BoostPeriod:
    """A boost or paid-plan window of one entity (profile, offer or event)."""
    entity_id: str
    interval: Interval


@dataclass(frozen=True)
class EngagementEvent:
    """A view, interaction or visit on one entity."""
    entity_id: str
    occurred_at: datetime


@dataclass(frozen=True)
class Attribution:
    within_period: int = 0
    outside_period: int = 0

    @property
    def total(self) -> int:
        return self.within_period + self.outside_period


def is_within_any_period(
    timestamp: Timestamp,
    entity_id: str,
    periods: Iterable[BoostPeriod],
) -> bool:
    """True if any period of ``entity_id`` covers the timestamp."""
    t = parse_timestamp(timestamp)
    return any(
        p.entity_id == entity_id and is_timestamp_within_window(t, p.interval)
        for p in periods
    )


def attribute_events(
    events: Iterable[EngagementEvent],
    periods: Iterable[BoostPeriod],
) -> Attribution:
    """
    Split events into inside / outside their entity's periods.

    An event covered by several overlapping periods still counts once.
    """
    by_entity: dict[str, list[Interval]] = defaultdict(list)
    for period in periods:
        by_entity[period.entity_id].append(period.interval)

    within = outside = 0
    for event in events:
        intervals = by_entity.get(event.entity_id, ())
        if any(is_timestamp_within_window(event.occurred_at, i) for i in intervals):
            within += 1
        else:
            outside += 1

    return Attribution(within_period=within, outside_period=outside)


def compute_change_percent(before: int, after: int) -> int:
    """
    Signed change from ``before`` to ``after`` in whole percent.

    A zero baseline maps to 100 when anything happened after, else 0.
    Halves round up, as the dashboard has always shown them.
    """
    if before == 0:
        return 100 if after > 0 else 0
    return math.floor((after - before) / before * 100 + 0.5)
