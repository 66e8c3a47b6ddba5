# backend/fomo/services/analytics/metrics.py
"""
Boost value report: views / interactions / visits with vs without boost.

Profile: featured while on a paid plan or under a profile boost
Offers:  boosted while an offer boost window covers the event
Events:  boosted while an event boost window covers the event

Each section is built independently. A failing section is logged and
reported as zeros with degraded=True; the rest of the report still renders.
"""

import logging
from collections import Counter
from dataclasses import asdict, dataclass, field
from datetime import datetime
from typing import Callable, Iterable, Optional, TypeVar
from zoneinfo import ZoneInfo

from sqlalchemy.orm import Session

from . import sources
from .attribution import BoostPeriod, EngagementEvent, attribute_events, compute_change_percent
from .intervals import QueryRange
from .pagination import QueryCancelled
from .windows import boost_windows, plan_history_windows, subscription_window

logger = logging.getLogger(__name__)

DEFAULT_BEST_DAY = 5  # Friday (0 = Sunday)

T = TypeVar("T")


@dataclass(frozen=True)
class MetricComparison:
    without: int = 0
    with_: int = 0
    change: int = 0

    @classmethod
    def from_counts(cls, without: int, with_: int) -> "MetricComparison":
        return cls(without=without, with_=with_, change=compute_change_percent(without, with_))


@dataclass(frozen=True)
class ComparisonMetrics:
    views: MetricComparison = field(default_factory=MetricComparison)
    interactions: MetricComparison = field(default_factory=MetricComparison)
    visits: MetricComparison = field(default_factory=MetricComparison)
    degraded: bool = False


@dataclass(frozen=True)
class BoostValueReport:
    business_id: str
    start: datetime
    end: datetime
    profile: ComparisonMetrics
    offers: ComparisonMetrics
    events: ComparisonMetrics
    best_days: dict[str, int]

    def to_dict(self) -> dict:
        return asdict(self)


def compare(
    views: Iterable[EngagementEvent],
    interactions: Iterable[EngagementEvent],
    visits: Iterable[EngagementEvent],
    periods: list[BoostPeriod],
) -> ComparisonMetrics:
    """Attribute three event streams against the same periods."""
    result = {}
    for name, events in (("views", views), ("interactions", interactions), ("visits", visits)):
        attribution = attribute_events(events, periods)
        result[name] = MetricComparison.from_counts(
            without=attribution.outside_period,
            with_=attribution.within_period,
        )
    return ComparisonMetrics(**result)


def best_day_index(timestamps: Iterable[datetime], tz: ZoneInfo) -> int:
    """
    Weekday (0 = Sunday .. 6 = Saturday) with the most activity.

    Ties go to the earlier weekday; no activity means Friday.
    """
    counts = Counter((t.astimezone(tz).isoweekday() % 7) for t in timestamps)
    if not counts:
        return DEFAULT_BEST_DAY
    return max(sorted(counts), key=lambda day: counts[day])


def profile_periods(db: Session, business_id: str, q: QueryRange) -> list[BoostPeriod]:
    """Paid-plan windows (history, else current subscription) plus profile boosts."""
    history = sources.plan_history_records(db, business_id)
    if history:
        intervals = plan_history_windows(history, q)
    else:
        window = subscription_window(sources.current_subscription(db, business_id), q)
        intervals = [window] if window is not None else []

    periods = [BoostPeriod(business_id, interval) for interval in intervals]
    periods.extend(
        BoostPeriod(entity_id, interval)
        for entity_id, interval in boost_windows(sources.profile_boost_records(db, business_id), q)
    )
    return periods


def build_boost_value_report(
    db: Session,
    business_id: str,
    q: QueryRange,
    tz_name: str = "UTC",
    is_cancelled: Optional[Callable[[], bool]] = None,
) -> BoostValueReport:
    """Assemble the full report. QueryCancelled propagates; nothing partial is returned."""
    tz = ZoneInfo(tz_name)
    rsvp_times: list[datetime] = []

    def profile_section() -> ComparisonMetrics:
        periods = profile_periods(db, business_id, q)
        return compare(
            sources.profile_views(db, business_id, q, is_cancelled),
            sources.profile_interactions(db, business_id, q, is_cancelled),
            sources.profile_visits(db, business_id, q, by_check_in=False, is_cancelled=is_cancelled),
            periods,
        )

    def offers_section() -> ComparisonMetrics:
        offer_ids = sources.business_offer_ids(db, business_id)
        periods = [
            BoostPeriod(entity_id, interval)
            for entity_id, interval in boost_windows(sources.offer_boost_records(db, business_id), q)
        ]
        return compare(
            sources.offer_views(db, offer_ids, q, is_cancelled),
            sources.offer_interactions(db, business_id, offer_ids, q, is_cancelled),
            sources.offer_visits(db, offer_ids, q, is_cancelled),
            periods,
        )

    def events_section() -> ComparisonMetrics:
        event_ids = sources.business_event_ids(db, business_id)
        periods = [
            BoostPeriod(entity_id, interval)
            for entity_id, interval in boost_windows(sources.event_boost_records(db, business_id), q)
        ]
        rsvps = sources.event_interactions(db, event_ids, q, is_cancelled)
        rsvp_times.extend(e.occurred_at for e in rsvps)
        return compare(
            sources.event_views(db, event_ids, q, is_cancelled),
            rsvps,
            sources.event_visits(db, event_ids, q, by_check_in=False, is_cancelled=is_cancelled),
            periods,
        )

    sections = {
        name: run_isolated(
            db,
            f"boost value '{name}' for business {business_id}",
            builder,
            lambda: ComparisonMetrics(degraded=True),
        )
        for name, builder in (
            ("profile", profile_section),
            ("offers", offers_section),
            ("events", events_section),
        )
    }

    best_day = best_day_index(rsvp_times, tz)

    return BoostValueReport(
        business_id=business_id,
        start=q.start,
        end=q.end,
        profile=sections["profile"],
        offers=sections["offers"],
        events=sections["events"],
        best_days={"profile": best_day, "offers": best_day, "events": best_day},
    )


def run_isolated(db: Session, label: str, builder: Callable[[], T], fallback: Callable[[], T]) -> T:
    """
    Run one report section; on failure log it, reset the session and
    return fallback(). Cancellation is never swallowed.
    """
    try:
        return builder()
    except QueryCancelled:
        raise
    except Exception:
        logger.exception(f"Report section failed: {label}")
        db.rollback()
        return fallback()
