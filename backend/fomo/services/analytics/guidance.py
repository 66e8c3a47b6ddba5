# backend/fomo/services/analytics/guidance.py
"""
Guidance: when does a business's audience show up?

Activity is bucketed by (weekday, 2-hour block) in the business timezone
and the busiest blocks are reported. Visits here are dated by check-in,
unlike the boost value report.
"""

from collections import Counter
from dataclasses import asdict, dataclass
from datetime import datetime
from typing import Callable, Iterable, Optional, Sequence
from zoneinfo import ZoneInfo

from sqlalchemy.orm import Session

from . import sources
from .attribution import EngagementEvent
from .intervals import QueryRange
from .metrics import run_isolated

BLOCK_HOURS = 2


@dataclass(frozen=True)
class TimeWindow:
    day_index: int  # 0 = Sunday
    hours: str
    count: int


# Shown when there is no activity at all
DEFAULT_WINDOWS = (
    TimeWindow(5, "18:00–20:00", 0),
    TimeWindow(6, "19:00–21:00", 0),
)
DEFAULT_PUBLISH = TimeWindow(5, "17:00–19:00", 0)
DEFAULT_INTERACTIONS = TimeWindow(5, "18:00–21:00", 0)
DEFAULT_VISITS = TimeWindow(5, "20:00–23:00", 0)


def format_hour_range(hour: int) -> str:
    return f"{hour:02d}:00–{(hour + BLOCK_HOURS) % 24:02d}:00"


def best_time_windows(
    timestamps: Iterable[datetime],
    tz: ZoneInfo,
    top: int = 2,
    defaults: Sequence[TimeWindow] = DEFAULT_WINDOWS,
) -> list[TimeWindow]:
    """Busiest (weekday, 2-hour block) windows, most active first."""
    counts: Counter[tuple[int, int]] = Counter()
    for t in timestamps:
        local = t.astimezone(tz)
        day = local.isoweekday() % 7
        block = (local.hour // BLOCK_HOURS) * BLOCK_HOURS
        counts[(day, block)] += 1

    if not counts:
        return list(defaults)

    ranked = sorted(counts.items(), key=lambda item: (-item[1], item[0]))
    return [
        TimeWindow(day_index=day, hours=format_hour_range(block), count=count)
        for (day, block), count in ranked[:top]
    ]


@dataclass(frozen=True)
class GuidanceSection:
    views: list[TimeWindow]
    interactions: list[TimeWindow]
    visits: list[TimeWindow]
    totals: dict[str, int]
    degraded: bool = False


@dataclass(frozen=True)
class GuidanceReport:
    business_id: str
    profile: GuidanceSection
    offers: GuidanceSection
    events: GuidanceSection
    recommended: dict[str, TimeWindow]

    @property
    def degraded(self) -> bool:
        return self.profile.degraded or self.offers.degraded or self.events.degraded

    def to_dict(self) -> dict:
        return asdict(self)


Streams = tuple[list[EngagementEvent], list[EngagementEvent], list[EngagementEvent]]

_NO_STREAMS: Streams = ([], [], [])


def _section(streams: Streams, tz: ZoneInfo, degraded: bool = False) -> GuidanceSection:
    views, interactions, visits = streams
    return GuidanceSection(
        views=best_time_windows((e.occurred_at for e in views), tz),
        interactions=best_time_windows((e.occurred_at for e in interactions), tz),
        visits=best_time_windows((e.occurred_at for e in visits), tz),
        totals={"views": len(views), "interactions": len(interactions), "visits": len(visits)},
        degraded=degraded,
    )


def build_guidance_report(
    db: Session,
    business_id: str,
    q: QueryRange,
    tz_name: str = "UTC",
    is_cancelled: Optional[Callable[[], bool]] = None,
) -> GuidanceReport:
    """
    Guidance for one business. A section whose reads fail is logged and
    reported empty with degraded=True; the other sections still render.
    """
    tz = ZoneInfo(tz_name)

    def profile_streams() -> Streams:
        return (
            sources.profile_views(db, business_id, q, is_cancelled),
            sources.profile_interactions(db, business_id, q, is_cancelled),
            sources.profile_visits(db, business_id, q, by_check_in=True, is_cancelled=is_cancelled),
        )

    def offer_streams() -> Streams:
        offer_ids = sources.business_offer_ids(db, business_id)
        return (
            sources.offer_views(db, offer_ids, q, is_cancelled),
            sources.offer_interactions(db, business_id, offer_ids, q, is_cancelled),
            sources.offer_visits(db, offer_ids, q, is_cancelled),
        )

    def event_streams() -> Streams:
        event_ids = sources.business_event_ids(db, business_id)
        return (
            sources.event_views(db, event_ids, q, is_cancelled),
            sources.event_interactions(db, event_ids, q, is_cancelled),
            sources.event_visits(db, event_ids, q, by_check_in=True, is_cancelled=is_cancelled),
        )

    streams: dict[str, Optional[Streams]] = {
        name: run_isolated(db, f"guidance '{name}' for business {business_id}", builder, lambda: None)
        for name, builder in (
            ("profile", profile_streams),
            ("offers", offer_streams),
            ("events", event_streams),
        )
    }

    def merged(index: int) -> list[datetime]:
        return [e.occurred_at for triple in streams.values() if triple for e in triple[index]]

    recommended = {}
    for index, key, default in (
        (0, "publish", DEFAULT_PUBLISH),
        (1, "interactions", DEFAULT_INTERACTIONS),
        (2, "visits", DEFAULT_VISITS),
    ):
        recommended[key] = best_time_windows(merged(index), tz, top=1, defaults=(default,))[0]

    sections = {
        name: _section(triple or _NO_STREAMS, tz, degraded=triple is None)
        for name, triple in streams.items()
    }

    return GuidanceReport(
        business_id=business_id,
        profile=sections["profile"],
        offers=sections["offers"],
        events=sections["events"],
        recommended=recommended,
    )
