# backend/fomo/services/slots/repository.py
"""
Database reads for the slot resolver.
"""

import logging
from collections import Counter
from datetime import date, datetime, time, timedelta, timezone
from zoneinfo import ZoneInfo

from sqlalchemy.orm import Session

from ...config import settings as app_settings
from ..statuses import LIVE_RESERVATION_STATUSES
from .config import ReservationConfig
from .definitions import ReservationSettings, parse_reservation_settings

logger = logging.getLogger(__name__)


def get_business(db: Session, business_id: str):
    """Get business by ID."""
    from ...models.generated import Businesses
    return db.query(Businesses).filter(Businesses.id == business_id).first()


def load_reservation_settings(
    db: Session,
    business_id: str,
    config: ReservationConfig | None = None,
) -> ReservationSettings | None:
    """Current reservation settings of a business, or None if it does not exist."""
    business = get_business(db, business_id)
    if not business:
        return None
    return parse_reservation_settings(business, config)


def get_closures(
    db: Session,
    business_id: str,
    start_date: date,
    end_date: date,
) -> list[tuple[date, str]]:
    """Slot closures in [start_date, end_date] as (date, "HH:MM") pairs."""
    from ...models.generated import ReservationSlotClosures

    rows = (
        db.query(ReservationSlotClosures.closure_date, ReservationSlotClosures.slot_time)
        .filter(
            ReservationSlotClosures.business_id == business_id,
            ReservationSlotClosures.closure_date >= start_date,
            ReservationSlotClosures.closure_date <= end_date,
        )
        .all()
    )
    return [(_as_date(closure_date), slot_time) for closure_date, slot_time in rows]


def get_booking_counts(
    db: Session,
    business_id: str,
    target_date: date,
    tz_name: str | None = None,
) -> dict[str, int]:
    """
    Live direct reservations per local "HH:MM" on ``target_date``.

    Direct reservations have no event_id. Pending and accepted ones hold
    capacity.
    """
    from ...models.generated import Reservations

    tz = ZoneInfo(tz_name or app_settings.business_timezone)
    day_start = datetime.combine(target_date, time.min, tzinfo=tz)
    day_end = day_start + timedelta(days=1)

    rows = (
        db.query(Reservations.preferred_time)
        .filter(
            Reservations.business_id == business_id,
            Reservations.event_id.is_(None),
            Reservations.status.in_([s.value for s in LIVE_RESERVATION_STATUSES]),
            Reservations.preferred_time >= day_start.astimezone(timezone.utc),
            Reservations.preferred_time < day_end.astimezone(timezone.utc),
        )
        .all()
    )

    counts: Counter[str] = Counter()
    for (preferred_time,) in rows:
        if preferred_time is None:
            continue
        if preferred_time.tzinfo is None:
            preferred_time = preferred_time.replace(tzinfo=timezone.utc)
        local = preferred_time.astimezone(tz)
        counts[f"{local.hour:02d}:{local.minute:02d}"] += 1

    return dict(counts)


def _as_date(value) -> date:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    return date.fromisoformat(str(value)[:10])
