# backend/fomo/services/analytics/sources.py
"""
Database readers for boost analytics.

Every engagement reader drains its query through fetch_all_paginated(),
ordered by primary key so pages are stable.
"""

import logging
from typing import Callable, Optional

from sqlalchemy import select
from sqlalchemy.orm import Session

from ...models.generated import (
    BusinessFollowers,
    BusinessSubscriptionPlanHistory,
    BusinessSubscriptions,
    Discounts,
    DiscountViews,
    EngagementEvents,
    EventBoosts,
    EventViews,
    Events,
    OfferBoosts,
    OfferPurchases,
    ProfileBoosts,
    Reservations,
    Rsvps,
    StudentDiscountRedemptions,
    Tickets,
)
from ..statuses import BoostStatus, RsvpStatus, SubscriptionStatus, parse_status
from .attribution import EngagementEvent
from .intervals import QueryRange, parse_timestamp
from .pagination import DEFAULT_PAGE_SIZE, fetch_all_paginated
from .windows import BoostRecord, PlanRecord, SubscriptionRecord

logger = logging.getLogger(__name__)

Cancelled = Optional[Callable[[], bool]]

PROFILE_INTERACTION_TYPES = ("follow", "favorite", "share", "profile_click")
OFFER_INTERACTION_TYPE = "offer_redeem_click"

_STOPPED_BOOSTS = (BoostStatus.CANCELED, BoostStatus.PAUSED, BoostStatus.COMPLETED)


# ── Entity ids ───────────────────────────────────────────────────────────


def business_offer_ids(db: Session, business_id: str) -> list[str]:
    rows = db.query(Discounts.id).filter(Discounts.business_id == business_id).all()
    return [str(r.id) for r in rows]


def business_event_ids(db: Session, business_id: str) -> list[str]:
    rows = db.query(Events.id).filter(Events.business_id == business_id).all()
    return [str(r.id) for r in rows]


# ── Profile ──────────────────────────────────────────────────────────────


def profile_views(db: Session, business_id: str, q: QueryRange, is_cancelled: Cancelled = None):
    return _read_events(
        db, EngagementEvents, EngagementEvents.business_id, EngagementEvents.created_at,
        EngagementEvents.business_id == business_id,
        EngagementEvents.event_type == "profile_view",
        query_range=q, is_cancelled=is_cancelled,
    )


def profile_interactions(db: Session, business_id: str, q: QueryRange, is_cancelled: Cancelled = None):
    """Follows, favorites, shares and profile clicks, plus new followers."""
    events = _read_events(
        db, EngagementEvents, EngagementEvents.business_id, EngagementEvents.created_at,
        EngagementEvents.business_id == business_id,
        EngagementEvents.event_type.in_(PROFILE_INTERACTION_TYPES),
        query_range=q, is_cancelled=is_cancelled,
    )
    followers = _read_events(
        db, BusinessFollowers, BusinessFollowers.business_id, BusinessFollowers.created_at,
        BusinessFollowers.business_id == business_id,
        BusinessFollowers.unfollowed_at.is_(None),
        query_range=q, is_cancelled=is_cancelled,
    )
    return events + followers


def profile_visits(
    db: Session,
    business_id: str,
    q: QueryRange,
    by_check_in: bool = False,
    is_cancelled: Cancelled = None,
):
    """
    Checked-in direct reservations plus student discount redemptions.

    Direct means no event and no offer purchase behind the reservation;
    offer-linked check-ins are offer visits. Reservations are dated by
    creation, or by check-in when by_check_in is set.
    """
    offer_linked = (
        select(OfferPurchases.reservation_id)
        .where(OfferPurchases.reservation_id.isnot(None))
    )
    time_column = Reservations.checked_in_at if by_check_in else Reservations.created_at

    reservations = _read_events(
        db, Reservations, Reservations.business_id, time_column,
        Reservations.business_id == business_id,
        Reservations.event_id.is_(None),
        Reservations.checked_in_at.isnot(None),
        Reservations.id.notin_(offer_linked),
        query_range=q, is_cancelled=is_cancelled,
    )
    redemptions = _read_events(
        db, StudentDiscountRedemptions, StudentDiscountRedemptions.business_id,
        StudentDiscountRedemptions.created_at,
        StudentDiscountRedemptions.business_id == business_id,
        query_range=q, is_cancelled=is_cancelled,
    )
    return reservations + redemptions


# ── Offers ───────────────────────────────────────────────────────────────


def offer_views(db: Session, offer_ids: list[str], q: QueryRange, is_cancelled: Cancelled = None):
    if not offer_ids:
        return []
    return _read_events(
        db, DiscountViews, DiscountViews.discount_id, DiscountViews.viewed_at,
        DiscountViews.discount_id.in_(offer_ids),
        query_range=q, is_cancelled=is_cancelled,
    )


def offer_interactions(
    db: Session,
    business_id: str,
    offer_ids: list[str],
    q: QueryRange,
    is_cancelled: Cancelled = None,
):
    if not offer_ids:
        return []
    return _read_events(
        db, EngagementEvents, EngagementEvents.entity_id, EngagementEvents.created_at,
        EngagementEvents.business_id == business_id,
        EngagementEvents.event_type == OFFER_INTERACTION_TYPE,
        EngagementEvents.entity_id.in_(offer_ids),
        query_range=q, is_cancelled=is_cancelled,
    )


def offer_visits(db: Session, offer_ids: list[str], q: QueryRange, is_cancelled: Cancelled = None):
    """Redeemed purchases, dated by redemption."""
    if not offer_ids:
        return []
    return _read_events(
        db, OfferPurchases, OfferPurchases.discount_id, OfferPurchases.redeemed_at,
        OfferPurchases.discount_id.in_(offer_ids),
        OfferPurchases.redeemed_at.isnot(None),
        query_range=q, is_cancelled=is_cancelled,
    )


# ── Events ───────────────────────────────────────────────────────────────


def event_views(db: Session, event_ids: list[str], q: QueryRange, is_cancelled: Cancelled = None):
    if not event_ids:
        return []
    return _read_events(
        db, EventViews, EventViews.event_id, EventViews.viewed_at,
        EventViews.event_id.in_(event_ids),
        query_range=q, is_cancelled=is_cancelled,
    )


def event_interactions(db: Session, event_ids: list[str], q: QueryRange, is_cancelled: Cancelled = None):
    """RSVPs (interested / going), dated by creation."""
    if not event_ids:
        return []
    return _read_events(
        db, Rsvps, Rsvps.event_id, Rsvps.created_at,
        Rsvps.event_id.in_(event_ids),
        Rsvps.status.in_([s.value for s in RsvpStatus]),
        query_range=q, is_cancelled=is_cancelled,
    )


def event_visits(
    db: Session,
    event_ids: list[str],
    q: QueryRange,
    by_check_in: bool = False,
    is_cancelled: Cancelled = None,
):
    """
    Checked-in tickets and event reservations.

    Only rows with a check-in count. They are dated by ticket/reservation
    creation unless by_check_in is set.
    """
    if not event_ids:
        return []

    ticket_time = Tickets.checked_in_at if by_check_in else Tickets.created_at
    reservation_time = Reservations.checked_in_at if by_check_in else Reservations.created_at

    tickets = _read_events(
        db, Tickets, Tickets.event_id, ticket_time,
        Tickets.event_id.in_(event_ids),
        Tickets.checked_in_at.isnot(None),
        query_range=q, is_cancelled=is_cancelled,
    )
    reservations = _read_events(
        db, Reservations, Reservations.event_id, reservation_time,
        Reservations.event_id.in_(event_ids),
        Reservations.checked_in_at.isnot(None),
        query_range=q, is_cancelled=is_cancelled,
    )
    return tickets + reservations


# ── Boosts / plans ───────────────────────────────────────────────────────


def profile_boost_records(db: Session, business_id: str) -> list[BoostRecord]:
    rows = db.query(ProfileBoosts).filter(ProfileBoosts.business_id == business_id).all()
    return [_boost_record(business_id, row) for row in rows]


def offer_boost_records(db: Session, business_id: str) -> list[BoostRecord]:
    rows = db.query(OfferBoosts).filter(OfferBoosts.business_id == business_id).all()
    return [
        _boost_record(row.discount_id, row, deactivated=row.active is False)
        for row in rows
    ]


def event_boost_records(db: Session, business_id: str) -> list[BoostRecord]:
    rows = db.query(EventBoosts).filter(EventBoosts.business_id == business_id).all()
    return [_boost_record(row.event_id, row) for row in rows]


def plan_history_records(db: Session, business_id: str) -> list[PlanRecord]:
    rows = (
        db.query(BusinessSubscriptionPlanHistory)
        .filter(BusinessSubscriptionPlanHistory.business_id == business_id)
        .order_by(BusinessSubscriptionPlanHistory.valid_from)
        .all()
    )
    return [
        PlanRecord(plan_slug=row.plan_slug, valid_from=row.valid_from, valid_to=row.valid_to)
        for row in rows
    ]


def current_subscription(db: Session, business_id: str) -> SubscriptionRecord | None:
    row = (
        db.query(BusinessSubscriptions)
        .filter(BusinessSubscriptions.business_id == business_id)
        .first()
    )
    if not row:
        return None
    return SubscriptionRecord(
        status=parse_status(SubscriptionStatus, row.status),
        current_period_start=row.current_period_start,
        current_period_end=row.current_period_end,
        canceled_at=row.canceled_at,
    )


# ── Helpers ──────────────────────────────────────────────────────────────


def _boost_record(entity_id, row, deactivated: bool = False) -> BoostRecord:
    status = parse_status(BoostStatus, row.status)
    stopped = deactivated or status in _STOPPED_BOOSTS
    return BoostRecord(
        entity_id=str(entity_id),
        status=status,
        start_date=row.start_date,
        end_date=row.end_date,
        created_at=row.created_at,
        duration_mode=row.duration_mode,
        duration_hours=row.duration_hours,
        deactivated_at=row.updated_at if stopped else None,
    )


def _read_events(
    db: Session,
    model,
    entity_column,
    time_column,
    *criteria,
    query_range: QueryRange,
    is_cancelled: Cancelled = None,
    page_size: int = DEFAULT_PAGE_SIZE,
) -> list[EngagementEvent]:
    query = (
        db.query(model.id, entity_column, time_column)
        .filter(
            *criteria,
            time_column >= query_range.start,
            time_column <= query_range.end,
        )
        .order_by(model.id)
    )

    rows = fetch_all_paginated(
        lambda offset, limit: query.offset(offset).limit(limit).all(),
        page_size=page_size,
        is_cancelled=is_cancelled,
    )

    events = []
    for _, entity_id, occurred_at in rows:
        if occurred_at is None or entity_id is None:
            continue
        events.append(EngagementEvent(entity_id=str(entity_id), occurred_at=parse_timestamp(occurred_at)))
    return events
