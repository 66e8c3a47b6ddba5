# backend/fomo/services/statuses.py
"""
Closed status enumerations for rows read from the hosted database.

The database stores statuses as free text. Every value is mapped through
``parse_status`` where it enters the service; unknown values become None
(and are logged) instead of travelling further as raw strings.
"""

import logging
from enum import Enum
from typing import Optional, TypeVar

logger = logging.getLogger(__name__)


class ReservationStatus(str, Enum):
    PENDING = "pending"
    ACCEPTED = "accepted"
    DECLINED = "declined"
    CANCELLED = "cancelled"
    NO_SHOW = "no_show"


# Reservations that occupy capacity
LIVE_RESERVATION_STATUSES = (ReservationStatus.PENDING, ReservationStatus.ACCEPTED)


class BoostStatus(str, Enum):
    SCHEDULED = "scheduled"
    ACTIVE = "active"
    COMPLETED = "completed"
    CANCELED = "canceled"
    PENDING = "pending"
    PAUSED = "paused"


class SubscriptionStatus(str, Enum):
    ACTIVE = "active"
    PAST_DUE = "past_due"
    CANCELED = "canceled"
    TRIALING = "trialing"
    PAUSED = "paused"


class RsvpStatus(str, Enum):
    INTERESTED = "interested"
    GOING = "going"


_ALIASES = {
    "cancelled": "canceled",
    "canceled": "cancelled",
    "approved": "accepted",
    "confirmed": "accepted",
}

E = TypeVar("E", bound=Enum)


def parse_status(enum_cls: type[E], raw: Optional[str]) -> Optional[E]:
    """
    Map a raw status string onto ``enum_cls``.

    Matching is case-insensitive and tolerates the British/American
    spelling of cancel(l)ed. Returns None for empty or unknown values.
    """
    if raw is None:
        return None

    value = str(raw).strip().lower()
    if not value:
        return None

    try:
        return enum_cls(value)
    except ValueError:
        pass

    alias = _ALIASES.get(value)
    if alias is not None:
        try:
            return enum_cls(alias)
        except ValueError:
            pass

    logger.warning(f"Unrecognized {enum_cls.__name__} value: {raw!r}")
    return None
