# backend/fomo/services/slots/booking.py
"""
Direct reservation submission.

validate_booking() re-checks a request against the business settings as they
are at submission time (the page may have been loaded with older ones).
submit_booking() then hands the request to the database function
``create_direct_reservation``, which performs the authoritative capacity
check atomically. Bookings are never retried here: the RPC is not idempotent.
"""

import json
import logging
from dataclasses import dataclass
from datetime import date
from enum import Enum
from typing import Iterable, Mapping, Optional

from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..statuses import ReservationStatus, parse_status
from .config import ReservationConfig, get_reservation_config, normalize_time_str
from .definitions import ReservationSettings, weekday_name
from .resolver import (
    closed_slot_times,
    expand_slots_for_day,
    fully_booked_slots,
    fully_closed_dates,
    is_date_bookable,
    resolve_max_party_size,
)

logger = logging.getLogger(__name__)


class RejectionCode(str, Enum):
    PARTY_TOO_LARGE = "PARTY_TOO_LARGE"
    INVALID_PARTY_SIZE = "INVALID_PARTY_SIZE"
    DATE_NOT_BOOKABLE = "DATE_NOT_BOOKABLE"
    SLOT_UNAVAILABLE = "SLOT_UNAVAILABLE"
    SLOT_CLOSED = "SLOT_CLOSED"
    SLOT_FULL = "SLOT_FULL"
    RESERVATIONS_CLOSED = "RESERVATIONS_CLOSED"


class BookingRejected(Exception):
    """A capacity or availability condition the customer can act on."""

    def __init__(self, code: RejectionCode, message: str, max_allowed: Optional[int] = None):
        super().__init__(message)
        self.code = code
        self.message = message
        self.max_allowed = max_allowed


class BookingFailed(Exception):
    """The booking RPC failed for a reason other than a rejection."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


@dataclass(frozen=True)
class BookingRequest:
    """A customer's candidate reservation."""
    business_id: str
    date: date
    time: str
    party_size: int
    reservation_name: str
    phone_number: str
    user_id: str
    seating_preference: Optional[str] = None
    special_requests: Optional[str] = None


@dataclass(frozen=True)
class BookingResult:
    reservation_id: str
    status: ReservationStatus
    confirmation_code: Optional[str] = None


def validate_booking(
    request: BookingRequest,
    settings: ReservationSettings,
    closures: Iterable[tuple[date, str]],
    today: date,
    booking_counts: Mapping[str, int] | None = None,
    config: ReservationConfig | None = None,
) -> str:
    """
    Check a request against the current settings.

    Returns the normalized "HH:MM" slot time, or raises BookingRejected.
    The party size is never clamped.
    """
    config = config or get_reservation_config()
    closures = list(closures)
    definitions = settings.definitions

    if not settings.is_open:
        raise BookingRejected(
            RejectionCode.RESERVATIONS_CLOSED,
            "This business is not accepting reservations right now",
        )

    if request.party_size < 1:
        raise BookingRejected(RejectionCode.INVALID_PARTY_SIZE, "Party size must be at least 1")

    try:
        slot_time = normalize_time_str(request.time)
    except ValueError:
        raise BookingRejected(RejectionCode.SLOT_UNAVAILABLE, f"Invalid time {request.time!r}")

    closed_dates = fully_closed_dates(closures, definitions)
    if not is_date_bookable(request.date, definitions, closed_dates, today):
        raise BookingRejected(
            RejectionCode.DATE_NOT_BOOKABLE,
            f"{request.date.isoformat()} is not available for reservations",
        )

    weekday = weekday_name(request.date)
    if slot_time not in expand_slots_for_day(definitions, weekday, config.slot_step_minutes):
        raise BookingRejected(RejectionCode.SLOT_UNAVAILABLE, f"{slot_time} is not a bookable time")

    closed = closed_slot_times(
        (t for d, t in closures if d == request.date),
        definitions,
        weekday,
        config.slot_step_minutes,
    )
    if slot_time in closed:
        raise BookingRejected(RejectionCode.SLOT_CLOSED, f"{slot_time} is closed on this date")

    max_allowed = resolve_max_party_size(
        slot_time, request.date, definitions, config.default_max_party_size
    )
    if request.party_size > max_allowed:
        raise BookingRejected(
            RejectionCode.PARTY_TOO_LARGE,
            f"Maximum party size for {slot_time} is {max_allowed}",
            max_allowed=max_allowed,
        )

    if booking_counts is not None:
        if slot_time in fully_booked_slots(booking_counts, definitions, request.date):
            raise BookingRejected(RejectionCode.SLOT_FULL, f"{slot_time} is fully booked")

    return slot_time


def submit_booking(
    db: Session,
    request: BookingRequest,
    slot_time: str,
    settings: ReservationSettings,
) -> BookingResult:
    """Call the atomic booking RPC and map its outcome."""
    params = {
        "p_business_id": request.business_id,
        "p_date": request.date.isoformat(),
        "p_slot_time": slot_time,
        "p_party_size": request.party_size,
        "p_reservation_name": request.reservation_name,
        "p_phone_number": request.phone_number,
        "p_user_id": request.user_id,
        "p_seating_preference": request.seating_preference,
        "p_special_requests": request.special_requests,
    }

    try:
        raw = db.execute(
            text(
                "SELECT public.create_direct_reservation("
                ":p_business_id, :p_date, :p_slot_time, :p_party_size, "
                ":p_reservation_name, :p_phone_number, :p_user_id, "
                ":p_seating_preference, :p_special_requests)"
            ),
            params,
        ).scalar_one()
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"create_direct_reservation failed for business {request.business_id}: {e}")
        raise BookingFailed(str(e))

    result = parse_booking_response(raw)

    if not result.get("success"):
        _raise_for_failure(result)

    status = parse_status(ReservationStatus, result.get("status"))
    if status is None:
        status = ReservationStatus.PENDING if settings.requires_approval else ReservationStatus.ACCEPTED

    logger.info(
        f"Reservation {result.get('reservation_id')} created for business "
        f"{request.business_id} on {request.date} {slot_time} "
        f"(party {request.party_size}, {status.value})"
    )

    return BookingResult(
        reservation_id=str(result.get("reservation_id")),
        status=status,
        confirmation_code=result.get("confirmation_code"),
    )


def parse_booking_response(raw) -> dict:
    """The RPC returns jsonb; drivers hand it over as dict or str."""
    if isinstance(raw, dict):
        return raw
    if isinstance(raw, (str, bytes)):
        try:
            parsed = json.loads(raw)
        except json.JSONDecodeError:
            raise BookingFailed(f"Unreadable booking response: {raw!r}")
        if isinstance(parsed, dict):
            return parsed
    raise BookingFailed(f"Unexpected booking response: {raw!r}")


def _raise_for_failure(result: dict) -> None:
    code = str(result.get("error_code") or result.get("error") or "").upper()
    message = result.get("message") or "Reservation could not be created"

    if code == RejectionCode.PARTY_TOO_LARGE.value:
        max_allowed = result.get("max_allowed")
        raise BookingRejected(
            RejectionCode.PARTY_TOO_LARGE,
            message,
            max_allowed=int(max_allowed) if max_allowed is not None else None,
        )
    if code in ("SLOT_FULL", "FULLY_BOOKED", "NO_CAPACITY"):
        raise BookingRejected(RejectionCode.SLOT_FULL, message)
    if code == RejectionCode.SLOT_CLOSED.value:
        raise BookingRejected(RejectionCode.SLOT_CLOSED, message)

    raise BookingFailed(message)
