# backend/fomo/routers/reservations.py
"""
Reservations API endpoints.

GET  /reservations/{business_id}/calendar - bookable days over the horizon
GET  /reservations/{business_id}/slots    - resolved slots of one day
POST /reservations/{business_id}          - validate + atomic booking RPC
"""

import logging
from datetime import date, datetime, timedelta
from zoneinfo import ZoneInfo

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session

from ..config import settings as app_settings
from ..database import get_db
from ..schemas.reservations import (
    ReservationCalendarResponse,
    ReservationCreate,
    ReservationCreated,
    ReservationDayStatus,
    ReservationRejection,
    ReservationRejectionResponse,
    ReservationSlotsResponse,
)
from ..services.slots import (
    BookingFailed,
    BookingRejected,
    BookingRequest,
    bookable_dates,
    get_reservation_config,
    resolve_day,
    submit_booking,
    validate_booking,
)
from ..services.slots.repository import (
    get_booking_counts,
    get_closures,
    load_reservation_settings,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/reservations", tags=["reservations"])


def business_today() -> date:
    """Today's date in the businesses' timezone."""
    return datetime.now(ZoneInfo(app_settings.business_timezone)).date()


def _load_settings(db: Session, business_id: str):
    reservation_settings = load_reservation_settings(db, business_id)
    if reservation_settings is None:
        raise HTTPException(status_code=404, detail="Business not found")
    return reservation_settings


@router.get("/{business_id}/calendar", response_model=ReservationCalendarResponse)
def get_reservation_calendar(
    business_id: str,
    start_date: date | None = None,
    end_date: date | None = None,
    db: Session = Depends(get_db),
):
    """Get bookability of every day in the range (defaults to the full horizon)."""
    config = get_reservation_config()
    reservation_settings = _load_settings(db, business_id)

    today = business_today()
    if start_date is None:
        start_date = today
    if end_date is None:
        end_date = start_date + timedelta(days=config.horizon_days)

    if start_date < today:
        start_date = today
    if end_date > today + timedelta(days=config.horizon_days):
        end_date = today + timedelta(days=config.horizon_days)
    if end_date < start_date:
        end_date = start_date

    closures = get_closures(db, business_id, start_date, end_date)
    days = bookable_dates(reservation_settings, start_date, end_date, closures, today)

    return ReservationCalendarResponse(
        business_id=business_id,
        start_date=start_date,
        end_date=end_date,
        days=[ReservationDayStatus(date=d, bookable=b) for d, b in days.items()],
        horizon_days=config.horizon_days,
        slot_step_minutes=config.slot_step_minutes,
    )


@router.get("/{business_id}/slots", response_model=ReservationSlotsResponse)
def get_reservation_slots(
    business_id: str,
    target_date: date = Query(..., alias="date"),
    db: Session = Depends(get_db),
):
    """Get candidate, closed, fully booked and available slots for a day."""
    config = get_reservation_config()
    today = business_today()

    if target_date < today:
        raise HTTPException(status_code=400, detail="Date cannot be in the past")
    if target_date > today + timedelta(days=config.horizon_days):
        raise HTTPException(status_code=400, detail=f"Date cannot be more than {config.horizon_days} days ahead")

    reservation_settings = _load_settings(db, business_id)
    closures = get_closures(db, business_id, target_date, target_date)
    counts = get_booking_counts(db, business_id, target_date)

    day = resolve_day(reservation_settings, target_date, closures, counts, today, config)

    return ReservationSlotsResponse(
        business_id=business_id,
        date=day.date,
        bookable=day.bookable,
        candidate_slots=day.candidate_slots,
        closed_slots=day.closed_slots,
        fully_booked_slots=day.fully_booked_slots,
        available_slots=day.available_slots,
        max_party_sizes=day.max_party_sizes,
        requires_approval=reservation_settings.requires_approval,
        seating_options=list(reservation_settings.seating_options),
    )


@router.post(
    "/{business_id}",
    response_model=ReservationCreated,
    status_code=status.HTTP_201_CREATED,
    responses={
        status.HTTP_409_CONFLICT: {"model": ReservationRejectionResponse},
        status.HTTP_502_BAD_GATEWAY: {"model": ReservationRejectionResponse},
    },
)
def create_reservation(
    business_id: str,
    data: ReservationCreate,
    db: Session = Depends(get_db),
):
    """
    Create a direct reservation.

    Settings are re-read here, so a request built from a stale page is
    checked against the current windows. Capacity is enforced again,
    atomically, by the database function.
    """
    config = get_reservation_config()
    reservation_settings = _load_settings(db, business_id)

    request = BookingRequest(business_id=business_id, **data.model_dump())
    closures = get_closures(db, business_id, request.date, request.date)
    counts = get_booking_counts(db, business_id, request.date)

    try:
        slot_time = validate_booking(
            request,
            reservation_settings,
            closures,
            today=business_today(),
            booking_counts=counts,
            config=config,
        )
        result = submit_booking(db, request, slot_time, reservation_settings)
    except BookingRejected as e:
        logger.info(f"Reservation rejected for business {business_id}: {e.code.value} ({e.message})")
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=ReservationRejection(
                code=e.code.value, message=e.message, max_allowed=e.max_allowed
            ).model_dump(),
        )
    except BookingFailed as e:
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail=ReservationRejection(code="BOOKING_FAILED", message=e.message).model_dump(),
        )

    return ReservationCreated(
        reservation_id=result.reservation_id,
        status=result.status.value,
        confirmation_code=result.confirmation_code,
    )
