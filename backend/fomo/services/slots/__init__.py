# backend/fomo/services/slots/__init__.py
"""
Reservation slot module.

Resolver: weekly windows → bookable "HH:MM" times for a date
Booking:  submission-time validation + atomic booking RPC
"""

from .config import ReservationConfig, get_reservation_config
from .definitions import (
    ReservationSettings,
    SlotDefinition,
    parse_reservation_settings,
    parse_slot_definitions,
    weekday_name,
)
from .resolver import (
    DayAvailability,
    bookable_dates,
    closed_slot_times,
    expand_slots_for_day,
    filter_available,
    find_definition,
    fully_booked_slots,
    fully_closed_dates,
    is_date_bookable,
    resolve_day,
    resolve_max_party_size,
)
from .booking import (
    BookingFailed,
    BookingRejected,
    BookingRequest,
    BookingResult,
    RejectionCode,
    submit_booking,
    validate_booking,
)

__all__ = [
    "ReservationConfig",
    "get_reservation_config",
    "ReservationSettings",
    "SlotDefinition",
    "parse_reservation_settings",
    "parse_slot_definitions",
    "weekday_name",
    "DayAvailability",
    "bookable_dates",
    "closed_slot_times",
    "expand_slots_for_day",
    "filter_available",
    "find_definition",
    "fully_booked_slots",
    "fully_closed_dates",
    "is_date_bookable",
    "resolve_day",
    "resolve_max_party_size",
    "BookingFailed",
    "BookingRejected",
    "BookingRequest",
    "BookingResult",
    "RejectionCode",
    "submit_booking",
    "validate_booking",
]
