# backend/fomo/schemas/reservations.py
"""
Pydantic schemas for reservations API.
"""

from datetime import date
from typing import Optional
from pydantic import BaseModel, Field


class ReservationDayStatus(BaseModel):
    """Bookability of a single day in calendar."""
    date: date
    bookable: bool

    model_config = {"from_attributes": True}


class ReservationCalendarResponse(BaseModel):
    business_id: str
    start_date: date
    end_date: date
    days: list[ReservationDayStatus]

    # Metadata
    horizon_days: int
    slot_step_minutes: int = Field(description="Grid step in minutes (15/30/60)")

    model_config = {"from_attributes": True}


class ReservationSlotsResponse(BaseModel):
    """Resolved slots of one date."""
    business_id: str
    date: date
    bookable: bool
    candidate_slots: list[str] = []
    closed_slots: list[str] = []
    fully_booked_slots: list[str] = []
    available_slots: list[str] = []
    max_party_sizes: dict[str, int] = Field(
        default_factory=dict,
        description="Largest allowed party per available \"HH:MM\"",
    )
    requires_approval: bool = True
    seating_options: list[str] = []

    model_config = {"from_attributes": True}


class ReservationCreate(BaseModel):
    date: date
    time: str  # "HH:MM"
    party_size: int
    reservation_name: str = Field(min_length=1)
    phone_number: str = Field(min_length=1)
    user_id: str

    seating_preference: Optional[str] = None
    special_requests: Optional[str] = None

    model_config = {"from_attributes": True}


class ReservationCreated(BaseModel):
    reservation_id: str
    status: str
    confirmation_code: Optional[str] = None

    model_config = {"from_attributes": True}


class ReservationRejection(BaseModel):
    """Body of a 409 / 502 response."""
    code: str
    message: str
    max_allowed: Optional[int] = None


class ReservationRejectionResponse(BaseModel):
    detail: ReservationRejection
