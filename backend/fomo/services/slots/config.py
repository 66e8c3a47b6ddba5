# backend/fomo/services/slots/config.py
"""
Reservation configuration and time-of-day helpers.
"""

import re
from dataclasses import dataclass
from functools import lru_cache

MINUTES_PER_DAY = 24 * 60

_TIME_RE = re.compile(r"^\s*(\d{1,2}):(\d{2})(?::(\d{2}))?\s*$")


@dataclass(frozen=True)
class ReservationConfig:
    """
    Configuration for the reservation slot system.

    Attributes:
        slot_step_minutes: Grid step between bookable start times (15/30/60)
        horizon_days: How many days ahead the calendar is shown
        default_max_party_size: Party-size cap when no window configures one
        default_capacity: Capacity assumed for windows saved without one
    """
    slot_step_minutes: int = 30  # 15 / 30 / 60
    horizon_days: int = 60
    default_max_party_size: int = 50
    default_capacity: int = 10

    def __post_init__(self):
        """Validate configuration."""
        if self.slot_step_minutes not in (15, 30, 60):
            raise ValueError(f"slot_step_minutes must be 15, 30, or 60, got {self.slot_step_minutes}")
        if self.default_max_party_size < 1:
            raise ValueError("default_max_party_size must be at least 1")


@lru_cache
def get_reservation_config() -> ReservationConfig:
    """
    Get reservation configuration (singleton).
    """
    return ReservationConfig()


def time_str_to_minutes(value: str) -> int:
    """
    Convert "HH:MM" (or "HH:MM:SS") to minutes since midnight.

    Raises ValueError for anything that is not a valid time of day.
    """
    if not isinstance(value, str):
        raise ValueError(f"Time must be a string, got {type(value).__name__}")

    match = _TIME_RE.match(value)
    if not match:
        raise ValueError(f"Invalid time of day: {value!r}")

    hour, minute = int(match.group(1)), int(match.group(2))
    if hour > 23 or minute > 59:
        raise ValueError(f"Invalid time of day: {value!r}")
    return hour * 60 + minute


def minutes_to_time_str(minutes: int) -> str:
    """Convert minutes (any offset, wraps at 24h) to "HH:MM"."""
    minutes %= MINUTES_PER_DAY
    return f"{minutes // 60:02d}:{minutes % 60:02d}"


def normalize_time_str(value: str) -> str:
    """Normalize "H:MM" / "HH:MM:SS" to "HH:MM"."""
    return minutes_to_time_str(time_str_to_minutes(value))
