# backend/fomo/services/slots/definitions.py
"""
Reservation window definitions and the business reservation settings.

Businesses store their windows as JSON in ``businesses.reservation_time_slots``.
Two shapes exist in the wild:

  Current: {"id": "...", "timeFrom": "18:00", "timeTo": "20:00",
            "capacity": 10, "days": ["monday", ...], "maxPartySize": 8}
  Legacy:  {"time": "19:00", "capacity": 10}
           → window time..time+2h, every day

A window whose end is not after its start wraps past midnight.
"""

import logging
from dataclasses import dataclass, field
from datetime import date
from typing import Any, Iterable, Optional

from .config import (
    MINUTES_PER_DAY,
    ReservationConfig,
    get_reservation_config,
    minutes_to_time_str,
    time_str_to_minutes,
)

logger = logging.getLogger(__name__)

WEEKDAY_NAMES = ("monday", "tuesday", "wednesday", "thursday", "friday", "saturday", "sunday")
_SHORT_NAMES = {name[:3]: name for name in WEEKDAY_NAMES}

LEGACY_WINDOW_MINUTES = 120


def weekday_name(target_date: date) -> str:
    """Lowercase English weekday name of a date ("monday" ... "sunday")."""
    return WEEKDAY_NAMES[target_date.weekday()]


@dataclass(frozen=True)
class SlotDefinition:
    """One recurring weekly reservation window."""
    slot_id: Optional[str]
    start: int  # minutes since midnight
    end: int  # minutes since midnight, may be <= start (overnight)
    capacity: int
    max_party_size: Optional[int]
    days: frozenset[str]

    @property
    def wraps_midnight(self) -> bool:
        return self.end <= self.start

    @property
    def end_offset(self) -> int:
        """End as an offset from the start day's midnight."""
        return self.end + MINUTES_PER_DAY if self.wraps_midnight else self.end

    @property
    def window_start(self) -> str:
        return minutes_to_time_str(self.start)

    def applies_to(self, weekday: str) -> bool:
        return weekday in self.days

    def offsets(self, step_minutes: int) -> range:
        """Slot start offsets (minutes from the start day's midnight)."""
        return range(self.start, self.end_offset, step_minutes)

    def offset_of(self, minute: int) -> Optional[int]:
        """
        Offset of a time of day inside this window, or None.

        Post-midnight times of an overnight window map to minute + 24h.
        """
        if self.start <= minute < self.end_offset:
            return minute
        if self.wraps_midnight and minute + MINUTES_PER_DAY < self.end_offset:
            return minute + MINUTES_PER_DAY
        return None

    def contains(self, minute: int) -> bool:
        return self.offset_of(minute) is not None


@dataclass(frozen=True)
class ReservationSettings:
    """Reservation policy of one business, parsed from its row."""
    business_id: str
    definitions: tuple[SlotDefinition, ...] = ()
    accepts_direct_reservations: bool = False
    globally_paused: bool = False
    requires_approval: bool = True
    seating_options: tuple[str, ...] = field(default_factory=tuple)

    @property
    def is_open(self) -> bool:
        return self.accepts_direct_reservations and not self.globally_paused


# ── Parsing ──────────────────────────────────────────────────────────────


def parse_slot_definitions(
    raw: Any,
    config: ReservationConfig | None = None,
) -> list[SlotDefinition]:
    """
    Parse the stored JSON list into SlotDefinitions.

    Entries that cannot be parsed are logged and skipped; one bad window
    never hides the others.
    """
    config = config or get_reservation_config()

    if not raw:
        return []
    if not isinstance(raw, list):
        logger.warning(f"reservation_time_slots is not a list: {type(raw).__name__}")
        return []

    definitions: list[SlotDefinition] = []
    for index, entry in enumerate(raw):
        try:
            definitions.append(_parse_entry(entry, config))
        except (ValueError, TypeError, KeyError) as e:
            logger.warning(f"Skipping reservation window #{index} ({entry!r}): {e}")

    return definitions


def _parse_entry(entry: Any, config: ReservationConfig) -> SlotDefinition:
    if not isinstance(entry, dict):
        raise TypeError("window entry must be an object")

    if entry.get("timeFrom") is not None or entry.get("timeTo") is not None:
        start = time_str_to_minutes(entry["timeFrom"])
        end = time_str_to_minutes(entry["timeTo"])
        days = _parse_days(entry.get("days"))
    elif entry.get("time") is not None:
        # Legacy single start time
        start = time_str_to_minutes(entry["time"])
        end = (start + LEGACY_WINDOW_MINUTES) % MINUTES_PER_DAY
        days = frozenset(WEEKDAY_NAMES)
    else:
        raise ValueError("window has neither timeFrom/timeTo nor time")

    return SlotDefinition(
        slot_id=str(entry["id"]) if entry.get("id") is not None else None,
        start=start,
        end=end,
        capacity=_parse_capacity(entry.get("capacity"), config),
        max_party_size=_parse_max_party_size(
            entry.get("maxPartySize", entry.get("max_party_size"))
        ),
        days=days,
    )


def _parse_days(raw: Any) -> frozenset[str]:
    if raw is None:
        return frozenset(WEEKDAY_NAMES)
    if not isinstance(raw, (list, tuple)):
        raise TypeError("days must be a list")

    days = set()
    for item in raw:
        name = str(item).strip().lower()
        if name in WEEKDAY_NAMES:
            days.add(name)
        elif name in _SHORT_NAMES:
            days.add(_SHORT_NAMES[name])
        else:
            logger.warning(f"Ignoring unknown weekday {item!r}")
    return frozenset(days)


def _parse_capacity(raw: Any, config: ReservationConfig) -> int:
    if raw is None or raw == "" or raw == 0:
        return config.default_capacity
    capacity = int(raw)
    if capacity < 0:
        raise ValueError(f"negative capacity {capacity}")
    return capacity


def _parse_max_party_size(raw: Any) -> Optional[int]:
    if raw is None or raw == "":
        return None
    try:
        value = int(raw)
    except (TypeError, ValueError):
        logger.warning(f"Ignoring invalid maxPartySize {raw!r}")
        return None
    return value if value > 0 else None


def parse_reservation_settings(
    business,
    config: ReservationConfig | None = None,
) -> ReservationSettings:
    """Build ReservationSettings from a ``businesses`` row."""
    seating: Iterable = business.reservation_seating_options or ()
    return ReservationSettings(
        business_id=str(business.id),
        definitions=tuple(parse_slot_definitions(business.reservation_time_slots, config)),
        accepts_direct_reservations=bool(business.accepts_direct_reservations),
        globally_paused=bool(business.reservations_globally_paused),
        requires_approval=(
            True if business.reservation_requires_approval is None
            else bool(business.reservation_requires_approval)
        ),
        seating_options=tuple(str(s) for s in seating),
    )
