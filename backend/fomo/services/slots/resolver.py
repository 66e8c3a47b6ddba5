# backend/fomo/services/slots/resolver.py
"""
Slot availability resolution.

Turns recurring weekly windows into concrete "HH:MM" start times for a date,
then removes closed and fully booked ones.

Contains:
✓ Weekly windows (with overnight wrap)
✓ Slot closures set by staff (per window or per time)
✓ Live booking counts (supplied by the database, compared to capacity)

Does NOT contain:
✗ The final capacity check (done atomically by the booking RPC)
"""

import logging
from collections import defaultdict
from dataclasses import dataclass, field
from datetime import date, timedelta
from typing import Any, Iterable, Mapping, Optional

from .config import (
    ReservationConfig,
    get_reservation_config,
    minutes_to_time_str,
    normalize_time_str,
    time_str_to_minutes,
)
from .definitions import (
    ReservationSettings,
    SlotDefinition,
    parse_slot_definitions,
    weekday_name,
)

logger = logging.getLogger(__name__)


def expand_slots_for_day(
    definitions: Iterable[Any],
    weekday: str,
    step_minutes: int = 30,
) -> list[str]:
    """
    Generate the ordered, de-duplicated slot start times for a weekday.

    Windows run [start, end); an overnight window keeps going past midnight,
    so its post-midnight times sort after the evening ones.
    """
    if step_minutes <= 0:
        raise ValueError(f"step_minutes must be positive, got {step_minutes}")

    weekday = weekday.lower()
    offsets: dict[str, int] = {}

    for definition in _as_definitions(definitions):
        if not definition.applies_to(weekday):
            continue
        for offset in definition.offsets(step_minutes):
            time_str = minutes_to_time_str(offset)
            # Same clock time from two windows: keep the earliest occurrence
            if time_str not in offsets or offset < offsets[time_str]:
                offsets[time_str] = offset

    return sorted(offsets, key=offsets.__getitem__)


def find_definition(
    time_str: str,
    target_date: date,
    definitions: Iterable[Any],
) -> Optional[SlotDefinition]:
    """
    Find the window containing ``time_str`` on ``target_date``.

    Order of preference:
      1. a window of that weekday containing the time directly
      2. the post-midnight tail of an overnight window of that weekday

    Only windows of the date's own weekday are consulted; post-midnight
    slots belong to the service day they were generated from.
    """
    minute = time_str_to_minutes(time_str)
    definitions = _as_definitions(definitions)
    weekday = weekday_name(target_date)

    same_day = [d for d in definitions if d.applies_to(weekday)]
    for definition in same_day:
        if definition.offset_of(minute) == minute:
            return definition
    for definition in same_day:
        if definition.contains(minute):
            return definition

    return None


def resolve_max_party_size(
    time_str: str,
    target_date: date,
    definitions: Iterable[Any],
    default: int | None = None,
) -> int:
    """
    Max party size allowed for a slot; never less than 1.

    Falls back to the configured default (50) when the time matches no
    window or the window has no limit of its own.
    """
    if default is None:
        default = get_reservation_config().default_max_party_size

    try:
        definition = find_definition(time_str, target_date, definitions)
    except ValueError:
        logger.warning(f"Cannot resolve party size for invalid time {time_str!r}")
        definition = None

    if definition is None or definition.max_party_size is None:
        return max(1, default)
    return max(1, definition.max_party_size)


def filter_available(
    candidate_slots: Iterable[str],
    closed_slots: Iterable[str],
    fully_booked_slots: Iterable[str],
) -> list[str]:
    """Candidates minus closed and fully booked, order kept."""
    excluded = set(closed_slots) | set(fully_booked_slots)
    return [slot for slot in candidate_slots if slot not in excluded]


def is_date_bookable(
    target_date: date,
    definitions: Iterable[Any],
    closed_dates: Iterable[date | str],
    today: date,
) -> bool:
    """False for past dates, weekdays without windows and wholly closed dates."""
    if target_date < today:
        return False

    weekday = weekday_name(target_date)
    if not any(d.applies_to(weekday) for d in _as_definitions(definitions)):
        return False

    closed = {d if isinstance(d, str) else d.isoformat() for d in closed_dates}
    return target_date.isoformat() not in closed


def fully_booked_slots(
    booking_counts: Mapping[str, int],
    definitions: Iterable[Any],
    target_date: date,
) -> set[str]:
    """
    Slot times whose live reservation count reached their window capacity.

    Counts come from the database; times outside every window are ignored.
    """
    definitions = _as_definitions(definitions)
    booked: set[str] = set()

    for time_str, count in booking_counts.items():
        try:
            definition = find_definition(time_str, target_date, definitions)
        except ValueError:
            logger.warning(f"Ignoring booking count for invalid time {time_str!r}")
            continue
        if definition is not None and count >= definition.capacity:
            booked.add(normalize_time_str(time_str))

    return booked


def closed_slot_times(
    closed: Iterable[str],
    definitions: Iterable[Any],
    weekday: str,
    step_minutes: int = 30,
) -> set[str]:
    """
    Expand closure rows of one date into individual slot times.

    Staff close whole windows (a closure names the window start); a closure
    naming any other time closes just that time.
    """
    weekday = weekday.lower()
    windows = [d for d in _as_definitions(definitions) if d.applies_to(weekday)]
    result: set[str] = set()

    for raw in closed:
        try:
            time_str = normalize_time_str(raw)
        except ValueError:
            logger.warning(f"Ignoring closure with invalid time {raw!r}")
            continue

        matched = [d for d in windows if d.window_start == time_str]
        if not matched:
            result.add(time_str)
            continue
        for definition in matched:
            result.update(minutes_to_time_str(o) for o in definition.offsets(step_minutes))

    return result


def fully_closed_dates(
    closures: Iterable[tuple[date, str]],
    definitions: Iterable[Any],
) -> set[date]:
    """Dates on which every window configured for that weekday is closed."""
    definitions = _as_definitions(definitions)

    by_date: dict[date, set[str]] = defaultdict(set)
    for closure_date, slot_time in closures:
        try:
            by_date[closure_date].add(normalize_time_str(slot_time))
        except ValueError:
            logger.warning(f"Ignoring closure with invalid time {slot_time!r}")

    closed_dates: set[date] = set()
    for closure_date, closed_times in by_date.items():
        weekday = weekday_name(closure_date)
        window_starts = {d.window_start for d in definitions if d.applies_to(weekday)}
        if window_starts and window_starts <= closed_times:
            closed_dates.add(closure_date)

    return closed_dates


# ── Day / calendar views ─────────────────────────────────────────────────


@dataclass(frozen=True)
class DayAvailability:
    """Resolved availability of one date."""
    date: date
    bookable: bool
    candidate_slots: list[str] = field(default_factory=list)
    closed_slots: list[str] = field(default_factory=list)
    fully_booked_slots: list[str] = field(default_factory=list)
    available_slots: list[str] = field(default_factory=list)
    max_party_sizes: dict[str, int] = field(default_factory=dict)


def resolve_day(
    settings: ReservationSettings,
    target_date: date,
    closures: Iterable[tuple[date, str]],
    booking_counts: Mapping[str, int],
    today: date,
    config: ReservationConfig | None = None,
) -> DayAvailability:
    """Resolve every slot of ``target_date`` for one business."""
    config = config or get_reservation_config()
    closures = list(closures)
    definitions = settings.definitions

    closed_dates = fully_closed_dates(closures, definitions)
    bookable = settings.is_open and is_date_bookable(target_date, definitions, closed_dates, today)
    if not bookable:
        return DayAvailability(date=target_date, bookable=False)

    weekday = weekday_name(target_date)
    candidates = expand_slots_for_day(definitions, weekday, config.slot_step_minutes)
    closed = closed_slot_times(
        (slot_time for closure_date, slot_time in closures if closure_date == target_date),
        definitions,
        weekday,
        config.slot_step_minutes,
    )
    booked = fully_booked_slots(booking_counts, definitions, target_date)
    available = filter_available(candidates, closed, booked)

    return DayAvailability(
        date=target_date,
        bookable=bool(available),
        candidate_slots=candidates,
        closed_slots=[s for s in candidates if s in closed],
        fully_booked_slots=[s for s in candidates if s in booked],
        available_slots=available,
        max_party_sizes={
            s: resolve_max_party_size(s, target_date, definitions, config.default_max_party_size)
            for s in available
        },
    )


def bookable_dates(
    settings: ReservationSettings,
    start_date: date,
    end_date: date,
    closures: Iterable[tuple[date, str]],
    today: date,
) -> dict[date, bool]:
    """Bookability of every date in [start_date, end_date]."""
    closed_dates = fully_closed_dates(closures, settings.definitions)

    result: dict[date, bool] = {}
    current = start_date
    while current <= end_date:
        result[current] = settings.is_open and is_date_bookable(
            current, settings.definitions, closed_dates, today
        )
        current += timedelta(days=1)
    return result


# ── Helpers ──────────────────────────────────────────────────────────────


def _as_definitions(items: Iterable[Any]) -> list[SlotDefinition]:
    """Accept parsed SlotDefinitions or raw stored JSON entries."""
    parsed: list[SlotDefinition] = []
    raw: list[Any] = []
    for item in items or ():
        if isinstance(item, SlotDefinition):
            parsed.append(item)
        else:
            raw.append(item)
    if raw:
        parsed.extend(parse_slot_definitions(raw))
    return parsed
