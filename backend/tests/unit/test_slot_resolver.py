from datetime import date

import pytest

from fomo.services.slots import (
    ReservationSettings,
    bookable_dates,
    closed_slot_times,
    expand_slots_for_day,
    filter_available,
    fully_booked_slots,
    fully_closed_dates,
    is_date_bookable,
    parse_slot_definitions,
    resolve_day,
    resolve_max_party_size,
)

MONDAY = date(2024, 1, 8)
TUESDAY = date(2024, 1, 9)
TODAY = date(2024, 1, 1)


def _defs(*entries):
    return parse_slot_definitions(list(entries))


def test_overnight_window_wraps_past_midnight():
    defs = _defs({"timeFrom": "22:00", "timeTo": "02:00", "days": ["monday"], "maxPartySize": 6})

    assert expand_slots_for_day(defs, "monday", 60) == ["22:00", "23:00", "00:00", "01:00"]
    assert resolve_max_party_size("01:30", MONDAY, defs) == 6


def test_overnight_tail_belongs_to_its_own_service_day():
    defs = _defs({"timeFrom": "22:00", "timeTo": "02:00", "days": ["monday"], "maxPartySize": 6})

    assert resolve_max_party_size("01:00", MONDAY, defs) == 6
    # Tuesday has no window of its own, so the default applies
    assert resolve_max_party_size("01:00", TUESDAY, defs) == 50


def test_expand_dedupes_overlapping_windows():
    defs = _defs(
        {"timeFrom": "18:00", "timeTo": "20:00", "days": ["monday"]},
        {"timeFrom": "19:00", "timeTo": "21:00", "days": ["monday"]},
    )

    assert expand_slots_for_day(defs, "monday", 60) == ["18:00", "19:00", "20:00"]
    assert expand_slots_for_day(defs, "tuesday", 60) == []


def test_expand_accepts_raw_entries_and_step():
    raw = [{"timeFrom": "12:00", "timeTo": "13:00", "days": ["mon"]}]

    assert expand_slots_for_day(raw, "Monday", 15) == ["12:00", "12:15", "12:30", "12:45"]
    with pytest.raises(ValueError):
        expand_slots_for_day(raw, "monday", 0)


def test_malformed_definition_is_skipped():
    defs = _defs(
        {"timeFrom": "25:00", "timeTo": "26:00", "days": ["monday"]},
        "not a window",
        {"timeFrom": "18:00", "timeTo": "19:00", "days": ["monday"]},
    )

    assert len(defs) == 1
    assert expand_slots_for_day(defs, "monday", 30) == ["18:00", "18:30"]


def test_legacy_single_time_shape():
    defs = _defs({"time": "19:00", "capacity": 4})

    assert len(defs) == 1
    assert defs[0].capacity == 4
    assert expand_slots_for_day(defs, "sunday", 60) == ["19:00", "20:00"]


def test_capacity_and_party_size_defaults():
    defs = _defs({"timeFrom": "18:00", "timeTo": "19:00", "capacity": 0, "max_party_size": "abc"})

    assert defs[0].capacity == 10
    assert defs[0].max_party_size is None
    assert resolve_max_party_size("18:00", MONDAY, defs) == 50
    assert resolve_max_party_size("18:00", MONDAY, defs, default=0) == 1
    assert resolve_max_party_size("bogus", MONDAY, defs) == 50


def test_filter_available_keeps_order():
    candidates = ["18:00", "18:30", "19:00", "19:30"]

    assert filter_available(candidates, {"18:30"}, ["19:30"]) == ["18:00", "19:00"]


def test_is_date_bookable():
    defs = _defs({"timeFrom": "18:00", "timeTo": "20:00", "days": ["monday"]})

    assert is_date_bookable(MONDAY, defs, [], TODAY)
    assert not is_date_bookable(TUESDAY, defs, [], TODAY)
    assert not is_date_bookable(MONDAY, defs, [], date(2024, 1, 9))
    assert not is_date_bookable(MONDAY, defs, [MONDAY], TODAY)
    assert not is_date_bookable(MONDAY, defs, ["2024-01-08"], TODAY)


def test_fully_booked_slots_compares_capacity():
    defs = _defs({"timeFrom": "18:00", "timeTo": "20:00", "days": ["monday"], "capacity": 2})
    counts = {"18:00": 2, "18:30": 1, "03:00": 5, "xx": 9}

    assert fully_booked_slots(counts, defs, MONDAY) == {"18:00"}


def test_closed_window_start_closes_whole_window():
    defs = _defs({"timeFrom": "18:00", "timeTo": "20:00", "days": ["monday"]})

    assert closed_slot_times(["18:00"], defs, "monday", 30) == {"18:00", "18:30", "19:00", "19:30"}
    assert closed_slot_times(["19:30:00"], defs, "monday", 30) == {"19:30"}
    assert closed_slot_times(["nope"], defs, "monday", 30) == set()


def test_fully_closed_dates_needs_every_window():
    defs = _defs(
        {"timeFrom": "12:00", "timeTo": "14:00", "days": ["monday"]},
        {"timeFrom": "18:00", "timeTo": "20:00", "days": ["monday"]},
    )
    friday = date(2024, 1, 12)

    next_monday = date(2024, 1, 15)

    closures = [(MONDAY, "12:00"), (MONDAY, "18:00"), (next_monday, "12:00")]
    assert fully_closed_dates(closures, defs) == {MONDAY}
    assert fully_closed_dates([(MONDAY, "12:00")], defs) == set()
    assert fully_closed_dates([(friday, "12:00")], defs) == set()


def test_resolve_day_combines_closures_and_counts():
    defs = _defs({"timeFrom": "18:00", "timeTo": "20:00", "days": ["monday"], "capacity": 2, "maxPartySize": 8})
    settings = ReservationSettings("b1", tuple(defs), accepts_direct_reservations=True)

    day = resolve_day(settings, MONDAY, [(MONDAY, "19:30")], {"18:00": 2}, TODAY)

    assert day.bookable
    assert day.candidate_slots == ["18:00", "18:30", "19:00", "19:30"]
    assert day.closed_slots == ["19:30"]
    assert day.fully_booked_slots == ["18:00"]
    assert day.available_slots == ["18:30", "19:00"]
    assert day.max_party_sizes == {"18:30": 8, "19:00": 8}


def test_paused_business_has_no_bookable_dates():
    defs = _defs({"timeFrom": "18:00", "timeTo": "20:00"})
    paused = ReservationSettings("b1", tuple(defs), accepts_direct_reservations=True, globally_paused=True)
    open_ = ReservationSettings("b1", tuple(defs), accepts_direct_reservations=True)

    assert not any(bookable_dates(paused, MONDAY, TUESDAY, [], TODAY).values())
    assert bookable_dates(open_, MONDAY, TUESDAY, [], TODAY) == {MONDAY: True, TUESDAY: True}
    assert not resolve_day(paused, MONDAY, [], {}, TODAY).bookable
