from datetime import date

from fomo.models.generated import ReservationSlotClosures, Reservations
from fomo.services.slots.repository import get_booking_counts, get_closures, load_reservation_settings
from tests.helpers import add_business, utc

MONDAY = date(2024, 1, 8)


def _reservation(id, preferred_time, status="accepted", event_id=None):
    return Reservations(
        id=id, business_id="b1", user_id="u1", reservation_name="Eleni", party_size=2,
        preferred_time=preferred_time, status=status, event_id=event_id, created_at=utc(2024, 1, 1),
    )


def test_load_reservation_settings(db):
    add_business(db, reservations_globally_paused=True)

    settings = load_reservation_settings(db, "b1")

    assert settings.business_id == "b1"
    assert len(settings.definitions) == 1
    assert settings.seating_options == ("indoor", "outdoor")
    assert not settings.is_open
    assert load_reservation_settings(db, "missing") is None


def test_get_closures_in_range(db):
    add_business(db)
    db.add_all([
        ReservationSlotClosures(business_id="b1", closure_date=MONDAY, slot_time="18:00"),
        ReservationSlotClosures(business_id="b1", closure_date=date(2024, 2, 1), slot_time="18:00"),
    ])
    db.commit()

    assert get_closures(db, "b1", MONDAY, date(2024, 1, 31)) == [(MONDAY, "18:00")]


def test_booking_counts_use_local_time_and_live_statuses(db):
    add_business(db)
    db.add_all([
        _reservation("r1", utc(2024, 1, 8, 16)),                     # 18:00 in Nicosia
        _reservation("r2", utc(2024, 1, 8, 16), status="pending"),
        _reservation("r3", utc(2024, 1, 8, 16), status="cancelled"),
        _reservation("r4", utc(2024, 1, 8, 16), event_id="e1"),
        _reservation("r5", utc(2024, 1, 8, 16, 30)),
        _reservation("r6", utc(2024, 1, 7, 21, 30)),                 # 23:30 on Sunday
    ])
    db.commit()

    assert get_booking_counts(db, "b1", MONDAY, "Asia/Nicosia") == {"18:00": 2, "18:30": 1}
