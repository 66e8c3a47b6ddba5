from zoneinfo import ZoneInfo

import pytest

from fomo.models.generated import EngagementEvents, Reservations
from fomo.services.analytics import QueryCancelled, QueryRange, TimeWindow, best_time_windows, build_guidance_report
from fomo.services.analytics import sources
from fomo.services.analytics.guidance import DEFAULT_PUBLISH, DEFAULT_VISITS, format_hour_range
from tests.helpers import add_business, utc

Q = QueryRange(utc(2024, 1, 1), utc(2024, 1, 31, 23, 59, 59))
NICOSIA = ZoneInfo("Asia/Nicosia")


def test_empty_input_returns_defaults():
    assert best_time_windows([], NICOSIA) == [
        TimeWindow(5, "18:00–20:00", 0),
        TimeWindow(6, "19:00–21:00", 0),
    ]


def test_buckets_by_local_weekday_and_two_hour_block():
    timestamps = [
        utc(2024, 1, 12, 16, 30),  # Fri 18:30 local
        utc(2024, 1, 12, 17, 50),  # Fri 19:50 local
        utc(2024, 1, 13, 20, 0),   # Sat 22:00 local
        utc(2024, 1, 9, 8, 0),     # Tue 10:00 local
        utc(2024, 1, 9, 9, 0),     # Tue 11:00 local
        utc(2024, 1, 9, 9, 30),    # Tue 11:30 local
    ]

    assert best_time_windows(timestamps, NICOSIA) == [
        TimeWindow(2, "10:00–12:00", 3),
        TimeWindow(5, "18:00–20:00", 2),
    ]


def test_ties_ordered_by_weekday_then_hour():
    timestamps = [utc(2024, 1, 13, 20), utc(2024, 1, 14, 6), utc(2024, 1, 14, 2)]

    windows = best_time_windows(timestamps, ZoneInfo("UTC"), top=3)

    assert [(w.day_index, w.hours) for w in windows] == [
        (0, "02:00–04:00"),
        (0, "06:00–08:00"),
        (6, "20:00–22:00"),
    ]


def test_hour_range_wraps_midnight():
    assert format_hour_range(22) == "22:00–00:00"


def test_guidance_report_uses_check_in_times(db):
    add_business(db)
    db.add_all([
        EngagementEvents(id="v1", business_id="b1", event_type="profile_view", created_at=utc(2024, 1, 12, 16)),
        Reservations(id="r1", business_id="b1", user_id="u1", reservation_name="Eleni", party_size=2,
                     status="accepted", created_at=utc(2024, 1, 2, 9), checked_in_at=utc(2024, 1, 13, 19)),
        Reservations(id="r2", business_id="b1", user_id="u2", reservation_name="Nikos", party_size=2,
                     status="accepted", created_at=utc(2024, 1, 2, 9)),
    ])
    db.commit()

    report = build_guidance_report(db, "b1", Q, tz_name="Asia/Nicosia")

    assert report.profile.totals == {"views": 1, "interactions": 0, "visits": 1}
    assert report.profile.visits == [TimeWindow(6, "20:00–22:00", 1)]
    assert report.recommended["publish"] == TimeWindow(5, "18:00–20:00", 1)
    assert report.recommended["visits"] == TimeWindow(6, "20:00–22:00", 1)
    assert report.offers.views == best_time_windows([], NICOSIA)


def test_guidance_report_defaults_without_activity(db):
    add_business(db)

    report = build_guidance_report(db, "b1", Q)

    assert report.recommended["publish"] == DEFAULT_PUBLISH
    assert report.recommended["visits"] == DEFAULT_VISITS
    assert report.to_dict()["events"]["totals"] == {"views": 0, "interactions": 0, "visits": 0}


def test_failing_guidance_section_is_isolated(db, monkeypatch):
    add_business(db)
    db.add(EngagementEvents(id="v1", business_id="b1", event_type="profile_view", created_at=utc(2024, 1, 12, 16)))
    db.commit()

    def broken(*args, **kwargs):
        raise RuntimeError("discount_views unavailable")

    monkeypatch.setattr(sources, "offer_views", broken)

    report = build_guidance_report(db, "b1", Q, tz_name="Asia/Nicosia")

    assert report.degraded
    assert report.offers.degraded
    assert report.offers.totals == {"views": 0, "interactions": 0, "visits": 0}
    assert not report.profile.degraded
    assert report.profile.totals["views"] == 1
    assert report.recommended["publish"] == TimeWindow(5, "18:00–20:00", 1)


def test_guidance_cancellation_propagates(db):
    add_business(db)

    with pytest.raises(QueryCancelled):
        build_guidance_report(db, "b1", Q, is_cancelled=lambda: True)
