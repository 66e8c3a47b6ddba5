from datetime import date

import fakeredis
import pytest
from fastapi.testclient import TestClient

from fomo.database import get_db
from fomo.main import app
from fomo.models.generated import DiscountViews, Discounts, ReservationSlotClosures, Reservations
from fomo.redis_client import get_redis
from fomo.routers import reservations as reservations_router
from fomo.services.analytics import sources
from fomo.services.slots import BookingResult
from fomo.services.statuses import ReservationStatus
from tests.helpers import add_business, utc

MONDAY = date(2024, 1, 8)
RANGE = {"start": "2024-01-01T00:00:00Z", "end": "2024-01-31T23:59:59Z"}


@pytest.fixture
def redis():
    return fakeredis.FakeRedis(decode_responses=True)


@pytest.fixture
def client(db, redis, monkeypatch):
    monkeypatch.setattr(reservations_router, "business_today", lambda: date(2024, 1, 1))
    app.dependency_overrides[get_db] = lambda: db
    app.dependency_overrides[get_redis] = lambda: redis
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


def _booking(**overrides):
    body = {
        "date": "2024-01-08",
        "time": "18:00",
        "party_size": 4,
        "reservation_name": "Eleni",
        "phone_number": "+35799000000",
        "user_id": "u1",
    }
    body.update(overrides)
    return body


def test_health(client):
    assert client.get("/health").json() == {"redis": True}


def test_unknown_business_is_404(client):
    assert client.get("/reservations/nope/calendar").status_code == 404
    assert client.post("/reservations/nope", json=_booking()).status_code == 404


def test_calendar_marks_window_days(client, db):
    add_business(db)

    response = client.get("/reservations/b1/calendar", params={"start_date": "2024-01-08", "end_date": "2024-01-10"})

    assert response.status_code == 200
    data = response.json()
    assert [d["bookable"] for d in data["days"]] == [True, False, False]
    assert data["slot_step_minutes"] == 30


def test_day_slots(client, db):
    add_business(db)
    db.add(ReservationSlotClosures(business_id="b1", closure_date=MONDAY, slot_time="19:30"))
    db.add_all([
        Reservations(id=f"r{i}", business_id="b1", user_id="u1", reservation_name="Eleni", party_size=2,
                     preferred_time=utc(2024, 1, 8, 16), status="accepted", created_at=utc(2024, 1, 1))
        for i in range(2)
    ])
    db.commit()

    data = client.get("/reservations/b1/slots", params={"date": "2024-01-08"}).json()

    assert data["candidate_slots"] == ["18:00", "18:30", "19:00", "19:30"]
    assert data["closed_slots"] == ["19:30"]
    assert data["fully_booked_slots"] == ["18:00"]
    assert data["available_slots"] == ["18:30", "19:00"]
    assert data["max_party_sizes"] == {"18:30": 10, "19:00": 10}
    assert data["seating_options"] == ["indoor", "outdoor"]


def test_day_slots_rejects_past_dates(client, db):
    add_business(db)

    assert client.get("/reservations/b1/slots", params={"date": "2023-12-31"}).status_code == 400


def test_party_too_large_is_409_with_max(client, db):
    add_business(db)

    response = client.post("/reservations/b1", json=_booking(party_size=12))

    assert response.status_code == 409
    assert response.json()["detail"] == {
        "code": "PARTY_TOO_LARGE",
        "message": "Maximum party size for 18:00 is 10",
        "max_allowed": 10,
    }


def test_rpc_failure_is_502(client, db):
    # SQLite has no create_direct_reservation function
    add_business(db)

    response = client.post("/reservations/b1", json=_booking())

    assert response.status_code == 502
    assert response.json()["detail"]["code"] == "BOOKING_FAILED"
    assert response.json()["detail"]["max_allowed"] is None


def test_booking_rejections_are_documented(client):
    responses = client.get("/openapi.json").json()["paths"]["/reservations/{business_id}"]["post"]["responses"]

    for code in ("409", "502"):
        schema = responses[code]["content"]["application/json"]["schema"]
        assert schema == {"$ref": "#/components/schemas/ReservationRejectionResponse"}


def test_successful_booking(client, db, monkeypatch):
    add_business(db)
    calls = []

    def fake_submit(db, request, slot_time, settings):
        calls.append((request.party_size, slot_time))
        return BookingResult("r9", ReservationStatus.PENDING, "XYZ")

    monkeypatch.setattr(reservations_router, "submit_booking", fake_submit)

    response = client.post("/reservations/b1", json=_booking(time="18:30:00"))

    assert response.status_code == 201
    assert response.json() == {"reservation_id": "r9", "status": "pending", "confirmation_code": "XYZ"}
    assert calls == [(4, "18:30")]


def test_boost_value_is_cached(client, db, redis):
    add_business(db)
    db.add_all([
        Discounts(id="d1", business_id="b1"),
        DiscountViews(id="dv1", discount_id="d1", viewed_at=utc(2024, 1, 5)),
    ])
    db.commit()

    first = client.get("/analytics/b1/boost-value", params=RANGE).json()
    second = client.get("/analytics/b1/boost-value", params=RANGE).json()

    assert first["offers"]["views"] == {"without": 1, "with": 0, "change": -100}
    assert first["best_days"]["events"] == 5
    assert not first["cached"]
    assert second["cached"]
    assert second["offers"] == first["offers"]


def test_degraded_report_is_not_cached(client, db, redis, monkeypatch):
    add_business(db)

    def broken(*args, **kwargs):
        raise RuntimeError("boom")

    monkeypatch.setattr(sources, "event_views", broken)

    first = client.get("/analytics/b1/boost-value", params=RANGE).json()

    assert first["events"]["degraded"]
    assert list(redis.scan_iter(match="analytics:*")) == []



def test_degraded_guidance_is_not_cached(client, db, redis, monkeypatch):
    add_business(db)

    def broken(*args, **kwargs):
        raise RuntimeError("boom")

    monkeypatch.setattr(sources, "event_views", broken)

    data = client.get("/analytics/b1/guidance", params=RANGE).json()

    assert data["events"]["degraded"]
    assert not data["profile"]["degraded"]
    assert list(redis.scan_iter(match="analytics:*")) == []


def test_analytics_range_validation(client, db):
    add_business(db)

    assert client.get("/analytics/b1/boost-value", params={"start": "2024-02-01T00:00:00Z", "end": "2024-01-01T00:00:00Z"}).status_code == 400
    assert client.get("/analytics/nope/guidance", params=RANGE).status_code == 404


def test_guidance_and_cache_invalidation(client, db, redis):
    add_business(db)

    data = client.get("/analytics/b1/guidance", params=RANGE).json()
    assert data["recommended"]["publish"] == {"day_index": 5, "hours": "17:00–19:00", "count": 0}

    response = client.delete("/analytics/b1/cache")
    assert response.json() == {"business_id": "b1", "deleted_keys": 1}
