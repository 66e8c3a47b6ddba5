"""Shared fakes and builders for unit tests."""

from datetime import datetime, timezone

from sqlalchemy.exc import OperationalError

from fomo.models.generated import Businesses


def utc(*args) -> datetime:
    return datetime(*args, tzinfo=timezone.utc)


class FakeResult:
    def __init__(self, value):
        self.value = value

    def scalar_one(self):
        return self.value


class FakeSession:
    """Stand-in for a Session that answers the booking RPC with a canned value."""

    def __init__(self, response=None, fail: bool = False):
        self.response = response
        self.fail = fail
        self.executed = []
        self.commits = 0
        self.rollbacks = 0

    def execute(self, statement, params=None):
        self.executed.append((str(statement), params))
        if self.fail:
            raise OperationalError(str(statement), params, Exception("connection lost"))
        return FakeResult(self.response)

    def commit(self):
        self.commits += 1

    def rollback(self):
        self.rollbacks += 1


def add_business(db, business_id: str = "b1", slots=None, **overrides) -> Businesses:
    values = {
        "id": business_id,
        "name": "Kouzina",
        "accepts_direct_reservations": True,
        "reservations_globally_paused": False,
        "reservation_requires_approval": True,
        "reservation_time_slots": slots if slots is not None else [
            {"id": "dinner", "timeFrom": "18:00", "timeTo": "20:00",
             "capacity": 2, "days": ["monday", "friday"], "maxPartySize": 10},
        ],
        "reservation_seating_options": ["indoor", "outdoor"],
    }
    values.update(overrides)
    business = Businesses(**values)
    db.add(business)
    db.commit()
    return business
