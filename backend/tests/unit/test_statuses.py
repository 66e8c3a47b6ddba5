import logging

from fomo.services.statuses import BoostStatus, ReservationStatus, SubscriptionStatus, parse_status


def test_parse_status_is_case_insensitive():
    assert parse_status(BoostStatus, " Active ") is BoostStatus.ACTIVE
    assert parse_status(SubscriptionStatus, "PAST_DUE") is SubscriptionStatus.PAST_DUE


def test_cancel_spellings_are_interchangeable():
    assert parse_status(BoostStatus, "cancelled") is BoostStatus.CANCELED
    assert parse_status(ReservationStatus, "canceled") is ReservationStatus.CANCELLED


def test_confirmed_means_accepted():
    assert parse_status(ReservationStatus, "confirmed") is ReservationStatus.ACCEPTED


def test_unknown_status_is_logged_and_dropped(caplog):
    with caplog.at_level(logging.WARNING):
        assert parse_status(BoostStatus, "exploded") is None

    assert "exploded" in caplog.text
    assert parse_status(BoostStatus, None) is None
    assert parse_status(BoostStatus, "  ") is None
