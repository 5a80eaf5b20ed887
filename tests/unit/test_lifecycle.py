from datetime import date, datetime, timezone

import pytest

from core.db import SERVER_TIMESTAMP
from core.errors import ConflictError, ErrorCode
from core.services import lifecycle

NOW = datetime(2025, 1, 2, 12, 0, tzinfo=timezone.utc)


def _hotel(**overrides):
    booking = {
        "bookingId": "b1",
        "bookingType": "hotel",
        "bookingStatus": "CONFIRMED",
        "checkInDate": "2025-01-10",
        "checkOutDate": "2025-01-12",
        "cancellationDeadline": "2025-01-08T23:59:00+00:00",
    }
    booking.update(overrides)
    return booking


def _flight(**overrides):
    booking = {
        "bookingId": "b2",
        "bookingType": "flight",
        "bookingStatus": "CONFIRMED",
        "departureDate": "2025-01-05T07:00:00",
        "arrivalDate": "2025-01-05T10:00:00",
    }
    booking.update(overrides)
    return booking


@pytest.mark.parametrize(
    "value, expected",
    [
        ("2025-12-20", datetime(2025, 12, 20, tzinfo=timezone.utc)),
        ("2025-12-20T07:00:00", datetime(2025, 12, 20, 7, tzinfo=timezone.utc)),
        ("2025-12-20T07:00:00Z", datetime(2025, 12, 20, 7, tzinfo=timezone.utc)),
        (date(2025, 12, 20), datetime(2025, 12, 20, tzinfo=timezone.utc)),
        ("garbage", None),
        (None, None),
    ],
)
def test_parse_timestamp(value, expected):
    assert lifecycle.parse_timestamp(value) == expected


def test_terminal_states_have_no_transitions():
    assert lifecycle.can_transition("CONFIRMED", "CANCELLED")
    assert lifecycle.can_transition("CONFIRMED", "COMPLETED")
    assert not lifecycle.can_transition("CANCELLED", "CONFIRMED")
    assert not lifecycle.can_transition("COMPLETED", "CANCELLED")


def test_hotel_cancellable_before_deadline():
    lifecycle.ensure_cancellable(_hotel(), NOW)


def test_hotel_deadline_passed():
    with pytest.raises(ConflictError) as exc_info:
        lifecycle.ensure_cancellable(_hotel(cancellationDeadline="2025-01-01T23:59:00+00:00"), NOW)
    assert exc_info.value.code is ErrorCode.DEADLINE_PASSED
    assert exc_info.value.status_code == 400
    assert exc_info.value.details == {"cancellationDeadline": "2025-01-01T23:59:00+00:00"}


def test_hotel_without_deadline_is_cancellable():
    lifecycle.ensure_cancellable(_hotel(cancellationDeadline=None), NOW)


def test_flight_departure_passed():
    with pytest.raises(ConflictError) as exc_info:
        lifecycle.ensure_cancellable(_flight(departureDate="2025-01-01T07:00:00"), NOW)
    assert exc_info.value.code is ErrorCode.DEPARTURE_PASSED
    assert exc_info.value.message == "Cannot cancel booking. Departure date has passed."


def test_already_cancelled():
    with pytest.raises(ConflictError) as exc_info:
        lifecycle.ensure_cancellable(_flight(bookingStatus="CANCELLED"), NOW)
    assert exc_info.value.code is ErrorCode.ALREADY_CANCELLED


def test_completed_is_not_cancellable():
    with pytest.raises(ConflictError) as exc_info:
        lifecycle.ensure_cancellable(_hotel(bookingStatus="COMPLETED"), NOW)
    assert exc_info.value.code is ErrorCode.ALREADY_COMPLETED


def test_is_expired_uses_end_date():
    assert lifecycle.is_expired(_hotel(checkOutDate="2025-01-01"), NOW)
    assert not lifecycle.is_expired(_hotel(), NOW)
    assert lifecycle.is_expired(_flight(arrivalDate="2025-01-02T11:59:00"), NOW)
    assert not lifecycle.is_expired(_flight(arrivalDate=None), NOW)


def test_is_expired_only_for_confirmed():
    assert not lifecycle.is_expired(_hotel(checkOutDate="2025-01-01", bookingStatus="CANCELLED"), NOW)


def test_reminder_target_is_three_days_ahead():
    assert lifecycle.reminder_target_date(NOW) == date(2025, 1, 5)


def test_is_reminder_due():
    target = date(2025, 1, 5)
    assert lifecycle.is_reminder_due(_flight(), target)
    assert not lifecycle.is_reminder_due(_flight(reminderSent=True), target)
    assert not lifecycle.is_reminder_due(_hotel(), target)
    assert lifecycle.is_reminder_due(_hotel(checkInDate="2025-01-05"), target)


def test_update_fields_use_server_timestamp():
    fields = lifecycle.cancellation_fields()
    assert fields["bookingStatus"] == "CANCELLED"
    assert fields["paymentStatus"] == "refunded"
    assert fields["cancelledAt"] is SERVER_TIMESTAMP
    assert lifecycle.completion_fields()["completedAt"] is SERVER_TIMESTAMP
    assert lifecycle.reminder_fields()["reminderSent"] is True
