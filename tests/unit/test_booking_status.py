"""Unit tests for the completion sweep and trip reminders."""

from datetime import datetime, timezone

from core.services.booking_status import complete_expired_bookings, send_trip_reminders

NOW = datetime(2025, 1, 2, 12, 0, tzinfo=timezone.utc)


def _hotel(booking_id, **fields):
    booking = {
        "bookingId": booking_id,
        "userId": "user_1",
        "bookingType": "hotel",
        "bookingStatus": "CONFIRMED",
        "hotelName": "Hotel Indigo",
        "checkInDate": "2024-12-30",
        "checkOutDate": "2025-01-01",
        "reminderSent": False,
    }
    booking.update(fields)
    return booking


def _flight(booking_id, **fields):
    booking = {
        "bookingId": booking_id,
        "userId": "user_1",
        "bookingType": "flight",
        "bookingStatus": "CONFIRMED",
        "origin": "CGK",
        "destination": "DPS",
        "departureDate": "2025-01-05T07:00:00",
        "arrivalDate": "2025-01-05T09:00:00",
        "reminderSent": False,
    }
    booking.update(fields)
    return booking


def _seed(store, *bookings):
    for booking in bookings:
        store.seed("Bookings", "bookingId", booking)


def test_sweep_completes_ended_hotel(store, sink):
    _seed(store, _hotel("h1"))

    result = complete_expired_bookings(store, sink, "Bookings", now=NOW)

    assert result == {"hotel_updated": 1, "flight_updated": 0, "total_updated": 1}
    booking = store.doc("Bookings", "h1")
    assert booking["bookingStatus"] == "COMPLETED"
    assert booking["completedAt"]
    assert [(n.type.value, n.related_id) for n in sink.sent] == [("booking_completed", "h1")]


def test_sweep_leaves_future_and_terminal_bookings(store, sink):
    _seed(
        store,
        _flight("f1"),
        _hotel("h2", bookingStatus="CANCELLED"),
        _hotel("h3", checkOutDate="2025-01-03"),
    )

    result = complete_expired_bookings(store, sink, "Bookings", now=NOW)

    assert result["total_updated"] == 0
    assert store.doc("Bookings", "f1")["bookingStatus"] == "CONFIRMED"
    assert store.doc("Bookings", "h2")["bookingStatus"] == "CANCELLED"
    assert sink.sent == []


def test_sweep_is_idempotent(store, sink):
    _seed(store, _hotel("h1"), _flight("f1", arrivalDate="2025-01-01T09:00:00"))

    first = complete_expired_bookings(store, sink, "Bookings", now=NOW)
    second = complete_expired_bookings(store, sink, "Bookings", now=NOW)

    assert first["total_updated"] == 2
    assert second == {"hotel_updated": 0, "flight_updated": 0, "total_updated": 0}
    assert len(sink.sent) == 2


def test_sweep_chunks_large_batches(store, sink):
    _seed(store, *[_hotel(f"h{i}") for i in range(250)])

    result = complete_expired_bookings(store, sink, "Bookings", now=NOW)

    assert result["hotel_updated"] == 250
    assert store.batches == [100, 100, 50]
    assert all(b <= store.MAX_BATCH_OPS for b in store.batches)


def test_failed_chunk_is_skipped(store, sink):
    _seed(store, *[_hotel(f"h{i}") for i in range(150)])
    store.failing_batches = {1}

    result = complete_expired_bookings(store, sink, "Bookings", now=NOW)

    assert result["hotel_updated"] == 50
    assert len(sink.sent) == 50
    statuses = [b["bookingStatus"] for b in store.all("Bookings")]
    assert statuses.count("COMPLETED") == 50
    assert statuses.count("CONFIRMED") == 100


def test_sweep_survives_notification_failure(store, sink):
    _seed(store, _hotel("h1"))
    sink.fail = True

    result = complete_expired_bookings(store, sink, "Bookings", now=NOW)

    assert result["total_updated"] == 1
    assert store.doc("Bookings", "h1")["bookingStatus"] == "COMPLETED"


def test_sweep_skips_malformed_booking(store, sink):
    _seed(store, _hotel("h1"), _hotel("h2", checkOutDate="not-a-date"))

    result = complete_expired_bookings(store, sink, "Bookings", now=NOW)

    assert result["total_updated"] == 1


def test_reminder_sent_three_days_ahead(store, sink):
    _seed(store, _flight("f1"), _flight("f2", departureDate="2025-01-06T07:00:00"))

    result = send_trip_reminders(store, sink, "Bookings", now=NOW)

    assert result == {"reminders_sent": 1}
    assert [(n.type.value, n.related_id) for n in sink.sent] == [("reminder", "f1")]
    assert store.doc("Bookings", "f1")["reminderSent"] is True
    assert store.doc("Bookings", "f1")["reminderSentAt"]
    assert store.doc("Bookings", "f2")["reminderSent"] is False


def test_reminder_sent_at_most_once(store, sink):
    _seed(store, _hotel("h1", checkInDate="2025-01-05", checkOutDate="2025-01-07"))

    send_trip_reminders(store, sink, "Bookings", now=NOW)
    second = send_trip_reminders(store, sink, "Bookings", now=NOW)

    assert second == {"reminders_sent": 0}
    assert len(sink.sent) == 1


def test_reminder_not_marked_when_notification_fails(store, sink):
    _seed(store, _flight("f1"))
    sink.fail = True

    result = send_trip_reminders(store, sink, "Bookings", now=NOW)

    assert result == {"reminders_sent": 0}
    assert store.doc("Bookings", "f1")["reminderSent"] is False


def test_reminder_skips_cancelled(store, sink):
    _seed(store, _flight("f1", bookingStatus="CANCELLED"))
    assert send_trip_reminders(store, sink, "Bookings", now=NOW) == {"reminders_sent": 0}
