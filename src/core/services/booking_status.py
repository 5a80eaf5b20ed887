"""Scheduled booking maintenance: completion sweep and trip reminders.

Both passes fetch CONFIRMED bookings with an equality filter on type and
status only, then evaluate dates in memory; a store-side range filter on top
of two equality conditions would need a composite index per table.
"""

import logging
from datetime import datetime
from typing import Any

from core.db.dynamo import DocumentStore, chunked
from core.models.booking import BookingStatus, BookingType
from core.services import lifecycle
from core.services.notification import NotificationSink, booking_completed, trip_reminder

logger = logging.getLogger(__name__)


def _confirmed_bookings(store: DocumentStore, bookings_table: str, booking_type: BookingType) -> list[dict[str, Any]]:
    try:
        return store.find(
            bookings_table,
            {"bookingType": booking_type.value, "bookingStatus": BookingStatus.CONFIRMED.value},
        )
    except Exception:
        logger.exception("Failed to fetch confirmed %s bookings", booking_type.value)
        return []


def complete_expired_bookings(
    store: DocumentStore,
    sink: NotificationSink,
    bookings_table: str,
    now: datetime | None = None,
) -> dict[str, int]:
    """Move CONFIRMED bookings whose check-out/arrival has passed to COMPLETED.

    Staged transitions are committed in atomic chunks of at most
    DocumentStore.MAX_BATCH_OPS. A failed chunk is logged and skipped; its
    bookings stay CONFIRMED and are retried on the next run. Only committed
    bookings are counted and notified. Never raises.
    """
    now = now or lifecycle.utc_now()

    staged: list[dict[str, Any]] = []
    for booking_type in (BookingType.HOTEL, BookingType.FLIGHT):
        for booking in _confirmed_bookings(store, bookings_table, booking_type):
            try:
                if lifecycle.is_expired(booking, now):
                    staged.append(booking)
            except Exception:
                logger.exception("Skipping malformed booking %s", booking.get("bookingId"))

    counts = {BookingType.HOTEL.value: 0, BookingType.FLIGHT.value: 0}
    for chunk in chunked(staged, store.MAX_BATCH_OPS):
        try:
            store.batch_update(
                bookings_table,
                "bookingId",
                [(booking["bookingId"], lifecycle.completion_fields()) for booking in chunk],
            )
        except Exception:
            logger.exception("Failed to commit completion batch of %d bookings", len(chunk))
            continue

        for booking in chunk:
            counts[booking["bookingType"]] += 1
            sink.send_best_effort(booking_completed(booking))

    result = {
        "hotel_updated": counts[BookingType.HOTEL.value],
        "flight_updated": counts[BookingType.FLIGHT.value],
        "total_updated": counts[BookingType.HOTEL.value] + counts[BookingType.FLIGHT.value],
    }
    if result["total_updated"]:
        logger.info(
            "Completed %d hotel and %d flight bookings",
            result["hotel_updated"],
            result["flight_updated"],
        )
    else:
        logger.info("No bookings to complete")
    return result


def send_trip_reminders(
    store: DocumentStore,
    sink: NotificationSink,
    bookings_table: str,
    now: datetime | None = None,
) -> dict[str, int]:
    """Notify owners of CONFIRMED bookings that start exactly three days from today.

    The reminder is created first and reminderSent is set afterwards, so a
    booking whose notification fails is not marked. Each booking is handled
    independently.
    """
    target = lifecycle.reminder_target_date(now)
    reminders_sent = 0

    for booking_type in (BookingType.HOTEL, BookingType.FLIGHT):
        for booking in _confirmed_bookings(store, bookings_table, booking_type):
            booking_id = booking.get("bookingId")
            try:
                if not lifecycle.is_reminder_due(booking, target):
                    continue
                sink.send(trip_reminder(booking, lifecycle.REMINDER_DAYS_AHEAD))
                store.update(bookings_table, "bookingId", booking_id, lifecycle.reminder_fields())
                reminders_sent += 1
            except Exception:
                logger.exception("Failed to send reminder for booking %s", booking_id)

    logger.info("Sent %d trip reminders for %s", reminders_sent, target.isoformat())
    return {"reminders_sent": reminders_sent}
