"""Notification sink and the booking notification templates."""

import logging
from typing import Any

from core.db.dynamo import SERVER_TIMESTAMP, DocumentStore, new_document_id
from core.models.notification import Notification, NotificationType

logger = logging.getLogger(__name__)


class NotificationSink:
    """Writes user-facing notification records.

    send() raises on failure. send_best_effort() is for side effects that
    must never abort the caller's primary operation: it logs and returns None.
    """

    def __init__(self, store: DocumentStore, notifications_table: str) -> None:
        self._store = store
        self._table = notifications_table

    def send(self, notification: Notification) -> str:
        notification_id = new_document_id()
        self._store.put(
            self._table,
            {
                "notificationId": notification_id,
                "userId": notification.user_id,
                "type": notification.type.value,
                "title": notification.title,
                "body": notification.body,
                "relatedType": notification.related_type,
                "relatedId": notification.related_id,
                "actionUrl": notification.action_url,
                "isRead": False,
                "readAt": None,
                "createdAt": SERVER_TIMESTAMP,
            },
        )
        logger.info("Notification %s created for user %s", notification_id, notification.user_id)
        return notification_id

    def send_best_effort(self, notification: Notification) -> str | None:
        try:
            return self.send(notification)
        except Exception:
            logger.exception(
                "Failed to create %s notification for user %s",
                notification.type.value,
                notification.user_id,
            )
            return None


def _action_url(booking: dict[str, Any]) -> str:
    section = "hotels" if booking.get("bookingType") == "hotel" else "flights"
    return f"/{section}/bookings/{booking['bookingId']}"


def _route(booking: dict[str, Any]) -> str:
    return f"{booking.get('origin') or 'Unknown'} to {booking.get('destination') or 'Unknown'}"


def _booking_notification(
    booking: dict[str, Any], type_: NotificationType, title: str, body: str
) -> Notification:
    return Notification(
        user_id=booking["userId"],
        type=type_,
        title=title,
        body=body,
        related_type="booking",
        related_id=booking["bookingId"],
        action_url=_action_url(booking),
    )


def booking_success(booking: dict[str, Any]) -> Notification:
    confirmation = booking.get("confirmationNumber")
    if booking.get("bookingType") == "hotel":
        title = "Hotel Booking Confirmed!"
        body = f"Your booking at {booking.get('hotelName')} has been confirmed. Confirmation: {confirmation}"
    else:
        title = "Flight Booking Confirmed!"
        body = f"Your flight from {_route(booking)} has been confirmed. Confirmation: {confirmation}"
    return _booking_notification(booking, NotificationType.BOOKING_SUCCESS, title, body)


def booking_cancelled(booking: dict[str, Any]) -> Notification:
    if booking.get("bookingType") == "hotel":
        body = f"Your booking at {booking.get('hotelName')} has been cancelled successfully."
    else:
        body = f"Your flight from {_route(booking)} has been cancelled."
    return _booking_notification(booking, NotificationType.BOOKING_CANCELLED, "Booking Cancelled", body)


def booking_completed(booking: dict[str, Any]) -> Notification:
    if booking.get("bookingType") == "hotel":
        title = "Booking Completed"
        body = f"Your stay at {booking.get('hotelName')} has been completed. We hope you enjoyed your trip!"
    else:
        title = "Flight Completed"
        body = f"Your flight from {_route(booking)} has been completed. Safe travels!"
    return _booking_notification(booking, NotificationType.BOOKING_COMPLETED, title, body)


def trip_reminder(booking: dict[str, Any], days_ahead: int) -> Notification:
    if booking.get("bookingType") == "hotel":
        title = "Upcoming Hotel Stay"
        body = (
            f"Reminder: Your check-in at {booking.get('hotelName')} is in {days_ahead} days! "
            "Don't forget to prepare."
        )
    else:
        title = "Upcoming Flight"
        body = f"Reminder: Your flight from {_route(booking)} is in {days_ahead} days! Check your documents."
    return _booking_notification(booking, NotificationType.REMINDER, title, body)
