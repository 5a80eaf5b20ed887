"""
Booking state machine.

    CONFIRMED ──cancel (owner)──▶ CANCELLED
        │
        └──sweep (end date passed)──▶ COMPLETED

CANCELLED and COMPLETED are terminal. All date arithmetic is done in UTC;
stored dates without an offset are read as UTC.
"""

from datetime import date, datetime, time, timedelta, timezone
from typing import Any

from core.db.dynamo import SERVER_TIMESTAMP
from core.errors import ConflictError, ErrorCode
from core.models.booking import BookingStatus, BookingType, PaymentStatus

REMINDER_DAYS_AHEAD = 3

TRANSITIONS: dict[BookingStatus, frozenset[BookingStatus]] = {
    BookingStatus.CONFIRMED: frozenset({BookingStatus.CANCELLED, BookingStatus.COMPLETED}),
    BookingStatus.CANCELLED: frozenset(),
    BookingStatus.COMPLETED: frozenset(),
}

# Field that ends a booking, per type
_END_FIELD = {BookingType.HOTEL: "checkOutDate", BookingType.FLIGHT: "arrivalDate"}
# Field that starts a booking, per type
_START_FIELD = {BookingType.HOTEL: "checkInDate", BookingType.FLIGHT: "departureDate"}


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def parse_timestamp(value: Any) -> datetime | None:
    """Parse a stored date or datetime ("2025-12-20", "2025-12-20T07:00:00", "...Z")."""
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, date):
        parsed = datetime.combine(value, time.min)
    else:
        try:
            parsed = datetime.fromisoformat(str(value).replace("Z", "+00:00"))
        except ValueError:
            return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


def start_date_field(booking_type: BookingType | str) -> str:
    return _START_FIELD[BookingType(booking_type)]


def can_transition(current: BookingStatus | str, target: BookingStatus | str) -> bool:
    return BookingStatus(target) in TRANSITIONS[BookingStatus(current)]


def ensure_cancellable(booking: dict[str, Any], now: datetime | None = None) -> None:
    """Raise ConflictError unless the booking may move to CANCELLED at `now`."""
    now = now or utc_now()
    status = BookingStatus(booking["bookingStatus"])
    if status is BookingStatus.CANCELLED:
        raise ConflictError("Booking is already cancelled", code=ErrorCode.ALREADY_CANCELLED)
    if not can_transition(status, BookingStatus.CANCELLED):
        raise ConflictError("Booking is already completed", code=ErrorCode.ALREADY_COMPLETED)

    booking_type = BookingType(booking["bookingType"])
    if booking_type is BookingType.HOTEL:
        deadline = parse_timestamp(booking.get("cancellationDeadline"))
        if deadline is not None and now > deadline:
            raise ConflictError(
                f"Cancellation deadline has passed ({booking['cancellationDeadline']})",
                code=ErrorCode.DEADLINE_PASSED,
                details={"cancellationDeadline": booking["cancellationDeadline"]},
            )
    else:
        departure = parse_timestamp(booking.get("departureDate"))
        if departure is not None and departure < now:
            raise ConflictError(
                "Cannot cancel booking. Departure date has passed.",
                code=ErrorCode.DEPARTURE_PASSED,
            )


def is_expired(booking: dict[str, Any], now: datetime | None = None) -> bool:
    """True when a CONFIRMED booking's end date is strictly before `now`."""
    now = now or utc_now()
    if booking.get("bookingStatus") != BookingStatus.CONFIRMED.value:
        return False
    end = parse_timestamp(booking.get(_END_FIELD[BookingType(booking["bookingType"])]))
    return end is not None and end < now


def reminder_target_date(now: datetime | None = None) -> date:
    now = now or utc_now()
    return now.astimezone(timezone.utc).date() + timedelta(days=REMINDER_DAYS_AHEAD)


def is_reminder_due(booking: dict[str, Any], target: date) -> bool:
    if booking.get("bookingStatus") != BookingStatus.CONFIRMED.value or booking.get("reminderSent"):
        return False
    start = parse_timestamp(booking.get(start_date_field(booking["bookingType"])))
    return start is not None and start.date() == target


def cancellation_fields() -> dict[str, Any]:
    return {
        "bookingStatus": BookingStatus.CANCELLED.value,
        "cancelledAt": SERVER_TIMESTAMP,
        "updatedAt": SERVER_TIMESTAMP,
        "paymentStatus": PaymentStatus.REFUNDED.value,
    }


def completion_fields() -> dict[str, Any]:
    return {
        "bookingStatus": BookingStatus.COMPLETED.value,
        "completedAt": SERVER_TIMESTAMP,
        "updatedAt": SERVER_TIMESTAMP,
    }


def reminder_fields() -> dict[str, Any]:
    return {"reminderSent": True, "reminderSentAt": SERVER_TIMESTAMP}
