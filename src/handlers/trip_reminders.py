"""Scheduled daily at 09:00 UTC: reminds users three days before check-in or departure."""

from typing import Any

from core.clients import get_document_store, get_notification_sink
from core.config import get_config
from core.services.booking_status import send_trip_reminders


def handler(event: dict[str, Any], context: object) -> dict[str, Any]:
    config = get_config()
    result = send_trip_reminders(get_document_store(), get_notification_sink(), config.bookings_table)
    return {"statusCode": 200, "body": result}
