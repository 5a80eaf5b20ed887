"""Scheduled every 30 minutes: completes bookings whose stay or flight has ended."""

import logging
from typing import Any

from core.clients import get_document_store, get_notification_sink
from core.config import get_config
from core.services.booking_status import complete_expired_bookings

logger = logging.getLogger(__name__)


def handler(event: dict[str, Any], context: object) -> dict[str, Any]:
    config = get_config()
    result = complete_expired_bookings(get_document_store(), get_notification_sink(), config.bookings_table)

    logger.info(
        "Status sweep complete: %d hotel, %d flight, %d total",
        result["hotel_updated"],
        result["flight_updated"],
        result["total_updated"],
    )

    return {"statusCode": 200, "body": result}
