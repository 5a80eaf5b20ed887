"""GET /bookings: the caller's bookings with filters, sorting and pagination."""

from typing import Any

from core.api import api_handler, get_user_id, success_response
from core.clients import get_booking_service


@api_handler("Failed to retrieve bookings")
def handler(event: dict[str, Any], context: object) -> dict[str, Any]:
    user_id = get_user_id(event)
    result = get_booking_service().list_bookings(user_id, event.get("queryStringParameters"))
    message = "Bookings retrieved successfully" if result["items"] else "No bookings found"
    return success_response(
        200,
        message,
        data=result["items"],
        count=result["count"],
        pagination=result["pagination"],
        summary=result["summary"],
    )
