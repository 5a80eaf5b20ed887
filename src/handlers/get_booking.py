"""GET /bookings/{bookingId}: booking detail with its trip summary."""

from typing import Any

from core.api import api_handler, get_path_parameter, get_user_id, success_response
from core.clients import get_booking_service


@api_handler("Failed to retrieve booking details")
def handler(event: dict[str, Any], context: object) -> dict[str, Any]:
    user_id = get_user_id(event)
    booking_id = get_path_parameter(event, "bookingId")
    booking = get_booking_service().get_booking(user_id, booking_id)
    return success_response(200, "Booking details retrieved successfully", data=booking)
