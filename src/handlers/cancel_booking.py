"""DELETE /bookings/{bookingId}: cancel a booking (soft delete via status)."""

from typing import Any

from core.api import api_handler, get_path_parameter, get_user_id, success_response
from core.clients import get_booking_service


@api_handler("Failed to cancel booking")
def handler(event: dict[str, Any], context: object) -> dict[str, Any]:
    user_id = get_user_id(event)
    booking_id = get_path_parameter(event, "bookingId")
    result = get_booking_service().cancel_booking(user_id, booking_id)
    return success_response(200, "Booking cancelled successfully", data=result)
