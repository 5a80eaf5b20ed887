"""POST /bookings: create a flight or hotel booking."""

from typing import Any

from core.api import api_handler, get_user_id, parse_json_body, success_response
from core.clients import get_booking_service, get_flight_gateway, get_hotel_gateway
from core.errors import ErrorCode, ValidationError
from core.models.booking import BookingType


@api_handler("Failed to create booking")
def handler(event: dict[str, Any], context: object) -> dict[str, Any]:
    user_id = get_user_id(event)
    payload = parse_json_body(event)
    if not isinstance(payload, dict):
        raise ValidationError("Request body must be a JSON object", code=ErrorCode.INVALID_REQUEST)

    service = get_booking_service()
    booking_type = payload.get("bookingType")
    if booking_type == BookingType.HOTEL.value:
        booking = service.create_hotel_booking(user_id, payload, get_hotel_gateway())
        message = "Hotel booking created successfully"
    elif booking_type == BookingType.FLIGHT.value:
        booking = service.create_flight_booking(user_id, payload, get_flight_gateway())
        message = "Flight booking created successfully"
    else:
        raise ValidationError("bookingType must be 'flight' or 'hotel'")

    if booking.get("isMockBooking"):
        message += " (Mock Mode)"
    return success_response(201, message, data=booking)
