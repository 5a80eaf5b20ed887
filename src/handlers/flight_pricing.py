"""POST /flights/pricing: confirm the price of a flight offer before booking."""

from typing import Any

from core.api import api_handler, parse_json_body, success_response
from core.clients import get_flight_gateway
from core.models.booking import FlightOfferRequest
from core.services.booking import parse_request


@api_handler("Failed to confirm flight pricing")
def handler(event: dict[str, Any], context: object) -> dict[str, Any]:
    request = parse_request(FlightOfferRequest, parse_json_body(event))
    pricing = get_flight_gateway().confirm_flight_pricing(request.flight_offer)
    return success_response(200, "Flight offer pricing confirmed", data=pricing)
