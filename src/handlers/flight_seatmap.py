"""POST /flights/seatmaps: seat map for a flight offer, priced first."""

from typing import Any

from core.api import api_handler, parse_json_body, success_response
from core.clients import get_flight_gateway
from core.models.booking import FlightOfferRequest
from core.services.booking import parse_request


@api_handler("Failed to retrieve seat map")
def handler(event: dict[str, Any], context: object) -> dict[str, Any]:
    request = parse_request(FlightOfferRequest, parse_json_body(event))
    gateway = get_flight_gateway()
    pricing = gateway.confirm_flight_pricing(request.flight_offer)
    priced_offers = pricing.get("flightOffers") or []
    seatmaps = gateway.get_flight_seatmap(priced_offers[0]) if priced_offers else []
    message = "Seat map retrieved successfully" if seatmaps else "No seat map available for this offer"
    return success_response(200, message, data=seatmaps, count=len(seatmaps))
