"""Amadeus Self-Service API client for hotel and flight booking."""

import logging
from typing import Any

import requests

from core.errors import ErrorCode, UpstreamError, ValidationError
from core.models.booking import Guest, Passenger

from .interface import SupplierGateway
from .token_cache import AccessTokenCache

logger = logging.getLogger(__name__)

TOKEN_PATH = "/v1/security/oauth2/token"
HOTEL_ORDERS_PATH = "/v1/booking/hotel-orders"
FLIGHT_PRICING_PATH = "/v1/shopping/flight-offers/pricing"
FLIGHT_ORDERS_PATH = "/v1/booking/flight-orders"
SEATMAPS_PATH = "/v1/shopping/seatmaps"

DEFAULT_TOKEN_TTL_SECONDS = 1799


def _error_detail(payload: dict[str, Any]) -> str:
    errors = payload.get("errors") or [{}]
    return (
        errors[0].get("detail")
        or errors[0].get("title")
        or payload.get("error_description")
        or payload.get("error")
        or "Supplier request failed"
    )


def _classify(detail: str) -> ErrorCode:
    lowered = detail.lower()
    if "not found" in lowered or "expired" in lowered:
        return ErrorCode.OFFER_NOT_FOUND
    if "not available" in lowered or "no longer available" in lowered:
        return ErrorCode.OFFER_UNAVAILABLE
    return ErrorCode.SUPPLIER_FAILED


def _hotel_guest(index: int, guest: Guest) -> dict[str, Any]:
    return {
        "tid": index + 1,
        "title": guest.name.title.upper(),
        "firstName": guest.name.first_name.upper(),
        "lastName": guest.name.last_name.upper(),
        "phone": guest.contact.phone,
        "email": guest.contact.email.lower(),
    }


def _traveler(index: int, passenger: Passenger) -> dict[str, Any]:
    traveler: dict[str, Any] = {
        "id": str(index + 1),
        "dateOfBirth": passenger.date_of_birth.isoformat(),
        "name": {"firstName": passenger.first_name.upper(), "lastName": passenger.last_name.upper()},
        "contact": {"emailAddress": passenger.email},
    }
    if passenger.gender:
        traveler["gender"] = passenger.gender.upper()
    if passenger.phone:
        traveler["contact"]["phones"] = [{"deviceType": "MOBILE", "number": passenger.phone}]
    if passenger.document_type and passenger.document_number:
        traveler["documents"] = [
            {
                "documentType": passenger.document_type.upper(),
                "number": passenger.document_number,
                "nationality": passenger.nationality,
                "holder": True,
            }
        ]
    return traveler


class AmadeusGateway(SupplierGateway):
    is_mock = False

    def __init__(
        self,
        base_url: str,
        client_id: str,
        client_secret: str,
        token_cache: AccessTokenCache,
        timeout: float = 20.0,
        session: requests.Session | None = None,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._client_id = client_id
        self._client_secret = client_secret
        self._token_cache = token_cache
        self._timeout = timeout
        self._session = session or requests.Session()

    def _fetch_token(self) -> tuple[str, float]:
        if not self._client_id or not self._client_secret:
            raise UpstreamError("Amadeus credentials not configured")

        logger.info("Fetching new Amadeus access token")
        try:
            response = self._session.post(
                f"{self._base_url}{TOKEN_PATH}",
                data={
                    "grant_type": "client_credentials",
                    "client_id": self._client_id,
                    "client_secret": self._client_secret,
                },
                timeout=self._timeout,
            )
            payload = response.json()
        except requests.Timeout as e:
            raise UpstreamError(f"Amadeus token request timed out: {e}", code=ErrorCode.TIMEOUT) from e
        except (requests.RequestException, ValueError) as e:
            raise UpstreamError(f"Failed to authenticate with Amadeus: {e}") from e

        if not response.ok or "access_token" not in payload:
            raise UpstreamError(f"Amadeus OAuth2 failed: {_error_detail(payload)}")
        return payload["access_token"], float(payload.get("expires_in", DEFAULT_TOKEN_TTL_SECONDS))

    def _post(self, path: str, body: dict[str, Any]) -> dict[str, Any]:
        token = self._token_cache.refresh_if_expired(self._fetch_token)
        try:
            response = self._session.post(
                f"{self._base_url}{path}",
                json=body,
                headers={"Authorization": f"Bearer {token}"},
                timeout=self._timeout,
            )
        except requests.Timeout as e:
            raise UpstreamError(f"Amadeus {path} timed out: {e}", code=ErrorCode.TIMEOUT) from e
        except requests.RequestException as e:
            raise UpstreamError(f"Amadeus {path} request failed: {e}") from e

        try:
            payload = response.json()
        except ValueError as e:
            raise UpstreamError(f"Amadeus {path} returned a non-JSON response ({response.status_code})") from e

        if not response.ok:
            if response.status_code == 401:
                self._token_cache.invalidate()
            detail = _error_detail(payload)
            logger.warning("Amadeus %s failed with %d: %s", path, response.status_code, detail)
            raise UpstreamError(detail, code=_classify(detail))
        return payload

    def create_hotel_booking(
        self, offer_id: str, guests: list[Guest], payments: list[dict[str, Any]] | None
    ) -> dict[str, Any]:
        if not payments:
            raise ValidationError("payments are required for live hotel bookings")
        body = {
            "data": {
                "type": "hotel-order",
                "guests": [_hotel_guest(i, guest) for i, guest in enumerate(guests)],
                "payments": payments,
                "rooms": [{"offerId": offer_id, "guests": [{"tid": i + 1} for i in range(len(guests))]}],
            }
        }
        logger.info("Creating hotel order for offer %s", offer_id)
        data = self._post(HOTEL_ORDERS_PATH, body).get("data") or {}
        return data[0] if isinstance(data, list) and data else data

    def confirm_flight_pricing(self, flight_offer: dict[str, Any]) -> dict[str, Any]:
        body = {"data": {"type": "flight-offers-pricing", "flightOffers": [flight_offer]}}
        return self._post(FLIGHT_PRICING_PATH, body).get("data") or {}

    def create_flight_order(self, priced_offer: dict[str, Any], passengers: list[Passenger]) -> dict[str, Any]:
        body = {
            "data": {
                "type": "flight-order",
                "flightOffers": [priced_offer],
                "travelers": [_traveler(i, passenger) for i, passenger in enumerate(passengers)],
            }
        }
        logger.info("Creating flight order for offer %s", priced_offer.get("id"))
        return self._post(FLIGHT_ORDERS_PATH, body).get("data") or {}

    def get_flight_seatmap(self, priced_offer: dict[str, Any]) -> list[dict[str, Any]]:
        return self._post(SEATMAPS_PATH, {"data": [priced_offer]}).get("data") or []
