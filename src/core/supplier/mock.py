"""Fabricated supplier responses for environments without live Amadeus credentials."""

import uuid
from datetime import date, datetime, timedelta, timezone
from typing import Any, Callable

from core.models.booking import Guest, Passenger

from .interface import SupplierGateway


def _utc_today() -> date:
    return datetime.now(timezone.utc).date()


def _random_reference() -> str:
    return uuid.uuid4().hex[:8].upper()


class MockSupplierGateway(SupplierGateway):
    """Returns responses shaped like Amadeus' without any network calls.

    Hotel stays are placed 14-16 days after `today` with a cancellation
    deadline two days before check-in, so mock bookings go through the same
    lifecycle as real ones.
    """

    is_mock = True

    CHECK_IN_OFFSET_DAYS = 14
    NIGHTS = 2
    CANCELLATION_NOTICE_DAYS = 2

    def __init__(
        self,
        today: Callable[[], date] = _utc_today,
        reference: Callable[[], str] = _random_reference,
    ) -> None:
        self._today = today
        self._reference = reference

    def create_hotel_booking(
        self, offer_id: str, guests: list[Guest], payments: list[dict[str, Any]] | None
    ) -> dict[str, Any]:
        confirmation = f"MOCK_{self._reference()}"
        check_in = self._today() + timedelta(days=self.CHECK_IN_OFFSET_DAYS)
        check_out = check_in + timedelta(days=self.NIGHTS)
        deadline = check_in - timedelta(days=self.CANCELLATION_NOTICE_DAYS)
        return {
            "type": "hotel-order",
            "id": confirmation,
            "bookingStatus": "CONFIRMED",
            "providerConfirmationId": confirmation,
            "associatedRecords": [{"reference": confirmation, "originSystemCode": "MOCK"}],
            "hotel": {
                "hotelId": "MOCKHOTEL001",
                "name": "Mock Hotel for Testing",
                "chainCode": "MC",
                "cityCode": "LON",
                "latitude": 51.50988,
                "longitude": -0.15509,
            },
            "room": {
                "type": "AP7",
                "typeEstimated": {"category": "SUPERIOR_ROOM", "beds": 1, "bedType": "KING"},
                "description": {"text": "Superior King Room - Mock Booking for Testing"},
            },
            "guests": [
                {
                    "tid": i + 1,
                    "title": guest.name.title,
                    "firstName": guest.name.first_name,
                    "lastName": guest.name.last_name,
                    "phone": guest.contact.phone,
                    "email": guest.contact.email,
                }
                for i, guest in enumerate(guests)
            ],
            "checkInDate": check_in.isoformat(),
            "checkOutDate": check_out.isoformat(),
            "price": {
                "currency": "GBP",
                "total": "907.20",
                "base": "864.00",
                "taxes": [{"amount": "43.20", "currency": "GBP", "code": "VAT", "included": True}],
            },
            "policies": {
                "cancellation": {"deadline": f"{deadline.isoformat()}T23:59:00+00:00", "type": "FULL_STAY"},
                "paymentType": "deposit",
            },
        }

    def confirm_flight_pricing(self, flight_offer: dict[str, Any]) -> dict[str, Any]:
        return {"type": "flight-offers-pricing", "flightOffers": [flight_offer]}

    def create_flight_order(self, priced_offer: dict[str, Any], passengers: list[Passenger]) -> dict[str, Any]:
        confirmation = f"FLIGHT_{self._reference()}"
        return {
            "type": "flight-order",
            "id": confirmation,
            "associatedRecords": [{"reference": confirmation, "originSystemCode": "MOCK"}],
            "flightOffers": [priced_offer],
            "travelers": [
                {"id": str(i + 1), "name": {"firstName": p.first_name, "lastName": p.last_name}}
                for i, p in enumerate(passengers)
            ],
        }

    def get_flight_seatmap(self, priced_offer: dict[str, Any]) -> list[dict[str, Any]]:
        return []
