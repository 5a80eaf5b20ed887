from abc import ABC, abstractmethod
from typing import Any

from core.models.booking import Guest, Passenger


class SupplierGateway(ABC):
    """Travel supplier operations used by the booking flows.

    Implementations raise core.errors.UpstreamError with OFFER_NOT_FOUND,
    OFFER_UNAVAILABLE, SUPPLIER_FAILED or TIMEOUT.
    """

    is_mock: bool = False

    @abstractmethod
    def create_hotel_booking(
        self, offer_id: str, guests: list[Guest], payments: list[dict[str, Any]] | None
    ) -> dict[str, Any]: ...

    @abstractmethod
    def confirm_flight_pricing(self, flight_offer: dict[str, Any]) -> dict[str, Any]: ...

    @abstractmethod
    def create_flight_order(self, priced_offer: dict[str, Any], passengers: list[Passenger]) -> dict[str, Any]: ...

    @abstractmethod
    def get_flight_seatmap(self, priced_offer: dict[str, Any]) -> list[dict[str, Any]]: ...
