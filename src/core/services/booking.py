"""Booking creation, lookup, listing and cancellation for flights and hotels."""

import logging
import math
from datetime import datetime, timezone
from typing import Any, TypeVar

import pydantic

from core.db.dynamo import SERVER_TIMESTAMP, DocumentStore, new_document_id, to_json_safe
from core.errors import ConflictError, ErrorCode, ForbiddenError, InternalError, NotFoundError, ValidationError
from core.models.booking import (
    BookingListQuery,
    BookingStatus,
    BookingType,
    CreateFlightBookingRequest,
    CreateHotelBookingRequest,
    PaymentStatus,
    describe_validation_error,
)
from core.services import lifecycle
from core.services.notification import NotificationSink, booking_cancelled, booking_success
from core.supplier.interface import SupplierGateway

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=pydantic.BaseModel)

CONTINENTS: dict[str, str] = {
    **dict.fromkeys(["DPS", "JKT", "CGK", "SIN", "BKK", "HKG", "TYO", "NRT", "DEL", "BOM", "DXB"], "Asia"),
    **dict.fromkeys(
        ["LON", "LHR", "PAR", "CDG", "AMS", "FCO", "MAD", "BCN", "FRA", "MUC", "VIE", "ZRH"], "Europe"
    ),
    **dict.fromkeys(["NYC", "JFK", "LAX", "MIA", "CHI", "ORD", "YYZ", "MEX"], "America"),
    **dict.fromkeys(["SYD", "MEL", "AKL"], "Oceania"),
    **dict.fromkeys(["JNB", "CPT", "CAI"], "Africa"),
}

# Supplier statuses that count as a successful reservation
_ACCEPTED_SUPPLIER_STATUSES = {"CONFIRMED", "PENDING"}

_EPOCH = datetime.min.replace(tzinfo=timezone.utc)


def parse_request(model: type[ModelT], payload: Any) -> ModelT:
    if not isinstance(payload, dict):
        raise ValidationError("Request body must be a JSON object", code=ErrorCode.INVALID_REQUEST)
    try:
        return model.model_validate(payload)
    except pydantic.ValidationError as e:
        raise ValidationError(describe_validation_error(e)) from e


def _price(value: Any) -> float:
    try:
        return float(value or 0)
    except (TypeError, ValueError):
        return 0.0


def _confirmation_number(order: dict[str, Any]) -> str | None:
    records = order.get("associatedRecords") or [{}]
    return order.get("providerConfirmationId") or records[0].get("reference") or order.get("id")


class BookingService:
    def __init__(
        self,
        store: DocumentStore,
        sink: NotificationSink,
        bookings_table: str,
        trips_table: str,
    ) -> None:
        self._store = store
        self._sink = sink
        self._bookings_table = bookings_table
        self._trips_table = trips_table

    # --- lookups ---

    def _require_owned_trip(self, trip_id: str, user_id: str) -> dict[str, Any]:
        trip = self._store.get(self._trips_table, "tripId", trip_id)
        if trip is None:
            raise NotFoundError("Trip not found", code=ErrorCode.TRIP_NOT_FOUND)
        if trip.get("userId") != user_id:
            raise ForbiddenError("You don't have permission to add booking to this trip")
        return trip

    def _require_owned_booking(self, booking_id: str, user_id: str, action: str) -> dict[str, Any]:
        booking = self._store.get(self._bookings_table, "bookingId", booking_id)
        if booking is None:
            raise NotFoundError("Booking not found", code=ErrorCode.BOOKING_NOT_FOUND)
        if booking.get("userId") != user_id:
            raise ForbiddenError(f"You don't have permission to {action} this booking")
        return booking

    def _save(self, document: dict[str, Any]) -> dict[str, Any]:
        self._store.put(self._bookings_table, document)
        saved = self._store.get(self._bookings_table, "bookingId", document["bookingId"])
        if saved is None:
            raise InternalError(f"Booking {document['bookingId']} missing after write")
        self._sink.send_best_effort(booking_success(saved))
        logger.info(
            "Created %s booking %s for user %s (mock=%s)",
            saved["bookingType"],
            saved["bookingId"],
            saved["userId"],
            saved.get("isMockBooking"),
        )
        return to_json_safe(saved)

    @staticmethod
    def _common_fields(user_id: str, trip_id: str, booking_type: BookingType, payment_method: str) -> dict[str, Any]:
        return {
            "bookingId": new_document_id(),
            "userId": user_id,
            "tripId": trip_id,
            "bookingType": booking_type.value,
            "bookingStatus": BookingStatus.CONFIRMED.value,
            "paymentMethod": payment_method,
            "paymentStatus": PaymentStatus.PAID.value,
            "reminderSent": False,
            "paidAt": SERVER_TIMESTAMP,
            "bookedAt": SERVER_TIMESTAMP,
            "createdAt": SERVER_TIMESTAMP,
            "updatedAt": SERVER_TIMESTAMP,
        }

    # --- creation ---

    def create_hotel_booking(self, user_id: str, payload: Any, gateway: SupplierGateway) -> dict[str, Any]:
        request = parse_request(CreateHotelBookingRequest, payload)
        self._require_owned_trip(request.trip_id, user_id)

        order = gateway.create_hotel_booking(request.offer_id, request.guests, request.payments)
        supplier_status = order.get("bookingStatus") or "CONFIRMED"
        if supplier_status not in _ACCEPTED_SUPPLIER_STATUSES:
            raise ConflictError(
                "Booking failed. Please try again or contact support.",
                code=ErrorCode.BOOKING_REJECTED,
                details={"bookingStatus": supplier_status},
            )

        confirmation = _confirmation_number(order)
        hotel = order.get("hotel") or {}
        room = order.get("room") or {}
        estimated = room.get("typeEstimated") or {}
        price = order.get("price") or {}
        policies = order.get("policies")
        city_code = hotel.get("cityCode") or hotel.get("iataCode")
        primary = request.guests[0]

        document = {
            **self._common_fields(user_id, request.trip_id, BookingType.HOTEL, request.payment_method),
            "offerId": request.offer_id,
            "confirmationNumber": confirmation,
            "providerConfirmationId": confirmation,
            "providerBookingStatus": supplier_status,
            "isMockBooking": gateway.is_mock,
            "hotelId": hotel.get("hotelId"),
            "hotelName": hotel.get("name") or "Unknown Hotel",
            "hotelChainCode": hotel.get("chainCode"),
            "hotelCityCode": city_code,
            "hotelLatitude": hotel.get("latitude"),
            "hotelLongitude": hotel.get("longitude"),
            "continent": CONTINENTS.get(city_code or "", "Unknown"),
            "roomType": room.get("type"),
            "roomDescription": (room.get("description") or {}).get("text") or estimated.get("category"),
            "roomCategory": estimated.get("category"),
            "roomBeds": estimated.get("beds"),
            "roomBedType": estimated.get("bedType"),
            "guests": [
                {
                    "title": guest.name.title,
                    "firstName": guest.name.first_name,
                    "lastName": guest.name.last_name,
                    "email": guest.contact.email,
                    "phone": guest.contact.phone,
                }
                for guest in request.guests
            ],
            "primaryGuestName": f"{primary.name.first_name} {primary.name.last_name}",
            "primaryGuestEmail": primary.contact.email,
            "primaryGuestPhone": primary.contact.phone,
            "numberOfGuests": len(request.guests),
            "checkInDate": order.get("checkInDate"),
            "checkOutDate": order.get("checkOutDate"),
            "currency": price.get("currency") or "EUR",
            "totalPrice": _price(price.get("total")),
            "basePrice": _price(price.get("base")),
            "taxes": price.get("taxes") or [],
            "policies": policies,
            "cancellationDeadline": ((policies or {}).get("cancellation") or {}).get("deadline"),
        }
        return self._save(document)

    def create_flight_booking(self, user_id: str, payload: Any, gateway: SupplierGateway) -> dict[str, Any]:
        request = parse_request(CreateFlightBookingRequest, payload)
        self._require_owned_trip(request.trip_id, user_id)

        # Pricing must be confirmed before the order is placed
        pricing = gateway.confirm_flight_pricing(request.flight_offer)
        priced_offer = (pricing.get("flightOffers") or [request.flight_offer])[0]
        order = gateway.create_flight_order(priced_offer, request.passengers)

        segments = ((priced_offer.get("itineraries") or [{}])[0]).get("segments") or []
        first = segments[0] if segments else {}
        last = segments[-1] if segments else {}
        price = priced_offer.get("price") or {}
        fare_details = ((priced_offer.get("travelerPricings") or [{}])[0]).get("fareDetailsBySegment") or [{}]
        primary = request.passengers[0]

        document = {
            **self._common_fields(user_id, request.trip_id, BookingType.FLIGHT, request.payment_method),
            "confirmationNumber": _confirmation_number(order),
            "providerConfirmationId": order.get("id"),
            "isMockBooking": gateway.is_mock,
            "flightOfferId": str(request.flight_offer["id"]),
            "flightOffer": priced_offer,
            "origin": (first.get("departure") or {}).get("iataCode"),
            "destination": (last.get("arrival") or {}).get("iataCode"),
            "originCity": (first.get("departure") or {}).get("cityCode"),
            "destinationCity": (last.get("arrival") or {}).get("cityCode"),
            "departureDate": (first.get("departure") or {}).get("at"),
            "arrivalDate": (last.get("arrival") or {}).get("at"),
            "airline": first.get("carrierCode"),
            "flightNumber": first.get("number"),
            "numberOfStops": max(len(segments) - 1, 0),
            "cabin": fare_details[0].get("cabin"),
            "passengers": [
                {
                    "type": p.type,
                    "firstName": p.first_name,
                    "lastName": p.last_name,
                    "dateOfBirth": p.date_of_birth.isoformat(),
                    "email": p.email,
                    "phone": p.phone,
                    "gender": p.gender,
                    "nationality": p.nationality,
                    "documentType": p.document_type,
                    "documentNumber": p.document_number,
                }
                for p in request.passengers
            ],
            "primaryPassengerName": f"{primary.first_name} {primary.last_name}",
            "primaryPassengerEmail": primary.email,
            "primaryPassengerPhone": primary.phone,
            "numberOfPassengers": len(request.passengers),
            "selectedSeats": request.selected_seats,
            "hasSeatsSelected": bool(request.selected_seats),
            "currency": price.get("currency") or "EUR",
            "totalPrice": _price(price.get("grandTotal") or price.get("total")),
            "basePrice": _price(price.get("base")),
            "taxes": price.get("taxes") or [],
        }
        return self._save(document)

    # --- reads ---

    def get_booking(self, user_id: str, booking_id: str) -> dict[str, Any]:
        booking = self._require_owned_booking(booking_id, user_id, action="view")
        trip_info = None
        if booking.get("tripId"):
            trip = self._store.get(self._trips_table, "tripId", booking["tripId"])
            if trip is not None:
                trip_info = {
                    "tripId": trip["tripId"],
                    "tripName": trip.get("tripName"),
                    "startDate": trip.get("startDate"),
                    "endDate": trip.get("endDate"),
                }
        return to_json_safe({**booking, "trip": trip_info})

    def list_bookings(self, user_id: str, params: dict[str, Any] | None) -> dict[str, Any]:
        query = parse_request(BookingListQuery, params or {})

        filters: dict[str, Any] = {"userId": user_id}
        if query.booking_type:
            filters["bookingType"] = query.booking_type.value
        if query.trip_id:
            filters["tripId"] = query.trip_id
        if query.status:
            filters["bookingStatus"] = query.status.value

        # Range filters are evaluated in memory; the scan only applies equality
        bookings = [b for b in self._store.find(self._bookings_table, filters) if self._matches(b, query)]
        bookings.sort(key=lambda b: self._sort_key(b, query.sort_by), reverse=query.sort_order == "desc")

        total_items = len(bookings)
        total_pages = math.ceil(total_items / query.limit)
        start = (query.page - 1) * query.limit
        page_items = bookings[start : start + query.limit]
        total_spent = sum(_price(b.get("totalPrice")) for b in bookings)

        return to_json_safe(
            {
                "items": page_items,
                "count": len(page_items),
                "pagination": {
                    "page": query.page,
                    "limit": query.limit,
                    "totalPages": total_pages,
                    "totalItems": total_items,
                    "hasNextPage": query.page < total_pages,
                    "hasPrevPage": query.page > 1,
                },
                "summary": {
                    "totalBookings": total_items,
                    "totalSpent": round(total_spent, 2),
                    "averagePrice": round(total_spent / total_items, 2) if total_items else 0,
                    "currency": page_items[0].get("currency") if page_items else None,
                },
            }
        )

    @staticmethod
    def _travel_date(booking: dict[str, Any]) -> datetime | None:
        try:
            field = lifecycle.start_date_field(booking.get("bookingType", ""))
        except ValueError:
            return None
        return lifecycle.parse_timestamp(booking.get(field))

    @classmethod
    def _matches(cls, booking: dict[str, Any], query: BookingListQuery) -> bool:
        if query.start_date or query.end_date:
            travel = cls._travel_date(booking)
            if travel is None:
                return False
            if query.start_date and travel.date() < query.start_date:
                return False
            if query.end_date and travel.date() > query.end_date:
                return False
        price = _price(booking.get("totalPrice"))
        if query.min_price is not None and price < query.min_price:
            return False
        if query.max_price is not None and price > query.max_price:
            return False
        if query.continent and (booking.get("continent") or "").lower() != query.continent.lower():
            return False
        return True

    @classmethod
    def _sort_key(cls, booking: dict[str, Any], sort_by: str) -> Any:
        if sort_by in ("price", "totalPrice"):
            return _price(booking.get("totalPrice"))
        if sort_by == "travelDate":
            return cls._travel_date(booking) or _EPOCH
        return lifecycle.parse_timestamp(booking.get("createdAt")) or _EPOCH

    # --- cancellation ---

    def cancel_booking(self, user_id: str, booking_id: str, now: datetime | None = None) -> dict[str, Any]:
        """Move an owned CONFIRMED booking to CANCELLED and refund it.

        The local record is authoritative; the supplier's own cancellation
        endpoint is not called.
        """
        now = now or lifecycle.utc_now()
        booking = self._require_owned_booking(booking_id, user_id, action="cancel")
        lifecycle.ensure_cancellable(booking, now)

        self._store.update(self._bookings_table, "bookingId", booking_id, lifecycle.cancellation_fields())
        self._sink.send_best_effort(booking_cancelled(booking))
        logger.info("Cancelled booking %s for user %s", booking_id, user_id)

        return {
            "bookingId": booking_id,
            "bookingStatus": BookingStatus.CANCELLED.value,
            "paymentStatus": PaymentStatus.REFUNDED.value,
            "cancelledAt": now.isoformat(),
        }
