"""
Pydantic models for Travexe.
"""

from core.models.booking import (
    BookingListQuery,
    BookingStatus,
    BookingType,
    CreateFlightBookingRequest,
    CreateHotelBookingRequest,
    FlightOfferRequest,
    Guest,
    Passenger,
    PaymentStatus,
    describe_validation_error,
)
from core.models.notification import Notification, NotificationType

__all__ = [
    "BookingListQuery",
    "BookingStatus",
    "BookingType",
    "CreateFlightBookingRequest",
    "CreateHotelBookingRequest",
    "FlightOfferRequest",
    "Guest",
    "Notification",
    "NotificationType",
    "Passenger",
    "PaymentStatus",
    "describe_validation_error",
]
