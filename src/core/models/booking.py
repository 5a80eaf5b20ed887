import re
from datetime import date
from enum import Enum
from typing import Annotated, Any, Literal

from pydantic import AfterValidator, BaseModel, ConfigDict, Field, ValidationError, field_validator

_EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")


class BookingType(str, Enum):
    FLIGHT = "flight"
    HOTEL = "hotel"


class BookingStatus(str, Enum):
    CONFIRMED = "CONFIRMED"
    CANCELLED = "CANCELLED"
    COMPLETED = "COMPLETED"


class PaymentStatus(str, Enum):
    PAID = "paid"
    REFUNDED = "refunded"


def _check_email(value: str) -> str:
    if not _EMAIL_RE.match(value):
        raise ValueError("invalid email format")
    return value


Email = Annotated[str, Field(min_length=1), AfterValidator(_check_email)]


class _RequestModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True, str_strip_whitespace=True)


class GuestName(_RequestModel):
    title: str = "MR"
    first_name: str = Field(..., alias="firstName", min_length=1)
    last_name: str = Field(..., alias="lastName", min_length=1)


class GuestContact(_RequestModel):
    email: Email
    phone: str = Field(..., min_length=1)


class Guest(_RequestModel):
    name: GuestName
    contact: GuestContact


class Passenger(_RequestModel):
    type: str = "ADULT"
    first_name: str = Field(..., alias="firstName", min_length=1)
    last_name: str = Field(..., alias="lastName", min_length=1)
    date_of_birth: date = Field(..., alias="dateOfBirth")
    email: Email
    phone: str | None = None
    gender: str | None = None
    nationality: str | None = None
    document_type: str | None = Field(default=None, alias="documentType")
    document_number: str | None = Field(default=None, alias="documentNumber")


class CreateHotelBookingRequest(_RequestModel):
    booking_type: Literal["hotel"] = Field(default="hotel", alias="bookingType")
    offer_id: str = Field(..., alias="offerId", min_length=1)
    trip_id: str = Field(..., alias="tripId", min_length=1)
    guests: list[Guest] = Field(..., min_length=1)
    payment_method: str = Field(..., alias="paymentMethod", min_length=1)
    payments: list[dict[str, Any]] | None = None


class FlightOfferRequest(_RequestModel):
    """Body of the pricing and seat map endpoints."""

    flight_offer: dict[str, Any] = Field(..., alias="flightOffer")

    @field_validator("flight_offer")
    @classmethod
    def offer_has_id(cls, value: dict[str, Any]) -> dict[str, Any]:
        if not value.get("id"):
            raise ValueError("flightOffer object is required (from search results)")
        return value


class CreateFlightBookingRequest(FlightOfferRequest):
    booking_type: Literal["flight"] = Field(default="flight", alias="bookingType")
    trip_id: str = Field(..., alias="tripId", min_length=1)
    passengers: list[Passenger] = Field(..., min_length=1)
    selected_seats: list[str] | None = Field(default=None, alias="selectedSeats")
    payment_method: str = Field(..., alias="paymentMethod", min_length=1)


class BookingListQuery(_RequestModel):
    booking_type: BookingType | None = Field(default=None, alias="type")
    trip_id: str | None = Field(default=None, alias="tripId")
    status: BookingStatus | None = None
    start_date: date | None = Field(default=None, alias="startDate")
    end_date: date | None = Field(default=None, alias="endDate")
    min_price: float | None = Field(default=None, alias="minPrice", ge=0)
    max_price: float | None = Field(default=None, alias="maxPrice", ge=0)
    continent: str | None = None
    sort_by: Literal["createdAt", "totalPrice", "price", "travelDate"] = Field(default="createdAt", alias="sortBy")
    sort_order: Literal["asc", "desc"] = Field(default="desc", alias="sortOrder")
    page: int = Field(default=1, ge=1)
    limit: int = Field(default=10, ge=1, le=50)

    @field_validator("status", mode="before")
    @classmethod
    def upper_status(cls, value: Any) -> Any:
        return value.upper() if isinstance(value, str) else value


_COLLECTION_LABELS = {"guests": "Guest", "passengers": "Passenger"}
_REQUIRED_TYPES = ("missing", "string_too_short")


def describe_validation_error(exc: ValidationError) -> str:
    """Human-readable description of the first offending field.

    Errors inside a guest/passenger list are prefixed with the 1-based
    position, e.g. "Passenger 2: email is required".
    """
    error = exc.errors(include_url=False)[0]
    loc = list(error["loc"])
    kind = error["type"]
    message = str(error["msg"]).removeprefix("Value error, ")
    field = str(loc[-1]) if loc else ""

    if loc and loc[0] in _COLLECTION_LABELS:
        label = _COLLECTION_LABELS[str(loc[0])]
        if len(loc) == 1:
            return f"At least one {label.lower()} is required"
        prefix = f"{label} {int(loc[1]) + 1}: " if isinstance(loc[1], int) else ""
        if len(loc) == 2:
            field = "details"
        if kind in _REQUIRED_TYPES:
            return f"{prefix}{field} is required"
        if kind == "value_error":
            return f"{prefix}{message}"
        return f"{prefix}invalid {field} ({message})"

    if kind in _REQUIRED_TYPES:
        return f"{field} is required"
    if kind == "value_error":
        return message
    return f"invalid {'.'.join(str(part) for part in loc)} ({message})"
