"""
Custom exceptions and error handling for Travexe.

Defines application-specific exceptions with error codes for consistent
error handling across Lambda functions and client communication. Each code
maps to an HTTP status and a generic user-facing message.

Usage:
    from core.errors import ConflictError, ErrorCode

    raise ConflictError("Booking is already cancelled", code=ErrorCode.ALREADY_CANCELLED)
"""

from enum import Enum
from typing import Any


class ErrorCode(str, Enum):
    """Error codes for client-facing error messages."""

    # Authentication errors
    AUTH_FAILED = "AUTH_FAILED"
    INVALID_TOKEN = "INVALID_TOKEN"

    # Validation errors
    VALIDATION_ERROR = "VALIDATION_ERROR"
    INVALID_REQUEST = "INVALID_REQUEST"

    # Lookup and ownership errors
    TRIP_NOT_FOUND = "TRIP_NOT_FOUND"
    BOOKING_NOT_FOUND = "BOOKING_NOT_FOUND"
    FORBIDDEN = "FORBIDDEN"

    # Booking state errors
    ALREADY_CANCELLED = "ALREADY_CANCELLED"
    ALREADY_COMPLETED = "ALREADY_COMPLETED"
    DEADLINE_PASSED = "DEADLINE_PASSED"
    DEPARTURE_PASSED = "DEPARTURE_PASSED"
    BOOKING_REJECTED = "BOOKING_REJECTED"

    # Supplier errors
    OFFER_NOT_FOUND = "OFFER_NOT_FOUND"
    OFFER_UNAVAILABLE = "OFFER_UNAVAILABLE"
    SUPPLIER_FAILED = "SUPPLIER_FAILED"
    TIMEOUT = "TIMEOUT"

    # System errors
    INTERNAL_ERROR = "INTERNAL_ERROR"


USER_MESSAGES: dict[ErrorCode, str] = {
    ErrorCode.AUTH_FAILED: "Authentication failed. Please sign in again.",
    ErrorCode.INVALID_TOKEN: "Your session has expired. Please sign in again.",
    ErrorCode.VALIDATION_ERROR: "Your request contains invalid information. Please check and try again.",
    ErrorCode.INVALID_REQUEST: "Invalid request format. Please try again.",
    ErrorCode.TRIP_NOT_FOUND: "Trip not found.",
    ErrorCode.BOOKING_NOT_FOUND: "Booking not found.",
    ErrorCode.FORBIDDEN: "You don't have permission to access this resource.",
    ErrorCode.ALREADY_CANCELLED: "This booking has already been cancelled.",
    ErrorCode.ALREADY_COMPLETED: "This booking has already been completed.",
    ErrorCode.DEADLINE_PASSED: "The cancellation deadline for this booking has passed.",
    ErrorCode.DEPARTURE_PASSED: "This booking can no longer be cancelled because departure has passed.",
    ErrorCode.BOOKING_REJECTED: "Booking failed. Please try again or contact support.",
    ErrorCode.OFFER_NOT_FOUND: "Offer not found or has expired. Please search for offers again.",
    ErrorCode.OFFER_UNAVAILABLE: "This offer is no longer available. Please select another offer.",
    ErrorCode.SUPPLIER_FAILED: "The travel supplier is temporarily unavailable. Please try again later.",
    ErrorCode.TIMEOUT: "The request timed out. Please try again.",
    ErrorCode.INTERNAL_ERROR: "An unexpected error occurred. Please try again.",
}

HTTP_STATUS: dict[ErrorCode, int] = {
    ErrorCode.AUTH_FAILED: 401,
    ErrorCode.INVALID_TOKEN: 401,
    ErrorCode.VALIDATION_ERROR: 400,
    ErrorCode.INVALID_REQUEST: 400,
    ErrorCode.TRIP_NOT_FOUND: 404,
    ErrorCode.BOOKING_NOT_FOUND: 404,
    ErrorCode.FORBIDDEN: 403,
    ErrorCode.ALREADY_CANCELLED: 400,
    ErrorCode.ALREADY_COMPLETED: 400,
    ErrorCode.DEADLINE_PASSED: 400,
    ErrorCode.DEPARTURE_PASSED: 400,
    ErrorCode.BOOKING_REJECTED: 400,
    ErrorCode.OFFER_NOT_FOUND: 404,
    ErrorCode.OFFER_UNAVAILABLE: 409,
    ErrorCode.SUPPLIER_FAILED: 502,
    ErrorCode.TIMEOUT: 504,
    ErrorCode.INTERNAL_ERROR: 500,
}


class TravexeError(Exception):
    """Base exception for all Travexe errors."""

    def __init__(
        self,
        message: str,
        code: ErrorCode = ErrorCode.INTERNAL_ERROR,
        details: dict[str, Any] | None = None,
    ):
        self.message = message
        self.code = code
        self.details = details or {}
        super().__init__(message)

    @property
    def user_message(self) -> str:
        return USER_MESSAGES.get(self.code, USER_MESSAGES[ErrorCode.INTERNAL_ERROR])

    @property
    def status_code(self) -> int:
        return HTTP_STATUS.get(self.code, 500)


class AuthenticationError(TravexeError):
    """Authentication or authorization failed."""

    def __init__(self, message: str, code: ErrorCode = ErrorCode.AUTH_FAILED, details: dict[str, Any] | None = None):
        super().__init__(message, code, details)


class ValidationError(TravexeError):
    """Input validation or schema validation failed."""

    def __init__(
        self, message: str, code: ErrorCode = ErrorCode.VALIDATION_ERROR, details: dict[str, Any] | None = None
    ):
        super().__init__(message, code, details)


class NotFoundError(TravexeError):
    """A referenced trip or booking does not exist."""

    pass


class ForbiddenError(TravexeError):
    """The caller does not own the referenced resource."""

    def __init__(self, message: str, code: ErrorCode = ErrorCode.FORBIDDEN, details: dict[str, Any] | None = None):
        super().__init__(message, code, details)


class ConflictError(TravexeError):
    """The booking is in a state that does not allow the operation."""

    pass


class UpstreamError(TravexeError):
    """The travel supplier call failed."""

    def __init__(
        self, message: str, code: ErrorCode = ErrorCode.SUPPLIER_FAILED, details: dict[str, Any] | None = None
    ):
        super().__init__(message, code, details)


class InternalError(TravexeError):
    """Document store or other internal failure."""

    pass
