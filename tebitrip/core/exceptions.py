"""
Custom exceptions for the trip planning core.

Every failure is scoped to the operation that raised it; nothing here is
fatal to the process.
"""

from datetime import date
from typing import Optional, Dict, Any, List
from enum import Enum


class ErrorCode(str, Enum):
    """Standardized error codes for the application."""

    # Trip request validation errors
    DATE_TOO_EARLY = "DATE_TOO_EARLY"
    DATE_TOO_FAR = "DATE_TOO_FAR"
    END_BEFORE_START = "END_BEFORE_START"
    TRIP_TOO_LONG = "TRIP_TOO_LONG"
    INVALID_TRIP_REQUEST = "INVALID_TRIP_REQUEST"

    # Generation errors
    GENERATION_TRANSPORT_FAILED = "GENERATION_TRANSPORT_FAILED"
    GENERATION_PARSE_FAILED = "GENERATION_PARSE_FAILED"

    # Photo lookup (never surfaced to callers)
    PHOTO_RESOLUTION_FAILED = "PHOTO_RESOLUTION_FAILED"

    # Persistence errors
    STORAGE_UNAVAILABLE = "STORAGE_UNAVAILABLE"
    PERSISTENCE_FAILED = "PERSISTENCE_FAILED"


class TebiTripException(Exception):
    """Base exception for the trip planning core."""

    def __init__(
        self,
        message: str,
        error_code: ErrorCode,
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message)
        self.message = message
        self.error_code = error_code
        self.details = details or {}

    def to_dict(self) -> Dict[str, Any]:
        return {
            "error_code": self.error_code.value,
            "message": self.message,
            "details": self.details,
        }


class TripValidationError(TebiTripException):
    """Raised when a trip request violates a date, budget or style constraint."""

    def __init__(
        self,
        message: str,
        error_code: ErrorCode = ErrorCode.INVALID_TRIP_REQUEST,
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, error_code=error_code, details=details)


class DateTooEarlyError(TripValidationError):
    """Raised when the trip starts before today."""

    def __init__(self, start_date: date, today: date):
        super().__init__(
            message="Please select a date from today onwards.",
            error_code=ErrorCode.DATE_TOO_EARLY,
            details={"start_date": start_date.isoformat(), "today": today.isoformat()},
        )


class DateTooFarError(TripValidationError):
    """Raised when the trip starts beyond the planning horizon."""

    def __init__(self, start_date: date, latest_start: date):
        super().__init__(
            message="Trips can be planned up to 2 years from today. Please choose a closer date.",
            error_code=ErrorCode.DATE_TOO_FAR,
            details={"start_date": start_date.isoformat(), "latest_start": latest_start.isoformat()},
        )


class EndBeforeStartError(TripValidationError):
    """Raised when the end date precedes the start date."""

    def __init__(self, start_date: date, end_date: date):
        super().__init__(
            message="End date cannot be before start date.",
            error_code=ErrorCode.END_BEFORE_START,
            details={"start_date": start_date.isoformat(), "end_date": end_date.isoformat()},
        )


class TripTooLongError(TripValidationError):
    """Raised when the trip spans more calendar days than allowed."""

    def __init__(self, span_days: int, max_days: int):
        super().__init__(
            message=f"Maximum trip duration is {max_days} days.",
            error_code=ErrorCode.TRIP_TOO_LONG,
            details={"span_days": span_days, "max_days": max_days},
        )


class InvalidTripRequestError(TripValidationError):
    """Raised when destination, budget or travel styles are malformed."""

    def __init__(self, message: str, errors: Optional[List[Dict[str, Any]]] = None):
        super().__init__(
            message=message,
            error_code=ErrorCode.INVALID_TRIP_REQUEST,
            details={"errors": errors or []},
        )


class GenerationError(TebiTripException):
    """Base class for trip generation failures."""
    pass


class GenerationTransportError(GenerationError):
    """Raised when the generation endpoint is unreachable or answers non-2xx."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(
            message=message,
            error_code=ErrorCode.GENERATION_TRANSPORT_FAILED,
            details={"status_code": status_code} if status_code is not None else {},
        )
        self.status_code = status_code


class GenerationParseError(GenerationError):
    """
    Raised when the generated text does not contain a usable trip.

    The raw text is kept for diagnostics only; it is never handed back as data.
    """

    def __init__(self, message: str, raw_text: str = "", details: Optional[Dict[str, Any]] = None):
        super().__init__(
            message=message,
            error_code=ErrorCode.GENERATION_PARSE_FAILED,
            details=details,
        )
        self.raw_text = raw_text


class PhotoResolutionFailure(TebiTripException):
    """Raised inside the photo resolver for a failed attempt; never escapes it."""

    def __init__(self, message: str, retryable: bool = True):
        super().__init__(
            message=message,
            error_code=ErrorCode.PHOTO_RESOLUTION_FAILED,
        )
        self.retryable = retryable


class StorageError(TebiTripException):
    """Raised by key/value adapters when the backing store fails."""

    def __init__(self, message: str, key: Optional[str] = None):
        super().__init__(
            message=message,
            error_code=ErrorCode.STORAGE_UNAVAILABLE,
            details={"key": key} if key else {},
        )


class PersistenceError(TebiTripException):
    """Raised when a saved-trip mutation could not be made durable."""

    def __init__(self, operation: str, reason: str):
        super().__init__(
            message=f"Failed to {operation} trip: {reason}",
            error_code=ErrorCode.PERSISTENCE_FAILED,
            details={"operation": operation, "reason": reason},
        )
        self.operation = operation
