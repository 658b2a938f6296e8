"""
Error taxonomy for the scheduling engine.

Every error raised by the engine derives from SchedulingError and carries a
stable ``code`` so a transport layer can map it to its own status codes
without matching on message text.
"""

from typing import Optional


class SchedulingError(Exception):
    """Base class for all scheduling engine errors."""

    code = "scheduling_error"

    def __init__(self, message: str, detail: Optional[dict] = None):
        super().__init__(message)
        self.message = message
        self.detail = detail or {}

    def to_dict(self) -> dict:
        """Convert to dictionary format."""
        return {"error": self.code, "message": self.message, **self.detail}


class InvalidFormatError(SchedulingError):
    """A date, time or status value could not be parsed."""

    code = "invalid_format"


class InvalidDurationError(SchedulingError):
    """Requested duration is not one of the allowed slot multiples."""

    code = "invalid_duration"


class BookingRejectedError(SchedulingError):
    """A well-formed booking request violates a booking rule."""

    code = "booking_rejected"


class ProviderConflictError(BookingRejectedError):
    """The provider already has an overlapping appointment."""

    code = "provider_conflict"


class QuotaExceededError(BookingRejectedError):
    """The patient would exceed the daily booked-minutes quota."""

    code = "quota_exceeded"


class NonAdjacentSlotError(BookingRejectedError):
    """The patient's new appointment does not touch their existing ones that day."""

    code = "non_adjacent_slot"


class NotFoundError(SchedulingError):
    """The requested appointment does not exist."""

    code = "not_found"


class PersistenceError(SchedulingError):
    """Underlying storage failed. The original exception is chained as __cause__."""

    code = "persistence_error"


class UniqueConflictError(PersistenceError):
    """Insert rejected by a storage-level uniqueness constraint."""

    code = "unique_conflict"


class BookingTimeoutError(PersistenceError):
    """The booking could not obtain its locks before the deadline. Nothing was written."""

    code = "booking_timeout"
