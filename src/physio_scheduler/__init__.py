"""
Physio Scheduler

Appointment scheduling and availability engine for a physiotherapy clinic:
20-minute slot grid, provider availability, booking rules (no double booking,
daily patient quota, contiguous patient bookings) and the appointment
status lifecycle.
"""

from physio_scheduler.core.context import SchedulingContext
from physio_scheduler.core.exceptions import (
    BookingRejectedError, BookingTimeoutError, InvalidDurationError, InvalidFormatError,
    NonAdjacentSlotError, NotFoundError, PersistenceError, ProviderConflictError,
    QuotaExceededError, SchedulingError, UniqueConflictError
)
from physio_scheduler.models import Appointment, AppointmentStatus
from physio_scheduler.services import AppointmentService, AvailabilityService, BookingLocks, BookingValidator
from physio_scheduler.shared_types import BookedInterval, TimeSlot

__version__ = "1.0.0"

__all__ = [
    "Appointment",
    "AppointmentService",
    "AppointmentStatus",
    "AvailabilityService",
    "BookedInterval",
    "BookingLocks",
    "BookingRejectedError",
    "BookingTimeoutError",
    "BookingValidator",
    "InvalidDurationError",
    "InvalidFormatError",
    "NonAdjacentSlotError",
    "NotFoundError",
    "PersistenceError",
    "ProviderConflictError",
    "QuotaExceededError",
    "SchedulingContext",
    "SchedulingError",
    "TimeSlot",
    "UniqueConflictError",
]
