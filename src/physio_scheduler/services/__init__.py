"""
Services package for the scheduling engine.

This package contains the business logic of the engine: slot generation,
availability, booking validation and the appointment lifecycle.
"""

from physio_scheduler.services.appointment_service import AppointmentService
from physio_scheduler.services.availability_service import AvailabilityService
from physio_scheduler.services.booking_locks import BookingLocks
from physio_scheduler.services.booking_validator import BookingValidator

__all__ = [
    "AppointmentService",
    "AvailabilityService",
    "BookingLocks",
    "BookingValidator",
]
