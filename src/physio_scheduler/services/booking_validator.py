"""
Booking validator enforcing the cross-cutting booking rules.

Rules are checked in a fixed order and the first failing rule rejects the
request:

1. Duration must be 1, 2 or 3 base slots (20, 40 or 60 minutes).
2. The provider must not have an overlapping non-cancelled appointment.
3. The patient's booked minutes that day must stay within the daily quota.
4. A patient who already holds appointments that day may only extend that
   block: the new interval must touch an existing one at a boundary.

Rules 2 to 4 also apply when a cancelled appointment is reactivated.

Callers are responsible for holding the booking locks for the provider and
patient while validating and inserting (see AppointmentService).
"""

import logging
from datetime import date as date_type, time
from typing import List

from physio_scheduler.core.constants import ALLOWED_DURATIONS, MAX_DAILY_MINUTES_PER_PATIENT
from physio_scheduler.core.exceptions import (
    InvalidDurationError, InvalidFormatError, NonAdjacentSlotError,
    ProviderConflictError, QuotaExceededError
)
from physio_scheduler.models import Appointment
from physio_scheduler.repositories.appointment_repository import AppointmentRepository
from physio_scheduler.services.availability_service import AvailabilityService
from physio_scheduler.shared_types import BookedInterval
from physio_scheduler.utils.datetime_utils import format_time

logger = logging.getLogger(__name__)


class BookingValidator:
    """Decides whether a proposed booking may be committed."""

    @staticmethod
    def validate_duration(duration_minutes: int) -> None:
        """
        Raises:
            InvalidDurationError: If duration is not an allowed slot multiple
        """
        # bool is an int subclass
        if (
            not isinstance(duration_minutes, int)
            or isinstance(duration_minutes, bool)
            or duration_minutes not in ALLOWED_DURATIONS
        ):
            raise InvalidDurationError(
                f"Duration must be one of {', '.join(str(d) for d in ALLOWED_DURATIONS)} minutes",
                {"duration_minutes": duration_minutes},
            )

    @staticmethod
    def check_provider_available(
        provider_bookings: List[BookedInterval],
        start_time: time,
        end_time: time
    ) -> None:
        """
        Raises:
            ProviderConflictError: If the interval overlaps a provider booking
        """
        if AvailabilityService.has_conflict(provider_bookings, start_time, end_time):
            raise ProviderConflictError(
                f"Provider is not available at {format_time(start_time)}-{format_time(end_time)}",
                {"start_time": format_time(start_time), "end_time": format_time(end_time)},
            )

    @staticmethod
    def check_patient_quota(
        patient_bookings: List[BookedInterval],
        duration_minutes: int
    ) -> None:
        """
        Raises:
            QuotaExceededError: If the day's total would pass the quota
        """
        booked_minutes = sum(b.duration_minutes for b in patient_bookings)
        if booked_minutes + duration_minutes > MAX_DAILY_MINUTES_PER_PATIENT:
            raise QuotaExceededError(
                f"Maximum {MAX_DAILY_MINUTES_PER_PATIENT} minutes of appointments allowed per day "
                f"({booked_minutes} already booked)",
                {"booked_minutes": booked_minutes, "requested_minutes": duration_minutes},
            )

    @staticmethod
    def check_patient_adjacency(
        patient_bookings: List[BookedInterval],
        start_time: time,
        end_time: time
    ) -> None:
        """
        Raises:
            NonAdjacentSlotError: If the patient has bookings that day and none touches the interval
        """
        if not patient_bookings:
            return
        for booked in patient_bookings:
            if start_time == booked.end_time or end_time == booked.start_time:
                return
        raise NonAdjacentSlotError(
            "Patient can only book time slots adjacent to their other appointments that day",
            {"start_time": format_time(start_time), "end_time": format_time(end_time)},
        )

    @staticmethod
    def validate(
        repository: AppointmentRepository,
        patient_id: str,
        provider_id: str,
        on_date: date_type,
        start_time: time,
        duration_minutes: int
    ) -> time:
        """
        Run all booking rules against the current state of the store.

        Args:
            repository: Appointment storage
            patient_id: Patient requesting the booking
            provider_id: Provider being booked
            on_date: Appointment date
            start_time: Requested start time
            duration_minutes: Requested length

        Returns:
            The computed end time of the appointment

        Raises:
            InvalidDurationError, InvalidFormatError, ProviderConflictError,
            QuotaExceededError, NonAdjacentSlotError: On rule violation
            PersistenceError: If a booking query fails
        """
        BookingValidator.validate_duration(duration_minutes)

        try:
            end_time = AvailabilityService.end_time_for(start_time, duration_minutes)
        except ValueError as e:
            raise InvalidFormatError(str(e), {"start_time": format_time(start_time)}) from e

        provider_bookings = repository.find_provider_bookings(provider_id, on_date, for_update=True)
        BookingValidator.check_provider_available(provider_bookings, start_time, end_time)

        patient_bookings = repository.find_patient_bookings(patient_id, on_date, for_update=True)
        BookingValidator.check_patient_quota(patient_bookings, duration_minutes)
        BookingValidator.check_patient_adjacency(patient_bookings, start_time, end_time)

        return end_time

    @staticmethod
    def validate_reactivation(
        repository: AppointmentRepository,
        appointment: Appointment
    ) -> None:
        """
        Run the provider, quota and adjacency rules for a cancelled appointment
        that is being moved back to a live status.

        The appointment's own row is still cancelled in the store, so the
        booking queries leave it out.

        Raises:
            ProviderConflictError, QuotaExceededError, NonAdjacentSlotError: On rule violation
            PersistenceError: If a booking query fails
        """
        provider_bookings = repository.find_provider_bookings(
            appointment.provider_id, appointment.date, for_update=True
        )
        BookingValidator.check_provider_available(
            provider_bookings, appointment.start_time, appointment.end_time
        )

        patient_bookings = repository.find_patient_bookings(
            appointment.patient_id, appointment.date, for_update=True
        )
        BookingValidator.check_patient_quota(patient_bookings, appointment.duration_minutes)
        BookingValidator.check_patient_adjacency(
            patient_bookings, appointment.start_time, appointment.end_time
        )
