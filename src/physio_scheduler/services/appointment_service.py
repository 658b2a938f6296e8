"""
Appointment service for the booking lifecycle.

This module is the public entry point of the scheduling engine. It combines
the booking validator with the repository and owns identifier assignment,
timestamping and the appointment status lifecycle.
"""

import logging
import uuid
from datetime import date as date_type, datetime, time
from typing import Callable, List, Optional, Union

from physio_scheduler.core.config import BOOKING_LOCK_TIMEOUT_SECONDS
from physio_scheduler.core.constants import MAX_BOOKING_ATTEMPTS
from physio_scheduler.core.exceptions import (
    InvalidFormatError, NotFoundError, ProviderConflictError,
    SchedulingError, UniqueConflictError
)
from physio_scheduler.core.sentinels import MISSING, MissingType
from physio_scheduler.models import Appointment, AppointmentStatus
from physio_scheduler.repositories.appointment_repository import AppointmentRepository
from physio_scheduler.services.availability_service import AvailabilityService
from physio_scheduler.services.booking_locks import BookingLocks
from physio_scheduler.services.booking_validator import BookingValidator
from physio_scheduler.shared_types import TimeSlot
from physio_scheduler.utils.datetime_utils import parse_date_string, parse_time_string, utc_now

logger = logging.getLogger(__name__)

NoteValue = Union[Optional[str], MissingType]


def _parse_date(value: Union[str, date_type]) -> date_type:
    if isinstance(value, datetime):
        raise InvalidFormatError(f"Expected a date without time, got {value!r}")
    if isinstance(value, date_type):
        return value
    try:
        return parse_date_string(value)
    except ValueError as e:
        raise InvalidFormatError(str(e), {"date": value}) from e


def _parse_time(value: Union[str, time]) -> time:
    if isinstance(value, time):
        return value.replace(second=0, microsecond=0)
    try:
        return parse_time_string(value)
    except ValueError as e:
        raise InvalidFormatError(str(e), {"start_time": value}) from e


def _parse_status(value: Union[str, AppointmentStatus]) -> AppointmentStatus:
    try:
        return AppointmentStatus.parse(value)
    except ValueError as e:
        raise InvalidFormatError(str(e), {"status": str(value)}) from e


class AppointmentService:
    """
    Service class for appointment operations.

    One instance serves one unit of work against one repository. The
    BookingLocks registry must be shared by every service instance that
    writes to the same store, which SchedulingContext takes care of.
    """

    def __init__(
        self,
        repository: AppointmentRepository,
        locks: Optional[BookingLocks] = None,
        clock: Callable[[], datetime] = utc_now,
        lock_timeout: Optional[float] = BOOKING_LOCK_TIMEOUT_SECONDS,
    ):
        self.repository = repository
        self.locks = locks if locks is not None else BookingLocks()
        self.clock = clock
        self.lock_timeout = lock_timeout

    def create_appointment(
        self,
        patient_id: str,
        provider_id: str,
        date: Union[str, date_type],
        start_time: Union[str, time],
        duration_minutes: int,
        notes: Optional[str] = None,
        timeout: Optional[float] = None,
    ) -> Appointment:
        """
        Book a new appointment.

        Validation and insert run while holding the provider and patient
        locks for the date. If the store's unique index still rejects the row
        (a writer outside this process), validation is re-run against the
        fresh state; after MAX_BOOKING_ATTEMPTS the request fails with
        ProviderConflictError.

        Args:
            patient_id: Patient booking the visit
            provider_id: Provider being booked
            date: Appointment date (YYYY-MM-DD string or date)
            start_time: Start time (HH:MM string or time)
            duration_minutes: 20, 40 or 60
            notes: Optional booking notes
            timeout: Seconds to wait for the booking locks (defaults to lock_timeout).
                Only the lock wait is bounded. Once the locks are held, the
                validation queries and the insert are bounded by the store
                alone (DB_BUSY_TIMEOUT_SECONDS on SQLite, the server's own
                statement timeout elsewhere).

        Returns:
            The persisted Appointment with status scheduled

        Raises:
            InvalidFormatError: If date or start_time cannot be parsed
            InvalidDurationError, ProviderConflictError, QuotaExceededError,
            NonAdjacentSlotError: If a booking rule rejects the request
            BookingTimeoutError: If the locks could not be obtained in time
            PersistenceError: If storage fails
        """
        on_date = _parse_date(date)
        start = _parse_time(start_time)
        wait = self.lock_timeout if timeout is None else timeout

        with self.locks.hold(provider_id, patient_id, on_date, timeout=wait):
            for attempt in range(1, MAX_BOOKING_ATTEMPTS + 1):
                try:
                    end = BookingValidator.validate(
                        self.repository, patient_id, provider_id, on_date, start, duration_minutes
                    )
                except SchedulingError as e:
                    self.repository.rollback()
                    logger.warning(
                        f"Rejected booking for patient {patient_id} with provider {provider_id} "
                        f"on {on_date} at {start}: {e.code}"
                    )
                    raise

                now = self.clock()
                appointment = Appointment(
                    id=str(uuid.uuid4()),
                    patient_id=patient_id,
                    provider_id=provider_id,
                    date=on_date,
                    start_time=start,
                    end_time=end,
                    duration_minutes=duration_minutes,
                    status=AppointmentStatus.SCHEDULED,
                    notes=notes,
                    patient_notes=None,
                    provider_notes=None,
                    created_at=now,
                    updated_at=now,
                )

                try:
                    self.repository.insert(appointment)
                except UniqueConflictError:
                    logger.warning(
                        f"Unique conflict booking provider {provider_id} on {on_date} at {start} "
                        f"(attempt {attempt}/{MAX_BOOKING_ATTEMPTS})"
                    )
                    continue

                logger.info(
                    f"Created appointment {appointment.id} for patient {patient_id} "
                    f"with provider {provider_id} on {on_date} {start}-{end}"
                )
                return appointment

        raise ProviderConflictError(
            "Provider is not available at this time",
            {"provider_id": provider_id, "date": on_date.isoformat()},
        )

    def get_appointment(self, appointment_id: str) -> Appointment:
        """
        Raises:
            NotFoundError: If the appointment does not exist
        """
        appointment = self.repository.find_by_id(appointment_id)
        if appointment is None:
            raise NotFoundError(
                f"Appointment {appointment_id} not found",
                {"appointment_id": appointment_id},
            )
        return appointment

    def update_status(
        self,
        appointment_id: str,
        new_status: Union[str, AppointmentStatus]
    ) -> Appointment:
        """
        Move an appointment to any status.

        No transition table is enforced: every status may follow every other.
        Cancelling frees the appointment's interval for new bookings.

        Raises:
            InvalidFormatError: If new_status is not a known status
            NotFoundError: If the appointment does not exist
            PersistenceError: If storage fails
        """
        return self.update_appointment(appointment_id, status=new_status)

    def update_notes(
        self,
        appointment_id: str,
        notes: NoteValue = MISSING,
        patient_notes: NoteValue = MISSING,
        provider_notes: NoteValue = MISSING,
    ) -> Appointment:
        """
        Partially update appointment notes.

        Omitted fields are left unchanged; None clears a field. updated_at is
        refreshed even when nothing else changes.
        """
        return self.update_appointment(
            appointment_id,
            notes=notes,
            patient_notes=patient_notes,
            provider_notes=provider_notes,
        )

    def update_appointment(
        self,
        appointment_id: str,
        status: Union[str, AppointmentStatus, MissingType] = MISSING,
        notes: NoteValue = MISSING,
        patient_notes: NoteValue = MISSING,
        provider_notes: NoteValue = MISSING,
    ) -> Appointment:
        """
        Apply a status change and note edits in a single write.

        Moving a cancelled appointment back to a live status books its
        interval again, so it takes the booking locks and must pass the
        provider, quota and adjacency rules like a new booking.

        Returns:
            The updated Appointment

        Raises:
            InvalidFormatError: If status is not a known status
            NotFoundError: If the appointment does not exist
            ProviderConflictError, QuotaExceededError,
            NonAdjacentSlotError: If a reactivation breaks a booking rule
            BookingTimeoutError: If a reactivation could not obtain its locks in time
            PersistenceError: If storage fails
        """
        # Parse before touching storage so a bad status never reaches the store
        parsed_status = None if isinstance(status, MissingType) else _parse_status(status)

        appointment = self.get_appointment(appointment_id)
        if (
            parsed_status is None
            or parsed_status == AppointmentStatus.CANCELLED
            or appointment.status != AppointmentStatus.CANCELLED
        ):
            return self._apply_update(appointment, parsed_status, notes, patient_notes, provider_notes)

        with self.locks.hold(
            appointment.provider_id, appointment.patient_id, appointment.date, timeout=self.lock_timeout
        ):
            # Re-read under the locks
            appointment = self.get_appointment(appointment_id)
            if appointment.status == AppointmentStatus.CANCELLED:
                try:
                    BookingValidator.validate_reactivation(self.repository, appointment)
                except SchedulingError as e:
                    self.repository.rollback()
                    logger.warning(
                        f"Rejected reactivation of appointment {appointment_id} "
                        f"as {parsed_status.value}: {e.code}"
                    )
                    raise
            return self._apply_update(appointment, parsed_status, notes, patient_notes, provider_notes)

    def _apply_update(
        self,
        appointment: Appointment,
        parsed_status: Optional[AppointmentStatus],
        notes: NoteValue,
        patient_notes: NoteValue,
        provider_notes: NoteValue,
    ) -> Appointment:
        appointment_id = appointment.id
        previous_status = appointment.status

        if parsed_status is not None:
            appointment.status = parsed_status
        if not isinstance(notes, MissingType):
            appointment.notes = notes
        if not isinstance(patient_notes, MissingType):
            appointment.patient_notes = patient_notes
        if not isinstance(provider_notes, MissingType):
            appointment.provider_notes = provider_notes
        appointment.updated_at = self.clock()

        updated = self.repository.update(appointment)

        if parsed_status is not None and parsed_status != previous_status:
            logger.info(
                f"Appointment {appointment_id} status {previous_status.value} -> {parsed_status.value}"
            )
        return updated

    def get_available_slots(
        self,
        provider_id: str,
        date: Union[str, date_type]
    ) -> List[TimeSlot]:
        """
        Clinic-day slots for a provider with availability marked.

        Raises:
            InvalidFormatError: If date cannot be parsed
            PersistenceError: If the booking query fails
        """
        on_date = _parse_date(date)
        return AvailabilityService.get_available_slots(self.repository, provider_id, on_date)

    def list_by_patient(self, patient_id: str) -> List[Appointment]:
        """All appointments of a patient, newest date first, then by start time."""
        return self.repository.list_by_patient(patient_id)

    def list_by_provider(self, provider_id: str) -> List[Appointment]:
        """All appointments of a provider, newest date first, then by start time."""
        return self.repository.list_by_provider(provider_id)
