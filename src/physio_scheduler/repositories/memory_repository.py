"""
In-memory appointment repository.

Used for tests and for embedding the engine without a database. It enforces
the same live-slot uniqueness rule as the SQL table's partial unique index.
"""

import threading
from datetime import date
from typing import Dict, List, Optional

from physio_scheduler.core.exceptions import NotFoundError, UniqueConflictError
from physio_scheduler.models import Appointment, AppointmentStatus
from physio_scheduler.repositories.appointment_repository import MUTABLE_FIELDS, AppointmentRepository
from physio_scheduler.shared_types import BookedInterval


def _clone(appointment: Appointment) -> Appointment:
    """Detached copy holding the same column values."""
    return Appointment(**{
        column.key: getattr(appointment, column.key)
        for column in Appointment.__table__.columns
    })


class InMemoryAppointmentRepository(AppointmentRepository):
    """Thread-safe dictionary-backed repository."""

    def __init__(self):
        self._appointments: Dict[str, Appointment] = {}
        self._guard = threading.Lock()

    def find_provider_bookings(
        self, provider_id: str, on_date: date, for_update: bool = False
    ) -> List[BookedInterval]:
        with self._guard:
            return self._intervals(
                a for a in self._appointments.values()
                if a.provider_id == provider_id and a.date == on_date
            )

    def find_patient_bookings(
        self, patient_id: str, on_date: date, for_update: bool = False
    ) -> List[BookedInterval]:
        with self._guard:
            return self._intervals(
                a for a in self._appointments.values()
                if a.patient_id == patient_id and a.date == on_date
            )

    @staticmethod
    def _intervals(appointments) -> List[BookedInterval]:
        live = [a for a in appointments if a.status != AppointmentStatus.CANCELLED]
        live.sort(key=lambda a: a.start_time)
        return [
            BookedInterval(a.start_time, a.end_time, a.duration_minutes)
            for a in live
        ]

    def insert(self, appointment: Appointment) -> Appointment:
        with self._guard:
            if appointment.id in self._appointments:
                raise UniqueConflictError(f"Appointment {appointment.id} already exists")
            self._check_live_slot(appointment)
            self._appointments[appointment.id] = _clone(appointment)
        return appointment

    def _check_live_slot(self, appointment: Appointment) -> None:
        if appointment.status == AppointmentStatus.CANCELLED:
            return
        for existing in self._appointments.values():
            if (
                existing.id != appointment.id
                and existing.status != AppointmentStatus.CANCELLED
                and existing.provider_id == appointment.provider_id
                and existing.date == appointment.date
                and existing.start_time == appointment.start_time
            ):
                raise UniqueConflictError("Slot already taken")

    def find_by_id(self, appointment_id: str) -> Optional[Appointment]:
        with self._guard:
            stored = self._appointments.get(appointment_id)
            return _clone(stored) if stored is not None else None

    def update(self, appointment: Appointment) -> Appointment:
        with self._guard:
            stored = self._appointments.get(appointment.id)
            if stored is None:
                raise NotFoundError(
                    f"Appointment {appointment.id} not found",
                    {"appointment_id": appointment.id},
                )
            if stored.status == AppointmentStatus.CANCELLED:
                self._check_live_slot(appointment)
            for field in MUTABLE_FIELDS:
                setattr(stored, field, getattr(appointment, field))
        return appointment

    def list_by_patient(self, patient_id: str) -> List[Appointment]:
        with self._guard:
            return self._ordered(a for a in self._appointments.values() if a.patient_id == patient_id)

    def list_by_provider(self, provider_id: str) -> List[Appointment]:
        with self._guard:
            return self._ordered(a for a in self._appointments.values() if a.provider_id == provider_id)

    @staticmethod
    def _ordered(appointments) -> List[Appointment]:
        # Date descending, then start time ascending
        result = sorted(appointments, key=lambda a: a.start_time)
        result.sort(key=lambda a: a.date, reverse=True)
        return [_clone(a) for a in result]
