"""
Interface for the Appointment Repository.

The scheduling engine never talks to a database directly; everything it needs
from storage goes through this interface.
"""

from abc import ABC, abstractmethod
from datetime import date
from typing import List, Optional

from physio_scheduler.models import Appointment
from physio_scheduler.shared_types import BookedInterval

# Fields an update may change. Identity, parties and timing are immutable.
MUTABLE_FIELDS = ("status", "notes", "patient_notes", "provider_notes", "updated_at")


class AppointmentRepository(ABC):
    """Abstract base class defining the appointment repository interface."""

    @abstractmethod
    def find_provider_bookings(
        self, provider_id: str, on_date: date, for_update: bool = False
    ) -> List[BookedInterval]:
        """
        Intervals of the provider's non-cancelled appointments on a date.

        ``for_update`` asks the store to lock the matching rows until the
        current transaction ends, where the store supports it.
        """

    @abstractmethod
    def find_patient_bookings(
        self, patient_id: str, on_date: date, for_update: bool = False
    ) -> List[BookedInterval]:
        """Intervals of the patient's non-cancelled appointments on a date."""

    @abstractmethod
    def insert(self, appointment: Appointment) -> Appointment:
        """
        Persist a new appointment.

        Raises:
            UniqueConflictError: If a uniqueness constraint rejects the row
            PersistenceError: On any other storage failure
        """

    @abstractmethod
    def find_by_id(self, appointment_id: str) -> Optional[Appointment]:
        """Retrieve an appointment by its ID, or None."""

    @abstractmethod
    def update(self, appointment: Appointment) -> Appointment:
        """
        Persist the mutable fields of an existing appointment.

        Raises:
            NotFoundError: If no appointment has this ID
            UniqueConflictError: If reactivating a cancelled appointment whose slot is taken
            PersistenceError: On storage failure
        """

    @abstractmethod
    def list_by_patient(self, patient_id: str) -> List[Appointment]:
        """All appointments of a patient, date descending then start time ascending."""

    @abstractmethod
    def list_by_provider(self, provider_id: str) -> List[Appointment]:
        """All appointments of a provider, date descending then start time ascending."""

    def rollback(self) -> None:
        """End the current unit of work without writing. No-op for stores without transactions."""
        return None
