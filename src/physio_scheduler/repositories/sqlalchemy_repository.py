"""
SQLAlchemy implementation of the appointment repository.

One instance wraps one Session and must not be shared between threads;
create one per request (see SchedulingContext.appointment_service).
"""

import logging
from datetime import date
from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from physio_scheduler.core.exceptions import NotFoundError, PersistenceError, UniqueConflictError
from physio_scheduler.models import Appointment, AppointmentStatus
from physio_scheduler.repositories.appointment_repository import MUTABLE_FIELDS, AppointmentRepository
from physio_scheduler.shared_types import BookedInterval

logger = logging.getLogger(__name__)


class SqlAlchemyAppointmentRepository(AppointmentRepository):
    """Appointment repository backed by a SQLAlchemy session."""

    def __init__(self, db: Session):
        self.db = db

    def find_provider_bookings(
        self, provider_id: str, on_date: date, for_update: bool = False
    ) -> List[BookedInterval]:
        return self._find_bookings(Appointment.provider_id == provider_id, on_date, for_update)

    def find_patient_bookings(
        self, patient_id: str, on_date: date, for_update: bool = False
    ) -> List[BookedInterval]:
        return self._find_bookings(Appointment.patient_id == patient_id, on_date, for_update)

    def _find_bookings(self, party_filter, on_date: date, for_update: bool) -> List[BookedInterval]:
        stmt = select(
            Appointment.start_time,
            Appointment.end_time,
            Appointment.duration_minutes,
        ).where(
            party_filter,
            Appointment.date == on_date,
            Appointment.status != AppointmentStatus.CANCELLED,
        ).order_by(Appointment.start_time)

        if for_update:
            # Ignored by SQLite; row locks on PostgreSQL
            stmt = stmt.with_for_update()

        try:
            rows = self.db.execute(stmt).all()
        except SQLAlchemyError as e:
            logger.exception(f"Failed to query bookings for {on_date}: {e}")
            self.db.rollback()
            raise PersistenceError("Failed to query bookings") from e

        return [
            BookedInterval(
                start_time=row.start_time,
                end_time=row.end_time,
                duration_minutes=row.duration_minutes,
            )
            for row in rows
        ]

    def insert(self, appointment: Appointment) -> Appointment:
        try:
            self.db.add(appointment)
            self.db.commit()
        except IntegrityError as e:
            logger.warning(f"Appointment insert conflict for {appointment.id}: {e}")
            self.db.rollback()
            raise UniqueConflictError("Slot already taken") from e
        except SQLAlchemyError as e:
            logger.exception(f"Failed to insert appointment {appointment.id}: {e}")
            self.db.rollback()
            raise PersistenceError("Failed to create appointment") from e
        return appointment

    def find_by_id(self, appointment_id: str) -> Optional[Appointment]:
        try:
            return self.db.get(Appointment, appointment_id)
        except SQLAlchemyError as e:
            logger.exception(f"Failed to load appointment {appointment_id}: {e}")
            self.db.rollback()
            raise PersistenceError("Failed to load appointment") from e

    def update(self, appointment: Appointment) -> Appointment:
        try:
            existing = self.db.get(Appointment, appointment.id)
            if existing is None:
                raise NotFoundError(
                    f"Appointment {appointment.id} not found",
                    {"appointment_id": appointment.id},
                )
            if existing is not appointment:
                # Detached copy from another session: apply its mutable fields
                for field in MUTABLE_FIELDS:
                    setattr(existing, field, getattr(appointment, field))
            self.db.commit()
        except IntegrityError as e:
            # Reactivating a cancelled appointment whose slot was rebooked
            logger.warning(f"Appointment update conflict for {appointment.id}: {e}")
            self.db.rollback()
            raise UniqueConflictError("Slot already taken") from e
        except SQLAlchemyError as e:
            logger.exception(f"Failed to update appointment {appointment.id}: {e}")
            self.db.rollback()
            raise PersistenceError("Failed to update appointment") from e
        return existing

    def list_by_patient(self, patient_id: str) -> List[Appointment]:
        return self._list(select(Appointment).where(Appointment.patient_id == patient_id))

    def list_by_provider(self, provider_id: str) -> List[Appointment]:
        return self._list(select(Appointment).where(Appointment.provider_id == provider_id))

    def _list(self, stmt) -> List[Appointment]:
        stmt = stmt.order_by(Appointment.date.desc(), Appointment.start_time.asc())
        try:
            return list(self.db.scalars(stmt).all())
        except SQLAlchemyError as e:
            logger.exception(f"Failed to list appointments: {e}")
            self.db.rollback()
            raise PersistenceError("Failed to list appointments") from e

    def rollback(self) -> None:
        self.db.rollback()
