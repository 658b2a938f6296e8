"""
Composition root for the scheduling engine.

SchedulingContext bundles everything that must be shared between concurrent
requests: the session factory for the appointment store and the booking lock
registry. Request handlers get a fresh AppointmentService per unit of work.
"""

import logging
from contextlib import contextmanager
from typing import Generator, Optional

from sqlalchemy import Engine
from sqlalchemy.orm import Session, sessionmaker

from physio_scheduler.core.database import (
    create_db_engine, create_session_factory, create_tables, get_db_context
)
from physio_scheduler.repositories.sqlalchemy_repository import SqlAlchemyAppointmentRepository
from physio_scheduler.services.appointment_service import AppointmentService
from physio_scheduler.services.booking_locks import BookingLocks

logger = logging.getLogger(__name__)


class SchedulingContext:
    """Shared state of one scheduling engine instance."""

    def __init__(
        self,
        session_factory: sessionmaker[Session],
        locks: Optional[BookingLocks] = None,
        engine: Optional[Engine] = None,
    ):
        self.session_factory = session_factory
        self.locks = locks if locks is not None else BookingLocks()
        self.engine = engine

    @classmethod
    def from_config(cls, database_url: Optional[str] = None, create_schema: bool = True) -> "SchedulingContext":
        """
        Build a context from configuration.

        Args:
            database_url: Overrides DATABASE_URL
            create_schema: Create missing tables on startup

        Returns:
            SchedulingContext
        """
        engine = create_db_engine(database_url)
        if create_schema:
            create_tables(engine)
        logger.info(f"Scheduling engine connected to {engine.url.render_as_string(hide_password=True)}")
        return cls(create_session_factory(engine), engine=engine)

    @contextmanager
    def appointment_service(self) -> Generator[AppointmentService, None, None]:
        """
        AppointmentService bound to a fresh session and the shared locks.

        Example:
            ```python
            with context.appointment_service() as service:
                service.create_appointment("p-1", "dr-1", "2025-03-10", "09:00", 20)
            ```
        """
        with get_db_context(self.session_factory) as db:
            yield AppointmentService(SqlAlchemyAppointmentRepository(db), locks=self.locks)

    def dispose(self) -> None:
        """Release pooled database connections."""
        if self.engine is not None:
            self.engine.dispose()
