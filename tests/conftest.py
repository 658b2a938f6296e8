"""
Test configuration and shared fixtures for the scheduling engine test suite.

Unit tests run against the in-memory repository. Integration tests use
SQLite: an in-memory database for single-threaded tests and a file database
in a temporary directory for multi-threaded tests.
"""

from datetime import date, datetime, timedelta, timezone
from typing import Generator

import pytest
from sqlalchemy.orm import Session

from physio_scheduler.core.context import SchedulingContext
from physio_scheduler.core.database import (
    create_db_engine, create_session_factory, create_tables, drop_tables
)
from physio_scheduler.repositories import (
    InMemoryAppointmentRepository, SqlAlchemyAppointmentRepository
)
from physio_scheduler.services import AppointmentService, BookingLocks


class FakeClock:
    """Deterministic clock advancing one second per call."""

    def __init__(self, start: datetime):
        self.current = start

    def __call__(self) -> datetime:
        now = self.current
        self.current = self.current + timedelta(seconds=1)
        return now


@pytest.fixture
def booking_date() -> date:
    """A fixed weekday used across scenarios."""
    return date(2025, 3, 10)


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock(datetime(2025, 3, 1, 9, 0, tzinfo=timezone.utc))


@pytest.fixture
def memory_repository() -> InMemoryAppointmentRepository:
    return InMemoryAppointmentRepository()


@pytest.fixture
def service(memory_repository, clock) -> AppointmentService:
    """AppointmentService over the in-memory repository."""
    return AppointmentService(memory_repository, locks=BookingLocks(), clock=clock)


@pytest.fixture
def db_engine():
    """
    In-memory SQLite engine with the schema created.

    A fresh database per test keeps tests isolated without transaction tricks.
    """
    engine = create_db_engine("sqlite://")
    create_tables(engine)

    yield engine

    drop_tables(engine)
    engine.dispose()


@pytest.fixture
def db_session(db_engine) -> Generator[Session, None, None]:
    session = create_session_factory(db_engine)()
    yield session
    session.close()


@pytest.fixture
def sql_repository(db_session) -> SqlAlchemyAppointmentRepository:
    return SqlAlchemyAppointmentRepository(db_session)


@pytest.fixture
def sql_service(sql_repository, clock) -> AppointmentService:
    """AppointmentService over the SQLAlchemy repository."""
    return AppointmentService(sql_repository, locks=BookingLocks(), clock=clock)


@pytest.fixture
def file_context(tmp_path) -> Generator[SchedulingContext, None, None]:
    """
    SchedulingContext backed by a SQLite file, safe to use from many threads.
    """
    context = SchedulingContext.from_config(f"sqlite:///{tmp_path / 'appointments.db'}")

    yield context

    context.dispose()
