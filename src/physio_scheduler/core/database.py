# pyright: reportMissingTypeStubs=false
"""
Database configuration and session management.

This module sets up the SQLAlchemy engine and session factory and provides
a context manager for sessions used outside of any request framework.
"""

import logging
from contextlib import contextmanager
from typing import Generator, Optional

from sqlalchemy import Engine, create_engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import DeclarativeBase, Session, sessionmaker
from sqlalchemy.pool import StaticPool

from physio_scheduler.core.config import DATABASE_URL, DB_BUSY_TIMEOUT_SECONDS
from physio_scheduler.core.constants import DB_POOL_RECYCLE_SECONDS

logger = logging.getLogger(__name__)


# Create Base class for declarative models
class Base(DeclarativeBase):
    """Base class for all database models."""
    pass


def create_db_engine(database_url: Optional[str] = None, echo: bool = False) -> Engine:
    """
    Create a SQLAlchemy engine for the appointment store.

    SQLite connections are shared across request threads, so they are opened
    with check_same_thread disabled and a busy timeout. In-memory SQLite uses
    a single static connection so every session sees the same database.

    Args:
        database_url: Database URL (defaults to DATABASE_URL from config)
        echo: Enable SQL logging

    Returns:
        Engine: SQLAlchemy engine
    """
    url = database_url or DATABASE_URL

    if url.startswith("sqlite"):
        connect_args = {
            "check_same_thread": False,
            "timeout": DB_BUSY_TIMEOUT_SECONDS,
        }
        if ":memory:" in url or url in ("sqlite://", "sqlite+pysqlite://"):
            return create_engine(
                url,
                connect_args=connect_args,
                poolclass=StaticPool,
                echo=echo,
            )
        return create_engine(url, connect_args=connect_args, echo=echo)

    return create_engine(
        url,
        pool_pre_ping=True,  # Verify connections before use
        pool_recycle=DB_POOL_RECYCLE_SECONDS,
        echo=echo,
    )


def create_session_factory(engine: Engine) -> sessionmaker[Session]:
    """Create a configured Session class bound to the engine."""
    return sessionmaker(
        autocommit=False,
        autoflush=False,
        bind=engine,
        expire_on_commit=False,  # Don't expire objects after commit
    )


@contextmanager
def get_db_context(session_factory: sessionmaker[Session]) -> Generator[Session, None, None]:
    """
    Context manager for database sessions.

    Commits on clean exit, rolls back on any exception and always closes
    the session.

    Yields:
        Session: SQLAlchemy database session

    Example:
        ```python
        with get_db_context(SessionLocal) as db:
            appointment = db.get(Appointment, appointment_id)
        ```
    """
    db = session_factory()
    try:
        yield db
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        logger.exception(f"Database transaction failed: {e}")
        raise
    except Exception:
        # Scheduling errors are expected business outcomes, not failures
        db.rollback()
        raise
    finally:
        db.close()


def create_tables(engine: Engine) -> None:
    """
    Create all database tables defined in SQLAlchemy models.

    Safe to call multiple times - will not recreate existing tables.
    """
    # Import here so the models are registered on Base.metadata
    import physio_scheduler.models  # noqa: F401

    try:
        Base.metadata.create_all(bind=engine)
        logger.info("Database tables created successfully")
    except SQLAlchemyError as e:
        logger.exception(f"Failed to create database tables: {e}")
        raise


def drop_tables(engine: Engine) -> None:
    """
    Drop all database tables defined in SQLAlchemy models.

    WARNING: This will permanently delete all data in the tables!
    """
    try:
        Base.metadata.drop_all(bind=engine)
        logger.info("Database tables dropped successfully")
    except SQLAlchemyError as e:
        logger.exception(f"Failed to drop database tables: {e}")
        raise
