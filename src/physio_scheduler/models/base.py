"""
Database base models and utilities.

This module provides the base SQLAlchemy model class and column types shared
by the engine's models.
"""

from datetime import datetime, timezone
from typing import Any, Optional

from sqlalchemy import DateTime
from sqlalchemy.types import TypeDecorator

# Re-export Base from core.database for model modules
from physio_scheduler.core.database import Base  # type: ignore[reportUnusedImport]


class UtcDateTime(TypeDecorator[datetime]):
    """
    Timezone-aware UTC timestamp.

    Backends without timezone support (SQLite) hand back naive values; those
    are read as UTC so timestamps always compare cleanly with utc_now().
    """

    impl = DateTime(timezone=True)
    cache_ok = True

    def process_bind_param(self, value: Optional[datetime], dialect: Any) -> Optional[datetime]:
        if value is None:
            return None
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value.astimezone(timezone.utc)

    def process_result_value(self, value: Optional[datetime], dialect: Any) -> Optional[datetime]:
        if value is None:
            return None
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value.astimezone(timezone.utc)


__all__ = ["Base", "UtcDateTime"]
