"""
Shared types for availability-related functionality.

This module contains shared data classes used by the availability service,
the booking validator and the repository adapters.
"""

from dataclasses import dataclass
from datetime import time

from physio_scheduler.utils.datetime_utils import format_time


@dataclass
class TimeSlot:
    """
    Represents a candidate bookable time slot.

    Generated fresh for every availability query and never persisted.
    """
    start_time: time
    end_time: time
    is_available: bool = True

    def to_dict(self) -> dict[str, str | bool]:
        """Convert to dictionary format."""
        return {
            "start_time": format_time(self.start_time),
            "end_time": format_time(self.end_time),
            "is_available": self.is_available,
        }


@dataclass(frozen=True)
class BookedInterval:
    """
    Time interval held by an existing non-cancelled appointment.

    This is the projection returned by the repository's conflict queries.
    """
    start_time: time
    end_time: time
    duration_minutes: int
