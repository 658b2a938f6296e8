"""
Availability service for slot-grid generation and availability marking.

This module contains the pure scheduling arithmetic shared by the booking
validator and the appointment service. Only get_available_slots touches
storage, and only through the repository interface.
"""

import logging
from datetime import date as date_type, time
from typing import Iterable, List, Optional

from physio_scheduler.core.config import CLINIC_CLOSE_TIME, CLINIC_OPEN_TIME
from physio_scheduler.core.constants import SLOT_MINUTES
from physio_scheduler.repositories.appointment_repository import AppointmentRepository
from physio_scheduler.shared_types import BookedInterval, TimeSlot
from physio_scheduler.utils.datetime_utils import (
    add_minutes, format_time, minutes_of_day, parse_time_string
)

logger = logging.getLogger(__name__)


class AvailabilityService:
    """
    Service class for availability operations.

    Contains the slot grid, the overlap predicate and availability marking.
    """

    @staticmethod
    def clinic_hours() -> tuple[time, time]:
        """
        Clinic-wide working window from configuration.

        Returns:
            (open_time, close_time) tuple
        """
        return parse_time_string(CLINIC_OPEN_TIME), parse_time_string(CLINIC_CLOSE_TIME)

    @staticmethod
    def generate_slot_grid(
        open_time: time,
        close_time: time,
        slot_minutes: int = SLOT_MINUTES
    ) -> List[TimeSlot]:
        """
        Generate the ordered candidate slots of a working day.

        Slots are laid back to back from open_time. A slot that would end after
        close_time is omitted, not truncated. Every slot starts available.

        Args:
            open_time: Start of the working window
            close_time: End of the working window (exclusive)
            slot_minutes: Length of each slot in minutes

        Returns:
            List of TimeSlot in start-time order

        Raises:
            ValueError: If slot_minutes is not positive or the window is empty
        """
        if slot_minutes <= 0:
            raise ValueError(f"slot_minutes must be positive, got {slot_minutes}")
        if open_time >= close_time:
            raise ValueError(
                f"open_time {format_time(open_time)} must be before close_time {format_time(close_time)}"
            )

        close_minutes = minutes_of_day(close_time)
        slots: List[TimeSlot] = []
        current = minutes_of_day(open_time)

        while current + slot_minutes <= close_minutes:
            start = time(current // 60, current % 60)
            end_minutes = current + slot_minutes
            slots.append(TimeSlot(start_time=start, end_time=time(end_minutes // 60, end_minutes % 60)))
            current = end_minutes

        return slots

    @staticmethod
    def check_time_overlap(
        start1: time,
        end1: time,
        start2: time,
        end2: time
    ) -> bool:
        """
        Check if two half-open time intervals overlap.

        [start1, end1) and [start2, end2) overlap iff start1 < end2 and end1 > start2.
        Intervals that only touch at a boundary do not overlap.
        """
        return start1 < end2 and end1 > start2

    @staticmethod
    def has_conflict(
        booked: Iterable[BookedInterval],
        start_time: time,
        end_time: time
    ) -> bool:
        """True if [start_time, end_time) overlaps any booked interval."""
        return any(
            AvailabilityService.check_time_overlap(start_time, end_time, b.start_time, b.end_time)
            for b in booked
        )

    @staticmethod
    def compute_availability(
        grid: Iterable[TimeSlot],
        booked: Iterable[BookedInterval]
    ) -> List[TimeSlot]:
        """
        Mark grid slots that overlap a booked interval as unavailable.

        Pure function - the input grid is not modified.

        Args:
            grid: Candidate slots, typically from generate_slot_grid
            booked: Intervals of non-cancelled appointments

        Returns:
            New list of TimeSlot with is_available updated
        """
        booked = list(booked)
        return [
            TimeSlot(
                start_time=slot.start_time,
                end_time=slot.end_time,
                is_available=slot.is_available and not AvailabilityService.has_conflict(
                    booked, slot.start_time, slot.end_time
                ),
            )
            for slot in grid
        ]

    @staticmethod
    def get_available_slots(
        repository: AppointmentRepository,
        provider_id: str,
        on_date: date_type,
        open_time: Optional[time] = None,
        close_time: Optional[time] = None
    ) -> List[TimeSlot]:
        """
        Slots of the clinic day with availability for one provider.

        Args:
            repository: Appointment storage
            provider_id: Provider whose calendar is queried
            on_date: Day to compute
            open_time: Override of the configured opening time
            close_time: Override of the configured closing time

        Returns:
            Ordered list of TimeSlot

        Raises:
            PersistenceError: If the booking query fails
        """
        default_open, default_close = AvailabilityService.clinic_hours()
        grid = AvailabilityService.generate_slot_grid(
            open_time or default_open, close_time or default_close
        )
        booked = repository.find_provider_bookings(provider_id, on_date)
        slots = AvailabilityService.compute_availability(grid, booked)

        logger.debug(
            f"Provider {provider_id} on {on_date}: "
            f"{sum(1 for s in slots if s.is_available)}/{len(slots)} slots free"
        )
        return slots

    @staticmethod
    def end_time_for(start_time: time, duration_minutes: int) -> time:
        """
        End of an appointment starting at start_time.

        Raises:
            ValueError: If the appointment would run past midnight
        """
        return add_minutes(start_time, duration_minutes)
