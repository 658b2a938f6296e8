"""
Datetime utilities for the scheduling engine.

Appointment dates and times are naive clinic-local values (the clinic runs on a
single timezone). Audit timestamps (created_at, updated_at) are timezone-aware UTC.
"""

import logging
import re
from datetime import date, datetime, time, timedelta, timezone

from physio_scheduler.core.constants import DATE_FORMAT, TIME_FORMAT

logger = logging.getLogger(__name__)

_DATE_PATTERN = re.compile(r"^[0-9]{4}-[0-9]{2}-[0-9]{2}$")
_TIME_PATTERN = re.compile(r"^[0-9]{2}:[0-9]{2}$")


def utc_now() -> datetime:
    """
    Get current UTC datetime.

    Returns:
        Current timezone-aware datetime in UTC
    """
    return datetime.now(timezone.utc)


def parse_date_string(date_str: str) -> date:
    """
    Parse a date string in strict YYYY-MM-DD format.

    Unlike datetime.strptime alone, single-digit months/days ("2024-1-5") are
    rejected.

    Args:
        date_str: Date string in YYYY-MM-DD format

    Returns:
        Date object

    Raises:
        ValueError: If date string cannot be parsed
    """
    if not isinstance(date_str, str) or not _DATE_PATTERN.match(date_str):
        raise ValueError(f"Invalid date format (expected YYYY-MM-DD): {date_str!r}")
    return datetime.strptime(date_str, DATE_FORMAT).date()


def parse_time_string(time_str: str) -> time:
    """
    Parse a time string in strict 24-hour HH:MM format.

    Args:
        time_str: Time string such as "09:40"

    Returns:
        Time object

    Raises:
        ValueError: If time string cannot be parsed
    """
    if not isinstance(time_str, str) or not _TIME_PATTERN.match(time_str):
        raise ValueError(f"Invalid time format (expected HH:MM): {time_str!r}")
    return datetime.strptime(time_str, TIME_FORMAT).time()


def format_date(value: date) -> str:
    """Format date object to YYYY-MM-DD string."""
    return value.strftime(DATE_FORMAT)


def format_time(value: time) -> str:
    """Format time object to HH:MM string."""
    return value.strftime(TIME_FORMAT)


def minutes_of_day(value: time) -> int:
    """Minutes elapsed since midnight."""
    return value.hour * 60 + value.minute


def add_minutes(value: time, minutes: int) -> time:
    """
    Add minutes to a time of day.

    End-of-day 24:00 cannot be represented by datetime.time, so results
    reaching or passing midnight are rejected rather than wrapped.

    Raises:
        ValueError: If the result falls outside the same day
    """
    total = minutes_of_day(value) + minutes
    if total < 0 or total >= 24 * 60:
        raise ValueError(f"{format_time(value)} + {minutes} minutes leaves the day")
    result = datetime.combine(date.min, value) + timedelta(minutes=minutes)
    return result.time()
