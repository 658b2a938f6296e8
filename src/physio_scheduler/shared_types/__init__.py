"""
Shared type definitions for the scheduling engine.

This module contains dataclasses that are used across multiple services.
"""

from physio_scheduler.shared_types.availability import BookedInterval, TimeSlot

__all__ = ["BookedInterval", "TimeSlot"]
