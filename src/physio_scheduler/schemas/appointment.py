"""
Response models for appointment data.

Pydantic models a transport layer can serialize directly. Dates are rendered
as YYYY-MM-DD, times as HH:MM and timestamps as ISO 8601.
"""

from datetime import date as date_type
from typing import List, Optional

from pydantic import BaseModel

from physio_scheduler.models import Appointment
from physio_scheduler.shared_types import TimeSlot
from physio_scheduler.utils.datetime_utils import format_date, format_time


class AppointmentResponse(BaseModel):
    """Response model for a single appointment."""
    id: str
    patient_id: str
    provider_id: str
    date: str  # YYYY-MM-DD
    start_time: str  # HH:MM
    end_time: str  # HH:MM
    duration_minutes: int
    status: str
    notes: Optional[str] = None
    patient_notes: Optional[str] = None
    provider_notes: Optional[str] = None
    created_at: str
    updated_at: str

    @classmethod
    def from_appointment(cls, appointment: Appointment) -> "AppointmentResponse":
        return cls(
            id=appointment.id,
            patient_id=appointment.patient_id,
            provider_id=appointment.provider_id,
            date=format_date(appointment.date),
            start_time=format_time(appointment.start_time),
            end_time=format_time(appointment.end_time),
            duration_minutes=appointment.duration_minutes,
            status=appointment.status.value,
            notes=appointment.notes,
            patient_notes=appointment.patient_notes,
            provider_notes=appointment.provider_notes,
            created_at=appointment.created_at.isoformat(),
            updated_at=appointment.updated_at.isoformat(),
        )


class AppointmentListResponse(BaseModel):
    """Response model for listing appointments."""
    appointments: List[AppointmentResponse]


class TimeSlotResponse(BaseModel):
    """Response model for one slot of the clinic day."""
    start_time: str
    end_time: str
    is_available: bool

    @classmethod
    def from_slot(cls, slot: TimeSlot) -> "TimeSlotResponse":
        return cls(
            start_time=format_time(slot.start_time),
            end_time=format_time(slot.end_time),
            is_available=slot.is_available,
        )


class AvailableSlotsResponse(BaseModel):
    """Response model for a provider's day."""
    date: str
    provider_id: str
    slots: List[TimeSlotResponse]

    @classmethod
    def build(cls, provider_id: str, on_date: date_type, slots: List[TimeSlot]) -> "AvailableSlotsResponse":
        return cls(
            date=format_date(on_date),
            provider_id=provider_id,
            slots=[TimeSlotResponse.from_slot(s) for s in slots],
        )
