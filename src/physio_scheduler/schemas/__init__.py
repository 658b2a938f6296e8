from physio_scheduler.schemas.appointment import (
    AppointmentListResponse, AppointmentResponse, AvailableSlotsResponse, TimeSlotResponse
)

__all__ = [
    "AppointmentListResponse",
    "AppointmentResponse",
    "AvailableSlotsResponse",
    "TimeSlotResponse",
]
