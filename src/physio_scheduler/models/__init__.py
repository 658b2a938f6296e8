# Package initialization
# Import all models to ensure they are registered on Base.metadata
from .appointment import Appointment, AppointmentStatus

__all__ = [
    "Appointment",
    "AppointmentStatus",
]
