from physio_scheduler.repositories.appointment_repository import AppointmentRepository
from physio_scheduler.repositories.memory_repository import InMemoryAppointmentRepository
from physio_scheduler.repositories.sqlalchemy_repository import SqlAlchemyAppointmentRepository

__all__ = [
    "AppointmentRepository",
    "InMemoryAppointmentRepository",
    "SqlAlchemyAppointmentRepository",
]
