"""
Appointment model representing visits booked between patients and providers.

Appointments are the only persisted entity of the scheduling engine. Each
appointment occupies one, two or three consecutive base slots of a provider's
day and is never physically deleted: cancellation is a status transition.
"""

import enum
from datetime import date as date_type, datetime, time
from typing import Optional

from sqlalchemy import Date, Enum as SAEnum, Index, Integer, String, Time, text
from sqlalchemy.orm import Mapped, mapped_column

from physio_scheduler.core.constants import MAX_ID_LENGTH, MAX_NOTES_LENGTH
from physio_scheduler.models.base import Base, UtcDateTime


class AppointmentStatus(str, enum.Enum):
    """Lifecycle states of an appointment. Any state may follow any other."""

    SCHEDULED = "scheduled"
    CONFIRMED = "confirmed"
    COMPLETED = "completed"
    CANCELLED = "cancelled"
    NO_SHOW = "no_show"

    @classmethod
    def parse(cls, value: "str | AppointmentStatus") -> "AppointmentStatus":
        """
        Parse a status value case-insensitively.

        Accepts the canonical values plus the "noshow" / "no-show" spellings.

        Raises:
            ValueError: If the value is not a known status
        """
        if isinstance(value, cls):
            return value
        if not isinstance(value, str):
            raise ValueError(f"Invalid appointment status: {value!r}")
        normalized = value.strip().lower().replace("-", "_")
        if normalized == "noshow":
            normalized = cls.NO_SHOW.value
        try:
            return cls(normalized)
        except ValueError:
            raise ValueError(f"Invalid appointment status: {value!r}") from None


class Appointment(Base):
    """
    Appointment entity representing a booked or historical visit.

    Invariants maintained by AppointmentService:
    - Non-cancelled appointments of one provider on one date never overlap.
    - Non-cancelled appointments of one patient on one date total at most
      60 minutes and form one contiguous block.
    """

    __tablename__ = "appointments"

    id: Mapped[str] = mapped_column(String(MAX_ID_LENGTH), primary_key=True)
    """Opaque identifier (UUID4 string) assigned at creation."""

    patient_id: Mapped[str] = mapped_column(String(MAX_ID_LENGTH))
    """Identifier of the patient who booked this appointment."""

    provider_id: Mapped[str] = mapped_column(String(MAX_ID_LENGTH))
    """Identifier of the physiotherapist whose calendar is booked."""

    date: Mapped[date_type] = mapped_column(Date)
    """Calendar date of the visit."""

    start_time: Mapped[time] = mapped_column(Time)
    end_time: Mapped[time] = mapped_column(Time)

    duration_minutes: Mapped[int] = mapped_column(Integer)
    """One of 20, 40 or 60."""

    status: Mapped[AppointmentStatus] = mapped_column(
        SAEnum(
            AppointmentStatus,
            native_enum=False,
            length=20,
            values_callable=lambda statuses: [s.value for s in statuses],
            validate_strings=True,
        ),
        default=AppointmentStatus.SCHEDULED,
    )

    notes: Mapped[Optional[str]] = mapped_column(String(MAX_NOTES_LENGTH), nullable=True)
    """Notes entered at booking time."""

    patient_notes: Mapped[Optional[str]] = mapped_column(String(MAX_NOTES_LENGTH), nullable=True)
    provider_notes: Mapped[Optional[str]] = mapped_column(String(MAX_NOTES_LENGTH), nullable=True)

    created_at: Mapped[datetime] = mapped_column(UtcDateTime)
    updated_at: Mapped[datetime] = mapped_column(UtcDateTime)

    __table_args__ = (
        Index('idx_appointments_provider_date', 'provider_id', 'date'),
        Index('idx_appointments_patient_date', 'patient_id', 'date'),
        # At most one live booking may start at a given provider slot. Backs up
        # the in-process booking locks when several processes share the store.
        Index(
            'uq_appointments_provider_slot_active',
            'provider_id', 'date', 'start_time',
            unique=True,
            sqlite_where=text("status != 'cancelled'"),
            postgresql_where=text("status != 'cancelled'"),
        ),
    )

    def __repr__(self) -> str:
        return (
            f"<Appointment {self.id} provider={self.provider_id} patient={self.patient_id} "
            f"{self.date} {self.start_time}-{self.end_time} {self.status}>"
        )
