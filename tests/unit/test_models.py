"""
Unit tests for the appointment model, response schemas and error taxonomy.
"""

from datetime import date, datetime, time, timezone

import pytest

from physio_scheduler.core.exceptions import (
    BookingRejectedError, BookingTimeoutError, NonAdjacentSlotError, PersistenceError,
    ProviderConflictError, QuotaExceededError, SchedulingError, UniqueConflictError
)
from physio_scheduler.core.sentinels import MISSING
from physio_scheduler.models import Appointment, AppointmentStatus
from physio_scheduler.schemas import AppointmentListResponse, AppointmentResponse, AvailableSlotsResponse
from physio_scheduler.shared_types import TimeSlot


def _appointment(**overrides) -> Appointment:
    created = datetime(2025, 3, 1, 9, 0, tzinfo=timezone.utc)
    values = dict(
        id="a-1",
        patient_id="patient-1",
        provider_id="dr-1",
        date=date(2025, 3, 10),
        start_time=time(9, 0),
        end_time=time(9, 40),
        duration_minutes=40,
        status=AppointmentStatus.SCHEDULED,
        notes="Knee",
        patient_notes=None,
        provider_notes=None,
        created_at=created,
        updated_at=created,
    )
    values.update(overrides)
    return Appointment(**values)


class TestAppointmentStatus:

    @pytest.mark.parametrize("raw, expected", [
        ("scheduled", AppointmentStatus.SCHEDULED),
        ("CONFIRMED", AppointmentStatus.CONFIRMED),
        (" completed ", AppointmentStatus.COMPLETED),
        ("cancelled", AppointmentStatus.CANCELLED),
        ("no_show", AppointmentStatus.NO_SHOW),
        ("noshow", AppointmentStatus.NO_SHOW),
        (AppointmentStatus.CONFIRMED, AppointmentStatus.CONFIRMED),
    ])
    def test_parse(self, raw, expected):
        assert AppointmentStatus.parse(raw) is expected

    @pytest.mark.parametrize("raw", ["canceled_by_clinic", "", "done", 3, None])
    def test_parse_rejects_unknown(self, raw):
        with pytest.raises(ValueError):
            AppointmentStatus.parse(raw)

    def test_values_are_wire_strings(self):
        assert [s.value for s in AppointmentStatus] == [
            "scheduled", "confirmed", "completed", "cancelled", "no_show"
        ]


class TestResponses:

    def test_appointment_response_formats_fields(self):
        response = AppointmentResponse.from_appointment(_appointment())

        assert response.date == "2025-03-10"
        assert response.start_time == "09:00"
        assert response.end_time == "09:40"
        assert response.status == "scheduled"
        assert response.created_at == "2025-03-01T09:00:00+00:00"
        assert response.model_dump()["notes"] == "Knee"

    def test_list_response(self):
        first = AppointmentResponse.from_appointment(_appointment())
        second = AppointmentResponse.from_appointment(_appointment(id="a-2", status=AppointmentStatus.NO_SHOW))

        response = AppointmentListResponse(appointments=[first, second])

        assert [a["status"] for a in response.model_dump()["appointments"]] == ["scheduled", "no_show"]

    def test_available_slots_response(self):
        slots = [TimeSlot(time(8, 0), time(8, 20), False), TimeSlot(time(8, 20), time(8, 40))]

        response = AvailableSlotsResponse.build("dr-1", date(2025, 3, 10), slots)

        assert response.model_dump() == {
            "date": "2025-03-10",
            "provider_id": "dr-1",
            "slots": [
                {"start_time": "08:00", "end_time": "08:20", "is_available": False},
                {"start_time": "08:20", "end_time": "08:40", "is_available": True},
            ],
        }


class TestErrors:

    @pytest.mark.parametrize("error_class", [
        ProviderConflictError, QuotaExceededError, NonAdjacentSlotError
    ])
    def test_booking_rules_share_base(self, error_class):
        assert issubclass(error_class, BookingRejectedError)
        assert issubclass(error_class, SchedulingError)

    def test_storage_errors_share_base(self):
        assert issubclass(UniqueConflictError, PersistenceError)
        assert issubclass(BookingTimeoutError, PersistenceError)

    def test_to_dict(self):
        error = QuotaExceededError("Too many minutes", {"booked_minutes": 60})

        assert error.to_dict() == {
            "error": "quota_exceeded",
            "message": "Too many minutes",
            "booked_minutes": 60,
        }
        assert str(error) == "Too many minutes"


class TestMissingSentinel:

    def test_missing_is_falsy_singleton(self):
        assert not MISSING
        assert type(MISSING)() is MISSING
        assert repr(MISSING) == "MISSING"
