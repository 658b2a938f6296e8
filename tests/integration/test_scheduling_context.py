"""
Integration tests for SchedulingContext wiring.
"""

from datetime import time

import pytest
from sqlalchemy import inspect

from physio_scheduler.core.context import SchedulingContext
from physio_scheduler.core.exceptions import NotFoundError, QuotaExceededError
from physio_scheduler.models import AppointmentStatus

pytestmark = pytest.mark.integration


class TestSchedulingContext:

    def test_from_config_creates_schema(self, file_context):
        table_names = inspect(file_context.engine).get_table_names()

        assert "appointments" in table_names

    def test_from_config_without_schema(self, tmp_path):
        context = SchedulingContext.from_config(
            f"sqlite:///{tmp_path / 'empty.db'}", create_schema=False
        )
        try:
            assert inspect(context.engine).get_table_names() == []
        finally:
            context.dispose()

    def test_services_share_state_across_units_of_work(self, file_context):
        with file_context.appointment_service() as service:
            created = service.create_appointment("patient-1", "dr-1", "2025-03-10", "09:00", 40)

        with file_context.appointment_service() as service:
            loaded = service.get_appointment(created.id)
            slots = service.get_available_slots("dr-1", "2025-03-10")

        assert loaded.start_time == time(9, 0)
        assert [s.start_time for s in slots if not s.is_available] == [time(9, 0), time(9, 20)]

    def test_rejection_does_not_poison_later_work(self, file_context):
        with file_context.appointment_service() as service:
            service.create_appointment("patient-1", "dr-1", "2025-03-10", "09:00", 60)
            with pytest.raises(QuotaExceededError):
                service.create_appointment("patient-1", "dr-2", "2025-03-10", "10:00", 20)
            appointment = service.list_by_patient("patient-1")[0]
            service.update_status(appointment.id, AppointmentStatus.CONFIRMED)

        with file_context.appointment_service() as service:
            assert service.get_appointment(appointment.id).status == AppointmentStatus.CONFIRMED

    def test_missing_appointment(self, file_context):
        with file_context.appointment_service() as service:
            with pytest.raises(NotFoundError):
                service.get_appointment("does-not-exist")

    def test_locks_shared_between_services(self, file_context):
        with file_context.appointment_service() as first:
            with file_context.appointment_service() as second:
                assert first.locks is second.locks is file_context.locks
