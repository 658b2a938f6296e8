"""
Unit tests for the booking validator.

Each rule is tested on its own and then through validate() against the
in-memory repository, including the order in which rules are applied.
"""

from datetime import date, time
from unittest.mock import Mock

import pytest

from physio_scheduler.core.exceptions import (
    InvalidDurationError, InvalidFormatError, NonAdjacentSlotError, PersistenceError,
    ProviderConflictError, QuotaExceededError
)
from physio_scheduler.services.booking_validator import BookingValidator
from physio_scheduler.shared_types import BookedInterval


def _booked(start: time, end: time, minutes: int) -> BookedInterval:
    return BookedInterval(start_time=start, end_time=end, duration_minutes=minutes)


class TestDurationRule:

    @pytest.mark.parametrize("minutes", [20, 40, 60])
    def test_allowed_durations(self, minutes):
        BookingValidator.validate_duration(minutes)

    @pytest.mark.parametrize("minutes", [0, 10, 30, 80, -20, True, "20", 20.0])
    def test_other_durations_rejected(self, minutes):
        with pytest.raises(InvalidDurationError):
            BookingValidator.validate_duration(minutes)


class TestProviderRule:

    def test_exact_overlap_rejected(self):
        with pytest.raises(ProviderConflictError):
            BookingValidator.check_provider_available(
                [_booked(time(10, 0), time(10, 20), 20)], time(10, 0), time(10, 20)
            )

    def test_slot_ending_at_booking_start_accepted(self):
        BookingValidator.check_provider_available(
            [_booked(time(10, 0), time(10, 20), 20)], time(9, 40), time(10, 0)
        )

    def test_longer_request_covering_booking_rejected(self):
        with pytest.raises(ProviderConflictError):
            BookingValidator.check_provider_available(
                [_booked(time(10, 0), time(10, 20), 20)], time(9, 40), time(10, 40)
            )


class TestQuotaRule:

    def test_exactly_sixty_minutes_allowed(self):
        BookingValidator.check_patient_quota([_booked(time(9, 0), time(9, 20), 20)], 40)

    def test_over_sixty_minutes_rejected(self):
        with pytest.raises(QuotaExceededError) as exc_info:
            BookingValidator.check_patient_quota(
                [_booked(time(9, 0), time(9, 40), 40)], 40
            )
        assert exc_info.value.detail["booked_minutes"] == 40


class TestAdjacencyRule:

    def test_first_booking_of_day_is_vacuously_adjacent(self):
        BookingValidator.check_patient_adjacency([], time(14, 0), time(14, 20))

    def test_booking_after_existing_block(self):
        BookingValidator.check_patient_adjacency(
            [_booked(time(9, 0), time(9, 20), 20)], time(9, 20), time(9, 40)
        )

    def test_booking_before_existing_block(self):
        BookingValidator.check_patient_adjacency(
            [_booked(time(9, 0), time(9, 20), 20)], time(8, 40), time(9, 0)
        )

    def test_gap_rejected(self):
        with pytest.raises(NonAdjacentSlotError):
            BookingValidator.check_patient_adjacency(
                [_booked(time(9, 0), time(9, 20), 20)], time(9, 40), time(10, 0)
            )


class TestValidate:
    """Test validate() against stored appointments."""

    def _book(self, service, booking_date, start, minutes, patient="patient-1", provider="dr-1"):
        return service.create_appointment(patient, provider, booking_date, start, minutes)

    def test_returns_end_time(self, memory_repository, booking_date):
        end = BookingValidator.validate(
            memory_repository, "patient-1", "dr-1", booking_date, time(9, 0), 40
        )

        assert end == time(9, 40)

    def test_duration_checked_before_storage(self, booking_date):
        repository = Mock()

        with pytest.raises(InvalidDurationError):
            BookingValidator.validate(repository, "patient-1", "dr-1", booking_date, time(9, 0), 30)

        repository.find_provider_bookings.assert_not_called()

    def test_end_past_midnight_rejected(self, memory_repository, booking_date):
        with pytest.raises(InvalidFormatError):
            BookingValidator.validate(
                memory_repository, "patient-1", "dr-1", booking_date, time(23, 40), 20
            )

    def test_provider_conflict_from_other_patient(self, service, memory_repository, booking_date):
        self._book(service, booking_date, "10:00", 20, patient="patient-2")

        with pytest.raises(ProviderConflictError):
            BookingValidator.validate(
                memory_repository, "patient-1", "dr-1", booking_date, time(10, 0), 20
            )

    def test_patient_bookings_with_other_providers_count(self, service, memory_repository, booking_date):
        self._book(service, booking_date, "09:00", 40, provider="dr-2")

        with pytest.raises(QuotaExceededError):
            BookingValidator.validate(
                memory_repository, "patient-1", "dr-1", booking_date, time(9, 40), 40
            )

    def test_quota_checked_before_adjacency(self, service, memory_repository, booking_date):
        self._book(service, booking_date, "09:00", 60)

        with pytest.raises(QuotaExceededError):
            BookingValidator.validate(
                memory_repository, "patient-1", "dr-2", booking_date, time(10, 20), 20
            )

    def test_non_adjacent_within_quota(self, service, memory_repository, booking_date):
        self._book(service, booking_date, "09:00", 20)

        with pytest.raises(NonAdjacentSlotError):
            BookingValidator.validate(
                memory_repository, "patient-1", "dr-1", booking_date, time(11, 0), 20
            )

    def test_other_days_ignored(self, service, memory_repository, booking_date):
        self._book(service, date(2025, 3, 11), "09:00", 60)

        BookingValidator.validate(
            memory_repository, "patient-1", "dr-1", booking_date, time(9, 0), 60
        )

    def test_failed_conflict_query_aborts(self, booking_date):
        repository = Mock()
        repository.find_provider_bookings.side_effect = PersistenceError("Failed to query bookings")

        with pytest.raises(PersistenceError):
            BookingValidator.validate(repository, "patient-1", "dr-1", booking_date, time(9, 0), 20)

        repository.find_patient_bookings.assert_not_called()

    def test_requests_row_locks(self, booking_date):
        repository = Mock()
        repository.find_provider_bookings.return_value = []
        repository.find_patient_bookings.return_value = []

        BookingValidator.validate(repository, "patient-1", "dr-1", booking_date, time(9, 0), 20)

        repository.find_provider_bookings.assert_called_once_with("dr-1", booking_date, for_update=True)
        repository.find_patient_bookings.assert_called_once_with("patient-1", booking_date, for_update=True)
