"""Pytest configuration and fixtures."""

import pendulum
import pytest

from clinicslots.domain.models import AvailabilityRecord, BookingRecord, Doctor


@pytest.fixture
def week_anchor() -> pendulum.Date:
    """Monday 6 January 2025 (Sydney is on daylight time, UTC+11)."""
    return pendulum.date(2025, 1, 6)


@pytest.fixture
def sydney_monday() -> AvailabilityRecord:
    """One hour of Monday morning availability in Sydney."""
    return AvailabilityRecord(
        doctor_name="Dr. Test",
        timezone="Australia/Sydney",
        day_of_week="Monday",
        start_time_text=" 9:00AM",
        end_time_text="10:00AM",
    )


@pytest.fixture
def sydney_doctor(sydney_monday) -> Doctor:
    """Doctor available Monday and Tuesday mornings in Sydney."""
    tuesday = AvailabilityRecord(
        doctor_name="Dr. Test",
        timezone="Australia/Sydney",
        day_of_week="Tuesday",
        start_time_text=" 9:00AM",
        end_time_text="11:00AM",
    )
    return Doctor(
        id="doctor-1",
        name="Dr. Test",
        timezone="Australia/Sydney",
        availability=(sydney_monday, tuesday),
    )


def _make_booking(
    start_time: str,
    end_time: str = "",
    doctor_name: str = "Dr. Test",
    booking_id: str = "booking-1",
) -> BookingRecord:
    """Build a booking with sensible defaults for the remaining fields."""
    return BookingRecord(
        id=booking_id,
        doctor_name=doctor_name,
        doctor_timezone="Australia/Sydney",
        start_time=start_time,
        end_time=end_time or start_time,
        day_of_week="Monday",
        created_at="2025-01-01T00:00:00.000Z",
    )


@pytest.fixture
def make_booking():
    """Factory for bookings of Dr. Test."""
    return _make_booking
