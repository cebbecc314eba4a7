"""
Application services for browsing doctor availability and booking slots.

The service coordinates the directory adapter and the booking store and
delegates slot generation to the domain-level ``SlotCalculator``. This
keeps the CLI thin and lets tests swap in stub collaborators via the
protocols below.
"""

from __future__ import annotations

import logging
import secrets
import string
from datetime import date
from typing import Dict, List, Optional, Protocol

import pendulum

from ..adapters.booking_store import BookingStore
from ..domain.exceptions import BookingConflictError, DoctorNotFoundError
from ..domain.models import BookingRecord, Doctor, TimeSlot
from ..domain.slot_calculator import SlotCalculator, week_start as current_week_start

logger = logging.getLogger(__name__)

_ID_ALPHABET = string.digits + string.ascii_lowercase


class DirectoryProtocol(Protocol):
    """Protocol describing the doctor directory behaviour needed by the service."""

    def get_doctors(self) -> List[Doctor]:
        """Return every doctor with their availability."""


def generate_booking_id(now: Optional[pendulum.DateTime] = None) -> str:
    """Build an id like ``booking-1736118000000-k3j9x0a1b``."""
    now = now or pendulum.now("UTC")
    millis = int(now.timestamp() * 1000)
    suffix = "".join(secrets.choice(_ID_ALPHABET) for _ in range(9))
    return f"booking-{millis}-{suffix}"


class BookingService:
    """
    Orchestrates directory lookups, weekly schedules and bookings.
    """

    def __init__(
        self,
        directory: DirectoryProtocol,
        store: BookingStore,
        slot_calculator: SlotCalculator,
    ) -> None:
        self._directory = directory
        self._store = store
        self._slot_calculator = slot_calculator

    def list_doctors(self) -> List[Doctor]:
        """Fetch all doctors from the directory."""
        return self._directory.get_doctors()

    def find_doctor(self, name: str) -> Doctor:
        """
        Find a doctor by name, ignoring case.

        Raises:
            DoctorNotFoundError: If no doctor has that name
        """
        wanted = name.strip().lower()
        for doctor in self.list_doctors():
            if doctor.name.lower() == wanted:
                return doctor
        raise DoctorNotFoundError(f"Unknown doctor: '{name}'")

    def weekly_schedule(
        self,
        doctor: Doctor,
        week_start: Optional[date] = None,
    ) -> Dict[str, List[TimeSlot]]:
        """
        Calculate the doctor's slots for a week, marking booked ones.

        ``week_start`` defaults to the Monday of the current week.
        """
        anchor = week_start if week_start is not None else current_week_start()
        return self._slot_calculator.build_schedule(doctor, anchor, self._store.list())

    def book(self, doctor: Doctor, slot: TimeSlot) -> BookingRecord:
        """
        Book a slot with a doctor.

        Raises:
            BookingConflictError: If the doctor already has a booking at that time
            BookingStoreError: If the booking cannot be saved
        """
        start_time = slot.start.in_timezone("UTC").to_iso8601_string()

        if not slot.is_available or self._store.is_slot_booked(doctor.name, start_time):
            raise BookingConflictError("This appointment slot is already booked")

        now = pendulum.now("UTC")
        booking = BookingRecord(
            id=generate_booking_id(now),
            doctor_name=doctor.name,
            doctor_timezone=doctor.timezone,
            start_time=start_time,
            end_time=slot.end.in_timezone("UTC").to_iso8601_string(),
            day_of_week=slot.day_of_week,
            created_at=now.to_iso8601_string(),
        )

        self._store.append(booking)
        logger.info("Booked %s with %s at %s", booking.id, doctor.name, start_time)
        return booking

    def cancel(self, booking_id: str) -> bool:
        """Cancel a booking; returns False when nothing was removed."""
        removed = self._store.remove(booking_id)
        if removed:
            logger.info("Cancelled booking %s", booking_id)
        else:
            logger.warning("Booking %s could not be cancelled", booking_id)
        return removed

    def bookings(self) -> List[BookingRecord]:
        """Return stored bookings ordered by start time."""
        return sorted(self._store.list(), key=lambda booking: booking.start_time)
