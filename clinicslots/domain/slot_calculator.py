"""
Core business logic for turning availability windows into bookable slots.

This is the heart of the application - pure domain logic without any
external dependencies (no API calls, no storage, no I/O). Every call
recomputes its result from the inputs; nothing is cached or mutated.
"""

import logging
from datetime import date, timedelta
from typing import Callable, Dict, Iterable, Iterator, List, Optional, Sequence, Tuple

import pendulum
from pendulum import DateTime

from .civil_time import load_timezone, resolve_time_text
from .models import WEEKDAY_OFFSETS, AvailabilityRecord, BookingRecord, Doctor, TimeRange, TimeSlot

logger = logging.getLogger(__name__)

DEFAULT_SLOT_DURATION_MINUTES = 30

SameDayPredicate = Callable[[DateTime, DateTime], bool]


def week_start(now: Optional[DateTime] = None) -> pendulum.Date:
    """
    Return the Monday of the week containing ``now``.

    ``now`` defaults to the current wall-clock time; pass it explicitly to
    get a reproducible anchor.
    """
    if now is None:
        now = pendulum.now()
    today = now.date()
    return today - timedelta(days=today.weekday())


class Tessellation:
    """
    Fixed-size, contiguous ranges covering ``[start, end)``.

    Ranges are produced lazily while their start is before ``end``, so the
    last range may run past ``end`` when the window is not an exact multiple
    of the duration. Iterating again starts over from ``start``.
    """

    def __init__(self, start: DateTime, end: DateTime, duration_minutes: int = DEFAULT_SLOT_DURATION_MINUTES):
        if duration_minutes <= 0:
            raise ValueError(f"Slot duration must be greater than zero, got {duration_minutes}")
        self.start = start
        self.end = end
        self.duration_minutes = duration_minutes

    def __iter__(self) -> Iterator[TimeRange]:
        current = self.start
        while current < self.end:
            slot_end = current.add(minutes=self.duration_minutes)
            yield TimeRange(start=current, end=slot_end)
            current = slot_end


def same_reference_day(first: DateTime, second: DateTime, reference_timezone: str = "UTC") -> bool:
    """Check whether two instants fall on the same date in the reference calendar."""
    tz = load_timezone(reference_timezone)
    return first.in_timezone(tz).date() == second.in_timezone(tz).date()


def is_slot_booked(
    doctor_name: str,
    slot_start: DateTime,
    bookings: Iterable[BookingRecord],
    same_day: SameDayPredicate = same_reference_day,
) -> bool:
    """
    Check whether any booking of ``doctor_name`` starts exactly at ``slot_start``.

    Raises:
        DataError: If a booking of this doctor has an unparseable start time
    """
    for booking in bookings:
        if booking.doctor_name != doctor_name:
            continue
        booking_start = booking.start_instant()
        if same_day(booking_start, slot_start) and booking_start == slot_start:
            return True
    return False


class SlotCalculator:
    """
    Generates a doctor's bookable slots for one calendar week.

    Algorithm, per availability record:
    1. Map the weekday name to an offset from the Monday anchor
    2. Resolve the window's start and end in the doctor's timezone
    3. Cut the window into fixed-size slots
    4. Mark slots that already have a booking as unavailable
    """

    def __init__(
        self,
        slot_duration_minutes: int = DEFAULT_SLOT_DURATION_MINUTES,
        reference_timezone: str = "UTC",
    ):
        if slot_duration_minutes <= 0:
            raise ValueError(f"Slot duration must be greater than zero, got {slot_duration_minutes}")
        self.slot_duration_minutes = slot_duration_minutes
        self.reference_timezone = reference_timezone

    def generate_slots(
        self,
        availability: AvailabilityRecord,
        week_start: date,
        bookings: Sequence[BookingRecord] = (),
    ) -> List[TimeSlot]:
        """
        Generate the slots of a single availability window.

        Args:
            availability: One weekday window of one doctor
            week_start: Monday of the target week
            bookings: Existing bookings used to mark slots as taken

        Returns:
            Slots ordered by start time; empty for an unknown weekday name

        Raises:
            ParseError: If a window boundary is not a valid time string
            TimezoneError: If the record's timezone is unknown
        """
        offset = WEEKDAY_OFFSETS.get(availability.day_of_week)
        if offset is None:
            logger.debug(
                "Skipping %s availability with unknown weekday %r",
                availability.doctor_name,
                availability.day_of_week,
            )
            return []

        target_day = week_start + timedelta(days=offset)
        window_start = resolve_time_text(target_day, availability.start_time_text, availability.timezone)
        window_end = resolve_time_text(target_day, availability.end_time_text, availability.timezone)

        doctor_bookings = [
            booking for booking in bookings
            if booking.doctor_name == availability.doctor_name
        ]

        slots = [
            TimeSlot(
                start=time_range.start,
                end=time_range.end,
                day_of_week=availability.day_of_week,
                timezone=availability.timezone,
                is_available=not is_slot_booked(
                    availability.doctor_name,
                    time_range.start,
                    doctor_bookings,
                    same_day=self._is_same_day,
                ),
            )
            for time_range in Tessellation(window_start, window_end, self.slot_duration_minutes)
        ]

        logger.debug(
            "Generated %d slot(s) for %s on %s %s",
            len(slots),
            availability.doctor_name,
            availability.day_of_week,
            target_day.isoformat(),
        )
        return slots

    def build_schedule(
        self,
        doctor: Doctor,
        week_start: date,
        bookings: Sequence[BookingRecord] = (),
    ) -> Dict[str, List[TimeSlot]]:
        """
        Generate slots for every availability window of a doctor.

        Returns:
            Weekday name -> slots, only for weekdays with at least one slot
        """
        schedule: Dict[str, List[TimeSlot]] = {}

        for availability in doctor.availability:
            slots = self.generate_slots(availability, week_start, bookings)
            if slots:
                self._insert_day(schedule, availability.day_of_week, slots)

        return schedule

    @staticmethod
    def _insert_day(schedule: Dict[str, List[TimeSlot]], day_of_week: str, slots: List[TimeSlot]) -> None:
        # A later window for the same weekday replaces the earlier one
        schedule[day_of_week] = slots

    def _is_same_day(self, first: DateTime, second: DateTime) -> bool:
        return same_reference_day(first, second, self.reference_timezone)


def ordered_days(schedule: Dict[str, List[TimeSlot]]) -> List[Tuple[str, List[TimeSlot]]]:
    """Return schedule entries ordered Monday to Sunday."""
    return sorted(schedule.items(), key=lambda item: WEEKDAY_OFFSETS.get(item[0], len(WEEKDAY_OFFSETS)))
