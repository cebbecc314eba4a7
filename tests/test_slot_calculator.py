"""
Tests for slot calculator.
"""

import pendulum
import pytest

from clinicslots.domain.exceptions import DataError, ParseError, TimezoneError
from clinicslots.domain.models import AvailabilityRecord, Doctor
from clinicslots.domain.slot_calculator import (
    SlotCalculator,
    Tessellation,
    is_slot_booked,
    ordered_days,
    same_reference_day,
    week_start,
)


def _window(start: str, end: str, day: str = "Monday", timezone: str = "Australia/Sydney") -> AvailabilityRecord:
    return AvailabilityRecord(
        doctor_name="Dr. Test",
        timezone=timezone,
        day_of_week=day,
        start_time_text=start,
        end_time_text=end,
    )


class TestTessellation:
    """Tests for cutting a window into fixed-size ranges."""

    def test_exact_multiple(self):
        start = pendulum.datetime(2025, 1, 5, 22, 0, tz="UTC")
        ranges = list(Tessellation(start, start.add(hours=2), 30))

        assert len(ranges) == 4
        assert ranges[-1].end == start.add(hours=2)

    def test_shorter_than_one_duration(self):
        start = pendulum.datetime(2025, 1, 5, 22, 0, tz="UTC")

        assert list(Tessellation(start, start.add(minutes=29), 30)) == []

    def test_last_range_may_overrun_window(self):
        """A 45 minute window yields two 30 minute ranges."""
        start = pendulum.datetime(2025, 1, 5, 22, 0, tz="UTC")
        ranges = list(Tessellation(start, start.add(minutes=45), 30))

        assert len(ranges) == 2
        assert ranges[1].end == start.add(minutes=60)

    def test_restartable(self):
        start = pendulum.datetime(2025, 1, 5, 22, 0, tz="UTC")
        tessellation = Tessellation(start, start.add(hours=1), 30)

        assert list(tessellation) == list(tessellation)

    def test_non_positive_duration_raises(self):
        start = pendulum.datetime(2025, 1, 5, 22, 0, tz="UTC")

        with pytest.raises(ValueError):
            Tessellation(start, start.add(hours=1), 0)


class TestGenerateSlots:
    """Tests for compiling one availability window into slots."""

    def test_sydney_morning(self, sydney_monday, week_anchor):
        """09:00-10:00 Sydney yields two free half-hour slots."""
        slots = SlotCalculator().generate_slots(sydney_monday, week_anchor)

        assert len(slots) == 2
        assert slots[0].start == pendulum.datetime(2025, 1, 5, 22, 0, tz="UTC")
        assert slots[0].end == pendulum.datetime(2025, 1, 5, 22, 30, tz="UTC")
        assert slots[1].start == pendulum.datetime(2025, 1, 5, 22, 30, tz="UTC")
        assert slots[1].end == pendulum.datetime(2025, 1, 5, 23, 0, tz="UTC")
        assert [slot.start.in_timezone("Australia/Sydney").format("HH:mm") for slot in slots] == ["09:00", "09:30"]
        assert all(slot.is_available for slot in slots)
        assert all(slot.day_of_week == "Monday" for slot in slots)
        assert all(slot.timezone == "Australia/Sydney" for slot in slots)

    def test_booked_slot_is_unavailable(self, sydney_monday, week_anchor, make_booking):
        """A booking at 09:30 Sydney takes the second slot only."""
        bookings = [make_booking("2025-01-05T22:30:00.000Z", "2025-01-05T23:00:00.000Z")]

        slots = SlotCalculator().generate_slots(sydney_monday, week_anchor, bookings)

        assert [slot.is_available for slot in slots] == [True, False]

    def test_booking_for_other_doctor_ignored(self, sydney_monday, week_anchor, make_booking):
        bookings = [make_booking("2025-01-05T22:30:00.000Z", doctor_name="Dr. Other")]

        slots = SlotCalculator().generate_slots(sydney_monday, week_anchor, bookings)

        assert all(slot.is_available for slot in slots)

    def test_booking_written_with_offset_matches(self, sydney_monday, week_anchor, make_booking):
        """Bookings match by instant, whatever offset the string carries."""
        bookings = [make_booking("2025-01-06T09:00:00+11:00")]

        slots = SlotCalculator().generate_slots(sydney_monday, week_anchor, bookings)

        assert [slot.is_available for slot in slots] == [False, True]

    @pytest.mark.parametrize(
        "start, end, expected",
        [
            (" 9:00AM", " 9:30AM", 1),
            (" 9:00AM", "11:00AM", 4),
            (" 9:00AM", " 9:20AM", 0),
            (" 9:00AM", " 9:00AM", 0),
            ("10:00AM", " 9:00AM", 0),
            ("11:30AM", " 1:00PM", 3),
        ],
    )
    def test_slot_counts(self, week_anchor, start, end, expected):
        slots = SlotCalculator().generate_slots(_window(start, end), week_anchor)

        assert len(slots) == expected

    def test_slots_are_contiguous_with_fixed_duration(self, week_anchor):
        slots = SlotCalculator().generate_slots(_window(" 8:00AM", " 5:30PM"), week_anchor)

        assert len(slots) == 19
        assert all(slot.duration_minutes() == 30 for slot in slots)
        assert all(current.end == following.start for current, following in zip(slots, slots[1:]))

    def test_configurable_duration(self, week_anchor):
        slots = SlotCalculator(slot_duration_minutes=15).generate_slots(_window(" 9:00AM", "10:00AM"), week_anchor)

        assert len(slots) == 4
        assert all(slot.duration_minutes() == 15 for slot in slots)

    def test_day_offset_from_anchor(self, week_anchor):
        slots = SlotCalculator().generate_slots(_window(" 9:00AM", " 9:30AM", day="Sunday"), week_anchor)

        assert slots[0].start.in_timezone("Australia/Sydney").date() == pendulum.date(2025, 1, 12)

    def test_unknown_weekday_returns_empty(self, week_anchor):
        slots = SlotCalculator().generate_slots(_window(" 9:00AM", "11:00AM", day="InvalidDay"), week_anchor)

        assert slots == []

    def test_daylight_saving_end_lengthens_window(self):
        """Sydney falls back on Sunday 6 April 2025: 1AM-4AM local spans four hours."""
        anchor = pendulum.date(2025, 3, 31)
        slots = SlotCalculator().generate_slots(_window(" 1:00AM", " 4:00AM", day="Sunday"), anchor)

        assert len(slots) == 8
        assert slots[0].start == pendulum.datetime(2025, 4, 5, 14, 0, tz="UTC")
        assert slots[-1].end == pendulum.datetime(2025, 4, 5, 18, 0, tz="UTC")

    def test_malformed_time_propagates(self, week_anchor):
        with pytest.raises(ParseError):
            SlotCalculator().generate_slots(_window("nine", "11:00AM"), week_anchor)

    def test_unknown_timezone_propagates(self, week_anchor):
        with pytest.raises(TimezoneError):
            SlotCalculator().generate_slots(_window(" 9:00AM", "11:00AM", timezone="Nowhere/City"), week_anchor)

    def test_invalid_duration_raises(self):
        with pytest.raises(ValueError):
            SlotCalculator(slot_duration_minutes=-30)


class TestIsSlotBooked:
    """Tests for the booking reconciler."""

    def test_exact_instant_required(self, make_booking):
        slot_start = pendulum.datetime(2025, 1, 5, 22, 0, tz="UTC")
        bookings = [make_booking("2025-01-05T22:15:00Z")]

        assert not is_slot_booked("Dr. Test", slot_start, bookings)
        assert is_slot_booked("Dr. Test", slot_start.add(minutes=15), bookings)

    def test_same_day_predicate_is_swappable(self, make_booking):
        slot_start = pendulum.datetime(2025, 1, 5, 22, 0, tz="UTC")
        bookings = [make_booking("2025-01-05T22:00:00Z")]

        assert not is_slot_booked("Dr. Test", slot_start, bookings, same_day=lambda a, b: False)

    def test_bad_booking_for_doctor_raises(self, make_booking):
        """Records built in code are not validated; a bad start still surfaces."""
        slot_start = pendulum.datetime(2025, 1, 5, 22, 0, tz="UTC")

        with pytest.raises(DataError):
            is_slot_booked("Dr. Test", slot_start, [make_booking("garbage")])

    def test_same_reference_day(self):
        late = pendulum.datetime(2025, 1, 5, 23, 30, tz="UTC")
        early = pendulum.datetime(2025, 1, 6, 0, 30, tz="UTC")

        assert not same_reference_day(late, early)
        assert same_reference_day(late, early, "Australia/Sydney")


class TestBuildSchedule:
    """Tests for grouping a doctor's slots by weekday."""

    def test_groups_by_day(self, sydney_doctor, week_anchor):
        schedule = SlotCalculator().build_schedule(sydney_doctor, week_anchor)

        assert set(schedule) == {"Monday", "Tuesday"}
        assert len(schedule["Monday"]) == 2
        assert len(schedule["Tuesday"]) == 4

    def test_no_availability(self, week_anchor):
        doctor = Doctor(id="doctor-1", name="Dr. Test", timezone="Australia/Sydney", availability=())

        assert SlotCalculator().build_schedule(doctor, week_anchor) == {}

    def test_days_without_slots_are_absent(self, week_anchor):
        doctor = Doctor(
            id="doctor-1",
            name="Dr. Test",
            timezone="Australia/Sydney",
            availability=(
                _window(" 9:00AM", "10:00AM"),
                _window(" 9:00AM", " 9:10AM", day="Wednesday"),
                _window(" 9:00AM", "10:00AM", day="Someday"),
            ),
        )

        schedule = SlotCalculator().build_schedule(doctor, week_anchor)

        assert list(schedule) == ["Monday"]

    def test_later_window_for_same_day_wins(self, week_anchor):
        doctor = Doctor(
            id="doctor-1",
            name="Dr. Test",
            timezone="Australia/Sydney",
            availability=(
                _window(" 9:00AM", "10:00AM"),
                _window(" 2:00PM", " 3:30PM"),
            ),
        )

        schedule = SlotCalculator().build_schedule(doctor, week_anchor)

        assert len(schedule["Monday"]) == 3
        assert schedule["Monday"][0].start.in_timezone("Australia/Sydney").hour == 14

    def test_bookings_applied_across_days(self, sydney_doctor, week_anchor, make_booking):
        # Tuesday 10:00 Sydney
        bookings = [make_booking("2025-01-06T23:00:00.000Z")]

        schedule = SlotCalculator().build_schedule(sydney_doctor, week_anchor, bookings)

        assert all(slot.is_available for slot in schedule["Monday"])
        assert [slot.is_available for slot in schedule["Tuesday"]] == [True, True, False, True]

    def test_ordered_days(self, sydney_doctor, week_anchor):
        schedule = SlotCalculator().build_schedule(sydney_doctor, week_anchor)
        reversed_schedule = dict(reversed(list(schedule.items())))

        assert [day for day, _ in ordered_days(reversed_schedule)] == ["Monday", "Tuesday"]


class TestWeekStart:
    """Tests for the Monday week anchor."""

    @pytest.mark.parametrize("day", range(6, 13))
    def test_always_monday(self, day):
        now = pendulum.datetime(2025, 1, day, 15, 45, tz="Europe/Berlin")

        anchor = week_start(now)

        assert anchor == pendulum.date(2025, 1, 6)
        assert anchor.weekday() == 0

    def test_defaults_to_current_time(self):
        assert week_start().weekday() == 0
