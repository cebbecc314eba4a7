"""
Human-readable rendering of slots and bookings.
"""

from typing import Optional

from .civil_time import load_timezone
from .models import BookingRecord, TimeSlot


def format_time_slot(slot: TimeSlot, timezone: Optional[str] = None) -> str:
    """
    Format a slot as "9:00 AM - 9:30 AM" in the given timezone.

    Defaults to the doctor's timezone the slot was generated in.
    """
    tz = load_timezone(timezone or slot.timezone)
    start = slot.start.in_timezone(tz).format("h:mm A")
    end = slot.end.in_timezone(tz).format("h:mm A")
    return f"{start} - {end}"


def format_slot_date(slot: TimeSlot, timezone: Optional[str] = None) -> str:
    """Format the slot's local date, e.g. "Monday, 06 Jan 2025"."""
    tz = load_timezone(timezone or slot.timezone)
    return slot.start.in_timezone(tz).format("dddd, DD MMM YYYY")


def format_booking(booking: BookingRecord, timezone: Optional[str] = None) -> str:
    """
    Format a booking for listings.

    Format: Monday, 06 Jan 2025 | 9:00 AM - 9:30 AM (Australia/Sydney)
    """
    zone = timezone or booking.doctor_timezone
    tz = load_timezone(zone)
    start = booking.start_instant().in_timezone(tz)
    end = booking.end_instant().in_timezone(tz)
    return f"{start.format('dddd, DD MMM YYYY')} | {start.format('h:mm A')} - {end.format('h:mm A')} ({zone})"
