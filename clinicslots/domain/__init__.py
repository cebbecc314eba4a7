"""
Domain layer - Pure business logic without external dependencies.
"""

from .civil_time import CivilTime, parse_civil_time, resolve_zoned_time
from .models import AvailabilityRecord, BookingRecord, Doctor, TimeRange, TimeSlot
from .slot_calculator import SlotCalculator, Tessellation, is_slot_booked, week_start

__all__ = [
    "AvailabilityRecord",
    "BookingRecord",
    "CivilTime",
    "Doctor",
    "SlotCalculator",
    "Tessellation",
    "TimeRange",
    "TimeSlot",
    "is_slot_booked",
    "parse_civil_time",
    "resolve_zoned_time",
    "week_start",
]
