"""
Domain models for doctor availability, time slots and bookings.
"""

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Dict, Mapping, Tuple

import pendulum
from pendulum import DateTime

from .exceptions import DataError


WEEKDAYS: Tuple[str, ...] = (
    "Monday",
    "Tuesday",
    "Wednesday",
    "Thursday",
    "Friday",
    "Saturday",
    "Sunday",
)

# Day name -> offset from the Monday week anchor
WEEKDAY_OFFSETS: Mapping[str, int] = MappingProxyType(
    {name: offset for offset, name in enumerate(WEEKDAYS)}
)


def parse_instant(value: str) -> DateTime:
    """
    Parse an ISO 8601 instant string into a UTC pendulum DateTime.

    Raises:
        DataError: If the value is not a parseable date-time
    """
    if not isinstance(value, str) or not value.strip():
        raise DataError(f"Expected an ISO 8601 instant, got {value!r}")

    try:
        parsed = pendulum.parse(value)
    except ValueError as exc:
        raise DataError(f"Could not parse instant {value!r}: {exc}") from exc

    if not isinstance(parsed, DateTime):
        raise DataError(f"Could not parse instant {value!r}: not a date-time")

    return parsed.in_timezone("UTC")


@dataclass(frozen=True)
class AvailabilityRecord:
    """
    One contiguous availability window of one doctor on one weekday.

    Time texts are kept exactly as the directory feed provides them
    (e.g. " 9:00AM") and only interpreted when slots are generated.
    """
    doctor_name: str
    timezone: str
    day_of_week: str
    start_time_text: str
    end_time_text: str

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> "AvailabilityRecord":
        """
        Build a record from one row of the directory feed.

        Expected keys: name, timezone, day_of_week, available_at, available_until.

        Raises:
            DataError: If the row is not a mapping or a field is missing
        """
        if not isinstance(payload, Mapping):
            raise DataError(f"Availability entry must be an object, got {type(payload).__name__}")

        fields = {
            "doctor_name": "name",
            "timezone": "timezone",
            "day_of_week": "day_of_week",
            "start_time_text": "available_at",
            "end_time_text": "available_until",
        }

        values: Dict[str, str] = {}
        for attribute, key in fields.items():
            value = payload.get(key)
            if not isinstance(value, str):
                raise DataError(f"Availability entry field '{key}' must be a string, got {value!r}")
            values[attribute] = value

        return cls(**values)


@dataclass(frozen=True)
class Doctor:
    """A doctor with all of their weekly availability windows."""
    id: str
    name: str
    timezone: str
    availability: Tuple[AvailabilityRecord, ...] = field(default_factory=tuple)


@dataclass(frozen=True)
class TimeRange:
    """
    Represents an immutable time range with start and end datetime.

    Invariant: start must be before end.
    """
    start: DateTime
    end: DateTime

    def __post_init__(self):
        if self.start >= self.end:
            raise ValueError(f"Start time {self.start} must be before end time {self.end}")

    def duration_minutes(self) -> int:
        """Return the duration in minutes."""
        return int((self.end - self.start).total_seconds() / 60)


@dataclass(frozen=True)
class TimeSlot:
    """
    A bookable slot of a doctor's availability window.

    ``start`` and ``end`` are absolute instants in UTC; ``timezone`` is the
    doctor's zone the slot was generated in.
    """
    start: DateTime
    end: DateTime
    day_of_week: str
    timezone: str
    is_available: bool = True

    @property
    def time_range(self) -> TimeRange:
        return TimeRange(start=self.start, end=self.end)

    def duration_minutes(self) -> int:
        """Return the duration in minutes."""
        return self.time_range.duration_minutes()


@dataclass(frozen=True)
class BookingRecord:
    """
    A persisted appointment booking.

    Start and end times are ISO 8601 instant strings, exactly as stored.
    """
    id: str
    doctor_name: str
    doctor_timezone: str
    start_time: str
    end_time: str
    day_of_week: str
    created_at: str

    # attribute -> key in the stored JSON document
    _KEYS = {
        "id": "id",
        "doctor_name": "doctorName",
        "doctor_timezone": "doctorTimezone",
        "start_time": "startTime",
        "end_time": "endTime",
        "day_of_week": "dayOfWeek",
        "created_at": "createdAt",
    }

    def start_instant(self) -> DateTime:
        """Return the booking start as a UTC instant."""
        return parse_instant(self.start_time)

    def end_instant(self) -> DateTime:
        """Return the booking end as a UTC instant."""
        return parse_instant(self.end_time)

    def to_dict(self) -> Dict[str, str]:
        return {key: getattr(self, attribute) for attribute, key in self._KEYS.items()}

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "BookingRecord":
        """
        Build a booking from its stored JSON document.

        Raises:
            DataError: If the document is not a mapping, a key is missing or
                the start or end time is not an ISO 8601 instant
        """
        if not isinstance(data, Mapping):
            raise DataError(f"Booking must be an object, got {type(data).__name__}")

        missing = [key for key in cls._KEYS.values() if not isinstance(data.get(key), str)]
        if missing:
            raise DataError(f"Booking is missing field(s): {', '.join(missing)}")

        booking = cls(**{attribute: data[key] for attribute, key in cls._KEYS.items()})
        booking.start_instant()
        booking.end_instant()
        return booking
