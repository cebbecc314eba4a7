"""
Civil time parsing and timezone resolution.

A doctor's availability is published as loosely formatted 12-hour strings
(" 9:00AM", "11:00AM") plus an IANA timezone. These helpers turn such a
string into an hour/minute pair and then into an absolute UTC instant for a
given calendar date, using the doctor's zone and never the local one.
"""

import re
from dataclasses import dataclass
from datetime import date

import pendulum
from pendulum import DateTime

from .exceptions import ParseError, TimezoneError

_LETTERS = re.compile(r"[A-Za-z]")


@dataclass(frozen=True)
class CivilTime:
    """A wall-clock time of day in 24-hour form, not yet tied to a timezone."""
    hour: int
    minute: int

    def __post_init__(self):
        if not 0 <= self.hour <= 23:
            raise ParseError(f"Hour must be between 0 and 23, got {self.hour}")
        if not 0 <= self.minute <= 59:
            raise ParseError(f"Minute must be between 0 and 59, got {self.minute}")


def parse_civil_time(text: str) -> CivilTime:
    """
    Parse a 12-hour time string such as " 9:00AM" or "1:30 pm".

    The AM/PM marker may appear anywhere in the string, so trailing text such
    as a zone abbreviation ("9:00PM AEST") is ignored. PM wins when both
    appear. Strings without a marker are taken as 24-hour times.

    Raises:
        ParseError: If the string has no usable H:MM part
    """
    if not isinstance(text, str):
        raise ParseError(f"Time must be a string, got {type(text).__name__}")

    trimmed = text.strip()
    upper = trimmed.upper()
    is_pm = "PM" in upper
    is_am = not is_pm and "AM" in upper

    time_part = _LETTERS.sub("", trimmed).strip()
    parts = time_part.split(":")
    if len(parts) != 2:
        raise ParseError(f"Expected a time like '9:00AM', got {text!r}")

    hour_text, minute_text = (part.strip() for part in parts)
    if not hour_text.isdigit() or not minute_text.isdigit():
        raise ParseError(f"Expected a time like '9:00AM', got {text!r}")

    hour = int(hour_text)
    minute = int(minute_text)

    if (is_am or is_pm) and not 1 <= hour <= 12:
        raise ParseError(f"12-hour time must have an hour between 1 and 12, got {text!r}")

    if is_pm and hour != 12:
        hour += 12
    elif is_am and hour == 12:
        hour = 0

    return CivilTime(hour=hour, minute=minute)


def load_timezone(name: str) -> pendulum.Timezone:
    """
    Look up an IANA timezone by name.

    Raises:
        TimezoneError: If the name is empty or unknown
    """
    if not isinstance(name, str) or not name.strip():
        raise TimezoneError(f"Timezone must be a non-empty IANA name, got {name!r}")

    try:
        return pendulum.timezone(name)
    except (ValueError, KeyError) as exc:
        raise TimezoneError(f"Unknown timezone: {name!r}") from exc


def resolve_zoned_time(
    day: date,
    civil_time: CivilTime,
    timezone: str,
) -> DateTime:
    """
    Interpret ``civil_time`` on ``day`` as local time in ``timezone``.

    The zone's offset for that date is applied (including daylight saving)
    and the resulting instant is returned in UTC.

    Raises:
        TimezoneError: If the timezone is unknown
    """
    tz = load_timezone(timezone)
    local = pendulum.datetime(
        day.year,
        day.month,
        day.day,
        civil_time.hour,
        civil_time.minute,
        tz=tz,
    )
    return local.in_timezone("UTC")


def resolve_time_text(day: date, text: str, timezone: str) -> DateTime:
    """Parse ``text`` and resolve it on ``day`` in ``timezone``."""
    return resolve_zoned_time(day, parse_civil_time(text), timezone)

