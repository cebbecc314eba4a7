"""
Domain-specific exception hierarchy for the clinic slot booking application.
"""


class ClinicSlotsError(Exception):
    """Base class for all application-level errors."""


class ParseError(ClinicSlotsError):
    """Raised when a civil time string such as ' 9:00AM' cannot be parsed."""


class TimezoneError(ClinicSlotsError):
    """Raised when a timezone identifier is not known to the timezone database."""


class DataError(ClinicSlotsError):
    """Raised when availability or booking payloads are malformed."""


class DirectoryError(ClinicSlotsError):
    """Raised when the doctor directory cannot be fetched."""


class BookingStoreError(ClinicSlotsError):
    """Raised when a booking cannot be persisted."""


class BookingConflictError(ClinicSlotsError):
    """Raised when a slot is already booked for the doctor."""


class DoctorNotFoundError(ClinicSlotsError):
    """Raised when a doctor name is not present in the directory."""
