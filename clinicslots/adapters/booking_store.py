"""
Local persistence of appointment bookings.

Read failures are softened at this boundary: a store that cannot be read
lists no bookings instead of raising, so browsing keeps working. Writes
refuse to touch a file they could not read.
"""

import json
import logging
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, List

from ..domain.exceptions import BookingStoreError, DataError
from ..domain.models import BookingRecord, parse_instant

logger = logging.getLogger(__name__)


class BookingStore(ABC):
    """Single-client booking storage; the last write wins."""

    @abstractmethod
    def list(self) -> List[BookingRecord]:
        raise NotImplementedError

    @abstractmethod
    def append(self, record: BookingRecord) -> BookingRecord:
        raise NotImplementedError

    @abstractmethod
    def remove(self, booking_id: str) -> bool:
        raise NotImplementedError

    def is_slot_booked(self, doctor_name: str, start_time: str) -> bool:
        """
        Check whether the doctor already has a booking starting at ``start_time``.

        Start times are compared as instants, so differently formatted ISO
        strings for the same moment match.
        """
        start = parse_instant(start_time)
        for booking in self.list():
            if booking.doctor_name != doctor_name:
                continue
            try:
                if booking.start_instant() == start:
                    return True
            except DataError:
                logger.warning("Ignoring booking %s with invalid start time %r", booking.id, booking.start_time)
        return False


class InMemoryBookingStore(BookingStore):
    def __init__(self) -> None:
        self._records: List[BookingRecord] = []

    def list(self) -> List[BookingRecord]:
        return list(self._records)

    def append(self, record: BookingRecord) -> BookingRecord:
        self._records.append(record)
        return record

    def remove(self, booking_id: str) -> bool:
        remaining = [record for record in self._records if record.id != booking_id]
        removed = len(remaining) != len(self._records)
        self._records = remaining
        return removed


class JsonFileBookingStore(BookingStore):
    """
    Bookings kept as a JSON array in a single file.

    Rows that do not form a valid booking are skipped when listing but kept
    in the file, so appending or removing never drops them.
    """

    def __init__(self, path: Path) -> None:
        self.path = Path(path)

    def list(self) -> List[BookingRecord]:
        try:
            rows = self._read_rows()
        except BookingStoreError as e:
            logger.error("%s", e)
            return []

        bookings: List[BookingRecord] = []
        for index, row in enumerate(rows):
            try:
                bookings.append(BookingRecord.from_dict(row))
            except DataError as e:
                logger.warning("Skipping booking #%d in %s: %s", index, self.path, e)
        return bookings

    def append(self, record: BookingRecord) -> BookingRecord:
        rows = self._read_rows()
        rows.append(record.to_dict())
        try:
            self._write(rows)
        except OSError as e:
            logger.error("Error saving booking to %s: %s", self.path, e)
            raise BookingStoreError("Failed to save booking") from e
        return record

    def remove(self, booking_id: str) -> bool:
        rows = self._read_rows()
        remaining = [
            row for row in rows
            if not (isinstance(row, dict) and row.get("id") == booking_id)
        ]
        if len(remaining) == len(rows):
            return False

        try:
            self._write(remaining)
        except OSError as e:
            logger.error("Error removing booking %s from %s: %s", booking_id, self.path, e)
            return False
        return True

    def _read_rows(self) -> List[Any]:
        """
        Return the raw rows of the bookings file.

        Raises:
            BookingStoreError: If the file exists but is not a readable JSON array
        """
        if not self.path.exists():
            return []

        try:
            with open(self.path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, ValueError) as e:
            raise BookingStoreError(f"Error reading bookings from {self.path}: {e}") from e

        if not isinstance(data, list):
            raise BookingStoreError(
                f"Error reading bookings from {self.path}: expected a JSON array, got {type(data).__name__}"
            )
        return data

    def _write(self, rows: List[Any]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = self.path.with_suffix(self.path.suffix + ".tmp")
        with open(tmp_path, "w", encoding="utf-8") as f:
            json.dump(rows, f, indent=2)
        tmp_path.replace(self.path)
