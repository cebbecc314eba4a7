"""
HTTP client for the doctor availability directory.
"""

import logging
from typing import Any, Dict, List

import requests

from ..domain.exceptions import DataError, DirectoryError
from ..domain.models import AvailabilityRecord, Doctor

logger = logging.getLogger(__name__)


def parse_availability_payload(payload: Any) -> List[AvailabilityRecord]:
    """
    Convert the directory feed into availability records.

    Feed format:
    [
        {
            "name": "Dr. Jane Doe",
            "timezone": "Australia/Sydney",
            "day_of_week": "Monday",
            "available_at": " 9:00AM",
            "available_until": "5:30PM"
        }
    ]

    Malformed entries are logged and skipped; the rest of the feed is kept.

    Raises:
        DataError: If the payload is not a list
    """
    if not isinstance(payload, list):
        raise DataError(f"Availability feed must be a JSON array, got {type(payload).__name__}")

    records: List[AvailabilityRecord] = []
    for index, entry in enumerate(payload):
        try:
            records.append(AvailabilityRecord.from_payload(entry))
        except DataError as e:
            logger.warning("Skipping availability entry #%d: %s", index, e)
    return records


def group_doctors(records: List[AvailabilityRecord]) -> List[Doctor]:
    """
    Group availability records by doctor name.

    Doctors keep the order in which they first appear in the feed, get ids
    ``doctor-1``, ``doctor-2``, ... and take the timezone of their first record.
    """
    grouped: Dict[str, List[AvailabilityRecord]] = {}

    for record in records:
        grouped.setdefault(record.doctor_name, []).append(record)

    return [
        Doctor(
            id=f"doctor-{index}",
            name=name,
            timezone=availability[0].timezone,
            availability=tuple(availability),
        )
        for index, (name, availability) in enumerate(grouped.items(), 1)
    ]


class DirectoryClient:
    """
    Fetches doctor availability from a JSON feed over HTTP.

    No retry or caching happens here; every call hits the feed.
    """

    def __init__(self, url: str, timeout_seconds: float = 10):
        self.url = url
        self.timeout_seconds = timeout_seconds

    def fetch_availability(self) -> List[AvailabilityRecord]:
        """
        Fetch the raw availability records.

        Raises:
            DirectoryError: If the request fails or returns invalid JSON
            DataError: If the JSON has an unexpected shape
        """
        logger.debug("Fetching doctor availability from %s", self.url)

        try:
            response = requests.get(self.url, timeout=self.timeout_seconds)
            response.raise_for_status()
            payload = response.json()
        except requests.exceptions.RequestException as e:
            raise DirectoryError(f"Failed to fetch doctor availability: {e}") from e
        except ValueError as e:
            raise DirectoryError(f"Failed to fetch doctor availability: invalid JSON ({e})") from e

        records = parse_availability_payload(payload)
        logger.info("Fetched %d availability record(s)", len(records))
        return records

    def get_doctors(self) -> List[Doctor]:
        """Fetch availability and group it by doctor."""
        return group_doctors(self.fetch_availability())
