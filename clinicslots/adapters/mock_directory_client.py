"""
Mock doctor directory for running without network access.
"""

import json
import logging
from pathlib import Path
from typing import List, Optional

from ..domain.exceptions import DataError
from ..domain.models import AvailabilityRecord, Doctor
from .directory_client import group_doctors, parse_availability_payload

logger = logging.getLogger(__name__)

DEFAULT_DATA_FILE = Path(__file__).parent / "mock_availability.json"


class MockDirectoryClient:
    """
    Client that serves availability from a local JSON file.

    The file uses the same format as the live feed, so this client can
    stand in for ``DirectoryClient`` in the CLI (``--mock``) and in tests.
    """

    def __init__(self, data_file: Optional[Path] = None):
        """
        Initialize the mock client.

        Args:
            data_file: JSON file to read; defaults to the bundled sample data
        """
        self.data_file = data_file or DEFAULT_DATA_FILE

    def fetch_availability(self) -> List[AvailabilityRecord]:
        """
        Load availability records from the data file.

        Raises:
            DataError: If the file is missing or malformed
        """
        logger.debug("Loading mock availability from %s", self.data_file)

        try:
            with open(self.data_file, "r", encoding="utf-8") as f:
                payload = json.load(f)
        except (OSError, ValueError) as e:
            raise DataError(f"Could not read mock availability from {self.data_file}: {e}") from e

        return parse_availability_payload(payload)

    def get_doctors(self) -> List[Doctor]:
        """Load availability and group it by doctor."""
        return group_doctors(self.fetch_availability())
