"""
Adapters layer - External integrations (availability feed, booking storage).
"""

from .booking_store import BookingStore, InMemoryBookingStore, JsonFileBookingStore
from .directory_client import DirectoryClient, group_doctors
from .mock_directory_client import MockDirectoryClient

__all__ = [
    "BookingStore",
    "DirectoryClient",
    "InMemoryBookingStore",
    "JsonFileBookingStore",
    "MockDirectoryClient",
    "group_doctors",
]
