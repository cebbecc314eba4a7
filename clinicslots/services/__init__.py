"""
Service layer helpers that orchestrate adapters and domain logic.
"""

from .booking_service import BookingService, DirectoryProtocol

__all__ = ["BookingService", "DirectoryProtocol"]
