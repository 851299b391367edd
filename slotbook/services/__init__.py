"""
Service layer helpers that orchestrate adapters and domain logic.
"""

from .availability import AvailabilityReport, AvailabilityService, BookingStoreProtocol

__all__ = ["AvailabilityReport", "AvailabilityService", "BookingStoreProtocol"]
