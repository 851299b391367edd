"""
Adapters layer - External integrations (hosted booking storage).
"""

from .booking_store import BookingQuery, SupabaseBookingStore
from .mock_booking_store import MockBookingStore

__all__ = ["BookingQuery", "SupabaseBookingStore", "MockBookingStore"]
