"""
Domain layer - Pure business logic without external dependencies.
"""

from .exceptions import ConfigurationError, InvalidInputError, SlotbookError, StorageError
from .models import Booking, DayInterval, DayWindow, TimeSlot, parse_day
from .slot_calculator import SlotCalculator, compute_available_slots, generate_candidate_slots

__all__ = [
    "Booking",
    "DayInterval",
    "DayWindow",
    "TimeSlot",
    "parse_day",
    "SlotCalculator",
    "compute_available_slots",
    "generate_candidate_slots",
    "SlotbookError",
    "ConfigurationError",
    "InvalidInputError",
    "StorageError",
]
