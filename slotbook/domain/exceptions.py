"""
Domain-specific exception hierarchy for the slot availability application.
"""


class SlotbookError(Exception):
    """Base class for all application-level errors."""


class ConfigurationError(SlotbookError):
    """Raised when the engine or the application is misconfigured."""


class InvalidInputError(SlotbookError):
    """Raised when a request carries a missing or malformed value."""


class StorageError(SlotbookError):
    """Raised when bookings cannot be fetched or parsed from storage."""
