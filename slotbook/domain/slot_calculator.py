"""
Core business logic for calculating available appointment slots.

This is the heart of the application - pure domain logic without any
external dependencies (no API calls, no database, no I/O).
"""

import logging
from typing import List, Optional, Sequence

from .exceptions import ConfigurationError
from .models import (
    MINUTES_PER_DAY,
    Booking,
    DayInterval,
    DayWindow,
    TimeSlot,
    minutes_to_time_str,
    parse_day,
)

logger = logging.getLogger(__name__)

DEFAULT_GRANULARITY_MINUTES = 30
DEFAULT_DURATION_MINUTES = 60


def validate_granularity(granularity_minutes: int) -> int:
    """Ensure the slot size is a positive divisor of a day."""
    if (
        isinstance(granularity_minutes, bool)
        or not isinstance(granularity_minutes, int)
        or granularity_minutes <= 0
        or MINUTES_PER_DAY % granularity_minutes != 0
    ):
        raise ConfigurationError(
            f"Slot granularity must be a positive divisor of {MINUTES_PER_DAY} minutes, "
            f"got {granularity_minutes!r}"
        )
    return granularity_minutes


def validate_default_duration(duration_minutes: int) -> int:
    """Ensure the fallback booking duration is a positive number of minutes."""
    if isinstance(duration_minutes, bool) or not isinstance(duration_minutes, int) or duration_minutes <= 0:
        raise ConfigurationError(
            f"Default booking duration must be a positive number of minutes, got {duration_minutes!r}"
        )
    return duration_minutes


def generate_candidate_slots(granularity_minutes: int = DEFAULT_GRANULARITY_MINUTES) -> List[str]:
    """
    Partition a whole day into "HH:MM" slot start times.

    Example (granularity 30): ["00:00", "00:30", ..., "23:30"]
    """
    validate_granularity(granularity_minutes)
    return [
        minutes_to_time_str(minute)
        for minute in range(0, MINUTES_PER_DAY, granularity_minutes)
    ]


def compute_available_slots(
    day,
    bookings: Sequence[Booking],
    granularity_minutes: int = DEFAULT_GRANULARITY_MINUTES,
    default_duration_minutes: int = DEFAULT_DURATION_MINUTES,
    requested_duration_minutes: Optional[int] = None,
    timezone: str = "UTC",
) -> List[str]:
    """
    Return the candidate slots of ``day`` that no booking overlaps.

    Args:
        day: Calendar day (date, datetime or ISO string)
        bookings: Active bookings for that day; cancelled ones are filtered by the caller
        granularity_minutes: Slot size
        default_duration_minutes: Duration assumed for bookings without one
        requested_duration_minutes: When given, a slot is only kept if the whole
            requested appointment fits before the next booking
        timezone: Zone in which the day and the booking times are read

    Returns:
        Available "HH:MM" start times in ascending order

    Raises:
        ConfigurationError: If granularity or default duration is invalid
        InvalidInputError: If ``day`` is malformed
    """
    calculator = SlotCalculator(
        granularity_minutes=granularity_minutes,
        default_duration_minutes=default_duration_minutes,
        timezone=timezone,
    )
    return calculator.available_slots(
        day,
        bookings,
        requested_duration_minutes=requested_duration_minutes,
    )


class SlotCalculator:
    """
    Calculates bookable slots of a day from the bookings already placed on it.

    Algorithm:
    1. Partition the day into candidate slots at the configured granularity
    2. Turn every booking into an occupied interval (fallback duration if missing)
    3. Drop each candidate whose own interval overlaps any occupied interval
    4. Return the survivors in their original order
    """

    def __init__(
        self,
        granularity_minutes: int = DEFAULT_GRANULARITY_MINUTES,
        default_duration_minutes: int = DEFAULT_DURATION_MINUTES,
        timezone: str = "UTC",
    ):
        self.granularity_minutes = validate_granularity(granularity_minutes)
        self.default_duration_minutes = validate_default_duration(default_duration_minutes)
        self.timezone = timezone

    def candidate_slots(self) -> List[str]:
        """Full partition of a day; independent of any booking."""
        return generate_candidate_slots(self.granularity_minutes)

    def available_slots(
        self,
        day,
        bookings: Sequence[Booking],
        requested_duration_minutes: Optional[int] = None,
    ) -> List[str]:
        """
        Filter the candidate slots of ``day`` against the given bookings.

        Only one granularity window is checked per slot unless
        ``requested_duration_minutes`` asks for a longer lookahead. A
        requested appointment must also end by midnight.
        """
        window = DayWindow(day=parse_day(day, self.timezone), timezone=self.timezone)
        occupied = self._occupied_intervals(window, bookings)
        span = self._slot_span(requested_duration_minutes)

        available: List[str] = []
        for minute in range(0, MINUTES_PER_DAY, self.granularity_minutes):
            if minute + span > MINUTES_PER_DAY:
                break
            slot = DayInterval(start=minute, end=minute + span)
            if not any(slot.overlaps(busy) for busy in occupied):
                available.append(minutes_to_time_str(minute))

        return available

    def booked_slots(self, day, bookings: Sequence[Booking]) -> List[TimeSlot]:
        """
        Render bookings as time slots for display, ordered by start.
        """
        window = DayWindow(day=parse_day(day, self.timezone), timezone=self.timezone)
        slots: List[TimeSlot] = []

        for booking in sorted(bookings, key=lambda b: b.start):
            local_start = window.minute_offset(booking.start) % MINUTES_PER_DAY
            slots.append(
                TimeSlot(
                    time=minutes_to_time_str(local_start),
                    duration_minutes=booking.effective_duration(self.default_duration_minutes),
                )
            )

        return slots

    def _slot_span(self, requested_duration_minutes: Optional[int]) -> int:
        """Length of the interval each candidate must keep free."""
        if requested_duration_minutes is None:
            return self.granularity_minutes
        return max(requested_duration_minutes, self.granularity_minutes)

    def _occupied_intervals(
        self,
        window: DayWindow,
        bookings: Sequence[Booking],
    ) -> List[DayInterval]:
        """
        Convert bookings into intervals relative to the window's midnight.
        """
        intervals: List[DayInterval] = []

        for booking in bookings:
            if booking.effective_duration(self.default_duration_minutes) != booking.duration_minutes:
                logger.debug(
                    "Booking at %s has no usable duration (%r), assuming %d minutes",
                    booking.start,
                    booking.duration_minutes,
                    self.default_duration_minutes,
                )
            intervals.append(window.interval_for(booking, self.default_duration_minutes))

        return intervals
