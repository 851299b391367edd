"""
Application services for computing a practitioner's bookable slots.

The service coordinates fetching bookings via a storage adapter and
delegates the actual availability calculation to the domain-level
``SlotCalculator``. The HTTP layer and the CLI stay thin, and the storage
dependency can be replaced in tests through a simple protocol.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import List, Optional, Protocol

from pendulum import Date

from ..adapters.booking_store import BookingQuery
from ..domain.exceptions import InvalidInputError
from ..domain.models import Booking, DayWindow, TimeSlot, parse_day
from ..domain.slot_calculator import SlotCalculator

logger = logging.getLogger(__name__)


class BookingStoreProtocol(Protocol):
    """Protocol describing the storage behaviour needed by the service."""

    async def fetch_bookings(self, query: BookingQuery) -> List[Booking]:
        """Return the non-cancelled bookings matching the query."""


@dataclass
class AvailabilityReport:
    """Bookings and free slots of one day."""
    date: Date
    booked_slots: List[TimeSlot] = field(default_factory=list)
    available_slots: List[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "date": self.date.to_date_string(),
            "bookedSlots": [slot.to_dict() for slot in self.booked_slots],
            "availableSlots": list(self.available_slots),
        }


class AvailabilityService:
    """
    Orchestrates booking retrieval and slot calculation.
    """

    def __init__(
        self,
        booking_store: BookingStoreProtocol,
        slot_calculator: SlotCalculator,
    ) -> None:
        self._booking_store = booking_store
        self._slot_calculator = slot_calculator

    @property
    def timezone(self) -> str:
        return self._slot_calculator.timezone

    def build_query(self, user_id: str, day) -> BookingQuery:
        """Describe the bookings of ``user_id`` from start to end of ``day``."""
        if not user_id or not str(user_id).strip():
            raise InvalidInputError("userId is required")

        window = DayWindow(day=parse_day(day, self.timezone), timezone=self.timezone)
        return BookingQuery(
            user_id=str(user_id).strip(),
            day_start=window.start,
            day_end=window.end,
        )

    async def fetch_bookings(self, user_id: str, day) -> List[Booking]:
        """
        Fetch the active bookings of a day.

        Storage errors propagate unchanged: an empty list here would
        present the whole day as free.
        """
        query = self.build_query(user_id, day)
        return await self._booking_store.fetch_bookings(query)

    async def get_availability(
        self,
        user_id: str,
        day,
        requested_duration_minutes: Optional[int] = None,
    ) -> AvailabilityReport:
        """
        Retrieve bookings and compute the day's booked and available slots.
        """
        target_day = parse_day(day, self.timezone)
        bookings = await self.fetch_bookings(user_id, target_day)

        report = AvailabilityReport(
            date=target_day,
            booked_slots=self._slot_calculator.booked_slots(target_day, bookings),
            available_slots=self._slot_calculator.available_slots(
                target_day,
                bookings,
                requested_duration_minutes=requested_duration_minutes,
            ),
        )

        logger.info(
            "Availability for user %s on %s: %d booking(s), %d free slot(s)",
            user_id,
            report.date.to_date_string(),
            len(bookings),
            len(report.available_slots),
        )
        return report
