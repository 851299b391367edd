"""
Mock booking store for running without the hosted backend.
"""

import json
from pathlib import Path
from typing import Any, Dict, List, Optional

import pendulum

from ..domain.exceptions import StorageError
from ..domain.models import Booking
from .booking_store import BookingQuery, parse_duration_minutes

DEFAULT_DATA_FILE = Path(__file__).parent / "mock_bookings.json"


class MockBookingStore:
    """
    Store that serves bookings from a JSON file or an in-memory list.

    Each record looks like::

        {"userId": "...", "date": "<ISO instant>", "status": "confirmed", "duration": 60}

    ``duration`` may be null or absent. Records are filtered with the same
    rules as the real store.
    """

    def __init__(
        self,
        records: Optional[List[Dict[str, Any]]] = None,
        data_file: Optional[Path] = None,
    ):
        if records is not None:
            self.records = list(records)
        else:
            self.records = self._load_records(data_file or DEFAULT_DATA_FILE)
        self.last_query: Optional[BookingQuery] = None

    @staticmethod
    def _load_records(data_file: Path) -> List[Dict[str, Any]]:
        """Load mock booking records from a JSON file."""
        if not data_file.exists():
            return []

        with open(data_file, "r", encoding="utf-8") as f:
            return json.load(f)

    async def fetch_bookings(self, query: BookingQuery) -> List[Booking]:
        return self.get_bookings(query)

    def get_bookings(self, query: BookingQuery) -> List[Booking]:
        """Return bookings of the queried user that start within the queried day."""
        self.last_query = query
        timezone = query.day_start.timezone_name
        bookings: List[Booking] = []

        for record in self.records:
            if str(record.get("userId")) != query.user_id:
                continue
            if record.get("status") == query.excluded_status:
                continue

            try:
                start = pendulum.parse(record["date"], tz=timezone)
            except (KeyError, TypeError, ValueError) as e:
                raise StorageError(f"Invalid mock booking {record!r}: {e}") from e

            if query.day_start <= start <= query.day_end:
                bookings.append(
                    Booking(
                        start=start.in_timezone(timezone),
                        duration_minutes=parse_duration_minutes(record.get("duration"))
                    )
                )

        return bookings
