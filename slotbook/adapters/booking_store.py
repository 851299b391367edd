"""
Hosted backend (Supabase/PostgREST) client for fetching appointment bookings.
"""

import asyncio
import logging
import math
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Tuple

import pendulum
import requests
from pendulum import DateTime

from ..domain.exceptions import StorageError
from ..domain.models import Booking

logger = logging.getLogger(__name__)


def parse_duration_minutes(value: Any) -> Optional[int]:
    """
    Read a stored appointment duration as whole minutes.

    JSON numbers may arrive as floats (``90.0``); fractional minutes round
    up so the whole appointment stays blocked. ``None`` means unknown.

    Raises:
        StorageError: If the value is not a number
    """
    if value is None:
        return None
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise StorageError(f"Invalid appointment duration: {value!r}")
    if isinstance(value, float) and not math.isfinite(value):
        raise StorageError(f"Invalid appointment duration: {value!r}")
    return math.ceil(value)


@dataclass(frozen=True)
class BookingQuery:
    """
    Typed description of the bookings needed for one practitioner and one day.

    Bookings are matched on ``day_start <= start <= day_end`` and any
    booking whose status equals ``excluded_status`` is left out.
    """
    user_id: str
    day_start: DateTime
    day_end: DateTime
    excluded_status: str = "cancelled"

    def to_params(self) -> List[Tuple[str, str]]:
        """
        Render the query as PostgREST filter parameters.

        A list of pairs is used because ``date`` is filtered twice.
        """
        return [
            ("select", "date,appointment_type:appointment_type_id(duration)"),
            ("user_id", f"eq.{self.user_id}"),
            ("date", f"gte.{self.day_start.to_iso8601_string()}"),
            ("date", f"lte.{self.day_end.to_iso8601_string()}"),
            ("status", f"neq.{self.excluded_status}"),
        ]


class SupabaseBookingStore:
    """
    Client for the appointments table of the hosted backend.

    Uses the REST interface (``/rest/v1/<table>``) authenticated with the
    project API key.
    """

    REST_PATH = "/rest/v1"

    def __init__(
        self,
        base_url: str,
        api_key: str,
        table: str = "appointments",
        timeout_seconds: float = 10,
    ):
        """
        Initialize the store.

        Args:
            base_url: Project URL, e.g. https://<project>.supabase.co
            api_key: Project API key (anon or service role)
            table: Name of the appointments table
            timeout_seconds: Per-request timeout
        """
        self.base_url = base_url.rstrip("/")
        self.table = table
        self.timeout_seconds = timeout_seconds
        self.headers = {
            "apikey": api_key,
            "Authorization": f"Bearer {api_key}",
            "Accept": "application/json",
        }

    @property
    def endpoint(self) -> str:
        return f"{self.base_url}{self.REST_PATH}/{self.table}"

    async def fetch_bookings(self, query: BookingQuery) -> List[Booking]:
        """Fetch bookings without blocking the event loop."""
        return await asyncio.to_thread(self.get_bookings, query)

    def get_bookings(self, query: BookingQuery) -> List[Booking]:
        """
        Get active bookings matching the query.

        Args:
            query: Practitioner and day bounds

        Returns:
            Bookings with start instants in the query's timezone

        Raises:
            StorageError: If the request fails or a row cannot be parsed
        """
        try:
            response = requests.get(
                self.endpoint,
                headers=self.headers,
                params=query.to_params(),
                timeout=self.timeout_seconds
            )
            response.raise_for_status()
            rows = response.json()

        except requests.exceptions.RequestException as e:
            raise StorageError(f"Failed to fetch bookings for user {query.user_id}: {e}") from e
        except ValueError as e:
            raise StorageError(f"Storage returned a non-JSON response: {e}") from e

        if not isinstance(rows, list):
            raise StorageError("Storage returned an unexpected payload (expected a list of rows)")

        timezone = query.day_start.timezone_name
        bookings = [self._parse_row(row, timezone) for row in rows]

        logger.debug(
            "Fetched %d booking(s) for user %s on %s",
            len(bookings),
            query.user_id,
            query.day_start.to_date_string(),
        )
        return bookings

    def _parse_row(self, row: Dict[str, Any], timezone: str) -> Booking:
        """
        Parse one row into a Booking.

        Row format:
        {
            "date": "2024-11-25T10:00:00+00:00",
            "appointment_type": {"duration": 60}   # or null
        }

        A row that cannot be parsed is an error rather than being skipped:
        dropping it would show its time as free.
        """
        try:
            start = pendulum.parse(row["date"])
        except (KeyError, TypeError, ValueError) as e:
            raise StorageError(f"Could not parse booking row {row!r}: {e}") from e

        if not isinstance(start, DateTime):
            raise StorageError(f"Booking row has no start instant: {row!r}")

        appointment_type = row.get("appointment_type") or {}
        duration = appointment_type.get("duration") if isinstance(appointment_type, dict) else None

        return Booking(
            start=start.in_timezone(timezone),
            duration_minutes=parse_duration_minutes(duration)
        )
