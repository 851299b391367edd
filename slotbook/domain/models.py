"""
Domain models for bookings, day windows and slot calculations.
"""

from dataclasses import dataclass
from datetime import date as date_type
from datetime import datetime
from typing import Optional

import pendulum
from pendulum import Date, DateTime

from .exceptions import InvalidInputError

MINUTES_PER_DAY = 24 * 60


def minutes_to_time_str(minutes: int) -> str:
    """Convert minutes since midnight to a zero-padded "HH:MM" string."""
    return f"{minutes // 60:02d}:{minutes % 60:02d}"


def parse_day(value, timezone: str = "UTC") -> Date:
    """
    Normalise a calendar day.

    Accepts a ``date``, a ``datetime`` (taken in ``timezone``) or an ISO 8601
    string. Anything else raises InvalidInputError.
    """
    if isinstance(value, datetime):
        return pendulum.instance(value, tz=timezone).in_timezone(timezone).date()

    if isinstance(value, date_type):
        return pendulum.date(value.year, value.month, value.day)

    if not isinstance(value, str) or not value.strip():
        raise InvalidInputError(f"Invalid date: {value!r}")

    try:
        parsed = pendulum.parse(value.strip(), tz=timezone, exact=True)
    except (ValueError, TypeError) as exc:
        raise InvalidInputError(f"Invalid date: {value!r}") from exc

    # exact parsing keeps bare times and durations as Time / Duration
    if isinstance(parsed, DateTime):
        return parsed.in_timezone(timezone).date()
    if isinstance(parsed, Date):
        return parsed

    raise InvalidInputError(f"Invalid date: {value!r}")


@dataclass(frozen=True)
class DayInterval:
    """
    Half-open interval of minutes relative to a day's midnight.

    Invariant: start must be before end.
    """
    start: int
    end: int

    def __post_init__(self):
        if self.start >= self.end:
            raise ValueError(f"Start minute {self.start} must be before end minute {self.end}")

    def duration_minutes(self) -> int:
        """Return the length in minutes."""
        return self.end - self.start

    def overlaps(self, other: "DayInterval") -> bool:
        """Check if this interval overlaps with another (touching ends do not count)."""
        return self.start < other.end and other.start < self.end

    def __str__(self) -> str:
        return f"[{minutes_to_time_str(self.start)}, +{self.duration_minutes()}min)"


@dataclass(frozen=True)
class Booking:
    """
    An active booking as read from storage.

    ``duration_minutes`` comes from the related appointment type and may be
    missing.
    """
    start: DateTime
    duration_minutes: Optional[int] = None

    def effective_duration(self, default_minutes: int) -> int:
        """Return the recorded duration, or the default when it is missing or invalid."""
        if (
            isinstance(self.duration_minutes, int)
            and not isinstance(self.duration_minutes, bool)
            and self.duration_minutes > 0
        ):
            return self.duration_minutes
        return default_minutes


@dataclass(frozen=True)
class TimeSlot:
    """
    A time-of-day slot with a duration, e.g. a booking rendered for display.
    """
    time: str
    duration_minutes: int

    def to_dict(self) -> dict:
        return {"time": self.time, "duration": self.duration_minutes}


@dataclass
class DayWindow:
    """
    The [00:00, 24:00) window of one calendar day in a fixed timezone.
    """
    day: Date
    timezone: str = "UTC"

    @property
    def start(self) -> DateTime:
        """Local midnight opening the day."""
        return pendulum.datetime(self.day.year, self.day.month, self.day.day, tz=self.timezone)

    @property
    def end(self) -> DateTime:
        """Last instant of the day."""
        return self.start.end_of("day")

    def minute_offset(self, instant: DateTime) -> int:
        """
        Wall-clock minutes from this day's midnight to ``instant``.

        Instants on other days yield offsets below 0 or at/above 1440.
        """
        local = pendulum.instance(instant, tz=self.timezone).in_timezone(self.timezone)
        day_shift = local.date().toordinal() - self.day.toordinal()
        return day_shift * MINUTES_PER_DAY + local.hour * 60 + local.minute

    def interval_for(self, booking: Booking, default_duration_minutes: int) -> DayInterval:
        """Occupied interval of a booking relative to this day."""
        start = self.minute_offset(booking.start)
        return DayInterval(
            start=start,
            end=start + booking.effective_duration(default_duration_minutes)
        )

