"""
Pydantic schemas for the availability API.
"""

from datetime import date
from typing import List

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from ..services.availability import AvailabilityReport


class BookedSlot(BaseModel):
    """A booking rendered as start time and length."""
    time: str  # "HH:MM"
    duration: int


class AvailabilityResponse(BaseModel):
    """Booked and available slots of a day."""
    date: date
    booked_slots: List[BookedSlot]
    available_slots: List[str]

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    @classmethod
    def from_report(cls, report: AvailabilityReport) -> "AvailabilityResponse":
        return cls(
            date=report.date.isoformat(),
            booked_slots=[
                BookedSlot(time=slot.time, duration=slot.duration_minutes)
                for slot in report.booked_slots
            ],
            available_slots=report.available_slots,
        )


class ErrorResponse(BaseModel):
    error: str
