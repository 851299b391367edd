"""
Availability API endpoints.

GET /availability - booked and free slots of a practitioner's day
GET /health       - liveness check
"""

import logging
from typing import Optional

from fastapi import FastAPI, Query, Request
from fastapi.responses import JSONResponse

from .. import __version__
from ..config import AppConfig, load_config
from ..domain.exceptions import InvalidInputError, StorageError
from ..services.availability import AvailabilityService, BookingStoreProtocol
from .schemas import AvailabilityResponse, ErrorResponse

logger = logging.getLogger(__name__)


def _parse_duration(value: Optional[str]) -> Optional[int]:
    """Parse the optional requested duration query parameter."""
    if value is None or value == "":
        return None
    try:
        minutes = int(value)
    except ValueError as exc:
        raise InvalidInputError(f"Invalid duration: {value!r}") from exc
    if minutes <= 0:
        raise InvalidInputError("duration must be a positive number of minutes")
    return minutes


def create_app(
    config: Optional[AppConfig] = None,
    booking_store: Optional[BookingStoreProtocol] = None,
    mock: bool = False,
) -> FastAPI:
    """
    Build the FastAPI application.

    The slot calculator is created here so an invalid grid fails at
    startup instead of on the first request.
    """
    config = config or load_config()
    store = booking_store or config.build_booking_store(mock=mock)

    app = FastAPI(title="slotbook availability API", version=__version__)
    app.state.config = config
    app.state.availability = AvailabilityService(
        booking_store=store,
        slot_calculator=config.build_slot_calculator(),
    )

    @app.exception_handler(InvalidInputError)
    async def invalid_input_handler(request: Request, exc: InvalidInputError):
        return JSONResponse(status_code=400, content={"error": str(exc)})

    @app.exception_handler(StorageError)
    async def storage_error_handler(request: Request, exc: StorageError):
        logger.error("Error fetching appointments: %s", exc, exc_info=exc)
        return JSONResponse(status_code=500, content={"error": "Failed to fetch appointments"})

    @app.exception_handler(Exception)
    async def unhandled_error_handler(request: Request, exc: Exception):
        logger.error("Unhandled error on %s: %s", request.url.path, exc, exc_info=exc)
        return JSONResponse(status_code=500, content={"error": "Internal server error"})

    @app.get("/health")
    async def health():
        return {"status": "ok"}

    @app.get(
        "/availability",
        response_model=AvailabilityResponse,
        responses={400: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
    )
    async def get_availability(
        request: Request,
        date: Optional[str] = Query(None, description="Day to inspect (ISO date)"),
        user_id: Optional[str] = Query(None, alias="userId"),
        duration: Optional[str] = Query(
            None,
            description="Requested appointment length; only slots where it fits are returned",
        ),
    ):
        """Get booked and available slots of one day for one practitioner."""
        if not date or not user_id:
            raise InvalidInputError("Date and userId are required parameters")

        requested_duration = _parse_duration(duration)

        service: AvailabilityService = request.app.state.availability
        report = await service.get_availability(
            user_id=user_id,
            day=date,
            requested_duration_minutes=requested_duration,
        )
        return AvailabilityResponse.from_report(report)

    return app
