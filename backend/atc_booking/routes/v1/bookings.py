# backend/atc_booking/routes/v1/bookings.py
"""
Booking routes - API v1

Versioned booking endpoints under /api/v1/bookings.
All admission decisions are delegated to AdmissionEngine.

Endpoints:
    GET / - Bookings that have not ended, ordered by position
    GET /date/{day} - Bookings touching a UTC calendar day (YYYY-MM-DD)
    GET /occupant - Current occupants of a position
    POST / - Book a position
    PUT /{booking_id} - Move or edit an owned booking
    DELETE /{booking_id} - Delete an owned booking
"""

import asyncio
import logging
from typing import List

from fastapi import APIRouter, Depends, Query, status

from ...api.dependencies import (
    get_admission_engine,
    get_booking_query_service,
    get_current_vid,
)
from ...core.exceptions import DomainException
from ...models.booking import Booking
from ...schemas.booking import (
    BookingCreate,
    BookingResponse,
    BookingUpdate,
    DeletedResponse,
    OccupantResponse,
)
from ...services.admission import AdmissionEngine
from ...services.booking_query_service import BookingQueryService
from .errors import handle_domain_exception

logger = logging.getLogger(__name__)

# V1 router - no prefix here, will be added when mounting in main.py
router = APIRouter(tags=["bookings-v1"])


def _to_response(booking: Booking) -> BookingResponse:
    return BookingResponse.model_validate(booking)


# ============================================================================
# SECTION 1: Static routes (no path parameters)
# ============================================================================


@router.get("", response_model=List[BookingResponse])
async def list_bookings(
    service: BookingQueryService = Depends(get_booking_query_service),
) -> List[BookingResponse]:
    """List every booking that has not ended yet."""
    bookings = await asyncio.to_thread(service.list_future)
    return [_to_response(b) for b in bookings]


@router.get("/occupant", response_model=List[OccupantResponse])
async def current_occupants(
    position: str = Query("", max_length=64, description="Position code"),
    service: BookingQueryService = Depends(get_booking_query_service),
) -> List[OccupantResponse]:
    """Who holds ``position`` right now (empty list when free)."""
    try:
        bookings = await asyncio.to_thread(service.current_occupants, position.strip())
    except DomainException as e:
        handle_domain_exception(e)
    return [
        OccupantResponse(id=b.id, vid=b.user_vid, start_at=b.start_at, end_at=b.end_at)
        for b in bookings
    ]


@router.post("", response_model=BookingResponse, status_code=status.HTTP_201_CREATED)
async def create_booking(
    payload: BookingCreate,
    current_vid: str = Depends(get_current_vid),
    engine: AdmissionEngine = Depends(get_admission_engine),
) -> BookingResponse:
    """
    Book a position for the authenticated controller.

    Rejections map to 400/403/404/409/422; a busy position lock maps to 503.
    """
    try:
        result = await asyncio.to_thread(engine.submit, payload, current_vid)
        return _to_response(result.unwrap())
    except DomainException as e:
        handle_domain_exception(e)


# ============================================================================
# SECTION 2: Dynamic routes
# ============================================================================


@router.get("/date/{day}", response_model=List[BookingResponse])
async def list_bookings_for_day(
    day: str,
    service: BookingQueryService = Depends(get_booking_query_service),
) -> List[BookingResponse]:
    """Bookings touching the UTC day ``day`` (``YYYY-MM-DD``)."""
    try:
        bookings = await asyncio.to_thread(service.list_by_date, day)
    except DomainException as e:
        handle_domain_exception(e)
    return [_to_response(b) for b in bookings]


@router.put("/{booking_id}", response_model=BookingResponse)
async def update_booking(
    booking_id: str,
    payload: BookingUpdate,
    current_vid: str = Depends(get_current_vid),
    engine: AdmissionEngine = Depends(get_admission_engine),
) -> BookingResponse:
    try:
        result = await asyncio.to_thread(engine.update, booking_id, payload, current_vid)
        return _to_response(result.unwrap())
    except DomainException as e:
        handle_domain_exception(e)


@router.delete("/{booking_id}", response_model=DeletedResponse)
async def delete_booking(
    booking_id: str,
    current_vid: str = Depends(get_current_vid),
    engine: AdmissionEngine = Depends(get_admission_engine),
) -> DeletedResponse:
    try:
        result = await asyncio.to_thread(engine.delete, booking_id, current_vid)
        return DeletedResponse(id=result.unwrap())
    except DomainException as e:
        handle_domain_exception(e)
