# backend/atc_booking/services/booking_query_service.py
"""
Booking Query Service: read-only listings and occupancy.

Nothing here takes the admission lock; callers see the last committed state.
"""

from datetime import date, datetime
import logging
import re
from typing import Any, List, Optional, Union

from sqlalchemy.orm import Session

from ..core.exceptions import ValidationException
from ..core.timezone_utils import Clock, ensure_utc, utc_day_bounds, utc_now
from ..models.booking import Booking
from ..repositories.factory import RepositoryFactory
from .base import BaseService

logger = logging.getLogger(__name__)

DATE_ONLY_REGEX = re.compile(r"^\d{4}-\d{2}-\d{2}$")


def parse_day(value: Union[date, str]) -> date:
    """
    Parse a ``YYYY-MM-DD`` string.

    Raises:
        ValidationException: If the value is not a valid calendar date
    """
    if isinstance(value, date):
        return value
    candidate = (value or "").strip()
    if not DATE_ONLY_REGEX.fullmatch(candidate):
        raise ValidationException(
            "Invalid date format. Use YYYY-MM-DD",
            code="INVALID_DATE",
            details={"date": value},
        )
    try:
        return date.fromisoformat(candidate)
    except ValueError as exc:
        raise ValidationException(
            "Invalid date", code="INVALID_DATE", details={"date": value}
        ) from exc


class BookingQueryService(BaseService):
    """Listings for the HTTP API."""

    def __init__(self, db: Session, booking_repository: Any = None, clock: Clock = utc_now):
        super().__init__(db)
        self.repository = booking_repository or RepositoryFactory.create_booking_repository(db)
        self.clock = clock

    @BaseService.measure_operation("list_future")
    def list_future(self) -> List[Booking]:
        """Bookings that have not ended, ordered by position then start."""
        return self.repository.get_future(self.clock())

    @BaseService.measure_operation("list_by_date")
    def list_by_date(self, day: Union[date, str]) -> List[Booking]:
        """Bookings touching the UTC calendar day ``day``."""
        start, end = utc_day_bounds(parse_day(day))
        return self.repository.get_touching_range(start, end)

    @BaseService.measure_operation("current_occupants")
    def current_occupants(
        self, position: Optional[str], now: Optional[datetime] = None
    ) -> List[Booking]:
        """Bookings holding ``position`` at ``now`` (defaults to the clock)."""
        if not position:
            raise ValidationException("Position code required", code="POSITION_REQUIRED")
        instant = ensure_utc(now) if now is not None else self.clock()
        return self.repository.get_current_occupants(position, instant)
