# backend/atc_booking/repositories/booking_repository.py
"""
Booking Repository for the ATC position booking service.

Implements the booking store contract consumed by the admission engine:
- Overlap counting for capacity checks (half-open intervals)
- Future-booking counting for per-controller quotas
- Occupancy and listing queries

All interval queries use the strict overlap predicate
``existing.start_at < new.end_at AND existing.end_at > new.start_at``,
so back-to-back bookings never conflict.
"""

from datetime import datetime
import logging
from typing import List, Optional, cast

from sqlalchemy import func
from sqlalchemy.orm import Session

from ..core.exceptions import RepositoryException
from ..models.booking import Booking
from .base_repository import BaseRepository

logger = logging.getLogger(__name__)


class BookingRepository(BaseRepository[Booking]):
    """Repository for booking data access."""

    def __init__(self, db: Session):
        """Initialize with Booking model."""
        super().__init__(db, Booking)
        self.logger = logging.getLogger(__name__)

    # Admission queries

    def count_overlapping(
        self,
        position: str,
        start_at: datetime,
        end_at: datetime,
        exclude_booking_id: Optional[str] = None,
    ) -> int:
        """
        Count bookings on a position whose interval overlaps ``[start_at, end_at)``.

        Args:
            position: Position code
            start_at: Candidate start (UTC)
            end_at: Candidate end (UTC)
            exclude_booking_id: Booking to leave out (the one being updated)

        Returns:
            Number of overlapping bookings
        """
        try:
            query = self.db.query(func.count(Booking.id)).filter(
                Booking.position == position,
                Booking.start_at < end_at,
                Booking.end_at > start_at,
            )
            if exclude_booking_id:
                query = query.filter(Booking.id != exclude_booking_id)

            return int(query.scalar() or 0)

        except Exception as e:
            self.logger.error(f"Error counting overlapping bookings: {str(e)}")
            raise RepositoryException(f"Failed to count overlapping bookings: {str(e)}") from e

    def count_future_for_user(self, user_vid: str, now: datetime) -> int:
        """
        Count a controller's bookings that have not ended yet (``end_at > now``).
        """
        try:
            return int(
                self.db.query(func.count(Booking.id))
                .filter(Booking.user_vid == user_vid, Booking.end_at > now)
                .scalar()
                or 0
            )
        except Exception as e:
            self.logger.error(f"Error counting future bookings for {user_vid}: {str(e)}")
            raise RepositoryException(f"Failed to count future bookings: {str(e)}") from e

    # Read queries

    def get_current_occupants(self, position: str, now: datetime) -> List[Booking]:
        """
        Bookings holding a position at ``now`` (``start_at <= now < end_at``).
        """
        try:
            return cast(
                List[Booking],
                self.db.query(Booking)
                .filter(
                    Booking.position == position,
                    Booking.start_at <= now,
                    Booking.end_at > now,
                )
                .order_by(Booking.start_at)
                .all(),
            )
        except Exception as e:
            self.logger.error(f"Error getting current occupants: {str(e)}")
            raise RepositoryException(f"Failed to get occupants: {str(e)}") from e

    def get_future(self, now: datetime) -> List[Booking]:
        """All bookings that have not ended, ordered by position then start."""
        try:
            return cast(
                List[Booking],
                self.db.query(Booking)
                .filter(Booking.end_at > now)
                .order_by(Booking.position, Booking.start_at)
                .all(),
            )
        except Exception as e:
            self.logger.error(f"Error getting future bookings: {str(e)}")
            raise RepositoryException(f"Failed to get future bookings: {str(e)}") from e

    def get_touching_range(self, range_start: datetime, range_end: datetime) -> List[Booking]:
        """
        Bookings intersecting the closed range ``[range_start, range_end]``.

        Used for day listings, where a booking ending exactly at midnight
        still shows on that day.
        """
        try:
            return cast(
                List[Booking],
                self.db.query(Booking)
                .filter(Booking.start_at <= range_end, Booking.end_at >= range_start)
                .order_by(Booking.position, Booking.start_at)
                .all(),
            )
        except Exception as e:
            self.logger.error(f"Error getting bookings for range: {str(e)}")
            raise RepositoryException(f"Failed to get bookings for range: {str(e)}") from e

