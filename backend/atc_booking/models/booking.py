# backend/atc_booking/models/booking.py
"""
Booking model for the ATC position booking service.

A booking reserves a position for a half-open UTC interval
``[start_at, end_at)``. The position is referenced by code and validated
at write time rather than through a foreign key, so catalog reseeding
never cascades into bookings.
"""

import logging

from sqlalchemy import Boolean, CheckConstraint, Column, Index, String, Text

from ..core.timezone_utils import utc_now
from ..core.ulid_helper import generate_ulid
from ..database import Base
from .types import UTCDateTime

logger = logging.getLogger(__name__)


class Booking(Base):
    """Reservation of one position by one controller for a time interval."""

    __tablename__ = "bookings"

    id = Column(String(26), primary_key=True, index=True, default=generate_ulid)

    # Owner
    user_vid = Column(String(32), nullable=False)
    user_name = Column(String(255), nullable=False, default="")

    # Position code (validated against the catalog on every write)
    position = Column(String(32), nullable=False)

    start_at = Column(UTCDateTime, nullable=False)
    end_at = Column(UTCDateTime, nullable=False)

    # Independent session flags
    training_mode = Column(Boolean, nullable=False, default=False)
    exam_mode = Column(Boolean, nullable=False, default=False)
    no_voice = Column(Boolean, nullable=False, default=False)

    booking_type = Column(String(32), nullable=True)  # training|event|exam
    notes = Column(Text, nullable=True)

    created_at = Column(UTCDateTime, nullable=False, default=utc_now)
    updated_at = Column(UTCDateTime, nullable=True, onupdate=utc_now)

    __table_args__ = (
        CheckConstraint("start_at < end_at", name="ck_bookings_interval_order"),
        Index("idx_bookings_position_time", "position", "start_at", "end_at"),
        Index("idx_bookings_user_future", "user_vid", "end_at"),
    )

    def __repr__(self) -> str:
        return (
            f"<Booking {self.id} {self.position} {self.user_vid} "
            f"{self.start_at}->{self.end_at}>"
        )

    def is_owned_by(self, vid: str | None) -> bool:
        """True when ``vid`` is this booking's owner."""
        return bool(vid) and self.user_vid == vid
