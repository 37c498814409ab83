# backend/atc_booking/models/user.py
"""
User model: the local identity record for a controller.

Records are keyed by IVAO VID and upserted whenever the identity
authority is consulted. ``last_rating_update`` moves only when the rating
itself changes; ``updated_at`` moves on every profile write.
"""

import logging

from sqlalchemy import Column, Integer, String

from ..core.constants import NO_RATING
from ..core.timezone_utils import utc_now
from ..database import Base
from .types import UTCDateTime

logger = logging.getLogger(__name__)


class User(Base):
    """
    Controller identity.

    Attributes:
        vid: Stable IVAO identifier
        rating: Integer ATC rating (see ``RATING_LEVELS``)
        rating_level: Short rating name as reported by the authority
    """

    __tablename__ = "users"

    id = Column(Integer, primary_key=True, autoincrement=True)
    vid = Column(String(32), unique=True, nullable=False, index=True)
    name = Column(String(255), nullable=True)
    email = Column(String(320), nullable=True)
    rating = Column(Integer, nullable=False, default=NO_RATING)
    rating_level = Column(String(16), nullable=True)
    country_id = Column(String(8), nullable=True)
    division_id = Column(String(8), nullable=True)

    created_at = Column(UTCDateTime, nullable=False, default=utc_now)
    updated_at = Column(UTCDateTime, nullable=False, default=utc_now, onupdate=utc_now)
    last_rating_update = Column(UTCDateTime, nullable=True)

    def __repr__(self) -> str:
        return f"<User {self.vid} rating={self.rating}>"
