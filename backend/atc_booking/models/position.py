# backend/atc_booking/models/position.py
"""
Position model: a bookable ATC position in the catalog.
"""

from sqlalchemy import CheckConstraint, Column, Integer, String

from ..core.constants import DEFAULT_POSITION_CAPACITY, DEFAULT_REQUIRED_RATING
from ..database import Base


class Position(Base):
    """
    Catalog entry for a position.

    Attributes:
        code: Unique position callsign, e.g. ``RKSI_TWR``
        capacity: Bookings allowed to overlap at any instant (>= 1)
        required_rating: Minimum ATC rating a controller needs to book it
    """

    __tablename__ = "positions"

    id = Column(Integer, primary_key=True, autoincrement=True)
    code = Column(String(32), unique=True, nullable=False, index=True)
    name = Column(String(255), nullable=True)
    capacity = Column(Integer, nullable=False, default=DEFAULT_POSITION_CAPACITY)
    role = Column(String(16), nullable=True)
    division = Column(String(8), nullable=True)
    required_rating = Column(Integer, nullable=False, default=DEFAULT_REQUIRED_RATING)

    __table_args__ = (CheckConstraint("capacity >= 1", name="ck_positions_capacity_positive"),)

    @property
    def effective_capacity(self) -> int:
        return self.capacity if self.capacity is not None else DEFAULT_POSITION_CAPACITY

    def __repr__(self) -> str:
        return f"<Position {self.code} cap={self.capacity} rating>={self.required_rating}>"
