"""ORM models. Importing this package registers every table on ``Base.metadata``."""

from .booking import Booking
from .position import Position
from .user import User

__all__ = ["Booking", "Position", "User"]
