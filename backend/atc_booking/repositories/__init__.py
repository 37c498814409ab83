# backend/atc_booking/repositories/__init__.py
"""
Data access for bookings, positions and controllers.

Services obtain repositories through ``RepositoryFactory`` so tests can
swap in fakes:

    repository = RepositoryFactory.create_booking_repository(db)
    taken = repository.count_overlapping("RKSI_TWR", start_at, end_at)
"""

from .base_repository import BaseRepository, IRepository
from .booking_repository import BookingRepository
from .factory import RepositoryFactory
from .position_repository import PositionRepository
from .user_repository import UserRepository

__all__ = [
    "BaseRepository",
    "BookingRepository",
    "IRepository",
    "PositionRepository",
    "RepositoryFactory",
    "UserRepository",
]
