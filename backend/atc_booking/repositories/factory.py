# backend/atc_booking/repositories/factory.py
"""
Repository Factory for the booking service.

Provides centralized creation of repository instances,
ensuring consistent initialization and dependency injection.
"""

from sqlalchemy.orm import Session

from .booking_repository import BookingRepository
from .position_repository import PositionRepository
from .user_repository import UserRepository


class RepositoryFactory:
    """
    Factory class for creating repository instances.

    Centralizes repository creation so services can be handed mocks in tests.
    """

    @staticmethod
    def create_booking_repository(db: Session) -> BookingRepository:
        """Create repository for booking operations."""
        return BookingRepository(db)

    @staticmethod
    def create_position_repository(db: Session) -> PositionRepository:
        """Create repository for the position catalog."""
        return PositionRepository(db)

    @staticmethod
    def create_user_repository(db: Session) -> UserRepository:
        """Create repository for controller identities."""
        return UserRepository(db)
