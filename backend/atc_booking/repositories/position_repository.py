# backend/atc_booking/repositories/position_repository.py
"""
Position Repository: data access for the position catalog.
"""

import logging
from typing import Any, Dict, List, Optional, cast

from sqlalchemy.orm import Session

from ..core.exceptions import RepositoryException
from ..models.position import Position
from .base_repository import BaseRepository

logger = logging.getLogger(__name__)


class PositionRepository(BaseRepository[Position]):
    """Repository for position catalog reads and seeding."""

    def __init__(self, db: Session):
        super().__init__(db, Position)

    def get_by_code(self, code: str) -> Optional[Position]:
        """Direct lookup by unique code, bypassing any cache."""
        return self.find_one_by(code=code)

    def list_ordered(self) -> List[Position]:
        """Every position ordered by code."""
        try:
            return cast(List[Position], self.db.query(Position).order_by(Position.code).all())
        except Exception as e:
            self.logger.error(f"Error listing positions: {str(e)}")
            raise RepositoryException(f"Failed to list positions: {str(e)}") from e

    def upsert(self, data: Dict[str, Any]) -> Position:
        """
        Create the position or overwrite the fields of an existing one.

        Args:
            data: Position attributes; ``code`` is required

        Returns:
            The persisted (flushed) position
        """
        existing = self.get_by_code(data["code"])
        if existing is None:
            return self.create(**data)
        for key, value in data.items():
            setattr(existing, key, value)
        self.db.flush()
        return existing
