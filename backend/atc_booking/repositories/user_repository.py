# backend/atc_booking/repositories/user_repository.py
"""
User Repository: local identity records keyed by VID.
"""

import logging
from typing import Optional

from sqlalchemy.orm import Session

from ..models.user import User
from .base_repository import BaseRepository

logger = logging.getLogger(__name__)


class UserRepository(BaseRepository[User]):
    """Repository for controller identities."""

    def __init__(self, db: Session):
        super().__init__(db, User)

    def get_by_vid(self, vid: str) -> Optional[User]:
        return self.find_one_by(vid=vid)

