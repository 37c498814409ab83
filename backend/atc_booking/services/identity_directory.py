# backend/atc_booking/services/identity_directory.py
"""
Identity Directory Service.

Maps an IVAO VID to a local ``User`` carrying the controller's ATC rating.
Local records are authoritative once they exist; unknown VIDs are looked up
on the IVAO API and upserted. When IVAO is rate limited or down, the
caller's ``FallbackPolicy`` decides between failing fast and creating a
``NO_RATING`` placeholder that can log in but never book.
"""

from __future__ import annotations

from enum import Enum
import logging
from typing import Any, Optional

from sqlalchemy.orm import Session

from ..core.constants import MAX_REGISTRATION_RATING, NO_RATING, rating_name
from ..core.exceptions import (
    IdentityAuthorityUnavailable,
    IdentityNotFoundException,
    ServiceException,
    ValidationException,
)
from ..core.timezone_utils import Clock, utc_now
from ..integrations.ivao_client import IvaoClient, IvaoError, IvaoProfile
from ..models.user import User
from ..repositories.factory import RepositoryFactory
from .base import BaseService

logger = logging.getLogger(__name__)

DEFAULT_USER = {
    "vid": "000000",
    "name": "Test User",
    "email": "test@ivao.aero",
    "rating": 4,
    "rating_level": "AS3",
    "country_id": "KR",
    "division_id": "XE",
}


class FallbackPolicy(str, Enum):
    """What ``resolve`` does when the identity authority is unavailable."""

    FAIL = "fail"
    PLACEHOLDER = "placeholder"


class IdentityDirectory(BaseService):
    """Resolves controllers and their privilege level."""

    def __init__(
        self,
        db: Session,
        client: Optional[IvaoClient] = None,
        clock: Clock = utc_now,
        user_repository: Any = None,
    ):
        super().__init__(db)
        self.client = client
        self.clock = clock
        self.repository = user_repository or RepositoryFactory.create_user_repository(db)

    def get_local(self, vid: Optional[str]) -> Optional[User]:
        if not vid:
            return None
        return self.repository.get_by_vid(vid)

    def privilege_level(self, vid: Optional[str]) -> int:
        """
        Rating of a locally known controller.

        Raises:
            IdentityNotFoundException: If the VID has no local record
        """
        user = self.get_local(vid)
        if user is None:
            raise IdentityNotFoundException(vid)
        return int(user.rating if user.rating is not None else NO_RATING)

    @BaseService.measure_operation("resolve")
    def resolve(
        self, vid: Optional[str], fallback: FallbackPolicy = FallbackPolicy.FAIL
    ) -> Optional[User]:
        """
        Return the local user for ``vid``, consulting IVAO on a local miss.

        Returns:
            The user, or None when IVAO does not know the VID

        Raises:
            IdentityAuthorityUnavailable: IVAO unavailable and policy is FAIL
            ServiceException: IVAO failed in any other way
        """
        if not vid:
            return None
        user = self.get_local(vid)
        if user is not None:
            return user

        try:
            profile = self._fetch_profile(vid)
        except IvaoError as exc:
            if not exc.is_unavailable:
                raise ServiceException(
                    "Identity lookup failed", code="IDENTITY_LOOKUP_FAILED", details={"vid": vid}
                ) from exc
            if fallback is FallbackPolicy.PLACEHOLDER:
                self.logger.warning(
                    "Identity authority unavailable, creating placeholder user",
                    extra={"vid": vid, "upstream_status": exc.status_code},
                )
                return self._upsert(
                    vid=vid, rating=NO_RATING, rating_level=rating_name(NO_RATING), name=f"User {vid}"
                )
            raise IdentityAuthorityUnavailable(vid, exc.status_code) from exc

        if profile is None:
            self.logger.info("Identity not found", extra={"vid": vid})
            return None

        return self._upsert(
            vid=profile.vid,
            rating=profile.rating,
            rating_level=profile.rating_level,
            name=profile.name,
            division_id=profile.division_id,
            country_id=profile.country_id,
        )

    @BaseService.measure_operation("register")
    def register(
        self,
        vid: str,
        rating: int,
        *,
        rating_level: Optional[str] = None,
        name: Optional[str] = None,
        email: Optional[str] = None,
        division_id: Optional[str] = None,
        country_id: Optional[str] = None,
    ) -> User:
        """Create or update a user from explicitly supplied data."""
        if not vid:
            raise ValidationException("VID required", code="VID_REQUIRED")
        if rating is None or not NO_RATING <= rating <= MAX_REGISTRATION_RATING:
            raise ValidationException(
                f"Rating must be between {NO_RATING} and {MAX_REGISTRATION_RATING}",
                code="INVALID_RATING",
                details={"rating": rating},
            )
        return self._upsert(
            vid=vid,
            rating=rating,
            rating_level=rating_level,
            name=name,
            email=email,
            division_id=division_id,
            country_id=country_id,
        )

    def seed_default_user(self) -> User:
        """Create the local test controller if it is missing."""
        existing = self.get_local(DEFAULT_USER["vid"])
        if existing is not None:
            return existing
        return self._upsert(**DEFAULT_USER)

    def _fetch_profile(self, vid: str) -> Optional[IvaoProfile]:
        if self.client is None:
            raise IvaoError("No identity authority configured", unreachable=True)
        return self.client.get_user(vid)

    def _upsert(
        self,
        *,
        vid: str,
        rating: int,
        rating_level: Optional[str] = None,
        name: Optional[str] = None,
        email: Optional[str] = None,
        division_id: Optional[str] = None,
        country_id: Optional[str] = None,
    ) -> User:
        now = self.clock()
        level = rating_level or rating_name(rating)

        with self.transaction():
            user = self.repository.get_by_vid(vid)
            if user is None:
                user = self.repository.create(
                    vid=vid,
                    name=name or vid,
                    email=email,
                    rating=rating,
                    rating_level=level,
                    division_id=division_id,
                    country_id=country_id,
                    created_at=now,
                    updated_at=now,
                )
                self.log_operation("user_created", vid=vid, rating=rating)
            else:
                rating_changed = user.rating != rating
                user.name = name or user.name
                user.email = email or user.email
                user.rating = rating
                user.rating_level = level
                user.division_id = division_id or user.division_id
                user.country_id = country_id or user.country_id
                user.updated_at = now
                if rating_changed:
                    user.last_rating_update = now
                self.db.flush()
                self.log_operation("user_updated", vid=vid, rating=rating, rating_changed=rating_changed)
        return user
