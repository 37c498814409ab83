# backend/atc_booking/services/admission.py
"""
Booking Admission Engine.

Decides whether a controller may hold a position for a half-open interval
``[start_at, end_at)``. Every request runs the same pipeline, and the first
failing step decides the outcome:

1. Position exists in the catalog
2. Interval parses, stays within supported years and is ordered
3. Interval starts in the future
4. Controller is known, above the observer floor and rated for the position
5. Overlapping bookings leave room under the position's capacity
6. Controller is under the future-booking quota (new bookings only)
7. Persist

Steps 5 to 7 run under the per-position lock and commit before it is
released, so the capacity count always reflects every committed admission.

Outcomes are returned as ``Admitted``, ``Deleted`` or ``Rejected`` values;
only infrastructure faults (lock timeout, store failure) raise.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
import logging
from typing import Any, Dict, NoReturn, Optional, Tuple, Union

from sqlalchemy.orm import Session

from ..core.booking_lock import position_lock
from ..core.config import settings
from ..core.constants import MAX_BOOKING_YEAR, MIN_BOOKING_YEAR, OBSERVER_RATING, rating_name
from ..core.exceptions import (
    BookingNotFoundException,
    BookingRejection,
    CapacityExceededException,
    InsufficientPrivilegeException,
    InvalidIntervalException,
    NotAuthorizedException,
    ObserverForbiddenException,
    PastBookingException,
    QuotaExceededException,
    ResourceNotFoundException,
)
from ..core.timezone_utils import Clock, Instant, parse_instant, utc_now
from ..models.booking import Booking
from ..monitoring.prometheus_metrics import prometheus_metrics
from ..repositories.factory import RepositoryFactory
from ..schemas.booking import BookingCreate, BookingUpdate
from .base import BaseService
from .identity_directory import IdentityDirectory
from .position_catalog import PositionCatalogService, PositionRecord

logger = logging.getLogger(__name__)

_UPDATABLE_FLAGS = ("training_mode", "exam_mode", "no_voice")
_UPDATABLE_TEXT = ("booking_type", "notes")


@dataclass(frozen=True)
class Admitted:
    """The booking was created or updated and committed."""

    booking: Booking

    def unwrap(self) -> Booking:
        return self.booking


@dataclass(frozen=True)
class Deleted:
    booking_id: str

    def unwrap(self) -> str:
        return self.booking_id


@dataclass(frozen=True)
class Rejected:
    """The request was turned down; nothing was written."""

    rejection: BookingRejection

    @property
    def kind(self) -> str:
        return self.rejection.kind.value

    def unwrap(self) -> NoReturn:
        raise self.rejection


AdmissionResult = Union[Admitted, Rejected]
DeletionResult = Union[Deleted, Rejected]


class AdmissionEngine(BaseService):
    """The only validating writer of bookings."""

    def __init__(
        self,
        db: Session,
        catalog: PositionCatalogService,
        directory: IdentityDirectory,
        *,
        booking_repository: Any = None,
        clock: Clock = utc_now,
        max_future_bookings: Optional[int] = None,
        lock_timeout_s: Optional[float] = None,
    ):
        super().__init__(db)
        self.catalog = catalog
        self.directory = directory
        self.booking_repository = (
            booking_repository or RepositoryFactory.create_booking_repository(db)
        )
        self.clock = clock
        self.max_future_bookings = (
            max_future_bookings
            if max_future_bookings is not None
            else settings.max_future_bookings_per_user
        )
        self.lock_timeout_s = (
            lock_timeout_s if lock_timeout_s is not None else settings.booking_lock_timeout_seconds
        )

    # Public operations

    @BaseService.measure_operation("submit")
    def submit(self, request: BookingCreate, requester_vid: Optional[str]) -> AdmissionResult:
        """
        Admit a new booking for ``requester_vid``.

        Args:
            request: Validated create request (instants may still be raw strings)
            requester_vid: Authenticated controller VID

        Returns:
            ``Admitted`` with the committed booking, or ``Rejected``

        Raises:
            BookingLockTimeout: Position lock not acquired in time
            ServiceException: Store failure
        """
        try:
            booking = self._admit_new(request, requester_vid)
        except BookingRejection as rejection:
            return self._rejected("submit", rejection, requester_vid)

        prometheus_metrics.record_admission("submit", "admitted")
        self.log_operation(
            "booking_admitted",
            booking_id=booking.id,
            position=booking.position,
            vid=booking.user_vid,
        )
        return Admitted(booking)

    @BaseService.measure_operation("update")
    def update(
        self, booking_id: str, patch: BookingUpdate, actor_vid: Optional[str]
    ) -> AdmissionResult:
        """
        Re-admit an existing booking with the fields in ``patch`` applied.

        The quota is not re-checked: moving a booking never increases the
        number of bookings the owner holds.
        """
        try:
            booking = self._admit_update(booking_id, patch, actor_vid)
        except BookingRejection as rejection:
            return self._rejected("update", rejection, actor_vid)

        prometheus_metrics.record_admission("update", "admitted")
        self.log_operation(
            "booking_updated", booking_id=booking.id, position=booking.position, vid=actor_vid
        )
        return Admitted(booking)

    @BaseService.measure_operation("delete")
    def delete(self, booking_id: str, actor_vid: Optional[str]) -> DeletionResult:
        """Delete a booking owned by ``actor_vid``."""
        try:
            booking = self._owned_booking(booking_id, actor_vid, action="delete")
            with self.transaction():
                self.booking_repository.delete(booking.id)
        except BookingRejection as rejection:
            return self._rejected("delete", rejection, actor_vid)

        prometheus_metrics.record_admission("delete", "deleted")
        self.log_operation("booking_deleted", booking_id=booking_id, vid=actor_vid)
        return Deleted(booking_id)

    # Pipeline

    def _admit_new(self, request: BookingCreate, requester_vid: Optional[str]) -> Booking:
        now = self.clock()
        position = self._require_position(request.position)
        start_at, end_at = self._validate_interval(request.start_at, request.end_at)
        self._ensure_future(start_at, now)
        self._ensure_privilege(requester_vid, position)
        vid = str(requester_vid)
        user_name = request.user_name or self._display_name(vid)

        with position_lock(self.db, position.code, self.lock_timeout_s):
            with self.transaction():
                self._ensure_capacity(position, start_at, end_at)
                self._ensure_quota(vid, now)
                booking: Booking = self.booking_repository.create(
                    user_vid=vid,
                    user_name=user_name,
                    position=position.code,
                    start_at=start_at,
                    end_at=end_at,
                    training_mode=request.training_mode,
                    exam_mode=request.exam_mode,
                    no_voice=request.no_voice,
                    booking_type=request.booking_type,
                    notes=request.notes,
                    created_at=now,
                )
        return booking

    def _admit_update(
        self, booking_id: str, patch: BookingUpdate, actor_vid: Optional[str]
    ) -> Booking:
        now = self.clock()
        booking = self._owned_booking(booking_id, actor_vid, action="modify")
        changes = patch.model_dump(exclude_unset=True)

        position = self._require_position(self._merged(changes, "position", booking.position))
        start_at, end_at = self._validate_interval(
            self._merged(changes, "start_at", booking.start_at),
            self._merged(changes, "end_at", booking.end_at),
        )
        self._ensure_future(start_at, now, updating=True)
        self._ensure_privilege(actor_vid, position)

        fields: Dict[str, Any] = {
            "position": position.code,
            "start_at": start_at,
            "end_at": end_at,
            "updated_at": now,
        }
        for name in _UPDATABLE_FLAGS:
            if changes.get(name) is not None:
                fields[name] = bool(changes[name])
        for name in _UPDATABLE_TEXT:
            if changes.get(name) is not None:
                fields[name] = changes[name]

        with position_lock(self.db, position.code, self.lock_timeout_s):
            with self.transaction():
                self._ensure_capacity(position, start_at, end_at, exclude_booking_id=booking.id)
                updated: Optional[Booking] = self.booking_repository.update(booking.id, **fields)
                if updated is None:
                    raise BookingNotFoundException(booking_id)
        return updated

    @staticmethod
    def _merged(changes: Dict[str, Any], name: str, current: Any) -> Any:
        value = changes.get(name)
        return current if value is None else value

    def _owned_booking(self, booking_id: str, actor_vid: Optional[str], *, action: str) -> Booking:
        booking: Optional[Booking] = self.booking_repository.get_by_id(booking_id)
        if booking is None:
            raise BookingNotFoundException(booking_id)
        if not booking.is_owned_by(actor_vid):
            raise NotAuthorizedException(booking_id, action)
        return booking

    def _require_position(self, code: Optional[str]) -> PositionRecord:
        if not code:
            raise ResourceNotFoundException(code)
        position = self.catalog.get_by_code(code)
        if position is None:
            raise ResourceNotFoundException(code)
        return position

    @staticmethod
    def _validate_interval(
        start_raw: Optional[Instant], end_raw: Optional[Instant]
    ) -> Tuple[datetime, datetime]:
        if start_raw is None or start_raw == "" or end_raw is None or end_raw == "":
            raise InvalidIntervalException(
                "Start and end times required",
                reason="missing",
                start_at=start_raw,
                end_at=end_raw,
            )
        try:
            start_at = parse_instant(start_raw)
            end_at = parse_instant(end_raw)
        except ValueError as exc:
            raise InvalidIntervalException(
                "Invalid date format",
                reason="unparseable",
                start_at=start_raw,
                end_at=end_raw,
            ) from exc

        for instant in (start_at, end_at):
            if not MIN_BOOKING_YEAR <= instant.year <= MAX_BOOKING_YEAR:
                raise InvalidIntervalException(
                    f"Date year must be between {MIN_BOOKING_YEAR} and {MAX_BOOKING_YEAR}",
                    reason="year_out_of_range",
                    start_at=start_at.isoformat(),
                    end_at=end_at.isoformat(),
                )

        if start_at >= end_at:
            raise InvalidIntervalException(
                "End time must be after start time",
                reason="end_not_after_start",
                start_at=start_at.isoformat(),
                end_at=end_at.isoformat(),
            )
        return start_at, end_at

    @staticmethod
    def _ensure_future(start_at: datetime, now: datetime, *, updating: bool = False) -> None:
        if start_at <= now:
            raise PastBookingException(start_at.isoformat(), now.isoformat(), updating=updating)

    def _ensure_privilege(self, vid: Optional[str], position: PositionRecord) -> None:
        rating = self.directory.privilege_level(vid)

        if rating <= OBSERVER_RATING:
            minimum = OBSERVER_RATING + 1
            raise ObserverForbiddenException(
                actual_rating=rating,
                actual_name=rating_name(rating),
                minimum_rating=minimum,
                minimum_name=rating_name(minimum),
            )

        if rating < position.required_rating:
            raise InsufficientPrivilegeException(
                position=position.code,
                required_rating=position.required_rating,
                required_name=rating_name(position.required_rating),
                actual_rating=rating,
                actual_name=rating_name(rating),
            )

    def _ensure_capacity(
        self,
        position: PositionRecord,
        start_at: datetime,
        end_at: datetime,
        exclude_booking_id: Optional[str] = None,
    ) -> None:
        overlapping = self.booking_repository.count_overlapping(
            position.code, start_at, end_at, exclude_booking_id=exclude_booking_id
        )
        if overlapping >= position.capacity:
            raise CapacityExceededException(
                position=position.code, capacity=position.capacity, overlapping=overlapping
            )

    def _ensure_quota(self, vid: str, now: datetime) -> None:
        current = self.booking_repository.count_future_for_user(vid, now)
        if current >= self.max_future_bookings:
            raise QuotaExceededException(vid=vid, limit=self.max_future_bookings, current=current)

    def _display_name(self, vid: str) -> str:
        user = self.directory.get_local(vid)
        return (user.name if user is not None and user.name else None) or vid

    def _rejected(
        self, operation: str, rejection: BookingRejection, vid: Optional[str]
    ) -> Rejected:
        prometheus_metrics.record_admission(operation, rejection.kind.value)
        self.logger.info(
            f"Booking {operation} rejected: {rejection.kind.value}",
            extra={
                "operation": operation,
                "kind": rejection.kind.value,
                "code": rejection.code,
                "vid": vid,
                "details": rejection.details,
            },
        )
        return Rejected(rejection)
