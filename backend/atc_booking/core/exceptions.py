# backend/atc_booking/core/exceptions.py
"""
Domain-specific exceptions for the ATC position booking service.

These exceptions provide clear, business-focused error messages
that can be caught and handled appropriately at the API layer.

Booking rejections (``BookingRejection`` subclasses) are expected,
caller-recoverable outcomes of the admission pipeline. Each one carries a
``kind`` tag plus structured ``details`` so callers can render a precise
message without parsing strings.
"""

from enum import Enum
from typing import Any, Dict, Optional

from fastapi import HTTPException, status

HTTP_422_UNPROCESSABLE: int = getattr(status, "HTTP_422_UNPROCESSABLE_CONTENT", 422)


class DomainException(Exception):
    """Base exception for all domain-specific errors."""

    def __init__(
        self,
        message: str,
        code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        self.message = message
        self.code = code or self.__class__.__name__
        self.details = details or {}
        super().__init__(self.message)

    def _detail(self) -> Dict[str, Any]:
        return {
            "message": self.message,
            "code": self.code,
            "details": self.details,
        }

    def to_http_exception(self) -> HTTPException:
        """Default conversion to HTTPException (override in subclasses)."""
        return HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=self._detail(),
        )


class ValidationException(DomainException):
    """Raised when business validation fails."""

    def to_http_exception(self) -> HTTPException:
        return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=self._detail())


class NotFoundException(DomainException):
    """Raised when a requested resource is not found."""

    def to_http_exception(self) -> HTTPException:
        return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=self._detail())


class ConflictException(DomainException):
    """Raised when there's a conflict with existing data."""

    def to_http_exception(self) -> HTTPException:
        return HTTPException(status_code=status.HTTP_409_CONFLICT, detail=self._detail())


class BusinessRuleException(DomainException):
    """Raised when a business rule is violated."""

    def to_http_exception(self) -> HTTPException:
        return HTTPException(status_code=HTTP_422_UNPROCESSABLE, detail=self._detail())


class UnauthorizedException(DomainException):
    """Raised when user is not authenticated."""

    def to_http_exception(self) -> HTTPException:
        return HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=self._detail(),
            headers={"WWW-Authenticate": "Bearer"},
        )


class ForbiddenException(DomainException):
    """Raised when user lacks permission for an action."""

    def to_http_exception(self) -> HTTPException:
        return HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=self._detail())


class ServiceException(DomainException):
    """Raised when a service operation fails."""

    def to_http_exception(self) -> HTTPException:
        return HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail={
                "message": self.message or "An error occurred processing your request",
                "code": self.code,
                "details": self.details if self.details else {},
            },
        )


class ServiceUnavailableException(ServiceException):
    """Raised when a dependency is temporarily unavailable; safe to retry."""

    def to_http_exception(self) -> HTTPException:
        return HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail=self._detail(),
            headers={"Retry-After": "2"},
        )


class BookingLockTimeout(ServiceUnavailableException):
    """Raised when the per-position admission lock cannot be acquired in time."""

    def __init__(self, position: str, timeout_s: float):
        super().__init__(
            message="Position is busy, please retry",
            code="BOOKING_LOCK_TIMEOUT",
            details={"position": position, "timeout_seconds": timeout_s},
        )


class IdentityAuthorityUnavailable(ServiceUnavailableException):
    """Raised when the identity authority is rate limited or unreachable."""

    def __init__(self, vid: str, status_code: Optional[int] = None):
        super().__init__(
            message="Identity authority is temporarily unavailable",
            code="IDENTITY_AUTHORITY_UNAVAILABLE",
            details={"vid": vid, "upstream_status": status_code},
        )


# Booking admission rejections


class RejectionKind(str, Enum):
    """Tags for every way the admission engine can turn a request down."""

    RESOURCE_NOT_FOUND = "ResourceNotFound"
    INVALID_INTERVAL = "InvalidInterval"
    PAST_BOOKING = "PastBooking"
    OBSERVER_FORBIDDEN = "ObserverForbidden"
    INSUFFICIENT_PRIVILEGE = "InsufficientPrivilege"
    CAPACITY_EXCEEDED = "CapacityExceeded"
    QUOTA_EXCEEDED = "QuotaExceeded"
    NOT_AUTHORIZED = "NotAuthorized"
    NOT_FOUND = "NotFound"
    IDENTITY_NOT_FOUND = "IdentityNotFound"


class BookingRejection(DomainException):
    """Base class for admission rejections."""

    kind: RejectionKind


class ResourceNotFoundException(NotFoundException, BookingRejection):
    """Raised when the position code is empty or not in the catalog."""

    kind = RejectionKind.RESOURCE_NOT_FOUND

    def __init__(self, position: Optional[str]):
        super().__init__(
            message="Position code required" if not position else "Position not found",
            code="POSITION_NOT_FOUND",
            details={"position": position or None},
        )


class InvalidIntervalException(ValidationException, BookingRejection):
    """Raised when start/end are unparseable, out of range or out of order."""

    kind = RejectionKind.INVALID_INTERVAL

    def __init__(self, message: str, *, reason: str, start_at: Any = None, end_at: Any = None):
        super().__init__(
            message=message,
            code="INVALID_INTERVAL",
            details={
                "reason": reason,
                "start_at": None if start_at is None else str(start_at),
                "end_at": None if end_at is None else str(end_at),
            },
        )


class PastBookingException(ValidationException, BookingRejection):
    """Raised when a booking would start at or before the current instant."""

    kind = RejectionKind.PAST_BOOKING

    def __init__(self, start_at: Any, now: Any, *, updating: bool = False):
        super().__init__(
            message=(
                "Cannot modify booking to start in the past"
                if updating
                else "Cannot book in the past"
            ),
            code="PAST_BOOKING",
            details={"start_at": str(start_at), "now": str(now)},
        )


class ObserverForbiddenException(ForbiddenException, BookingRejection):
    """Raised when an observer-rated controller tries to hold any position."""

    kind = RejectionKind.OBSERVER_FORBIDDEN

    def __init__(self, actual_rating: int, actual_name: str, minimum_rating: int, minimum_name: str):
        super().__init__(
            message=(
                f"{actual_name} rating cannot book ATC positions. "
                f"You need at least {minimum_name} (rating {minimum_rating})"
            ),
            code="OBSERVER_FORBIDDEN",
            details={
                "actual_rating": actual_rating,
                "actual_level": actual_name,
                "minimum_rating": minimum_rating,
                "minimum_level": minimum_name,
            },
        )


class InsufficientPrivilegeException(ForbiddenException, BookingRejection):
    """Raised when the controller's rating is below the position requirement."""

    kind = RejectionKind.INSUFFICIENT_PRIVILEGE

    def __init__(
        self,
        *,
        position: str,
        required_rating: int,
        required_name: str,
        actual_rating: int,
        actual_name: str,
    ):
        super().__init__(
            message=(
                f"Insufficient rating. Position requires {required_name} "
                f"(rating {required_rating}) or higher. "
                f"Your rating: {actual_name} ({actual_rating})"
            ),
            code="INSUFFICIENT_RATING",
            details={
                "position": position,
                "required_rating": required_rating,
                "required_level": required_name,
                "actual_rating": actual_rating,
                "actual_level": actual_name,
            },
        )


class CapacityExceededException(ConflictException, BookingRejection):
    """Raised when overlapping bookings already fill the position's capacity."""

    kind = RejectionKind.CAPACITY_EXCEEDED

    def __init__(self, *, position: str, capacity: int, overlapping: int):
        super().__init__(
            message="Position already booked for this time slot",
            code="CAPACITY_EXCEEDED",
            details={
                "position": position,
                "capacity": capacity,
                "overlapping_bookings": overlapping,
            },
        )


class QuotaExceededException(BusinessRuleException, BookingRejection):
    """Raised when the controller already holds the maximum future bookings."""

    kind = RejectionKind.QUOTA_EXCEEDED

    def __init__(self, *, vid: str, limit: int, current: int):
        super().__init__(
            message="Maximum future bookings limit reached",
            code="QUOTA_EXCEEDED",
            details={"vid": vid, "limit": limit, "current": current},
        )


class NotAuthorizedException(ForbiddenException, BookingRejection):
    """Raised when someone other than the owner mutates a booking."""

    kind = RejectionKind.NOT_AUTHORIZED

    def __init__(self, booking_id: str, action: str):
        super().__init__(
            message=f"Not authorized to {action} this booking",
            code="NOT_AUTHORIZED",
            details={"booking_id": booking_id, "action": action},
        )


class BookingNotFoundException(NotFoundException, BookingRejection):
    """Raised when a booking id does not exist."""

    kind = RejectionKind.NOT_FOUND

    def __init__(self, booking_id: str):
        super().__init__(
            message="Booking not found",
            code="BOOKING_NOT_FOUND",
            details={"booking_id": booking_id},
        )


class IdentityNotFoundException(NotFoundException, BookingRejection):
    """Raised when a VID is unknown locally and to the identity authority."""

    kind = RejectionKind.IDENTITY_NOT_FOUND

    def __init__(self, vid: Optional[str]):
        super().__init__(
            message="User not found",
            code="IDENTITY_NOT_FOUND",
            details={"vid": vid},
        )


class RepositoryException(Exception):
    """
    Exception raised for repository layer errors.

    This exception is used when data access operations fail,
    such as database connection issues, query failures, or
    constraint violations.
    """
