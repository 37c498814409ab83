import pytest

from atc_booking.core.exceptions import (
    BookingLockTimeout,
    BookingNotFoundException,
    BookingRejection,
    CapacityExceededException,
    IdentityAuthorityUnavailable,
    IdentityNotFoundException,
    InsufficientPrivilegeException,
    InvalidIntervalException,
    NotAuthorizedException,
    ObserverForbiddenException,
    PastBookingException,
    QuotaExceededException,
    RejectionKind,
    ResourceNotFoundException,
)

REJECTIONS = [
    (ResourceNotFoundException("NOPE"), RejectionKind.RESOURCE_NOT_FOUND, 404),
    (InvalidIntervalException("bad", reason="missing"), RejectionKind.INVALID_INTERVAL, 400),
    (PastBookingException("a", "b"), RejectionKind.PAST_BOOKING, 400),
    (ObserverForbiddenException(1, "OBS", 2, "AS1"), RejectionKind.OBSERVER_FORBIDDEN, 403),
    (
        InsufficientPrivilegeException(
            position="X", required_rating=5, required_name="ADC", actual_rating=4, actual_name="AS3"
        ),
        RejectionKind.INSUFFICIENT_PRIVILEGE,
        403,
    ),
    (CapacityExceededException(position="X", capacity=1, overlapping=1), RejectionKind.CAPACITY_EXCEEDED, 409),
    (QuotaExceededException(vid="1", limit=3, current=3), RejectionKind.QUOTA_EXCEEDED, 422),
    (NotAuthorizedException("b1", "delete"), RejectionKind.NOT_AUTHORIZED, 403),
    (BookingNotFoundException("b1"), RejectionKind.NOT_FOUND, 404),
    (IdentityNotFoundException("1"), RejectionKind.IDENTITY_NOT_FOUND, 404),
]


@pytest.mark.parametrize("exc, kind, status_code", REJECTIONS)
def test_rejections_carry_kind_and_status(exc, kind, status_code):
    assert isinstance(exc, BookingRejection)
    assert exc.kind is kind
    http_exc = exc.to_http_exception()
    assert http_exc.status_code == status_code
    assert http_exc.detail["code"] == exc.code
    assert http_exc.detail["message"] == exc.message


def test_every_kind_has_a_rejection():
    assert {kind for _, kind, _ in REJECTIONS} == set(RejectionKind)


def test_retryable_failures_are_service_unavailable():
    for exc in (BookingLockTimeout("RKSI_TWR", 1.0), IdentityAuthorityUnavailable("1", 429)):
        http_exc = exc.to_http_exception()
        assert http_exc.status_code == 503
        assert http_exc.headers["Retry-After"] == "2"
        assert not isinstance(exc, BookingRejection)


def test_missing_position_message():
    assert ResourceNotFoundException("").message == "Position code required"
    assert ResourceNotFoundException("X").message == "Position not found"
