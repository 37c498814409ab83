import pytest
from pydantic import ValidationError

from atc_booking.core.sanitize import clean_optional, clean_text
from atc_booking.schemas.auth import LoginRequest, RegisterRequest
from atc_booking.schemas.booking import BookingCreate


def test_clean_text_strips_markup_and_controls():
    assert clean_text('  <b onclick="x">hi</b>\x00\x07 ') == "b onclick=xhi/b"


def test_clean_text_bounds_length():
    assert clean_text("a" * 600) == "a" * 500
    assert clean_text("abcdef", max_length=3) == "abc"


def test_clean_text_handles_none_and_non_strings():
    assert clean_text(None) == ""
    assert clean_text(42) == "42"
    assert clean_optional(None) is None
    assert clean_optional(" x ") == "x"


def test_booking_create_cleans_fields():
    request = BookingCreate(
        position=" RKSI_TWR ",
        start_at="2030-01-01T14:00:00Z",
        end_at="2030-01-01T16:00:00Z",
        notes="<i>notes</i>",
        booking_type="   ",
    )

    assert request.position == "RKSI_TWR"
    assert request.notes == "inotes/i"
    assert request.booking_type is None


def test_booking_create_rejects_unknown_fields():
    with pytest.raises(ValidationError):
        BookingCreate(position="RKSI_TWR", start_at="x", end_at="y", capacity=5)


def test_login_requires_vid():
    with pytest.raises(ValidationError):
        LoginRequest(vid="  <>  ")


@pytest.mark.parametrize("rating", [-1, 12])
def test_register_bounds_rating(rating):
    with pytest.raises(ValidationError):
        RegisterRequest(vid="100001", rating=rating)


def test_register_validates_email():
    with pytest.raises(ValidationError):
        RegisterRequest(vid="100001", rating=3, email="not-an-email")
