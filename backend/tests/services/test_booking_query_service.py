from datetime import date, timedelta

import pytest

from atc_booking.core.exceptions import ValidationException
from atc_booking.repositories.booking_repository import BookingRepository
from atc_booking.services.booking_query_service import BookingQueryService, parse_day
from tests.support import NOW, at


@pytest.fixture
def queries(db, clock):
    return BookingQueryService(db, clock=clock)


@pytest.fixture
def bookings(db):
    repo = BookingRepository(db)
    rows = {
        "ended": repo.create(
            user_vid="100001", user_name="A", position="RKSI_TWR",
            start_at=NOW - timedelta(hours=3), end_at=NOW - timedelta(hours=2),
        ),
        "active": repo.create(
            user_vid="100005", user_name="B", position="RKSI_TWR",
            start_at=NOW - timedelta(hours=1), end_at=at(1),
        ),
        "tomorrow": repo.create(
            user_vid="100001", user_name="A", position="RKSS_GND",
            start_at=NOW + timedelta(days=1), end_at=NOW + timedelta(days=1, hours=1),
        ),
    }
    db.commit()
    return rows


def test_list_future_skips_ended(queries, bookings):
    ids = [b.id for b in queries.list_future()]

    assert ids == [bookings["active"].id, bookings["tomorrow"].id]


def test_list_by_date(queries, bookings):
    today = {b.id for b in queries.list_by_date("2030-01-01")}
    tomorrow = {b.id for b in queries.list_by_date(date(2030, 1, 2))}

    assert today == {bookings["ended"].id, bookings["active"].id}
    assert tomorrow == {bookings["tomorrow"].id}


def test_current_occupants_default_to_clock(queries, bookings):
    assert [b.id for b in queries.current_occupants("RKSI_TWR")] == [bookings["active"].id]
    assert queries.current_occupants("RKSI_TWR", now=at(2)) == []


def test_current_occupants_requires_position(queries):
    with pytest.raises(ValidationException) as exc_info:
        queries.current_occupants("")

    assert exc_info.value.code == "POSITION_REQUIRED"


@pytest.mark.parametrize("value", ["2030/01/01", "01-01-2030", "2030-13-01", "2030-02-30", ""])
def test_parse_day_rejects_bad_input(value):
    with pytest.raises(ValidationException) as exc_info:
        parse_day(value)

    assert exc_info.value.code == "INVALID_DATE"


def test_parse_day():
    assert parse_day(" 2030-01-05 ") == date(2030, 1, 5)
