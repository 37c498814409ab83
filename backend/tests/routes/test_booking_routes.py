"""HTTP surface of the booking endpoints, including status mapping for rejections."""

from datetime import timedelta

from fastapi.testclient import TestClient
import pytest

from atc_booking.repositories.booking_repository import BookingRepository
from tests.support import NOW, at, auth_headers

BASE = "/api/v1/bookings"


def _payload(position="RKSI_TWR", start=2, end=4, **extra):
    return {
        "position": position,
        "start_at": at(start).isoformat(),
        "end_at": at(end).isoformat(),
        **extra,
    }


def _book(client: TestClient, vid="100001", **kwargs):
    response = client.post(BASE, json=_payload(**kwargs), headers=auth_headers(vid))
    assert response.status_code == 201, response.text
    return response.json()


class TestCreate:
    def test_requires_token(self, client):
        response = client.post(BASE, json=_payload())

        assert response.status_code == 401
        assert response.headers["WWW-Authenticate"] == "Bearer"

    def test_rejects_invalid_token(self, client):
        response = client.post(BASE, json=_payload(), headers={"Authorization": "Bearer nope"})

        assert response.status_code == 401

    def test_creates_booking(self, client):
        body = _book(client, notes="Evening shift", training_mode=True)

        assert body["position"] == "RKSI_TWR"
        assert body["user_vid"] == "100001"
        assert body["user_name"] == "Controller 100001"
        assert body["training_mode"] is True
        assert len(body["id"]) == 26

    @pytest.mark.parametrize(
        "vid, payload, status_code, code",
        [
            ("100001", _payload(position="NOPE_TWR"), 404, "POSITION_NOT_FOUND"),
            ("100001", _payload(start=4, end=2), 400, "INVALID_INTERVAL"),
            ("100001", {"position": "RKSI_TWR", "start_at": "soon", "end_at": "later"}, 400, "INVALID_INTERVAL"),
            ("100001", _payload(start=-1, end=2), 400, "PAST_BOOKING"),
            ("100003", _payload(position="RKSS_DEL"), 403, "OBSERVER_FORBIDDEN"),
            ("100002", _payload(position="RKSI_APP"), 403, "INSUFFICIENT_RATING"),
            ("999999", _payload(), 404, "IDENTITY_NOT_FOUND"),
        ],
    )
    def test_rejection_status_codes(self, client, vid, payload, status_code, code):
        response = client.post(BASE, json=payload, headers=auth_headers(vid))

        assert response.status_code == status_code
        assert response.json()["detail"]["code"] == code

    def test_overlap_is_conflict(self, client):
        _book(client, start=2, end=4)

        response = client.post(BASE, json=_payload(start=3, end=5), headers=auth_headers("100005"))

        assert response.status_code == 409
        detail = response.json()["detail"]
        assert detail["code"] == "CAPACITY_EXCEEDED"
        assert detail["details"]["capacity"] == 1

    def test_quota_is_unprocessable(self, client):
        for start in (2, 4, 6):
            _book(client, start=start, end=start + 1)

        response = client.post(BASE, json=_payload(start=8, end=9), headers=auth_headers("100001"))

        assert response.status_code == 422
        assert response.json()["detail"]["code"] == "QUOTA_EXCEEDED"

    def test_unknown_field_is_rejected(self, client):
        response = client.post(
            BASE, json=_payload(user_vid="100005"), headers=auth_headers("100001")
        )

        assert response.status_code == 422


class TestReads:
    def test_list_future_bookings(self, client):
        first = _book(client, position="RKSS_TWR")
        second = _book(client, vid="100005", position="RKSI_TWR")

        response = client.get(BASE)

        assert response.status_code == 200
        assert [b["id"] for b in response.json()] == [second["id"], first["id"]]

    def test_list_by_day(self, client):
        booking = _book(client)

        assert [b["id"] for b in client.get(f"{BASE}/date/2030-01-01").json()] == [booking["id"]]
        assert client.get(f"{BASE}/date/2030-01-02").json() == []

    def test_list_by_day_rejects_bad_dates(self, client):
        response = client.get(f"{BASE}/date/01-01-2030")

        assert response.status_code == 400
        assert response.json()["detail"]["code"] == "INVALID_DATE"

    def test_occupant(self, client, session_factory):
        session = session_factory()
        try:
            booking = BookingRepository(session).create(
                user_vid="100005",
                user_name="Controller 100005",
                position="RKSI_TWR",
                start_at=NOW - timedelta(minutes=30),
                end_at=at(1),
            )
            session.commit()
            booking_id = booking.id
        finally:
            session.close()

        occupied = client.get(f"{BASE}/occupant", params={"position": "RKSI_TWR"})
        free = client.get(f"{BASE}/occupant", params={"position": "RKSS_TWR"})

        assert occupied.status_code == 200
        assert [(o["id"], o["vid"]) for o in occupied.json()] == [(booking_id, "100005")]
        assert free.json() == []

    def test_occupant_requires_position(self, client):
        response = client.get(f"{BASE}/occupant")

        assert response.status_code == 400
        assert response.json()["detail"]["code"] == "POSITION_REQUIRED"


class TestUpdateAndDelete:
    def test_owner_moves_booking(self, client):
        booking = _book(client, start=2, end=4)

        response = client.put(
            f"{BASE}/{booking['id']}",
            json={"start_at": at(5).isoformat(), "end_at": at(6).isoformat()},
            headers=auth_headers("100001"),
        )

        assert response.status_code == 200
        assert response.json()["updated_at"] is not None

    def test_other_controller_cannot_update(self, client):
        booking = _book(client)

        response = client.put(
            f"{BASE}/{booking['id']}", json={"notes": "x"}, headers=auth_headers("100005")
        )

        assert response.status_code == 403
        assert response.json()["detail"]["code"] == "NOT_AUTHORIZED"

    def test_update_missing_booking(self, client):
        response = client.put(f"{BASE}/missing", json={"notes": "x"}, headers=auth_headers("100001"))

        assert response.status_code == 404
        assert response.json()["detail"]["code"] == "BOOKING_NOT_FOUND"

    def test_delete(self, client):
        booking = _book(client)

        forbidden = client.delete(f"{BASE}/{booking['id']}", headers=auth_headers("100005"))
        deleted = client.delete(f"{BASE}/{booking['id']}", headers=auth_headers("100001"))
        again = client.delete(f"{BASE}/{booking['id']}", headers=auth_headers("100001"))

        assert forbidden.status_code == 403
        assert deleted.status_code == 200
        assert deleted.json() == {"ok": True, "id": booking["id"]}
        assert again.status_code == 404
        assert client.get(BASE).json() == []

    def test_delete_requires_token(self, client):
        assert client.delete(f"{BASE}/anything").status_code == 401
