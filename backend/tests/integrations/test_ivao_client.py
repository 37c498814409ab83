import httpx
import pytest

from atc_booking.integrations.ivao_client import IvaoClient, IvaoError

USER_PAYLOAD = {
    "id": 123456,
    "publicNickname": "Kim Tower",
    "divisionId": "XE",
    "countryId": "KR",
    "rating": {"atcRating": {"id": 5, "shortName": "ADC"}},
}


def _client(handler) -> IvaoClient:
    return IvaoClient(
        api_key="secret-key",
        base_url="https://ivao.test/v2/",
        transport=httpx.MockTransport(handler),
    )


def test_get_user_maps_profile_and_sends_key():
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["url"] = str(request.url)
        seen["key"] = request.headers.get("apiKey")
        return httpx.Response(200, json=USER_PAYLOAD)

    profile = _client(handler).get_user("123456")

    assert seen == {"url": "https://ivao.test/v2/users/123456", "key": "secret-key"}
    assert profile.vid == "123456"
    assert profile.name == "Kim Tower"
    assert profile.rating == 5
    assert profile.rating_level == "ADC"
    assert profile.division_id == "XE"


def test_missing_rating_defaults_to_no_rating():
    profile = _client(lambda request: httpx.Response(200, json={"id": 42})).get_user("42")

    assert profile.rating == 0
    assert profile.rating_level == "NO_RATING"
    assert profile.name == "User 42"


def test_not_found_returns_none():
    assert _client(lambda request: httpx.Response(404)).get_user("1") is None


@pytest.mark.parametrize("status_code", [429, 502, 503, 504])
def test_throttling_and_outages_are_unavailable(status_code):
    client = _client(lambda request: httpx.Response(status_code, text="busy"))

    with pytest.raises(IvaoError) as exc_info:
        client.get_user("1")

    assert exc_info.value.status_code == status_code
    assert exc_info.value.is_unavailable


@pytest.mark.parametrize("status_code", [400, 401, 500])
def test_other_errors_are_not_unavailable(status_code):
    client = _client(lambda request: httpx.Response(status_code))

    with pytest.raises(IvaoError) as exc_info:
        client.get_user("1")

    assert exc_info.value.status_code == status_code
    assert not exc_info.value.is_unavailable


def test_transport_failure_is_unreachable():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectTimeout("timed out", request=request)

    with pytest.raises(IvaoError) as exc_info:
        _client(handler).get_user("1")

    assert exc_info.value.unreachable
    assert exc_info.value.is_unavailable


def test_malformed_json_raises():
    client = _client(lambda request: httpx.Response(200, text="<html>"))

    with pytest.raises(IvaoError) as exc_info:
        client.get_user("1")

    assert not exc_info.value.is_unavailable


def test_requires_api_key():
    with pytest.raises(ValueError):
        IvaoClient(api_key="")
