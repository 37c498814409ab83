"""Constants and helpers shared by the test modules."""

from datetime import datetime, timedelta, timezone
from typing import Dict

from atc_booking.auth import create_access_token

NOW = datetime(2030, 1, 1, 12, 0, tzinfo=timezone.utc)

# Controllers registered for every test: vid -> rating
CONTROLLERS: Dict[str, int] = {
    "100001": 5,  # ADC
    "100002": 4,  # AS3
    "100003": 1,  # OBS
    "100004": 0,  # NO_RATING
    "100005": 6,  # APC
    "100006": 5,  # ADC
    "100007": 5,  # ADC
    "100008": 5,  # ADC
}

# Extra position used for multi-seat tests
SHARED_POSITION = {
    "code": "TEST_CTR",
    "name": "Test Shared Control",
    "capacity": 2,
    "role": "CTR",
    "division": "XE",
    "required_rating": 2,
}


def at(hours: float, minutes: float = 0) -> datetime:
    """Instant ``hours`` (and ``minutes``) after the frozen clock."""
    return NOW + timedelta(hours=hours, minutes=minutes)


def auth_headers(vid: str) -> Dict[str, str]:
    token = create_access_token({"sub": vid, "vid": vid})
    return {"Authorization": f"Bearer {token}"}
