"""Application-wide constants for the ATC position booking service."""

from __future__ import annotations

from typing import Dict

API_TITLE = "ATC Position Booking API"
API_VERSION = "1.0.0"
API_DESCRIPTION = "Booking scheduler for air-traffic-control positions with rating-gated access."

# Calendar window accepted for booking instants
MIN_BOOKING_YEAR = 2020
MAX_BOOKING_YEAR = 2100

# Text constraints
MAX_NOTES_LENGTH = 500
MAX_CODE_LENGTH = 32

# IVAO ATC rating scale
RATING_LEVELS: Dict[int, str] = {
    0: "NO_RATING",
    1: "OBS",
    2: "AS1",
    3: "AS2",
    4: "AS3",
    5: "ADC",
    6: "APC",
    7: "ACC",
    8: "SEC",
    9: "SAI",
    10: "CAI",
    11: "SUP",
    12: "ADM",
}

NO_RATING = 0
OBSERVER_RATING = 1  # observers can never hold a position
MAX_REGISTRATION_RATING = 11

DEFAULT_POSITION_CAPACITY = 1
DEFAULT_REQUIRED_RATING = 1


def rating_name(rating: int) -> str:
    """Return the short name for a rating, e.g. ``5 -> "ADC"``."""
    return RATING_LEVELS.get(rating, f"Rating {rating}")
