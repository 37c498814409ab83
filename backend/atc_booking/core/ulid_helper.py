"""Booking identifiers: 26-character, lexicographically time-ordered ULIDs."""

import ulid


def generate_ulid() -> str:
    return str(ulid.ULID())
