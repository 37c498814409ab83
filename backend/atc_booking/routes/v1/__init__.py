"""Versioned API routers mounted under ``/api/v1``."""

from . import auth, bookings, health, positions, prometheus

__all__ = ["auth", "bookings", "health", "positions", "prometheus"]
