"""
FastAPI dependencies.

Usage:
    from atc_booking.api.dependencies import get_admission_engine, get_current_vid
"""

from .auth import get_current_claims_optional, get_current_vid
from .database import get_db
from .services import (
    get_admission_engine,
    get_booking_query_service,
    get_catalog_cache,
    get_clock,
    get_identity_directory,
    get_ivao_client,
    get_position_catalog_service,
)

__all__ = [
    "get_admission_engine",
    "get_booking_query_service",
    "get_catalog_cache",
    "get_clock",
    "get_current_claims_optional",
    "get_current_vid",
    "get_db",
    "get_identity_directory",
    "get_ivao_client",
    "get_position_catalog_service",
]
