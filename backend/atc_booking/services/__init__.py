"""
Service layer for the booking service.

- AdmissionEngine: validating writer for bookings
- BookingQueryService: listings and occupancy
- PositionCatalogService / CatalogCache: cached position catalog
- IdentityDirectory: VID to rated controller resolution
"""

from .admission import AdmissionEngine, Admitted, Deleted, Rejected
from .base import BaseService
from .booking_query_service import BookingQueryService
from .identity_directory import FallbackPolicy, IdentityDirectory
from .position_catalog import CatalogCache, PositionCatalogService, PositionRecord

__all__ = [
    "AdmissionEngine",
    "Admitted",
    "BaseService",
    "BookingQueryService",
    "CatalogCache",
    "Deleted",
    "FallbackPolicy",
    "IdentityDirectory",
    "PositionCatalogService",
    "PositionRecord",
    "Rejected",
]
