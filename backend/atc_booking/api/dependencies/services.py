# backend/atc_booking/api/dependencies/services.py
"""
Service layer dependencies for dependency injection.

Process-wide collaborators (catalog cache, IVAO client, clock) are
singletons; services are built per request around the request's session.
Tests override ``get_clock`` and ``get_ivao_client`` through
``app.dependency_overrides``.
"""

from functools import lru_cache
import logging
from typing import Optional

from fastapi import Depends
from sqlalchemy.orm import Session

from ...core.config import settings
from ...core.timezone_utils import Clock, utc_now
from ...integrations import FakeIvaoClient, IvaoClient
from ...services.admission import AdmissionEngine
from ...services.booking_query_service import BookingQueryService
from ...services.identity_directory import IdentityDirectory
from ...services.position_catalog import CatalogCache, PositionCatalogService
from .database import get_db

logger = logging.getLogger(__name__)


@lru_cache(maxsize=1)
def get_catalog_cache() -> CatalogCache:
    """Get the process-wide position catalog cache."""
    return CatalogCache(ttl_seconds=settings.catalog_cache_ttl_seconds)


@lru_cache(maxsize=1)
def _build_ivao_client() -> Optional[IvaoClient]:
    if settings.ivao_fake:
        logger.info("Using FakeIvaoClient (IVAO_FAKE enabled)")
        return FakeIvaoClient()
    if not settings.ivao_api_key.get_secret_value():
        logger.warning("IVAO_API_KEY not set; unknown VIDs resolve through the fallback policy")
        return None
    return IvaoClient(
        api_key=settings.ivao_api_key,
        base_url=settings.ivao_api_base,
        timeout=settings.ivao_timeout_seconds,
    )


def get_ivao_client() -> Optional[IvaoClient]:
    return _build_ivao_client()


def get_clock() -> Clock:
    return utc_now


def get_position_catalog_service(
    db: Session = Depends(get_db),
    cache: CatalogCache = Depends(get_catalog_cache),
) -> PositionCatalogService:
    return PositionCatalogService(db, cache)


def get_identity_directory(
    db: Session = Depends(get_db),
    client: Optional[IvaoClient] = Depends(get_ivao_client),
    clock: Clock = Depends(get_clock),
) -> IdentityDirectory:
    return IdentityDirectory(db, client=client, clock=clock)


def get_admission_engine(
    db: Session = Depends(get_db),
    catalog: PositionCatalogService = Depends(get_position_catalog_service),
    directory: IdentityDirectory = Depends(get_identity_directory),
    clock: Clock = Depends(get_clock),
) -> AdmissionEngine:
    """
    Get the admission engine for this request.

    Args:
        db: Database session
        catalog: Position catalog reads
        directory: Identity lookups

    Returns:
        AdmissionEngine instance
    """
    return AdmissionEngine(db, catalog, directory, clock=clock)


def get_booking_query_service(
    db: Session = Depends(get_db),
    clock: Clock = Depends(get_clock),
) -> BookingQueryService:
    return BookingQueryService(db, clock=clock)
