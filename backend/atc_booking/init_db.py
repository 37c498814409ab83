# backend/atc_booking/init_db.py
"""
Create tables and seed reference data.

Run directly for a fresh local database:

    python -m atc_booking.init_db

PostgreSQL deployments apply ``alembic upgrade head`` first; ``create_all``
is then a no-op and only the seeding runs.
"""

import logging
from typing import Optional

from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker

from .database import Base, SessionLocal, engine as default_engine
from . import models  # noqa: F401  registers every table on Base.metadata
from .services.identity_directory import IdentityDirectory
from .services.position_catalog import CatalogCache, PositionCatalogService

logger = logging.getLogger(__name__)


def create_tables(bind: Optional[Engine] = None) -> None:
    Base.metadata.create_all(bind=bind or default_engine)


def seed_reference_data(db: Session, cache: Optional[CatalogCache] = None) -> None:
    """Upsert the default position catalog and ensure the test user exists."""
    catalog = PositionCatalogService(db, cache or CatalogCache())
    count = catalog.seed_default_positions()
    IdentityDirectory(db).seed_default_user()
    logger.info("Seeded reference data", extra={"positions": count})


def bootstrap(
    bind: Optional[Engine] = None,
    session_factory: Optional[sessionmaker] = None,
    cache: Optional[CatalogCache] = None,
) -> None:
    create_tables(bind)
    db = (session_factory or SessionLocal)()
    try:
        seed_reference_data(db, cache)
    finally:
        db.close()


if __name__ == "__main__":
    logging.basicConfig(
        level=logging.INFO, format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    )
    bootstrap()
    logger.info("Database initialised")
