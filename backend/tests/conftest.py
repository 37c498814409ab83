"""
Shared fixtures for the booking service test suite.

Every test gets its own file-backed SQLite database so that worker threads
(TestClient, concurrency tests) see the same data through separate
connections. The clock is frozen at ``NOW``.
"""

from datetime import datetime
import os
from typing import Callable, Generator

# Configure settings before the application package is imported
os.environ.setdefault("IS_TESTING", "true")
os.environ.setdefault("SEED_ON_STARTUP", "false")
os.environ.setdefault("IVAO_FAKE", "true")
os.environ.setdefault("SECRET_KEY", "test-secret-key-with-enough-length-for-hs256")

from fastapi.testclient import TestClient
import pytest
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker

from atc_booking.api.dependencies import (
    get_catalog_cache,
    get_clock,
    get_db,
    get_ivao_client,
)
from atc_booking.database import Base, build_engine
from atc_booking.integrations.ivao_client import FakeIvaoClient, IvaoProfile
from atc_booking.main import app
from atc_booking import models  # noqa: F401
from atc_booking.services.admission import AdmissionEngine
from atc_booking.services.identity_directory import IdentityDirectory
from atc_booking.services.position_catalog import CatalogCache, PositionCatalogService
from tests.support import CONTROLLERS, NOW, SHARED_POSITION


@pytest.fixture
def clock() -> Callable[[], datetime]:
    return lambda: NOW


@pytest.fixture
def test_engine(tmp_path) -> Generator[Engine, None, None]:
    engine = build_engine(f"sqlite:///{tmp_path / 'atc_booking_test.db'}")
    Base.metadata.create_all(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(test_engine: Engine) -> sessionmaker:
    return sessionmaker(
        autocommit=False, autoflush=False, bind=test_engine, expire_on_commit=False
    )


@pytest.fixture
def catalog_cache(clock) -> CatalogCache:
    return CatalogCache(ttl_seconds=300, clock=clock)


@pytest.fixture
def seeded(session_factory: sessionmaker, catalog_cache: CatalogCache, clock) -> None:
    """Default catalog, the shared position, and the registered controllers."""
    session = session_factory()
    try:
        catalog = PositionCatalogService(session, catalog_cache)
        catalog.seed_default_positions()
        catalog.seed_default_positions([SHARED_POSITION])
        directory = IdentityDirectory(session, clock=clock)
        for vid, rating in CONTROLLERS.items():
            directory.register(vid, rating, name=f"Controller {vid}")
    finally:
        session.close()


@pytest.fixture
def db(session_factory: sessionmaker, seeded) -> Generator[Session, None, None]:
    """
    Create a new database session for each test.
    """
    session = session_factory()
    yield session
    session.rollback()
    session.close()


@pytest.fixture
def catalog(db: Session, catalog_cache: CatalogCache) -> PositionCatalogService:
    return PositionCatalogService(db, catalog_cache)


@pytest.fixture
def directory(db: Session, clock) -> IdentityDirectory:
    return IdentityDirectory(db, client=FakeIvaoClient(), clock=clock)


@pytest.fixture
def make_engine(catalog_cache: CatalogCache, clock) -> Callable[[Session], AdmissionEngine]:
    """Build an admission engine around any session (one per thread)."""

    def _make(session: Session) -> AdmissionEngine:
        return AdmissionEngine(
            session,
            PositionCatalogService(session, catalog_cache),
            IdentityDirectory(session, clock=clock),
            clock=clock,
            max_future_bookings=3,
            lock_timeout_s=5.0,
        )

    return _make


@pytest.fixture
def admission(db: Session, make_engine) -> AdmissionEngine:
    return make_engine(db)


@pytest.fixture
def fake_ivao() -> FakeIvaoClient:
    return FakeIvaoClient(
        {
            "555555": IvaoProfile(
                vid="555555",
                name="Remote Controller",
                rating=5,
                rating_level="ADC",
                division_id="XE",
                country_id="KR",
            )
        }
    )


@pytest.fixture
def client(
    session_factory: sessionmaker, seeded, catalog_cache, clock, fake_ivao
) -> Generator[TestClient, None, None]:
    """Create a test client bound to the test database and frozen clock."""

    def override_get_db() -> Generator[Session, None, None]:
        session = session_factory()
        try:
            yield session
            session.commit()
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_clock] = lambda: clock
    app.dependency_overrides[get_catalog_cache] = lambda: catalog_cache
    app.dependency_overrides[get_ivao_client] = lambda: fake_ivao

    test_client = TestClient(app)

    yield test_client

    app.dependency_overrides.clear()
    test_client.close()

