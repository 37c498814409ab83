from datetime import timedelta

import pytest

from atc_booking.models.position import Position
from atc_booking.services.position_catalog import (
    DEFAULT_POSITIONS,
    CatalogCache,
    PositionCatalogService,
    PositionRecord,
)
from tests.support import NOW


class MutableClock:
    def __init__(self, now=NOW):
        self.now = now

    def __call__(self):
        return self.now

    def advance(self, **kwargs):
        self.now = self.now + timedelta(**kwargs)


@pytest.fixture
def moving_clock():
    return MutableClock()


@pytest.fixture
def cached_catalog(db, moving_clock):
    return PositionCatalogService(db, CatalogCache(ttl_seconds=300, clock=moving_clock))


def _set_capacity(db, code: str, capacity: int) -> None:
    db.query(Position).filter(Position.code == code).update({"capacity": capacity})
    db.commit()


def test_lists_every_position_ordered_by_code(catalog):
    positions = catalog.list_positions()

    codes = [p.code for p in positions]
    assert codes == sorted(codes)
    assert len(codes) == len(DEFAULT_POSITIONS) + 1
    assert "TEST_CTR" in codes


def test_records_are_detached_snapshots(catalog):
    record = catalog.get_by_code("RKSI_APP")

    assert isinstance(record, PositionRecord)
    assert record.capacity == 1
    assert record.required_rating == 5
    assert record.required_rating_name == "ADC"


def test_missing_code_returns_none(catalog):
    assert catalog.get_by_code("") is None
    assert catalog.get_by_code(None) is None
    assert catalog.get_by_code("NOPE_TWR") is None


def test_cached_values_survive_until_ttl(db, cached_catalog, moving_clock):
    cached_catalog.list_positions()
    _set_capacity(db, "RKSI_TWR", 3)

    assert cached_catalog.get_by_code("RKSI_TWR").capacity == 1

    moving_clock.advance(seconds=301)

    assert cached_catalog.get_by_code("RKSI_TWR").capacity == 3
    assert next(p for p in cached_catalog.list_positions() if p.code == "RKSI_TWR").capacity == 3


def test_invalidate_forces_reload(db, cached_catalog):
    cached_catalog.list_positions()
    _set_capacity(db, "RKSI_TWR", 2)

    cached_catalog.cache.invalidate()

    assert cached_catalog.get_by_code("RKSI_TWR").capacity == 2


def test_new_position_resolves_before_reload(db, cached_catalog):
    cached_catalog.list_positions()
    db.add(Position(code="RKSS_CTR", name="Seoul Control", capacity=1, required_rating=6))
    db.commit()

    record = cached_catalog.get_by_code("RKSS_CTR")

    assert record is not None
    assert record.required_rating == 6


def test_seeding_is_idempotent_and_restores_defaults(db, catalog):
    _set_capacity(db, "RKSI_TWR", 4)
    before = db.query(Position).count()

    seeded = catalog.seed_default_positions()

    assert seeded == len(DEFAULT_POSITIONS)
    assert db.query(Position).count() == before
    db.expire_all()
    assert catalog.get_by_code("RKSI_TWR").capacity == 1
