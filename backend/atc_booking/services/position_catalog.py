# backend/atc_booking/services/position_catalog.py
"""
Position Catalog Service.

Positions are read through a process-wide ``CatalogCache`` holding
immutable ``PositionRecord`` snapshots, so cached entries never outlive the
session that loaded them. Capacity and rating requirement edits become
visible within the cache TTL, or immediately after ``invalidate()``.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta
import logging
import threading
from typing import Any, Callable, Dict, List, Optional, Sequence

from sqlalchemy.orm import Session

from ..core.constants import DEFAULT_POSITION_CAPACITY, DEFAULT_REQUIRED_RATING, rating_name
from ..core.timezone_utils import Clock, utc_now
from ..models.position import Position
from ..monitoring.prometheus_metrics import prometheus_metrics
from ..repositories.factory import RepositoryFactory
from .base import BaseService

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PositionRecord:
    """Detached, read-only view of a catalog entry."""

    code: str
    name: Optional[str]
    capacity: int
    required_rating: int
    role: Optional[str] = None
    division: Optional[str] = None

    @property
    def required_rating_name(self) -> str:
        return rating_name(self.required_rating)

    @classmethod
    def from_model(cls, position: Position) -> "PositionRecord":
        return cls(
            code=position.code,
            name=position.name,
            capacity=position.effective_capacity,
            required_rating=(
                position.required_rating
                if position.required_rating is not None
                else DEFAULT_REQUIRED_RATING
            ),
            role=position.role,
            division=position.division,
        )


class CatalogCache:
    """
    Read-through cache of the full, code-ordered position listing.

    The loader is passed per call so each reload runs on the caller's
    session. Thread-safe.
    """

    def __init__(self, ttl_seconds: float = 300, clock: Clock = utc_now):
        self.ttl = timedelta(seconds=ttl_seconds)
        self.clock = clock
        self._lock = threading.Lock()
        self._records: Optional[List[PositionRecord]] = None
        self._loaded_at: Optional[datetime] = None

    def _is_fresh(self, now: datetime) -> bool:
        return (
            self._records is not None
            and self._loaded_at is not None
            and now - self._loaded_at < self.ttl
        )

    def get_all(self, loader: Callable[[], Sequence[PositionRecord]]) -> List[PositionRecord]:
        """Return the cached listing, reloading it on miss or expiry."""
        with self._lock:
            now = self.clock()
            if self._is_fresh(now):
                prometheus_metrics.record_catalog_cache("hit")
                return list(self._records or [])

            prometheus_metrics.record_catalog_cache("reload")
            records = list(loader())
            self._records = records
            self._loaded_at = now
            return list(records)

    def peek(self, code: str) -> Optional[PositionRecord]:
        """Look ``code`` up in the cached listing without reloading."""
        with self._lock:
            if not self._is_fresh(self.clock()):
                return None
            for record in self._records or []:
                if record.code == code:
                    return record
            return None

    def invalidate(self) -> None:
        with self._lock:
            self._records = None
            self._loaded_at = None


# Seeded on startup; seeding upserts by code so edits here propagate.
DEFAULT_POSITIONS: List[Dict[str, Any]] = [
    # Korea
    {"code": "RKSS_DEL", "name": "Seoul Gimpo Delivery", "role": "DEL", "division": "XE", "required_rating": 1},
    {"code": "RKSS_GND", "name": "Seoul Gimpo Ground", "role": "GND", "division": "XE", "required_rating": 2},
    {"code": "RKSS_TWR", "name": "Seoul Gimpo Tower", "role": "TWR", "division": "XE", "required_rating": 4},
    {"code": "RKSS_APP", "name": "Seoul Gimpo Approach", "role": "APP", "division": "XE", "required_rating": 5},
    {"code": "RKSI_DEL", "name": "Seoul Incheon Delivery", "role": "DEL", "division": "XE", "required_rating": 2},
    {"code": "RKSI_GND", "name": "Seoul Incheon Ground", "role": "GND", "division": "XE", "required_rating": 3},
    {"code": "RKSI_TWR", "name": "Seoul Incheon Tower", "role": "TWR", "division": "XE", "required_rating": 4},
    {"code": "RKSI_APP", "name": "Incheon Approach", "role": "APP", "division": "XE", "required_rating": 5},
    {"code": "RKSI_CTR", "name": "Incheon Control", "role": "CTR", "division": "XE", "required_rating": 6},
    {"code": "RKPC_GND", "name": "Jeju Ground", "role": "GND", "division": "XE", "required_rating": 2},
    {"code": "RKPC_TWR", "name": "Jeju Tower", "role": "TWR", "division": "XE", "required_rating": 4},
    {"code": "RKPC_APP", "name": "Jeju Approach", "role": "APP", "division": "XE", "required_rating": 5},
    {"code": "RKPK_GND", "name": "Busan Ground", "role": "GND", "division": "XE", "required_rating": 2},
    {"code": "RKPK_TWR", "name": "Busan Gimhae Tower", "role": "TWR", "division": "XE", "required_rating": 4},
    {"code": "RKPK_APP", "name": "Busan Approach", "role": "APP", "division": "XE", "required_rating": 5},
    {"code": "RKTN_TWR", "name": "Daegu Tower", "role": "TWR", "division": "XE", "required_rating": 4},
    {"code": "RKJJ_TWR", "name": "Gwangju Tower", "role": "TWR", "division": "XE", "required_rating": 4},
    {"code": "RKNY_TWR", "name": "Yangyang Tower", "role": "TWR", "division": "XE", "required_rating": 4},
    # Japan
    {"code": "RJTT_GND", "name": "Tokyo Haneda Ground", "role": "GND", "division": "JP", "required_rating": 3},
    {"code": "RJTT_TWR", "name": "Tokyo Haneda Tower", "role": "TWR", "division": "JP", "required_rating": 4},
    {"code": "RJTT_APP", "name": "Tokyo Approach", "role": "APP", "division": "JP", "required_rating": 5},
    {"code": "RJAA_TWR", "name": "Tokyo Narita Tower", "role": "TWR", "division": "JP", "required_rating": 4},
    {"code": "RJBB_TWR", "name": "Osaka Kansai Tower", "role": "TWR", "division": "JP", "required_rating": 4},
    {"code": "RJBB_APP", "name": "Osaka Approach", "role": "APP", "division": "JP", "required_rating": 5},
    # Hong Kong
    {"code": "VHHH_GND", "name": "Hong Kong Ground", "role": "GND", "division": "HK", "required_rating": 2},
    {"code": "VHHH_TWR", "name": "Hong Kong Tower", "role": "TWR", "division": "HK", "required_rating": 4},
    {"code": "VHHH_APP", "name": "Hong Kong Approach", "role": "APP", "division": "HK", "required_rating": 5},
    # Singapore
    {"code": "WSSS_GND", "name": "Singapore Changi Ground", "role": "GND", "division": "SO", "required_rating": 2},
    {"code": "WSSS_TWR", "name": "Singapore Changi Tower", "role": "TWR", "division": "SO", "required_rating": 4},
    {"code": "WSSS_APP", "name": "Singapore Approach", "role": "APP", "division": "SO", "required_rating": 5},
    # United States
    {"code": "KJFK_GND", "name": "New York JFK Ground", "role": "GND", "division": "US", "required_rating": 3},
    {"code": "KJFK_TWR", "name": "New York JFK Tower", "role": "TWR", "division": "US", "required_rating": 4},
    {"code": "KLAX_TWR", "name": "Los Angeles Tower", "role": "TWR", "division": "US", "required_rating": 4},
    {"code": "KSFO_TWR", "name": "San Francisco Tower", "role": "TWR", "division": "US", "required_rating": 4},
    # Europe
    {"code": "EGLL_GND", "name": "London Heathrow Ground", "role": "GND", "division": "EU", "required_rating": 3},
    {"code": "EGLL_TWR", "name": "London Heathrow Tower", "role": "TWR", "division": "EU", "required_rating": 4},
    {"code": "LFPG_TWR", "name": "Paris CDG Tower", "role": "TWR", "division": "EU", "required_rating": 4},
    {"code": "EDDF_TWR", "name": "Frankfurt Tower", "role": "TWR", "division": "EU", "required_rating": 4},
]


class PositionCatalogService(BaseService):
    """Catalog reads through the shared cache, plus seeding."""

    def __init__(self, db: Session, cache: CatalogCache, position_repository: Any = None):
        super().__init__(db)
        self.cache = cache
        self.repository = position_repository or RepositoryFactory.create_position_repository(db)

    def _load(self) -> List[PositionRecord]:
        return [PositionRecord.from_model(p) for p in self.repository.list_ordered()]

    @BaseService.measure_operation("list_positions")
    def list_positions(self) -> List[PositionRecord]:
        return self.cache.get_all(self._load)

    def get_by_code(self, code: Optional[str]) -> Optional[PositionRecord]:
        """
        Cached lookup with a direct store fall-through.

        A code missing from a fresh listing is still looked up directly, so
        positions added since the last reload resolve immediately.
        """
        if not code:
            return None
        cached = self.cache.peek(code)
        if cached is not None:
            return cached

        prometheus_metrics.record_catalog_cache("miss")
        position = self.repository.get_by_code(code)
        return PositionRecord.from_model(position) if position is not None else None

    @BaseService.measure_operation("seed_default_positions")
    def seed_default_positions(self, positions: Optional[Sequence[Dict[str, Any]]] = None) -> int:
        """Upsert the default catalog by code and drop the cached listing."""
        entries = positions if positions is not None else DEFAULT_POSITIONS
        with self.transaction():
            for entry in entries:
                data = {"capacity": DEFAULT_POSITION_CAPACITY, **entry}
                self.repository.upsert(data)
        self.cache.invalidate()
        self.log_operation("seed_default_positions", count=len(entries))
        return len(entries)
