"""
Per-position admission lock.

The capacity check counts overlapping bookings and then inserts; two
concurrent submissions for the same position must not both pass the count.
``position_lock`` serialises that read-count-then-write sequence:

- a process-local ``threading.Lock`` per position code, held until the
  caller's transaction has committed;
- on PostgreSQL additionally ``pg_advisory_xact_lock`` keyed by the code,
  which serialises workers in other processes and is released by the
  database at commit/rollback.

Waiting is bounded on both layers; running out of time raises
``BookingLockTimeout``.
"""

from __future__ import annotations

from contextlib import contextmanager
import logging
import threading
import time
from typing import Dict, Iterator

from sqlalchemy import text
from sqlalchemy.exc import OperationalError
from sqlalchemy.orm import Session

from ..monitoring.prometheus_metrics import prometheus_metrics
from .exceptions import BookingLockTimeout

logger = logging.getLogger(__name__)

_LOCAL_LOCKS: Dict[str, threading.Lock] = {}
_LOCAL_LOCKS_GUARD = threading.Lock()


def _lock_key(position: str) -> str:
    return f"position:{position}:admission"


def _local_lock(position: str) -> threading.Lock:
    with _LOCAL_LOCKS_GUARD:
        lock = _LOCAL_LOCKS.get(position)
        if lock is None:
            lock = threading.Lock()
            _LOCAL_LOCKS[position] = lock
        return lock


def _acquire_advisory_lock(db: Session, position: str, timeout_s: float) -> None:
    timeout_ms = max(1, int(timeout_s * 1000))
    try:
        # SET LOCAL only lasts for the current transaction
        db.execute(text(f"SET LOCAL lock_timeout = '{timeout_ms}ms'"))
        db.execute(
            text("SELECT pg_advisory_xact_lock(hashtext(:key))"),
            {"key": _lock_key(position)},
        )
    except OperationalError as exc:
        logger.warning(
            "position_lock_advisory_timeout",
            extra={"position": position, "timeout_s": timeout_s, "error": str(exc)},
        )
        db.rollback()
        raise BookingLockTimeout(position, timeout_s) from exc


@contextmanager
def position_lock(db: Session, position: str, timeout_s: float = 10.0) -> Iterator[None]:
    """
    Hold the admission lock for ``position`` for the duration of the block.

    The caller must commit inside the block so the next holder's count
    sees this holder's write.

    Raises:
        BookingLockTimeout: If the lock is not acquired within ``timeout_s``
    """
    lock = _local_lock(position)
    started = time.monotonic()
    if not lock.acquire(timeout=timeout_s):
        logger.warning(
            "position_lock_local_timeout",
            extra={"position": position, "timeout_s": timeout_s},
        )
        raise BookingLockTimeout(position, timeout_s)

    try:
        if db.get_bind().dialect.name == "postgresql":
            remaining = max(0.001, timeout_s - (time.monotonic() - started))
            _acquire_advisory_lock(db, position, remaining)
        prometheus_metrics.record_lock_wait(time.monotonic() - started)
        yield
    finally:
        lock.release()
