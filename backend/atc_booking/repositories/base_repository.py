# backend/atc_booking/repositories/base_repository.py
"""
Generic data access shared by the booking, position and user repositories.

Repositories add and flush but never commit: ``BaseService.transaction()``
decides when work becomes visible, which is what lets the admission engine
commit while still holding the position lock. SQLAlchemy failures leave
this layer as ``RepositoryException``.
"""

from abc import ABC, abstractmethod
import logging
from typing import Any, Generic, Optional, Type, TypeVar

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from ..core.exceptions import RepositoryException

T = TypeVar("T")

logger = logging.getLogger(__name__)


class IRepository(ABC, Generic[T]):
    """Store contract the services are written against."""

    @abstractmethod
    def get_by_id(self, id: Any) -> Optional[T]:
        ...

    @abstractmethod
    def create(self, **kwargs: Any) -> T:
        ...

    @abstractmethod
    def update(self, id: Any, **kwargs: Any) -> Optional[T]:
        ...

    @abstractmethod
    def delete(self, id: Any) -> bool:
        ...


class BaseRepository(IRepository[T]):
    """
    SQLAlchemy implementation of ``IRepository``.

    Attributes:
        db: Session owned by the calling service
        model: Mapped class this repository reads and writes
    """

    def __init__(self, db: Session, model: Type[T]):
        self.db = db
        self.model = model
        self.logger = logging.getLogger(f"{__name__}.{model.__name__}")

    def _fail(self, action: str, exc: Exception) -> RepositoryException:
        name = self.model.__name__
        self.logger.error(f"{name} {action} failed: {str(exc)}")
        return RepositoryException(f"Failed to {action} {name}: {str(exc)}")

    def get_by_id(self, id: Any) -> Optional[T]:
        try:
            return self.db.get(self.model, id)
        except SQLAlchemyError as e:
            raise self._fail("load", e) from e

    def create(self, **kwargs: Any) -> T:
        """Add a new row and flush so generated keys are populated."""
        try:
            entity = self.model(**kwargs)
            self.db.add(entity)
            self.db.flush()
            return entity
        except IntegrityError as e:
            raise self._fail("insert (constraint violated)", e) from e
        except SQLAlchemyError as e:
            raise self._fail("create", e) from e

    def update(self, id: Any, **kwargs: Any) -> Optional[T]:
        """
        Set the given attributes on an existing row.

        Unknown attribute names are ignored. Returns None when ``id`` does
        not exist.
        """
        try:
            entity = self.get_by_id(id)
            if entity is None:
                return None
            for key, value in kwargs.items():
                if hasattr(entity, key):
                    setattr(entity, key, value)
            self.db.flush()
            return entity
        except SQLAlchemyError as e:
            raise self._fail("update", e) from e

    def delete(self, id: Any) -> bool:
        try:
            entity = self.get_by_id(id)
            if entity is None:
                return False
            self.db.delete(entity)
            self.db.flush()
            return True
        except SQLAlchemyError as e:
            raise self._fail("delete", e) from e

    def find_one_by(self, **kwargs: Any) -> Optional[T]:
        """First row whose columns equal ``kwargs``, or None."""
        try:
            return self.db.query(self.model).filter_by(**kwargs).first()
        except SQLAlchemyError as e:
            raise self._fail("look up", e) from e
