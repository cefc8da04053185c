"""
Base Repository Class.

============================================================
PURPOSE
============================================================
Shared plumbing for the record store repositories:
- The injected Session (the caller owns the transaction)
- One place where SQLAlchemy errors are translated
- Small query helpers

SQLAlchemy exceptions never leave a repository. A unique
violation becomes DuplicateRecordError; every other
database failure becomes the retryable DependencyUnavailable.

============================================================
USAGE
============================================================
    class CourseRepository(BaseRepository[Course]):
        def __init__(self, session: Session):
            super().__init__(session, Course, "CourseRepository")

============================================================
"""

import logging
from abc import ABC
from contextlib import contextmanager
from typing import Any, Dict, Generator, Generic, List, Optional, Type, TypeVar
from uuid import UUID

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from core.exceptions import AnalyticsException, DependencyUnavailable
from storage.models.base import Base
from storage.repositories.exceptions import DuplicateRecordError, RecordNotFoundError


T = TypeVar("T", bound=Base)

_UNIQUE_VIOLATION_MARKERS = ("unique", "duplicate")


class BaseRepository(ABC, Generic[T]):
    """Session holder and error translator for one ORM model."""

    def __init__(self, session: Session, model_class: Type[T], repository_name: str) -> None:
        self._session = session
        self._model_class = model_class
        self._repository_name = repository_name
        self._logger = logging.getLogger(f"repository.{repository_name}")

    # =========================================================
    # ERROR TRANSLATION
    # =========================================================

    def _translate(
        self,
        error: SQLAlchemyError,
        operation: str,
        context: Optional[Dict[str, Any]] = None,
    ) -> AnalyticsException:
        self._logger.error(f"Database error in {operation}: {error}", exc_info=True)

        if isinstance(error, IntegrityError):
            text = str(error).lower()
            if any(marker in text for marker in _UNIQUE_VIOLATION_MARKERS):
                return DuplicateRecordError(
                    repository_name=self._repository_name,
                    operation=operation,
                    original_error=str(error),
                )

        return DependencyUnavailable(
            f"Record store failure in {self._repository_name}.{operation}: {error}",
            dependency=self._repository_name,
            operation=operation,
            context=dict(context or {}),
            cause=error,
        )

    @contextmanager
    def _guard(self, operation: str, **context: Any) -> Generator[None, None, None]:
        """Run a block with SQLAlchemy errors translated."""
        try:
            yield
        except SQLAlchemyError as e:
            raise self._translate(e, operation, context) from e

    # =========================================================
    # HELPERS
    # =========================================================

    def _add(self, entity: T) -> T:
        """Add and flush so generated keys are populated."""
        with self._guard("add", entity=str(entity)):
            self._session.add(entity)
            self._session.flush()
        self._logger.debug(f"Added {type(entity).__name__}")
        return entity

    def _flush(self, operation: str) -> None:
        with self._guard(operation):
            self._session.flush()

    def _get_by_id_or_raise(self, record_id: UUID, id_field: str = "id") -> T:
        """
        Load an entity by primary key.

        Raises:
            RecordNotFoundError: If no row has that key
        """
        with self._guard("get_by_id", id=str(record_id)):
            entity = self._session.get(self._model_class, record_id)
        if entity is None:
            raise RecordNotFoundError(
                repository_name=self._repository_name,
                record_id=record_id,
                id_field=id_field,
            )
        return entity

    def _execute_query(self, stmt: Any, operation: str = "query") -> List[Any]:
        """All scalar results of a select."""
        with self._guard(operation):
            return list(self._session.execute(stmt).scalars().all())

    def _execute_scalar(self, stmt: Any, operation: str = "query_scalar") -> Optional[Any]:
        with self._guard(operation):
            return self._session.execute(stmt).scalar_one_or_none()
