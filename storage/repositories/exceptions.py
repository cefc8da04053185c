"""
Repository Layer Exceptions.

============================================================
PURPOSE
============================================================
Repository-specific exceptions. Every database error is
caught inside a repository and re-raised as one of these,
or as core.exceptions.DependencyUnavailable when the store
itself failed.

============================================================
USAGE
============================================================
Repositories catch SQLAlchemy exceptions and re-raise with
context. Analytics code catches AnalyticsException and never
sees SQLAlchemy types.

============================================================
"""

from typing import Any, Optional

from core.exceptions import AnalyticsException, ErrorClassification, Severity


class RepositoryException(AnalyticsException):
    """
    Base exception for all repository operations.

    Business layers can catch this for generic error handling.
    """

    default_severity = Severity.MEDIUM
    default_classification = ErrorClassification.NON_RECOVERABLE

    def __init__(
        self,
        message: str,
        repository_name: str,
        operation: str,
        details: Optional[dict] = None
    ) -> None:
        self.repository_name = repository_name
        self.operation = operation
        self.details = details or {}
        super().__init__(
            f"[{repository_name}] {operation}: {message}",
            context={"repository": repository_name, "operation": operation, **self.details},
        )


class RecordNotFoundError(RepositoryException):
    """
    Raised when a requested record does not exist.

    Use for get_by_* operations when the record is expected
    to exist but cannot be found.
    """

    default_severity = Severity.LOW

    def __init__(
        self,
        repository_name: str,
        record_id: Any,
        id_field: str = "id"
    ) -> None:
        super().__init__(
            message=f"Record with {id_field}={record_id} not found",
            repository_name=repository_name,
            operation="get",
            details={id_field: str(record_id)}
        )
        self.record_id = record_id
        self.id_field = id_field


class DuplicateRecordError(RepositoryException):
    """Raised when an insert violates a unique constraint."""

    def __init__(
        self,
        repository_name: str,
        operation: str,
        original_error: str
    ) -> None:
        super().__init__(
            message=f"Duplicate record: {original_error[:200]}",
            repository_name=repository_name,
            operation=operation,
        )


class ImmutableRecordError(RepositoryException):
    """
    Raised on an attempt to modify an append-only record.

    Risk scores are never updated; a new record supersedes
    the old one.
    """

    default_severity = Severity.HIGH

    def __init__(
        self,
        repository_name: str,
        record_id: Any,
        operation: str = "update"
    ) -> None:
        super().__init__(
            message=f"Record {record_id} is immutable",
            repository_name=repository_name,
            operation=operation,
            details={"id": str(record_id)}
        )
        self.record_id = record_id


__all__ = [
    "RepositoryException",
    "RecordNotFoundError",
    "DuplicateRecordError",
    "ImmutableRecordError",
]
