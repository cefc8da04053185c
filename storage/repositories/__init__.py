"""
Repository Layer.

Repositories own all SQL. Each one takes an injected
Session; the caller owns the transaction.
"""

from storage.repositories.base import BaseRepository
from storage.repositories.exceptions import (
    DuplicateRecordError,
    ImmutableRecordError,
    RecordNotFoundError,
    RepositoryException,
)
from storage.repositories.risk_scores import RiskScoreRepository
from storage.repositories.schedules import ReportScheduleRepository
from storage.repositories.signals import SignalRepository


__all__ = [
    "BaseRepository",
    "DuplicateRecordError",
    "ImmutableRecordError",
    "RecordNotFoundError",
    "RepositoryException",
    "RiskScoreRepository",
    "ReportScheduleRepository",
    "SignalRepository",
]
