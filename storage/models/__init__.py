"""
ORM Models of the analytics record store.

Importing this package registers every table on Base.metadata.
"""

from storage.models.base import Base, CreatedAtMixin, UuidPrimaryKeyMixin
from storage.models.risk_scores import RiskScoreRow
from storage.models.schedules import ReportScheduleRow
from storage.models.signals import (
    BehaviorEventRecord,
    Course,
    Enrollment,
    PhishingSimulation,
    QuizAttemptRecord,
)


__all__ = [
    "Base",
    "CreatedAtMixin",
    "UuidPrimaryKeyMixin",
    "RiskScoreRow",
    "ReportScheduleRow",
    "BehaviorEventRecord",
    "Course",
    "Enrollment",
    "PhishingSimulation",
    "QuizAttemptRecord",
]
