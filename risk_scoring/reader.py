"""
Risk Scoring Engine - Collaborator Interfaces.

============================================================
PURPOSE
============================================================
Abstract read and write paths the analytics core consumes.

The core never talks to a database directly. It is handed
a SignalReader (historical signals and prior scores) and a
RiskScoreWriter (append a new score). The SQLAlchemy
implementations live in storage.repositories.

============================================================
CONTRACT
============================================================
- "recent" queries return newest-first and at most `limit` rows
- Failures surface as core.exceptions.DependencyUnavailable
- Readers never mutate anything

============================================================
"""

import logging
from abc import ABC, abstractmethod
from datetime import datetime
from typing import Callable, List, Optional, TypeVar

from core.exceptions import DependencyUnavailable

from .types import (
    EnrollmentSnapshot,
    PhishingSimulationOutcome,
    QuizAttempt,
    RiskScoreRecord,
)


logger = logging.getLogger(__name__)

T = TypeVar("T")


class SignalReader(ABC):
    """Read-only access to a user's or tenant's historical signals."""

    @abstractmethod
    def get_recent_simulations(self, user_id: str, limit: int) -> List[PhishingSimulationOutcome]:
        """Most recent phishing simulation outcomes, newest first."""
        pass

    @abstractmethod
    def get_enrollments(self, user_id: str) -> List[EnrollmentSnapshot]:
        """Every enrollment of the user."""
        pass

    @abstractmethod
    def get_last_completed_enrollment(self, user_id: str) -> Optional[EnrollmentSnapshot]:
        """The completed enrollment with the latest completed_at, if any."""
        pass

    @abstractmethod
    def get_recent_quiz_attempts(self, user_id: str, limit: int) -> List[QuizAttempt]:
        """Most recent quiz attempts, newest first."""
        pass

    @abstractmethod
    def count_security_incidents(self, user_id: str) -> int:
        """All-time count of SECURITY_INCIDENT and POLICY_VIOLATION events."""
        pass

    @abstractmethod
    def get_recent_risk_scores(self, user_id: str, limit: int) -> List[RiskScoreRecord]:
        """Most recent risk score records, newest first."""
        pass

    @abstractmethod
    def get_tenant_enrollments(self, tenant_id: str) -> List[EnrollmentSnapshot]:
        """Every enrollment in courses owned by the tenant."""
        pass

    @abstractmethod
    def get_tenant_simulations(
        self,
        tenant_id: str,
        since: Optional[datetime] = None,
    ) -> List[PhishingSimulationOutcome]:
        """Phishing simulation outcomes of the tenant, sent at or after `since`."""
        pass

    @abstractmethod
    def get_latest_tenant_risk_scores(self, tenant_id: str) -> List[RiskScoreRecord]:
        """The newest risk score record of every scored user in the tenant."""
        pass

    @abstractmethod
    def list_tenant_user_ids(self, tenant_id: str) -> List[str]:
        """Ids of every user with any recorded signal in the tenant."""
        pass


class RiskScoreWriter(ABC):
    """Append-only write path for risk score records."""

    @abstractmethod
    def save_risk_score(self, record: RiskScoreRecord) -> RiskScoreRecord:
        """Persist a new record and return it with its assigned id."""
        pass


def call_collaborator(dependency: str, operation: str, fn: Callable[..., T], *args) -> T:
    """
    Invoke a reader or writer method, normalizing its failures.

    Any exception other than DependencyUnavailable is logged and
    re-raised as DependencyUnavailable carrying the original as
    its cause.

        history = call_collaborator(
            "reader", "get_recent_risk_scores", reader.get_recent_risk_scores, user_id, 30
        )
    """
    try:
        return fn(*args)
    except DependencyUnavailable:
        raise
    except Exception as e:
        logger.error(f"{dependency}.{operation} failed: {e}", exc_info=True)
        raise DependencyUnavailable(
            f"{dependency}.{operation} failed: {e}",
            dependency=dependency,
            operation=operation,
            cause=e,
        ) from e
