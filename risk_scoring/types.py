"""
Risk Scoring Engine - Type Definitions.

============================================================
PURPOSE
============================================================
Data contracts for behavioral risk scoring.

Signal types (events, phishing outcomes, enrollments, quiz
attempts) are the read-only inputs. RiskScoreRecord is the
single output and the unit of persistence.

============================================================
DESIGN PRINCIPLES
============================================================
- All types are immutable
- Enums for closed vocabularies
- Clear separation between input and output types
- Higher score = higher risk, everywhere

============================================================
SUB-SCORES
============================================================
Six bounded [0, 100] signals feed the overall score:

1. PHISHING - Simulation clicks vs reports
2. TRAINING_COMPLETION - Share of enrollments not completed
3. TIME_SINCE_TRAINING - Staleness of the last completion
4. QUIZ_PERFORMANCE - Inverse of the recent quiz average
5. SECURITY_INCIDENT - Incidents and policy violations
6. LOGIN_ANOMALY - Placeholder strategy (fixed value)

============================================================
"""

from dataclasses import dataclass, field, replace
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional
from uuid import UUID

from core.clock import ensure_utc
from core.exceptions import AnalyticsException, Severity

from .config import RiskLevelThresholds


# ============================================================
# ENUMS
# ============================================================


class SubScore(str, Enum):
    """The six sub-scores combined into the overall risk score."""

    PHISHING = "phishing"
    TRAINING_COMPLETION = "training_completion"
    TIME_SINCE_TRAINING = "time_since_training"
    QUIZ_PERFORMANCE = "quiz_performance"
    SECURITY_INCIDENT = "security_incident"
    LOGIN_ANOMALY = "login_anomaly"

    @property
    def record_field(self) -> str:
        """Attribute name on RiskScoreRecord holding this sub-score."""
        return f"{self.value}_score"

    @classmethod
    def all_sub_scores(cls) -> List["SubScore"]:
        return list(cls)


class RiskLevel(str, Enum):
    """
    Four-band classification of the overall score.

    Each band includes its lower bound:
    - LOW: below 25
    - MEDIUM: 25 up to 50
    - HIGH: 50 up to 75
    - CRITICAL: 75 and above
    """

    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"
    CRITICAL = "CRITICAL"

    @classmethod
    def from_score(
        cls,
        score: float,
        thresholds: Optional[RiskLevelThresholds] = None,
    ) -> "RiskLevel":
        """
        Classify an overall score.

        Args:
            score: Overall score (0-100)
            thresholds: Band lower bounds (defaults to 25/50/75)
        """
        thresholds = thresholds or RiskLevelThresholds()
        if score >= thresholds.critical:
            return cls.CRITICAL
        if score >= thresholds.high:
            return cls.HIGH
        if score >= thresholds.medium:
            return cls.MEDIUM
        return cls.LOW

    @property
    def severity_order(self) -> int:
        """Numeric ordering for severity comparison."""
        return {"LOW": 0, "MEDIUM": 1, "HIGH": 2, "CRITICAL": 3}[self.value]


class BehavioralEventType(str, Enum):
    """Closed vocabulary of behavioral events."""

    LOGIN = "LOGIN"
    COURSE_START = "COURSE_START"
    COURSE_COMPLETE = "COURSE_COMPLETE"
    QUIZ_ATTEMPT = "QUIZ_ATTEMPT"
    PHISHING_CLICK = "PHISHING_CLICK"
    PHISHING_REPORT = "PHISHING_REPORT"
    POLICY_VIOLATION = "POLICY_VIOLATION"
    SECURITY_INCIDENT = "SECURITY_INCIDENT"

    @classmethod
    def incident_types(cls) -> List["BehavioralEventType"]:
        """Event types counted by the security incident sub-score."""
        return [cls.SECURITY_INCIDENT, cls.POLICY_VIOLATION]


class EnrollmentStatus(str, Enum):
    NOT_STARTED = "NOT_STARTED"
    IN_PROGRESS = "IN_PROGRESS"
    COMPLETED = "COMPLETED"
    FAILED = "FAILED"
    EXPIRED = "EXPIRED"


# ============================================================
# INPUT DATA CONTRACTS (SIGNALS)
# ============================================================


@dataclass(frozen=True)
class BehavioralEvent:
    """One append-only behavioral event."""

    user_id: str
    tenant_id: str
    event_type: BehavioralEventType
    timestamp: datetime
    metadata: Dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class PhishingSimulationOutcome:
    """Result of one phishing simulation sent to a user."""

    user_id: str
    tenant_id: str
    sent_at: datetime
    was_clicked: bool = False
    was_reported: bool = False


@dataclass(frozen=True)
class EnrollmentSnapshot:
    """Read-only view of one course enrollment."""

    user_id: str
    status: EnrollmentStatus
    completed_at: Optional[datetime] = None
    course_id: Optional[str] = None

    @property
    def is_completed(self) -> bool:
        return self.status == EnrollmentStatus.COMPLETED

    @property
    def is_in_progress(self) -> bool:
        return self.status == EnrollmentStatus.IN_PROGRESS


@dataclass(frozen=True)
class QuizAttempt:
    """One quiz attempt; score is a 0-100 percentage."""

    user_id: str
    score: float
    completed_at: datetime
    is_passing: bool = False


# ============================================================
# OUTPUT DATA CONTRACT
# ============================================================


@dataclass(frozen=True)
class RiskScoreRecord:
    """
    One point-in-time risk score for a user.

    ============================================================
    GUARANTEES
    ============================================================
    - overall_score: Always 0-100
    - Every sub-score: Always 0-100
    - Never mutated; later records supersede earlier ones
    - The "current" score is the newest by calculated_at

    ============================================================
    """

    user_id: str
    tenant_id: str
    overall_score: float
    phishing_score: float
    training_completion_score: float
    time_since_training_score: float
    quiz_performance_score: float
    security_incident_score: float
    login_anomaly_score: float
    calculated_at: datetime

    # Assigned by the record store on save
    id: Optional[UUID] = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "calculated_at", ensure_utc(self.calculated_at))

    @property
    def risk_level(self) -> RiskLevel:
        """Risk level under the default thresholds."""
        return RiskLevel.from_score(self.overall_score)

    def classify(self, thresholds: Optional[RiskLevelThresholds] = None) -> RiskLevel:
        """Risk level under explicit thresholds (default bands if None)."""
        return RiskLevel.from_score(self.overall_score, thresholds)

    @property
    def sub_scores(self) -> Dict[SubScore, float]:
        return {s: getattr(self, s.record_field) for s in SubScore}

    def with_id(self, record_id: UUID) -> "RiskScoreRecord":
        """Copy of this record carrying the store-assigned id."""
        return replace(self, id=record_id)

    def to_dict(self, thresholds: Optional[RiskLevelThresholds] = None) -> Dict[str, Any]:
        """
        Convert to dictionary for serialization.

        risk_level is classified with `thresholds`; pass the
        scoring policy in force so the payload matches the log.
        """
        return {
            "id": str(self.id) if self.id else None,
            "user_id": self.user_id,
            "tenant_id": self.tenant_id,
            "overall_score": self.overall_score,
            "risk_level": self.classify(thresholds).value,
            "phishing_score": self.phishing_score,
            "training_completion_score": self.training_completion_score,
            "time_since_training_score": self.time_since_training_score,
            "quiz_performance_score": self.quiz_performance_score,
            "security_incident_score": self.security_incident_score,
            "login_anomaly_score": self.login_anomaly_score,
            "calculated_at": self.calculated_at.isoformat(),
        }


@dataclass(frozen=True)
class BulkCalculationResult:
    """Outcome of scoring every user of a tenant."""

    tenant_id: str
    requested: int
    calculated: int
    failed_user_ids: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "tenant_id": self.tenant_id,
            "requested": self.requested,
            "calculated": self.calculated,
            "failed_user_ids": list(self.failed_user_ids),
        }


# ============================================================
# ERROR TYPES
# ============================================================


class RiskScoringError(AnalyticsException):
    """Base exception for risk scoring errors."""
    pass


class RiskScoreNotFoundError(RiskScoringError):
    """Raised when a user has never been scored."""

    default_severity = Severity.LOW

    def __init__(self, user_id: str):
        super().__init__(f"No risk score recorded for user {user_id}", context={"user_id": user_id})
        self.user_id = user_id
