"""
Predictive Analytics - Type Definitions.

============================================================
PURPOSE
============================================================
Result contracts for the trend predictor, the compliance
forecaster, the behavioral anomaly detector and the signal
statistics.

Every result is immutable and serializes through to_dict()
for the reporting and dashboard layers.

============================================================
"""

import math
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional

from risk_scoring.types import EnrollmentStatus


def round_half_up(value: float, ndigits: int = 0) -> float:
    """Round with ties away from zero for non-negative values."""
    factor = 10 ** ndigits
    return math.floor(value * factor + 0.5) / factor


def percent_half_up(fraction: float) -> int:
    """Fraction (0-1) as an integer percentage, ties rounded up."""
    return int(math.floor(fraction * 100 + 0.5))


# ============================================================
# ENUMS
# ============================================================


class PredictionStatus(str, Enum):
    OK = "OK"
    INSUFFICIENT_DATA = "INSUFFICIENT_DATA"


class TrendDirection(str, Enum):
    INCREASING = "INCREASING"
    DECREASING = "DECREASING"


class Confidence(str, Enum):
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"


class AnomalyType(str, Enum):
    HIGH_ACTIVITY = "HIGH_ACTIVITY"


class AnomalySeverity(str, Enum):
    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"


# ============================================================
# RESULTS
# ============================================================


@dataclass(frozen=True)
class TrendPrediction:
    """
    Extrapolated risk score for a user.

    When status is INSUFFICIENT_DATA every numeric field is None.
    """

    user_id: str
    status: PredictionStatus
    days_ahead: int
    sample_size: int = 0
    current_score: Optional[float] = None
    predicted_score: Optional[float] = None
    direction: Optional[TrendDirection] = None
    confidence: Optional[Confidence] = None
    message: Optional[str] = None

    @property
    def has_prediction(self) -> bool:
        return self.status == PredictionStatus.OK

    def to_dict(self) -> Dict[str, Any]:
        return {
            "user_id": self.user_id,
            "status": self.status.value,
            "days_ahead": self.days_ahead,
            "sample_size": self.sample_size,
            "current_score": self.current_score,
            "predicted_score": self.predicted_score,
            "direction": self.direction.value if self.direction else None,
            "confidence": self.confidence.value if self.confidence else None,
            "message": self.message,
        }


@dataclass(frozen=True)
class ComplianceForecast:
    """Current and projected training completion for a tenant."""

    tenant_id: str
    days_ahead: int
    current_compliance_rate: int
    predicted_compliance_rate: int
    at_risk_user_count: int
    total_enrollments: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "tenant_id": self.tenant_id,
            "days_ahead": self.days_ahead,
            "current_compliance_rate": self.current_compliance_rate,
            "predicted_compliance_rate": self.predicted_compliance_rate,
            "at_risk_user_count": self.at_risk_user_count,
            "total_enrollments": self.total_enrollments,
        }


@dataclass(frozen=True)
class PhishingStats:
    """Simulation counts and rates; rates are percentages (2 dp)."""

    total_simulations: int
    clicked_count: int
    reported_count: int
    click_rate: float
    report_rate: float

    def to_dict(self) -> Dict[str, Any]:
        return {
            "total_simulations": self.total_simulations,
            "clicked_count": self.clicked_count,
            "reported_count": self.reported_count,
            "click_rate": self.click_rate,
            "report_rate": self.report_rate,
        }


@dataclass(frozen=True)
class CompletionRates:
    """Enrollment counts per status for a tenant, optionally one course."""

    tenant_id: str
    total: int
    by_status: Dict[EnrollmentStatus, int]
    completion_rate: int
    course_id: Optional[str] = None

    def count_at(self, status: EnrollmentStatus) -> int:
        return self.by_status.get(status, 0)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "tenant_id": self.tenant_id,
            "course_id": self.course_id,
            "total": self.total,
            "by_status": {status.value: count for status, count in self.by_status.items()},
            "completion_rate": self.completion_rate,
        }


@dataclass(frozen=True)
class Anomaly:
    type: AnomalyType
    severity: AnomalySeverity
    description: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "type": self.type.value,
            "severity": self.severity.value,
            "description": self.description,
        }


@dataclass(frozen=True)
class BehaviorAnalysis:
    """Event counts and detected anomalies for one user."""

    user_id: str
    window_days: int
    total_events: int
    event_breakdown: Dict[str, int] = field(default_factory=dict)
    anomalies: List[Anomaly] = field(default_factory=list)

    @property
    def has_anomalies(self) -> bool:
        return len(self.anomalies) > 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "user_id": self.user_id,
            "window_days": self.window_days,
            "total_events": self.total_events,
            "event_breakdown": dict(self.event_breakdown),
            "anomalies": [a.to_dict() for a in self.anomalies],
        }
