"""
Risk Scoring Engine - Recommendations.

============================================================
PURPOSE
============================================================
Rule-based remediation suggestions derived from risk scores.

User rules (newest record of the user):
- phishing sub-score > 70          -> COURSE, priority 90
- training completion sub-score > 60 -> ACTION, priority 80

Tenant rules (tenant overview):
- any CRITICAL user                -> ACTION, priority 100
- average overall score > 60       -> TRAINING, priority 85

Results keep rule order and are truncated to the limit.

============================================================
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, List, Optional

from .config import RiskLevelThresholds
from .overview import TenantRiskOverview, TenantRiskOverviewService
from .reader import SignalReader, call_collaborator
from .types import RiskLevel, RiskScoreRecord


logger = logging.getLogger(__name__)


PHISHING_SCORE_TRIGGER = 70.0
TRAINING_COMPLETION_TRIGGER = 60.0
TENANT_AVERAGE_TRIGGER = 60.0

DEFAULT_LIMIT = 5


class RecommendationType(str, Enum):
    COURSE = "COURSE"
    ACTION = "ACTION"
    TRAINING = "TRAINING"


@dataclass(frozen=True)
class Recommendation:
    """One suggested remediation step."""

    id: str
    title: str
    description: str
    reason: str
    priority: int
    type: RecommendationType
    resource_id: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "description": self.description,
            "reason": self.reason,
            "priority": self.priority,
            "type": self.type.value,
            "resource_id": self.resource_id,
        }


# ============================================================
# RULES
# ============================================================


def recommend_for_record(
    user_id: str,
    record: Optional[RiskScoreRecord],
    limit: int = DEFAULT_LIMIT,
) -> List[Recommendation]:
    """Recommendations for a user given their newest record (or None)."""
    if record is None:
        return []

    recommendations: List[Recommendation] = []

    if record.phishing_score > PHISHING_SCORE_TRIGGER:
        recommendations.append(Recommendation(
            id=f"rec-phishing-{user_id}",
            title="Phishing Awareness Training",
            description="Complete advanced phishing identification course",
            reason="High phishing risk detected",
            priority=90,
            type=RecommendationType.COURSE,
            resource_id="course-phishing-advanced",
        ))

    if record.training_completion_score > TRAINING_COMPLETION_TRIGGER:
        recommendations.append(Recommendation(
            id=f"rec-training-{user_id}",
            title="Complete Required Training",
            description="Finish your mandatory security awareness courses",
            reason="Training completion below target",
            priority=80,
            type=RecommendationType.ACTION,
        ))

    return recommendations[:max(0, limit)]


def recommend_for_tenant(
    overview: TenantRiskOverview,
    limit: int = DEFAULT_LIMIT,
) -> List[Recommendation]:
    """Recommendations for a tenant given its risk overview."""
    recommendations: List[Recommendation] = []
    tenant_id = overview.tenant_id

    critical = overview.count_at(RiskLevel.CRITICAL)
    if critical > 0:
        recommendations.append(Recommendation(
            id=f"rec-critical-{tenant_id}",
            title="Address Critical Risk Users",
            description=f"{critical} users at critical risk level",
            reason="Critical risk users detected",
            priority=100,
            type=RecommendationType.ACTION,
        ))

    if overview.average_risk_score > TENANT_AVERAGE_TRIGGER:
        recommendations.append(Recommendation(
            id=f"rec-training-campaign-{tenant_id}",
            title="Launch Training Campaign",
            description="Organization-wide security awareness initiative needed",
            reason="Average risk score above threshold",
            priority=85,
            type=RecommendationType.TRAINING,
        ))

    return recommendations[:max(0, limit)]


class RecommendationService:
    """Looks up the relevant scores and applies the rules."""

    def __init__(
        self,
        reader: SignalReader,
        thresholds: Optional[RiskLevelThresholds] = None,
    ):
        self._reader = reader
        self._overview = TenantRiskOverviewService(reader, thresholds)

    def for_user(self, user_id: str, limit: int = DEFAULT_LIMIT) -> List[Recommendation]:
        records = call_collaborator(
            "reader", "get_recent_risk_scores", self._reader.get_recent_risk_scores, user_id, 1
        )
        newest = records[0] if records else None
        recommendations = recommend_for_record(user_id, newest, limit)
        logger.debug(f"{len(recommendations)} recommendations for user {user_id}")
        return recommendations

    def for_tenant(self, tenant_id: str, limit: int = DEFAULT_LIMIT) -> List[Recommendation]:
        overview = self._overview.get_overview(tenant_id)
        recommendations = recommend_for_tenant(overview, limit)
        logger.debug(f"{len(recommendations)} recommendations for tenant {tenant_id}")
        return recommendations
