"""
Risk Scoring Engine - Tenant Risk Overview.

============================================================
PURPOSE
============================================================
Summarize the current risk posture of a whole tenant from
the newest risk score of each scored user.

Produces:
- Number of scored users
- Average overall score (2 dp)
- Distribution across LOW / MEDIUM / HIGH / CRITICAL
- The highest-risk users

Also lists the newest scores filtered by level and score
range, highest first, one page at a time.

============================================================
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence

from core.exceptions import InvalidConfigError

from .config import RiskLevelThresholds
from .reader import SignalReader, call_collaborator
from .types import RiskLevel, RiskScoreRecord


logger = logging.getLogger(__name__)

DEFAULT_TOP_USERS = 10
DEFAULT_PAGE_SIZE = 20


@dataclass(frozen=True)
class UserRiskSummary:
    user_id: str
    score: float

    def to_dict(self) -> Dict[str, Any]:
        return {"user_id": self.user_id, "score": self.score}


@dataclass(frozen=True)
class TenantRiskOverview:
    """Aggregate risk posture of one tenant."""

    tenant_id: str
    total_users: int
    average_risk_score: float
    risk_distribution: Dict[RiskLevel, int]
    highest_risk_users: List[UserRiskSummary] = field(default_factory=list)

    def count_at(self, level: RiskLevel) -> int:
        return self.risk_distribution.get(level, 0)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "tenant_id": self.tenant_id,
            "total_users": self.total_users,
            "average_risk_score": self.average_risk_score,
            "risk_distribution": {
                level.value.lower(): count
                for level, count in self.risk_distribution.items()
            },
            "highest_risk_users": [u.to_dict() for u in self.highest_risk_users],
        }


@dataclass(frozen=True)
class RiskScorePage:
    """One page of filtered risk scores, highest first."""

    records: List[RiskScoreRecord]
    total: int
    page: int
    limit: int
    thresholds: RiskLevelThresholds = field(default_factory=RiskLevelThresholds)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "data": [r.to_dict(self.thresholds) for r in self.records],
            "total": self.total,
            "page": self.page,
            "limit": self.limit,
        }


def build_tenant_overview(
    tenant_id: str,
    latest_scores: Sequence[RiskScoreRecord],
    thresholds: Optional[RiskLevelThresholds] = None,
    top_n: int = DEFAULT_TOP_USERS,
) -> TenantRiskOverview:
    """
    Build an overview from the newest record of each user.

    Args:
        tenant_id: Tenant being summarized
        latest_scores: One record per user (the newest)
        thresholds: Band boundaries for the distribution
        top_n: How many highest-risk users to list
    """
    distribution = {level: 0 for level in RiskLevel}
    for record in latest_scores:
        distribution[RiskLevel.from_score(record.overall_score, thresholds)] += 1

    if latest_scores:
        average = sum(r.overall_score for r in latest_scores) / len(latest_scores)
    else:
        average = 0.0

    ranked = sorted(latest_scores, key=lambda r: r.overall_score, reverse=True)

    return TenantRiskOverview(
        tenant_id=tenant_id,
        total_users=len(latest_scores),
        average_risk_score=round(average, 2),
        risk_distribution=distribution,
        highest_risk_users=[
            UserRiskSummary(user_id=r.user_id, score=r.overall_score)
            for r in ranked[:top_n]
        ],
    )


def filter_risk_scores(
    latest_scores: Sequence[RiskScoreRecord],
    risk_level: Optional[RiskLevel] = None,
    min_score: Optional[float] = None,
    max_score: Optional[float] = None,
    page: int = 1,
    limit: int = DEFAULT_PAGE_SIZE,
    thresholds: Optional[RiskLevelThresholds] = None,
) -> RiskScorePage:
    """
    Filter, order and paginate the newest record of each user.

    Score bounds are inclusive. `total` counts every match,
    not only the returned page.

    Raises:
        InvalidConfigError: If page or limit is below 1
    """
    if page < 1:
        raise InvalidConfigError("page", page, "must be at least 1")
    if limit < 1:
        raise InvalidConfigError("limit", limit, "must be at least 1")

    thresholds = thresholds or RiskLevelThresholds()
    matches = [
        r for r in latest_scores
        if (min_score is None or r.overall_score >= min_score)
        and (max_score is None or r.overall_score <= max_score)
        and (risk_level is None or r.classify(thresholds) == RiskLevel(risk_level))
    ]
    matches.sort(key=lambda r: r.overall_score, reverse=True)

    start = (page - 1) * limit
    return RiskScorePage(
        records=matches[start:start + limit],
        total=len(matches),
        page=page,
        limit=limit,
        thresholds=thresholds,
    )


class TenantRiskOverviewService:
    """Reads the newest tenant scores and summarizes them."""

    def __init__(
        self,
        reader: SignalReader,
        thresholds: Optional[RiskLevelThresholds] = None,
    ):
        self._reader = reader
        self._thresholds = thresholds or RiskLevelThresholds()

    def get_overview(self, tenant_id: str) -> TenantRiskOverview:
        latest = call_collaborator(
            "reader", "get_latest_tenant_risk_scores",
            self._reader.get_latest_tenant_risk_scores, tenant_id,
        )
        overview = build_tenant_overview(tenant_id, latest, self._thresholds)

        logger.debug(
            f"Tenant {tenant_id} overview: {overview.total_users} users, "
            f"average {overview.average_risk_score:.2f}"
        )
        return overview

    def list_scores(
        self,
        tenant_id: str,
        risk_level: Optional[RiskLevel] = None,
        min_score: Optional[float] = None,
        max_score: Optional[float] = None,
        page: int = 1,
        limit: int = DEFAULT_PAGE_SIZE,
    ) -> RiskScorePage:
        latest = call_collaborator(
            "reader", "get_latest_tenant_risk_scores",
            self._reader.get_latest_tenant_risk_scores, tenant_id,
        )
        return filter_risk_scores(
            latest, risk_level, min_score, max_score, page, limit, self._thresholds
        )
