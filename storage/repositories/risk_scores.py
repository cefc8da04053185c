"""
Risk Score Repository.

============================================================
PURPOSE
============================================================
Append-only persistence of RiskScoreRecord.

============================================================
RULES
============================================================
- Inserts only; a stored record is never updated
- "Recent" queries are newest-first by calculated_at
- Timestamps read back are normalized to UTC

============================================================
"""

from typing import Dict, List
from uuid import UUID

from sqlalchemy import and_, func, select
from sqlalchemy.orm import Session

from core.clock import ensure_utc
from risk_scoring.reader import RiskScoreWriter
from risk_scoring.types import RiskScoreRecord
from storage.models.risk_scores import RiskScoreRow
from storage.repositories.base import BaseRepository
from storage.repositories.exceptions import ImmutableRecordError


def row_to_record(row: RiskScoreRow) -> RiskScoreRecord:
    return RiskScoreRecord(
        id=row.id,
        user_id=row.user_id,
        tenant_id=row.tenant_id,
        overall_score=row.overall_score,
        phishing_score=row.phishing_score,
        training_completion_score=row.training_completion_score,
        time_since_training_score=row.time_since_training_score,
        quiz_performance_score=row.quiz_performance_score,
        security_incident_score=row.security_incident_score,
        login_anomaly_score=row.login_anomaly_score,
        calculated_at=ensure_utc(row.calculated_at),
    )


class RiskScoreRepository(BaseRepository[RiskScoreRow], RiskScoreWriter):
    """
    Repository for risk score records.

    ============================================================
    OPERATIONS
    ============================================================
    - save_risk_score: Append a new record
    - get_by_id: Load one record
    - get_recent_risk_scores: Newest records of a user
    - get_latest_tenant_risk_scores: Newest record per user
    - update_risk_score: Always refused

    ============================================================
    """

    def __init__(self, session: Session) -> None:
        super().__init__(session, RiskScoreRow, "RiskScoreRepository")

    def save_risk_score(self, record: RiskScoreRecord) -> RiskScoreRecord:
        """
        Append a record and return it with its assigned id.

        Raises:
            ImmutableRecordError: If the record was already stored
        """
        if record.id is not None:
            raise ImmutableRecordError(self._repository_name, record.id, operation="save")

        row = RiskScoreRow(
            user_id=record.user_id,
            tenant_id=record.tenant_id,
            overall_score=record.overall_score,
            phishing_score=record.phishing_score,
            training_completion_score=record.training_completion_score,
            time_since_training_score=record.time_since_training_score,
            quiz_performance_score=record.quiz_performance_score,
            security_incident_score=record.security_incident_score,
            login_anomaly_score=record.login_anomaly_score,
            calculated_at=record.calculated_at,
        )
        row = self._add(row)
        return record.with_id(row.id)

    def update_risk_score(self, record: RiskScoreRecord) -> RiskScoreRecord:
        """Risk scores are append-only."""
        raise ImmutableRecordError(self._repository_name, record.id)

    def get_by_id(self, record_id: UUID) -> RiskScoreRecord:
        return row_to_record(self._get_by_id_or_raise(record_id))

    def get_recent_risk_scores(self, user_id: str, limit: int) -> List[RiskScoreRecord]:
        stmt = (
            select(RiskScoreRow)
            .where(RiskScoreRow.user_id == user_id)
            .order_by(RiskScoreRow.calculated_at.desc())
            .limit(limit)
        )
        return [row_to_record(r) for r in self._execute_query(stmt, "get_recent_risk_scores")]

    def get_latest_tenant_risk_scores(self, tenant_id: str) -> List[RiskScoreRecord]:
        latest = (
            select(
                RiskScoreRow.user_id.label("user_id"),
                func.max(RiskScoreRow.calculated_at).label("latest_at"),
            )
            .where(RiskScoreRow.tenant_id == tenant_id)
            .group_by(RiskScoreRow.user_id)
            .subquery()
        )
        stmt = (
            select(RiskScoreRow)
            .join(
                latest,
                and_(
                    RiskScoreRow.user_id == latest.c.user_id,
                    RiskScoreRow.calculated_at == latest.c.latest_at,
                ),
            )
            .where(RiskScoreRow.tenant_id == tenant_id)
            .order_by(RiskScoreRow.user_id)
        )
        rows = self._execute_query(stmt, "get_latest_tenant_risk_scores")

        # Two rows can share a timestamp; keep one per user
        by_user: Dict[str, RiskScoreRecord] = {}
        for row in rows:
            by_user.setdefault(row.user_id, row_to_record(row))
        return list(by_user.values())

    def list_scored_user_ids(self, tenant_id: str) -> List[str]:
        stmt = (
            select(RiskScoreRow.user_id)
            .where(RiskScoreRow.tenant_id == tenant_id)
            .distinct()
        )
        return list(self._execute_query(stmt, "list_scored_user_ids"))
