"""
Signal Repository.

============================================================
PURPOSE
============================================================
SQLAlchemy implementation of risk_scoring.reader.SignalReader.

Reads courses, enrollments, phishing simulations, quiz
attempts and behavioral events, and converts rows into the
immutable signal types of the analytics core. Also exposes
the append paths used to record new signals.

============================================================
"""

from datetime import datetime
from typing import Any, Dict, List, Optional

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from core.clock import ensure_utc
from risk_scoring.reader import SignalReader
from risk_scoring.types import (
    BehavioralEvent,
    BehavioralEventType,
    EnrollmentSnapshot,
    EnrollmentStatus,
    PhishingSimulationOutcome,
    QuizAttempt,
    RiskScoreRecord,
)
from storage.models.signals import (
    BehaviorEventRecord,
    Course,
    Enrollment,
    PhishingSimulation,
    QuizAttemptRecord,
)
from storage.repositories.base import BaseRepository
from storage.repositories.risk_scores import RiskScoreRepository


def _simulation_outcome(row: PhishingSimulation) -> PhishingSimulationOutcome:
    return PhishingSimulationOutcome(
        user_id=row.user_id,
        tenant_id=row.tenant_id,
        sent_at=ensure_utc(row.sent_at),
        was_clicked=row.was_clicked,
        was_reported=row.was_reported,
    )


def _enrollment_snapshot(row: Enrollment) -> EnrollmentSnapshot:
    return EnrollmentSnapshot(
        user_id=row.user_id,
        status=EnrollmentStatus(row.status),
        completed_at=ensure_utc(row.completed_at) if row.completed_at else None,
        course_id=str(row.course_id),
    )


class SignalRepository(BaseRepository[BehaviorEventRecord], SignalReader):
    """
    Read access to every signal the risk score consumes.

    Risk score history is delegated to RiskScoreRepository so
    the calculator can use one object as its reader.
    """

    def __init__(self, session: Session) -> None:
        super().__init__(session, BehaviorEventRecord, "SignalRepository")
        self._risk_scores = RiskScoreRepository(session)

    # =========================================================
    # SIGNAL READER
    # =========================================================

    def get_recent_simulations(self, user_id: str, limit: int) -> List[PhishingSimulationOutcome]:
        stmt = (
            select(PhishingSimulation)
            .where(PhishingSimulation.user_id == user_id)
            .order_by(PhishingSimulation.sent_at.desc())
            .limit(limit)
        )
        return [_simulation_outcome(r) for r in self._execute_query(stmt, "get_recent_simulations")]

    def get_enrollments(self, user_id: str) -> List[EnrollmentSnapshot]:
        stmt = select(Enrollment).where(Enrollment.user_id == user_id)
        return [_enrollment_snapshot(r) for r in self._execute_query(stmt, "get_enrollments")]

    def get_last_completed_enrollment(self, user_id: str) -> Optional[EnrollmentSnapshot]:
        stmt = (
            select(Enrollment)
            .where(
                Enrollment.user_id == user_id,
                Enrollment.status == EnrollmentStatus.COMPLETED.value,
                Enrollment.completed_at.is_not(None),
            )
            .order_by(Enrollment.completed_at.desc())
            .limit(1)
        )
        rows = self._execute_query(stmt, "get_last_completed_enrollment")
        return _enrollment_snapshot(rows[0]) if rows else None

    def get_recent_quiz_attempts(self, user_id: str, limit: int) -> List[QuizAttempt]:
        stmt = (
            select(QuizAttemptRecord)
            .where(QuizAttemptRecord.user_id == user_id)
            .order_by(QuizAttemptRecord.completed_at.desc())
            .limit(limit)
        )
        return [
            QuizAttempt(
                user_id=row.user_id,
                score=row.score,
                completed_at=ensure_utc(row.completed_at),
                is_passing=row.is_passing,
            )
            for row in self._execute_query(stmt, "get_recent_quiz_attempts")
        ]

    def count_security_incidents(self, user_id: str) -> int:
        incident_types = [t.value for t in BehavioralEventType.incident_types()]
        stmt = (
            select(func.count())
            .select_from(BehaviorEventRecord)
            .where(
                BehaviorEventRecord.user_id == user_id,
                BehaviorEventRecord.event_type.in_(incident_types),
            )
        )
        return self._execute_scalar(stmt, "count_security_incidents") or 0

    def get_recent_risk_scores(self, user_id: str, limit: int) -> List[RiskScoreRecord]:
        return self._risk_scores.get_recent_risk_scores(user_id, limit)

    def get_tenant_enrollments(self, tenant_id: str) -> List[EnrollmentSnapshot]:
        stmt = (
            select(Enrollment)
            .join(Course, Enrollment.course_id == Course.id)
            .where(Course.tenant_id == tenant_id)
        )
        return [_enrollment_snapshot(r) for r in self._execute_query(stmt, "get_tenant_enrollments")]

    def get_tenant_simulations(
        self,
        tenant_id: str,
        since: Optional[datetime] = None,
    ) -> List[PhishingSimulationOutcome]:
        stmt = select(PhishingSimulation).where(PhishingSimulation.tenant_id == tenant_id)
        if since is not None:
            stmt = stmt.where(PhishingSimulation.sent_at >= since)
        stmt = stmt.order_by(PhishingSimulation.sent_at.desc())
        return [_simulation_outcome(r) for r in self._execute_query(stmt, "get_tenant_simulations")]

    def get_latest_tenant_risk_scores(self, tenant_id: str) -> List[RiskScoreRecord]:
        return self._risk_scores.get_latest_tenant_risk_scores(tenant_id)

    def list_tenant_user_ids(self, tenant_id: str) -> List[str]:
        queries = [
            select(PhishingSimulation.user_id).where(PhishingSimulation.tenant_id == tenant_id),
            select(BehaviorEventRecord.user_id).where(BehaviorEventRecord.tenant_id == tenant_id),
            select(Enrollment.user_id)
            .join(Course, Enrollment.course_id == Course.id)
            .where(Course.tenant_id == tenant_id),
        ]
        user_ids = set(self._risk_scores.list_scored_user_ids(tenant_id))
        for stmt in queries:
            user_ids.update(self._execute_query(stmt.distinct(), "list_tenant_user_ids"))
        return sorted(user_ids)

    # =========================================================
    # BEHAVIORAL EVENTS
    # =========================================================

    def get_user_events(
        self,
        user_id: str,
        tenant_id: str,
        since: Optional[datetime] = None,
    ) -> List[BehavioralEvent]:
        """Events of one user, newest first, optionally from `since` on."""
        stmt = select(BehaviorEventRecord).where(
            BehaviorEventRecord.user_id == user_id,
            BehaviorEventRecord.tenant_id == tenant_id,
        )
        if since is not None:
            stmt = stmt.where(BehaviorEventRecord.occurred_at >= since)
        stmt = stmt.order_by(BehaviorEventRecord.occurred_at.desc())

        return [
            BehavioralEvent(
                user_id=row.user_id,
                tenant_id=row.tenant_id,
                event_type=BehavioralEventType(row.event_type),
                timestamp=ensure_utc(row.occurred_at),
                metadata=dict(row.event_metadata or {}),
            )
            for row in self._execute_query(stmt, "get_user_events")
        ]

    # =========================================================
    # APPEND PATHS
    # =========================================================

    def add_course(self, tenant_id: str, title: str) -> Course:
        return self._add(Course(tenant_id=tenant_id, title=title))

    def add_enrollment(
        self,
        user_id: str,
        course: Course,
        status: EnrollmentStatus = EnrollmentStatus.NOT_STARTED,
        completed_at: Optional[datetime] = None,
    ) -> Enrollment:
        return self._add(Enrollment(
            user_id=user_id,
            course_id=course.id,
            status=status.value,
            completed_at=completed_at,
        ))

    def record_phishing_simulation(
        self,
        outcome: PhishingSimulationOutcome,
        campaign_id: Optional[str] = None,
    ) -> PhishingSimulation:
        return self._add(PhishingSimulation(
            user_id=outcome.user_id,
            tenant_id=outcome.tenant_id,
            campaign_id=campaign_id,
            sent_at=outcome.sent_at,
            was_clicked=outcome.was_clicked,
            was_reported=outcome.was_reported,
        ))

    def record_quiz_attempt(self, attempt: QuizAttempt, quiz_id: Optional[str] = None) -> QuizAttemptRecord:
        return self._add(QuizAttemptRecord(
            user_id=attempt.user_id,
            quiz_id=quiz_id,
            score=attempt.score,
            is_passing=attempt.is_passing,
            completed_at=attempt.completed_at,
        ))

    def record_event(self, event: BehavioralEvent) -> BehaviorEventRecord:
        metadata: Dict[str, Any] = dict(event.metadata)
        return self._add(BehaviorEventRecord(
            user_id=event.user_id,
            tenant_id=event.tenant_id,
            event_type=event.event_type.value,
            occurred_at=event.timestamp,
            event_metadata=metadata,
        ))
