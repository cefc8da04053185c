"""
Behavioral Signal ORM Models.

============================================================
PURPOSE
============================================================
Historical inputs of the risk score: courses and
enrollments, phishing simulation outcomes, quiz attempts
and behavioral events.

============================================================
DATA LIFECYCLE ROLE
============================================================
- Stage: RAW
- Mutability: APPEND-ONLY (events, simulations, attempts);
  enrollments change status over time
- Consumers: SignalRepository

============================================================
MODELS
============================================================
- Course: Training course owned by a tenant
- Enrollment: A user's enrollment in a course
- PhishingSimulation: One simulated phishing email
- QuizAttemptRecord: One quiz attempt
- BehaviorEventRecord: One behavioral event

============================================================
"""

import uuid
from datetime import datetime
from typing import Any, Dict, List, Optional

from sqlalchemy import JSON, Boolean, Float, ForeignKey, Index, String, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from storage.models.base import Base, CreatedAtMixin, UuidPrimaryKeyMixin


class Course(UuidPrimaryKeyMixin, CreatedAtMixin, Base):
    """A training course. Tenant-wide enrollment queries join through here."""

    __tablename__ = "courses"

    tenant_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    title: Mapped[str] = mapped_column(String(255), nullable=False)

    enrollments: Mapped[List["Enrollment"]] = relationship(back_populates="course")

    def __repr__(self) -> str:
        return f"<Course {self.id} tenant={self.tenant_id}>"


class Enrollment(UuidPrimaryKeyMixin, CreatedAtMixin, Base):
    """A user's enrollment in one course."""

    __tablename__ = "enrollments"

    user_id: Mapped[str] = mapped_column(String(64), nullable=False)
    course_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("courses.id", ondelete="CASCADE"),
        nullable=False,
    )
    status: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        default="NOT_STARTED",
        comment="NOT_STARTED, IN_PROGRESS, COMPLETED, FAILED, EXPIRED"
    )
    completed_at: Mapped[Optional[datetime]] = mapped_column(nullable=True)

    course: Mapped[Course] = relationship(back_populates="enrollments")

    __table_args__ = (
        Index("ix_enrollments_user_completed", "user_id", "completed_at"),
        Index("ix_enrollments_course", "course_id"),
    )


class PhishingSimulation(UuidPrimaryKeyMixin, Base):
    """Outcome of one simulated phishing email."""

    __tablename__ = "phishing_simulations"

    user_id: Mapped[str] = mapped_column(String(64), nullable=False)
    tenant_id: Mapped[str] = mapped_column(String(64), nullable=False)
    campaign_id: Mapped[Optional[str]] = mapped_column(String(64), nullable=True)
    sent_at: Mapped[datetime] = mapped_column(nullable=False)
    was_clicked: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    was_reported: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    __table_args__ = (
        Index("ix_phishing_simulations_user_sent", "user_id", "sent_at"),
        Index("ix_phishing_simulations_tenant", "tenant_id"),
    )


class QuizAttemptRecord(UuidPrimaryKeyMixin, Base):
    """One quiz attempt; score is a 0-100 percentage."""

    __tablename__ = "quiz_attempts"

    user_id: Mapped[str] = mapped_column(String(64), nullable=False)
    quiz_id: Mapped[Optional[str]] = mapped_column(String(64), nullable=True)
    score: Mapped[float] = mapped_column(Float, nullable=False)
    is_passing: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    completed_at: Mapped[datetime] = mapped_column(nullable=False)

    __table_args__ = (
        Index("ix_quiz_attempts_user_completed", "user_id", "completed_at"),
    )


class BehaviorEventRecord(UuidPrimaryKeyMixin, Base):
    """One append-only behavioral event."""

    __tablename__ = "behavior_events"

    user_id: Mapped[str] = mapped_column(String(64), nullable=False)
    tenant_id: Mapped[str] = mapped_column(String(64), nullable=False)
    event_type: Mapped[str] = mapped_column(String(32), nullable=False)
    occurred_at: Mapped[datetime] = mapped_column(nullable=False)
    event_metadata: Mapped[Dict[str, Any]] = mapped_column(
        "metadata",
        JSON,
        nullable=False,
        default=dict,
    )

    __table_args__ = (
        Index("ix_behavior_events_user_occurred", "user_id", "occurred_at"),
        Index("ix_behavior_events_user_type", "user_id", "event_type"),
    )
