"""
Risk Score ORM Model.

============================================================
DATA LIFECYCLE ROLE
============================================================
- Stage: DERIVED
- Mutability: IMMUTABLE (append-only; newer rows supersede)
- Source: RiskScoreCalculator
- Consumers: cache lookup, trend prediction, tenant overview

============================================================
"""

from datetime import datetime

from sqlalchemy import Float, Index, String
from sqlalchemy.orm import Mapped, mapped_column

from storage.models.base import Base, UuidPrimaryKeyMixin


class RiskScoreRow(UuidPrimaryKeyMixin, Base):
    """One point-in-time risk score for a user."""

    __tablename__ = "risk_scores"

    user_id: Mapped[str] = mapped_column(String(64), nullable=False)
    tenant_id: Mapped[str] = mapped_column(String(64), nullable=False)

    overall_score: Mapped[float] = mapped_column(Float, nullable=False, comment="0-100")
    phishing_score: Mapped[float] = mapped_column(Float, nullable=False)
    training_completion_score: Mapped[float] = mapped_column(Float, nullable=False)
    time_since_training_score: Mapped[float] = mapped_column(Float, nullable=False)
    quiz_performance_score: Mapped[float] = mapped_column(Float, nullable=False)
    security_incident_score: Mapped[float] = mapped_column(Float, nullable=False)
    login_anomaly_score: Mapped[float] = mapped_column(Float, nullable=False)

    calculated_at: Mapped[datetime] = mapped_column(nullable=False)

    __table_args__ = (
        Index("ix_risk_scores_user_calculated", "user_id", "calculated_at"),
        Index("ix_risk_scores_tenant_calculated", "tenant_id", "calculated_at"),
    )

    def __repr__(self) -> str:
        return f"<RiskScoreRow {self.user_id} {self.overall_score:.2f}>"
