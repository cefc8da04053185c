"""
Report Schedule ORM Model.

============================================================
DATA LIFECYCLE ROLE
============================================================
- Stage: CONFIGURATION
- Mutability: MUTABLE (timing edits, run bookkeeping)
- Consumers: ScheduleRunner

============================================================
"""

from datetime import datetime
from typing import Optional

from sqlalchemy import Boolean, Index, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from storage.models.base import Base, CreatedAtMixin, UuidPrimaryKeyMixin


class ReportScheduleRow(UuidPrimaryKeyMixin, CreatedAtMixin, Base):
    """A recurring report schedule."""

    __tablename__ = "report_schedules"

    tenant_id: Mapped[str] = mapped_column(String(64), nullable=False)
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    report_type: Mapped[str] = mapped_column(String(64), nullable=False)

    frequency: Mapped[str] = mapped_column(String(16), nullable=False)
    time_of_day: Mapped[str] = mapped_column(String(5), nullable=False, comment="HH:MM")
    day_of_week: Mapped[Optional[str]] = mapped_column(String(16), nullable=True)
    day_of_month: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)

    next_run_at: Mapped[datetime] = mapped_column(nullable=False)
    last_run_at: Mapped[Optional[datetime]] = mapped_column(nullable=True)
    enabled: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

    __table_args__ = (
        Index("ix_report_schedules_due", "enabled", "next_run_at"),
        Index("ix_report_schedules_tenant", "tenant_id"),
    )
