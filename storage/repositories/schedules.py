"""
Report Schedule Repository.

SQLAlchemy implementation of reporting.runner.ScheduleStore.
"""

from datetime import datetime
from typing import List
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.orm import Session

from core.clock import ensure_utc
from reporting.runner import ScheduleStore
from reporting.types import (
    DayOfWeek,
    Frequency,
    ReportSchedule,
    format_time_of_day,
    parse_time_of_day,
)
from storage.models.schedules import ReportScheduleRow
from storage.repositories.base import BaseRepository


def _row_to_schedule(row: ReportScheduleRow) -> ReportSchedule:
    return ReportSchedule(
        id=row.id,
        tenant_id=row.tenant_id,
        name=row.name,
        report_type=row.report_type,
        frequency=Frequency(row.frequency),
        time_of_day=parse_time_of_day(row.time_of_day),
        day_of_week=DayOfWeek(row.day_of_week) if row.day_of_week else None,
        day_of_month=row.day_of_month,
        next_run_at=ensure_utc(row.next_run_at),
        last_run_at=ensure_utc(row.last_run_at) if row.last_run_at else None,
        enabled=row.enabled,
        created_at=ensure_utc(row.created_at) if row.created_at else None,
    )


def _copy_into(row: ReportScheduleRow, schedule: ReportSchedule) -> None:
    row.tenant_id = schedule.tenant_id
    row.name = schedule.name
    row.report_type = schedule.report_type
    row.frequency = schedule.frequency.value
    row.time_of_day = format_time_of_day(schedule.time_of_day)
    row.day_of_week = schedule.day_of_week.value if schedule.day_of_week else None
    row.day_of_month = schedule.day_of_month
    row.next_run_at = schedule.next_run_at
    row.last_run_at = schedule.last_run_at
    row.enabled = schedule.enabled


class ReportScheduleRepository(BaseRepository[ReportScheduleRow], ScheduleStore):
    """Repository for recurring report schedules."""

    def __init__(self, session: Session) -> None:
        super().__init__(session, ReportScheduleRow, "ReportScheduleRepository")

    def add(self, schedule: ReportSchedule) -> ReportSchedule:
        row = ReportScheduleRow()
        _copy_into(row, schedule)
        if schedule.created_at is not None:
            row.created_at = schedule.created_at
        return _row_to_schedule(self._add(row))

    def get(self, schedule_id: UUID) -> ReportSchedule:
        return _row_to_schedule(self._get_by_id_or_raise(schedule_id))

    def update(self, schedule: ReportSchedule) -> ReportSchedule:
        row = self._get_by_id_or_raise(schedule.id)
        _copy_into(row, schedule)
        self._flush("update")
        self._logger.debug(f"Updated schedule {schedule.id}")
        return _row_to_schedule(row)

    def list_due(self, now: datetime) -> List[ReportSchedule]:
        stmt = (
            select(ReportScheduleRow)
            .where(
                ReportScheduleRow.enabled.is_(True),
                ReportScheduleRow.next_run_at <= now,
            )
            .order_by(ReportScheduleRow.next_run_at)
        )
        return [_row_to_schedule(r) for r in self._execute_query(stmt, "list_due")]

    def list_for_tenant(self, tenant_id: str) -> List[ReportSchedule]:
        stmt = (
            select(ReportScheduleRow)
            .where(ReportScheduleRow.tenant_id == tenant_id)
            .order_by(ReportScheduleRow.name)
        )
        return [_row_to_schedule(r) for r in self._execute_query(stmt, "list_for_tenant")]
