"""
Reporting - Schedule Runner.

============================================================
PURPOSE
============================================================
The periodic driver of recurring reports.

1. Creates schedules with their first next_run_at
2. Recomputes next_run_at when timing fields change
3. Runs due schedules through a report executor and
   advances each one to its following run

============================================================
DESIGN PRINCIPLES
============================================================
- Next-run arithmetic is delegated to reporting.recurrence
- Persistence goes through a ScheduleStore
- A failing report does not stop the schedule: the failure
  is logged and the schedule still advances

============================================================
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field, replace
from datetime import datetime
from typing import Any, Callable, Dict, List, Mapping, Optional
from uuid import UUID

from core.clock import ClockFactory, ClockProtocol
from core.exceptions import AnalyticsException

from .recurrence import build_recurrence, next_run_for, recurrence_of
from .schemas import ReportScheduleCreate, validate_schedule_create, validate_schedule_update
from .types import ReportSchedule, parse_time_of_day


logger = logging.getLogger(__name__)


ReportExecutor = Callable[[ReportSchedule], Any]


class ScheduleStore(ABC):
    """Persistence seam for report schedules."""

    @abstractmethod
    def add(self, schedule: ReportSchedule) -> ReportSchedule:
        """Insert a schedule and return it with its assigned id."""
        pass

    @abstractmethod
    def get(self, schedule_id: UUID) -> ReportSchedule:
        """Load one schedule; raises RecordNotFoundError if missing."""
        pass

    @abstractmethod
    def update(self, schedule: ReportSchedule) -> ReportSchedule:
        """Overwrite a stored schedule."""
        pass

    @abstractmethod
    def list_due(self, now: datetime) -> List[ReportSchedule]:
        """Enabled schedules with next_run_at <= now, oldest first."""
        pass


@dataclass(frozen=True)
class ScheduleRunResult:
    """Outcome of one run_due pass."""

    ran_at: datetime
    executed: int = 0
    failed_schedule_ids: List[UUID] = field(default_factory=list)

    @property
    def due(self) -> int:
        return self.executed + len(self.failed_schedule_ids)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "ran_at": self.ran_at.isoformat(),
            "due": self.due,
            "executed": self.executed,
            "failed_schedule_ids": [str(i) for i in self.failed_schedule_ids],
        }


class ScheduleRunner:
    """Creates, updates and executes recurring report schedules."""

    def __init__(self, store: ScheduleStore, clock: Optional[ClockProtocol] = None):
        self._store = store
        self._clock = clock or ClockFactory.get_clock()

    # --------------------------------------------------------
    # LIFECYCLE
    # --------------------------------------------------------

    def initialize(self, payload: ReportScheduleCreate) -> ReportSchedule:
        """Build an unsaved schedule with its first next_run_at."""
        now = self._clock.now()
        rule = build_recurrence(
            payload.frequency,
            payload.time_of_day,
            payload.day_of_week,
            payload.day_of_month,
        )

        return ReportSchedule(
            tenant_id=payload.tenant_id,
            name=payload.name,
            report_type=payload.report_type,
            frequency=payload.frequency,
            time_of_day=parse_time_of_day(payload.time_of_day),
            day_of_week=payload.day_of_week,
            day_of_month=payload.day_of_month,
            next_run_at=next_run_for(rule, now),
            enabled=payload.enabled,
            created_at=now,
        )

    def create(self, payload: Mapping[str, Any]) -> ReportSchedule:
        """
        Validate, initialize and persist a new schedule.

        Raises:
            InvalidScheduleConfig: If the payload is invalid
        """
        schedule = self._store.add(self.initialize(validate_schedule_create(payload)))
        logger.info(
            f"Report schedule {schedule.id} created: {schedule.frequency.value}, "
            f"next run {schedule.next_run_at.isoformat()}"
        )
        return schedule

    def apply_update(self, schedule_id: UUID, payload: Mapping[str, Any]) -> ReportSchedule:
        """
        Apply a partial update.

        next_run_at is recomputed only when a timing field
        (frequency, time, day) changes.

        Raises:
            InvalidScheduleConfig: If the update is invalid or
                leaves the schedule incomplete
        """
        update = validate_schedule_update(payload)
        changes = update.changes()
        current = self._store.get(schedule_id)

        if "time_of_day" in changes:
            changes["time_of_day"] = parse_time_of_day(changes["time_of_day"])

        updated = replace(current, **changes)

        if update.touches_timing():
            updated = replace(
                updated,
                next_run_at=next_run_for(recurrence_of(updated), self._clock.now()),
            )
            logger.info(
                f"Report schedule {schedule_id} rescheduled to "
                f"{updated.next_run_at.isoformat()}"
            )

        return self._store.update(updated)

    # --------------------------------------------------------
    # EXECUTION
    # --------------------------------------------------------

    def run_due(self, executor: ReportExecutor) -> ScheduleRunResult:
        """
        Execute every due schedule once and advance it.

        Args:
            executor: Called with each due schedule
        """
        now = self._clock.now()
        due = self._store.list_due(now)

        executed = 0
        failed: List[UUID] = []

        for schedule in due:
            try:
                executor(schedule)
                executed += 1
            except AnalyticsException as e:
                logger.error(f"Report schedule {schedule.id} failed: {e.to_log_format()}")
                failed.append(schedule.id)
            except Exception as e:
                logger.error(f"Report schedule {schedule.id} failed: {e}", exc_info=True)
                failed.append(schedule.id)

            advanced = schedule.after_run(
                ran_at=now,
                next_run_at=next_run_for(recurrence_of(schedule), now),
            )
            self._store.update(advanced)

        if due:
            logger.info(f"Ran {len(due)} due report schedules ({len(failed)} failed)")

        return ScheduleRunResult(ran_at=now, executed=executed, failed_schedule_ids=failed)
