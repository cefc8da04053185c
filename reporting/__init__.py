"""
Reporting Package.

Recurring report schedules: when each report runs next,
validation of schedule payloads, and the runner that
executes due schedules.

Modules:
- types: Frequency, DayOfWeek, ReportSchedule
- recurrence: Next-run calculation per frequency
- schemas: Pydantic create/update payloads
- runner: ScheduleRunner and the ScheduleStore seam
"""

from .recurrence import (
    DailyRecurrence,
    MonthlyRecurrence,
    QuarterlyRecurrence,
    RecurrenceScheduler,
    WeeklyRecurrence,
    YearlyRecurrence,
    build_recurrence,
    calculate_next_run,
    next_run_for,
)
from .runner import ScheduleRunner, ScheduleRunResult, ScheduleStore
from .schemas import (
    ReportScheduleCreate,
    ReportScheduleUpdate,
    validate_schedule_create,
    validate_schedule_update,
)
from .types import DayOfWeek, Frequency, ReportSchedule, parse_time_of_day


__all__ = [
    "DailyRecurrence",
    "MonthlyRecurrence",
    "QuarterlyRecurrence",
    "RecurrenceScheduler",
    "WeeklyRecurrence",
    "YearlyRecurrence",
    "build_recurrence",
    "calculate_next_run",
    "next_run_for",
    "ScheduleRunner",
    "ScheduleRunResult",
    "ScheduleStore",
    "ReportScheduleCreate",
    "ReportScheduleUpdate",
    "validate_schedule_create",
    "validate_schedule_update",
    "DayOfWeek",
    "Frequency",
    "ReportSchedule",
    "parse_time_of_day",
]
