"""
Reporting - Recurrence Scheduler.

============================================================
PURPOSE
============================================================
Compute the next run time of a recurring report schedule.

The frequency is a tagged union: one frozen dataclass per
variant, each handled by exactly one pure function. Invalid
combinations (WEEKLY without a day, MONTHLY with day 32)
cannot be constructed.

============================================================
RULES
============================================================
DAILY      today at time_of_day; tomorrow if not after now
WEEKLY     from the DAILY candidate, forward to day_of_week
MONTHLY    day_of_month of now's month (clamped to month
           length); same day next month if not after now
QUARTERLY  first day of the quarter after now's quarter;
           one more quarter if not after now
YEARLY     January 1st of now's year; next year if not
           after now

Every result is strictly later than `now`.

============================================================
"""

import calendar
import logging
from dataclasses import dataclass
from datetime import datetime, time, timedelta
from typing import Callable, Dict, Optional, Type, Union

from dateutil.relativedelta import relativedelta

from core.clock import ClockFactory, ClockProtocol, ensure_utc
from core.exceptions import InvalidScheduleConfig

from .types import (
    DayOfWeek,
    Frequency,
    ReportSchedule,
    parse_frequency,
    parse_time_of_day,
)


logger = logging.getLogger(__name__)

DAYS_PER_WEEK = 7
MONTHS_PER_QUARTER = 3


# ============================================================
# RECURRENCE VARIANTS
# ============================================================


@dataclass(frozen=True)
class DailyRecurrence:
    time_of_day: time


@dataclass(frozen=True)
class WeeklyRecurrence:
    time_of_day: time
    day_of_week: DayOfWeek


@dataclass(frozen=True)
class MonthlyRecurrence:
    time_of_day: time
    day_of_month: int

    def __post_init__(self) -> None:
        if not 1 <= self.day_of_month <= 31:
            raise InvalidScheduleConfig(
                f"day_of_month must be within 1..31, got {self.day_of_month}",
                frequency=Frequency.MONTHLY.value,
                field="day_of_month",
                value=self.day_of_month,
            )


@dataclass(frozen=True)
class QuarterlyRecurrence:
    time_of_day: time


@dataclass(frozen=True)
class YearlyRecurrence:
    time_of_day: time


Recurrence = Union[
    DailyRecurrence,
    WeeklyRecurrence,
    MonthlyRecurrence,
    QuarterlyRecurrence,
    YearlyRecurrence,
]


# ============================================================
# HANDLERS
# ============================================================


def _at_time(day: datetime, time_of_day: time) -> datetime:
    return day.replace(
        hour=time_of_day.hour,
        minute=time_of_day.minute,
        second=0,
        microsecond=0,
    )


def _days_in_month(year: int, month: int) -> int:
    return calendar.monthrange(year, month)[1]


def _next_daily(rule: DailyRecurrence, now: datetime) -> datetime:
    candidate = _at_time(now, rule.time_of_day)
    if candidate <= now:
        candidate += timedelta(days=1)
    return candidate


def _next_weekly(rule: WeeklyRecurrence, now: datetime) -> datetime:
    candidate = _next_daily(DailyRecurrence(rule.time_of_day), now)
    # candidate is already after now, so a zero offset keeps it
    days = (rule.day_of_week.index - candidate.weekday() + DAYS_PER_WEEK) % DAYS_PER_WEEK
    return candidate + timedelta(days=days)


def _next_monthly(rule: MonthlyRecurrence, now: datetime) -> datetime:
    day = min(rule.day_of_month, _days_in_month(now.year, now.month))
    candidate = _at_time(now.replace(day=day), rule.time_of_day)
    if candidate <= now:
        # relativedelta clamps to the last day of a shorter month
        candidate = _at_time(
            now.replace(day=1) + relativedelta(months=1, day=rule.day_of_month),
            rule.time_of_day,
        )
    return candidate


def _next_quarterly(rule: QuarterlyRecurrence, now: datetime) -> datetime:
    quarter_start_month = (now.month - 1) // MONTHS_PER_QUARTER * MONTHS_PER_QUARTER + 1
    quarter_start = now.replace(month=quarter_start_month, day=1)
    candidate = _at_time(quarter_start + relativedelta(months=MONTHS_PER_QUARTER), rule.time_of_day)
    if candidate <= now:
        candidate += relativedelta(months=MONTHS_PER_QUARTER)
    return candidate


def _next_yearly(rule: YearlyRecurrence, now: datetime) -> datetime:
    candidate = _at_time(now.replace(month=1, day=1), rule.time_of_day)
    if candidate <= now:
        candidate += relativedelta(years=1)
    return candidate


_HANDLERS: Dict[Type, Callable[..., datetime]] = {
    DailyRecurrence: _next_daily,
    WeeklyRecurrence: _next_weekly,
    MonthlyRecurrence: _next_monthly,
    QuarterlyRecurrence: _next_quarterly,
    YearlyRecurrence: _next_yearly,
}


# ============================================================
# PUBLIC API
# ============================================================


def build_recurrence(
    frequency: Union[str, Frequency],
    time_of_day: Union[str, time],
    day_of_week: Optional[Union[str, DayOfWeek]] = None,
    day_of_month: Optional[int] = None,
) -> Recurrence:
    """
    Build the recurrence variant for a frequency.

    Fields the frequency does not use are ignored.

    Raises:
        InvalidScheduleConfig: If a required field is missing
            or a value is malformed
    """
    frequency = parse_frequency(frequency)
    parsed_time = parse_time_of_day(time_of_day)

    if frequency == Frequency.DAILY:
        return DailyRecurrence(parsed_time)

    if frequency == Frequency.WEEKLY:
        if day_of_week is None:
            raise InvalidScheduleConfig(
                "WEEKLY schedules require day_of_week",
                frequency=frequency.value,
                field="day_of_week",
            )
        return WeeklyRecurrence(parsed_time, DayOfWeek.parse(day_of_week))

    if frequency == Frequency.MONTHLY:
        if day_of_month is None:
            raise InvalidScheduleConfig(
                "MONTHLY schedules require day_of_month",
                frequency=frequency.value,
                field="day_of_month",
            )
        return MonthlyRecurrence(parsed_time, int(day_of_month))

    if frequency == Frequency.QUARTERLY:
        return QuarterlyRecurrence(parsed_time)

    return YearlyRecurrence(parsed_time)


def next_run_for(rule: Recurrence, now: datetime) -> datetime:
    """Next run strictly after `now` for a recurrence variant."""
    handler = _HANDLERS.get(type(rule))
    if handler is None:
        raise InvalidScheduleConfig(f"Unsupported recurrence: {type(rule).__name__}")
    return handler(rule, ensure_utc(now))


def calculate_next_run(
    now: datetime,
    frequency: Union[str, Frequency],
    time_of_day: Union[str, time],
    day_of_week: Optional[Union[str, DayOfWeek]] = None,
    day_of_month: Optional[int] = None,
) -> datetime:
    """
    Next run time of a schedule, strictly later than `now`.

    Args:
        now: Reference instant (naive values are taken as UTC)
        frequency: DAILY, WEEKLY, MONTHLY, QUARTERLY or YEARLY
        time_of_day: "HH:MM" or datetime.time
        day_of_week: Required for WEEKLY
        day_of_month: Required for MONTHLY (1-31)

    Raises:
        InvalidScheduleConfig: If the input is incomplete
    """
    rule = build_recurrence(frequency, time_of_day, day_of_week, day_of_month)
    return next_run_for(rule, now)


def recurrence_of(schedule: ReportSchedule) -> Recurrence:
    return build_recurrence(
        schedule.frequency,
        schedule.time_of_day,
        schedule.day_of_week,
        schedule.day_of_month,
    )


class RecurrenceScheduler:
    """calculate_next_run bound to a clock."""

    def __init__(self, clock: Optional[ClockProtocol] = None):
        self._clock = clock or ClockFactory.get_clock()

    def next_run(
        self,
        frequency: Union[str, Frequency],
        time_of_day: Union[str, time],
        day_of_week: Optional[Union[str, DayOfWeek]] = None,
        day_of_month: Optional[int] = None,
    ) -> datetime:
        now = self._clock.now()
        next_run_at = calculate_next_run(now, frequency, time_of_day, day_of_week, day_of_month)
        logger.debug(f"Next {frequency} run after {now.isoformat()}: {next_run_at.isoformat()}")
        return next_run_at

    def next_run_of(self, schedule: ReportSchedule) -> datetime:
        return next_run_for(recurrence_of(schedule), self._clock.now())
