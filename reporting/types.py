"""
Reporting - Schedule Type Definitions.

============================================================
PURPOSE
============================================================
Vocabulary of recurring report schedules: frequencies, days
of the week, time-of-day parsing and the ReportSchedule
record itself.

============================================================
"""

import re
from dataclasses import dataclass, replace
from datetime import datetime, time
from enum import Enum
from typing import Any, Dict, Optional, Union
from uuid import UUID

from core.clock import ensure_utc
from core.exceptions import InvalidScheduleConfig


_TIME_PATTERN = re.compile(r"^(\d{1,2}):(\d{2})$")


class Frequency(str, Enum):
    DAILY = "DAILY"
    WEEKLY = "WEEKLY"
    MONTHLY = "MONTHLY"
    QUARTERLY = "QUARTERLY"
    YEARLY = "YEARLY"


class DayOfWeek(str, Enum):
    """Days of the week; `index` follows datetime.weekday() (Monday = 0)."""

    MONDAY = "MONDAY"
    TUESDAY = "TUESDAY"
    WEDNESDAY = "WEDNESDAY"
    THURSDAY = "THURSDAY"
    FRIDAY = "FRIDAY"
    SATURDAY = "SATURDAY"
    SUNDAY = "SUNDAY"

    @property
    def index(self) -> int:
        return list(DayOfWeek).index(self)

    @classmethod
    def parse(cls, value: Union[str, "DayOfWeek"]) -> "DayOfWeek":
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().upper())
        except ValueError:
            raise InvalidScheduleConfig(
                f"Unknown day of week: {value!r}",
                field="day_of_week",
                value=value,
            ) from None


def parse_frequency(value: Union[str, Frequency]) -> Frequency:
    if isinstance(value, Frequency):
        return value
    try:
        return Frequency(str(value).strip().upper())
    except ValueError:
        raise InvalidScheduleConfig(
            f"Unknown frequency: {value!r}",
            field="frequency",
            value=value,
        ) from None


def parse_time_of_day(value: Union[str, time]) -> time:
    """
    Parse an "HH:MM" string (24-hour clock) into a time.

    A datetime.time is accepted as-is, minus seconds.

    Raises:
        InvalidScheduleConfig: If the value is malformed
    """
    if isinstance(value, time):
        return value.replace(second=0, microsecond=0, tzinfo=None)

    match = _TIME_PATTERN.match(str(value).strip())
    if not match:
        raise InvalidScheduleConfig(
            f"Time of day must be HH:MM, got {value!r}",
            field="time_of_day",
            value=value,
        )

    hour, minute = int(match.group(1)), int(match.group(2))
    if hour > 23 or minute > 59:
        raise InvalidScheduleConfig(
            f"Time of day out of range: {value!r}",
            field="time_of_day",
            value=value,
        )
    return time(hour, minute)


def format_time_of_day(value: time) -> str:
    return f"{value.hour:02d}:{value.minute:02d}"


@dataclass(frozen=True)
class ReportSchedule:
    """
    A recurring report schedule.

    next_run_at is always later than the instant it was
    computed at.
    """

    tenant_id: str
    name: str
    report_type: str
    frequency: Frequency
    time_of_day: time
    next_run_at: datetime
    day_of_week: Optional[DayOfWeek] = None
    day_of_month: Optional[int] = None
    last_run_at: Optional[datetime] = None
    enabled: bool = True
    created_at: Optional[datetime] = None
    id: Optional[UUID] = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "next_run_at", ensure_utc(self.next_run_at))
        if self.last_run_at is not None:
            object.__setattr__(self, "last_run_at", ensure_utc(self.last_run_at))
        if self.created_at is not None:
            object.__setattr__(self, "created_at", ensure_utc(self.created_at))

    def is_due(self, now: datetime) -> bool:
        return self.enabled and self.next_run_at <= ensure_utc(now)

    def after_run(self, ran_at: datetime, next_run_at: datetime) -> "ReportSchedule":
        """Copy recording a completed run and the following run time."""
        return replace(self, last_run_at=ran_at, next_run_at=next_run_at)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": str(self.id) if self.id else None,
            "tenant_id": self.tenant_id,
            "name": self.name,
            "report_type": self.report_type,
            "frequency": self.frequency.value,
            "time_of_day": format_time_of_day(self.time_of_day),
            "day_of_week": self.day_of_week.value if self.day_of_week else None,
            "day_of_month": self.day_of_month,
            "next_run_at": self.next_run_at.isoformat(),
            "last_run_at": self.last_run_at.isoformat() if self.last_run_at else None,
            "enabled": self.enabled,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }
