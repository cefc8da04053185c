"""
Pydantic Schemas for Report Schedules.

Incoming create/update payloads are validated here before a
schedule is built. Validation failures are re-raised as
InvalidScheduleConfig.
"""

from typing import Any, Dict, Mapping, Optional

from pydantic import BaseModel, Field, ValidationError, field_validator, model_validator

from core.exceptions import InvalidScheduleConfig

from .types import DayOfWeek, Frequency, format_time_of_day, parse_time_of_day


TIMING_FIELDS = ("frequency", "time_of_day", "day_of_week", "day_of_month")


def _normalize_time(value: Any) -> Any:
    if value is None:
        return value
    try:
        return format_time_of_day(parse_time_of_day(value))
    except InvalidScheduleConfig as e:
        raise ValueError(str(e)) from None


def _normalize_enum(value: Any) -> Any:
    if isinstance(value, str):
        return value.strip().upper()
    return value


# =============================================================
# CREATE
# =============================================================

class ReportScheduleCreate(BaseModel):
    """Payload creating a recurring report schedule."""
    tenant_id: str = Field(..., min_length=1)
    name: str = Field(..., min_length=1, max_length=200)
    report_type: str = Field(..., min_length=1)
    frequency: Frequency
    time_of_day: str = Field(..., description="HH:MM, 24-hour clock")
    day_of_week: Optional[DayOfWeek] = None
    day_of_month: Optional[int] = Field(default=None, ge=1, le=31)
    enabled: bool = True

    @field_validator("frequency", mode="before")
    @classmethod
    def _upper_frequency(cls, value: Any) -> Any:
        return _normalize_enum(value)

    @field_validator("day_of_week", mode="before")
    @classmethod
    def _upper_day(cls, value: Any) -> Any:
        return _normalize_enum(value)

    @field_validator("time_of_day", mode="before")
    @classmethod
    def _check_time(cls, value: Any) -> Any:
        return _normalize_time(value)

    @model_validator(mode="after")
    def _check_frequency_fields(self) -> "ReportScheduleCreate":
        if self.frequency == Frequency.WEEKLY and self.day_of_week is None:
            raise ValueError("WEEKLY schedules require day_of_week")
        if self.frequency == Frequency.MONTHLY and self.day_of_month is None:
            raise ValueError("MONTHLY schedules require day_of_month")
        return self


# =============================================================
# UPDATE
# =============================================================

class ReportScheduleUpdate(BaseModel):
    """Partial update; only the fields provided are changed."""
    name: Optional[str] = Field(default=None, min_length=1, max_length=200)
    report_type: Optional[str] = Field(default=None, min_length=1)
    frequency: Optional[Frequency] = None
    time_of_day: Optional[str] = None
    day_of_week: Optional[DayOfWeek] = None
    day_of_month: Optional[int] = Field(default=None, ge=1, le=31)
    enabled: Optional[bool] = None

    @field_validator("frequency", "day_of_week", mode="before")
    @classmethod
    def _upper(cls, value: Any) -> Any:
        return _normalize_enum(value)

    @field_validator("time_of_day", mode="before")
    @classmethod
    def _check_time(cls, value: Any) -> Any:
        return _normalize_time(value)

    def changes(self) -> Dict[str, Any]:
        return self.model_dump(exclude_unset=True)

    def touches_timing(self) -> bool:
        return any(name in self.changes() for name in TIMING_FIELDS)


# =============================================================
# VALIDATION ENTRY POINTS
# =============================================================

def _to_schedule_error(error: ValidationError) -> InvalidScheduleConfig:
    first = error.errors()[0]
    location = ".".join(str(part) for part in first.get("loc", ()))
    return InvalidScheduleConfig(
        f"Invalid report schedule: {first.get('msg', 'validation failed')}",
        field=location or None,
        value=first.get("input"),
        context={"errors": error.error_count()},
    )


def validate_schedule_create(payload: Mapping[str, Any]) -> ReportScheduleCreate:
    """
    Validate a create payload.

    Raises:
        InvalidScheduleConfig: If the payload is invalid
    """
    try:
        return ReportScheduleCreate.model_validate(dict(payload))
    except ValidationError as e:
        raise _to_schedule_error(e) from e


def validate_schedule_update(payload: Mapping[str, Any]) -> ReportScheduleUpdate:
    """
    Validate an update payload.

    Raises:
        InvalidScheduleConfig: If the payload is invalid
    """
    try:
        return ReportScheduleUpdate.model_validate(dict(payload))
    except ValidationError as e:
        raise _to_schedule_error(e) from e
