"""
Predictive Analytics - Compliance Forecaster.

Projects a tenant's training completion rate:

    completion_rate = completed / total
    predicted       = completion_rate + in_progress / total * 0.7

Both are reported as integer percentages. A tenant with no
enrollments forecasts 0 / 0.
"""

import logging
from typing import Sequence

from core.exceptions import InvalidConfigError
from risk_scoring.reader import SignalReader, call_collaborator
from risk_scoring.types import EnrollmentSnapshot

from .types import ComplianceForecast, percent_half_up


logger = logging.getLogger(__name__)

# Share of in-progress enrollments expected to complete
IN_PROGRESS_COMPLETION_FACTOR = 0.7


def forecast_from_enrollments(
    tenant_id: str,
    enrollments: Sequence[EnrollmentSnapshot],
    days_ahead: int,
    in_progress_factor: float = IN_PROGRESS_COMPLETION_FACTOR,
) -> ComplianceForecast:
    total = len(enrollments)
    completed = sum(1 for e in enrollments if e.is_completed)
    in_progress = sum(1 for e in enrollments if e.is_in_progress)

    if total > 0:
        completion_rate = completed / total
        predicted = completion_rate + in_progress / total * in_progress_factor
    else:
        completion_rate = 0.0
        predicted = 0.0

    return ComplianceForecast(
        tenant_id=tenant_id,
        days_ahead=days_ahead,
        current_compliance_rate=percent_half_up(completion_rate),
        predicted_compliance_rate=percent_half_up(predicted),
        at_risk_user_count=total - completed - in_progress,
        total_enrollments=total,
    )


class ComplianceForecaster:

    def __init__(self, reader: SignalReader, in_progress_factor: float = IN_PROGRESS_COMPLETION_FACTOR):
        if not 0 <= in_progress_factor <= 1:
            raise InvalidConfigError("in_progress_factor", in_progress_factor, "must be within 0..1")
        self._reader = reader
        self._in_progress_factor = in_progress_factor

    def forecast(self, tenant_id: str, days_ahead: int) -> ComplianceForecast:
        enrollments = call_collaborator(
            "reader", "get_tenant_enrollments", self._reader.get_tenant_enrollments, tenant_id
        )
        forecast = forecast_from_enrollments(
            tenant_id, enrollments, days_ahead, self._in_progress_factor
        )
        logger.debug(
            f"Compliance forecast for tenant {tenant_id}: "
            f"{forecast.current_compliance_rate}% -> {forecast.predicted_compliance_rate}%"
        )
        return forecast
