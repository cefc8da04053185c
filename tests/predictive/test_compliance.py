"""
Tests for ComplianceForecaster.
"""

from unittest.mock import MagicMock

import pytest

from core.exceptions import DependencyUnavailable, InvalidConfigError
from predictive import ComplianceForecaster, forecast_from_enrollments
from risk_scoring.reader import SignalReader
from risk_scoring.types import EnrollmentSnapshot, EnrollmentStatus


def _enrollments(completed=0, in_progress=0, other=0):
    return (
        [EnrollmentSnapshot("u", EnrollmentStatus.COMPLETED)] * completed
        + [EnrollmentSnapshot("u", EnrollmentStatus.IN_PROGRESS)] * in_progress
        + [EnrollmentSnapshot("u", EnrollmentStatus.NOT_STARTED)] * other
    )


class TestForecastFromEnrollments:

    def test_no_enrollments(self):
        forecast = forecast_from_enrollments("t", [], 30)
        assert forecast.current_compliance_rate == 0
        assert forecast.predicted_compliance_rate == 0
        assert forecast.at_risk_user_count == 0

    def test_projection(self):
        forecast = forecast_from_enrollments("t", _enrollments(completed=5, in_progress=3, other=2), 30)
        assert forecast.current_compliance_rate == 50
        # 0.5 + 0.3 * 0.7 = 0.71
        assert forecast.predicted_compliance_rate == 71
        assert forecast.at_risk_user_count == 2
        assert forecast.total_enrollments == 10

    def test_half_rounds_up(self):
        forecast = forecast_from_enrollments("t", _enrollments(completed=1, other=7), 30)
        # 12.5%
        assert forecast.current_compliance_rate == 13

    def test_failed_and_expired_are_at_risk(self):
        enrollments = [
            EnrollmentSnapshot("u", EnrollmentStatus.FAILED),
            EnrollmentSnapshot("u", EnrollmentStatus.EXPIRED),
            EnrollmentSnapshot("u", EnrollmentStatus.COMPLETED),
        ]
        assert forecast_from_enrollments("t", enrollments, 7).at_risk_user_count == 2


class TestComplianceForecaster:

    def test_reads_tenant_enrollments(self):
        reader = MagicMock(spec=SignalReader)
        reader.get_tenant_enrollments.return_value = _enrollments(completed=1, in_progress=1)

        forecast = ComplianceForecaster(reader).forecast("tenant-1", 14)

        reader.get_tenant_enrollments.assert_called_once_with("tenant-1")
        assert forecast.to_dict() == {
            "tenant_id": "tenant-1",
            "days_ahead": 14,
            "current_compliance_rate": 50,
            "predicted_compliance_rate": 85,
            "at_risk_user_count": 0,
            "total_enrollments": 2,
        }

    def test_reader_failure_is_retryable(self):
        reader = MagicMock(spec=SignalReader)
        reader.get_tenant_enrollments.side_effect = ConnectionError("down")

        with pytest.raises(DependencyUnavailable) as exc_info:
            ComplianceForecaster(reader).forecast("tenant-1", 30)

        assert exc_info.value.is_retryable
        assert exc_info.value.dependency == "reader"

    def test_factor_range(self):
        with pytest.raises(InvalidConfigError):
            ComplianceForecaster(MagicMock(spec=SignalReader), in_progress_factor=1.5)
