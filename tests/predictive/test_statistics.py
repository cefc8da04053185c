"""
Tests for phishing statistics and training completion rates.
"""

from datetime import timedelta
from unittest.mock import MagicMock

import pytest

from core.exceptions import DependencyUnavailable
from predictive import (
    SignalStatisticsService,
    TimeRange,
    completion_rates_from_enrollments,
    phishing_stats_from_outcomes,
)
from risk_scoring.reader import SignalReader
from risk_scoring.types import EnrollmentSnapshot, EnrollmentStatus, PhishingSimulationOutcome


@pytest.fixture
def outcome(fixed_now):
    def _outcome(user_id="user-1", tenant_id="tenant-1", clicked=False, reported=False):
        return PhishingSimulationOutcome(user_id, tenant_id, fixed_now, clicked, reported)

    return _outcome


@pytest.fixture
def reader():
    mock = MagicMock(spec=SignalReader)
    mock.get_tenant_simulations.return_value = []
    mock.get_tenant_enrollments.return_value = []
    return mock


class TestPhishingStats:

    def test_no_simulations(self):
        stats = phishing_stats_from_outcomes([])
        assert stats.total_simulations == 0
        assert stats.click_rate == 0.0
        assert stats.report_rate == 0.0

    def test_rates_rounded_to_two_places(self, outcome):
        outcomes = [outcome(clicked=True), outcome(reported=True), outcome(reported=True)]
        stats = phishing_stats_from_outcomes(outcomes)

        assert stats.clicked_count == 1
        assert stats.reported_count == 2
        assert stats.click_rate == 33.33
        assert stats.report_rate == 66.67

    def test_filters_by_user_and_tenant(self, outcome):
        outcomes = [
            outcome(user_id="a", clicked=True),
            outcome(user_id="b"),
            outcome(user_id="a", tenant_id="tenant-2", clicked=True),
        ]
        assert phishing_stats_from_outcomes(outcomes, tenant_id="tenant-1").total_simulations == 2
        stats = phishing_stats_from_outcomes(outcomes, tenant_id="tenant-1", user_id="a")
        assert stats.total_simulations == 1
        assert stats.click_rate == 100.0

    def test_to_dict(self, outcome):
        data = phishing_stats_from_outcomes([outcome(clicked=True), outcome()]).to_dict()
        assert data == {
            "total_simulations": 2,
            "clicked_count": 1,
            "reported_count": 0,
            "click_rate": 50.0,
            "report_rate": 0.0,
        }


class TestCompletionRates:

    def test_no_enrollments(self):
        rates = completion_rates_from_enrollments("tenant-1", [])
        assert rates.total == 0
        assert rates.completion_rate == 0
        assert set(rates.by_status) == set(EnrollmentStatus)

    def test_breakdown_and_rate(self):
        enrollments = (
            [EnrollmentSnapshot("u", EnrollmentStatus.COMPLETED)] * 2
            + [EnrollmentSnapshot("u", EnrollmentStatus.IN_PROGRESS)]
            + [EnrollmentSnapshot("u", EnrollmentStatus.EXPIRED)]
            + [EnrollmentSnapshot("u", EnrollmentStatus.NOT_STARTED)] * 4
        )
        rates = completion_rates_from_enrollments("tenant-1", enrollments)

        assert rates.total == 8
        assert rates.count_at(EnrollmentStatus.COMPLETED) == 2
        assert rates.count_at(EnrollmentStatus.FAILED) == 0
        assert rates.completion_rate == 25
        assert rates.to_dict()["by_status"] == {
            "NOT_STARTED": 4,
            "IN_PROGRESS": 1,
            "COMPLETED": 2,
            "FAILED": 0,
            "EXPIRED": 1,
        }

    def test_single_course(self):
        enrollments = [
            EnrollmentSnapshot("u", EnrollmentStatus.COMPLETED, course_id="c1"),
            EnrollmentSnapshot("u", EnrollmentStatus.NOT_STARTED, course_id="c2"),
        ]
        rates = completion_rates_from_enrollments("tenant-1", enrollments, course_id="c1")
        assert rates.total == 1
        assert rates.completion_rate == 100
        assert rates.to_dict()["course_id"] == "c1"


class TestSignalStatisticsService:

    def test_phishing_window_from_clock(self, reader, clock, fixed_now, outcome):
        reader.get_tenant_simulations.return_value = [outcome(clicked=True)]

        stats = SignalStatisticsService(reader, clock).phishing_stats("tenant-1", time_range=TimeRange.LAST_7_DAYS)

        reader.get_tenant_simulations.assert_called_once_with("tenant-1", fixed_now - timedelta(days=7))
        assert stats.click_rate == 100.0

    def test_default_window_is_thirty_days(self, reader, clock, fixed_now):
        SignalStatisticsService(reader, clock).phishing_stats("tenant-1")
        reader.get_tenant_simulations.assert_called_once_with("tenant-1", fixed_now - timedelta(days=30))

    def test_completion_rates_read_tenant_enrollments(self, reader, clock):
        reader.get_tenant_enrollments.return_value = [EnrollmentSnapshot("u", EnrollmentStatus.COMPLETED)]
        rates = SignalStatisticsService(reader, clock).completion_rates("tenant-1")
        assert rates.completion_rate == 100
        reader.get_tenant_enrollments.assert_called_once_with("tenant-1")

    def test_reader_failure_is_retryable(self, reader, clock):
        reader.get_tenant_simulations.side_effect = ConnectionError("down")
        with pytest.raises(DependencyUnavailable) as exc_info:
            SignalStatisticsService(reader, clock).phishing_stats("tenant-1")
        assert exc_info.value.is_retryable
