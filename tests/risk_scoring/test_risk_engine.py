"""
Tests for RiskScoreCalculator.

============================================================
TEST COVERAGE
============================================================
1. Weighted combination and bounds
2. Risk level band boundaries
3. Cache window behavior
4. Collaborator failure handling
5. Bulk calculation
============================================================
"""

from datetime import timedelta
from unittest.mock import MagicMock

import pytest

from core.exceptions import DependencyUnavailable
from core.settings import Settings
from risk_scoring import (
    EnrollmentSnapshot,
    EnrollmentStatus,
    PhishingSimulationOutcome,
    QuizAttempt,
    RiskLevel,
    RiskScoreCalculator,
    RiskScoreNotFoundError,
    SubScore,
    combine_sub_scores,
    create_calculator,
    format_risk_summary,
    get_conservative_config,
    get_risk_level_from_score,
)
from risk_scoring.reader import RiskScoreWriter, SignalReader


# ============================================================
# FIXTURES
# ============================================================

@pytest.fixture
def reader():
    """Reader with no history at all."""
    mock = MagicMock(spec=SignalReader)
    mock.get_recent_simulations.return_value = []
    mock.get_enrollments.return_value = []
    mock.get_last_completed_enrollment.return_value = None
    mock.get_recent_quiz_attempts.return_value = []
    mock.count_security_incidents.return_value = 0
    mock.get_recent_risk_scores.return_value = []
    mock.list_tenant_user_ids.return_value = []
    return mock


@pytest.fixture
def writer():
    mock = MagicMock(spec=RiskScoreWriter)
    mock.save_risk_score.side_effect = lambda record: record
    return mock


@pytest.fixture
def calculator(reader, writer, clock):
    return RiskScoreCalculator(reader=reader, writer=writer, clock=clock)


# ============================================================
# COMBINATION
# ============================================================

class TestCombineSubScores:

    def test_all_zero(self):
        assert combine_sub_scores({s: 0.0 for s in SubScore}) == 0.0

    def test_all_hundred(self):
        assert combine_sub_scores({s: 100.0 for s in SubScore}) == pytest.approx(100.0)

    def test_weighted_sum(self):
        scores = {s: 0.0 for s in SubScore}
        scores[SubScore.PHISHING] = 100.0
        scores[SubScore.LOGIN_ANOMALY] = 100.0
        assert combine_sub_scores(scores) == pytest.approx(35.0)

    def test_result_never_exceeds_bounds(self):
        assert 0.0 <= combine_sub_scores({s: 100.0 for s in SubScore}) <= 100.0


class TestRiskLevelBoundaries:

    @pytest.mark.parametrize("score,level", [
        (0.0, RiskLevel.LOW),
        (24.9, RiskLevel.LOW),
        (25.0, RiskLevel.MEDIUM),
        (49.99, RiskLevel.MEDIUM),
        (50.0, RiskLevel.HIGH),
        (74.9, RiskLevel.HIGH),
        (75.0, RiskLevel.CRITICAL),
        (100.0, RiskLevel.CRITICAL),
    ])
    def test_band_lower_bound_inclusive(self, score, level):
        assert get_risk_level_from_score(score) == level


# ============================================================
# CALCULATION
# ============================================================

class TestCalculate:

    def test_no_history_uses_neutral_defaults(self, calculator, writer, fixed_now):
        record = calculator.calculate("user-1", "tenant-1")

        assert record.phishing_score == 50.0
        assert record.training_completion_score == 100.0
        assert record.time_since_training_score == 100.0
        assert record.quiz_performance_score == 50.0
        assert record.security_incident_score == 0.0
        assert record.login_anomaly_score == 10.0
        # 15 + 25 + 15 + 7.5 + 0 + 0.5
        assert record.overall_score == pytest.approx(63.0)
        assert record.risk_level == RiskLevel.HIGH
        assert record.calculated_at == fixed_now
        writer.save_risk_score.assert_called_once()

    def test_uses_all_signals(self, calculator, reader, fixed_now):
        reader.get_recent_simulations.return_value = [
            PhishingSimulationOutcome("user-1", "tenant-1", fixed_now, was_clicked=True)
        ] * 5
        reader.get_enrollments.return_value = [
            EnrollmentSnapshot("user-1", EnrollmentStatus.COMPLETED, fixed_now - timedelta(days=365))
        ]
        reader.get_last_completed_enrollment.return_value = reader.get_enrollments.return_value[0]
        reader.get_recent_quiz_attempts.return_value = [QuizAttempt("user-1", 20.0, fixed_now)]
        reader.count_security_incidents.return_value = 5

        record = calculator.calculate("user-1", "tenant-1")

        assert record.phishing_score == 100.0
        assert record.training_completion_score == 0.0
        assert record.time_since_training_score == 100.0
        assert record.quiz_performance_score == 80.0
        assert record.security_incident_score == 100.0
        assert record.overall_score == pytest.approx(30 + 0 + 15 + 12 + 10 + 0.5)

    def test_fetches_bounded_windows(self, calculator, reader):
        calculator.calculate("user-1", "tenant-1")
        reader.get_recent_simulations.assert_called_once_with("user-1", 10)
        reader.get_recent_quiz_attempts.assert_called_once_with("user-1", 10)

    def test_returns_stored_record(self, calculator, writer, make_record):
        stored = make_record(42.0)
        writer.save_risk_score.side_effect = None
        writer.save_risk_score.return_value = stored
        assert calculator.calculate("user-1", "tenant-1") is stored


class TestCache:

    def test_recent_record_returned_unchanged(self, calculator, reader, writer, make_record, fixed_now):
        cached = make_record(12.5, calculated_at=fixed_now - timedelta(hours=23))
        reader.get_recent_risk_scores.return_value = [cached]

        assert calculator.calculate("user-1", "tenant-1") is cached
        writer.save_risk_score.assert_not_called()
        reader.get_recent_simulations.assert_not_called()

    def test_stale_record_recalculated(self, calculator, reader, writer, make_record, fixed_now):
        reader.get_recent_risk_scores.return_value = [
            make_record(12.5, calculated_at=fixed_now - timedelta(hours=25))
        ]
        calculator.calculate("user-1", "tenant-1")
        writer.save_risk_score.assert_called_once()

    def test_force_bypasses_cache(self, calculator, reader, writer, make_record, fixed_now):
        reader.get_recent_risk_scores.return_value = [make_record(12.5, calculated_at=fixed_now)]
        calculator.calculate("user-1", "tenant-1", force_recalculate=True)
        writer.save_risk_score.assert_called_once()

    def test_repeat_within_window_is_identical(self, reader, writer, clock):
        stored = []

        def save(record):
            stored.append(record)
            return record

        writer.save_risk_score.side_effect = save
        reader.get_recent_risk_scores.side_effect = lambda user_id, limit: list(reversed(stored))[:limit]
        calculator = RiskScoreCalculator(reader, writer, clock=clock)

        first = calculator.calculate("user-1", "tenant-1")
        clock.advance(hours=2)
        second = calculator.calculate("user-1", "tenant-1")

        assert second == first
        assert len(stored) == 1

    def test_cache_window_from_settings(self, reader, writer, clock, make_record, fixed_now):
        reader.get_recent_risk_scores.return_value = [
            make_record(12.5, calculated_at=fixed_now - timedelta(hours=7))
        ]
        calculator = create_calculator(reader, writer, settings=Settings(cache_ttl_hours=6), clock=clock)
        calculator.calculate("user-1", "tenant-1")
        writer.save_risk_score.assert_called_once()


class TestDependencyFailures:

    def test_reader_failure_wrapped(self, calculator, reader):
        reader.count_security_incidents.side_effect = RuntimeError("connection reset")

        with pytest.raises(DependencyUnavailable) as exc_info:
            calculator.calculate("user-1", "tenant-1")

        assert exc_info.value.is_retryable
        assert exc_info.value.operation == "count_security_incidents"
        assert isinstance(exc_info.value.__cause__, RuntimeError)

    def test_writer_failure_wrapped(self, calculator, writer):
        writer.save_risk_score.side_effect = OSError("disk full")
        with pytest.raises(DependencyUnavailable):
            calculator.calculate("user-1", "tenant-1")

    def test_dependency_unavailable_passes_through(self, calculator, reader):
        original = DependencyUnavailable("store down", dependency="store")
        reader.get_recent_risk_scores.side_effect = original
        with pytest.raises(DependencyUnavailable) as exc_info:
            calculator.calculate("user-1", "tenant-1")
        assert exc_info.value is original


# ============================================================
# CURRENT SCORE AND BULK
# ============================================================

class TestCurrentScore:

    def test_returns_newest(self, calculator, reader, make_record):
        newest = make_record(40.0)
        reader.get_recent_risk_scores.return_value = [newest]
        assert calculator.get_current_score("user-1") is newest

    def test_never_scored(self, calculator):
        with pytest.raises(RiskScoreNotFoundError) as exc_info:
            calculator.get_current_score("ghost")
        assert exc_info.value.user_id == "ghost"


class TestBulk:

    def test_failed_users_skipped(self, calculator, reader):
        def incidents(user_id):
            if user_id == "bad":
                raise RuntimeError("boom")
            return 0

        reader.count_security_incidents.side_effect = incidents
        result = calculator.calculate_bulk("tenant-1", ["a", "bad", "b"])

        assert result.requested == 3
        assert result.calculated == 2
        assert result.failed_user_ids == ["bad"]

    def test_defaults_to_every_tenant_user(self, calculator, reader):
        reader.list_tenant_user_ids.return_value = ["a", "b"]
        result = calculator.calculate_bulk("tenant-1")
        assert result.calculated == 2
        reader.list_tenant_user_ids.assert_called_once_with("tenant-1")


class TestFormatting:

    def test_summary_contains_level(self, make_record):
        summary = format_risk_summary(make_record(80.0))
        assert "CRITICAL" in summary
        assert "phishing" in summary

    def test_to_dict_is_plain(self, make_record):
        data = make_record(80.0).to_dict()
        assert data["risk_level"] == "CRITICAL"
        assert isinstance(data["calculated_at"], str)

    def test_summary_uses_given_thresholds(self, make_record):
        thresholds = get_conservative_config().thresholds
        assert "Risk Level: CRITICAL" in format_risk_summary(make_record(63.0), thresholds)
        assert "Risk Level: HIGH" in format_risk_summary(make_record(63.0))


class TestConfiguredThresholds:

    @pytest.fixture
    def conservative(self, reader, writer, clock):
        return RiskScoreCalculator(
            reader=reader, writer=writer, config=get_conservative_config(), clock=clock
        )

    def test_payload_matches_configured_level(self, conservative, caplog):
        with caplog.at_level("INFO", logger="risk_scoring.engine"):
            record = conservative.calculate("user-1", "tenant-1")

        assert record.overall_score == pytest.approx(63.0)
        assert conservative.classify(record) == RiskLevel.CRITICAL
        assert conservative.serialize(record)["risk_level"] == "CRITICAL"
        assert "(CRITICAL)" in caplog.text

    def test_record_defaults_to_standard_bands(self, conservative):
        record = conservative.calculate("user-1", "tenant-1")
        assert record.to_dict()["risk_level"] == "HIGH"
        assert record.to_dict(conservative.get_config().thresholds)["risk_level"] == "CRITICAL"
