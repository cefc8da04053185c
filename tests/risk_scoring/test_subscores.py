"""
Tests for the six sub-score calculators and the scoring configuration.
"""

from datetime import datetime, timedelta, timezone

import pytest

from core.exceptions import InvalidConfigError
from risk_scoring.config import (
    RiskLevelThresholds,
    SubScoreConfig,
    SubScoreWeights,
    get_conservative_config,
    get_default_config,
    get_lenient_config,
)
from risk_scoring.subscores import (
    FixedLoginAnomalyScorer,
    days_between,
    phishing_score,
    quiz_performance_score,
    security_incident_score,
    time_since_training_score,
    training_completion_score,
)
from risk_scoring.types import (
    EnrollmentSnapshot,
    EnrollmentStatus,
    PhishingSimulationOutcome,
    QuizAttempt,
    RiskLevel,
)


NOW = datetime(2024, 3, 15, 12, 0, tzinfo=timezone.utc)


def _outcome(clicked=False, reported=False):
    return PhishingSimulationOutcome("u", "t", NOW, was_clicked=clicked, was_reported=reported)


def _enrollment(status):
    return EnrollmentSnapshot("u", status)


def _attempt(score):
    return QuizAttempt("u", score, NOW)


# ============================================================
# PHISHING
# ============================================================

class TestPhishingScore:

    def test_no_simulations_is_neutral(self):
        assert phishing_score([]) == 50.0

    def test_clicks_raise_risk(self):
        assert phishing_score([_outcome(clicked=True)] * 3) == 80.0

    def test_reports_lower_risk(self):
        assert phishing_score([_outcome(reported=True)] * 4) == 30.0

    def test_upper_bound_clamped(self):
        assert phishing_score([_outcome(clicked=True)] * 10) == 100.0

    def test_lower_bound_clamped(self):
        assert phishing_score([_outcome(reported=True)] * 10) == 0.0

    def test_only_window_counts(self):
        outcomes = [_outcome(reported=True)] * 10 + [_outcome(clicked=True)] * 5
        assert phishing_score(outcomes) == 0.0


# ============================================================
# TRAINING COMPLETION
# ============================================================

class TestTrainingCompletionScore:

    def test_no_enrollments_is_maximal(self):
        assert training_completion_score([]) == 100.0

    def test_half_completed(self):
        enrollments = [
            _enrollment(EnrollmentStatus.COMPLETED),
            _enrollment(EnrollmentStatus.IN_PROGRESS),
        ]
        assert training_completion_score(enrollments) == 50.0

    def test_all_completed(self):
        assert training_completion_score([_enrollment(EnrollmentStatus.COMPLETED)] * 3) == 0.0


# ============================================================
# TIME SINCE TRAINING
# ============================================================

class TestTimeSinceTrainingScore:

    def test_never_completed(self):
        assert time_since_training_score(None, NOW) == 100.0

    def test_half_year(self):
        completed = NOW - timedelta(days=73)
        assert time_since_training_score(completed, NOW) == pytest.approx(20.0)

    def test_partial_days_are_floored(self):
        completed = NOW - timedelta(days=1, hours=23)
        assert days_between(completed, NOW) == 1

    def test_capped_after_a_year(self):
        completed = NOW - timedelta(days=800)
        assert time_since_training_score(completed, NOW) == 100.0

    def test_naive_completion_time_treated_as_utc(self):
        completed = (NOW - timedelta(days=365)).replace(tzinfo=None)
        assert time_since_training_score(completed, NOW) == 100.0


# ============================================================
# QUIZ, INCIDENTS, LOGIN
# ============================================================

class TestQuizPerformanceScore:

    def test_no_attempts_is_neutral(self):
        assert quiz_performance_score([]) == 50.0

    def test_inverse_of_average(self):
        assert quiz_performance_score([_attempt(80), _attempt(60)]) == 30.0

    def test_only_ten_most_recent(self):
        attempts = [_attempt(100)] * 10 + [_attempt(0)] * 10
        assert quiz_performance_score(attempts) == 0.0


class TestSecurityIncidentScore:

    @pytest.mark.parametrize("count,expected", [(0, 0.0), (1, 20.0), (4, 80.0), (5, 100.0), (12, 100.0)])
    def test_twenty_points_each(self, count, expected):
        assert security_incident_score(count) == expected


class TestLoginAnomaly:

    def test_placeholder_value(self):
        assert FixedLoginAnomalyScorer().score("u", "t") == 10.0

    def test_custom_value_is_clamped(self):
        assert FixedLoginAnomalyScorer(250).score("u", "t") == 100.0


# ============================================================
# CONFIGURATION
# ============================================================

class TestScoringConfig:

    def test_default_weights_sum_to_one(self):
        assert SubScoreWeights().total == pytest.approx(1.0)

    def test_weights_must_sum_to_one(self):
        with pytest.raises(InvalidConfigError):
            SubScoreWeights(phishing=0.5)

    def test_negative_weight_rejected(self):
        with pytest.raises(InvalidConfigError):
            SubScoreWeights(phishing=-0.1, training_completion=0.65)

    def test_thresholds_must_increase(self):
        with pytest.raises(InvalidConfigError):
            RiskLevelThresholds(medium=50, high=40, critical=75)

    def test_window_must_be_positive(self):
        with pytest.raises(InvalidConfigError):
            SubScoreConfig(phishing_window=0)

    def test_presets(self):
        assert get_default_config().thresholds.critical == 75.0
        assert get_conservative_config().thresholds.critical == 60.0
        assert "weights" in get_default_config().to_dict()

    def test_lenient_preset_flags_fewer_users(self):
        lenient = get_lenient_config()
        assert lenient.thresholds == RiskLevelThresholds(medium=30.0, high=60.0, critical=85.0)
        assert lenient.weights == get_default_config().weights
        assert lenient.cache_ttl_hours == get_default_config().cache_ttl_hours
        assert RiskLevel.from_score(80.0, lenient.thresholds) == RiskLevel.HIGH
        assert RiskLevel.from_score(80.0) == RiskLevel.CRITICAL
