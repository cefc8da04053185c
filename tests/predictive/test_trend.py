"""
Tests for TrendPredictor.
"""

from datetime import timedelta
from unittest.mock import MagicMock

import pytest

from core.exceptions import DependencyUnavailable, InvalidConfigError
from predictive import (
    Confidence,
    PredictionStatus,
    TrendConfig,
    TrendDirection,
    TrendPredictor,
    predict_from_history,
)
from risk_scoring.reader import SignalReader


@pytest.fixture
def history(make_record, fixed_now):
    """Newest-first history from a list of oldest-first scores."""

    def _history(scores):
        records = [
            make_record(score, calculated_at=fixed_now - timedelta(days=len(scores) - i))
            for i, score in enumerate(scores)
        ]
        return list(reversed(records))

    return _history


class TestPredictFromHistory:

    def test_four_records_insufficient(self, history):
        prediction = predict_from_history("user-1", history([10, 20, 30, 40]), 7)
        assert prediction.status == PredictionStatus.INSUFFICIENT_DATA
        assert prediction.predicted_score is None
        assert prediction.direction is None
        assert prediction.sample_size == 4

    def test_rising_scores(self, history):
        prediction = predict_from_history("user-1", history([10, 20, 30, 40, 50]), 7)

        assert prediction.status == PredictionStatus.OK
        assert prediction.direction == TrendDirection.INCREASING
        assert prediction.current_score == 50
        # average 30 + delta 40 / 5 * 7
        assert prediction.predicted_score == 86.0
        assert prediction.predicted_score > prediction.current_score
        assert prediction.confidence == Confidence.MEDIUM

    def test_prediction_clamped(self, history):
        prediction = predict_from_history("user-1", history([10, 30, 50, 70, 90]), 30)
        assert prediction.predicted_score == 100.0

    def test_flat_history_reported_decreasing(self, history):
        prediction = predict_from_history("user-1", history([40] * 6), 7)
        assert prediction.direction == TrendDirection.DECREASING
        assert prediction.predicted_score == 40.0

    def test_falling_scores(self, history):
        prediction = predict_from_history("user-1", history([60, 50, 40, 30, 20]), 10)
        assert prediction.direction == TrendDirection.DECREASING
        assert prediction.predicted_score == 0.0

    def test_high_confidence_above_fifteen(self, history):
        assert predict_from_history("u", history([50] * 15), 1).confidence == Confidence.MEDIUM
        assert predict_from_history("u", history([50] * 16), 1).confidence == Confidence.HIGH

    def test_rounded_to_two_places(self, history):
        prediction = predict_from_history("u", history([10, 10, 10, 10, 10, 20]), 1)
        # 11.666... + 10 / 6
        assert prediction.predicted_score == 13.33

    def test_only_window_used(self, history):
        prediction = predict_from_history("u", history([0] * 10 + [50] * 30), 5)
        assert prediction.sample_size == 30
        assert prediction.predicted_score == 50.0


class TestTrendPredictor:

    def test_reads_thirty_records(self, history):
        reader = MagicMock(spec=SignalReader)
        reader.get_recent_risk_scores.return_value = history([10, 20, 30, 40, 50])

        prediction = TrendPredictor(reader).predict("user-1", 7)

        reader.get_recent_risk_scores.assert_called_once_with("user-1", 30)
        assert prediction.to_dict()["direction"] == "INCREASING"

    def test_reader_failure_is_retryable(self):
        reader = MagicMock(spec=SignalReader)
        reader.get_recent_risk_scores.side_effect = ConnectionError("down")

        with pytest.raises(DependencyUnavailable) as exc_info:
            TrendPredictor(reader).predict("user-1", 7)

        assert exc_info.value.is_retryable
        assert exc_info.value.operation == "get_recent_risk_scores"
        assert isinstance(exc_info.value.__cause__, ConnectionError)

    def test_negative_horizon_rejected(self):
        with pytest.raises(InvalidConfigError):
            TrendPredictor(MagicMock(spec=SignalReader)).predict("user-1", -1)

    def test_invalid_config(self):
        with pytest.raises(InvalidConfigError):
            TrendConfig(window=3, min_records=5)
