"""
Predictive Analytics - Risk Trend Predictor.

============================================================
PURPOSE
============================================================
Extrapolate a user's risk score a number of days ahead from
their recent score history.

============================================================
METHOD
============================================================
Over the newest `window` records (newest first):

    average   = mean(scores)
    delta     = newest - oldest
    predicted = clamp(average + delta / count * days_ahead, 0, 100)

Fewer than `min_records` records is INSUFFICIENT_DATA, a
normal result rather than an error.

A flat history (delta == 0) is reported as DECREASING.

============================================================
"""

import logging
from dataclasses import dataclass
from typing import Optional, Sequence

from core.exceptions import InvalidConfigError
from risk_scoring.reader import SignalReader, call_collaborator
from risk_scoring.subscores import clamp_score
from risk_scoring.types import RiskScoreRecord

from .types import (
    Confidence,
    PredictionStatus,
    TrendDirection,
    TrendPrediction,
    round_half_up,
)


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TrendConfig:
    window: int = 30
    min_records: int = 5
    # More records than this = HIGH confidence
    high_confidence_records: int = 15

    def __post_init__(self) -> None:
        if self.window <= 0:
            raise InvalidConfigError("window", self.window, "must be greater than zero")
        if not 0 < self.min_records <= self.window:
            raise InvalidConfigError("min_records", self.min_records, "must be within 1..window")


def predict_from_history(
    user_id: str,
    history: Sequence[RiskScoreRecord],
    days_ahead: int,
    config: Optional[TrendConfig] = None,
) -> TrendPrediction:
    """
    Predict from an already-fetched, newest-first history.

    Only the first `config.window` records are used.
    """
    config = config or TrendConfig()
    window = list(history)[: config.window]
    count = len(window)

    if count < config.min_records:
        return TrendPrediction(
            user_id=user_id,
            status=PredictionStatus.INSUFFICIENT_DATA,
            days_ahead=days_ahead,
            sample_size=count,
            message="Not enough historical data for prediction",
        )

    scores = [r.overall_score for r in window]
    average = sum(scores) / count
    delta = scores[0] - scores[-1]
    predicted = clamp_score(average + delta / count * days_ahead)

    return TrendPrediction(
        user_id=user_id,
        status=PredictionStatus.OK,
        days_ahead=days_ahead,
        sample_size=count,
        current_score=scores[0],
        predicted_score=round_half_up(predicted, 2),
        direction=TrendDirection.INCREASING if delta > 0 else TrendDirection.DECREASING,
        confidence=Confidence.HIGH if count > config.high_confidence_records else Confidence.MEDIUM,
    )


class TrendPredictor:
    """Reads score history and predicts the trend."""

    def __init__(self, reader: SignalReader, config: Optional[TrendConfig] = None):
        self._reader = reader
        self.config = config or TrendConfig()

    def predict(self, user_id: str, days_ahead: int) -> TrendPrediction:
        """
        Predict the user's risk score `days_ahead` days from now.

        Raises:
            InvalidConfigError: If days_ahead is negative
            DependencyUnavailable: If the reader fails
        """
        if days_ahead < 0:
            raise InvalidConfigError("days_ahead", days_ahead, "must not be negative")

        history = call_collaborator(
            "reader", "get_recent_risk_scores",
            self._reader.get_recent_risk_scores, user_id, self.config.window,
        )
        prediction = predict_from_history(user_id, history, days_ahead, self.config)

        if prediction.has_prediction:
            logger.debug(
                f"Trend for user {user_id}: {prediction.direction.value} "
                f"{prediction.current_score:.2f} -> {prediction.predicted_score:.2f}"
            )
        else:
            logger.debug(
                f"Insufficient history for user {user_id} "
                f"({prediction.sample_size} records)"
            )
        return prediction
