"""
Predictive Analytics - Package.

============================================================
PURPOSE
============================================================
Simple analytics over stored signals:

- TrendPredictor: linear extrapolation of a user's risk score
- ComplianceForecaster: projected tenant training completion
- AnomalyDetector: fixed-threshold high-activity heuristic
- SignalStatisticsService: phishing rates and completion rates

None of these train or load a model.

============================================================
"""

from .anomaly import AnomalyDetector
from .compliance import ComplianceForecaster, forecast_from_enrollments
from .statistics import (
    SignalStatisticsService,
    TimeRange,
    completion_rates_from_enrollments,
    phishing_stats_from_outcomes,
)
from .trend import TrendConfig, TrendPredictor, predict_from_history
from .types import (
    Anomaly,
    AnomalySeverity,
    AnomalyType,
    BehaviorAnalysis,
    ComplianceForecast,
    CompletionRates,
    Confidence,
    PhishingStats,
    PredictionStatus,
    TrendDirection,
    TrendPrediction,
)


__all__ = [
    "AnomalyDetector",
    "ComplianceForecaster",
    "forecast_from_enrollments",
    "SignalStatisticsService",
    "TimeRange",
    "completion_rates_from_enrollments",
    "phishing_stats_from_outcomes",
    "TrendConfig",
    "TrendPredictor",
    "predict_from_history",
    "Anomaly",
    "AnomalySeverity",
    "AnomalyType",
    "BehaviorAnalysis",
    "ComplianceForecast",
    "CompletionRates",
    "Confidence",
    "PhishingStats",
    "PredictionStatus",
    "TrendDirection",
    "TrendPrediction",
]
