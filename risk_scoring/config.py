"""
Risk Scoring Engine - Configuration.

============================================================
PURPOSE
============================================================
The weighting policy of the risk score, expressed as data.

Every magic number of the scoring model lives here:
sub-score weights, risk level band boundaries, history
windows, neutral defaults and per-event multipliers.

============================================================
DESIGN PRINCIPLES
============================================================
- Immutable configurations
- Validated on construction
- Presets are plain functions returning new instances

============================================================
WEIGHTS
============================================================
phishing              0.30
training_completion   0.25
time_since_training   0.15
quiz_performance      0.15
security_incident     0.10
login_anomaly         0.05
                      ----
                      1.00

Because every sub-score is bounded to [0, 100] and the
weights sum to 1, the overall score is bounded to [0, 100].

============================================================
"""

import math
from dataclasses import dataclass, field
from typing import Any, Dict

from core.exceptions import InvalidConfigError


_WEIGHT_SUM_TOLERANCE = 1e-9


# ============================================================
# SUB-SCORE WEIGHTS
# ============================================================


@dataclass(frozen=True)
class SubScoreWeights:
    """Weight of each sub-score in the overall score. Must sum to 1."""

    phishing: float = 0.30
    training_completion: float = 0.25
    time_since_training: float = 0.15
    quiz_performance: float = 0.15
    security_incident: float = 0.10
    login_anomaly: float = 0.05

    def __post_init__(self) -> None:
        for name, value in self.to_dict().items():
            if value < 0:
                raise InvalidConfigError(f"weights.{name}", value, "weight must not be negative")
        total = self.total
        if not math.isclose(total, 1.0, abs_tol=_WEIGHT_SUM_TOLERANCE):
            raise InvalidConfigError("weights", total, "weights must sum to 1.0")

    @property
    def total(self) -> float:
        return math.fsum(self.to_dict().values())

    def to_dict(self) -> Dict[str, float]:
        return {
            "phishing": self.phishing,
            "training_completion": self.training_completion,
            "time_since_training": self.time_since_training,
            "quiz_performance": self.quiz_performance,
            "security_incident": self.security_incident,
            "login_anomaly": self.login_anomaly,
        }


# ============================================================
# RISK LEVEL THRESHOLDS
# ============================================================


@dataclass(frozen=True)
class RiskLevelThresholds:
    """
    Inclusive lower bounds of the MEDIUM, HIGH and CRITICAL bands.

    Anything below `medium` is LOW.
    """

    medium: float = 25.0
    high: float = 50.0
    critical: float = 75.0

    def __post_init__(self) -> None:
        if not 0 < self.medium < self.high < self.critical <= 100:
            raise InvalidConfigError(
                "thresholds",
                self.to_dict(),
                "expected 0 < medium < high < critical <= 100",
            )

    def to_dict(self) -> Dict[str, float]:
        return {
            "medium": self.medium,
            "high": self.high,
            "critical": self.critical,
        }


# ============================================================
# SUB-SCORE PARAMETERS
# ============================================================


@dataclass(frozen=True)
class SubScoreConfig:
    """
    Parameters of the six sub-score calculators.

    ============================================================
    NEUTRAL DEFAULTS
    ============================================================
    Missing history is an expected case, not an error:
    - No phishing simulations -> 50
    - No enrollments -> 100
    - No completed training -> 100
    - No quiz attempts -> 50

    ============================================================
    """

    # Phishing: clicked * 10 - reported * 5 + 50
    phishing_window: int = 10
    phishing_no_data_score: float = 50.0
    phishing_base_score: float = 50.0
    phishing_click_penalty: float = 10.0
    phishing_report_credit: float = 5.0

    # Training completion
    training_no_enrollment_score: float = 100.0

    # Time since training: linear to 100 over the staleness horizon
    time_since_training_no_completion_score: float = 100.0
    training_staleness_horizon_days: int = 365

    # Quiz performance
    quiz_window: int = 10
    quiz_no_data_score: float = 50.0

    # Security incidents
    incident_penalty: float = 20.0

    # Login anomaly placeholder value
    login_anomaly_placeholder_score: float = 10.0

    def __post_init__(self) -> None:
        for key in ("phishing_window", "quiz_window", "training_staleness_horizon_days"):
            value = getattr(self, key)
            if value <= 0:
                raise InvalidConfigError(key, value, "must be greater than zero")

    def to_dict(self) -> Dict[str, Any]:
        return {
            "phishing_window": self.phishing_window,
            "phishing_no_data_score": self.phishing_no_data_score,
            "phishing_base_score": self.phishing_base_score,
            "phishing_click_penalty": self.phishing_click_penalty,
            "phishing_report_credit": self.phishing_report_credit,
            "training_no_enrollment_score": self.training_no_enrollment_score,
            "time_since_training_no_completion_score": self.time_since_training_no_completion_score,
            "training_staleness_horizon_days": self.training_staleness_horizon_days,
            "quiz_window": self.quiz_window,
            "quiz_no_data_score": self.quiz_no_data_score,
            "incident_penalty": self.incident_penalty,
            "login_anomaly_placeholder_score": self.login_anomaly_placeholder_score,
        }


# ============================================================
# MASTER CONFIGURATION
# ============================================================


@dataclass(frozen=True)
class RiskScoringConfig:
    """
    Master configuration for the risk score calculator.
    """

    weights: SubScoreWeights = field(default_factory=SubScoreWeights)
    thresholds: RiskLevelThresholds = field(default_factory=RiskLevelThresholds)
    sub_scores: SubScoreConfig = field(default_factory=SubScoreConfig)

    # A stored score younger than this is returned instead of recalculated
    cache_ttl_hours: float = 24.0

    engine_version: str = "1.0.0"

    def __post_init__(self) -> None:
        if self.cache_ttl_hours < 0:
            raise InvalidConfigError("cache_ttl_hours", self.cache_ttl_hours, "must not be negative")

    def to_dict(self) -> Dict[str, Any]:
        return {
            "weights": self.weights.to_dict(),
            "thresholds": self.thresholds.to_dict(),
            "sub_scores": self.sub_scores.to_dict(),
            "cache_ttl_hours": self.cache_ttl_hours,
            "engine_version": self.engine_version,
        }


# ============================================================
# PRESETS
# ============================================================


def get_default_config() -> RiskScoringConfig:
    """Return the production scoring policy."""
    return RiskScoringConfig()


def get_conservative_config() -> RiskScoringConfig:
    """
    Return a more conservative configuration.

    Lower band boundaries = users reach HIGH/CRITICAL sooner.
    """
    return RiskScoringConfig(
        thresholds=RiskLevelThresholds(medium=20.0, high=40.0, critical=60.0),
        cache_ttl_hours=12.0,
    )


def get_lenient_config() -> RiskScoringConfig:
    """
    Return a more lenient configuration.

    Higher band boundaries = fewer users flagged.
    """
    return RiskScoringConfig(
        thresholds=RiskLevelThresholds(medium=30.0, high=60.0, critical=85.0),
    )


def config_with_cache_ttl(base: RiskScoringConfig, cache_ttl_hours: float) -> RiskScoringConfig:
    """Copy of `base` with the cache window taken from process settings."""
    return RiskScoringConfig(
        weights=base.weights,
        thresholds=base.thresholds,
        sub_scores=base.sub_scores,
        cache_ttl_hours=cache_ttl_hours,
        engine_version=base.engine_version,
    )
