"""
Risk Scoring Engine - Sub-Score Calculators.

============================================================
PURPOSE
============================================================
Six calculators, each turning one slice of a user's signals
into a bounded [0, 100] sub-score. Higher = riskier.

Each calculator:
1. Takes already-fetched, size-bounded signals
2. Falls back to a documented neutral default when the
   slice is empty
3. Returns a float clamped to [0, 100]

============================================================
DESIGN PRINCIPLES
============================================================
- Pure functions: same input = same output
- No I/O; RiskScoreCalculator fetches the signals
- "Now" is passed in, never read from the wall clock

============================================================
LOGIN ANOMALY
============================================================
There is no login anomaly model yet. LoginAnomalyScorer is
the seam where one would plug in; the only implementation
returns a fixed placeholder value.

============================================================
"""

from abc import ABC, abstractmethod
from datetime import datetime
from typing import Optional, Sequence

from core.clock import ensure_utc

from .config import SubScoreConfig
from .types import EnrollmentSnapshot, PhishingSimulationOutcome, QuizAttempt


MIN_SCORE = 0.0
MAX_SCORE = 100.0

SECONDS_PER_DAY = 86400


def clamp_score(value: float) -> float:
    """Constrain a raw score to [0, 100]."""
    return max(MIN_SCORE, min(MAX_SCORE, float(value)))


# ============================================================
# PHISHING
# ============================================================


def phishing_score(
    outcomes: Sequence[PhishingSimulationOutcome],
    config: Optional[SubScoreConfig] = None,
) -> float:
    """
    Score phishing simulation behavior.

    Only the `phishing_window` most recent outcomes count; the
    caller is expected to pass them newest-first.

        clamp(clicked * 10 - reported * 5 + 50, 0, 100)

    Clicking raises risk, reporting lowers it.
    """
    config = config or SubScoreConfig()
    window = list(outcomes)[: config.phishing_window]

    if not window:
        return config.phishing_no_data_score

    clicked = sum(1 for o in window if o.was_clicked)
    reported = sum(1 for o in window if o.was_reported)

    raw = (
        clicked * config.phishing_click_penalty
        - reported * config.phishing_report_credit
        + config.phishing_base_score
    )
    return clamp_score(raw)


# ============================================================
# TRAINING COMPLETION
# ============================================================


def training_completion_score(
    enrollments: Sequence[EnrollmentSnapshot],
    config: Optional[SubScoreConfig] = None,
) -> float:
    """
    Score the share of a user's enrollments left uncompleted.

    No enrollments scores 100: with nothing assigned the model
    treats the user as untrained.
    """
    config = config or SubScoreConfig()

    if not enrollments:
        return config.training_no_enrollment_score

    completed = sum(1 for e in enrollments if e.is_completed)
    completed_fraction = completed / len(enrollments)
    return clamp_score(100.0 - completed_fraction * 100.0)


# ============================================================
# TIME SINCE TRAINING
# ============================================================


def days_between(earlier: datetime, later: datetime) -> int:
    """Whole days elapsed from `earlier` to `later` (floored)."""
    delta = ensure_utc(later) - ensure_utc(earlier)
    return int(delta.total_seconds() // SECONDS_PER_DAY)


def time_since_training_score(
    last_completed_at: Optional[datetime],
    now: datetime,
    config: Optional[SubScoreConfig] = None,
) -> float:
    """
    Score staleness of the most recent completed training.

    Risk grows linearly from 0 to 100 over one year:

        min(100, days_since / 365 * 100)
    """
    config = config or SubScoreConfig()

    if last_completed_at is None:
        return config.time_since_training_no_completion_score

    days_since = days_between(last_completed_at, now)
    return clamp_score(days_since / config.training_staleness_horizon_days * 100.0)


# ============================================================
# QUIZ PERFORMANCE
# ============================================================


def quiz_performance_score(
    attempts: Sequence[QuizAttempt],
    config: Optional[SubScoreConfig] = None,
) -> float:
    """
    Score recent quiz results: 100 - average quiz score.

    Only the `quiz_window` most recent attempts count.
    """
    config = config or SubScoreConfig()
    window = list(attempts)[: config.quiz_window]

    if not window:
        return config.quiz_no_data_score

    average = sum(a.score for a in window) / len(window)
    return clamp_score(100.0 - average)


# ============================================================
# SECURITY INCIDENTS
# ============================================================


def security_incident_score(
    incident_count: int,
    config: Optional[SubScoreConfig] = None,
) -> float:
    """Twenty points per incident or policy violation, capped at 100."""
    config = config or SubScoreConfig()
    return clamp_score(max(0, incident_count) * config.incident_penalty)


# ============================================================
# LOGIN ANOMALY (PLACEHOLDER)
# ============================================================


class LoginAnomalyScorer(ABC):
    """Pluggable strategy for the login anomaly sub-score."""

    @abstractmethod
    def score(self, user_id: str, tenant_id: str) -> float:
        """Return a [0, 100] login anomaly score for the user."""
        pass


class FixedLoginAnomalyScorer(LoginAnomalyScorer):
    """
    Placeholder returning the same value for every user.

    Stands in until a real login anomaly model exists.
    """

    def __init__(self, value: Optional[float] = None):
        self._value = clamp_score(
            value if value is not None else SubScoreConfig().login_anomaly_placeholder_score
        )

    def score(self, user_id: str, tenant_id: str) -> float:
        return self._value


__all__ = [
    "MIN_SCORE",
    "MAX_SCORE",
    "clamp_score",
    "days_between",
    "phishing_score",
    "training_completion_score",
    "time_since_training_score",
    "quiz_performance_score",
    "security_incident_score",
    "LoginAnomalyScorer",
    "FixedLoginAnomalyScorer",
]
