"""
Risk Scoring Engine - Package.

============================================================
PURPOSE
============================================================
Behavioral risk scoring for security awareness programs.

Turns a user's historical signals (phishing simulations,
training enrollments, quiz attempts, security incidents)
into one bounded risk score and a risk level.

============================================================
WHAT IT IS
============================================================
- Deterministic, weighted combination of six sub-scores
- Cached: a score younger than the cache window is reused
- Append-only: every calculation writes a new record
- Storage-agnostic: reads through SignalReader, writes
  through RiskScoreWriter

============================================================
WHAT IT IS NOT
============================================================
- NOT a machine learning model
- NOT a login anomaly detector (placeholder value only)
- NOT a notification or remediation dispatcher

============================================================
SCORING
============================================================
Each sub-score: 0 (no risk) to 100 (maximum risk)
Overall: weighted sum, 0-100

Classification:
- LOW (< 25)
- MEDIUM (25 - 50)
- HIGH (50 - 75)
- CRITICAL (>= 75)

============================================================
USAGE
============================================================
    from risk_scoring import RiskScoreCalculator
    from storage.repositories import RiskScoreRepository, SignalRepository

    calculator = RiskScoreCalculator(
        reader=SignalRepository(session),
        writer=RiskScoreRepository(session),
    )

    record = calculator.calculate("user-1", "tenant-1")

    if calculator.classify(record) == RiskLevel.CRITICAL:
        ...

============================================================
"""

from .config import (
    RiskLevelThresholds,
    RiskScoringConfig,
    SubScoreConfig,
    SubScoreWeights,
    config_with_cache_ttl,
    get_conservative_config,
    get_default_config,
    get_lenient_config,
)
from .engine import (
    RiskScoreCalculator,
    combine_sub_scores,
    create_calculator,
    format_risk_summary,
    get_risk_level_from_score,
)
from .overview import (
    RiskScorePage,
    TenantRiskOverview,
    TenantRiskOverviewService,
    UserRiskSummary,
    build_tenant_overview,
    filter_risk_scores,
)
from .reader import RiskScoreWriter, SignalReader, call_collaborator
from .recommendations import (
    Recommendation,
    RecommendationService,
    RecommendationType,
    recommend_for_record,
    recommend_for_tenant,
)
from .subscores import (
    FixedLoginAnomalyScorer,
    LoginAnomalyScorer,
    clamp_score,
    phishing_score,
    quiz_performance_score,
    security_incident_score,
    time_since_training_score,
    training_completion_score,
)
from .types import (
    BehavioralEvent,
    BehavioralEventType,
    BulkCalculationResult,
    EnrollmentSnapshot,
    EnrollmentStatus,
    PhishingSimulationOutcome,
    QuizAttempt,
    RiskLevel,
    RiskScoreNotFoundError,
    RiskScoreRecord,
    RiskScoringError,
    SubScore,
)


__all__ = [
    # Config
    "RiskLevelThresholds",
    "RiskScoringConfig",
    "SubScoreConfig",
    "SubScoreWeights",
    "config_with_cache_ttl",
    "get_conservative_config",
    "get_default_config",
    "get_lenient_config",
    # Engine
    "RiskScoreCalculator",
    "combine_sub_scores",
    "create_calculator",
    "format_risk_summary",
    "get_risk_level_from_score",
    # Overview
    "RiskScorePage",
    "TenantRiskOverview",
    "TenantRiskOverviewService",
    "UserRiskSummary",
    "build_tenant_overview",
    "filter_risk_scores",
    # Collaborators
    "RiskScoreWriter",
    "SignalReader",
    "call_collaborator",
    # Recommendations
    "Recommendation",
    "RecommendationService",
    "RecommendationType",
    "recommend_for_record",
    "recommend_for_tenant",
    # Sub-scores
    "FixedLoginAnomalyScorer",
    "LoginAnomalyScorer",
    "clamp_score",
    "phishing_score",
    "quiz_performance_score",
    "security_incident_score",
    "time_since_training_score",
    "training_completion_score",
    # Types
    "BehavioralEvent",
    "BehavioralEventType",
    "BulkCalculationResult",
    "EnrollmentSnapshot",
    "EnrollmentStatus",
    "PhishingSimulationOutcome",
    "QuizAttempt",
    "RiskLevel",
    "RiskScoreNotFoundError",
    "RiskScoreRecord",
    "RiskScoringError",
    "SubScore",
]
