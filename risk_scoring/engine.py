"""
Risk Scoring Engine - Risk Score Calculator.

============================================================
PURPOSE
============================================================
RiskScoreCalculator is the main entry point for scoring a
user's behavioral risk.

It orchestrates:
1. Cache lookup (a recent enough score is reused)
2. Signal retrieval through the SignalReader
3. The six sub-score calculators
4. Weighted combination and classification
5. Persistence through the RiskScoreWriter

============================================================
DESIGN PRINCIPLES
============================================================
- Orchestration only; the arithmetic lives in subscores.py
- Time comes from the injected clock
- Collaborator failures become DependencyUnavailable
- Exactly one new record per non-cached call

============================================================
USAGE
============================================================
    from risk_scoring import RiskScoreCalculator

    calculator = RiskScoreCalculator(reader=repo, writer=repo)
    record = calculator.calculate("user-1", "tenant-1")

    print(f"{record.overall_score:.2f} {calculator.classify(record).value}")

============================================================
"""

import logging
import math
from datetime import datetime, timedelta
from typing import Any, Dict, Iterable, List, Optional

from core.clock import ClockFactory, ClockProtocol
from core.exceptions import AnalyticsException
from core.settings import Settings, get_settings

from .config import (
    RiskLevelThresholds,
    RiskScoringConfig,
    SubScoreWeights,
    config_with_cache_ttl,
    get_default_config,
)
from .reader import RiskScoreWriter, SignalReader, call_collaborator
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
    BulkCalculationResult,
    RiskLevel,
    RiskScoreNotFoundError,
    RiskScoreRecord,
    SubScore,
)


logger = logging.getLogger(__name__)


class RiskScoreCalculator:
    """
    Combines six behavioral sub-scores into one risk score.

    ============================================================
    RESPONSIBILITIES
    ============================================================
    1. Reuse a stored score younger than the cache window
    2. Fetch bounded signal windows for the user
    3. Run all sub-score calculators
    4. Weight, clamp and classify
    5. Append the new record to the store

    ============================================================
    """

    def __init__(
        self,
        reader: SignalReader,
        writer: RiskScoreWriter,
        config: Optional[RiskScoringConfig] = None,
        clock: Optional[ClockProtocol] = None,
        login_anomaly_scorer: Optional[LoginAnomalyScorer] = None,
    ):
        """
        Initialize the calculator.

        Args:
            reader: Historical signal access
            writer: Append-only record store
            config: Weights, thresholds and sub-score parameters.
                    Uses defaults if not provided.
            clock: Time source (defaults to the process clock)
            login_anomaly_scorer: Login anomaly strategy
                    (defaults to the fixed placeholder)
        """
        self.config = config or RiskScoringConfig()
        self._reader = reader
        self._writer = writer
        self._clock = clock or ClockFactory.get_clock()
        self._login_anomaly_scorer = login_anomaly_scorer or FixedLoginAnomalyScorer(
            self.config.sub_scores.login_anomaly_placeholder_score
        )

    # --------------------------------------------------------
    # PUBLIC API
    # --------------------------------------------------------

    def calculate(
        self,
        user_id: str,
        tenant_id: str,
        force_recalculate: bool = False,
    ) -> RiskScoreRecord:
        """
        Score a user, reusing a recent score unless forced.

        Args:
            user_id: User to score
            tenant_id: Tenant the user belongs to
            force_recalculate: Ignore the cache window

        Returns:
            The cached record, or the newly stored one

        Raises:
            DependencyUnavailable: If the reader or writer fails
        """
        now = self._clock.now()

        if not force_recalculate:
            cached = self._find_cached(user_id, now)
            if cached is not None:
                logger.debug(
                    f"Reusing risk score for user {user_id} "
                    f"calculated at {cached.calculated_at.isoformat()}"
                )
                return cached

        scores = self._compute_sub_scores(user_id, tenant_id, now)
        overall = combine_sub_scores(scores, self.config.weights)

        record = RiskScoreRecord(
            user_id=user_id,
            tenant_id=tenant_id,
            overall_score=overall,
            phishing_score=scores[SubScore.PHISHING],
            training_completion_score=scores[SubScore.TRAINING_COMPLETION],
            time_since_training_score=scores[SubScore.TIME_SINCE_TRAINING],
            quiz_performance_score=scores[SubScore.QUIZ_PERFORMANCE],
            security_incident_score=scores[SubScore.SECURITY_INCIDENT],
            login_anomaly_score=scores[SubScore.LOGIN_ANOMALY],
            calculated_at=now,
        )

        saved = call_collaborator("writer", "save_risk_score", self._writer.save_risk_score, record)

        logger.info(
            f"Risk score calculated: {overall:.2f} "
            f"({self.classify(record).value}) for user {user_id}"
        )
        return saved

    def get_current_score(self, user_id: str) -> RiskScoreRecord:
        """
        Return the newest stored score for a user.

        Raises:
            RiskScoreNotFoundError: If the user was never scored
        """
        records = call_collaborator(
            "reader", "get_recent_risk_scores", self._reader.get_recent_risk_scores, user_id, 1
        )
        if not records:
            raise RiskScoreNotFoundError(user_id)
        return records[0]

    def calculate_bulk(
        self,
        tenant_id: str,
        user_ids: Optional[Iterable[str]] = None,
        force_recalculate: bool = False,
    ) -> BulkCalculationResult:
        """
        Score many users of one tenant.

        A user whose calculation fails is logged and skipped; the
        remaining users are still scored.

        Args:
            tenant_id: Tenant to score
            user_ids: Users to score (defaults to every known user)
            force_recalculate: Ignore the cache window
        """
        if user_ids is None:
            user_ids = call_collaborator(
                "reader", "list_tenant_user_ids", self._reader.list_tenant_user_ids, tenant_id
            )
        targets = list(user_ids)

        calculated = 0
        failed: List[str] = []
        for user_id in targets:
            try:
                self.calculate(user_id, tenant_id, force_recalculate=force_recalculate)
                calculated += 1
            except AnalyticsException as e:
                logger.error(
                    f"Failed to calculate risk score for user {user_id}: {e}",
                    exc_info=True,
                )
                failed.append(user_id)

        logger.info(
            f"Bulk risk score calculation completed for tenant {tenant_id}: "
            f"{calculated}/{len(targets)}"
        )
        return BulkCalculationResult(
            tenant_id=tenant_id,
            requested=len(targets),
            calculated=calculated,
            failed_user_ids=failed,
        )

    def get_config(self) -> RiskScoringConfig:
        return self.config

    def classify(self, record: RiskScoreRecord) -> RiskLevel:
        """Risk level of a record under this calculator's thresholds."""
        return record.classify(self.config.thresholds)

    def serialize(self, record: RiskScoreRecord) -> Dict[str, Any]:
        """Plain-dict form of a record, classified with the configured bands."""
        return record.to_dict(self.config.thresholds)

    # --------------------------------------------------------
    # INTERNALS
    # --------------------------------------------------------

    def _find_cached(self, user_id: str, now: datetime) -> Optional[RiskScoreRecord]:
        """Newest stored record if it falls inside the cache window."""
        records = call_collaborator(
            "reader", "get_recent_risk_scores", self._reader.get_recent_risk_scores, user_id, 1
        )
        if not records:
            return None

        newest = records[0]
        window_start = now - timedelta(hours=self.config.cache_ttl_hours)
        if newest.calculated_at >= window_start:
            return newest
        return None

    def _compute_sub_scores(
        self,
        user_id: str,
        tenant_id: str,
        now: datetime,
    ) -> Dict[SubScore, float]:
        cfg = self.config.sub_scores
        reader = self._reader

        simulations = call_collaborator(
            "reader", "get_recent_simulations", reader.get_recent_simulations, user_id, cfg.phishing_window
        )
        enrollments = call_collaborator("reader", "get_enrollments", reader.get_enrollments, user_id)
        last_completed = call_collaborator(
            "reader", "get_last_completed_enrollment", reader.get_last_completed_enrollment, user_id
        )
        attempts = call_collaborator(
            "reader", "get_recent_quiz_attempts", reader.get_recent_quiz_attempts, user_id, cfg.quiz_window
        )
        incidents = call_collaborator(
            "reader", "count_security_incidents", reader.count_security_incidents, user_id
        )
        login_anomaly = call_collaborator(
            "login_anomaly_scorer", "score", self._login_anomaly_scorer.score, user_id, tenant_id
        )

        return {
            SubScore.PHISHING: phishing_score(simulations, cfg),
            SubScore.TRAINING_COMPLETION: training_completion_score(enrollments, cfg),
            SubScore.TIME_SINCE_TRAINING: time_since_training_score(
                last_completed.completed_at if last_completed else None, now, cfg
            ),
            SubScore.QUIZ_PERFORMANCE: quiz_performance_score(attempts, cfg),
            SubScore.SECURITY_INCIDENT: security_incident_score(incidents, cfg),
            SubScore.LOGIN_ANOMALY: clamp_score(login_anomaly),
        }


# ============================================================
# CONVENIENCE FUNCTIONS
# ============================================================


def combine_sub_scores(
    scores: Dict[SubScore, float],
    weights: Optional[SubScoreWeights] = None,
) -> float:
    """
    Weighted sum of the six sub-scores, clamped to [0, 100].

    Args:
        scores: One value per SubScore
        weights: Weight per sub-score (defaults to production weights)
    """
    weights = weights or SubScoreWeights()
    weight_map = weights.to_dict()
    total = math.fsum(scores[s] * weight_map[s.value] for s in SubScore)
    return clamp_score(total)


def get_risk_level_from_score(
    score: float,
    thresholds: Optional[RiskLevelThresholds] = None,
) -> RiskLevel:
    """Risk level classification of an overall score."""
    return RiskLevel.from_score(score, thresholds)


def format_risk_summary(
    record: RiskScoreRecord,
    thresholds: Optional[RiskLevelThresholds] = None,
) -> str:
    """
    Format a human-readable risk summary.

    Useful for logging and support tooling. The level is
    classified with `thresholds` (default bands if None).
    """
    lines = [
        "=" * 50,
        "RISK SCORE SUMMARY",
        "=" * 50,
        f"User: {record.user_id} (tenant {record.tenant_id})",
        f"Overall Score: {record.overall_score:.2f}/100",
        f"Risk Level: {record.classify(thresholds).value}",
        f"Calculated At: {record.calculated_at.isoformat()}",
        "",
        "Sub-Scores:",
    ]
    for sub_score, value in record.sub_scores.items():
        lines.append(f"  {sub_score.value:<20} {value:6.2f}")
    lines.append("=" * 50)

    return "\n".join(lines)


def create_calculator(
    reader: SignalReader,
    writer: RiskScoreWriter,
    settings: Optional[Settings] = None,
    base_config: Optional[RiskScoringConfig] = None,
    clock: Optional[ClockProtocol] = None,
) -> RiskScoreCalculator:
    """
    Build a calculator whose cache window comes from process settings.

    Args:
        reader: Historical signal access
        writer: Append-only record store
        settings: Process settings (defaults to get_settings())
        base_config: Scoring policy (defaults to production policy)
        clock: Time source
    """
    settings = settings or get_settings()
    config = config_with_cache_ttl(base_config or get_default_config(), settings.cache_ttl_hours)
    return RiskScoreCalculator(reader, writer, config=config, clock=clock)
