"""
Predictive Analytics - Behavioral Anomaly Detector.

============================================================
PURPOSE
============================================================
Flag unusually high behavioral activity.

This is a fixed-threshold heuristic, not a statistical
model: the average number of events per day over the
window is compared to a constant.

    avg_per_day = len(events) / window_days
    avg_per_day > 50  ->  HIGH_ACTIVITY (MEDIUM)

============================================================
"""

import logging
from collections import Counter
from typing import List, Sequence

from core.exceptions import InvalidConfigError
from risk_scoring.types import BehavioralEvent

from .types import Anomaly, AnomalySeverity, AnomalyType, BehaviorAnalysis


logger = logging.getLogger(__name__)

DEFAULT_WINDOW_DAYS = 30
HIGH_ACTIVITY_EVENTS_PER_DAY = 50.0


class AnomalyDetector:
    """Fixed-threshold activity anomaly detector."""

    def __init__(self, threshold_per_day: float = HIGH_ACTIVITY_EVENTS_PER_DAY):
        if threshold_per_day < 0:
            raise InvalidConfigError("threshold_per_day", threshold_per_day, "must not be negative")
        self.threshold_per_day = threshold_per_day

    def detect(
        self,
        events: Sequence[BehavioralEvent],
        window_days: int = DEFAULT_WINDOW_DAYS,
    ) -> List[Anomaly]:
        """
        Detect anomalies in the events of one window.

        Args:
            events: Events already filtered to the window
            window_days: Length of the window in days

        Raises:
            InvalidConfigError: If window_days is not positive
        """
        if window_days <= 0:
            raise InvalidConfigError("window_days", window_days, "must be greater than zero")

        avg_per_day = len(events) / window_days
        if avg_per_day > self.threshold_per_day:
            logger.info(
                f"High activity detected: {avg_per_day:.1f} events/day "
                f"over {window_days} days"
            )
            return [
                Anomaly(
                    type=AnomalyType.HIGH_ACTIVITY,
                    severity=AnomalySeverity.MEDIUM,
                    description="Unusually high activity detected",
                )
            ]
        return []

    def analyze(
        self,
        user_id: str,
        events: Sequence[BehavioralEvent],
        window_days: int = DEFAULT_WINDOW_DAYS,
    ) -> BehaviorAnalysis:
        """Event breakdown by type plus detected anomalies."""
        anomalies = self.detect(events, window_days)
        breakdown = Counter(e.event_type.value for e in events)

        return BehaviorAnalysis(
            user_id=user_id,
            window_days=window_days,
            total_events=len(events),
            event_breakdown=dict(breakdown),
            anomalies=anomalies,
        )
