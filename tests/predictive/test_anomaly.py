"""
Tests for the fixed-threshold activity anomaly detector.
"""

from datetime import datetime, timezone

import pytest

from core.exceptions import InvalidConfigError
from predictive import AnomalyDetector, AnomalySeverity, AnomalyType
from risk_scoring.types import BehavioralEvent, BehavioralEventType


NOW = datetime(2024, 3, 15, tzinfo=timezone.utc)


def _events(count, event_type=BehavioralEventType.LOGIN):
    return [BehavioralEvent("u", "t", event_type, NOW)] * count


class TestDetect:

    def test_quiet_user(self):
        assert AnomalyDetector().detect(_events(100)) == []

    def test_exactly_threshold_is_not_anomalous(self):
        assert AnomalyDetector().detect(_events(1500)) == []

    def test_high_activity(self):
        anomalies = AnomalyDetector().detect(_events(1501))
        assert len(anomalies) == 1
        assert anomalies[0].type == AnomalyType.HIGH_ACTIVITY
        assert anomalies[0].severity == AnomalySeverity.MEDIUM

    def test_custom_window(self):
        assert len(AnomalyDetector().detect(_events(51), window_days=1)) == 1

    @pytest.mark.parametrize("window_days", [0, -5])
    def test_window_must_be_positive(self, window_days):
        with pytest.raises(InvalidConfigError):
            AnomalyDetector().detect(_events(1), window_days=window_days)


class TestAnalyze:

    def test_event_breakdown(self):
        events = _events(3) + _events(2, BehavioralEventType.PHISHING_CLICK)
        analysis = AnomalyDetector().analyze("u", events)

        assert analysis.total_events == 5
        assert analysis.event_breakdown == {"LOGIN": 3, "PHISHING_CLICK": 2}
        assert not analysis.has_anomalies

    def test_to_dict(self):
        data = AnomalyDetector().analyze("u", _events(1501)).to_dict()
        assert data["anomalies"][0]["type"] == "HIGH_ACTIVITY"
