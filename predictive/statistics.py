"""
Predictive Analytics - Training and Phishing Statistics.

============================================================
PURPOSE
============================================================
Descriptive aggregates over stored signals, used next to the
forecasts on the dashboard:

- Phishing statistics: simulations sent, clicked, reported,
  click and report rates as percentages (2 dp)
- Completion rates: enrollments per status and the share
  completed as an integer percentage

Every rate is 0 when nothing was counted.

============================================================
"""

import logging
from collections import Counter
from datetime import timedelta
from enum import Enum
from typing import Optional, Sequence

from core.clock import ClockFactory, ClockProtocol
from risk_scoring.reader import SignalReader, call_collaborator
from risk_scoring.types import EnrollmentSnapshot, EnrollmentStatus, PhishingSimulationOutcome

from .types import CompletionRates, PhishingStats, percent_half_up, round_half_up


logger = logging.getLogger(__name__)


class TimeRange(str, Enum):
    """Look-back window for simulation statistics."""

    LAST_7_DAYS = "LAST_7_DAYS"
    LAST_30_DAYS = "LAST_30_DAYS"
    LAST_90_DAYS = "LAST_90_DAYS"
    LAST_YEAR = "LAST_YEAR"

    @property
    def days(self) -> int:
        return {
            "LAST_7_DAYS": 7,
            "LAST_30_DAYS": 30,
            "LAST_90_DAYS": 90,
            "LAST_YEAR": 365,
        }[self.value]


DEFAULT_TIME_RANGE = TimeRange.LAST_30_DAYS


def _rate(part: int, total: int) -> float:
    if total == 0:
        return 0.0
    return round_half_up(part / total * 100, 2)


def phishing_stats_from_outcomes(
    outcomes: Sequence[PhishingSimulationOutcome],
    tenant_id: Optional[str] = None,
    user_id: Optional[str] = None,
) -> PhishingStats:
    """
    Aggregate simulation outcomes.

    Outcomes not matching a given tenant_id or user_id are
    ignored.
    """
    selected = [
        o for o in outcomes
        if (tenant_id is None or o.tenant_id == tenant_id)
        and (user_id is None or o.user_id == user_id)
    ]
    total = len(selected)
    clicked = sum(1 for o in selected if o.was_clicked)
    reported = sum(1 for o in selected if o.was_reported)

    return PhishingStats(
        total_simulations=total,
        clicked_count=clicked,
        reported_count=reported,
        click_rate=_rate(clicked, total),
        report_rate=_rate(reported, total),
    )


def completion_rates_from_enrollments(
    tenant_id: str,
    enrollments: Sequence[EnrollmentSnapshot],
    course_id: Optional[str] = None,
) -> CompletionRates:
    """Per-status counts and completion percentage, optionally for one course."""
    selected = [e for e in enrollments if course_id is None or e.course_id == course_id]
    counts = Counter(e.status for e in selected)
    by_status = {status: counts.get(status, 0) for status in EnrollmentStatus}
    total = len(selected)

    return CompletionRates(
        tenant_id=tenant_id,
        course_id=course_id,
        total=total,
        by_status=by_status,
        completion_rate=percent_half_up(by_status[EnrollmentStatus.COMPLETED] / total) if total else 0,
    )


class SignalStatisticsService:
    """Reads tenant signals and aggregates them."""

    def __init__(self, reader: SignalReader, clock: Optional[ClockProtocol] = None):
        self._reader = reader
        self._clock = clock or ClockFactory.get_clock()

    def phishing_stats(
        self,
        tenant_id: str,
        user_id: Optional[str] = None,
        time_range: TimeRange = DEFAULT_TIME_RANGE,
    ) -> PhishingStats:
        """
        Simulation statistics of a tenant (or one of its users).

        Only simulations sent within `time_range` of now count.

        Raises:
            DependencyUnavailable: If the reader fails
        """
        since = self._clock.now() - timedelta(days=TimeRange(time_range).days)
        outcomes = call_collaborator(
            "reader", "get_tenant_simulations", self._reader.get_tenant_simulations, tenant_id, since
        )
        stats = phishing_stats_from_outcomes(outcomes, tenant_id, user_id)
        logger.debug(
            f"Phishing stats for tenant {tenant_id}: {stats.total_simulations} simulations, "
            f"click rate {stats.click_rate:.2f}%"
        )
        return stats

    def completion_rates(self, tenant_id: str, course_id: Optional[str] = None) -> CompletionRates:
        enrollments = call_collaborator(
            "reader", "get_tenant_enrollments", self._reader.get_tenant_enrollments, tenant_id
        )
        return completion_rates_from_enrollments(tenant_id, enrollments, course_id)
