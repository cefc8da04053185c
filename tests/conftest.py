"""
Shared test fixtures.

============================================================
FIXTURES
============================================================
- fixed_now: Reference instant for deterministic tests
- clock: MockClock pinned at fixed_now
- db_engine: In-memory SQLite engine with every table
- db_session: Session bound to db_engine, rolled back after
- make_record: Factory for RiskScoreRecord values
============================================================
"""

from datetime import datetime, timezone

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from core.clock import ClockFactory, MockClock
from risk_scoring.types import RiskScoreRecord
from storage.models import Base


@pytest.fixture
def fixed_now():
    return datetime(2024, 3, 15, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def clock(fixed_now):
    mock = MockClock(fixed_now)
    yield mock
    ClockFactory.reset()


@pytest.fixture
def db_engine():
    engine = create_engine(
        "sqlite+pysqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture
def db_session(db_engine):
    factory = sessionmaker(bind=db_engine, autoflush=False, expire_on_commit=False)
    session = factory()
    yield session
    session.rollback()
    session.close()


@pytest.fixture
def make_record(fixed_now):
    """Build a RiskScoreRecord with every sub-score set to `sub`."""

    def _make(
        overall: float,
        user_id: str = "user-1",
        tenant_id: str = "tenant-1",
        calculated_at: datetime = None,
        sub: float = 0.0,
        **overrides,
    ) -> RiskScoreRecord:
        fields = dict(
            user_id=user_id,
            tenant_id=tenant_id,
            overall_score=overall,
            phishing_score=sub,
            training_completion_score=sub,
            time_since_training_score=sub,
            quiz_performance_score=sub,
            security_incident_score=sub,
            login_anomaly_score=sub,
            calculated_at=calculated_at or fixed_now,
        )
        fields.update(overrides)
        return RiskScoreRecord(**fields)

    return _make
