"""
Tests for engine setup and transaction scopes.
"""

import pytest
from sqlalchemy import text

from core.settings import reset_settings
from database import (
    DatabasePersistenceError,
    get_db_session,
    initialize_database,
    missing_tables,
    reset_engine,
    transaction_scope,
)
from storage.repositories import RiskScoreRepository


@pytest.fixture(autouse=True)
def memory_database(monkeypatch):
    monkeypatch.setenv("RISK_ANALYTICS_DATABASE_URL", "sqlite+pysqlite:///:memory:")
    reset_settings()
    reset_engine()
    initialize_database()
    yield
    reset_engine()
    reset_settings()


class TestInitialization:

    def test_all_tables_created(self):
        assert missing_tables() == []


class TestTransactionScope:

    def test_commit(self, make_record):
        with transaction_scope() as session:
            RiskScoreRepository(session).save_risk_score(make_record(33.0))

        with get_db_session() as session:
            records = RiskScoreRepository(session).get_recent_risk_scores("user-1", 5)
        assert [r.overall_score for r in records] == [33.0]

    def test_rollback_on_error(self, make_record):
        with pytest.raises(RuntimeError):
            with transaction_scope() as session:
                RiskScoreRepository(session).save_risk_score(make_record(33.0))
                raise RuntimeError("abort")

        with get_db_session() as session:
            assert RiskScoreRepository(session).get_recent_risk_scores("user-1", 5) == []

    def test_database_error_wrapped(self):
        with pytest.raises(DatabasePersistenceError):
            with transaction_scope() as session:
                session.execute(text("SELECT * FROM no_such_table"))
