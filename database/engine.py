"""
Record Store - Engine and Sessions.

============================================================
RECORD STORE ENGINE
============================================================

Builds the SQLAlchemy engine for the analytics record store
and hands out sessions and transaction scopes.

- PostgreSQL in deployment, SQLite in tests and local runs
- Commit and rollback are always explicit
- A failed write surfaces as DatabasePersistenceError

The URL and the SQL echo flag come from core.settings
(RISK_ANALYTICS_DATABASE_URL, RISK_ANALYTICS_DB_ECHO).

============================================================
"""

import logging
from contextlib import contextmanager
from typing import Generator, List, Optional

from sqlalchemy import create_engine, inspect, text
from sqlalchemy.engine import Engine, make_url
from sqlalchemy.exc import OperationalError, SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from core.exceptions import DependencyUnavailable
from core.settings import Settings, get_settings
from storage.models import Base


logger = logging.getLogger(__name__)

REQUIRED_TABLES = [
    "courses",
    "enrollments",
    "phishing_simulations",
    "quiz_attempts",
    "behavior_events",
    "risk_scores",
    "report_schedules",
]


# =============================================================
# ERRORS
# =============================================================


class DatabasePersistenceError(DependencyUnavailable):
    """The record store rejected or lost a write."""

    def __init__(self, message: str, **kwargs):
        kwargs.setdefault("dependency", "database")
        super().__init__(message, **kwargs)


class DatabaseConnectionError(DatabasePersistenceError):
    pass


class DatabaseInitializationError(DatabasePersistenceError):
    pass


# =============================================================
# ENGINE
# =============================================================

_engine: Optional[Engine] = None
_session_factory: Optional[sessionmaker] = None


def create_database_engine(
    settings: Optional[Settings] = None,
    pool_size: int = 10,
    max_overflow: int = 20,
    pool_timeout: int = 30,
    pool_recycle: int = 1800,
) -> Engine:
    """
    Build an engine for the configured URL.

    SQLite shares one connection between all sessions so an
    in-memory database lives as long as the engine. Other
    backends get a pre-pinged connection pool sized by the
    pool_* arguments.
    """
    settings = settings or get_settings()
    url = make_url(settings.database_url)
    logger.info(f"Opening record store at {url.render_as_string(hide_password=True)}")

    if url.get_backend_name() == "sqlite":
        return create_engine(
            url,
            echo=settings.db_echo,
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
        )

    return create_engine(
        url,
        echo=settings.db_echo,
        pool_size=pool_size,
        max_overflow=max_overflow,
        pool_timeout=pool_timeout,
        pool_recycle=pool_recycle,
        pool_pre_ping=True,
    )


def get_engine() -> Engine:
    """Process-wide engine, built on first use."""
    global _engine
    if _engine is None:
        _engine = create_database_engine()
    return _engine


def get_session_factory() -> sessionmaker:
    global _session_factory
    if _session_factory is None:
        _session_factory = sessionmaker(bind=get_engine(), autoflush=False, expire_on_commit=False)
    return _session_factory


def reset_engine() -> None:
    """Dispose the engine and forget the session factory."""
    global _engine, _session_factory
    if _engine is not None:
        _engine.dispose()
    _engine = None
    _session_factory = None


# =============================================================
# SESSIONS
# =============================================================


def get_session() -> Session:
    """
    A bare session; the caller commits and closes it.

    Prefer get_db_session() or transaction_scope().
    """
    return get_session_factory()()


@contextmanager
def get_db_session() -> Generator[Session, None, None]:
    """
    Session for reads, closed on exit.

    Nothing is committed. An exception rolls the session back
    and propagates.

        with get_db_session() as session:
            scores = RiskScoreRepository(session).get_recent_risk_scores(user_id, 30)
    """
    session = get_session()
    try:
        yield session
    except Exception as e:
        logger.error(f"Rolling back read session: {e}")
        session.rollback()
        raise
    finally:
        session.close()


@contextmanager
def transaction_scope() -> Generator[Session, None, None]:
    """
    Unit of work: commit on success, roll back on any error.

    Database errors are re-raised as DatabasePersistenceError.
    Any other exception propagates unchanged.

        with transaction_scope() as session:
            calculator = RiskScoreCalculator(
                SignalRepository(session), RiskScoreRepository(session)
            )
            calculator.calculate(user_id, tenant_id)
    """
    session = get_session()
    try:
        yield session
        session.commit()
    except SQLAlchemyError as e:
        logger.error(f"Record store transaction rolled back: {e}")
        session.rollback()
        raise DatabasePersistenceError(f"Transaction failed: {e}", cause=e) from e
    except Exception as e:
        logger.error(f"Transaction aborted by {type(e).__name__}: {e}")
        session.rollback()
        raise
    finally:
        session.close()


# =============================================================
# INITIALIZATION
# =============================================================


def verify_database_connection() -> bool:
    """
    Round-trip a trivial query.

    Raises:
        DatabaseConnectionError: If the store is unreachable
    """
    try:
        with get_engine().connect() as conn:
            conn.execute(text("SELECT 1")).fetchone()
    except OperationalError as e:
        logger.error(f"Record store unreachable: {e}")
        raise DatabaseConnectionError(f"Cannot connect to database: {e}", cause=e) from e
    return True


def create_all_tables(engine: Optional[Engine] = None) -> None:
    """
    Create every table registered on storage.models.Base.

    Raises:
        DatabaseInitializationError: If the DDL fails
    """
    try:
        Base.metadata.create_all(bind=engine or get_engine())
    except SQLAlchemyError as e:
        logger.error(f"Table creation failed: {e}")
        raise DatabaseInitializationError(f"Table creation failed: {e}", cause=e) from e
    logger.info(f"Record store schema ready ({len(Base.metadata.tables)} tables)")


def missing_tables(engine: Optional[Engine] = None) -> List[str]:
    """Names of required tables absent from the database."""
    existing = set(inspect(engine or get_engine()).get_table_names())
    return [name for name in REQUIRED_TABLES if name not in existing]


def initialize_database() -> None:
    """Connect, create the schema, and check nothing is missing."""
    verify_database_connection()
    create_all_tables()

    missing = missing_tables()
    if missing:
        raise DatabaseInitializationError(f"Missing tables after create_all: {missing}")
    logger.info("Analytics record store initialized")


__all__ = [
    "REQUIRED_TABLES",
    "DatabasePersistenceError",
    "DatabaseConnectionError",
    "DatabaseInitializationError",
    "create_database_engine",
    "get_engine",
    "get_session_factory",
    "reset_engine",
    "get_session",
    "get_db_session",
    "transaction_scope",
    "verify_database_connection",
    "create_all_tables",
    "missing_tables",
    "initialize_database",
]
