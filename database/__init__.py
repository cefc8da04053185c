"""
Database Package Initialization.

============================================================
RECORD STORE PERSISTENCE LAYER
============================================================

Engine, sessions and transaction boundaries for the
analytics record store. ORM models live in storage.models;
SQL lives in storage.repositories.

REQUIRED:
- Every failure raises a hard exception
- All transactions are explicit with commit/rollback

============================================================
"""

from .engine import (
    REQUIRED_TABLES,
    DatabaseConnectionError,
    DatabaseInitializationError,
    DatabasePersistenceError,
    create_all_tables,
    create_database_engine,
    get_db_session,
    get_engine,
    get_session,
    get_session_factory,
    initialize_database,
    missing_tables,
    reset_engine,
    transaction_scope,
    verify_database_connection,
)


__all__ = [
    "REQUIRED_TABLES",
    "DatabaseConnectionError",
    "DatabaseInitializationError",
    "DatabasePersistenceError",
    "create_all_tables",
    "create_database_engine",
    "get_db_session",
    "get_engine",
    "get_session",
    "get_session_factory",
    "initialize_database",
    "missing_tables",
    "reset_engine",
    "transaction_scope",
    "verify_database_connection",
]
