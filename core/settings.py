"""
Core Module - Process Settings.

============================================================
RESPONSIBILITY
============================================================
Reads deployment settings from the environment (and a local
.env file when present) into one immutable object.

============================================================
ENVIRONMENT VARIABLES
============================================================
RISK_ANALYTICS_DATABASE_URL   SQLAlchemy URL of the record store
RISK_ANALYTICS_DB_ECHO        Log SQL statements (true/false)
RISK_ANALYTICS_LOG_LEVEL      DEBUG, INFO, WARNING, ...
RISK_ANALYTICS_LOG_FORMAT     text or json
RISK_SCORE_CACHE_TTL_HOURS    Reuse window for risk scores

Scoring weights and thresholds are NOT environment settings;
they live in risk_scoring.config.

============================================================
"""

import logging
import os
from dataclasses import dataclass
from typing import Any, Dict, Mapping, Optional

from dotenv import load_dotenv

from .exceptions import InvalidConfigError


logger = logging.getLogger(__name__)


DEFAULT_DATABASE_URL = "sqlite+pysqlite:///:memory:"
DEFAULT_CACHE_TTL_HOURS = 24.0

_VALID_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")
_VALID_LOG_FORMATS = ("text", "json")
_TRUE_VALUES = ("1", "true", "yes", "on")
_FALSE_VALUES = ("0", "false", "no", "off", "")


@dataclass(frozen=True)
class Settings:
    """Immutable process settings."""

    database_url: str = DEFAULT_DATABASE_URL
    db_echo: bool = False
    log_level: str = "INFO"
    log_format: str = "text"
    cache_ttl_hours: float = DEFAULT_CACHE_TTL_HOURS

    def to_dict(self) -> Dict[str, Any]:
        # Credentials never leave the process through to_dict
        return {
            "database_url": self.database_url.split("@")[-1],
            "db_echo": self.db_echo,
            "log_level": self.log_level,
            "log_format": self.log_format,
            "cache_ttl_hours": self.cache_ttl_hours,
        }


def _parse_bool(key: str, raw: str) -> bool:
    text = raw.strip().lower()
    if text in _TRUE_VALUES:
        return True
    if text in _FALSE_VALUES:
        return False
    raise InvalidConfigError(key, raw, "expected a boolean")


def _parse_positive_float(key: str, raw: str) -> float:
    try:
        value = float(raw)
    except ValueError as e:
        raise InvalidConfigError(key, raw, "expected a number") from e
    if value <= 0:
        raise InvalidConfigError(key, raw, "must be greater than zero")
    return value


def load_settings(environ: Optional[Mapping[str, str]] = None) -> Settings:
    """
    Build Settings from the environment.

    Args:
        environ: Mapping to read instead of os.environ. When omitted,
                 a .env file in the working directory is loaded first.

    Raises:
        InvalidConfigError: If a variable holds an unusable value
    """
    if environ is None:
        load_dotenv()
        environ = os.environ

    database_url = environ.get("RISK_ANALYTICS_DATABASE_URL") or DEFAULT_DATABASE_URL
    if database_url == DEFAULT_DATABASE_URL:
        logger.warning("RISK_ANALYTICS_DATABASE_URL not set, using in-memory SQLite")

    log_level = environ.get("RISK_ANALYTICS_LOG_LEVEL", "INFO").strip().upper()
    if log_level not in _VALID_LOG_LEVELS:
        raise InvalidConfigError("RISK_ANALYTICS_LOG_LEVEL", log_level, "unknown log level")

    log_format = environ.get("RISK_ANALYTICS_LOG_FORMAT", "text").strip().lower()
    if log_format not in _VALID_LOG_FORMATS:
        raise InvalidConfigError("RISK_ANALYTICS_LOG_FORMAT", log_format, "expected text or json")

    cache_ttl_hours = DEFAULT_CACHE_TTL_HOURS
    raw_ttl = environ.get("RISK_SCORE_CACHE_TTL_HOURS")
    if raw_ttl:
        cache_ttl_hours = _parse_positive_float("RISK_SCORE_CACHE_TTL_HOURS", raw_ttl)

    return Settings(
        database_url=database_url,
        db_echo=_parse_bool("RISK_ANALYTICS_DB_ECHO", environ.get("RISK_ANALYTICS_DB_ECHO", "false")),
        log_level=log_level,
        log_format=log_format,
        cache_ttl_hours=cache_ttl_hours,
    )


_settings: Optional[Settings] = None


def get_settings() -> Settings:
    """Return the process settings, loading them on first use."""
    global _settings
    if _settings is None:
        _settings = load_settings()
    return _settings


def reset_settings() -> None:
    """Forget cached settings (tests, reconfiguration)."""
    global _settings
    _settings = None
