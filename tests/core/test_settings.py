"""
Tests for process settings and the exception hierarchy.
"""

import pytest

from core.exceptions import (
    AnalyticsException,
    DependencyUnavailable,
    ErrorClassification,
    InvalidConfigError,
    InvalidScheduleConfig,
    Severity,
)
from core.settings import DEFAULT_DATABASE_URL, Settings, load_settings


# ============================================================
# SETTINGS
# ============================================================

class TestLoadSettings:
    """Test environment parsing."""

    def test_defaults(self):
        settings = load_settings({})
        assert settings.database_url == DEFAULT_DATABASE_URL
        assert settings.db_echo is False
        assert settings.log_level == "INFO"
        assert settings.log_format == "text"
        assert settings.cache_ttl_hours == 24.0

    def test_reads_variables(self):
        settings = load_settings({
            "RISK_ANALYTICS_DATABASE_URL": "postgresql://u:secret@db:5432/analytics",
            "RISK_ANALYTICS_DB_ECHO": "true",
            "RISK_ANALYTICS_LOG_LEVEL": "debug",
            "RISK_ANALYTICS_LOG_FORMAT": "JSON",
            "RISK_SCORE_CACHE_TTL_HOURS": "6",
        })
        assert settings.db_echo is True
        assert settings.log_level == "DEBUG"
        assert settings.log_format == "json"
        assert settings.cache_ttl_hours == 6.0

    def test_to_dict_hides_credentials(self):
        settings = Settings(database_url="postgresql://u:secret@db:5432/analytics")
        assert "secret" not in settings.to_dict()["database_url"]

    @pytest.mark.parametrize("key,value", [
        ("RISK_ANALYTICS_LOG_LEVEL", "LOUD"),
        ("RISK_ANALYTICS_LOG_FORMAT", "xml"),
        ("RISK_ANALYTICS_DB_ECHO", "maybe"),
        ("RISK_SCORE_CACHE_TTL_HOURS", "-1"),
        ("RISK_SCORE_CACHE_TTL_HOURS", "soon"),
    ])
    def test_invalid_values_rejected(self, key, value):
        with pytest.raises(InvalidConfigError) as exc_info:
            load_settings({key: value})
        assert exc_info.value.key == key


# ============================================================
# EXCEPTIONS
# ============================================================

class TestExceptions:

    def test_dependency_unavailable_is_retryable(self):
        error = DependencyUnavailable("reader down", dependency="reader", operation="get")
        assert error.is_retryable
        assert error.classification == ErrorClassification.TRANSIENT
        assert error.to_dict()["context"]["dependency"] == "reader"

    def test_schedule_error_is_not_retryable(self):
        error = InvalidScheduleConfig("missing day", frequency="WEEKLY", field="day_of_week")
        assert not error.is_retryable
        assert error.field == "day_of_week"
        assert isinstance(error, AnalyticsException)

    def test_explicit_severity_overrides_default(self):
        error = AnalyticsException("boom", severity=Severity.CRITICAL)
        assert error.severity == Severity.CRITICAL
