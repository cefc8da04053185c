"""
Core Module Package.

Infrastructure shared by every analytics package.

Components:
- clock: Injectable time source
- exceptions: Exception hierarchy
- settings: Environment-driven process settings
- logging_setup: Root logger configuration
"""

from .clock import ClockFactory, ClockProtocol, MockClock, SystemClock, ensure_utc, now_utc
from .exceptions import (
    AnalyticsException,
    ConfigurationError,
    DependencyUnavailable,
    ErrorClassification,
    InvalidConfigError,
    InvalidScheduleConfig,
    Severity,
)
from .logging_setup import setup_logging, setup_logging_from_settings
from .settings import Settings, get_settings, load_settings


__all__ = [
    "ClockFactory",
    "ClockProtocol",
    "MockClock",
    "SystemClock",
    "ensure_utc",
    "now_utc",
    "AnalyticsException",
    "ConfigurationError",
    "DependencyUnavailable",
    "ErrorClassification",
    "InvalidConfigError",
    "InvalidScheduleConfig",
    "Severity",
    "setup_logging",
    "setup_logging_from_settings",
    "Settings",
    "get_settings",
    "load_settings",
]
