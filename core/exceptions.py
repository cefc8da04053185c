"""
Core Module - Exceptions.

============================================================
RESPONSIBILITY
============================================================
One exception hierarchy for the analytics core.

Callers distinguish two kinds of failure:
- Their own mistakes (bad configuration, bad schedules);
  retrying the same call will fail again
- Collaborator faults (reader, record store); the core
  holds no state, so the whole call can be retried

============================================================
EXCEPTION HIERARCHY
============================================================
AnalyticsException (base)
├── ConfigurationError
│   └── InvalidConfigError
├── InvalidScheduleConfig
└── DependencyUnavailable

Repository-level errors (storage.repositories.exceptions)
and RiskScoringError (risk_scoring.types) also derive from
AnalyticsException.

Expected outcomes (no signals, INSUFFICIENT_DATA trends) are
result values, never exceptions.

============================================================
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, Optional


MAX_CONTEXT_VALUE_LENGTH = 100


class Severity(Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


class ErrorClassification(Enum):
    """Whether repeating the failed call can succeed."""

    RECOVERABLE = "recoverable"
    TRANSIENT = "transient"
    NON_RECOVERABLE = "non_recoverable"


def _clip(value: Any) -> str:
    return str(value)[:MAX_CONTEXT_VALUE_LENGTH]


# ============================================================
# BASE EXCEPTION
# ============================================================

class AnalyticsException(Exception):
    """
    Root of every error raised by the analytics core.

    Attributes:
        severity: How loudly to log it
        classification: Whether a retry is worthwhile
        context: Key/value details for the log line
        cause: The lower-level exception, if any
    """

    default_severity: Severity = Severity.MEDIUM
    default_classification: ErrorClassification = ErrorClassification.RECOVERABLE

    def __init__(
        self,
        message: str,
        severity: Optional[Severity] = None,
        context: Optional[Dict[str, Any]] = None,
        classification: Optional[ErrorClassification] = None,
        cause: Optional[Exception] = None,
    ):
        super().__init__(message)
        self.message = message
        self.severity = severity or self.default_severity
        self.classification = classification or self.default_classification
        self.context = dict(context or {})
        self.cause = cause
        self.raised_at = datetime.now(timezone.utc)

        if cause is not None:
            self.context.setdefault("cause_type", type(cause).__name__)
            self.context.setdefault("cause_message", _clip(cause))

    @property
    def is_retryable(self) -> bool:
        return self.classification == ErrorClassification.TRANSIENT

    def to_dict(self) -> Dict[str, Any]:
        return {
            "type": type(self).__name__,
            "message": self.message,
            "severity": self.severity.value,
            "classification": self.classification.value,
            "retryable": self.is_retryable,
            "context": dict(self.context),
            "raised_at": self.raised_at.isoformat(),
        }

    def to_log_format(self) -> str:
        """Single log line: [SEVERITY] Type: message | k=v, ..."""
        details = ", ".join(f"{key}={value}" for key, value in self.context.items())
        line = f"[{self.severity.value.upper()}] {type(self).__name__}: {self.message}"
        return f"{line} | {details}" if details else line


# ============================================================
# CONFIGURATION ERRORS
# ============================================================

class ConfigurationError(AnalyticsException):
    """A setting or policy value cannot be used."""

    default_severity = Severity.HIGH
    default_classification = ErrorClassification.NON_RECOVERABLE

    def __init__(
        self,
        message: str,
        config_key: Optional[str] = None,
        actual_value: Optional[Any] = None,
        **kwargs,
    ):
        context = kwargs.pop("context", {})
        if config_key:
            context["config_key"] = config_key
        if actual_value is not None:
            context["actual_value"] = _clip(actual_value)
        super().__init__(message, context=context, **kwargs)


class InvalidConfigError(ConfigurationError):

    def __init__(self, key: str, value: Any, reason: str):
        super().__init__(
            message=f"Invalid configuration for {key}: {reason}",
            config_key=key,
            actual_value=value,
            context={"reason": reason},
        )
        self.key = key
        self.reason = reason


# ============================================================
# SCHEDULE ERRORS
# ============================================================

class InvalidScheduleConfig(AnalyticsException):
    """
    A report schedule lacks a field its frequency requires,
    or carries a value outside the allowed range.
    """

    default_severity = Severity.LOW
    default_classification = ErrorClassification.NON_RECOVERABLE

    def __init__(
        self,
        message: str,
        frequency: Optional[str] = None,
        field: Optional[str] = None,
        value: Optional[Any] = None,
        **kwargs,
    ):
        context = kwargs.pop("context", {})
        for key, item in (("frequency", frequency), ("field", field)):
            if item:
                context[key] = item
        if value is not None:
            context["value"] = _clip(value)
        super().__init__(message, context=context, **kwargs)
        self.field = field


# ============================================================
# DEPENDENCY ERRORS
# ============================================================

class DependencyUnavailable(AnalyticsException):
    """A collaborator (signal reader, record store) failed."""

    default_severity = Severity.HIGH
    default_classification = ErrorClassification.TRANSIENT

    def __init__(
        self,
        message: str,
        dependency: Optional[str] = None,
        operation: Optional[str] = None,
        **kwargs,
    ):
        context = kwargs.pop("context", {})
        if dependency:
            context["dependency"] = dependency
        if operation:
            context["operation"] = operation
        super().__init__(message, context=context, **kwargs)
        self.dependency = dependency
        self.operation = operation


__all__ = [
    "Severity",
    "ErrorClassification",
    "AnalyticsException",
    "ConfigurationError",
    "InvalidConfigError",
    "InvalidScheduleConfig",
    "DependencyUnavailable",
]
