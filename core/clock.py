"""
Core Module - Clock Source.

============================================================
RESPONSIBILITY
============================================================
The injectable "now" of the analytics core.

- Risk score cache windows are measured against it
- Time-since-training staleness is measured against it
- The schedule runner asks it which schedules are due

============================================================
DESIGN PRINCIPLES
============================================================
- Every datetime handed out is timezone-aware UTC
- Business code receives a clock, it never calls
  datetime.now() directly
- Tests pin and move time with MockClock

============================================================
"""

import threading
from abc import ABC, abstractmethod
from contextlib import contextmanager
from datetime import date, datetime, timedelta, timezone
from typing import Generator, Optional


class ClockProtocol(ABC):
    """Source of the current instant."""

    @abstractmethod
    def now(self) -> datetime:
        """Current aware UTC datetime."""
        pass

    def today(self) -> date:
        return self.now().date()


class SystemClock(ClockProtocol):
    """Wall clock, UTC."""

    def now(self) -> datetime:
        return datetime.now(timezone.utc)


class MockClock(ClockProtocol):
    """
    Settable clock for deterministic tests.

    Naive datetimes passed in are taken as UTC.
    """

    def __init__(self, initial_time: Optional[datetime] = None):
        start = initial_time if initial_time is not None else datetime.now(timezone.utc)
        self._current = ensure_utc(start)
        self._guard = threading.Lock()

    def now(self) -> datetime:
        with self._guard:
            return self._current

    def set_time(self, moment: datetime) -> None:
        with self._guard:
            self._current = ensure_utc(moment)

    def advance(self, seconds: float = 0, **delta) -> None:
        """
        Move the clock forward.

        Args:
            seconds: Seconds to add
            **delta: Extra timedelta fields (minutes, hours, days)
        """
        with self._guard:
            self._current += timedelta(seconds=seconds, **delta)

    @contextmanager
    def freeze(self, at_time: Optional[datetime] = None) -> Generator[None, None, None]:
        """Pin the clock for a block; the previous time comes back on exit."""
        saved = self.now()
        if at_time is not None:
            self.set_time(at_time)
        try:
            yield
        finally:
            self.set_time(saved)


class ClockFactory:
    """Process-wide default clock, used when none is injected."""

    _instance: Optional[ClockProtocol] = None
    _lock = threading.Lock()

    @classmethod
    def get_clock(cls) -> ClockProtocol:
        with cls._lock:
            if cls._instance is None:
                cls._instance = SystemClock()
            return cls._instance

    @classmethod
    def set_clock(cls, clock: ClockProtocol) -> None:
        with cls._lock:
            cls._instance = clock

    @classmethod
    def reset(cls) -> None:
        """Back to the wall clock."""
        cls.set_clock(SystemClock())

    @classmethod
    @contextmanager
    def use_mock(cls, initial_time: Optional[datetime] = None) -> Generator[MockClock, None, None]:
        """Install a MockClock as the default for the duration of a block."""
        previous = cls._instance
        mock = MockClock(initial_time)
        cls.set_clock(mock)
        try:
            yield mock
        finally:
            with cls._lock:
                cls._instance = previous


# ============================================================
# HELPERS
# ============================================================


def ensure_utc(dt: datetime) -> datetime:
    """
    Return an aware datetime.

    Naive values are interpreted as UTC. SQLite drops tzinfo on
    round-trip, so every value read back from the store passes
    through here.
    """
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt


def now_utc() -> datetime:
    """Current instant according to the process-wide clock."""
    return ClockFactory.get_clock().now()


__all__ = [
    "ClockProtocol",
    "SystemClock",
    "MockClock",
    "ClockFactory",
    "ensure_utc",
    "now_utc",
]
