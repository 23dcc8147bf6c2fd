"""
Domain time utilities (pure).

Centralized timestamp validation and the clock abstraction used by repricing.

Contract excerpts implemented here:
- Timestamps stored on discounts and promotions must be timezone-aware.
- Temporal triggers are evaluated in one fixed operating timezone.
- The clock is read exactly once per repricing pass; the reading is passed
  explicitly to every trigger evaluation. There is no global "now".
"""

from __future__ import annotations

import threading
from datetime import datetime, timedelta, timezone, tzinfo
from typing import Optional, Protocol


def require_aware_timestamp(name: str, value: datetime) -> None:
    """
    Enforces the contract requirement that timestamps are timezone-aware.

    Behavior and error messages must remain consistent across the domain model.
    """

    if not isinstance(value, datetime):
        raise TypeError(f"{name} must be a datetime, got {type(value).__name__}")
    if value.tzinfo is None or value.utcoffset() is None:
        raise ValueError(f"{name} must be timezone-aware")


def to_operating_time(instant: datetime, operating_timezone: Optional[tzinfo]) -> datetime:
    """
    Express an aware instant as wall-clock time in the operating timezone.

    Naive instants are taken as already expressed in the operating timezone and
    returned unchanged; this keeps simulations that only care about wall-clock
    time simple.
    """

    if operating_timezone is None or instant.tzinfo is None:
        return instant
    return instant.astimezone(operating_timezone)


class Clock(Protocol):
    """Anything that can answer "what time is it" with an aware datetime."""

    def now(self) -> datetime:
        ...


class SystemClock:
    """Wall clock backed by the host time, in UTC."""

    def now(self) -> datetime:
        return datetime.now(timezone.utc)


class FixedClock:
    """Clock frozen at one instant. Useful for replaying a pass deterministically."""

    def __init__(self, instant: datetime):
        require_aware_timestamp("instant", instant)
        self._instant = instant

    def now(self) -> datetime:
        return self._instant


class MutableClock:
    """
    Advanceable clock for tests and time-travel simulation.

    Readings and updates are serialized so another thread can move time while
    a repricing pass reads it; the pass itself reads only once.
    """

    def __init__(self, instant: datetime):
        require_aware_timestamp("instant", instant)
        self._instant = instant
        self._lock = threading.Lock()

    def now(self) -> datetime:
        with self._lock:
            return self._instant

    def set(self, instant: datetime) -> None:
        require_aware_timestamp("instant", instant)
        with self._lock:
            self._instant = instant

    def advance(self, delta: timedelta) -> datetime:
        with self._lock:
            self._instant = self._instant + delta
            return self._instant


__all__ = [
    "Clock",
    "SystemClock",
    "FixedClock",
    "MutableClock",
    "require_aware_timestamp",
    "to_operating_time",
]
