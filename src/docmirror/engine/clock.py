# src/docmirror/engine/clock.py
"""Clock abstraction for testable time-dependent logic.

The run lock compares wall-clock timestamps across processes, the walker
throttles between exports, and the exporter backs off between retries.
All three go through a Clock so tests control time without sleeping.

Production code uses SystemClock (the default).
Tests inject MockClock to control time advancement.
"""

from __future__ import annotations

import time
from typing import Protocol


class Clock(Protocol):
    """Abstract clock.

    Implementations:
    - SystemClock: Uses the time module (production)
    - MockClock: Returns controllable times (testing)
    """

    def time(self) -> float:
        """Return wall-clock time in seconds since the epoch.

        Persisted timestamps (the run lock, last run) use this value, so it
        must be comparable across processes.
        """
        ...

    def monotonic(self) -> float:
        """Return monotonic time in seconds, for measuring durations."""
        ...

    def sleep(self, seconds: float) -> None:
        """Block for the given number of seconds."""
        ...


class SystemClock:
    """Production clock delegating to the time module."""

    def time(self) -> float:
        return time.time()

    def monotonic(self) -> float:
        return time.monotonic()

    def sleep(self, seconds: float) -> None:
        if seconds > 0:
            time.sleep(seconds)


class MockClock:
    """Controllable clock for deterministic testing.

    sleep() returns immediately but advances time and records the request.

    Example:
        clock = MockClock(start=1_700_000_000.0)
        lock = RunLock(properties, RuntimeLockConfig(timeout_seconds=540), clock=clock)

        assert lock.acquire()
        clock.advance(600)  # Lock is now stale
        assert lock.acquire()
    """

    def __init__(self, start: float = 0.0) -> None:
        """Initialize mock clock at a given time.

        Args:
            start: Initial time value (default 0.0).
        """
        self._current = start
        self.sleeps: list[float] = []

    def time(self) -> float:
        return self._current

    def monotonic(self) -> float:
        return self._current

    def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        self.advance(max(seconds, 0.0))

    def advance(self, seconds: float) -> None:
        """Advance mock time by specified seconds.

        Raises:
            ValueError: If seconds is negative.
        """
        if seconds < 0:
            raise ValueError(f"Cannot advance time by negative amount: {seconds}")
        self._current += seconds

    def set(self, value: float) -> None:
        """Set mock time to an absolute value (may move backwards)."""
        self._current = value


# Default clock for production use
DEFAULT_CLOCK: Clock = SystemClock()
