# src/docmirror/engine/scheduler.py
"""Fixed-interval scheduler for the reconcile entry point.

Registration is keyed by name. Registering a name that already exists
replaces the previous job instead of adding a second one, so the setup
routine can be called any number of times.
"""

from __future__ import annotations

import threading
from collections.abc import Callable
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

import structlog

from docmirror.engine.clock import DEFAULT_CLOCK, Clock

if TYPE_CHECKING:
    from docmirror.engine.orchestrator import SyncOrchestrator

logger = structlog.get_logger(__name__)

RECONCILE_JOB = "reconcile"


@dataclass(slots=True)
class ScheduledJob:
    name: str
    func: Callable[[], Any]
    interval_seconds: float
    next_run_at: float


class IntervalScheduler:
    """Runs registered callables every interval_seconds, one at a time."""

    def __init__(self, *, clock: Clock | None = None, poll_seconds: float = 1.0) -> None:
        self._clock = clock if clock is not None else DEFAULT_CLOCK
        self._poll_seconds = poll_seconds
        self._jobs: dict[str, ScheduledJob] = {}

    def register(self, name: str, func: Callable[[], Any], interval_seconds: float) -> ScheduledJob:
        """Schedule func; the first run is due immediately."""
        if interval_seconds <= 0:
            raise ValueError(f"interval_seconds must be > 0, got {interval_seconds}")
        if name in self._jobs:
            logger.info("Replacing scheduled job", job=name)
        job = ScheduledJob(name=name, func=func, interval_seconds=interval_seconds, next_run_at=self._clock.monotonic())
        self._jobs[name] = job
        return job

    def unregister(self, name: str) -> bool:
        return self._jobs.pop(name, None) is not None

    def jobs(self) -> list[ScheduledJob]:
        return list(self._jobs.values())

    def run_pending(self) -> int:
        """Run every due job once; returns how many ran.

        A job that raises is logged and rescheduled; it does not stop the others.
        """
        ran = 0
        for job in list(self._jobs.values()):
            now = self._clock.monotonic()
            if now < job.next_run_at:
                continue
            try:
                job.func()
            except Exception as e:
                logger.error("Scheduled job failed", job=job.name, error=str(e), error_type=type(e).__name__)
            job.next_run_at = now + job.interval_seconds
            ran += 1
        return ran

    def seconds_until_next(self) -> float | None:
        if not self._jobs:
            return None
        next_at = min(job.next_run_at for job in self._jobs.values())
        return max(0.0, next_at - self._clock.monotonic())

    def run_forever(self, stop_event: threading.Event) -> None:
        """Loop until stop_event is set."""
        logger.info("Scheduler started", jobs=[job.name for job in self._jobs.values()])
        while not stop_event.is_set():
            self.run_pending()
            wait = self.seconds_until_next()
            stop_event.wait(self._poll_seconds if wait is None else min(wait, self._poll_seconds))
        logger.info("Scheduler stopped")


def setup_schedule(
    scheduler: IntervalScheduler,
    orchestrator: SyncOrchestrator,
    interval_seconds: float,
) -> ScheduledJob:
    """Register orchestrator.reconcile as the single 'reconcile' job."""
    job = scheduler.register(RECONCILE_JOB, orchestrator.reconcile, interval_seconds)
    logger.info("Reconcile scheduled", interval_seconds=interval_seconds)
    return job
