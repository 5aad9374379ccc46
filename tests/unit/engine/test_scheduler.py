# tests/unit/engine/test_scheduler.py
"""Tests for IntervalScheduler and setup_schedule."""

from __future__ import annotations

import threading
from unittest.mock import MagicMock

import pytest

from docmirror.engine.clock import MockClock
from docmirror.engine.scheduler import RECONCILE_JOB, IntervalScheduler, setup_schedule


@pytest.fixture
def scheduler(clock: MockClock) -> IntervalScheduler:
    return IntervalScheduler(clock=clock)


class TestRegister:
    def test_first_run_is_due_immediately(self, scheduler: IntervalScheduler) -> None:
        func = MagicMock()
        scheduler.register("job", func, 60)

        assert scheduler.run_pending() == 1
        func.assert_called_once_with()

    def test_register_same_name_replaces(self, scheduler: IntervalScheduler) -> None:
        first, second = MagicMock(), MagicMock()
        scheduler.register("job", first, 60)
        scheduler.register("job", second, 30)

        scheduler.run_pending()

        assert len(scheduler.jobs()) == 1
        first.assert_not_called()
        second.assert_called_once()

    @pytest.mark.parametrize("interval", [0, -5])
    def test_non_positive_interval_rejected(self, scheduler: IntervalScheduler, interval: float) -> None:
        with pytest.raises(ValueError, match="interval_seconds"):
            scheduler.register("job", MagicMock(), interval)

    def test_unregister(self, scheduler: IntervalScheduler) -> None:
        scheduler.register("job", MagicMock(), 60)

        assert scheduler.unregister("job") is True
        assert scheduler.unregister("job") is False
        assert scheduler.seconds_until_next() is None


class TestRunPending:
    def test_respects_interval(self, scheduler: IntervalScheduler, clock: MockClock) -> None:
        func = MagicMock()
        scheduler.register("job", func, 60)
        scheduler.run_pending()

        clock.advance(59)
        assert scheduler.run_pending() == 0
        assert scheduler.seconds_until_next() == pytest.approx(1.0)

        clock.advance(1)
        assert scheduler.run_pending() == 1
        assert func.call_count == 2

    def test_failing_job_is_rescheduled(self, scheduler: IntervalScheduler, clock: MockClock) -> None:
        broken = MagicMock(side_effect=RuntimeError("boom"))
        healthy = MagicMock()
        scheduler.register("broken", broken, 10)
        scheduler.register("healthy", healthy, 10)

        assert scheduler.run_pending() == 2
        healthy.assert_called_once()

        clock.advance(10)
        scheduler.run_pending()
        assert broken.call_count == 2


class TestRunForever:
    def test_stops_when_event_set(self, clock: MockClock) -> None:
        stop = threading.Event()
        scheduler = IntervalScheduler(clock=clock, poll_seconds=0.01)
        scheduler.register("job", lambda: stop.set(), 60)

        scheduler.run_forever(stop)

        assert stop.is_set()


class TestSetupSchedule:
    def test_registers_single_reconcile_job(self, scheduler: IntervalScheduler) -> None:
        orchestrator = MagicMock()

        setup_schedule(scheduler, orchestrator, 300)
        setup_schedule(scheduler, orchestrator, 300)

        assert [job.name for job in scheduler.jobs()] == [RECONCILE_JOB]
        scheduler.run_pending()
        orchestrator.reconcile.assert_called_once_with()
