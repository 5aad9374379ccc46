# src/docmirror/engine/orchestrator.py
"""SyncOrchestrator: the two operational entry points.

reconcile():
    Run lock gate -> load state -> walk every top-level node ->
    reap orphans -> final save -> record last run -> release lock

force_full_resync():
    Clear every persisted key, then reconcile from scratch.

Remote failures inside a run are values, not exceptions. Anything that
still raises is caught here: the run is reported as failed, the lock is
released, and the incrementally saved state stays valid.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import UTC, datetime

import structlog

from docmirror.contracts.config import RuntimeLockConfig, RuntimeRetryConfig, RuntimeSyncConfig
from docmirror.contracts.enums import AuditAction, AuditStatus, RunStatus
from docmirror.contracts.protocols import DestinationBackend, PropertyStore, Renderer, SourceReader
from docmirror.contracts.results import RunSummary
from docmirror.contracts.state import ROOT_PARENT_KEY
from docmirror.core.audit import AuditTrail
from docmirror.core.logging import run_context
from docmirror.core.properties import FINGERPRINT_PREFIX, LAST_RUN_KEY
from docmirror.core.state_store import StateStore
from docmirror.engine.change_detector import ChangeDetector
from docmirror.engine.clock import DEFAULT_CLOCK, Clock
from docmirror.engine.exporter import ExporterGateway
from docmirror.engine.lock import RunLock
from docmirror.engine.placement import PlacementManager
from docmirror.engine.reaper import OrphanReaper
from docmirror.engine.retry import RetryManager
from docmirror.engine.walker import HierarchyWalker, WalkContext

logger = structlog.get_logger(__name__)


@dataclass(frozen=True, slots=True)
class SyncStatus:
    """Snapshot of persisted state for operators."""

    tracked_entries: int
    fingerprints: int
    lock_age_seconds: float | None
    last_run_at: str | None


def read_status(properties: PropertyStore, *, lock: RunLock | None = None) -> SyncStatus:
    """Summarize persisted state without taking the run lock."""
    lock = lock if lock is not None else RunLock(properties, RuntimeLockConfig())
    return SyncStatus(
        tracked_entries=len(StateStore(properties).load()),
        fingerprints=len(properties.keys(prefix=FINGERPRINT_PREFIX)),
        lock_age_seconds=lock.age_seconds(),
        last_run_at=properties.get_property(LAST_RUN_KEY),
    )


class SyncOrchestrator:
    """Wires the engine components together and runs them under the lock.

    Example:
        orchestrator = SyncOrchestrator(
            source, backend, renderer, properties,
            sync_config=RuntimeSyncConfig(document_id="doc", root_folder_id="root"),
        )
        summary = orchestrator.reconcile()
    """

    def __init__(
        self,
        source: SourceReader,
        backend: DestinationBackend,
        renderer: Renderer,
        properties: PropertyStore,
        *,
        sync_config: RuntimeSyncConfig,
        retry_config: RuntimeRetryConfig | None = None,
        lock_config: RuntimeLockConfig | None = None,
        audit: AuditTrail | None = None,
        clock: Clock | None = None,
    ) -> None:
        self._source = source
        self._properties = properties
        self._config = sync_config
        self._clock = clock if clock is not None else DEFAULT_CLOCK
        self._audit = audit if audit is not None else AuditTrail()

        self._lock = RunLock(
            properties,
            lock_config if lock_config is not None else RuntimeLockConfig(),
            clock=self._clock,
            audit=self._audit,
        )
        self._state_store = StateStore(properties)
        self._detector = ChangeDetector(properties)
        retry_manager = RetryManager(
            retry_config if retry_config is not None else RuntimeRetryConfig.default(),
            clock=self._clock,
        )
        exporter = ExporterGateway(
            renderer,
            backend,
            retry_manager,
            audit=self._audit,
        )
        self._walker = HierarchyWalker(
            sync_config,
            exporter,
            PlacementManager(backend),
            self._detector,
            self._state_store,
            clock=self._clock,
        )
        self._reaper = OrphanReaper(backend, self._detector, self._state_store, audit=self._audit)

    @property
    def lock(self) -> RunLock:
        return self._lock

    def reconcile(self) -> RunSummary:
        """Bring the destination in line with the source tree."""
        return self._run(reset=False)

    def force_full_resync(self) -> RunSummary:
        """Forget everything persisted and treat every node as new.

        Destination content is not deleted; same-named artifacts and
        folders are found and replaced by the following reconcile.
        """
        return self._run(reset=True)

    def status(self) -> SyncStatus:
        return read_status(self._properties, lock=self._lock)

    def _run(self, *, reset: bool) -> RunSummary:
        with run_context(self._config.document_id):
            return self._run_locked(reset=reset)

    def _run_locked(self, *, reset: bool) -> RunSummary:
        if not self._lock.acquire():
            return RunSummary(status=RunStatus.SKIPPED)

        started = self._clock.monotonic()
        try:
            if reset:
                logger.warning("Full resync requested, clearing all persisted state")
                self._properties.delete_all_properties()
                # The lock marker went with everything else.
                self._lock.acquire()
            return self._reconcile(started)
        except Exception as e:
            logger.error("Run failed", error=str(e), error_type=type(e).__name__, exc_info=True)
            self._audit.record(AuditAction.ERROR, f"Run failed: {e}", AuditStatus.FAILED)
            return RunSummary(
                status=RunStatus.FAILED,
                duration_seconds=self._clock.monotonic() - started,
                error=f"{type(e).__name__}: {e}",
            )
        finally:
            self._lock.release()

    def _reconcile(self, started: float) -> RunSummary:
        state = self._state_store.load()
        ctx = WalkContext(state=state)
        logger.info("Run started", tracked_entries=len(state))

        exports = 0
        for node in self._source.list_top_level_nodes():
            exports += self._walker.walk(node, self._config.root_folder_id, (), ctx, ROOT_PARENT_KEY)

        reaped = self._reaper.reap(state, ctx.active, surplus_folders=ctx.surplus_folders)
        self._state_store.save(state)
        self._properties.set_property(LAST_RUN_KEY, datetime.fromtimestamp(self._clock.time(), UTC).isoformat())

        duration = self._clock.monotonic() - started
        if exports > 0:
            self._audit.record(AuditAction.INFO, f"Sync complete: {exports} export(s)", AuditStatus.SUCCESS)
        logger.info(
            "Run completed",
            exports=exports,
            reaped=len(reaped.removed),
            retained_orphans=len(reaped.retained),
            duration_seconds=round(duration, 3),
        )
        return RunSummary(
            status=RunStatus.COMPLETED,
            exports=exports,
            reaped=len(reaped.removed),
            duration_seconds=duration,
            retained_orphans=reaped.retained,
        )
