# src/docmirror/engine/__init__.py
"""Reconciliation engine: mirrors a source tree into destination folders.

This module provides:
- SyncOrchestrator: reconcile() and force_full_resync() under the run lock
- HierarchyWalker: per-node rename, self-heal, export and placement
- OrphanReaper: cleanup of nodes that left the source tree
- ExporterGateway: renderer calls with bounded retry
- RetryManager: Retry logic with tenacity
- IntervalScheduler: periodic invocation

Example:
    from docmirror.core.database import StateDB
    from docmirror.core.properties import SqlPropertyStore
    from docmirror.engine import SyncOrchestrator

    db = StateDB.from_url("sqlite:///./.docmirror/state.db")
    orchestrator = SyncOrchestrator(
        source, backend, renderer, SqlPropertyStore(db),
        sync_config=RuntimeSyncConfig(document_id="doc", root_folder_id="folder"),
    )
    summary = orchestrator.reconcile()
"""

from docmirror.engine.change_detector import ChangeDetector, fingerprint, normalize_content
from docmirror.engine.clock import DEFAULT_CLOCK, Clock, MockClock, SystemClock
from docmirror.engine.exporter import ExporterGateway
from docmirror.engine.lock import RunLock
from docmirror.engine.orchestrator import SyncOrchestrator, SyncStatus, read_status
from docmirror.engine.placement import PlacementManager
from docmirror.engine.reaper import OrphanReaper
from docmirror.engine.retry import MaxRetriesExceeded, RetryManager
from docmirror.engine.scheduler import IntervalScheduler, ScheduledJob, setup_schedule
from docmirror.engine.walker import HierarchyWalker, WalkContext

__all__ = [
    "DEFAULT_CLOCK",
    "ChangeDetector",
    "Clock",
    "ExporterGateway",
    "HierarchyWalker",
    "IntervalScheduler",
    "MaxRetriesExceeded",
    "MockClock",
    "OrphanReaper",
    "PlacementManager",
    "RetryManager",
    "RunLock",
    "ScheduledJob",
    "SyncOrchestrator",
    "SyncStatus",
    "SystemClock",
    "WalkContext",
    "fingerprint",
    "normalize_content",
    "read_status",
    "setup_schedule",
]
