# src/docmirror/engine/reaper.py
"""OrphanReaper: delete what disappeared from the source tree.

This is the only deletion path. An orphan is a tracked id that the
completed traversal did not mark active. Artifacts are trashed first,
so that orphan folders which only held orphan artifacts are empty by
the time folders are considered. Folders are then trashed in rounds
until a round makes no progress, which clears nested orphan folders in
a single run.

A node that lost all its children also lost the reason for its folder.
The walker reports such nodes, and their folders are trashed in the same
rounds once empty; the node itself stays tracked.

A folder that still has content is never trashed. Its entry stays
tracked (file reference cleared) and is re-checked on every run.
"""

from __future__ import annotations

from collections.abc import Iterable

import structlog

from docmirror.contracts.enums import AuditAction, AuditStatus
from docmirror.contracts.protocols import DestinationBackend
from docmirror.contracts.results import BackendResult, ReapResult
from docmirror.contracts.state import SyncState
from docmirror.core.audit import AuditTrail
from docmirror.core.state_store import StateStore
from docmirror.engine.change_detector import ChangeDetector

logger = structlog.get_logger(__name__)


# Outcomes of a single orphan folder attempt
_TRASHED = "trashed"
_GONE = "gone"
_NOT_EMPTY = "not_empty"
_FAILED = "failed"


def _gone(result: BackendResult[None]) -> bool:
    return result.is_ok or result.is_not_found


class OrphanReaper:
    """Diffs tracked ids against active ids and cleans up the difference."""

    def __init__(
        self,
        backend: DestinationBackend,
        detector: ChangeDetector,
        state_store: StateStore,
        *,
        audit: AuditTrail | None = None,
    ) -> None:
        self._backend = backend
        self._detector = detector
        self._state_store = state_store
        self._audit = audit if audit is not None else AuditTrail()

    def reap(self, state: SyncState, active: set[str], *, surplus_folders: Iterable[str] = ()) -> ReapResult:
        """Trash orphan artifacts and empty orphan folders; drop their entries.

        surplus_folders names active nodes that no longer have children
        but still track a folder. Such a folder is trashed once empty and
        the entry forgets it; the entry itself stays.

        Must only be called after a traversal that completed; a partial
        active set would make live nodes look orphaned.
        """
        orphans = [node_id for node_id in state.node_ids() if node_id not in active]
        surplus = [node_id for node_id in surplus_folders if node_id in active]
        if not orphans and not surplus:
            return ReapResult()

        logger.info("Reaping orphans", count=len(orphans), surplus_folders=len(surplus))
        files_trashed = 0
        # Ids whose artifact is gone; their folder (if any) is handled below.
        pending_folders: list[str] = []
        retained: list[str] = []
        removed: list[str] = []

        for node_id in orphans:
            entry = state.get(node_id)
            if entry is None:
                continue
            if entry.file_id is not None:
                result = self._backend.trash(entry.file_id)
                if not _gone(result):
                    logger.warning("Orphan artifact not trashed, retrying next run", node_id=node_id, file_id=entry.file_id, status=result.status)
                    retained.append(node_id)
                    continue
                if result.is_ok:
                    files_trashed += 1
                    self._audit.record(AuditAction.CLEANUP, f"Deleted artifact for removed node: {entry.title}", AuditStatus.SUCCESS)
                entry.file_id = None
                self._state_store.save(state)
            if entry.folder_id is not None:
                pending_folders.append(node_id)
            else:
                self._forget(state, node_id)
                removed.append(node_id)

        # Surplus folders go through the same rounds: one may only empty out
        # once an orphan inside it is gone, and one may sit in an orphan folder.
        surplus_ids = set(surplus)
        pending_folders.extend(surplus)

        folders_trashed = 0
        non_empty: set[str] = set()
        progress = True
        while pending_folders and progress:
            progress = False
            for node_id in list(pending_folders):
                entry = state.get(node_id)
                if entry is None or entry.folder_id is None:
                    pending_folders.remove(node_id)
                    continue
                outcome = self._reap_folder(node_id, entry.folder_id)
                if outcome in (_NOT_EMPTY, _FAILED):
                    if outcome == _NOT_EMPTY:
                        non_empty.add(node_id)
                    continue
                non_empty.discard(node_id)
                pending_folders.remove(node_id)
                progress = True
                if node_id in surplus_ids:
                    if outcome == _TRASHED:
                        folders_trashed += 1
                        self._audit.record(AuditAction.CLEANUP, f"Deleted empty folder of childless node: {entry.title}", AuditStatus.SUCCESS)
                    entry.folder_id = None
                    self._state_store.save(state)
                    continue
                if outcome == _TRASHED:
                    folders_trashed += 1
                    self._audit.record(AuditAction.CLEANUP, f"Deleted folder for removed node: {entry.title}", AuditStatus.SUCCESS)
                self._forget(state, node_id)
                removed.append(node_id)

        for node_id in pending_folders:
            entry = state.get(node_id)
            if entry is None:
                continue
            if node_id in surplus_ids:
                # Holds something we do not track; left alone like any user content.
                logger.info("Folder of childless node not empty, left in place", node_id=node_id, folder_id=entry.folder_id)
                continue
            retained.append(node_id)
            if node_id not in non_empty:
                continue
            logger.warning(
                "Orphan folder not empty, left in place",
                node_id=node_id,
                folder_id=entry.folder_id,
                title=entry.title,
            )
            self._audit.record(
                AuditAction.CLEANUP,
                f"Kept non-empty folder for removed node: {entry.title}",
                AuditStatus.WARNING,
            )

        return ReapResult(
            removed=tuple(removed),
            files_trashed=files_trashed,
            folders_trashed=folders_trashed,
            retained=tuple(retained),
        )

    def _reap_folder(self, node_id: str, folder_id: str) -> str:
        """Try to trash one orphan folder; returns one of the outcome constants."""
        children = self._backend.list_children(folder_id)
        if children.is_not_found:
            return _GONE
        if not children.is_ok:
            logger.warning("Cannot list orphan folder, retrying next run", node_id=node_id, folder_id=folder_id, status=children.status)
            return _FAILED
        if children.value:
            return _NOT_EMPTY
        result = self._backend.trash(folder_id)
        if not _gone(result):
            logger.warning("Orphan folder not trashed, retrying next run", node_id=node_id, folder_id=folder_id, status=result.status)
            return _FAILED
        return _TRASHED if result.is_ok else _GONE

    def _forget(self, state: SyncState, node_id: str) -> None:
        state.remove(node_id)
        self._detector.forget(node_id)
        self._state_store.save(state)
