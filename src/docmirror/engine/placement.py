# src/docmirror/engine/placement.py
"""PlacementManager: idempotent folder/move/rename operations.

The destination models membership as multi-parent. Adding a parent
without removing the old ones leaves the item visible in two places, so
move_to() always reconciles the full parent set against the target.
"""

from __future__ import annotations

import structlog

from docmirror.contracts.enums import ItemKind
from docmirror.contracts.protocols import DestinationBackend
from docmirror.contracts.results import BackendResult, ItemRef

logger = structlog.get_logger(__name__)


class PlacementManager:
    """Thin policy layer over a DestinationBackend.

    Every method returns a BackendResult; the walker decides what a
    non-OK status means at its call site.
    """

    def __init__(self, backend: DestinationBackend) -> None:
        self._backend = backend

    def ensure_folder(self, parent_id: str, name: str) -> BackendResult[ItemRef]:
        """Return the child folder called name, creating it if absent."""
        found = self._backend.find_by_name(parent_id, name, ItemKind.FOLDER)
        if not found.is_ok:
            return BackendResult(found.status, error=found.error)
        matches = found.value or []
        if matches:
            if len(matches) > 1:
                logger.warning("Several folders share a name, using the first", parent_id=parent_id, name=name, count=len(matches))
            return BackendResult.ok(matches[0])
        logger.info("Creating folder", parent_id=parent_id, name=name)
        return self._backend.create_folder(parent_id, name)

    def move_to(self, item_id: str, target_parent_id: str) -> BackendResult[bool]:
        """Make target_parent_id the item's only parent.

        Returns:
            OK(True) if anything changed, OK(False) if already in place,
            otherwise the first failing backend status
        """
        parents = self._backend.list_parents(item_id)
        if not parents.is_ok:
            return BackendResult(parents.status, error=parents.error)
        current = parents.value or []

        changed = False
        if target_parent_id not in current:
            added = self._backend.add_parent(item_id, target_parent_id)
            if not added.is_ok:
                return BackendResult(added.status, error=added.error)
            changed = True
        for parent_id in current:
            if parent_id == target_parent_id:
                continue
            removed = self._backend.remove_parent(item_id, parent_id)
            if not removed.is_ok:
                return BackendResult(removed.status, error=removed.error)
            changed = True

        if changed:
            logger.info("Moved item", item_id=item_id, target_parent_id=target_parent_id, previous_parents=current)
        return BackendResult.ok(changed)

    def rename(self, item_id: str, name: str) -> BackendResult[None]:
        result = self._backend.rename(item_id, name)
        if result.is_ok:
            logger.info("Renamed item", item_id=item_id, name=name)
        else:
            logger.warning("Rename failed", item_id=item_id, name=name, status=result.status, error=result.error)
        return result

    def lookup(self, item_id: str) -> BackendResult[ItemRef]:
        """Existence check for a tracked id (trashed items report NOT_FOUND)."""
        return self._backend.get_item(item_id)
