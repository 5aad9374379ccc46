# src/docmirror/engine/walker.py
"""HierarchyWalker: per-node reconciliation, depth-first in source order.

For each node the walker:
1. Marks the id active
2. Ensures a TrackedEntry exists
3. Syncs renames of the tracked artifact and folder
4. Self-heals a tracked artifact that vanished
5. Exports when content changed or no artifact exists
6. Otherwise re-checks placement, only if the logical parent changed
7. Ensures the node's folder and recurses into children (a childless
   node's existing folder is never created, only kept in place and
   reported for pruning once empty)

State is saved right after every entry mutation.
"""

from __future__ import annotations

from dataclasses import dataclass, field

import structlog

from docmirror.contracts.config import RuntimeSyncConfig
from docmirror.contracts.nodes import SourceNode
from docmirror.contracts.state import SyncState, TrackedEntry
from docmirror.core.state_store import StateStore
from docmirror.engine.change_detector import ChangeDetector
from docmirror.engine.clock import DEFAULT_CLOCK, Clock
from docmirror.engine.exporter import ExporterGateway
from docmirror.engine.placement import PlacementManager

logger = structlog.get_logger(__name__)


@dataclass(slots=True)
class WalkContext:
    """Per-run traversal context shared by every recursive call."""

    state: SyncState
    active: set[str] = field(default_factory=set)
    # Active nodes without children that still track a folder
    surplus_folders: list[str] = field(default_factory=list)


class HierarchyWalker:
    """Drives change detection, export and placement for one source tree."""

    def __init__(
        self,
        config: RuntimeSyncConfig,
        exporter: ExporterGateway,
        placement: PlacementManager,
        detector: ChangeDetector,
        state_store: StateStore,
        *,
        clock: Clock | None = None,
    ) -> None:
        self._config = config
        self._exporter = exporter
        self._placement = placement
        self._detector = detector
        self._state_store = state_store
        self._clock = clock if clock is not None else DEFAULT_CLOCK

    def walk(
        self,
        node: SourceNode,
        destination_folder_id: str,
        path: tuple[str, ...],
        ctx: WalkContext,
        parent_key: str,
        *,
        depth: int = 0,
        force_placement: bool = False,
    ) -> int:
        """Reconcile node and its subtree.

        Args:
            node: Source node to reconcile
            destination_folder_id: Folder the node's artifact belongs in
            path: Titles of the ancestors, outermost first (logging only)
            ctx: Run state and active-id set
            parent_key: Id of the logical parent, or ROOT_PARENT_KEY
            depth: Nesting level of node (top-level nodes are 0)
            force_placement: Re-check placement even if parent_key is unchanged

        Returns:
            Number of successful exports in this subtree
        """
        ctx.active.add(node.id)

        if depth >= self._config.max_depth:
            skipped = self._mark_subtree_active(node, ctx.active)
            logger.warning("Max depth reached, subtree not reconciled", node_id=node.id, depth=depth, skipped_nodes=skipped)
            return 0

        entry, created = ctx.state.ensure(node.id, node.title)
        if created:
            self._save(ctx)

        previous_parent_key = entry.parent_key
        relocated = previous_parent_key != parent_key or force_placement

        self._sync_title(node, entry, ctx)
        self._verify_artifact(node, entry, ctx)

        exports = 0
        current = self._detector.fingerprint(node)
        if self._detector.has_changed(node.id, current) or entry.file_id is None:
            ref = self._exporter.export(
                self._config.document_id,
                node.id,
                self._config.artifact_name(node.title),
                destination_folder_id,
                replaces=entry.file_id,
            )
            if ref is None:
                logger.info("Export not completed, node stays pending", node_id=node.id, path=" / ".join((*path, node.title)))
            else:
                self._detector.remember(node.id, current)
                entry.file_id = ref.id
                entry.parent_key = parent_key
                self._save(ctx)
                exports += 1
                self._clock.sleep(self._config.delay_between_exports)
        elif relocated and entry.file_id is not None:
            moved = self._placement.move_to(entry.file_id, destination_folder_id)
            if moved.is_ok:
                if entry.parent_key != parent_key:
                    entry.parent_key = parent_key
                    self._save(ctx)
            else:
                logger.warning("Artifact placement not corrected", node_id=node.id, file_id=entry.file_id, status=moved.status)

        if not node.children and entry.folder_id is None:
            return exports

        # A childless node keeps its folder, which still has to follow the node.
        folder_id, folder_placed, force_children = self._ensure_folder(
            node, entry, destination_folder_id, relocated, ctx, create=bool(node.children)
        )
        if not folder_placed and entry.parent_key != previous_parent_key:
            # Folder move still owed; keep the old key so the next run re-checks.
            entry.parent_key = previous_parent_key
            self._save(ctx)
        if not node.children:
            if entry.folder_id is not None:
                ctx.surplus_folders.append(node.id)
            return exports
        if folder_id is None:
            skipped = self._mark_subtree_active(node, ctx.active)
            logger.warning("No destination folder, children skipped this run", node_id=node.id, skipped_nodes=skipped)
            return exports

        child_path = (*path, node.title)
        for child in node.children:
            exports += self.walk(
                child,
                folder_id,
                child_path,
                ctx,
                node.id,
                depth=depth + 1,
                force_placement=force_children,
            )
        return exports

    def _save(self, ctx: WalkContext) -> None:
        self._state_store.save(ctx.state)

    def _sync_title(self, node: SourceNode, entry: TrackedEntry, ctx: WalkContext) -> None:
        if entry.title == node.title:
            return
        renamed = True
        if entry.file_id is not None:
            result = self._placement.rename(entry.file_id, self._config.artifact_name(node.title))
            renamed = renamed and (result.is_ok or result.is_not_found)
        if entry.folder_id is not None:
            result = self._placement.rename(entry.folder_id, node.title)
            renamed = renamed and (result.is_ok or result.is_not_found)
        if renamed:
            logger.info("Title synced", node_id=node.id, old_title=entry.title, title=node.title)
            entry.title = node.title
            self._save(ctx)

    def _verify_artifact(self, node: SourceNode, entry: TrackedEntry, ctx: WalkContext) -> None:
        if entry.file_id is None:
            return
        # Only NOT_FOUND counts; an unanswered check must not trigger a re-export.
        if self._placement.lookup(entry.file_id).is_not_found:
            logger.info("Tracked artifact vanished, will re-export", node_id=node.id, file_id=entry.file_id)
            entry.file_id = None
            self._save(ctx)

    def _ensure_folder(
        self,
        node: SourceNode,
        entry: TrackedEntry,
        destination_folder_id: str,
        relocated: bool,
        ctx: WalkContext,
        *,
        create: bool = True,
    ) -> tuple[str | None, bool, bool]:
        """Find, move or create the node's folder.

        With create=False a vanished folder is forgotten, not recreated.

        Returns:
            (folder id or None, whether the folder is correctly placed,
            whether children must re-check their placement)
        """
        if entry.folder_id is not None:
            if not self._placement.lookup(entry.folder_id).is_not_found:
                if not relocated:
                    return entry.folder_id, True, False
                moved = self._placement.move_to(entry.folder_id, destination_folder_id)
                if not moved.is_ok:
                    logger.warning("Folder placement not corrected", node_id=node.id, folder_id=entry.folder_id, status=moved.status)
                return entry.folder_id, moved.is_ok, False
            logger.info("Tracked folder vanished", node_id=node.id, folder_id=entry.folder_id)
            entry.folder_id = None
            self._save(ctx)
            if not create:
                return None, True, False

        ensured = self._placement.ensure_folder(destination_folder_id, node.title)
        if not ensured.is_ok or ensured.value is None:
            logger.warning("Folder unavailable", node_id=node.id, status=ensured.status, error=ensured.error)
            return None, False, False
        entry.folder_id = ensured.value.id
        self._save(ctx)
        return entry.folder_id, True, True

    @staticmethod
    def _mark_subtree_active(node: SourceNode, active: set[str]) -> int:
        count = 0
        for descendant in node.walk():
            active.add(descendant.id)
            count += 1
        return count
