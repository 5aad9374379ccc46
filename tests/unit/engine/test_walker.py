# tests/unit/engine/test_walker.py
"""Tests for HierarchyWalker: per-node export, rename and placement decisions."""

from __future__ import annotations

from dataclasses import dataclass

import pytest

from docmirror.contracts.config import RuntimeRetryConfig, RuntimeSyncConfig
from docmirror.contracts.enums import BackendStatus
from docmirror.contracts.nodes import SourceNode
from docmirror.contracts.state import ROOT_PARENT_KEY, SyncState
from docmirror.core.state_store import StateStore
from docmirror.engine.change_detector import ChangeDetector
from docmirror.engine.clock import MockClock
from docmirror.engine.exporter import ExporterGateway
from docmirror.engine.placement import PlacementManager
from docmirror.engine.retry import RetryManager
from docmirror.engine.walker import HierarchyWalker, WalkContext
from docmirror.testing import InMemoryDrive, InMemoryPropertyStore, ScriptedRenderer, make_node


@dataclass
class WalkerHarness:
    walker: HierarchyWalker
    store: StateStore
    ctx: WalkContext

    def walk_all(self, *nodes: SourceNode) -> int:
        self.ctx.active.clear()
        self.ctx.surplus_folders.clear()
        return sum(self.walker.walk(node, "root", (), self.ctx, ROOT_PARENT_KEY) for node in nodes)


@pytest.fixture
def harness(
    drive: InMemoryDrive,
    renderer: ScriptedRenderer,
    properties: InMemoryPropertyStore,
    clock: MockClock,
    sync_config: RuntimeSyncConfig,
) -> WalkerHarness:
    store = StateStore(properties)
    exporter = ExporterGateway(renderer, drive, RetryManager(RuntimeRetryConfig.no_retry(), clock=clock))
    walker = HierarchyWalker(
        sync_config,
        exporter,
        PlacementManager(drive),
        ChangeDetector(properties),
        store,
        clock=clock,
    )
    return WalkerHarness(walker=walker, store=store, ctx=WalkContext(state=SyncState()))


class TestExport:
    def test_new_leaf_is_exported_and_tracked(self, harness: WalkerHarness, drive: InMemoryDrive) -> None:
        exports = harness.walk_all(make_node("a", "A"))

        assert exports == 1
        entry = harness.ctx.state.get("a")
        assert entry is not None
        assert entry.parent_key == ROOT_PARENT_KEY
        assert entry.folder_id is None
        assert drive.item(entry.file_id).name == "A.pdf"
        assert harness.ctx.active == {"a"}

    def test_parent_gets_artifact_and_folder(self, harness: WalkerHarness, drive: InMemoryDrive) -> None:
        tree = make_node("a", "A", None, make_node("b", "B"))

        assert harness.walk_all(tree) == 2
        assert drive.tree() == {"A": {"B.pdf": None}, "A.pdf": None}
        assert harness.ctx.state.get("b").parent_key == "a"

    def test_unchanged_node_is_not_exported_again(self, harness: WalkerHarness, renderer: ScriptedRenderer) -> None:
        harness.walk_all(make_node("a", "A"))
        renderer.calls.clear()

        assert harness.walk_all(make_node("a", "A")) == 0
        assert renderer.calls == []

    def test_changed_content_re_exports_in_place(self, harness: WalkerHarness, drive: InMemoryDrive) -> None:
        harness.walk_all(make_node("a", "A", "v1"))
        old_file = harness.ctx.state.get("a").file_id

        assert harness.walk_all(make_node("a", "A", "v2")) == 1

        assert drive.is_trashed(old_file)
        assert drive.tree() == {"A.pdf": None}

    def test_failed_export_leaves_entry_pending(
        self,
        harness: WalkerHarness,
        renderer: ScriptedRenderer,
        properties: InMemoryPropertyStore,
    ) -> None:
        renderer.default_status = 500

        assert harness.walk_all(make_node("a", "A")) == 0

        entry = harness.ctx.state.get("a")
        assert entry.file_id is None
        assert "hash_a" not in properties.data
        assert harness.ctx.active == {"a"}

    def test_sleeps_between_exports(self, harness: WalkerHarness, clock: MockClock, sync_config: RuntimeSyncConfig) -> None:
        harness.walk_all(make_node("a"), make_node("b"))

        assert clock.sleeps == [sync_config.delay_between_exports] * 2

    def test_state_saved_after_export(self, harness: WalkerHarness) -> None:
        harness.walk_all(make_node("a", "A"))

        assert harness.store.load().get("a").file_id == harness.ctx.state.get("a").file_id


class TestSelfHeal:
    def test_vanished_artifact_is_re_exported(self, harness: WalkerHarness, drive: InMemoryDrive) -> None:
        harness.walk_all(make_node("a", "A"))
        drive.delete(harness.ctx.state.get("a").file_id)

        assert harness.walk_all(make_node("a", "A")) == 1
        assert drive.tree() == {"A.pdf": None}

    def test_unanswered_lookup_does_not_re_export(self, harness: WalkerHarness, drive: InMemoryDrive) -> None:
        harness.walk_all(make_node("a", "A"))
        drive.fail_next("get_item", BackendStatus.TRANSIENT_ERROR)

        assert harness.walk_all(make_node("a", "A")) == 0
        assert harness.ctx.state.get("a").file_id is not None

    def test_vanished_folder_is_recreated_and_children_moved(self, harness: WalkerHarness, drive: InMemoryDrive) -> None:
        tree = make_node("a", "A", None, make_node("b", "B"))
        harness.walk_all(tree)
        old_folder = harness.ctx.state.get("a").folder_id
        child_file = harness.ctx.state.get("b").file_id
        # Only the folder goes; the child artifact survives under a second parent.
        drive.add_parent(child_file, "root")
        drive.delete(old_folder)

        harness.walk_all(tree)

        new_folder = harness.ctx.state.get("a").folder_id
        assert new_folder != old_folder
        assert drive.item(child_file).parents == (new_folder,)
        assert drive.tree() == {"A": {"B.pdf": None}, "A.pdf": None}


class TestRename:
    def test_rename_updates_artifact_and_folder_without_render(
        self,
        harness: WalkerHarness,
        drive: InMemoryDrive,
        renderer: ScriptedRenderer,
    ) -> None:
        harness.walk_all(make_node("a", "A", "body", make_node("b", "B")))
        renderer.calls.clear()

        harness.walk_all(make_node("a", "Alpha", "body", make_node("b", "B")))

        assert renderer.calls == []
        assert drive.tree() == {"Alpha": {"B.pdf": None}, "Alpha.pdf": None}
        assert harness.ctx.state.get("a").title == "Alpha"

    def test_failed_rename_is_retried_next_walk(self, harness: WalkerHarness, drive: InMemoryDrive) -> None:
        harness.walk_all(make_node("a", "A"))
        drive.fail_next("rename", BackendStatus.TRANSIENT_ERROR)

        harness.walk_all(make_node("a", "Alpha"))
        assert harness.ctx.state.get("a").title == "A"

        harness.walk_all(make_node("a", "Alpha"))
        assert harness.ctx.state.get("a").title == "Alpha"
        assert drive.tree() == {"Alpha.pdf": None}


class TestPlacement:
    def test_move_between_parents_without_re_export(
        self,
        harness: WalkerHarness,
        drive: InMemoryDrive,
        renderer: ScriptedRenderer,
    ) -> None:
        harness.walk_all(make_node("a", "A", None, make_node("c", "C")), make_node("b", "B", None, make_node("x", "X")))
        renderer.calls.clear()

        harness.walk_all(make_node("a", "A"), make_node("b", "B", None, make_node("x", "X"), make_node("c", "C")))

        assert renderer.calls == []
        assert drive.tree()["B"] == {"C.pdf": None, "X.pdf": None}
        assert harness.ctx.state.get("c").parent_key == "b"

    def test_placement_checked_only_when_parent_changes(self, harness: WalkerHarness, drive: InMemoryDrive) -> None:
        tree = make_node("a", "A", None, make_node("b", "B"))
        harness.walk_all(tree)
        drive.reset_calls()

        harness.walk_all(tree)

        assert drive.count("list_parents") == 0
        assert drive.mutations() == 0

    def test_failed_move_keeps_old_parent_key(self, harness: WalkerHarness, drive: InMemoryDrive) -> None:
        harness.walk_all(make_node("a", "A", None, make_node("c", "C")), make_node("b", "B", None, make_node("x", "X")))
        moved = (make_node("a", "A"), make_node("b", "B", None, make_node("x", "X"), make_node("c", "C")))
        drive.fail_next("add_parent", BackendStatus.TRANSIENT_ERROR)

        harness.walk_all(*moved)
        assert harness.ctx.state.get("c").parent_key == "a"

        harness.walk_all(*moved)
        assert harness.ctx.state.get("c").parent_key == "b"
        assert "C.pdf" in drive.tree()["B"]


class TestFolders:
    def test_folder_unavailable_skips_children_but_keeps_them_active(
        self,
        harness: WalkerHarness,
        drive: InMemoryDrive,
    ) -> None:
        tree = make_node("a", "A", None, make_node("b", "B", None, make_node("c", "C")))
        # Artifact listing, then folder lookup.
        drive.fail_next("find_by_name", BackendStatus.TRANSIENT_ERROR, times=2)

        harness.walk_all(tree)

        assert harness.ctx.active == {"a", "b", "c"}
        assert "b" not in harness.ctx.state

    def test_existing_same_named_folder_is_adopted(self, harness: WalkerHarness, drive: InMemoryDrive) -> None:
        existing = drive.add_folder("root", "A")

        harness.walk_all(make_node("a", "A", None, make_node("b", "B")))

        assert harness.ctx.state.get("a").folder_id == existing
        assert drive.count("create_folder") == 0

    def test_childless_node_folder_follows_move(self, harness: WalkerHarness, drive: InMemoryDrive) -> None:
        harness.walk_all(make_node("a", "A", None, make_node("b", "B", None, make_node("c", "C"))))
        b_folder = harness.ctx.state.get("b").folder_id

        harness.walk_all(make_node("a", "A"), make_node("b", "B"), make_node("c", "C"))

        assert drive.item(b_folder).parents == ("root",)
        assert drive.tree()["A"] == {}

    def test_childless_node_does_not_recreate_vanished_folder(self, harness: WalkerHarness, drive: InMemoryDrive) -> None:
        harness.walk_all(make_node("a", "A", None, make_node("b", "B")))
        drive.delete(harness.ctx.state.get("a").folder_id)
        drive.reset_calls()

        harness.walk_all(make_node("a", "A"))

        assert harness.ctx.state.get("a").folder_id is None
        assert drive.count("create_folder") == 0
        assert harness.ctx.surplus_folders == []

    def test_childless_node_with_folder_is_reported_as_surplus(self, harness: WalkerHarness, drive: InMemoryDrive) -> None:
        harness.walk_all(make_node("a", "A", None, make_node("b", "B")))
        assert harness.ctx.surplus_folders == []

        harness.walk_all(make_node("a", "A"), make_node("b", "B"))

        assert harness.ctx.surplus_folders == ["a"]
        # Pruning is left to the reaper; the walker keeps the folder.
        assert not drive.is_trashed(harness.ctx.state.get("a").folder_id)


class TestMaxDepth:
    def test_nodes_beyond_max_depth_are_active_but_untouched(
        self,
        harness: WalkerHarness,
        drive: InMemoryDrive,
        renderer: ScriptedRenderer,
        properties: InMemoryPropertyStore,
        clock: MockClock,
    ) -> None:
        config = RuntimeSyncConfig(document_id="doc-1", root_folder_id="root", max_depth=2)
        store = StateStore(properties)
        walker = HierarchyWalker(
            config,
            ExporterGateway(renderer, drive, RetryManager(RuntimeRetryConfig.no_retry(), clock=clock)),
            PlacementManager(drive),
            ChangeDetector(properties),
            store,
            clock=clock,
        )
        ctx = WalkContext(state=SyncState())
        tree = make_node("a", "A", None, make_node("b", "B", None, make_node("c", "C", None, make_node("d", "D"))))

        walker.walk(tree, "root", (), ctx, ROOT_PARENT_KEY)

        assert ctx.active == {"a", "b", "c", "d"}
        assert renderer.rendered_ids() == ["a", "b"]
        assert "c" not in ctx.state


class TestArtifactNaming:
    def test_export_and_rename_share_the_configured_suffix(
        self,
        drive: InMemoryDrive,
        renderer: ScriptedRenderer,
        properties: InMemoryPropertyStore,
        clock: MockClock,
    ) -> None:
        config = RuntimeSyncConfig(document_id="doc-1", root_folder_id="root", file_suffix=".PDF")
        walker = HierarchyWalker(
            config,
            ExporterGateway(renderer, drive, RetryManager(RuntimeRetryConfig.no_retry(), clock=clock)),
            PlacementManager(drive),
            ChangeDetector(properties),
            StateStore(properties),
            clock=clock,
        )
        ctx = WalkContext(state=SyncState())

        walker.walk(make_node("a", "Intro"), "root", (), ctx, ROOT_PARENT_KEY)
        assert drive.tree() == {"Intro.PDF": None}

        walker.walk(make_node("a", "Preface"), "root", (), ctx, ROOT_PARENT_KEY)

        assert drive.tree() == {"Preface.PDF": None}
        assert renderer.rendered_ids() == ["a"]
