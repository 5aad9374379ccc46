"""Ports the reconciliation core requires from its collaborators.

The engine only depends on these Protocols. Google adapters live in
docmirror.plugins.google; in-memory fakes live in docmirror.testing.
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from docmirror.contracts.enums import AuditAction, AuditStatus, ItemKind
from docmirror.contracts.nodes import SourceNode
from docmirror.contracts.results import BackendResult, ItemRef, RenderResponse


@runtime_checkable
class SourceReader(Protocol):
    """Reads the source tree.

    Implementations return only the recognized node kind; other kinds
    (and their subtrees) are filtered out before the core sees them.
    """

    def list_top_level_nodes(self) -> list[SourceNode]: ...


@runtime_checkable
class DestinationBackend(Protocol):
    """Folder/file storage with multi-parent membership.

    Every method returns a BackendResult. Trashed items report NOT_FOUND.
    """

    def get_item(self, item_id: str) -> BackendResult[ItemRef]: ...

    def create_folder(self, parent_id: str, name: str) -> BackendResult[ItemRef]: ...

    def create_file(self, parent_id: str, name: str, content: bytes, mime_type: str) -> BackendResult[ItemRef]: ...

    def rename(self, item_id: str, name: str) -> BackendResult[None]: ...

    def trash(self, item_id: str) -> BackendResult[None]: ...

    def list_children(self, folder_id: str) -> BackendResult[list[ItemRef]]: ...

    def find_by_name(self, parent_id: str, name: str, kind: ItemKind) -> BackendResult[list[ItemRef]]: ...

    def list_parents(self, item_id: str) -> BackendResult[list[str]]: ...

    def add_parent(self, item_id: str, parent_id: str) -> BackendResult[None]: ...

    def remove_parent(self, item_id: str, parent_id: str) -> BackendResult[None]: ...


@runtime_checkable
class Renderer(Protocol):
    """Turns one source node into a downloadable artifact.

    Returns the HTTP-style status as-is. Transport failures may raise;
    the ExporterGateway retries them.
    """

    def render(self, document_id: str, node_id: str) -> RenderResponse: ...


@runtime_checkable
class PropertyStore(Protocol):
    """Persisted string key/value store.

    Holds the run lock, the serialized state, per-node fingerprints and
    the last-run timestamp. Each set/delete is atomic on its own.
    """

    def get_property(self, key: str) -> str | None: ...

    def set_property(self, key: str, value: str) -> None: ...

    def delete_property(self, key: str) -> None: ...

    def delete_all_properties(self) -> None: ...

    def keys(self, prefix: str = "") -> list[str]: ...


@runtime_checkable
class AuditSink(Protocol):
    """Append-only audit record: (timestamp, action, message, status).

    The timestamp is assigned by the sink.
    """

    def record(self, action: AuditAction, message: str, status: AuditStatus) -> None: ...
