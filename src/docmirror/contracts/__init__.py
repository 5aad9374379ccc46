"""Shared contracts for cross-boundary data types.

All dataclasses, enums and Protocols that cross subsystem boundaries are
defined here. This package is a LEAF MODULE with no outbound dependencies
to core/engine/plugins.

Import patterns:
    # Contracts (lightweight, no heavy dependencies)
    from docmirror.contracts import SourceNode, SyncState, BackendResult

    # Settings classes (from core)
    from docmirror.core.config import RetrySettings, DocmirrorSettings
"""

from docmirror.contracts.enums import AuditAction, AuditStatus, BackendStatus, ItemKind, RunStatus
from docmirror.contracts.errors import (
    ConfigurationError,
    DocmirrorError,
    RenderFailedError,
    RendererUnavailableError,
    SourceReadError,
)
from docmirror.contracts.nodes import SourceNode
from docmirror.contracts.protocols import AuditSink, DestinationBackend, PropertyStore, Renderer, SourceReader
from docmirror.contracts.results import BackendResult, ItemRef, ReapResult, RenderResponse, RunSummary
from docmirror.contracts.state import ROOT_PARENT_KEY, StateFormatError, SyncState, TrackedEntry

__all__ = [
    "ROOT_PARENT_KEY",
    "AuditAction",
    "AuditSink",
    "AuditStatus",
    "BackendResult",
    "BackendStatus",
    "ConfigurationError",
    "DestinationBackend",
    "DocmirrorError",
    "ItemKind",
    "ItemRef",
    "PropertyStore",
    "ReapResult",
    "RenderFailedError",
    "RenderResponse",
    "Renderer",
    "RendererUnavailableError",
    "RunStatus",
    "RunSummary",
    "SourceNode",
    "SourceReadError",
    "SourceReader",
    "StateFormatError",
    "SyncState",
    "TrackedEntry",
]
