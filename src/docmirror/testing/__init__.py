# src/docmirror/testing/__init__.py
"""Test infrastructure for docmirror.

Factories for source trees plus in-memory fakes of every engine port
(see docmirror.testing.fakes).

Usage:
    from docmirror.testing import make_node
    tree = make_node("a", "A", "body", make_node("b", "B"))
"""

from __future__ import annotations

from docmirror.contracts.nodes import SourceNode
from docmirror.testing.fakes import (
    InMemoryDrive,
    InMemoryPropertyStore,
    RecordingAuditSink,
    ScriptedRenderer,
    StaticSource,
)


def make_node(node_id: str, title: str | None = None, content: str | None = None, *children: SourceNode) -> SourceNode:
    """Build a SourceNode; title defaults to the id, content to 'content of <id>'."""
    return SourceNode(
        id=node_id,
        title=title if title is not None else node_id,
        content=content if content is not None else f"content of {node_id}",
        children=tuple(children),
    )


__all__ = [
    "InMemoryDrive",
    "InMemoryPropertyStore",
    "RecordingAuditSink",
    "ScriptedRenderer",
    "StaticSource",
    "make_node",
]
