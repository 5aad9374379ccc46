"""Source tree node contract.

SourceNode is read-only to the reconciliation core. Readers build the
whole tree up front; the walker never calls back into the reader.
"""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass, field


@dataclass(frozen=True, slots=True)
class SourceNode:
    """One node of the source document tree.

    Attributes:
        id: Stable, opaque, unique identifier (survives renames and moves)
        title: Display title; may change between runs
        content: Plain-text body used for change detection
        children: Ordered child nodes (source order is processing order)
    """

    id: str
    title: str
    content: str = ""
    children: tuple[SourceNode, ...] = field(default=())

    def walk(self) -> Iterator[SourceNode]:
        """Yield this node and every descendant, depth-first in source order."""
        yield self
        for child in self.children:
            yield from child.walk()
