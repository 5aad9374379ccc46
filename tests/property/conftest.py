# tests/property/conftest.py
"""Hypothesis strategies for source trees.

Node ids come from a fixed pool so that two independently drawn forests
share ids, which turns the second one into an edit of the first:
renames, moves, content changes, additions and removals.

Titles are '<ID><variant>', unique per node, so sibling artifacts never
collide by name while renames are still exercised.
"""

from __future__ import annotations

from typing import Any

from hypothesis import strategies as st

from docmirror.contracts.nodes import SourceNode

NODE_POOL = tuple(f"n{i}" for i in range(8))


@st.composite
def forests(draw: st.DrawFn, max_nodes: int = len(NODE_POOL)) -> list[SourceNode]:
    """A list of top-level SourceNodes built from a random parent map."""
    ids = draw(st.lists(st.sampled_from(NODE_POOL), unique=True, min_size=1, max_size=max_nodes))
    parents: dict[str, str | None] = {}
    for index, node_id in enumerate(ids):
        # Parents always come earlier in the list, so the map is acyclic.
        parents[node_id] = draw(st.none() | st.sampled_from(ids[:index])) if index else None
    titles = {node_id: f"{node_id.upper()}{draw(st.sampled_from('abc'))}" for node_id in ids}
    contents = {node_id: draw(st.sampled_from(["alpha", "beta", "gamma\r\n"])) for node_id in ids}

    def build(node_id: str) -> SourceNode:
        return SourceNode(
            id=node_id,
            title=titles[node_id],
            content=contents[node_id],
            children=tuple(build(child) for child in ids if parents[child] == node_id),
        )

    return [build(node_id) for node_id in ids if parents[node_id] is None]


def expected_tree(nodes: list[SourceNode], suffix: str = ".pdf") -> dict[str, Any]:
    """The destination layout a converged mirror of nodes must have."""
    tree: dict[str, Any] = {}
    for node in nodes:
        tree[f"{node.title}{suffix}"] = None
        if node.children:
            tree[node.title] = expected_tree(list(node.children), suffix)
    return tree
