# src/docmirror/engine/change_detector.py
"""Content fingerprinting for change detection.

A fingerprint is a SHA-256 hex digest of the node's normalized text:
Unicode NFC, and CRLF/CR line endings folded to LF. The same content
therefore yields the same fingerprint on every platform and run.

Fingerprints are stored per node under hash_<nodeId>, separate from the
state blob, so either can be invalidated without the other.
"""

import hashlib
import unicodedata

from docmirror.contracts.nodes import SourceNode
from docmirror.contracts.protocols import PropertyStore
from docmirror.core.properties import fingerprint_key


def normalize_content(text: str) -> str:
    """Normalize text before hashing."""
    text = text.replace("\r\n", "\n").replace("\r", "\n")
    return unicodedata.normalize("NFC", text)


def fingerprint(node: SourceNode) -> str:
    """Deterministic digest of a node's content (title is not included)."""
    return hashlib.sha256(normalize_content(node.content).encode("utf-8")).hexdigest()


class ChangeDetector:
    """Compares node fingerprints against the last persisted ones."""

    def __init__(self, properties: PropertyStore) -> None:
        self._properties = properties

    def fingerprint(self, node: SourceNode) -> str:
        return fingerprint(node)

    def stored(self, node_id: str) -> str | None:
        return self._properties.get_property(fingerprint_key(node_id))

    def has_changed(self, node_id: str, current: str) -> bool:
        """True if current differs from the stored fingerprint (missing counts as changed)."""
        return self.stored(node_id) != current

    def remember(self, node_id: str, current: str) -> None:
        self._properties.set_property(fingerprint_key(node_id), current)

    def forget(self, node_id: str) -> None:
        self._properties.delete_property(fingerprint_key(node_id))
