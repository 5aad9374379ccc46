"""Persisted reconciliation state.

SyncState maps node id -> TrackedEntry. It is owned by the run that holds
the run lock and is saved after every mutation (see core.state_store).

Serialized layout (one JSON object, camelCase keys):
    {
      "t.qa3t443mbhc": {
        "fileId": "1mRa53nJL6uaNd...",
        "folderId": "1DjLsB81LqGu...",
        "title": "My Tab Name",
        "parentKey": "ROOT"
      }
    }
"""

from __future__ import annotations

from collections.abc import Iterator, Mapping
from dataclasses import dataclass
from typing import Any, Final

# Parent key for top-level nodes
ROOT_PARENT_KEY: Final = "ROOT"


class StateFormatError(ValueError):
    """Raised when a serialized entry does not have the expected shape."""


@dataclass(slots=True)
class TrackedEntry:
    """Placement record for one ever-seen source node.

    Attributes:
        file_id: Destination artifact id (None until the first successful export)
        folder_id: Destination folder id (only set once the node had children)
        title: Last-synced title
        parent_key: Id of the last-synced logical parent, or ROOT_PARENT_KEY
    """

    file_id: str | None = None
    folder_id: str | None = None
    title: str | None = None
    parent_key: str | None = None

    def to_dict(self) -> dict[str, str | None]:
        return {
            "fileId": self.file_id,
            "folderId": self.folder_id,
            "title": self.title,
            "parentKey": self.parent_key,
        }

    @classmethod
    def from_dict(cls, data: Any) -> TrackedEntry:
        """Build an entry from its serialized form.

        Unknown keys are ignored; missing keys default to None. Values
        must be strings or null.

        Raises:
            StateFormatError: If data is not an object or a value has the wrong type
        """
        if not isinstance(data, Mapping):
            raise StateFormatError(f"Tracked entry must be an object, got {type(data).__name__}")
        values: dict[str, str | None] = {}
        for key in ("fileId", "folderId", "title", "parentKey"):
            value = data.get(key)
            if value is not None and not isinstance(value, str):
                raise StateFormatError(f"Tracked entry field {key!r} must be a string or null, got {type(value).__name__}")
            values[key] = value
        return cls(
            file_id=values["fileId"],
            folder_id=values["folderId"],
            title=values["title"],
            parent_key=values["parentKey"],
        )


class SyncState:
    """Mutable mapping of node id -> TrackedEntry for one run.

    Passed by reference through the walker and reaper. Iteration order is
    insertion order, which is also the persisted order.
    """

    def __init__(self, entries: Mapping[str, TrackedEntry] | None = None) -> None:
        self._entries: dict[str, TrackedEntry] = dict(entries or {})

    def __contains__(self, node_id: object) -> bool:
        return node_id in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[str]:
        return iter(self._entries)

    def get(self, node_id: str) -> TrackedEntry | None:
        return self._entries.get(node_id)

    def ensure(self, node_id: str, title: str) -> tuple[TrackedEntry, bool]:
        """Return the entry for node_id, creating it on first sight.

        Returns:
            (entry, created) - created is True if the entry is new
        """
        entry = self._entries.get(node_id)
        if entry is not None:
            return entry, False
        entry = TrackedEntry(title=title)
        self._entries[node_id] = entry
        return entry, True

    def remove(self, node_id: str) -> TrackedEntry | None:
        return self._entries.pop(node_id, None)

    def node_ids(self) -> list[str]:
        """Snapshot of tracked ids (safe to iterate while removing)."""
        return list(self._entries)

    def to_dict(self) -> dict[str, dict[str, str | None]]:
        return {node_id: entry.to_dict() for node_id, entry in self._entries.items()}

    @classmethod
    def from_dict(cls, data: Any) -> SyncState:
        """Build state from its serialized form.

        Raises:
            StateFormatError: If the top level is not an object or any entry is malformed
        """
        if not isinstance(data, Mapping):
            raise StateFormatError(f"State must be an object, got {type(data).__name__}")
        return cls({str(node_id): TrackedEntry.from_dict(raw) for node_id, raw in data.items()})
