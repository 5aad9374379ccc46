# src/docmirror/core/state_store.py
"""Load and save SyncState as a single JSON blob.

Corrupt state degrades to an empty state rather than aborting the run:
the cost is re-exporting everything once, which is recoverable, while
refusing to run is not.
"""

import json

import structlog

from docmirror.contracts.protocols import PropertyStore
from docmirror.contracts.state import StateFormatError, SyncState
from docmirror.core.properties import STATE_KEY

logger = structlog.get_logger(__name__)


class StateStore:
    """Persistence port for SyncState.

    save() is called by the walker right after each entry mutation, so a
    crash loses at most the in-flight node's update.
    """

    def __init__(self, properties: PropertyStore, *, key: str = STATE_KEY) -> None:
        self._properties = properties
        self._key = key

    def load(self) -> SyncState:
        """Return the persisted state, or an empty state if missing or unreadable."""
        raw = self._properties.get_property(self._key)
        if not raw:
            return SyncState()
        try:
            return SyncState.from_dict(json.loads(raw))
        except (json.JSONDecodeError, StateFormatError) as e:
            logger.warning("Persisted state is corrupt, starting fresh", key=self._key, error=str(e))
            return SyncState()

    def save(self, state: SyncState) -> None:
        """Overwrite the persisted state."""
        self._properties.set_property(self._key, json.dumps(state.to_dict(), separators=(",", ":")))
