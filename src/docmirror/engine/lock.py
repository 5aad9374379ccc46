# src/docmirror/engine/lock.py
"""Advisory run lock stored in the property store.

The lock marker is the acquisition time in epoch milliseconds. A marker
younger than the timeout means another run is live; an older one was
left by a run that was killed before it could release, and is taken over.

The timeout must exceed the longest possible run. The host's execution
ceiling guarantees that, so a stale lock never belongs to a slow run.
"""

from __future__ import annotations

import structlog

from docmirror.contracts.config import RuntimeLockConfig
from docmirror.contracts.enums import AuditAction, AuditStatus
from docmirror.contracts.protocols import PropertyStore
from docmirror.core.audit import AuditTrail
from docmirror.core.properties import LOCK_KEY
from docmirror.engine.clock import DEFAULT_CLOCK, Clock

logger = structlog.get_logger(__name__)


class RunLock:
    """Persisted mutex guarding against overlapping runs."""

    def __init__(
        self,
        properties: PropertyStore,
        config: RuntimeLockConfig,
        *,
        clock: Clock | None = None,
        audit: AuditTrail | None = None,
        key: str = LOCK_KEY,
    ) -> None:
        self._properties = properties
        self._config = config
        self._clock = clock if clock is not None else DEFAULT_CLOCK
        self._audit = audit if audit is not None else AuditTrail()
        self._key = key

    def held_since(self) -> float | None:
        """Acquisition time (epoch seconds) of the current marker, if any parseable one exists."""
        raw = self._properties.get_property(self._key)
        if raw is None:
            return None
        try:
            return int(raw) / 1000.0
        except ValueError:
            return None

    def age_seconds(self) -> float | None:
        since = self.held_since()
        return None if since is None else self._clock.time() - since

    def acquire(self) -> bool:
        """Take the lock unless a live one exists.

        Returns:
            True if the lock is now held by the caller, False if the caller must abort
        """
        now = self._clock.time()
        raw = self._properties.get_property(self._key)
        if raw is not None:
            try:
                age = now - int(raw) / 1000.0
            except ValueError:
                age = None
            if age is not None and age < self._config.timeout_seconds:
                logger.info("Run lock is held, exiting", lock_age_seconds=round(age, 1))
                return False
            logger.warning("Stale run lock detected, taking over", lock_age_seconds=None if age is None else round(age, 1))
            self._audit.record(AuditAction.SYSTEM, "Stale lock detected. Taking over.", AuditStatus.WARNING)

        self._properties.set_property(self._key, str(int(now * 1000)))
        logger.debug("Run lock acquired")
        return True

    def release(self) -> None:
        """Clear the lock marker unconditionally."""
        self._properties.delete_property(self._key)
        logger.debug("Run lock released")
