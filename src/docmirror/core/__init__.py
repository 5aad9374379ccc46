# src/docmirror/core/__init__.py
"""Core infrastructure: configuration, logging, state database, properties, audit."""

from docmirror.core.audit import AuditTrail, NullAuditSink, SqlAuditSink
from docmirror.core.config import DocmirrorSettings, load_settings
from docmirror.core.database import StateDB
from docmirror.core.logging import configure_logging, run_context
from docmirror.core.properties import (
    FINGERPRINT_PREFIX,
    LAST_RUN_KEY,
    LOCK_KEY,
    STATE_KEY,
    SqlPropertyStore,
    fingerprint_key,
)
from docmirror.core.state_store import StateStore

__all__ = [
    "FINGERPRINT_PREFIX",
    "LAST_RUN_KEY",
    "LOCK_KEY",
    "STATE_KEY",
    "AuditTrail",
    "DocmirrorSettings",
    "NullAuditSink",
    "SqlAuditSink",
    "SqlPropertyStore",
    "StateDB",
    "StateStore",
    "configure_logging",
    "fingerprint_key",
    "load_settings",
    "run_context",
]
