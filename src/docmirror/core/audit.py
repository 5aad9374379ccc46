# src/docmirror/core/audit.py
"""Audit log: an append-only record of what each run did.

The audit log is best-effort. A failing sink must never fail a run, so
AuditTrail logs and swallows every sink error.
"""

from datetime import UTC, datetime

import structlog
from sqlalchemy import select

from docmirror.contracts.enums import AuditAction, AuditStatus
from docmirror.contracts.protocols import AuditSink
from docmirror.core.database import StateDB
from docmirror.core.schema import audit_log_table

logger = structlog.get_logger(__name__)


class SqlAuditSink:
    """AuditSink writing one row per record to the audit_log table."""

    def __init__(self, db: StateDB) -> None:
        self._db = db

    def record(self, action: AuditAction, message: str, status: AuditStatus) -> None:
        with self._db.engine.begin() as conn:
            conn.execute(
                audit_log_table.insert().values(
                    recorded_at=datetime.now(UTC),
                    action=action.value,
                    message=message,
                    status=status.value,
                )
            )

    def recent(self, limit: int = 20) -> list[tuple[datetime, str, str, str]]:
        """Most recent entries, newest first."""
        query = select(audit_log_table).order_by(audit_log_table.c.id.desc()).limit(limit)
        with self._db.engine.connect() as conn:
            return [(row.recorded_at, row.action, row.message, row.status) for row in conn.execute(query)]


class NullAuditSink:
    """AuditSink used when auditing is disabled."""

    def record(self, action: AuditAction, message: str, status: AuditStatus) -> None:
        return None


class AuditTrail:
    """Best-effort front for an AuditSink.

    Example:
        audit = AuditTrail(SqlAuditSink(db))
        audit.record(AuditAction.CLEANUP, "Deleted PDF for removed tab", AuditStatus.SUCCESS)
    """

    def __init__(self, sink: AuditSink | None = None) -> None:
        self._sink: AuditSink = sink if sink is not None else NullAuditSink()

    def record(self, action: AuditAction, message: str, status: AuditStatus) -> None:
        try:
            self._sink.record(action, message, status)
        except Exception as e:
            logger.warning(
                "Audit record dropped",
                action=action.value,
                audit_message=message,
                error=str(e),
                error_type=type(e).__name__,
            )
