"""Status codes and kinds used across subsystem boundaries."""

from enum import StrEnum


class RunStatus(StrEnum):
    """Outcome of a single reconcile() invocation."""

    COMPLETED = "completed"
    FAILED = "failed"
    SKIPPED = "skipped"  # Another run held a live lock


class BackendStatus(StrEnum):
    """Outcome of one destination backend call.

    Remote failures are values, not exceptions. Callers branch on these.
    """

    OK = "ok"
    NOT_FOUND = "not_found"
    TRANSIENT_ERROR = "transient_error"
    ERROR = "error"


class ItemKind(StrEnum):
    """Kind of item stored in the destination hierarchy."""

    FILE = "file"
    FOLDER = "folder"


class AuditAction(StrEnum):
    """Action type recorded in the audit log."""

    SYSTEM = "system"
    INFO = "info"
    EXPORT = "export"
    CLEANUP = "cleanup"
    ERROR = "error"


class AuditStatus(StrEnum):
    """Status column of an audit log entry."""

    SUCCESS = "success"
    WARNING = "warning"
    FAILED = "failed"
