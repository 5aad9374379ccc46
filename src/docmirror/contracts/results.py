"""Operation outcomes and results.

These types answer: "What did an operation produce?"

IMPORTANT:
- Destination backend calls return BackendResult, never raise for remote failure
- The call site decides what each status means for the reconciliation
- RunSummary is reporting only; state is already persisted when it is built
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Generic, TypeVar

from docmirror.contracts.enums import BackendStatus, ItemKind, RunStatus

T = TypeVar("T")


@dataclass(frozen=True, slots=True)
class ItemRef:
    """A file or folder in the destination hierarchy."""

    id: str
    name: str
    kind: ItemKind
    parents: tuple[str, ...] = ()


@dataclass(frozen=True, slots=True)
class BackendResult(Generic[T]):
    """Result of a destination backend call.

    Use the factory methods to create instances.

    Example:
        result = backend.get_item(file_id)
        if result.is_not_found:
            entry.file_id = None  # self-heal: re-export below
    """

    status: BackendStatus
    value: T | None = None
    error: str | None = None

    @classmethod
    def ok(cls, value: T | None = None) -> BackendResult[T]:
        return cls(BackendStatus.OK, value=value)

    @classmethod
    def not_found(cls, error: str | None = None) -> BackendResult[T]:
        return cls(BackendStatus.NOT_FOUND, error=error)

    @classmethod
    def transient(cls, error: str) -> BackendResult[T]:
        return cls(BackendStatus.TRANSIENT_ERROR, error=error)

    @classmethod
    def failed(cls, error: str) -> BackendResult[T]:
        return cls(BackendStatus.ERROR, error=error)

    @property
    def is_ok(self) -> bool:
        return self.status is BackendStatus.OK

    @property
    def is_not_found(self) -> bool:
        return self.status is BackendStatus.NOT_FOUND

    def unwrap(self) -> T:
        """Return the value of an OK result.

        Raises:
            ValueError: If the result is not OK or carries no value
        """
        if self.status is not BackendStatus.OK or self.value is None:
            raise ValueError(f"Cannot unwrap {self.status} result: {self.error}")
        return self.value


@dataclass(frozen=True, slots=True)
class RenderResponse:
    """Raw renderer answer: HTTP-style status plus the artifact bytes on 200."""

    status_code: int
    content: bytes | None = None
    mime_type: str = "application/pdf"

    @property
    def succeeded(self) -> bool:
        return self.status_code == 200 and self.content is not None


@dataclass(frozen=True, slots=True)
class ReapResult:
    """What the orphan reaper did in one pass."""

    removed: tuple[str, ...] = ()
    files_trashed: int = 0
    folders_trashed: int = 0
    retained: tuple[str, ...] = ()  # Orphans kept for a later run


@dataclass(frozen=True, slots=True)
class RunSummary:
    """Summary of one reconcile() invocation (reporting only)."""

    status: RunStatus
    exports: int = 0
    reaped: int = 0
    duration_seconds: float = 0.0
    error: str | None = None
    retained_orphans: tuple[str, ...] = field(default=())
