# src/docmirror/contracts/config/runtime.py
"""Runtime configuration dataclasses.

Frozen dataclasses built from Settings objects by factory methods
(from_settings(), default(), no_retry()). The engine only sees these,
never the Pydantic models.
"""

from dataclasses import dataclass
from typing import TYPE_CHECKING

from docmirror.contracts.config.defaults import INTERNAL_DEFAULTS, POLICY_DEFAULTS

# Settings classes are imported lazily to keep contracts a leaf package.
if TYPE_CHECKING:
    from docmirror.core.config import DocmirrorSettings, LockSettings, RetrySettings, SyncSettings


@dataclass(frozen=True, slots=True)
class RuntimeRetryConfig:
    """Runtime configuration for retry behavior.

    Field Origins:
        - max_attempts: RetrySettings.max_retries + 1
        - base_delay: RetrySettings.initial_backoff_seconds (renamed)
        - max_delay: RetrySettings.max_backoff_seconds (renamed)
        - exponential_base: RetrySettings.exponential_base (direct mapping)
        - jitter: INTERNAL - see INTERNAL_DEFAULTS["retry"]["jitter"]

    Note: max_attempts is the TOTAL number of tries, not the number of retries.
    So max_attempts=4 means: try, retry, retry, retry (4 total).
    """

    max_attempts: int
    base_delay: float  # seconds
    max_delay: float  # seconds
    jitter: float  # seconds
    exponential_base: float  # backoff multiplier

    def __post_init__(self) -> None:
        """Validate configuration values."""
        if self.max_attempts < 1:
            raise ValueError("max_attempts must be >= 1")
        if self.base_delay < 0 or self.max_delay < 0 or self.jitter < 0:
            raise ValueError("delays must be >= 0")
        if self.exponential_base < 1:
            raise ValueError("exponential_base must be >= 1")

    @property
    def max_retries(self) -> int:
        return self.max_attempts - 1

    def delay_for(self, attempt: int) -> float:
        """Backoff before retrying after 0-based `attempt` failed (jitter excluded)."""
        return min(self.base_delay * self.exponential_base**attempt, self.max_delay)

    @classmethod
    def default(cls) -> "RuntimeRetryConfig":
        """Factory for default retry configuration."""
        return cls(
            max_attempts=int(POLICY_DEFAULTS["max_attempts"]),
            base_delay=float(POLICY_DEFAULTS["base_delay"]),
            max_delay=float(POLICY_DEFAULTS["max_delay"]),
            jitter=float(POLICY_DEFAULTS["jitter"]),
            exponential_base=float(POLICY_DEFAULTS["exponential_base"]),
        )

    @classmethod
    def no_retry(cls) -> "RuntimeRetryConfig":
        """Factory for no-retry configuration (single attempt, no waiting)."""
        return cls(
            max_attempts=1,
            base_delay=0.0,
            max_delay=0.0,
            jitter=0.0,
            exponential_base=float(POLICY_DEFAULTS["exponential_base"]),
        )

    @classmethod
    def from_settings(cls, settings: "RetrySettings") -> "RuntimeRetryConfig":
        """Factory from RetrySettings config model.

        Field Mapping:
            settings.max_retries -> max_attempts (+1 for the first try)
            settings.initial_backoff_seconds -> base_delay
            settings.max_backoff_seconds -> max_delay
            settings.exponential_base -> exponential_base
            jitter <- INTERNAL_DEFAULTS["retry"]["jitter"]
        """
        return cls(
            max_attempts=settings.max_retries + 1,
            base_delay=settings.initial_backoff_seconds,
            max_delay=settings.max_backoff_seconds,
            jitter=float(INTERNAL_DEFAULTS["retry"]["jitter"]),
            exponential_base=settings.exponential_base,
        )


@dataclass(frozen=True, slots=True)
class RuntimeSyncConfig:
    """Runtime configuration for the hierarchy walker.

    Field Origins:
        - document_id: SourceSettings.document_id
        - root_folder_id: DestinationSettings.root_folder_id
        - file_suffix: DestinationSettings.file_suffix
        - delay_between_exports: SyncSettings.delay_between_exports_seconds
        - max_depth: SyncSettings.max_depth
    """

    document_id: str
    root_folder_id: str
    file_suffix: str = ".pdf"
    delay_between_exports: float = 2.5
    max_depth: int = 32

    def __post_init__(self) -> None:
        if self.max_depth < 1:
            raise ValueError("max_depth must be >= 1")
        if self.delay_between_exports < 0:
            raise ValueError("delay_between_exports must be >= 0")

    def artifact_name(self, title: str) -> str:
        return f"{title}{self.file_suffix}"

    @classmethod
    def from_settings(cls, settings: "DocmirrorSettings") -> "RuntimeSyncConfig":
        sync: SyncSettings = settings.sync
        return cls(
            document_id=settings.source.document_id,
            root_folder_id=settings.destination.root_folder_id,
            file_suffix=settings.destination.file_suffix,
            delay_between_exports=sync.delay_between_exports_seconds,
            max_depth=sync.max_depth,
        )


@dataclass(frozen=True, slots=True)
class RuntimeLockConfig:
    """Runtime configuration for the run lock.

    timeout_seconds must exceed the longest possible single run, so a
    lock older than this always belongs to a run that was killed.
    """

    timeout_seconds: float = 540.0

    def __post_init__(self) -> None:
        if self.timeout_seconds <= 0:
            raise ValueError("timeout_seconds must be > 0")

    @classmethod
    def from_settings(cls, settings: "LockSettings") -> "RuntimeLockConfig":
        return cls(timeout_seconds=settings.timeout_seconds)
