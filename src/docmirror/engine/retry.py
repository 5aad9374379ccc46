# src/docmirror/engine/retry.py
"""RetryManager: Retry logic with tenacity integration.

Provides configurable retry behavior for calls to the renderer:
- Exponential backoff (delay = base_delay * exponential_base ** attempt)
- Configurable max attempts (max_attempts = MAX_RETRIES + 1)
- Retryable error filtering via a predicate
- Sleeping through the injected Clock, so tests never wait
"""

from collections.abc import Callable
from typing import TypeVar

from tenacity import (
    RetryError,
    Retrying,
    retry_if_exception,
    stop_after_attempt,
    wait_exponential_jitter,
)

from docmirror.contracts.config import RuntimeRetryConfig
from docmirror.engine.clock import DEFAULT_CLOCK, Clock

T = TypeVar("T")


class MaxRetriesExceeded(Exception):
    """Raised when max retry attempts are exceeded."""

    def __init__(self, attempts: int, last_error: BaseException) -> None:
        self.attempts = attempts
        self.last_error = last_error
        super().__init__(f"Max retries ({attempts}) exceeded: {last_error}")


class RetryManager:
    """Manages retry logic for renderer calls.

    Example:
        manager = RetryManager(RuntimeRetryConfig.default(), clock=clock)

        response = manager.execute_with_retry(
            operation=lambda: renderer.render(document_id, node_id),
            is_retryable=lambda e: isinstance(e, RenderFailedError),
            on_retry=lambda attempt, error: logger.warning("retrying", attempt=attempt),
        )
    """

    def __init__(self, config: RuntimeRetryConfig, *, clock: Clock | None = None) -> None:
        """Initialize with config.

        Args:
            config: Retry configuration
            clock: Clock whose sleep() performs the backoff (default: system clock)
        """
        self._config = config
        self._clock = clock if clock is not None else DEFAULT_CLOCK

    @property
    def config(self) -> RuntimeRetryConfig:
        return self._config

    def execute_with_retry(
        self,
        operation: Callable[[], T],
        *,
        is_retryable: Callable[[BaseException], bool],
        on_retry: Callable[[int, BaseException], None] | None = None,
    ) -> T:
        """Execute operation with retry logic.

        Args:
            operation: Operation to execute
            is_retryable: Function to check if error is retryable
            on_retry: Optional callback (0-based attempt, error), fired only
                when another attempt will follow

        Returns:
            Result of operation

        Raises:
            MaxRetriesExceeded: If max attempts exceeded
            Exception: If non-retryable error occurs
        """
        attempt = 0
        last_error: BaseException | None = None

        try:
            for attempt_state in Retrying(
                stop=stop_after_attempt(self._config.max_attempts),
                wait=wait_exponential_jitter(
                    multiplier=self._config.base_delay,
                    max=self._config.max_delay,
                    exp_base=self._config.exponential_base,
                    jitter=self._config.jitter,
                ),
                retry=retry_if_exception(is_retryable),
                sleep=self._clock.sleep,
                reraise=False,  # We catch RetryError and convert to MaxRetriesExceeded
            ):
                with attempt_state:
                    attempt = attempt_state.retry_state.attempt_number
                    try:
                        return operation()
                    except Exception as e:
                        last_error = e
                        if on_retry is not None and attempt < self._config.max_attempts and is_retryable(e):
                            on_retry(attempt - 1, e)
                        raise

        except RetryError as e:
            # last_error is always set because RetryError means at least one attempt failed
            final_error = last_error or e.last_attempt.exception()
            assert final_error is not None, "RetryError without exception is impossible"
            raise MaxRetriesExceeded(attempt, final_error) from e

        # Should not reach here - Retrying always returns or raises
        raise RuntimeError("Unexpected state in retry loop")  # pragma: no cover
