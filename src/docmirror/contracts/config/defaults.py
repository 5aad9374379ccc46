"""Default value registries for runtime configuration.

INTERNAL_DEFAULTS: Values hardcoded in runtime code, NOT exposed in Settings.
Documented here so the values are visible in one place.

POLICY_DEFAULTS: Defaults for RuntimeRetryConfig.default(). These MUST
match RetrySettings defaults in docmirror.core.config.
"""

from typing import Final

INTERNAL_DEFAULTS: Final[dict[str, dict[str, int | float | bool | str]]] = {
    "retry": {
        # Backoff is deterministic: base_delay * exponential_base ** attempt.
        "jitter": 0.0,
    },
}

POLICY_DEFAULTS: Final[dict[str, int | float]] = {
    "max_attempts": 4,  # MAX_RETRIES (3) + the first try
    "base_delay": 1.5,
    "max_delay": 60.0,
    "jitter": 0.0,
    "exponential_base": 2.0,
}


def get_internal_default(subsystem: str, field: str) -> int | float | bool | str:
    """Get an internal default value.

    Raises:
        KeyError: If subsystem or field not found
    """
    return INTERNAL_DEFAULTS[subsystem][field]
