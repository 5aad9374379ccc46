"""Configuration contracts subpackage.

- Runtime config dataclasses (runtime.py) - what engine components receive
- Default registries (defaults.py) - POLICY_DEFAULTS, INTERNAL_DEFAULTS

NOTE: Settings classes (RetrySettings, DocmirrorSettings, etc.) are NOT here.
      Import them from docmirror.core.config to keep contracts a leaf package.
"""

from docmirror.contracts.config.defaults import INTERNAL_DEFAULTS, POLICY_DEFAULTS, get_internal_default
from docmirror.contracts.config.runtime import RuntimeLockConfig, RuntimeRetryConfig, RuntimeSyncConfig

__all__ = [
    "INTERNAL_DEFAULTS",
    "POLICY_DEFAULTS",
    "RuntimeLockConfig",
    "RuntimeRetryConfig",
    "RuntimeSyncConfig",
    "get_internal_default",
]
