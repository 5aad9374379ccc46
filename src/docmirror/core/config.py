# src/docmirror/core/config.py
"""
Configuration schema and loading for docmirror.

Uses Pydantic for validation and Dynaconf for multi-source loading.
Settings are frozen (immutable) after construction.

Example YAML:
    source:
      document_id: 1sb3UZBaaaBYN_XiI0f6L7eMZF_8sKFIkaaaaaGCWMs
    destination:
      root_folder_id: 11Kjaaaqp-OksLxj_PSI0qd15aaaaa4pX
    sync:
      delay_between_exports_seconds: 2.5
    retry:
      max_retries: 3
      initial_backoff_seconds: 1.5
    lock:
      timeout_seconds: 540
    state:
      url: sqlite:///./.docmirror/state.db
"""

import os
import re
from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field, SecretStr, field_validator

from docmirror.contracts.errors import ConfigurationError


class SourceSettings(BaseModel):
    """Which document to mirror."""

    model_config = {"frozen": True}

    document_id: str = Field(min_length=1, description="Id of the source document")


class DestinationSettings(BaseModel):
    """Where rendered files go."""

    model_config = {"frozen": True}

    root_folder_id: str = Field(min_length=1, description="Destination folder mirroring the document root")
    file_suffix: str = Field(default=".pdf", description="Appended to a node title to name its artifact")

    @field_validator("file_suffix")
    @classmethod
    def validate_suffix(cls, v: str) -> str:
        if "/" in v:
            raise ValueError("file_suffix must not contain '/'")
        return v


class AuthSettings(BaseModel):
    """API credentials.

    The token itself never lives in the settings file; only the name of the
    environment variable holding it does.
    """

    model_config = {"frozen": True}

    token_env: str = Field(default="DOCMIRROR_ACCESS_TOKEN", description="Environment variable holding the OAuth bearer token")
    timeout_seconds: float = Field(default=60.0, gt=0, description="Per-request HTTP timeout")

    def resolve_token(self) -> SecretStr:
        """Read the bearer token from the environment.

        Raises:
            ConfigurationError: If the variable is unset or empty
        """
        value = os.environ.get(self.token_env)
        if not value:
            raise ConfigurationError(f"Access token not found: set the {self.token_env} environment variable")
        return SecretStr(value)


class SyncSettings(BaseModel):
    """Traversal behavior."""

    model_config = {"frozen": True}

    delay_between_exports_seconds: float = Field(default=2.5, ge=0, description="Pause after each successful export")
    max_depth: int = Field(default=32, gt=0, description="Deepest tab level reconciled")


class RetrySettings(BaseModel):
    """Renderer retry behavior."""

    model_config = {"frozen": True}

    max_retries: int = Field(default=3, ge=0, description="Retries after the first attempt")
    initial_backoff_seconds: float = Field(default=1.5, ge=0, description="Delay before the first retry")
    max_backoff_seconds: float = Field(default=60.0, gt=0, description="Upper bound for any single delay")
    exponential_base: float = Field(default=2.0, ge=1.0, description="Exponential backoff base")


class LockSettings(BaseModel):
    """Run lock behavior."""

    model_config = {"frozen": True}

    timeout_seconds: float = Field(
        default=540.0,
        gt=0,
        description="Lock age after which it is considered stale; must exceed the longest possible run",
    )


class StateSettings(BaseModel):
    """Where reconciliation state is persisted."""

    model_config = {"frozen": True}

    # NOTE: str instead of Path - Path mangles DSNs like "postgresql://user@host/db"
    url: str = Field(default="sqlite:///./.docmirror/state.db", description="SQLAlchemy database URL")


class AuditSettings(BaseModel):
    """Audit log configuration."""

    model_config = {"frozen": True}

    enabled: bool = Field(default=True, description="Record actions to the audit log")
    url: str | None = Field(default=None, description="SQLAlchemy URL for the audit log (defaults to state.url)")


class ScheduleSettings(BaseModel):
    """Fixed-interval scheduling of reconcile()."""

    model_config = {"frozen": True}

    interval_seconds: int = Field(default=60, gt=0, description="Seconds between scheduled runs")


class DocmirrorSettings(BaseModel):
    """Top-level docmirror configuration.

    All settings are validated and frozen after construction.
    """

    model_config = {"frozen": True}

    source: SourceSettings
    destination: DestinationSettings
    auth: AuthSettings = Field(default_factory=AuthSettings)
    sync: SyncSettings = Field(default_factory=SyncSettings)
    retry: RetrySettings = Field(default_factory=RetrySettings)
    lock: LockSettings = Field(default_factory=LockSettings)
    state: StateSettings = Field(default_factory=StateSettings)
    audit: AuditSettings = Field(default_factory=AuditSettings)
    schedule: ScheduleSettings = Field(default_factory=ScheduleSettings)

    @property
    def audit_url(self) -> str:
        return self.audit.url or self.state.url


# Regex pattern for ${VAR} or ${VAR:-default} syntax
_ENV_VAR_PATTERN = re.compile(r"\$\{([A-Z_][A-Z0-9_]*)(?::-([^}]*))?\}")


def _expand_env_vars(config: dict[str, Any]) -> dict[str, Any]:
    """Recursively expand ${VAR} and ${VAR:-default} patterns in config values.

    Args:
        config: Configuration dict (may contain nested structures)

    Returns:
        New dict with environment variables expanded
    """

    def _expand_string(value: str) -> str:
        def replacer(match: re.Match[str]) -> str:
            var_name = match.group(1)
            default = match.group(2)  # None if no default specified
            env_value = os.environ.get(var_name)
            if env_value is not None:
                return env_value
            if default is not None:
                return default
            # No env var and no default - keep original (validation will likely reject it)
            return match.group(0)

        return _ENV_VAR_PATTERN.sub(replacer, value)

    def _expand_value(value: Any) -> Any:
        if isinstance(value, str):
            return _expand_string(value)
        elif isinstance(value, dict):
            return {k: _expand_value(v) for k, v in value.items()}
        elif isinstance(value, list):
            return [_expand_value(item) for item in value]
        else:
            return value

    return {k: _expand_value(v) for k, v in config.items()}


def _lower_keys(value: Any) -> Any:
    """Dynaconf upper-cases keys at every level; Pydantic fields are lower-case."""
    if isinstance(value, dict):
        return {str(k).lower(): _lower_keys(v) for k, v in value.items()}
    if isinstance(value, list):
        return [_lower_keys(item) for item in value]
    return value


def load_settings(config_path: Path) -> DocmirrorSettings:
    """Load settings from YAML file with environment variable overrides.

    Uses Dynaconf for multi-source loading with precedence:
    1. Environment variables (DOCMIRROR_*) - highest priority
    2. Config file (settings.yaml)
    3. Defaults from Pydantic schema - lowest priority

    Environment variable format: DOCMIRROR_SYNC__MAX_DEPTH for nested keys.

    Args:
        config_path: Path to YAML configuration file

    Returns:
        Validated DocmirrorSettings instance

    Raises:
        ValidationError: If configuration fails Pydantic validation
        FileNotFoundError: If config file doesn't exist
    """
    from dynaconf import Dynaconf

    # Explicit check for file existence (Dynaconf silently accepts missing files)
    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    dynaconf_settings = Dynaconf(
        envvar_prefix="DOCMIRROR",
        settings_files=[str(config_path)],
        environments=False,  # No [default]/[production] sections
        load_dotenv=False,  # The CLI loads .env itself
        merge_enabled=True,  # Deep merge nested dicts
    )

    # Filter out internal Dynaconf settings
    internal_keys = {"LOAD_DOTENV", "ENVIRONMENTS", "SETTINGS_FILES"}
    raw_config = _lower_keys({k: v for k, v in dynaconf_settings.as_dict().items() if k not in internal_keys})

    raw_config = _expand_env_vars(raw_config)

    return DocmirrorSettings(**raw_config)
