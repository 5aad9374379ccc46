"""CLI helper functions for wiring the orchestrator from settings."""

from collections.abc import Iterator
from contextlib import ExitStack, contextmanager
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from docmirror.core.config import DocmirrorSettings
    from docmirror.engine.orchestrator import SyncOrchestrator


@contextmanager
def open_orchestrator(config: "DocmirrorSettings") -> Iterator["SyncOrchestrator"]:
    """Build a SyncOrchestrator backed by Google adapters and the state database.

    The HTTP session and database connections are closed on exit.

    Raises:
        ConfigurationError: If the access token is not available
    """
    from docmirror.contracts.config import RuntimeLockConfig, RuntimeRetryConfig, RuntimeSyncConfig
    from docmirror.core.audit import AuditTrail, NullAuditSink, SqlAuditSink
    from docmirror.core.database import StateDB
    from docmirror.core.properties import SqlPropertyStore
    from docmirror.engine.orchestrator import SyncOrchestrator
    from docmirror.plugins.google import DocsPdfRenderer, GoogleDocsSource, GoogleDriveBackend, GoogleSession

    token = config.auth.resolve_token()

    with ExitStack() as stack:
        session = stack.enter_context(GoogleSession(token, timeout=config.auth.timeout_seconds))
        state_db = stack.enter_context(StateDB.from_url(config.state.url))

        if not config.audit.enabled:
            audit = AuditTrail(NullAuditSink())
        elif config.audit_url == config.state.url:
            audit = AuditTrail(SqlAuditSink(state_db))
        else:
            audit = AuditTrail(SqlAuditSink(stack.enter_context(StateDB.from_url(config.audit_url))))

        yield SyncOrchestrator(
            GoogleDocsSource(session, config.source.document_id),
            GoogleDriveBackend(session),
            DocsPdfRenderer(session),
            SqlPropertyStore(state_db),
            sync_config=RuntimeSyncConfig.from_settings(config),
            retry_config=RuntimeRetryConfig.from_settings(config.retry),
            lock_config=RuntimeLockConfig.from_settings(config.lock),
            audit=audit,
        )

