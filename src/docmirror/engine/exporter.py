# src/docmirror/engine/exporter.py
"""ExporterGateway: render one node and place the artifact.

The gateway never raises past its boundary. Every failure mode ends in
None, which the walker treats as "no state change this attempt"; the
node stays pending and is retried by the next scheduled run, not by
this one.
"""

from __future__ import annotations

import structlog

from docmirror.contracts.enums import AuditAction, AuditStatus, ItemKind
from docmirror.contracts.errors import RendererUnavailableError, RenderFailedError
from docmirror.contracts.protocols import DestinationBackend, Renderer
from docmirror.contracts.results import ItemRef, RenderResponse
from docmirror.core.audit import AuditTrail
from docmirror.engine.retry import MaxRetriesExceeded, RetryManager

logger = structlog.get_logger(__name__)


def is_retryable_render_error(error: BaseException) -> bool:
    """Rate limits, other non-200 answers and transport failures are all retried."""
    return isinstance(error, RenderFailedError | RendererUnavailableError | ConnectionError | TimeoutError)


class ExporterGateway:
    """Calls the renderer with bounded retry, then trash-then-create in the destination.

    Example:
        gateway = ExporterGateway(renderer, backend, RetryManager(RuntimeRetryConfig.default()))
        ref = gateway.export(document_id, "t.qa3t443mbhc", "Intro.pdf", folder_id)
        if ref is None:
            ...  # leave state untouched; next run retries
    """

    def __init__(
        self,
        renderer: Renderer,
        backend: DestinationBackend,
        retry_manager: RetryManager,
        *,
        audit: AuditTrail | None = None,
    ) -> None:
        self._renderer = renderer
        self._backend = backend
        self._retry = retry_manager
        self._audit = audit if audit is not None else AuditTrail()

    def _render_once(self, document_id: str, node_id: str) -> RenderResponse:
        response = self._renderer.render(document_id, node_id)
        if not response.succeeded:
            raise RenderFailedError(response.status_code)
        return response

    def _render(self, document_id: str, node_id: str) -> RenderResponse | None:
        def on_retry(attempt: int, error: BaseException) -> None:
            logger.warning(
                "Render attempt failed, backing off",
                node_id=node_id,
                attempt=attempt,
                delay_seconds=self._retry.config.delay_for(attempt),
                error=str(error),
            )

        try:
            return self._retry.execute_with_retry(
                lambda: self._render_once(document_id, node_id),
                is_retryable=is_retryable_render_error,
                on_retry=on_retry,
            )
        except MaxRetriesExceeded as e:
            logger.warning("Render gave up, node stays pending", node_id=node_id, attempts=e.attempts, error=str(e.last_error))
        except Exception as e:
            logger.error("Render failed", node_id=node_id, error=str(e), error_type=type(e).__name__)
        return None

    def export(
        self,
        document_id: str,
        node_id: str,
        name: str,
        destination_folder_id: str,
        *,
        replaces: str | None = None,
    ) -> ItemRef | None:
        """Render node_id and store it as name in destination_folder_id.

        The caller derives name from the node title (RuntimeSyncConfig.artifact_name),
        the same way it names the artifact on a rename.

        Any same-named file already in the folder is trashed first, so the
        folder never holds two artifacts with this name. A previously tracked
        artifact (replaces) living elsewhere is trashed once the new one exists.

        Returns:
            The created artifact, or None if nothing changed this attempt
        """
        response = self._render(document_id, node_id)
        if response is None or response.content is None:
            return None

        existing = self._backend.find_by_name(destination_folder_id, name, ItemKind.FILE)
        if not existing.is_ok:
            # Creating without knowing what is there could leave two same-named files.
            logger.warning("Cannot list destination, skipping export", node_id=node_id, name=name, status=existing.status, error=existing.error)
            return None
        trashed_ids: set[str] = set()
        for item in existing.value or []:
            trashed = self._backend.trash(item.id)
            if not (trashed.is_ok or trashed.is_not_found):
                logger.warning("Cannot replace existing artifact, skipping export", node_id=node_id, file_id=item.id, error=trashed.error)
                return None
            trashed_ids.add(item.id)

        created = self._backend.create_file(destination_folder_id, name, response.content, response.mime_type)
        if not created.is_ok or created.value is None:
            logger.warning("Artifact upload failed", node_id=node_id, name=name, status=created.status, error=created.error)
            return None

        if replaces is not None and replaces not in trashed_ids and replaces != created.value.id:
            superseded = self._backend.trash(replaces)
            if not (superseded.is_ok or superseded.is_not_found):
                logger.warning("Superseded artifact left in place", node_id=node_id, file_id=replaces, error=superseded.error)

        logger.info("Exported node", node_id=node_id, name=name, file_id=created.value.id)
        self._audit.record(AuditAction.EXPORT, f"Exported {name}", AuditStatus.SUCCESS)
        return created.value
