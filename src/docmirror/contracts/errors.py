"""Exception hierarchy for docmirror.

Remote failures during a run are reported as BackendResult values or a
None artifact. Exceptions are reserved for conditions that end a run
(caught at the orchestrator boundary) or for control flow inside the
retry loop.
"""


class DocmirrorError(Exception):
    """Base class for docmirror errors."""


class ConfigurationError(DocmirrorError):
    """Raised when settings are valid YAML but unusable at runtime.

    Example: the access token environment variable is not set.
    """


class SourceReadError(DocmirrorError):
    """Raised when the source document tree cannot be read.

    The run aborts before the orphan reaper runs, so nothing is deleted
    because of an unreadable source.
    """

    def __init__(self, document_id: str, status_code: int | None, detail: str) -> None:
        self.document_id = document_id
        self.status_code = status_code
        self.detail = detail
        super().__init__(f"Cannot read document {document_id} (status={status_code}): {detail}")


class RenderFailedError(DocmirrorError):
    """Raised inside the retry loop when the renderer answers with a non-200 status.

    Never escapes the ExporterGateway.
    """

    def __init__(self, status_code: int) -> None:
        self.status_code = status_code
        super().__init__(f"Renderer returned HTTP {status_code}")

    @property
    def rate_limited(self) -> bool:
        return self.status_code == 429


class RendererUnavailableError(DocmirrorError):
    """Raised by a renderer when the request never got an HTTP answer.

    Transport-level failure (connect/read timeout, reset connection).
    Retried by the ExporterGateway like a rate-limit answer.
    """
