# src/docmirror/plugins/google/renderer.py
"""PDF renderer using the Docs export endpoint, one tab at a time."""

from __future__ import annotations

import httpx

from docmirror.contracts.errors import RendererUnavailableError
from docmirror.contracts.results import RenderResponse
from docmirror.plugins.google.session import DOCS_EXPORT_URL, GoogleSession


class DocsPdfRenderer:
    """Renderer returning the export endpoint's status untouched.

    200 carries the PDF bytes; 429 and every other status carry none and
    are retried by the ExporterGateway.
    """

    def __init__(self, session: GoogleSession) -> None:
        self._client = session.client

    def render(self, document_id: str, node_id: str) -> RenderResponse:
        url = f"{DOCS_EXPORT_URL}/{document_id}/export"
        try:
            response = self._client.get(url, params={"format": "pdf", "tab": node_id})
        except httpx.TransportError as e:
            raise RendererUnavailableError(f"Export request for tab {node_id} failed: {e}") from e
        if response.status_code != 200:
            return RenderResponse(status_code=response.status_code)
        return RenderResponse(
            status_code=200,
            content=response.content,
            mime_type=response.headers.get("content-type", "application/pdf").split(";")[0],
        )
