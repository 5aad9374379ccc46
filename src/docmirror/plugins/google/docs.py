# src/docmirror/plugins/google/docs.py
"""Source reader for Google Docs tabs.

Reads the whole tab tree in one documents.get call with
includeTabsContent=true. Each document tab becomes a SourceNode; tabs of
any other kind, and everything below them, are ignored.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from typing import Any

import httpx
import structlog

from docmirror.contracts.errors import SourceReadError
from docmirror.contracts.nodes import SourceNode
from docmirror.plugins.google.session import DOCS_API_URL, GoogleSession

logger = structlog.get_logger(__name__)


def extract_text(elements: Iterable[Mapping[str, Any]]) -> str:
    """Concatenate every textRun in document order.

    Descends into tables (rows, cells, cell content) and tables of contents.
    """
    parts: list[str] = []
    for element in elements:
        if "paragraph" in element:
            for piece in element["paragraph"].get("elements", []):
                text_run = piece.get("textRun")
                if text_run is not None:
                    parts.append(text_run.get("content", ""))
        elif "table" in element:
            for row in element["table"].get("tableRows", []):
                for cell in row.get("tableCells", []):
                    parts.append(extract_text(cell.get("content", [])))
        elif "tableOfContents" in element:
            parts.append(extract_text(element["tableOfContents"].get("content", [])))
    return "".join(parts)


def tab_to_node(tab: Mapping[str, Any]) -> SourceNode | None:
    """Convert one API tab to a SourceNode, or None if it is not a document tab."""
    document_tab = tab.get("documentTab")
    if document_tab is None:
        return None
    properties = tab.get("tabProperties", {})
    children = tuple(
        node for node in (tab_to_node(child) for child in tab.get("childTabs", [])) if node is not None
    )
    return SourceNode(
        id=properties["tabId"],
        title=properties.get("title", ""),
        content=extract_text(document_tab.get("body", {}).get("content", [])),
        children=children,
    )


class GoogleDocsSource:
    """SourceReader over the Docs v1 REST API."""

    def __init__(self, session: GoogleSession, document_id: str) -> None:
        self._client = session.client
        self._document_id = document_id

    def list_top_level_nodes(self) -> list[SourceNode]:
        """Fetch the document and return its top-level document tabs.

        Raises:
            SourceReadError: On any transport failure, non-2xx answer or
                unreadable body
        """
        url = f"{DOCS_API_URL}/documents/{self._document_id}"
        try:
            response = self._client.get(url, params={"includeTabsContent": "true"})
        except httpx.HTTPError as e:
            raise SourceReadError(self._document_id, None, str(e)) from e
        if not response.is_success:
            raise SourceReadError(self._document_id, response.status_code, response.text[:200])

        try:
            payload = response.json()
        except ValueError as e:
            raise SourceReadError(self._document_id, response.status_code, f"Malformed response body: {e}") from e
        if not isinstance(payload, dict):
            raise SourceReadError(self._document_id, response.status_code, "Expected a JSON object")

        tabs = payload.get("tabs", [])
        nodes = [node for node in (tab_to_node(tab) for tab in tabs) if node is not None]
        logger.debug("Read source tabs", document_id=self._document_id, top_level=len(nodes))
        return nodes
