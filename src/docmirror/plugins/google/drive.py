# src/docmirror/plugins/google/drive.py
"""DestinationBackend over the Drive v3 REST API.

Remote failures are returned, never raised:
- 404, and items already in the trash -> NOT_FOUND
- 429, 5xx and transport errors -> TRANSIENT_ERROR
- any other non-2xx, and a 2xx whose body cannot be read -> ERROR

Drive membership is multi-parent; add_parent/remove_parent map to the
addParents/removeParents query parameters of files.update.
"""

from __future__ import annotations

import json
import uuid
from collections.abc import Mapping
from typing import Any

import httpx
import structlog

from docmirror.contracts.enums import ItemKind
from docmirror.contracts.results import BackendResult, ItemRef
from docmirror.plugins.google.session import DRIVE_API_URL, DRIVE_UPLOAD_URL, GoogleSession

logger = structlog.get_logger(__name__)

FOLDER_MIME_TYPE = "application/vnd.google-apps.folder"
_ITEM_FIELDS = "id,name,mimeType,parents,trashed"
_LIST_FIELDS = f"nextPageToken,files({_ITEM_FIELDS})"
# Shared drives need these on every call; harmless on My Drive.
_COMMON_PARAMS = {"supportsAllDrives": "true"}
_LIST_PARAMS = {"includeItemsFromAllDrives": "true", "pageSize": "1000", **_COMMON_PARAMS}


def escape_query_value(value: str) -> str:
    """Escape a string literal for the Drive query language."""
    return value.replace("\\", "\\\\").replace("'", "\\'")


def item_from_api(data: Mapping[str, Any]) -> ItemRef:
    kind = ItemKind.FOLDER if data.get("mimeType") == FOLDER_MIME_TYPE else ItemKind.FILE
    return ItemRef(
        id=data["id"],
        name=data.get("name", ""),
        kind=kind,
        parents=tuple(data.get("parents", [])),
    )


def _failure(response: httpx.Response) -> BackendResult[Any]:
    detail = f"HTTP {response.status_code}: {response.text[:200]}"
    if response.status_code == 404:
        return BackendResult.not_found(detail)
    if response.status_code == 429 or response.status_code >= 500:
        return BackendResult.transient(detail)
    return BackendResult.failed(detail)


def _json_object(response: httpx.Response) -> dict[str, Any] | BackendResult[Any]:
    """Decode a 2xx body; an unreadable one is an ERROR result."""
    try:
        data = response.json()
    except ValueError as e:
        logger.warning("Drive returned an unreadable body", status_code=response.status_code, error=str(e))
        return BackendResult.failed(f"Malformed response body: {e}")
    if not isinstance(data, dict):
        return BackendResult.failed(f"Expected a JSON object, got {type(data).__name__}")
    return data


def _item(response: httpx.Response) -> BackendResult[ItemRef]:
    data = _json_object(response)
    if isinstance(data, BackendResult):
        return data
    if "id" not in data:
        return BackendResult.failed("Item without id in response")
    return BackendResult.ok(item_from_api(data))


class GoogleDriveBackend:
    """DestinationBackend implementation for Google Drive."""

    def __init__(self, session: GoogleSession) -> None:
        self._client = session.client

    def _send(self, method: str, url: str, **kwargs: Any) -> httpx.Response | BackendResult[Any]:
        """Issue one request; transport failures come back as a TRANSIENT result."""
        try:
            response = self._client.request(method, url, **kwargs)
        except httpx.TransportError as e:
            logger.warning("Drive request failed", method=method, url=url, error=str(e))
            return BackendResult.transient(f"{type(e).__name__}: {e}")
        if not response.is_success:
            return _failure(response)
        return response

    def _update(self, item_id: str, body: Mapping[str, Any], **params: str) -> BackendResult[None]:
        response = self._send(
            "PATCH",
            f"{DRIVE_API_URL}/files/{item_id}",
            params={**_COMMON_PARAMS, **params, "fields": "id"},
            json=dict(body),
        )
        if isinstance(response, BackendResult):
            return response
        return BackendResult.ok()

    def _list(self, query: str) -> BackendResult[list[ItemRef]]:
        items: list[ItemRef] = []
        page_token: str | None = None
        while True:
            params = {**_LIST_PARAMS, "q": query, "fields": _LIST_FIELDS}
            if page_token is not None:
                params["pageToken"] = page_token
            response = self._send("GET", f"{DRIVE_API_URL}/files", params=params)
            if isinstance(response, BackendResult):
                return response
            payload = _json_object(response)
            if isinstance(payload, BackendResult):
                return payload
            entries = payload.get("files", [])
            if not isinstance(entries, list) or not all(isinstance(entry, dict) and "id" in entry for entry in entries):
                return BackendResult.failed("Malformed file listing in response")
            items.extend(item_from_api(entry) for entry in entries)
            page_token = payload.get("nextPageToken")
            if not page_token:
                return BackendResult.ok(items)

    def get_item(self, item_id: str) -> BackendResult[ItemRef]:
        response = self._send(
            "GET",
            f"{DRIVE_API_URL}/files/{item_id}",
            params={**_COMMON_PARAMS, "fields": _ITEM_FIELDS},
        )
        if isinstance(response, BackendResult):
            return response
        data = _json_object(response)
        if isinstance(data, BackendResult):
            return data
        if data.get("trashed"):
            return BackendResult.not_found(f"{item_id} is in the trash")
        if "id" not in data:
            return BackendResult.failed("Item without id in response")
        return BackendResult.ok(item_from_api(data))

    def create_folder(self, parent_id: str, name: str) -> BackendResult[ItemRef]:
        response = self._send(
            "POST",
            f"{DRIVE_API_URL}/files",
            params={**_COMMON_PARAMS, "fields": _ITEM_FIELDS},
            json={"name": name, "mimeType": FOLDER_MIME_TYPE, "parents": [parent_id]},
        )
        if isinstance(response, BackendResult):
            return response
        return _item(response)

    def create_file(self, parent_id: str, name: str, content: bytes, mime_type: str) -> BackendResult[ItemRef]:
        """Upload content as a new file (multipart: metadata part, then media part)."""
        boundary = f"docmirror-{uuid.uuid4().hex}"
        metadata = json.dumps({"name": name, "parents": [parent_id]}).encode("utf-8")
        body = b"".join(
            [
                f"--{boundary}\r\nContent-Type: application/json; charset=UTF-8\r\n\r\n".encode("ascii"),
                metadata,
                f"\r\n--{boundary}\r\nContent-Type: {mime_type}\r\n\r\n".encode("ascii"),
                content,
                f"\r\n--{boundary}--\r\n".encode("ascii"),
            ]
        )
        response = self._send(
            "POST",
            f"{DRIVE_UPLOAD_URL}/files",
            params={**_COMMON_PARAMS, "uploadType": "multipart", "fields": _ITEM_FIELDS},
            content=body,
            headers={"Content-Type": f"multipart/related; boundary={boundary}"},
        )
        if isinstance(response, BackendResult):
            return response
        return _item(response)

    def rename(self, item_id: str, name: str) -> BackendResult[None]:
        return self._update(item_id, {"name": name})

    def trash(self, item_id: str) -> BackendResult[None]:
        return self._update(item_id, {"trashed": True})

    def list_children(self, folder_id: str) -> BackendResult[list[ItemRef]]:
        return self._list(f"'{escape_query_value(folder_id)}' in parents and trashed = false")

    def find_by_name(self, parent_id: str, name: str, kind: ItemKind) -> BackendResult[list[ItemRef]]:
        operator = "=" if kind is ItemKind.FOLDER else "!="
        query = (
            f"'{escape_query_value(parent_id)}' in parents"
            f" and name = '{escape_query_value(name)}'"
            f" and mimeType {operator} '{FOLDER_MIME_TYPE}'"
            " and trashed = false"
        )
        return self._list(query)

    def list_parents(self, item_id: str) -> BackendResult[list[str]]:
        found = self.get_item(item_id)
        if not found.is_ok or found.value is None:
            return BackendResult(found.status, error=found.error)
        return BackendResult.ok(list(found.value.parents))

    def add_parent(self, item_id: str, parent_id: str) -> BackendResult[None]:
        return self._update(item_id, {}, addParents=parent_id)

    def remove_parent(self, item_id: str, parent_id: str) -> BackendResult[None]:
        return self._update(item_id, {}, removeParents=parent_id)
