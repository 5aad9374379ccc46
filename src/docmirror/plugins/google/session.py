# src/docmirror/plugins/google/session.py
"""Shared httpx client for the Google Docs and Drive adapters."""

from __future__ import annotations

from collections.abc import Generator
from types import TracebackType
from typing import Self

import httpx
from pydantic import SecretStr

DOCS_API_URL = "https://docs.googleapis.com/v1"
DRIVE_API_URL = "https://www.googleapis.com/drive/v3"
DRIVE_UPLOAD_URL = "https://www.googleapis.com/upload/drive/v3"
DOCS_EXPORT_URL = "https://docs.google.com/document/d"


class BearerAuth(httpx.Auth):
    """Adds the OAuth bearer token to every request.

    The token stays wrapped in SecretStr until the header is built, so it
    never shows up in reprs or logs of the session.
    """

    def __init__(self, token: SecretStr) -> None:
        self._token = token

    def auth_flow(self, request: httpx.Request) -> Generator[httpx.Request, httpx.Response, None]:
        request.headers["Authorization"] = f"Bearer {self._token.get_secret_value()}"
        yield request


class GoogleSession:
    """One pooled httpx.Client shared by the three Google adapters.

    Example:
        with GoogleSession(settings.auth.resolve_token()) as session:
            source = GoogleDocsSource(session, document_id)
    """

    def __init__(
        self,
        token: SecretStr,
        *,
        timeout: float = 60.0,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self._client = httpx.Client(
            auth=BearerAuth(token),
            timeout=timeout,
            follow_redirects=True,
            transport=transport,
        )

    @property
    def client(self) -> httpx.Client:
        return self._client

    def close(self) -> None:
        """Close the underlying httpx client and release connections."""
        self._client.close()

    def __enter__(self) -> Self:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        self.close()
