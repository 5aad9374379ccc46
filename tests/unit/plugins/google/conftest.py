"""Fixtures for the Google adapter tests (HTTP mocked with respx)."""

from collections.abc import Iterator

import pytest
from pydantic import SecretStr

from docmirror.plugins.google import GoogleSession


@pytest.fixture
def session() -> Iterator[GoogleSession]:
    with GoogleSession(SecretStr("test-token"), timeout=5.0) as session:
        yield session
