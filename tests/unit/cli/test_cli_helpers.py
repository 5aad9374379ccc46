# tests/unit/cli/test_cli_helpers.py
"""Tests for orchestrator wiring from settings."""

from pathlib import Path

import pytest

from docmirror.cli_helpers import open_orchestrator
from docmirror.contracts import ConfigurationError
from docmirror.core.config import DocmirrorSettings
from docmirror.engine.orchestrator import SyncOrchestrator


def _settings(tmp_path: Path, **overrides) -> DocmirrorSettings:
    return DocmirrorSettings(
        source={"document_id": "doc-1"},
        destination={"root_folder_id": "root"},
        state={"url": f"sqlite:///{tmp_path / 'state.db'}"},
        **overrides,
    )


def test_builds_orchestrator(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("DOCMIRROR_ACCESS_TOKEN", "secret")

    with open_orchestrator(_settings(tmp_path)) as orchestrator:
        assert isinstance(orchestrator, SyncOrchestrator)
        assert orchestrator.status().tracked_entries == 0


def test_separate_audit_database(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("DOCMIRROR_ACCESS_TOKEN", "secret")
    settings = _settings(tmp_path, audit={"url": f"sqlite:///{tmp_path / 'audit.db'}"})

    with open_orchestrator(settings):
        pass

    assert (tmp_path / "audit.db").exists()


def test_missing_token_raises(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("DOCMIRROR_ACCESS_TOKEN", raising=False)

    with pytest.raises(ConfigurationError, match="DOCMIRROR_ACCESS_TOKEN"), open_orchestrator(_settings(tmp_path)):
        pass
