# tests/conftest.py
"""Shared test fixtures.

Every engine port has an in-memory fake in docmirror.testing; the
fixtures here wire them into a SyncOrchestrator with a MockClock, so
no test sleeps or touches the network.

Hypothesis Configuration:
- "ci" profile: Fast tests for CI (100 examples) - default
- "nightly" profile: Thorough tests (1000 examples)
- "debug" profile: Minimal tests with verbose output (10 examples)

Set profile via environment variable:
    HYPOTHESIS_PROFILE=nightly pytest tests/property/
"""

from __future__ import annotations

import os
from collections.abc import Callable, Iterator, Sequence

import pytest
from hypothesis import HealthCheck, Verbosity, settings

from docmirror.contracts.config import RuntimeLockConfig, RuntimeRetryConfig, RuntimeSyncConfig
from docmirror.contracts.nodes import SourceNode
from docmirror.core.audit import AuditTrail
from docmirror.core.database import StateDB
from docmirror.engine.clock import MockClock
from docmirror.engine.orchestrator import SyncOrchestrator
from docmirror.testing import (
    InMemoryDrive,
    InMemoryPropertyStore,
    RecordingAuditSink,
    ScriptedRenderer,
    StaticSource,
)

settings.register_profile(
    "ci",
    max_examples=100,
    deadline=None,
    suppress_health_check=[HealthCheck.too_slow],
)
settings.register_profile("nightly", max_examples=1000, deadline=None)
settings.register_profile("debug", max_examples=10, verbosity=Verbosity.verbose, deadline=None)
settings.load_profile(os.getenv("HYPOTHESIS_PROFILE", "ci"))

DOCUMENT_ID = "doc-1"
ROOT_FOLDER = "root"
START_TIME = 1_700_000_000.0


@pytest.fixture
def clock() -> MockClock:
    return MockClock(start=START_TIME)


@pytest.fixture
def properties() -> InMemoryPropertyStore:
    return InMemoryPropertyStore()


@pytest.fixture
def drive() -> InMemoryDrive:
    return InMemoryDrive(root_id=ROOT_FOLDER)


@pytest.fixture
def renderer() -> ScriptedRenderer:
    return ScriptedRenderer()


@pytest.fixture
def audit_sink() -> RecordingAuditSink:
    return RecordingAuditSink()


@pytest.fixture
def source() -> StaticSource:
    return StaticSource()


@pytest.fixture
def sync_config() -> RuntimeSyncConfig:
    return RuntimeSyncConfig(document_id=DOCUMENT_ID, root_folder_id=ROOT_FOLDER)


@pytest.fixture
def state_db() -> Iterator[StateDB]:
    with StateDB.in_memory() as db:
        yield db


@pytest.fixture
def make_orchestrator(
    source: StaticSource,
    drive: InMemoryDrive,
    renderer: ScriptedRenderer,
    properties: InMemoryPropertyStore,
    audit_sink: RecordingAuditSink,
    clock: MockClock,
    sync_config: RuntimeSyncConfig,
) -> Callable[..., SyncOrchestrator]:
    """Factory for an orchestrator over the shared fakes.

    Pass nodes to set the source tree; other keyword arguments override
    the runtime configs.
    """

    def _make(
        nodes: Sequence[SourceNode] | None = None,
        *,
        retry_config: RuntimeRetryConfig | None = None,
        lock_config: RuntimeLockConfig | None = None,
        config: RuntimeSyncConfig | None = None,
    ) -> SyncOrchestrator:
        if nodes is not None:
            source.nodes = list(nodes)
        return SyncOrchestrator(
            source,
            drive,
            renderer,
            properties,
            sync_config=config or sync_config,
            retry_config=retry_config or RuntimeRetryConfig.default(),
            lock_config=lock_config or RuntimeLockConfig(),
            audit=AuditTrail(audit_sink),
            clock=clock,
        )

    return _make
