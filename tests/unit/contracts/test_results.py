# tests/unit/contracts/test_results.py
"""Tests for BackendResult and RenderResponse."""

import pytest

from docmirror.contracts.enums import BackendStatus, ItemKind
from docmirror.contracts.results import BackendResult, ItemRef, RenderResponse


class TestBackendResult:
    def test_ok_carries_value(self) -> None:
        ref = ItemRef(id="f1", name="A.pdf", kind=ItemKind.FILE)

        result = BackendResult.ok(ref)

        assert result.is_ok
        assert not result.is_not_found
        assert result.unwrap() is ref

    @pytest.mark.parametrize(
        ("result", "status"),
        [
            (BackendResult.not_found("gone"), BackendStatus.NOT_FOUND),
            (BackendResult.transient("429"), BackendStatus.TRANSIENT_ERROR),
            (BackendResult.failed("403"), BackendStatus.ERROR),
        ],
    )
    def test_failure_factories(self, result: BackendResult[None], status: BackendStatus) -> None:
        assert result.status is status
        assert not result.is_ok
        assert result.error is not None

    def test_unwrap_non_ok_raises(self) -> None:
        with pytest.raises(ValueError, match="not_found"):
            BackendResult.not_found("gone").unwrap()

    def test_ok_false_is_a_value(self) -> None:
        assert BackendResult.ok(False).unwrap() is False


class TestRenderResponse:
    def test_succeeded_needs_200_and_content(self) -> None:
        assert RenderResponse(200, b"%PDF").succeeded
        assert not RenderResponse(200).succeeded
        assert not RenderResponse(429).succeeded
