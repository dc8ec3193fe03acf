"""
Unit tests for the Result types module.
"""

import pytest

from blobstream_toolkit.shared import results
from blobstream_toolkit.shared.exceptions import (
    NotFoundError,
    ProofInvalidError,
)
from blobstream_toolkit.shared.results import (
    PipelineStage,
    ProcessingError,
    Result,
)


class TestProcessingError:
    """Tests for ProcessingError dataclass."""

    def test_create_error(self):
        """Test creating a processing error."""
        error = ProcessingError(source="locate", message="Test error message")
        assert error.source == "locate"
        assert error.context == {}
        assert error.exception is None
        assert error.kind == "Unknown"

    def test_kind_from_exception(self):
        """Kind comes from the wrapped toolkit exception."""
        error = ProcessingError(
            source="share_inclusion",
            message="bad proof",
            exception=ProofInvalidError("bad proof"),
        )
        assert error.kind == "ProofInvalid"

    def test_kind_for_foreign_exception(self):
        error = ProcessingError(
            source="x", message="boom", exception=KeyError("k")
        )
        assert error.kind == "KeyError"

    def test_to_dict_serializes_bytes(self):
        """Byte values in the context are rendered as 0x hex."""
        error = ProcessingError(
            source="attestation",
            message="mismatch",
            context={
                "data_root": b"\x01\x02",
                "roots": [b"\xff"],
                "nested": {"key": b"\x00"},
                "nonce": 7,
            },
        )
        d = error.to_dict()
        assert set(d) == {"source", "kind", "message", "context"}
        assert d["context"] == {
            "data_root": "0x0102",
            "roots": ["0xff"],
            "nested": {"key": "0x00"},
            "nonce": 7,
        }


class TestResult:
    """Tests for Result[T] generic class."""

    def test_ok_result(self):
        result = Result.ok({"data": "test"})
        assert result.success is True
        assert result.data == {"data": "test"}
        assert result.errors == []
        assert result.error is None

    def test_fail_result(self):
        error = ProcessingError(source="test", message="failed")
        result = Result.fail(error)
        assert result.success is False
        assert result.data is None
        assert result.error is error
        assert result.errors == [error]

    def test_from_exception_merges_context(self):
        """Exception context and stage context are merged, stage wins."""
        exc = NotFoundError(
            "tx not found", context={"tx_hash": "AA", "height": 1}
        )
        result = Result.from_exception("locate", exc, {"height": 2})
        error = result.error
        assert error.source == "locate"
        assert error.exception is exc
        assert error.context == {"tx_hash": "AA", "height": 2}
        assert error.kind == "NotFound"

    def test_only_stage_failure_api_remains(self):
        for name in ("add_warning", "has_warnings", "has_errors"):
            assert not hasattr(Result, name)
        assert not hasattr(results, "ErrorSeverity")

    def test_unwrap_success(self):
        assert Result.ok(5).unwrap() == 5

    def test_unwrap_reraises_stage_exception(self):
        exc = ProofInvalidError("nope")
        with pytest.raises(ProofInvalidError):
            Result.from_exception("share_inclusion", exc).unwrap()

    def test_unwrap_without_exception(self):
        result = Result.fail(ProcessingError(source="s", message="broken"))
        with pytest.raises(RuntimeError, match="broken"):
            result.unwrap()


class TestPipelineStage:
    def test_values(self):
        assert [s.value for s in PipelineStage] == [
            "start",
            "located",
            "share_verified",
            "batch_proved",
            "attested",
            "failed",
        ]
