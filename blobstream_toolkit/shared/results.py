"""
Result types for explicit success/failure tracking in the verification
pipeline.

Each pipeline stage returns a ``Result`` carrying either the value the
next stage needs or a ``ProcessingError`` naming the failing stage, the
error kind and the identifiers involved. Nothing fails silently: a run is
only successful when every stage returned ``Result.ok``.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Generic, List, Optional, TypeVar

T = TypeVar("T")


class PipelineStage(Enum):
    """States of a verification run.

    Transitions only move forward: START -> LOCATED -> SHARE_VERIFIED ->
    BATCH_PROVED -> ATTESTED, or to FAILED from any non-terminal state.
    """

    START = "start"
    LOCATED = "located"
    SHARE_VERIFIED = "share_verified"
    BATCH_PROVED = "batch_proved"
    ATTESTED = "attested"
    FAILED = "failed"


@dataclass
class ProcessingError:
    """
    Represents a single processing error with context.

    Attributes:
        source: Stage that generated the error (e.g., "locate", "attest")
        message: Human-readable error description
        context: Identifiers like tx_hash, height, share range, nonce
        exception: Original exception if available
    """

    source: str
    message: str
    context: Dict[str, Any] = field(default_factory=dict)
    exception: Optional[Exception] = None

    @property
    def kind(self) -> str:
        """Error kind of the wrapped exception, or "Unknown"."""
        if self.exception is None:
            return "Unknown"
        return getattr(
            self.exception, "kind", type(self.exception).__name__
        )

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "source": self.source,
            "kind": self.kind,
            "message": self.message,
            "context": _jsonable(self.context),
        }


@dataclass
class Result(Generic[T]):
    """
    Result type that carries success/failure information.

    Attributes:
        success: Whether the operation succeeded
        data: The result data if successful
        errors: The failing stage's error, empty on success
    """

    success: bool
    data: Optional[T] = None
    errors: List[ProcessingError] = field(default_factory=list)

    @classmethod
    def ok(cls, data: T) -> "Result[T]":
        """Create a successful result with data."""
        return cls(success=True, data=data)

    @classmethod
    def fail(cls, error: ProcessingError) -> "Result[T]":
        """Create a failed result with an error."""
        return cls(success=False, errors=[error])

    @classmethod
    def from_exception(
        cls,
        source: str,
        exception: Exception,
        context: Optional[Dict[str, Any]] = None,
    ) -> "Result[T]":
        """Create a failed result wrapping a typed exception."""
        merged = dict(getattr(exception, "context", {}) or {})
        merged.update(context or {})
        return cls.fail(
            ProcessingError(
                source=source,
                message=str(exception),
                context=merged,
                exception=exception,
            )
        )

    @property
    def error(self) -> Optional[ProcessingError]:
        """The error that failed the result, if any."""
        return self.errors[0] if self.errors else None

    def unwrap(self) -> T:
        """Return the data, re-raising the stage's exception on failure."""
        if self.success:
            return self.data  # type: ignore[return-value]
        error = self.error
        if error is not None and error.exception is not None:
            raise error.exception
        raise RuntimeError(error.message if error else "operation failed")


def _jsonable(value: Any) -> Any:
    if isinstance(value, (bytes, bytearray)):
        return "0x" + bytes(value).hex()
    if isinstance(value, dict):
        return {k: _jsonable(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [_jsonable(v) for v in value]
    return value
