"""
Exception hierarchy for the Blobstream toolkit.

Exception Categories:
- NonRetryableException: the input or the evidence is wrong (bad hash,
  missing transaction, invalid proof, attestation mismatch)
- TransportException: the DA node or the EVM chain could not be reached or
  answered with something unusable
- ConfigurationException: startup/config errors that prevent operation

Nothing in the toolkit retries. The split only tells the caller whether
running again could change the outcome.

Every exception carries a ``kind`` naming its place in the verification
error taxonomy (DecodeError, NotFound, RangeError, ProofFetchError,
ProofInvalid, ContractCallError, AttestationMismatch) and a ``context``
dict with the identifiers needed to diagnose the failure.
"""

from typing import Any, Dict, Optional


class BlobstreamException(Exception):
    """Base class for every error raised by the toolkit."""

    kind = "BlobstreamError"

    def __init__(
        self, message: str, context: Optional[Dict[str, Any]] = None
    ):
        super().__init__(message)
        self.message = message
        self.context = context or {}


class NonRetryableException(BlobstreamException):
    """
    Base class for failures that running again will not fix.

    Use for:
    - Malformed identifiers or hashes
    - Missing transactions or blocks
    - Proofs that do not verify
    """

    pass


class TransportException(BlobstreamException):
    """
    Base class for failures talking to a remote node.

    Use for:
    - RPC timeouts and connection errors
    - JSON-RPC error responses
    - Payloads that cannot be decoded
    """

    pass


class ConfigurationException(NonRetryableException):
    """
    Exception for configuration/startup errors.

    Use when:
    - Required environment variables are missing
    - Invalid configuration values
    - Missing required resources (ABI files)
    """

    kind = "ConfigurationError"


class DecodeError(NonRetryableException):
    """Malformed transaction identifier or byte string."""

    kind = "DecodeError"


class InvalidHashLength(DecodeError):
    """A hash that must be exactly 32 bytes was not."""

    pass


class NotFoundError(NonRetryableException):
    """The transaction or block does not exist on the DA node."""

    kind = "NotFound"


class ShareRangeError(NonRetryableException):
    """
    The blob cannot be mapped to a valid share range.

    Raised when the blob index exceeds the blobs carried by the
    transaction, when the transaction is not a blob transaction, or when
    the computed range is inverted or falls outside the data square.
    """

    kind = "RangeError"


class ProofFetchError(TransportException):
    """Transport or RPC failure while obtaining a share or batch proof."""

    kind = "ProofFetchError"


class ProofInvalidError(NonRetryableException):
    """The share proof's self-check returned False."""

    kind = "ProofInvalid"


class ContractCallError(TransportException):
    """Transport or ABI failure calling the bridge contract."""

    kind = "ContractCallError"


class AttestationMismatchError(NonRetryableException):
    """
    The bridge contract answered, but the tuple is not proven under the
    root stored for the nonce.
    """

    kind = "AttestationMismatch"
