"""
Celestia consensus node RPC client.

Talks Tendermint/CometBFT JSON-RPC 2.0 over HTTP POST. Only the four calls
the verification pipeline consumes are exposed: transaction lookup, block
fetch, share proofs and data root inclusion proofs. All calls are
synchronous; nothing is retried.
"""

import itertools
from typing import Any, Dict, Optional

import httpx

from blobstream_toolkit.proofs.share_proof import ShareProof
from blobstream_toolkit.proofs.types import InclusionProof
from blobstream_toolkit.shared.constants import NetworkConstants
from blobstream_toolkit.shared.exceptions import (
    DecodeError,
    TransportException,
)
from blobstream_toolkit.shared.logging import get_logger
from blobstream_toolkit.shared.services.http_client import (
    create_client,
    normalize_rpc_url,
)
from blobstream_toolkit.shared.types import (
    BlockData,
    BlockResultJSON,
    DataRootInclusionProofJSON,
    TransactionInfo,
    TxResultJSON,
)
from blobstream_toolkit.utils.encoding import (
    b64decode_field,
    b64encode_bytes,
    hexdecode_field,
)

_logger = get_logger(__name__)

# a node payload missing fields or of the wrong shape
_MALFORMED_ERRORS = (
    KeyError,
    TypeError,
    ValueError,
    AttributeError,
    DecodeError,
)


class CelestiaRPCError(TransportException):
    """The node could not be reached or answered with an error."""

    kind = "RPCError"

    def __init__(
        self,
        method: str,
        message: str,
        rpc_error: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(
            f"{method}: {message}", context={"rpc_method": method}
        )
        self.method = method
        self.rpc_error = rpc_error or {}

    @property
    def is_not_found(self) -> bool:
        """True when the node reports the object as missing."""
        text = " ".join(
            str(v) for v in (self.message, *self.rpc_error.values())
        ).lower()
        return "not found" in text or "must be less than or equal" in text


class CelestiaRPCService:
    """JSON-RPC client for one DA node endpoint."""

    def __init__(
        self,
        rpc_url: str,
        timeout: float = NetworkConstants.DEFAULT_HTTP_TIMEOUT,
        transport: Optional[httpx.BaseTransport] = None,
    ):
        self.rpc_url = normalize_rpc_url(rpc_url)
        self._client = create_client(rpc_url, timeout, transport)
        self._ids = itertools.count(1)
        self._closed = False

    def __enter__(self) -> "CelestiaRPCService":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    @property
    def closed(self) -> bool:
        return self._closed

    def close(self) -> None:
        if not self._closed:
            self._client.close()
            self._closed = True

    def _call(self, method: str, params: Dict[str, Any]) -> Dict[str, Any]:
        payload = {
            "jsonrpc": "2.0",
            "id": next(self._ids),
            "method": method,
            "params": params,
        }
        _logger.debug(f"RPC {method} {params}")
        try:
            response = self._client.post("/", json=payload)
        except httpx.HTTPError as e:
            raise CelestiaRPCError(method, f"transport error: {e}") from e

        try:
            body = response.json()
        except ValueError as e:
            raise CelestiaRPCError(
                method,
                f"HTTP {response.status_code} with non-JSON body",
            ) from e

        error = body.get("error") if isinstance(body, dict) else None
        if error:
            message = error.get("data") or error.get("message") or str(error)
            raise CelestiaRPCError(method, str(message), rpc_error=error)
        if response.status_code >= 400:
            raise CelestiaRPCError(method, f"HTTP {response.status_code}")
        if not isinstance(body, dict) or body.get("result") is None:
            raise CelestiaRPCError(method, "response has no result")
        return body["result"]

    def get_tx(self, tx_hash: bytes, prove: bool = True) -> TransactionInfo:
        """Look up a transaction by hash, with its inclusion proof."""
        result: TxResultJSON = self._call(
            "tx", {"hash": b64encode_bytes(tx_hash), "prove": prove}
        )
        try:
            return TransactionInfo(
                hash=hexdecode_field(result.get("hash"), "hash") or tx_hash,
                height=int(result["height"]),
                index=int(result["index"]),
                tx=b64decode_field(result.get("tx"), "tx"),
            )
        except _MALFORMED_ERRORS as e:
            raise CelestiaRPCError("tx", f"malformed response: {e}") from e

    def get_block(self, height: int) -> BlockData:
        """Fetch a block's header fields and raw transactions."""
        result: BlockResultJSON = self._call(
            "block", {"height": str(height)}
        )
        try:
            block = result["block"]
            header = block["header"]
            data = block.get("data") or {}
            square_size = data.get("square_size")
            return BlockData(
                height=int(header["height"]),
                data_root=hexdecode_field(header["data_hash"], "data_hash"),
                txs=tuple(
                    b64decode_field(tx, "tx") for tx in data.get("txs") or []
                ),
                app_version=int((header.get("version") or {}).get("app", 0)),
                square_size=int(square_size) if square_size else None,
            )
        except _MALFORMED_ERRORS as e:
            raise CelestiaRPCError("block", f"malformed response: {e}") from e

    def prove_shares(
        self,
        height: int,
        start_share: int,
        end_share: int,
        data_root: Optional[bytes] = None,
    ) -> ShareProof:
        """Proof of shares [start_share, end_share) at ``height``."""
        result = self._call(
            "prove_shares",
            {
                "height": str(height),
                "startShare": str(start_share),
                "endShare": str(end_share),
            },
        )
        try:
            # newer nodes nest the proof under "share_proof"
            payload = result.get("share_proof", result)
            return ShareProof.from_rpc(payload, data_root=data_root)
        except _MALFORMED_ERRORS as e:
            raise CelestiaRPCError(
                "prove_shares", f"malformed response: {e}"
            ) from e

    def data_root_inclusion_proof(
        self, height: int, start: int, end: int
    ) -> InclusionProof:
        """Proof that ``height``'s data root is in the batch [start, end)."""
        result: DataRootInclusionProofJSON = self._call(
            "data_root_inclusion_proof",
            {"height": str(height), "start": str(start), "end": str(end)},
        )
        try:
            return InclusionProof.from_rpc(result["proof"])
        except _MALFORMED_ERRORS as e:
            raise CelestiaRPCError(
                "data_root_inclusion_proof", f"malformed response: {e}"
            ) from e
