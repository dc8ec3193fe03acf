"""
Shared type definitions used across the Blobstream toolkit.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple, TypedDict

from blobstream_toolkit.utils.encoding import to_bytes32, to_hex

# =============================================================================
# RAW RPC PAYLOADS
# =============================================================================


class MerkleProofJSON(TypedDict, total=False):
    """Tendermint merkle.Proof as serialized by the DA node."""

    total: str  # int64 as decimal string
    index: str  # int64 as decimal string
    leaf_hash: str  # base64
    aunts: List[str]  # base64, leaf to root


class TxResultJSON(TypedDict, total=False):
    """Result of the ``tx`` RPC method."""

    hash: str  # uppercase hex
    height: str
    index: int
    tx: str  # base64
    proof: Dict[str, Any]


class BlockResultJSON(TypedDict, total=False):
    """Result of the ``block`` RPC method."""

    block_id: Dict[str, Any]
    block: Dict[str, Any]


class DataRootInclusionProofJSON(TypedDict):
    """Result of the ``data_root_inclusion_proof`` RPC method."""

    proof: MerkleProofJSON


# =============================================================================
# DECODED DA-CHAIN DATA
# =============================================================================


@dataclass(frozen=True)
class TransactionInfo:
    """A transaction and where it was included."""

    hash: bytes
    height: int
    index: int
    tx: bytes = b""

    def to_dict(self) -> Dict[str, Any]:
        return {
            "hash": to_hex(self.hash),
            "height": self.height,
            "index": self.index,
        }


@dataclass(frozen=True)
class BlockData:
    """The parts of a block needed to locate and verify a blob."""

    height: int
    data_root: bytes
    txs: Tuple[bytes, ...] = field(default_factory=tuple)
    app_version: int = 1
    square_size: Optional[int] = None

    def __post_init__(self):
        object.__setattr__(
            self, "data_root", to_bytes32(self.data_root, "data_root")
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "height": self.height,
            "data_root": to_hex(self.data_root),
            "tx_count": len(self.txs),
            "app_version": self.app_version,
            "square_size": self.square_size,
        }
