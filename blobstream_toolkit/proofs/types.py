"""
Type definitions for Blobstream proofs.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Tuple

from eth_abi import encode

from blobstream_toolkit.utils.encoding import (
    b64decode_field,
    to_bytes32,
    to_hex,
)

# =============================================================================
# DATA ROOT TUPLES
# =============================================================================


@dataclass(frozen=True)
class DataRootTuple:
    """'At this height, the data root was exactly this value.'"""

    height: int
    data_root: bytes

    def __post_init__(self):
        if self.height < 0:
            raise ValueError(f"height must be >= 0, got {self.height}")
        object.__setattr__(
            self, "data_root", to_bytes32(self.data_root, "data_root")
        )

    def encode(self) -> bytes:
        """ABI encoding, also the leaf of the batch commitment tree."""
        return encode(["uint256", "bytes32"], [self.height, self.data_root])

    def as_contract_arg(self) -> Tuple[int, bytes]:
        return (self.height, self.data_root)

    def to_dict(self) -> Dict[str, Any]:
        return {"height": self.height, "data_root": to_hex(self.data_root)}


# =============================================================================
# INCLUSION PROOFS
# =============================================================================


@dataclass(frozen=True)
class InclusionProof:
    """
    Merkle inclusion proof as produced by the DA node.

    ``aunts`` are sibling hashes ordered from the leaf up to the root.
    """

    total: int
    index: int
    leaf_hash: bytes
    aunts: Tuple[bytes, ...] = field(default_factory=tuple)

    @classmethod
    def from_rpc(cls, payload: Dict[str, Any]) -> "InclusionProof":
        """Parse a Tendermint ``merkle.Proof`` JSON object.

        int64 fields arrive as decimal strings, hashes as base64.
        """
        return cls(
            total=int(payload.get("total", 0)),
            index=int(payload.get("index", 0)),
            leaf_hash=b64decode_field(payload.get("leaf_hash"), "leaf_hash"),
            aunts=tuple(
                b64decode_field(a, "aunt") for a in payload.get("aunts") or []
            ),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "total": self.total,
            "index": self.index,
            "leaf_hash": to_hex(self.leaf_hash),
            "aunts": [to_hex(a) for a in self.aunts],
        }


@dataclass(frozen=True)
class BinaryMerkleProof:
    """
    Inclusion proof in the bridge contract's encoding.

    ``key`` is the 0-based leaf position, ``side_nodes`` are the sibling
    hashes from leaf to root, ``num_leaves`` is the size of the tree.
    """

    side_nodes: Tuple[bytes, ...]
    key: int
    num_leaves: int

    def as_contract_arg(self) -> Tuple[list, int, int]:
        return (list(self.side_nodes), self.key, self.num_leaves)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "side_nodes": [to_hex(n) for n in self.side_nodes],
            "key": self.key,
            "num_leaves": self.num_leaves,
        }


# =============================================================================
# ATTESTATIONS
# =============================================================================


@dataclass(frozen=True)
class Attestation:
    """A batch commitment over heights [start_block, end_block)."""

    nonce: int
    start_block: int
    end_block: int

    @property
    def size(self) -> int:
        return self.end_block - self.start_block

    def contains(self, height: int) -> bool:
        return self.start_block <= height < self.end_block

    def to_dict(self) -> Dict[str, Any]:
        return {
            "nonce": self.nonce,
            "start_block": self.start_block,
            "end_block": self.end_block,
        }
