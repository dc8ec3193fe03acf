"""
Share inclusion proofs.

A ``ShareProof`` proves that a run of shares sits in a block: per row of
the extended data square, an NMT range proof ties the row's shares to the
row root, and an RFC-6962 proof ties every row root to the block's data
root. The proof carries the data root it is checked against, so
``verify()`` needs no arguments.
"""

from dataclasses import dataclass, field, replace
from typing import Any, Dict, Optional, Tuple

from blobstream_toolkit.proofs.merkle import verify_inclusion_proof
from blobstream_toolkit.proofs.nmt import NmtHasher, verify_range
from blobstream_toolkit.proofs.types import InclusionProof
from blobstream_toolkit.shared.constants import ShareConstants
from blobstream_toolkit.shared.exceptions import ProofInvalidError
from blobstream_toolkit.utils.encoding import (
    b64decode_field,
    hexdecode_field,
    to_bytes32,
    to_hex,
)


@dataclass(frozen=True)
class NMTProof:
    """Range proof of shares [start, end) within one row."""

    start: int
    end: int
    nodes: Tuple[bytes, ...] = field(default_factory=tuple)
    leaf_hash: bytes = b""

    @property
    def shares_used(self) -> int:
        return self.end - self.start

    @classmethod
    def from_rpc(cls, payload: Dict[str, Any]) -> "NMTProof":
        # zero-valued fields are omitted from the JSON
        return cls(
            start=int(payload.get("start", 0)),
            end=int(payload.get("end", 0)),
            nodes=tuple(
                b64decode_field(n, "nmt node")
                for n in payload.get("nodes") or []
            ),
            leaf_hash=b64decode_field(payload.get("leaf_hash"), "leaf_hash"),
        )


@dataclass(frozen=True)
class RowProof:
    """Inclusion of the row roots [start_row, end_row] in the data root."""

    row_roots: Tuple[bytes, ...]
    proofs: Tuple[InclusionProof, ...]
    start_row: int
    end_row: int

    @classmethod
    def from_rpc(cls, payload: Dict[str, Any]) -> "RowProof":
        return cls(
            row_roots=tuple(
                hexdecode_field(r, "row root")
                for r in payload.get("row_roots") or []
            ),
            proofs=tuple(
                InclusionProof.from_rpc(p) for p in payload.get("proofs") or []
            ),
            start_row=int(payload.get("start_row", 0)),
            end_row=int(payload.get("end_row", 0)),
        )

    def validate(self, data_root: bytes) -> None:
        if len(self.row_roots) != len(self.proofs):
            raise ProofInvalidError(
                f"{len(self.row_roots)} row roots but {len(self.proofs)} row proofs"
            )
        if self.end_row - self.start_row + 1 != len(self.row_roots):
            raise ProofInvalidError(
                f"rows [{self.start_row}, {self.end_row}] do not match "
                f"{len(self.row_roots)} row roots"
            )
        for i, (row_root, proof) in enumerate(zip(self.row_roots, self.proofs)):
            if proof.index != self.start_row + i:
                raise ProofInvalidError(
                    f"row proof {i} is for row {proof.index}, "
                    f"expected {self.start_row + i}"
                )
            if not verify_inclusion_proof(proof, data_root, row_root):
                raise ProofInvalidError(
                    f"row root {self.start_row + i} is not included in the data root"
                )


@dataclass(frozen=True)
class ShareProof:
    """
    Proof that ``data`` (whole shares) belongs to the block whose data root
    is ``data_root``.
    """

    data: Tuple[bytes, ...]
    share_proofs: Tuple[NMTProof, ...]
    namespace_id: bytes
    namespace_version: int
    row_proof: RowProof
    data_root: Optional[bytes] = None

    @classmethod
    def from_rpc(
        cls, payload: Dict[str, Any], data_root: Optional[bytes] = None
    ) -> "ShareProof":
        """Parse the ``prove_shares`` result, binding it to ``data_root``."""
        return cls(
            data=tuple(
                b64decode_field(s, "share") for s in payload.get("data") or []
            ),
            share_proofs=tuple(
                NMTProof.from_rpc(p) for p in payload.get("share_proofs") or []
            ),
            namespace_id=b64decode_field(
                payload.get("namespace_id"), "namespace_id"
            ),
            namespace_version=int(payload.get("namespace_version", 0)),
            row_proof=RowProof.from_rpc(payload.get("row_proof") or {}),
            data_root=(
                to_bytes32(data_root, "data_root")
                if data_root is not None
                else None
            ),
        )

    def bind(self, data_root: bytes) -> "ShareProof":
        """Return a copy checked against ``data_root``."""
        return replace(self, data_root=to_bytes32(data_root, "data_root"))

    @property
    def namespace(self) -> bytes:
        return bytes([self.namespace_version]) + self.namespace_id

    @property
    def share_count(self) -> int:
        return len(self.data)

    def validate(self) -> None:
        """Run every check, raising ProofInvalidError with the reason."""
        if self.data_root is None:
            raise ProofInvalidError("share proof is not bound to a data root")
        if not 0 <= self.namespace_version <= 0xFF:
            raise ProofInvalidError(
                f"namespace version {self.namespace_version} does not fit a byte"
            )
        if len(self.namespace) != ShareConstants.NAMESPACE_SIZE:
            raise ProofInvalidError(
                f"namespace must be {ShareConstants.NAMESPACE_SIZE} bytes"
            )

        shares_in_proofs = sum(p.shares_used for p in self.share_proofs)
        if shares_in_proofs != len(self.data):
            raise ProofInvalidError(
                f"proofs cover {shares_in_proofs} shares but "
                f"{len(self.data)} shares were supplied"
            )
        if len(self.share_proofs) != len(self.row_proof.row_roots):
            raise ProofInvalidError(
                f"{len(self.share_proofs)} share proofs but "
                f"{len(self.row_proof.row_roots)} row roots"
            )

        hasher = NmtHasher()
        cursor = 0
        for i, proof in enumerate(self.share_proofs):
            shares = self.data[cursor : cursor + proof.shares_used]
            if not verify_range(
                proof.start,
                proof.end,
                proof.nodes,
                self.namespace,
                shares,
                self.row_proof.row_roots[i],
                hasher,
            ):
                raise ProofInvalidError(
                    f"shares of row {self.row_proof.start_row + i} do not "
                    "match the row root"
                )
            cursor += proof.shares_used

        self.row_proof.validate(self.data_root)

    def verify(self) -> bool:
        """True when the shares are proven under the embedded data root."""
        try:
            self.validate()
        except ProofInvalidError:
            return False
        return True

    def to_dict(self) -> Dict[str, Any]:
        return {
            "namespace": to_hex(self.namespace),
            "share_count": self.share_count,
            "start_row": self.row_proof.start_row,
            "end_row": self.row_proof.end_row,
            "data_root": to_hex(self.data_root) if self.data_root else None,
        }
