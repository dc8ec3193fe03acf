"""
Values produced by the verification stages.
"""

from dataclasses import dataclass
from typing import Any, Dict, Optional

from blobstream_toolkit.proofs.share_proof import ShareProof
from blobstream_toolkit.proofs.types import (
    Attestation,
    BinaryMerkleProof,
    DataRootTuple,
    InclusionProof,
)
from blobstream_toolkit.shared.results import PipelineStage
from blobstream_toolkit.shared.types import BlockData
from blobstream_toolkit.square.types import ShareRange


@dataclass(frozen=True)
class BlobLocator:
    """One blob inside one block."""

    block_height: int
    tx_index: int
    blob_index: int

    def to_dict(self) -> Dict[str, Any]:
        return {
            "block_height": self.block_height,
            "tx_index": self.tx_index,
            "blob_index": self.blob_index,
        }


@dataclass(frozen=True)
class LocatedBlob:
    """Output of the blob locator."""

    locator: BlobLocator
    share_range: ShareRange
    block: BlockData
    square_size: int

    @property
    def data_root_tuple(self) -> DataRootTuple:
        return DataRootTuple(
            height=self.block.height, data_root=self.block.data_root
        )


@dataclass(frozen=True)
class VerificationReport:
    """Everything a verification run produced."""

    tx_hash: str
    stage: PipelineStage
    valid: bool
    attestation: Attestation
    located: Optional[LocatedBlob] = None
    share_proof: Optional[ShareProof] = None
    inclusion_proof: Optional[InclusionProof] = None
    binary_proof: Optional[BinaryMerkleProof] = None
    failed_stage: Optional[str] = None
    error: Optional[Dict[str, Any]] = None

    def to_dict(self) -> Dict[str, Any]:
        report: Dict[str, Any] = {
            "tx_hash": self.tx_hash,
            "stage": self.stage.value,
            "valid": self.valid,
            "attestation": self.attestation.to_dict(),
        }
        if self.failed_stage is not None:
            report["failed_stage"] = self.failed_stage
            report["error"] = self.error
        if self.located is not None:
            report["locator"] = self.located.locator.to_dict()
            report["share_range"] = self.located.share_range.to_dict()
            report["square_size"] = self.located.square_size
            report["data_root_tuple"] = (
                self.located.data_root_tuple.to_dict()
            )
        if self.share_proof is not None:
            report["share_proof"] = self.share_proof.to_dict()
        if self.inclusion_proof is not None:
            report["inclusion_proof"] = self.inclusion_proof.to_dict()
        if self.binary_proof is not None:
            report["binary_merkle_proof"] = self.binary_proof.to_dict()
        return report
