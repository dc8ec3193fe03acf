from blobstream_toolkit.proofs.merkle import (
    verify_binary_merkle_proof,
    verify_inclusion_proof,
)
from blobstream_toolkit.proofs.share_proof import NMTProof, RowProof, ShareProof
from blobstream_toolkit.proofs.types import (
    Attestation,
    BinaryMerkleProof,
    DataRootTuple,
    InclusionProof,
)

__all__ = [
    "Attestation",
    "BinaryMerkleProof",
    "DataRootTuple",
    "InclusionProof",
    "NMTProof",
    "RowProof",
    "ShareProof",
    "verify_binary_merkle_proof",
    "verify_inclusion_proof",
]
