"""
Batch inclusion prover: the block's data root is part of the batch
committed under a nonce.
"""

from blobstream_toolkit.proofs.types import Attestation, InclusionProof
from blobstream_toolkit.shared.exceptions import ProofFetchError
from blobstream_toolkit.shared.services.celestia_rpc import (
    CelestiaRPCError,
    CelestiaRPCService,
)


def prove_batch_inclusion(
    client: CelestiaRPCService, height: int, attestation: Attestation
) -> InclusionProof:
    """
    Fetch the proof that ``height``'s data root tuple is leaf
    ``height - start_block`` of the batch [start_block, end_block).

    Raises:
        ProofFetchError: ``height`` is outside the batch, the node could
            not produce the proof, or the proof is for another position
    """
    context = {"height": height, **attestation.to_dict()}

    if not attestation.contains(height):
        raise ProofFetchError(
            f"height {height} is outside the batch "
            f"[{attestation.start_block}, {attestation.end_block})",
            context=context,
        )

    try:
        proof = client.data_root_inclusion_proof(
            height, attestation.start_block, attestation.end_block
        )
    except CelestiaRPCError as e:
        raise ProofFetchError(
            f"data root inclusion proof for height {height} could not be "
            f"fetched: {e.message}",
            context=context,
        ) from e

    expected_index = height - attestation.start_block
    if proof.index != expected_index or proof.total != attestation.size:
        raise ProofFetchError(
            f"proof is for leaf {proof.index} of {proof.total}, expected "
            f"leaf {expected_index} of {attestation.size}",
            context=context,
        )
    return proof
