"""
Share inclusion verifier: the located shares are part of the block's
data root.
"""

from blobstream_toolkit.proofs.share_proof import ShareProof
from blobstream_toolkit.shared.exceptions import (
    ProofFetchError,
    ProofInvalidError,
)
from blobstream_toolkit.shared.services.celestia_rpc import (
    CelestiaRPCError,
    CelestiaRPCService,
)
from blobstream_toolkit.square.types import ShareRange
from blobstream_toolkit.utils.encoding import to_bytes32


def verify_share_inclusion(
    client: CelestiaRPCService,
    height: int,
    share_range: ShareRange,
    data_root: bytes,
) -> ShareProof:
    """
    Fetch the share proof for ``share_range`` and check it.

    The proof is checked against ``data_root`` taken from the block the
    blob was located in, never against a root supplied by the proof.

    Raises:
        ProofFetchError: the node could not produce the proof
        ProofInvalidError: the proof does not verify
    """
    data_root = to_bytes32(data_root, "data_root")
    context = {
        "height": height,
        "share_start": share_range.start,
        "share_end": share_range.end,
    }

    try:
        proof = client.prove_shares(height, share_range.start, share_range.end)
    except CelestiaRPCError as e:
        raise ProofFetchError(
            f"share proof for [{share_range.start}, {share_range.end}) at "
            f"height {height} could not be fetched: {e.message}",
            context=context,
        ) from e
    proof = proof.bind(data_root)

    if proof.share_count != len(share_range):
        raise ProofInvalidError(
            f"share proof carries {proof.share_count} shares, "
            f"expected {len(share_range)}",
            context=context,
        )

    # same checks as verify(), keeping the reason for the report
    try:
        proof.validate()
    except ProofInvalidError as e:
        raise ProofInvalidError(
            f"share proof at height {height} does not verify: {e.message}",
            context=context,
        ) from e
    return proof
