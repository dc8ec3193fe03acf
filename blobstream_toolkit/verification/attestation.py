"""
Attestation verifier.

The DA node's inclusion proof is re-encoded into the bridge contract's
``BinaryMerkleProof`` and checked on-chain with a read-only
``verifyAttestation`` call. Re-encoding is a pure format change: aunts map
one-to-one, in order, onto side nodes; nothing is hashed.
"""

from typing import Any, Dict, Optional

from blobstream_toolkit.proofs.merkle import compute_root, leaf_digest
from blobstream_toolkit.proofs.types import (
    BinaryMerkleProof,
    DataRootTuple,
    InclusionProof,
)
from blobstream_toolkit.shared.exceptions import (
    AttestationMismatchError,
    ContractCallError,
)
from blobstream_toolkit.shared.logging import get_logger
from blobstream_toolkit.shared.services.blobstream_contract import (
    BlobstreamContract,
)
from blobstream_toolkit.utils.encoding import to_bytes32, to_hex

_logger = get_logger(__name__)


def reencode(proof: InclusionProof) -> BinaryMerkleProof:
    """Map a DA-node inclusion proof onto the contract's proof encoding.

    Raises:
        InvalidHashLength: an aunt is not exactly 32 bytes
    """
    return BinaryMerkleProof(
        side_nodes=tuple(
            to_bytes32(aunt, f"aunt[{i}]") for i, aunt in enumerate(proof.aunts)
        ),
        key=proof.index,
        num_leaves=proof.total,
    )


def local_tuple_root(
    data_root_tuple: DataRootTuple, proof: BinaryMerkleProof
) -> Optional[bytes]:
    """Root the contract would recompute from ``data_root_tuple``."""
    return compute_root(
        proof.key,
        proof.num_leaves,
        leaf_digest(data_root_tuple.encode()),
        proof.side_nodes,
    )


def _diagnose(
    bridge: BlobstreamContract,
    nonce: int,
    data_root_tuple: DataRootTuple,
    proof: BinaryMerkleProof,
) -> Dict[str, Any]:
    computed = local_tuple_root(data_root_tuple, proof)
    diagnosis: Dict[str, Any] = {
        "computed_root": to_hex(computed) if computed is not None else None,
    }
    try:
        stored = bridge.data_root_tuple_root(nonce)
        latest = bridge.latest_nonce()
    except ContractCallError as e:
        _logger.warning(f"Could not read bridge state for diagnosis: {e}")
        return diagnosis

    diagnosis["stored_root"] = to_hex(stored)
    diagnosis["latest_nonce"] = latest
    if nonce > latest:
        diagnosis["reason"] = f"nonce {nonce} is not committed yet"
    elif computed is None:
        diagnosis["reason"] = "proof does not fit the tree shape"
    elif computed != stored:
        diagnosis["reason"] = "tuple root differs from the stored root"
    return diagnosis


def verify_attestation(
    bridge: BlobstreamContract,
    nonce: int,
    data_root_tuple: DataRootTuple,
    proof: BinaryMerkleProof,
) -> bool:
    """
    Confirm on-chain that ``data_root_tuple`` is in the batch of ``nonce``.

    Returns True only when the contract explicitly answered true.

    Raises:
        ContractCallError: the call failed
        AttestationMismatchError: the contract answered false
    """
    context = {
        "nonce": nonce,
        "height": data_root_tuple.height,
        "data_root": data_root_tuple.data_root,
        "key": proof.key,
        "num_leaves": proof.num_leaves,
    }

    valid = bridge.verify_attestation(
        nonce, data_root_tuple.as_contract_arg(), proof.as_contract_arg()
    )
    if valid is not True:
        context.update(_diagnose(bridge, nonce, data_root_tuple, proof))
        raise AttestationMismatchError(
            f"tuple for height {data_root_tuple.height} is not attested "
            f"under nonce {nonce}",
            context=context,
        )
    return True
