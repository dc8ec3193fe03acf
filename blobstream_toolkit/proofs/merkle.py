"""
RFC-6962 binary Merkle trees.

This is the tree shape used by the DA chain (data root over row and
column roots, batch commitments over data root tuples) and by the bridge
contract's ``BinaryMerkleTree`` library:

- leaf digest  = sha256(0x00 || leaf)
- inner digest = sha256(0x01 || left || right)
- a tree of n > 1 leaves splits at the largest power of two below n, so
  only the right-most subtrees are ever unbalanced.

Side nodes (aunts) are ordered from the leaf up: the last one is the
sibling directly below the root.
"""

import hashlib
from typing import Optional, Sequence

from blobstream_toolkit.proofs.types import BinaryMerkleProof, InclusionProof
from blobstream_toolkit.shared.constants import HashConstants


def leaf_digest(leaf: bytes) -> bytes:
    return hashlib.sha256(HashConstants.LEAF_PREFIX + leaf).digest()


def node_digest(left: bytes, right: bytes) -> bytes:
    return hashlib.sha256(HashConstants.NODE_PREFIX + left + right).digest()


def get_split_point(length: int) -> int:
    """Largest power of two strictly less than ``length`` (0 for 1)."""
    if length < 1:
        raise ValueError("trying to split a tree with size < 1")
    k = 1 << (length.bit_length() - 1)
    if k == length:
        k >>= 1
    return k


def path_length_from_key(key: int, num_leaves: int) -> int:
    """Number of side nodes a proof for ``key`` must carry."""
    if num_leaves <= 1:
        return 0
    num_left = get_split_point(num_leaves)
    if key < num_left:
        return 1 + path_length_from_key(key, num_left)
    return 1 + path_length_from_key(key - num_left, num_leaves - num_left)


def compute_root(
    key: int,
    num_leaves: int,
    leaf_hash: bytes,
    side_nodes: Sequence[bytes],
) -> Optional[bytes]:
    """
    Recompute the root from a leaf digest and its side nodes.

    Returns None when the side nodes do not fit the tree shape (too many,
    too few, or a key outside the tree).
    """
    if key < 0 or num_leaves <= 0 or key >= num_leaves:
        return None
    if num_leaves == 1:
        if side_nodes:
            return None
        return leaf_hash
    if not side_nodes:
        return None

    num_left = get_split_point(num_leaves)
    inner = side_nodes[:-1]
    sibling = side_nodes[-1]
    if key < num_left:
        left = compute_root(key, num_left, leaf_hash, inner)
        if left is None:
            return None
        return node_digest(left, sibling)
    right = compute_root(key - num_left, num_leaves - num_left, leaf_hash, inner)
    if right is None:
        return None
    return node_digest(sibling, right)


def verify_inclusion_proof(
    proof: InclusionProof, root: bytes, leaf: bytes
) -> bool:
    """Check a DA-node inclusion proof of ``leaf`` against ``root``.

    The proof's embedded leaf hash must match the hash of ``leaf``.
    """
    if proof.total < 0 or proof.index < 0:
        return False
    if len(proof.aunts) > HashConstants.MAX_AUNTS:
        return False
    digest = leaf_digest(leaf)
    if proof.leaf_hash != digest:
        return False
    computed = compute_root(proof.index, proof.total, digest, proof.aunts)
    return computed is not None and computed == root


def verify_binary_merkle_proof(
    root: bytes, proof: BinaryMerkleProof, data: bytes
) -> bool:
    """
    Check ``data`` against ``root`` the way the bridge contract does.

    Rejects proofs whose side-node count differs from the path length of
    ``key``; a proof with no side nodes is valid only for a single-leaf
    tree, where the root is the leaf digest itself.
    """
    if proof.num_leaves <= 1:
        if proof.side_nodes:
            return False
    elif len(proof.side_nodes) != path_length_from_key(
        proof.key, proof.num_leaves
    ):
        return False

    if proof.key < 0 or proof.key >= proof.num_leaves:
        return False

    digest = leaf_digest(data)
    if not proof.side_nodes:
        return proof.num_leaves == 1 and root == digest

    computed = compute_root(
        proof.key, proof.num_leaves, digest, proof.side_nodes
    )
    return computed is not None and computed == root
