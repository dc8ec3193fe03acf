"""
Namespaced Merkle tree (NMT) hashing and range-proof verification.

Every node is ``min_namespace || max_namespace || sha256 digest``. Leaves
are hashed as ``ns || ns || sha256(0x00 || ns || data)`` and inner nodes as
``min || max || sha256(0x01 || left || right)`` where the children must be
namespace-ordered (left max <= right min).

Rows of the extended data square end in parity shares that all carry the
reserved maximum namespace. With ``ignore_max_namespace`` set, a right
child whose min namespace is that maximum does not widen the parent's
max namespace, so row roots keep describing the real data only.
"""

import hashlib
from typing import List, Optional, Sequence

from blobstream_toolkit.proofs.merkle import get_split_point
from blobstream_toolkit.shared.constants import HashConstants, ShareConstants


class NMTError(ValueError):
    """Raised for malformed nodes or namespace-order violations."""


class NmtHasher:
    """SHA-256 NMT hasher for a fixed namespace size."""

    def __init__(
        self,
        namespace_size: int = ShareConstants.NAMESPACE_SIZE,
        ignore_max_namespace: bool = True,
    ):
        self.namespace_size = namespace_size
        self.ignore_max_namespace = ignore_max_namespace
        self.max_namespace = b"\xff" * namespace_size

    @property
    def node_size(self) -> int:
        return 2 * self.namespace_size + HashConstants.HASH_SIZE

    def min_namespace(self, node: bytes) -> bytes:
        return node[: self.namespace_size]

    def max_namespace_of(self, node: bytes) -> bytes:
        return node[self.namespace_size : 2 * self.namespace_size]

    def validate_node(self, node: bytes) -> None:
        if node is None or len(node) != self.node_size:
            raise NMTError(
                f"node must be {self.node_size} bytes, "
                f"got {0 if node is None else len(node)}"
            )
        if self.min_namespace(node) > self.max_namespace_of(node):
            raise NMTError("node min namespace is greater than max namespace")

    def hash_leaf(self, namespaced_data: bytes) -> bytes:
        if len(namespaced_data) < self.namespace_size:
            raise NMTError("leaf is shorter than the namespace size")
        ns = namespaced_data[: self.namespace_size]
        digest = hashlib.sha256(
            HashConstants.LEAF_PREFIX + namespaced_data
        ).digest()
        return ns + ns + digest

    def hash_node(self, left: bytes, right: bytes) -> bytes:
        self.validate_node(left)
        self.validate_node(right)

        left_min, left_max = self.min_namespace(left), self.max_namespace_of(left)
        right_min, right_max = (
            self.min_namespace(right),
            self.max_namespace_of(right),
        )
        if left_max > right_min:
            raise NMTError("children are not ordered by namespace")

        min_ns = min(left_min, right_min)
        if self.ignore_max_namespace and left_min == self.max_namespace:
            max_ns = self.max_namespace
        elif self.ignore_max_namespace and right_min == self.max_namespace:
            max_ns = left_max
        else:
            max_ns = max(left_max, right_max)

        digest = hashlib.sha256(
            HashConstants.NODE_PREFIX + left + right
        ).digest()
        return min_ns + max_ns + digest


def verify_range(
    start: int,
    end: int,
    nodes: Sequence[bytes],
    namespace: bytes,
    leaves: Sequence[bytes],
    root: bytes,
    hasher: Optional[NmtHasher] = None,
) -> bool:
    """
    Verify that ``leaves`` occupy positions [start, end) under ``root``.

    ``leaves`` are given without their namespace prefix; each is hashed as
    ``namespace || leaf``. ``nodes`` are the proof's subtree roots, left
    of the range first, in the order the tree was traversed.
    """
    hasher = hasher or NmtHasher()
    if len(namespace) != hasher.namespace_size:
        return False
    if start < 0 or start >= end:
        return False
    if end - start != len(leaves):
        return False

    try:
        hasher.validate_node(root)
        for node in nodes:
            hasher.validate_node(node)
        leaf_hashes = [hasher.hash_leaf(namespace + leaf) for leaf in leaves]
        computed = _root_from_leaf_hashes(
            hasher, start, end, list(nodes), leaf_hashes
        )
    except NMTError:
        return False
    return computed == root


def _root_from_leaf_hashes(
    hasher: NmtHasher,
    start: int,
    end: int,
    nodes: List[bytes],
    leaf_hashes: List[bytes],
) -> bytes:
    # Both lists are consumed front to back while walking the tree.
    def pop_node() -> Optional[bytes]:
        return nodes.pop(0) if nodes else None

    def compute(lo: int, hi: int) -> Optional[bytes]:
        if hi - lo == 1:
            if start <= lo < end:
                if not leaf_hashes:
                    raise NMTError("ran out of leaves")
                return leaf_hashes.pop(0)
            return pop_node()

        if hi <= start or lo >= end:
            return pop_node()

        k = get_split_point(hi - lo)
        left = compute(lo, lo + k)
        right = compute(lo + k, hi)
        if left is None:
            raise NMTError("missing left subtree")
        # only the right subtree can be absent
        if right is None:
            return left
        return hasher.hash_node(left, right)

    subtree_width = max(get_split_point(end) * 2, 1)
    root = compute(0, subtree_width)
    if root is None:
        raise NMTError("proof does not reconstruct a root")
    for node in nodes:
        root = hasher.hash_node(root, node)
    return root
