"""
Pytest configuration and shared fixtures.

Besides the usual sample values, this module builds small but genuine
Celestia-style structures so proofs can be verified without a node:

- RFC-6962 trees (data root over row/column roots, batch commitments)
- NMT rows of an extended data square with parity shares
- share proofs and data root inclusion proofs built from those trees
"""

import hashlib
from dataclasses import dataclass
from types import SimpleNamespace
from typing import Dict, List, Optional, Sequence, Tuple
from unittest.mock import MagicMock

import pytest

from blobstream_toolkit.proofs.merkle import (
    get_split_point,
    leaf_digest,
    node_digest,
    verify_binary_merkle_proof,
)
from blobstream_toolkit.proofs.nmt import NmtHasher
from blobstream_toolkit.proofs.share_proof import NMTProof, RowProof, ShareProof
from blobstream_toolkit.proofs.types import (
    BinaryMerkleProof,
    DataRootTuple,
    InclusionProof,
)
from blobstream_toolkit.shared.config import VerificationConfig
from blobstream_toolkit.shared.constants import (
    NamespaceConstants,
    ShareConstants,
)
from blobstream_toolkit.shared.types import BlockData, TransactionInfo
from blobstream_toolkit.square.blob_tx import Blob, marshal_blob_tx

SAMPLE_TX_HASH = (
    "4B122452FA679F15B458271512816B933803D5870919F67969B4D62221D70346"
)
SAMPLE_CONTRACT = "0x046120e6c6c48c05627fb369756f5f44858950a5"
BLOB_NAMESPACE = b"\x00" + bytes(18) + b"blobstream"
TAIL_PADDING_NAMESPACE = b"\xff" * 28 + b"\xfe"


# =============================================================================
# TREE BUILDERS
# =============================================================================


def rfc6962_root(leaves: Sequence[bytes]) -> bytes:
    if not leaves:
        return hashlib.sha256(b"").digest()
    if len(leaves) == 1:
        return leaf_digest(leaves[0])
    k = get_split_point(len(leaves))
    return node_digest(rfc6962_root(leaves[:k]), rfc6962_root(leaves[k:]))


def rfc6962_aunts(leaves: Sequence[bytes], index: int) -> List[bytes]:
    """Sibling hashes of leaf ``index``, leaf to root."""
    if len(leaves) <= 1:
        return []
    k = get_split_point(len(leaves))
    if index < k:
        return rfc6962_aunts(leaves[:k], index) + [rfc6962_root(leaves[k:])]
    return rfc6962_aunts(leaves[k:], index - k) + [rfc6962_root(leaves[:k])]


def rfc6962_proof(leaves: Sequence[bytes], index: int) -> InclusionProof:
    return InclusionProof(
        total=len(leaves),
        index=index,
        leaf_hash=leaf_digest(leaves[index]),
        aunts=tuple(rfc6962_aunts(leaves, index)),
    )


def nmt_range_proof(
    hasher: NmtHasher, leaves: Sequence[bytes], start: int, end: int
) -> Tuple[bytes, List[bytes]]:
    """Root and range-proof nodes for ``leaves`` (namespaced) [start, end)."""
    leaf_hashes = [hasher.hash_leaf(leaf) for leaf in leaves]
    nodes: List[bytes] = []

    def recurse(lo: int, hi: int, include: bool) -> Optional[bytes]:
        if lo >= len(leaf_hashes):
            return None
        if hi - lo == 1:
            leaf_hash = leaf_hashes[lo]
            if (lo < start or lo >= end) and include:
                nodes.append(leaf_hash)
            return leaf_hash
        outside = hi <= start or lo >= end
        child_include = include and not outside
        k = get_split_point(hi - lo)
        left = recurse(lo, lo + k, child_include)
        right = recurse(lo + k, hi, child_include)
        digest = left if right is None else hasher.hash_node(left, right)
        if include and not child_include:
            nodes.append(digest)
        return digest

    full = max(get_split_point(len(leaf_hashes)) * 2, 1)
    root = recurse(0, full, True)
    return root, nodes


def make_share(namespace: bytes, payload: bytes) -> bytes:
    body = (payload * (ShareConstants.SHARE_SIZE // max(len(payload), 1) + 1))
    return namespace + body[: ShareConstants.SHARE_SIZE - len(namespace)]


@dataclass
class ExtendedSquare:
    """A k x k original square extended to 2k x 2k with parity shares."""

    k: int
    namespaces: List[bytes]
    shares: List[bytes]
    row_roots: List[bytes]
    col_roots: List[bytes]
    rows: List[List[bytes]]

    @property
    def data_root(self) -> bytes:
        return rfc6962_root(self.row_roots + self.col_roots)

    def row_inclusion(self, row: int) -> InclusionProof:
        return rfc6962_proof(self.row_roots + self.col_roots, row)

    def share_proof(
        self, start: int, end: int, data_root: Optional[bytes] = None
    ) -> ShareProof:
        """Honest share proof for original shares [start, end)."""
        hasher = NmtHasher()
        first_row, last_row = start // self.k, (end - 1) // self.k
        nmt_proofs = []
        for row in range(first_row, last_row + 1):
            lo = max(start, row * self.k) - row * self.k
            hi = min(end, (row + 1) * self.k) - row * self.k
            _, nodes = nmt_range_proof(hasher, self.rows[row], lo, hi)
            nmt_proofs.append(NMTProof(start=lo, end=hi, nodes=tuple(nodes)))

        namespace = self.namespaces[start]
        return ShareProof(
            data=tuple(self.shares[start:end]),
            share_proofs=tuple(nmt_proofs),
            namespace_id=namespace[1:],
            namespace_version=namespace[0],
            row_proof=RowProof(
                row_roots=tuple(self.row_roots[first_row : last_row + 1]),
                proofs=tuple(
                    self.row_inclusion(r)
                    for r in range(first_row, last_row + 1)
                ),
                start_row=first_row,
                end_row=last_row,
            ),
            data_root=data_root,
        )


def build_extended_square(
    k: int, namespaces: Sequence[bytes]
) -> ExtendedSquare:
    """
    ``namespaces`` gives the namespace of each original share in row-major
    order and must be sorted. Parity shares carry the parity namespace.
    """
    assert len(namespaces) == k * k
    assert list(namespaces) == sorted(namespaces)
    hasher = NmtHasher()
    parity = NamespaceConstants.PARITY_SHARES_NAMESPACE

    shares = [
        make_share(ns, f"share-{i}".encode()) for i, ns in enumerate(namespaces)
    ]
    grid: List[List[bytes]] = []
    for r in range(2 * k):
        row = []
        for c in range(2 * k):
            if r < k and c < k:
                share = shares[r * k + c]
                row.append(share[:29] + share)
            else:
                row.append(parity + make_share(parity, f"p{r}.{c}".encode()))
        grid.append(row)

    row_roots = [nmt_range_proof(hasher, row, 0, 1)[0] for row in grid]
    columns = [[grid[r][c] for r in range(2 * k)] for c in range(2 * k)]
    col_roots = [nmt_range_proof(hasher, col, 0, 1)[0] for col in columns]
    return ExtendedSquare(
        k=k,
        namespaces=list(namespaces),
        shares=shares,
        row_roots=row_roots,
        col_roots=col_roots,
        rows=grid,
    )


@dataclass
class Batch:
    """A committed batch of data root tuples [start, end)."""

    start: int
    end: int
    tuples: List[DataRootTuple]

    @property
    def leaves(self) -> List[bytes]:
        return [t.encode() for t in self.tuples]

    @property
    def root(self) -> bytes:
        return rfc6962_root(self.leaves)

    def inclusion_proof(self, height: int) -> InclusionProof:
        return rfc6962_proof(self.leaves, height - self.start)


def build_batch(
    start: int, end: int, data_roots: Optional[Dict[int, bytes]] = None
) -> Batch:
    data_roots = data_roots or {}
    tuples = [
        DataRootTuple(
            height=h,
            data_root=data_roots.get(
                h, hashlib.sha256(f"root-{h}".encode()).digest()
            ),
        )
        for h in range(start, end)
    ]
    return Batch(start=start, end=end, tuples=tuples)


# =============================================================================
# FIXTURES
# =============================================================================

@pytest.fixture
def trees() -> SimpleNamespace:
    """Tree builders for tests that need their own shapes."""
    return SimpleNamespace(
        root=rfc6962_root,
        aunts=rfc6962_aunts,
        proof=rfc6962_proof,
        nmt_range_proof=nmt_range_proof,
        make_share=make_share,
        extended_square=build_extended_square,
        batch=build_batch,
        blob_namespace=BLOB_NAMESPACE,
        tail_padding_namespace=TAIL_PADDING_NAMESPACE,
    )



@pytest.fixture
def square() -> ExtendedSquare:
    """2x2 square: a PFB share, one blob share, two tail padding shares."""
    return build_extended_square(
        2,
        [
            NamespaceConstants.PAY_FOR_BLOB_NAMESPACE,
            BLOB_NAMESPACE,
            TAIL_PADDING_NAMESPACE,
            TAIL_PADDING_NAMESPACE,
        ],
    )


@pytest.fixture
def wide_square() -> ExtendedSquare:
    """4x4 square with a blob spanning rows 1 and 2."""
    namespaces = (
        [NamespaceConstants.TX_NAMESPACE] * 2
        + [NamespaceConstants.PAY_FOR_BLOB_NAMESPACE] * 2
        + [BLOB_NAMESPACE] * 7
        + [TAIL_PADDING_NAMESPACE] * 5
    )
    return build_extended_square(4, sorted(namespaces))


@pytest.fixture
def sample_blob_tx() -> bytes:
    """A block transaction carrying exactly one small blob."""
    return marshal_blob_tx(
        b"\x0a\x05hello-sdk-tx",
        [
            Blob(
                namespace_id=BLOB_NAMESPACE[1:],
                data=b"blob payload",
                namespace_version=0,
            )
        ],
    )


@pytest.fixture
def sample_config() -> VerificationConfig:
    return VerificationConfig(
        tx_hash=SAMPLE_TX_HASH,
        blob_index=0,
        celestia_rpc_url="http://celestia.invalid:26657",
        evm_rpc_url="http://evm.invalid:8545",
        contract_address=SAMPLE_CONTRACT,
        start_block=100,
        end_block=104,
        nonce=7,
    )


@dataclass
class PipelineWorld:
    """Mock collaborators backed by genuine proofs."""

    celestia: MagicMock
    bridge: MagicMock
    square: ExtendedSquare
    batch: Batch
    height: int
    stored_roots: Dict[int, bytes]


@pytest.fixture
def pipeline_world(square, sample_blob_tx) -> PipelineWorld:
    """
    Block 102 holds one blob tx whose blob occupies share [1, 2). The batch
    [100, 104) is committed under nonce 7; nonce 8 holds another batch.
    """
    height = 102
    batch = build_batch(100, 104, {height: square.data_root})
    stored_roots = {
        7: batch.root,
        8: build_batch(104, 108).root,
    }

    celestia = MagicMock()
    celestia.get_tx.return_value = TransactionInfo(
        hash=bytes.fromhex(SAMPLE_TX_HASH),
        height=height,
        index=0,
        tx=sample_blob_tx,
    )
    celestia.get_block.return_value = BlockData(
        height=height,
        data_root=square.data_root,
        txs=(sample_blob_tx,),
        app_version=1,
        square_size=2,
    )
    celestia.prove_shares.side_effect = (
        lambda h, start, end, data_root=None: square.share_proof(start, end)
    )
    celestia.data_root_inclusion_proof.side_effect = (
        lambda h, start, end: build_batch(
            start, end, {height: square.data_root}
        ).inclusion_proof(h)
    )

    bridge = MagicMock()

    def verify_attestation(nonce, tuple_arg, proof_arg):
        root = stored_roots.get(nonce)
        if root is None:
            return False
        side_nodes, key, num_leaves = proof_arg
        leaf = DataRootTuple(height=tuple_arg[0], data_root=tuple_arg[1])
        return verify_binary_merkle_proof(
            root,
            BinaryMerkleProof(tuple(side_nodes), key, num_leaves),
            leaf.encode(),
        )

    bridge.verify_attestation.side_effect = verify_attestation
    bridge.data_root_tuple_root.side_effect = (
        lambda nonce: stored_roots.get(nonce, bytes(32))
    )
    bridge.latest_nonce.return_value = max(stored_roots)

    return PipelineWorld(
        celestia=celestia,
        bridge=bridge,
        square=square,
        batch=batch,
        height=height,
        stored_roots=stored_roots,
    )


def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line(
        "markers", "integration: mark test as integration test"
    )
