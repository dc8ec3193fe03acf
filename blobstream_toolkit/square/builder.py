"""
Data square layout.

Rebuilds, from a block's raw transactions alone, where every blob lands in
the original data square. The layout is deterministic:

1. ordinary transactions, in block order, as compact shares in the TX
   namespace;
2. one IndexWrapper per blob transaction, as compact shares in the PFB
   namespace, sized for worst-case share indexes;
3. blobs, stably sorted by namespace, each moved forward to the next index
   allowed by its subtree width.

The square width is the smallest power of two fitting the worst-case
size, bounded by the app version's upper bound.
"""

from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence, Tuple

from blobstream_toolkit.shared.constants import (
    APP_VERSION_PARAMS,
    AppVersionParams,
)
from blobstream_toolkit.shared.exceptions import ShareRangeError
from blobstream_toolkit.square.blob_tx import (
    Blob,
    BlobTx,
    index_wrapper_size,
    unmarshal_blob_tx,
)
from blobstream_toolkit.square.inclusion import (
    blob_min_square_size,
    next_share_index,
    subtree_width,
)
from blobstream_toolkit.square.shares import (
    CompactShareCounter,
    sparse_shares_needed,
)
from blobstream_toolkit.square.types import ShareRange


@dataclass(frozen=True)
class _BlobElement:
    blob: Blob
    pfb_index: int
    blob_index: int
    num_shares: int
    max_padding: int

    @property
    def max_share_offset(self) -> int:
        return self.num_shares + self.max_padding


@dataclass(frozen=True)
class SquareLayout:
    """Where each blob of a block starts, keyed by (pfb index, blob index)."""

    square_size: int
    num_normal_txs: int
    reserved_shares: int
    blob_ranges: Dict[Tuple[int, int], ShareRange]

    @property
    def total_shares(self) -> int:
        return self.square_size * self.square_size

    def ordered_ranges(self) -> List[ShareRange]:
        """All blob ranges in square order."""
        return sorted(self.blob_ranges.values(), key=lambda r: r.start)


class SquareBuilder:
    """Accumulates a block's transactions and lays out the square."""

    def __init__(self, max_square_size: int, subtree_root_threshold: int):
        self.max_square_size = max_square_size
        self.subtree_root_threshold = subtree_root_threshold
        self.txs: List[bytes] = []
        self.pfbs: List[BlobTx] = []
        self._elements: List[_BlobElement] = []
        self._tx_counter = CompactShareCounter()
        self._pfb_counter = CompactShareCounter()
        self._current_size = 0

    @classmethod
    def for_app_version(cls, app_version: int) -> "SquareBuilder":
        params: Optional[AppVersionParams] = APP_VERSION_PARAMS.get(app_version)
        if params is None:
            raise ShareRangeError(
                f"unsupported app version {app_version}",
                context={"app_version": app_version},
            )
        return cls(params.square_size_upper_bound, params.subtree_root_threshold)

    def _can_fit(self, share_count: int) -> bool:
        return (
            self._current_size + share_count
            <= self.max_square_size * self.max_square_size
        )

    def append_tx(self, tx: bytes) -> bool:
        diff = self._tx_counter.add(len(tx))
        if not self._can_fit(diff):
            self._tx_counter.revert()
            return False
        self.txs.append(tx)
        self._current_size += diff
        return True

    def append_blob_tx(self, blob_tx: BlobTx) -> bool:
        worst_case_index = self.max_square_size * self.max_square_size
        size = index_wrapper_size(
            blob_tx.tx, [worst_case_index] * len(blob_tx.blobs)
        )
        pfb_diff = self._pfb_counter.add(size)

        pfb_index = len(self.pfbs)
        elements = []
        max_blob_shares = 0
        for blob_index, blob in enumerate(blob_tx.blobs):
            num_shares = sparse_shares_needed(len(blob.data))
            element = _BlobElement(
                blob=blob,
                pfb_index=pfb_index,
                blob_index=blob_index,
                num_shares=num_shares,
                max_padding=subtree_width(
                    num_shares, self.subtree_root_threshold
                )
                - 1,
            )
            elements.append(element)
            max_blob_shares += element.max_share_offset

        if not self._can_fit(pfb_diff + max_blob_shares):
            self._pfb_counter.revert()
            return False

        self._elements.extend(elements)
        self.pfbs.append(blob_tx)
        self._current_size += pfb_diff + max_blob_shares
        return True

    def export(self) -> SquareLayout:
        square_size = blob_min_square_size(self._current_size)
        reserved = self._tx_counter.size() + self._pfb_counter.size()

        # sorted() is stable: blobs sharing a namespace keep block order
        ordered = sorted(self._elements, key=lambda e: e.blob.namespace)

        ranges: Dict[Tuple[int, int], ShareRange] = {}
        cursor = reserved
        for element in ordered:
            if element.num_shares == 0:
                continue
            cursor = next_share_index(
                cursor, element.num_shares, self.subtree_root_threshold
            )
            ranges[(element.pfb_index, element.blob_index)] = ShareRange(
                cursor, cursor + element.num_shares
            )
            cursor += element.num_shares

        return SquareLayout(
            square_size=square_size,
            num_normal_txs=len(self.txs),
            reserved_shares=reserved,
            blob_ranges=ranges,
        )


def build_square_layout(
    txs: Sequence[bytes], app_version: int
) -> Tuple[SquareBuilder, SquareLayout]:
    """Lay out every transaction of a block."""
    builder = SquareBuilder.for_app_version(app_version)
    seen_blob_tx = False
    for idx, raw in enumerate(txs):
        blob_tx = unmarshal_blob_tx(raw)
        if blob_tx is not None:
            seen_blob_tx = True
            if not builder.append_blob_tx(blob_tx):
                raise ShareRangeError(
                    f"not enough space to append blob tx at index {idx}",
                    context={"tx_index": idx},
                )
            continue
        if seen_blob_tx:
            raise ShareRangeError(
                f"normal transaction at index {idx} follows a blob transaction",
                context={"tx_index": idx},
            )
        if not builder.append_tx(raw):
            raise ShareRangeError(
                f"not enough space to append tx at index {idx}",
                context={"tx_index": idx},
            )
    return builder, builder.export()


def blob_share_range(
    txs: Sequence[bytes], tx_index: int, blob_index: int, app_version: int
) -> Tuple[ShareRange, SquareLayout]:
    """
    Share range occupied by blob ``blob_index`` of transaction ``tx_index``.

    Raises:
        ShareRangeError: the transaction is missing or not a blob
            transaction, the blob index is out of range, or the computed
            range does not fit the square.
    """
    context = {
        "tx_index": tx_index,
        "blob_index": blob_index,
        "app_version": app_version,
    }
    if tx_index < 0 or tx_index >= len(txs):
        raise ShareRangeError(
            f"tx index {tx_index} out of range for block with {len(txs)} txs",
            context=context,
        )
    target = unmarshal_blob_tx(txs[tx_index])
    if target is None:
        raise ShareRangeError(
            f"tx at index {tx_index} is not a blob transaction",
            context=context,
        )
    if blob_index < 0 or blob_index >= len(target.blobs):
        raise ShareRangeError(
            f"blob index {blob_index} out of range for tx with "
            f"{len(target.blobs)} blobs",
            context=context,
        )

    _, layout = build_square_layout(txs, app_version)
    key = (tx_index - layout.num_normal_txs, blob_index)
    share_range = layout.blob_ranges.get(key)
    if share_range is None:
        raise ShareRangeError(
            f"blob {blob_index} of tx {tx_index} occupies no shares",
            context=context,
        )
    if not share_range.within(layout.total_shares):
        raise ShareRangeError(
            f"share range [{share_range.start}, {share_range.end}) exceeds "
            f"square of {layout.total_shares} shares",
            context=context,
        )
    return share_range, layout
