"""
Blob locator: transaction hash -> block height, tx index and share range.
"""

from blobstream_toolkit.shared.exceptions import NotFoundError, ShareRangeError
from blobstream_toolkit.shared.logging import get_logger
from blobstream_toolkit.shared.services.celestia_rpc import (
    CelestiaRPCError,
    CelestiaRPCService,
)
from blobstream_toolkit.square.builder import blob_share_range
from blobstream_toolkit.utils.encoding import decode_tx_hash
from blobstream_toolkit.verification.types import BlobLocator, LocatedBlob

_logger = get_logger(__name__)


def locate_blob(
    client: CelestiaRPCService, tx_hash: str, blob_index: int
) -> LocatedBlob:
    """
    Resolve ``tx_hash`` to the shares blob ``blob_index`` occupies.

    The share range is recomputed from the block's raw transactions, laid
    out with the square rules of the block's app version.

    Raises:
        DecodeError: ``tx_hash`` is not a 32-byte hex digest
        NotFoundError: the transaction or its block cannot be fetched
        ShareRangeError: the blob cannot be mapped to a share range
    """
    digest = decode_tx_hash(tx_hash)
    context = {"tx_hash": tx_hash, "blob_index": blob_index}

    try:
        tx = client.get_tx(digest, prove=True)
    except CelestiaRPCError as e:
        reason = "not found" if e.is_not_found else e.message
        raise NotFoundError(
            f"transaction {tx_hash} could not be fetched: {reason}",
            context=context,
        ) from e
    if tx.height <= 0 or tx.index < 0:
        raise NotFoundError(
            f"transaction {tx_hash} has no inclusion metadata",
            context=context,
        )
    context.update(height=tx.height, tx_index=tx.index)

    try:
        block = client.get_block(tx.height)
    except CelestiaRPCError as e:
        reason = "not found" if e.is_not_found else e.message
        raise NotFoundError(
            f"block {tx.height} could not be fetched: {reason}",
            context=context,
        ) from e
    if block.height != tx.height:
        raise NotFoundError(
            f"node returned block {block.height} for height {tx.height}",
            context=context,
        )

    share_range, layout = blob_share_range(
        block.txs, tx.index, blob_index, block.app_version
    )
    if block.square_size and layout.square_size != block.square_size:
        raise ShareRangeError(
            f"computed square size {layout.square_size} does not match "
            f"the block's square size {block.square_size}",
            context=context,
        )

    _logger.debug(
        f"Blob {blob_index} of tx {tx.index} at height {tx.height} spans "
        f"shares [{share_range.start}, {share_range.end}) of a "
        f"{layout.square_size}x{layout.square_size} square"
    )
    return LocatedBlob(
        locator=BlobLocator(
            block_height=tx.height, tx_index=tx.index, blob_index=blob_index
        ),
        share_range=share_range,
        block=block,
        square_size=layout.square_size,
    )
