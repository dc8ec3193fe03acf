from blobstream_toolkit.square.blob_tx import (
    Blob,
    BlobTx,
    marshal_blob_tx,
    unmarshal_blob_tx,
)
from blobstream_toolkit.square.builder import (
    SquareBuilder,
    SquareLayout,
    blob_share_range,
    build_square_layout,
)
from blobstream_toolkit.square.types import ShareRange

__all__ = [
    "Blob",
    "BlobTx",
    "marshal_blob_tx",
    "unmarshal_blob_tx",
    "SquareBuilder",
    "SquareLayout",
    "blob_share_range",
    "build_square_layout",
    "ShareRange",
]
