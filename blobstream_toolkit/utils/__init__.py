from blobstream_toolkit.utils.encoding import (
    b64decode_field,
    b64encode_bytes,
    decode_tx_hash,
    hexdecode_field,
    to_bytes32,
    to_hex,
)

__all__ = [
    "b64decode_field",
    "b64encode_bytes",
    "decode_tx_hash",
    "hexdecode_field",
    "to_bytes32",
    "to_hex",
]
