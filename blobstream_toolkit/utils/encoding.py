"""Byte-level conversions at the RPC boundary"""

import base64
import binascii
from typing import Any, Optional

from eth_utils import decode_hex
from hexbytes import HexBytes

from blobstream_toolkit.shared.constants import HashConstants
from blobstream_toolkit.shared.exceptions import DecodeError, InvalidHashLength


def decode_tx_hash(tx_hash: str) -> bytes:
    """Decode a hex transaction identifier into its 32-byte digest."""
    if not isinstance(tx_hash, str) or not tx_hash:
        raise DecodeError("transaction hash must be a non-empty hex string")
    try:
        digest = decode_hex(tx_hash)
    except (binascii.Error, ValueError) as e:
        raise DecodeError(
            f"failed to decode transaction hash {tx_hash!r}: {e}",
            context={"tx_hash": tx_hash},
        ) from e
    if len(digest) != HashConstants.HASH_SIZE:
        raise DecodeError(
            f"transaction hash must be {HashConstants.HASH_SIZE} bytes, "
            f"got {len(digest)}",
            context={"tx_hash": tx_hash},
        )
    return digest


def to_bytes32(value: Any, name: str = "hash") -> bytes:
    """
    Validate that ``value`` is exactly 32 bytes and return it as ``bytes``.

    Accepts bytes-like values and 0x-prefixed or bare hex strings. Any other
    length is rejected instead of being padded or truncated.
    """
    if isinstance(value, str):
        try:
            value = decode_hex(value)
        except (binascii.Error, ValueError) as e:
            raise DecodeError(f"{name} is not valid hex: {value!r}") from e
    if not isinstance(value, (bytes, bytearray, HexBytes)):
        raise DecodeError(f"{name} must be bytes, got {type(value).__name__}")
    if len(value) != HashConstants.HASH_SIZE:
        raise InvalidHashLength(
            f"{name} must be exactly {HashConstants.HASH_SIZE} bytes, "
            f"got {len(value)}",
            context={name: bytes(value)},
        )
    return bytes(value)


def b64decode_field(value: Optional[str], name: str) -> bytes:
    """Decode a base64 JSON field; ``None`` decodes to empty bytes."""
    if value is None:
        return b""
    try:
        return base64.b64decode(value, validate=True)
    except (binascii.Error, ValueError, TypeError) as e:
        raise DecodeError(f"{name} is not valid base64: {e}") from e


def b64encode_bytes(value: bytes) -> str:
    return base64.b64encode(value).decode("ascii")


def hexdecode_field(value: Optional[str], name: str) -> bytes:
    """Decode a hex JSON field (Tendermint HexBytes are uppercase, no 0x)."""
    if value is None:
        return b""
    try:
        return decode_hex(value)
    except (binascii.Error, ValueError) as e:
        raise DecodeError(f"{name} is not valid hex: {e}") from e


def to_hex(value: bytes) -> str:
    return "0x" + bytes(value).hex()
