from eth_utils import is_address, to_checksum_address

from blobstream_toolkit.shared.exceptions import DecodeError
from blobstream_toolkit.utils.encoding import decode_tx_hash


def validate_eth_address(address: str, param_name: str = "address") -> str:
    """Validate and return checksum ethereum address"""
    if not address or not isinstance(address, str):
        raise ValueError(
            f"Invalid {param_name}: address must be a non-empty string"
        )
    if not is_address(address):
        raise ValueError(
            f"Invalid {param_name}: {address} is not a valid Ethereum address"
        )
    return to_checksum_address(address)


def validate_tx_hash(tx_hash: str) -> str:
    """Validate a DA transaction hash and return it as bare uppercase hex"""
    try:
        digest = decode_tx_hash(tx_hash)
    except DecodeError as e:
        raise ValueError(f"Invalid tx_hash: {e.message}") from e
    return digest.hex().upper()


def validate_blob_index(blob_index: int) -> int:
    if blob_index < 0:
        raise ValueError(f"Invalid blob_index: {blob_index} must be >= 0")
    return blob_index


def validate_nonce(nonce: int) -> int:
    if nonce < 1:
        raise ValueError(f"Invalid nonce: {nonce} must be >= 1")
    return nonce


def validate_batch(start_block: int, end_block: int) -> None:
    """Validate batch boundaries [start_block, end_block)"""
    if start_block < 1:
        raise ValueError(f"Invalid start_block: {start_block} must be >= 1")
    if end_block <= start_block:
        raise ValueError(
            f"Invalid batch: end_block {end_block} must be greater than "
            f"start_block {start_block}"
        )


def require_setting(value: str, flag: str, env_name: str) -> str:
    """Return ``value`` or explain which flag/variable is missing"""
    if not value:
        raise ValueError(f"Missing {flag} (or set {env_name})")
    return value
