"""All constants for the project"""

from dataclasses import dataclass
from typing import Dict


class ShareConstants:
    """Share and namespace sizes of the data square (all in bytes)"""

    SHARE_SIZE = 512

    NAMESPACE_VERSION_SIZE = 1
    NAMESPACE_ID_SIZE = 28
    NAMESPACE_SIZE = NAMESPACE_VERSION_SIZE + NAMESPACE_ID_SIZE

    SHARE_INFO_BYTES = 1
    SEQUENCE_LEN_BYTES = 4
    COMPACT_SHARE_RESERVED_BYTES = 4

    # namespace | info byte | sequence len | reserved bytes | data
    FIRST_COMPACT_SHARE_CONTENT_SIZE = (
        SHARE_SIZE
        - NAMESPACE_SIZE
        - SHARE_INFO_BYTES
        - SEQUENCE_LEN_BYTES
        - COMPACT_SHARE_RESERVED_BYTES
    )
    CONTINUATION_COMPACT_SHARE_CONTENT_SIZE = (
        SHARE_SIZE - NAMESPACE_SIZE - SHARE_INFO_BYTES
        - COMPACT_SHARE_RESERVED_BYTES
    )

    # namespace | info byte | sequence len | data
    FIRST_SPARSE_SHARE_CONTENT_SIZE = (
        SHARE_SIZE - NAMESPACE_SIZE - SHARE_INFO_BYTES - SEQUENCE_LEN_BYTES
    )
    CONTINUATION_SPARSE_SHARE_CONTENT_SIZE = (
        SHARE_SIZE - NAMESPACE_SIZE - SHARE_INFO_BYTES
    )


class NamespaceConstants:
    """Reserved namespaces (version byte followed by the 28-byte id)"""

    TX_NAMESPACE = bytes(28) + b"\x01"
    PAY_FOR_BLOB_NAMESPACE = bytes(28) + b"\x04"
    PARITY_SHARES_NAMESPACE = b"\xff" * ShareConstants.NAMESPACE_SIZE


class ProtoConstants:
    """Type identifiers of the wrapped transaction encodings"""

    BLOB_TX_TYPE_ID = "BLOB"
    INDEX_WRAPPER_TYPE_ID = "INDX"


class HashConstants:
    """Hash sizes and domain-separation prefixes"""

    HASH_SIZE = 32
    LEAF_PREFIX = b"\x00"
    NODE_PREFIX = b"\x01"
    # Upper bound on aunts accepted in a single inclusion proof
    MAX_AUNTS = 100


@dataclass(frozen=True)
class AppVersionParams:
    """Square layout parameters that depend on the DA chain's app version"""

    square_size_upper_bound: int
    subtree_root_threshold: int


APP_VERSION_PARAMS: Dict[int, AppVersionParams] = {
    1: AppVersionParams(square_size_upper_bound=128, subtree_root_threshold=64),
    2: AppVersionParams(square_size_upper_bound=128, subtree_root_threshold=64),
    3: AppVersionParams(square_size_upper_bound=128, subtree_root_threshold=64),
}


class NetworkConstants:
    """Defaults for remote endpoints"""

    DEFAULT_HTTP_TIMEOUT = 15.0
    DEFAULT_CONNECT_TIMEOUT = 5.0
    USER_AGENT = "blobstream-toolkit/1.x"
