"""Share sizing math for compact (transaction) and sparse (blob) shares"""

from blobstream_toolkit.shared.constants import ShareConstants


def delim_len(size: int) -> int:
    """Length of the unsigned varint that prefixes ``size`` bytes."""
    if size < 0:
        raise ValueError("size must be >= 0")
    length = 1
    while size >= 0x80:
        size >>= 7
        length += 1
    return length


def compact_shares_needed(sequence_len: int) -> int:
    """Compact shares needed for ``sequence_len`` bytes of delimited txs."""
    if sequence_len <= 0:
        return 0
    first = ShareConstants.FIRST_COMPACT_SHARE_CONTENT_SIZE
    if sequence_len <= first:
        return 1
    rest = sequence_len - first
    cont = ShareConstants.CONTINUATION_COMPACT_SHARE_CONTENT_SIZE
    return 1 + -(-rest // cont)


def sparse_shares_needed(sequence_len: int) -> int:
    """Sparse shares needed to store a blob of ``sequence_len`` bytes."""
    if sequence_len <= 0:
        return 0
    first = ShareConstants.FIRST_SPARSE_SHARE_CONTENT_SIZE
    if sequence_len <= first:
        return 1
    rest = sequence_len - first
    cont = ShareConstants.CONTINUATION_SPARSE_SHARE_CONTENT_SIZE
    return 1 + -(-rest // cont)


class CompactShareCounter:
    """
    Running count of compact shares for a sequence of length-delimited
    units, with a single level of undo.
    """

    def __init__(self):
        self._bytes = 0
        self._last_bytes = 0

    def add(self, data_len: int) -> int:
        """Add a unit of ``data_len`` bytes; return the new shares it needs."""
        before = self.size()
        self._last_bytes = self._bytes
        self._bytes += data_len + delim_len(data_len)
        return self.size() - before

    def revert(self) -> None:
        self._bytes = self._last_bytes

    def size(self) -> int:
        return compact_shares_needed(self._bytes)
