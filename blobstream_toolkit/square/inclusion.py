"""
Blob alignment rules of the data square.

A blob must start at an index that is a multiple of its subtree width, so
that its share commitment can be rebuilt from whole subtree roots of the
rows it spans (non-interactive default rules).
"""

import math


def round_up_power_of_two(value: int) -> int:
    result = 1
    while result < value:
        result <<= 1
    return result


def round_up_by_multiple_of(cursor: int, v: int) -> int:
    if v <= 0:
        raise ValueError("multiple must be positive")
    if cursor % v == 0:
        return cursor
    return (cursor // v + 1) * v


def blob_min_square_size(share_count: int) -> int:
    """Smallest power-of-two square width holding ``share_count`` shares."""
    if share_count <= 0:
        return 1
    ceil_sqrt = math.isqrt(share_count - 1) + 1
    return round_up_power_of_two(ceil_sqrt)


def subtree_width(share_count: int, subtree_root_threshold: int) -> int:
    """Width of the first subtree of a blob's share commitment."""
    s = share_count // subtree_root_threshold
    if share_count % subtree_root_threshold != 0:
        s += 1
    s = round_up_power_of_two(s)
    return min(s, blob_min_square_size(share_count))


def next_share_index(
    cursor: int, blob_share_len: int, subtree_root_threshold: int
) -> int:
    """First index at or after ``cursor`` where the blob may start."""
    width = subtree_width(blob_share_len, subtree_root_threshold)
    return round_up_by_multiple_of(cursor, width)
