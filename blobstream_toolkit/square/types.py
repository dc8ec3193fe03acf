"""
Type definitions for the data square.
"""

from dataclasses import dataclass
from typing import Any, Dict

from blobstream_toolkit.shared.exceptions import ShareRangeError


@dataclass(frozen=True)
class ShareRange:
    """Half-open range [start, end) of share indexes in the original square."""

    start: int
    end: int

    def __post_init__(self):
        if self.start < 0 or self.start >= self.end:
            raise ShareRangeError(
                f"invalid share range [{self.start}, {self.end})",
                context={"start": self.start, "end": self.end},
            )

    def __len__(self) -> int:
        return self.end - self.start

    def within(self, total_shares: int) -> bool:
        return self.end <= total_shares

    def overlaps(self, other: "ShareRange") -> bool:
        return self.start < other.end and other.start < self.end

    def to_dict(self) -> Dict[str, Any]:
        return {"start": self.start, "end": self.end}
