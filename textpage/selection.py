"""
Text Selection
==============
A selection is described either by character offsets into the page text or
by the two points of a drag. Points are resolved against the page index.
"""

from dataclasses import dataclass
from typing import Optional, Tuple

from .search.index import TextIndex
from .types import NormalizedPoint


@dataclass(frozen=True)
class TextSelection:
    """
    Start/end anchors of a selection.

    Exactly one pair is set: offsets (into TextPage.text()) or points
    (in unit page coordinates). The end may come before the start.
    """
    start_offset: Optional[int] = None
    end_offset: Optional[int] = None
    start_point: Optional[NormalizedPoint] = None
    end_point: Optional[NormalizedPoint] = None

    @classmethod
    def from_offsets(cls, start: int, end: int) -> 'TextSelection':
        return cls(start_offset=start, end_offset=end)

    @classmethod
    def from_points(cls, start: NormalizedPoint, end: NormalizedPoint) -> 'TextSelection':
        return cls(start_point=start, end_point=end)

    @property
    def is_geometric(self) -> bool:
        return self.start_point is not None and self.end_point is not None

    def resolve(self, index: TextIndex) -> Tuple[int, int]:
        """Ordered [start, end) offsets of this selection on ``index``."""
        if self.is_geometric:
            a = index.offset_at_point(self.start_point.x, self.start_point.y)
            b = index.offset_at_point(self.end_point.x, self.end_point.y)
        else:
            a = self.start_offset or 0
            b = self.end_offset if self.end_offset is not None else len(index)
        a = max(0, min(a, len(index)))
        b = max(0, min(b, len(index)))
        return (a, b) if a <= b else (b, a)
