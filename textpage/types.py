"""
Unified Data Types for Text Page
================================
Geometry and text primitives shared by the layout passes, the page and the
search engine.

Type Hierarchy:
- NormalizedPoint: Point in unit page coordinates
- NormalizedRect: Axis-aligned box in unit page coordinates
- RegularAreaRect: Ordered group of rects forming one selection region
- TextEntity: Decoded text plus its bounding box
"""

import math
from dataclasses import dataclass
from enum import Enum
from typing import Iterable, Iterator, List, Optional, Sequence, Tuple, Union


# ============================================================
# Enumerations
# ============================================================

class Granularity(Enum):
    """How much text one source fragment carries."""
    CHARACTER = "character"
    WORD = "word"
    LINE = "line"


class InclusionBehaviour(Enum):
    """Policy deciding whether an entity counts as inside a query region."""
    ANY_PIXEL = "any_pixel"          # any part of the box is in the region
    CENTRAL_PIXEL = "central_pixel"  # the box centre is in the region


class SearchDirection(Enum):
    FORWARD = "forward"
    BACKWARD = "backward"


class CaseSensitivity(Enum):
    CASE_SENSITIVE = "case_sensitive"
    CASE_INSENSITIVE = "case_insensitive"


class RegionKind(Enum):
    """
    Three-way classification of a text() region argument.

    NONE  -> no region supplied, whole page
    EMPTY -> a region was supplied but it is null/degenerate
    AREA  -> a usable region
    """
    NONE = "none"
    EMPTY = "empty"
    AREA = "area"


# 6-tuple (m11, m12, m21, m22, dx, dy), same layout as a 2D affine matrix
Matrix = Tuple[float, float, float, float, float, float]

IDENTITY: Matrix = (1.0, 0.0, 0.0, 1.0, 0.0, 0.0)

# Slack for coordinates that drift slightly outside the unit square
_COORD_TOLERANCE = 1e-3


def _map_point(matrix: Matrix, x: float, y: float) -> Tuple[float, float]:
    if len(matrix) != 6:
        raise ValueError(f"Affine matrix needs 6 values, got {len(matrix)}")
    m11, m12, m21, m22, dx, dy = matrix
    return (m11 * x + m21 * y + dx, m12 * x + m22 * y + dy)


# ============================================================
# Geometry
# ============================================================

@dataclass(frozen=True)
class NormalizedPoint:
    """Point in unit page coordinates."""
    x: float
    y: float


@dataclass(frozen=True)
class NormalizedRect:
    """
    Axis-aligned bounding box in unit page coordinates [0,1]x[0,1].

    Origin is the top-left corner of the page, y grows downwards.
    Zero-width rects are allowed and mark synthetic spacing.
    """
    left: float
    top: float
    right: float
    bottom: float

    @classmethod
    def whole_page(cls) -> 'NormalizedRect':
        return cls(0.0, 0.0, 1.0, 1.0)

    @classmethod
    def from_bbox(
        cls,
        x0: float,
        top: float,
        x1: float,
        bottom: float,
        page_width: float,
        page_height: float,
    ) -> 'NormalizedRect':
        """Normalize a bbox given in page units (e.g. PDF points)."""
        if page_width <= 0 or page_height <= 0:
            raise ValueError(f"Invalid page size {page_width}x{page_height}")
        return cls(
            x0 / page_width,
            top / page_height,
            x1 / page_width,
            bottom / page_height,
        )

    @property
    def width(self) -> float:
        return self.right - self.left

    @property
    def height(self) -> float:
        return self.bottom - self.top

    @property
    def area(self) -> float:
        return max(0.0, self.width) * max(0.0, self.height)

    @property
    def center(self) -> Tuple[float, float]:
        return ((self.left + self.right) / 2, (self.top + self.bottom) / 2)

    @property
    def mid_y(self) -> float:
        """Vertical center"""
        return (self.top + self.bottom) / 2

    def is_null(self) -> bool:
        """True for zero or negative area."""
        return self.width <= 0 or self.height <= 0

    def is_valid(self) -> bool:
        """Finite, well ordered and inside the unit square (with tolerance)."""
        coords = (self.left, self.top, self.right, self.bottom)
        if not all(math.isfinite(c) for c in coords):
            return False
        if self.left > self.right or self.top > self.bottom:
            return False
        lo, hi = -_COORD_TOLERANCE, 1.0 + _COORD_TOLERANCE
        return all(lo <= c <= hi for c in coords)

    def clamped(self) -> 'NormalizedRect':
        """Copy with every coordinate pulled into [0, 1]."""
        return NormalizedRect(*(min(1.0, max(0.0, c)) for c in self.to_tuple()))

    def transform(self, matrix: Matrix) -> 'NormalizedRect':
        """
        Apply an affine transform and return the bounding rect of the
        transformed corners. The rect itself is left unchanged.
        """
        corners = [
            _map_point(matrix, self.left, self.top),
            _map_point(matrix, self.right, self.top),
            _map_point(matrix, self.left, self.bottom),
            _map_point(matrix, self.right, self.bottom),
        ]
        xs = [c[0] for c in corners]
        ys = [c[1] for c in corners]
        return NormalizedRect(min(xs), min(ys), max(xs), max(ys))

    def union(self, other: 'NormalizedRect') -> 'NormalizedRect':
        """Smallest rect containing both."""
        return NormalizedRect(
            min(self.left, other.left),
            min(self.top, other.top),
            max(self.right, other.right),
            max(self.bottom, other.bottom),
        )

    def overlaps_any(self, other: 'NormalizedRect') -> bool:
        """
        Any-pixel test. Interiors must overlap, so touching edges do not
        count. Along a zero-extent side of ``other`` the test is closed, so a
        marker lying on this rect's border still counts.
        """
        if other.width == 0:
            horizontal = self.left <= other.left <= self.right
        else:
            horizontal = self.left < other.right and self.right > other.left
        if other.height == 0:
            vertical = self.top <= other.top <= self.bottom
        else:
            vertical = self.top < other.bottom and self.bottom > other.top
        return horizontal and vertical

    def contains_point(self, x: float, y: float) -> bool:
        return self.left <= x <= self.right and self.top <= y <= self.bottom

    def contains_center(self, other: 'NormalizedRect') -> bool:
        """Central-pixel test."""
        cx, cy = other.center
        return self.contains_point(cx, cy)

    def vertical_overlap(self, other: 'NormalizedRect') -> float:
        """Height of the shared vertical band (0 when disjoint)."""
        return max(0.0, min(self.bottom, other.bottom) - max(self.top, other.top))

    def horizontal_distance(self, other: 'NormalizedRect') -> float:
        """Gap from this rect's right edge to other's left edge (negative if overlapping)."""
        return other.left - self.right

    def vertical_distance(self, other: 'NormalizedRect') -> float:
        if other.top >= self.bottom:
            return other.top - self.bottom
        if self.top >= other.bottom:
            return self.top - other.bottom
        return 0.0

    def distance_sqr(self, x: float, y: float) -> float:
        """Squared distance from a point to the rect (0 inside)."""
        dx = max(self.left - x, 0.0, x - self.right)
        dy = max(self.top - y, 0.0, y - self.bottom)
        return dx * dx + dy * dy

    def to_tuple(self) -> Tuple[float, float, float, float]:
        return (self.left, self.top, self.right, self.bottom)


class RegularAreaRect:
    """
    Ordered group of rects forming one logical selection region.

    A search hit or text selection that spans several lines is represented
    by one rect per line, in reading order.
    """

    __slots__ = ('_rects',)

    def __init__(self, rects: Iterable[NormalizedRect] = ()):
        self._rects: Tuple[NormalizedRect, ...] = tuple(rects)

    @classmethod
    def from_rects(cls, rects: Iterable[NormalizedRect]) -> 'RegularAreaRect':
        """
        Build a region, merging each rect into the previous one when they
        share a horizontal band.
        """
        merged: List[NormalizedRect] = []
        for rect in rects:
            if merged:
                last = merged[-1]
                shorter = min(last.height, rect.height)
                if shorter > 0 and last.vertical_overlap(rect) >= shorter * 0.5:
                    merged[-1] = last.union(rect)
                    continue
                if shorter <= 0 and last.top <= rect.mid_y <= last.bottom:
                    merged[-1] = last.union(rect)
                    continue
            merged.append(rect)
        return cls(merged)

    @property
    def rects(self) -> Tuple[NormalizedRect, ...]:
        return self._rects

    def bounding_rect(self) -> Optional[NormalizedRect]:
        if not self._rects:
            return None
        out = self._rects[0]
        for r in self._rects[1:]:
            out = out.union(r)
        return out

    def is_null(self) -> bool:
        return all(r.is_null() for r in self._rects)

    def overlaps_any(self, other: NormalizedRect) -> bool:
        return any(r.overlaps_any(other) for r in self._rects)

    def contains_center(self, other: NormalizedRect) -> bool:
        return any(r.contains_center(other) for r in self._rects)

    def contains_point(self, x: float, y: float) -> bool:
        return any(r.contains_point(x, y) for r in self._rects)

    def transform(self, matrix: Matrix) -> 'RegularAreaRect':
        return RegularAreaRect(r.transform(matrix) for r in self._rects)

    def __iter__(self) -> Iterator[NormalizedRect]:
        return iter(self._rects)

    def __len__(self) -> int:
        return len(self._rects)

    def __getitem__(self, i: int) -> NormalizedRect:
        return self._rects[i]

    def __eq__(self, other):
        if not isinstance(other, RegularAreaRect):
            return NotImplemented
        return self._rects == other._rects

    def __hash__(self):
        return hash(self._rects)

    def __repr__(self):
        return f"RegularAreaRect({list(self._rects)!r})"


Region = Union[NormalizedRect, RegularAreaRect]


def classify_region(region: Optional[Region]) -> RegionKind:
    """
    Classify a text() region argument.

    None means "no region" (whole page); a supplied but null region means
    "empty region" and selects nothing.
    """
    if region is None:
        return RegionKind.NONE
    if isinstance(region, RegularAreaRect):
        if len(region) == 0 or region.is_null():
            return RegionKind.EMPTY
        return RegionKind.AREA
    if isinstance(region, NormalizedRect):
        return RegionKind.EMPTY if region.is_null() else RegionKind.AREA
    raise TypeError(f"Unsupported region type: {type(region).__name__}")


# ============================================================
# Text Entity
# ============================================================

@dataclass(frozen=True)
class TextEntity:
    """
    One piece of positioned text.

    Attributes:
        text: Decoded text (a glyph, a word or a longer chunk)
        area: Bounding box in unit page coordinates
        char_areas: Optional per-character boxes, len(char_areas) == len(text).
            Present when the entity was merged from character fragments;
            a multi-character glyph repeats its box for each character.
    """
    text: str
    area: NormalizedRect
    char_areas: Optional[Tuple[NormalizedRect, ...]] = None

    @property
    def is_whitespace(self) -> bool:
        return bool(self.text) and self.text.isspace()

    @property
    def char_width(self) -> float:
        """Average width of one character of this entity."""
        if not self.text:
            return 0.0
        return self.area.width / len(self.text)

    def transformed_area(self, matrix: Matrix) -> NormalizedRect:
        return self.area.transform(matrix)

    def char_area(self, index: int) -> NormalizedRect:
        """Box of a single character, exact or interpolated."""
        return self.span_area(index, index + 1)

    def span_area(self, start: int, end: int) -> NormalizedRect:
        """
        Box covering characters [start, end) of this entity.

        Exact when per-character boxes are known, otherwise the entity box is
        split evenly across its characters.
        """
        n = len(self.text)
        start = max(0, min(start, n))
        end = max(start, min(end, n))
        if start == 0 and end == n:
            return self.area
        if self.char_areas is not None and end > start:
            out = self.char_areas[start]
            for r in self.char_areas[start + 1:end]:
                out = out.union(r)
            return out
        step = self.area.width / n if n else 0.0
        return NormalizedRect(
            self.area.left + step * start,
            self.area.top,
            self.area.left + step * end,
            self.area.bottom,
        )

    @classmethod
    def merge(cls, entities: Sequence['TextEntity']) -> 'TextEntity':
        """Concatenate text and union boxes, keeping per-character boxes."""
        if not entities:
            raise ValueError("Cannot merge an empty group of entities")
        if len(entities) == 1:
            return entities[0]
        area = entities[0].area
        for e in entities[1:]:
            area = area.union(e.area)
        char_areas: List[NormalizedRect] = []
        for e in entities:
            if e.char_areas is not None:
                char_areas.extend(e.char_areas)
            else:
                char_areas.extend(e.char_area(i) for i in range(len(e.text)))
        return cls(
            text=''.join(e.text for e in entities),
            area=area,
            char_areas=tuple(char_areas),
        )

    def with_glyph_areas(self) -> 'TextEntity':
        """
        Return a copy whose every character carries this entity's whole box.
        Used for character-granular fragments, where a fragment is one glyph.
        """
        if self.char_areas is not None:
            return self
        return TextEntity(self.text, self.area, (self.area,) * len(self.text))
