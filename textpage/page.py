"""
Text Page
=========
Owns the fragments of one page and serves text extraction, selection
areas and search over their reconstructed form.

Fragments can be appended at any time; the layout passes rerun lazily
before the next query. Queries never mutate the reconstruction, so one
page can be read from several threads.
"""

import logging
import threading
from typing import Iterable, List, Optional, Sequence, Tuple, Union

from .layout import LayoutConfig, LayoutReconstructor, Reconstruction, ReconstructionStats
from .search import SearchCursor, SearchEngine, TextIndex
from .search.engine import ResumePoint
from .selection import TextSelection
from .types import (
    CaseSensitivity,
    Granularity,
    InclusionBehaviour,
    Matrix,
    NormalizedRect,
    RegionKind,
    Region,
    RegularAreaRect,
    SearchDirection,
    TextEntity,
    classify_region,
)

logger = logging.getLogger(__name__)

AreaLike = Union[NormalizedRect, Tuple[float, float, float, float]]


def _as_rect(area: Optional[AreaLike]) -> Optional[NormalizedRect]:
    """Coerce a 4-tuple to a rect; anything unusable becomes None and is dropped later."""
    if area is None or isinstance(area, NormalizedRect):
        return area
    try:
        coords = tuple(float(c) for c in area)
    except (TypeError, ValueError):
        return None
    if len(coords) != 4:
        return None
    return NormalizedRect(*coords)


class TextPage:
    """
    The text of one page, as positioned entities in reading order.

    Usage:
        page = TextPage(granularity=Granularity.CHARACTER)
        page.append("H", NormalizedRect(0.10, 0.10, 0.12, 0.12))
        ...
        page.text()
        page.find_text(1, "Hello")
    """

    def __init__(
        self,
        entities: Optional[Iterable[TextEntity]] = None,
        granularity: Granularity = Granularity.CHARACTER,
        config: Optional[LayoutConfig] = None,
    ):
        self.granularity = granularity
        self.config = config or LayoutConfig.default()
        self._fragments: List[TextEntity] = list(entities or [])
        self._lock = threading.Lock()
        self._result: Optional[Reconstruction] = None
        self._index: Optional[TextIndex] = None
        self._engine = SearchEngine()

    @classmethod
    def from_fragments(
        cls,
        fragments: Iterable[Tuple[str, AreaLike]],
        granularity: Granularity = Granularity.CHARACTER,
        config: Optional[LayoutConfig] = None,
    ) -> 'TextPage':
        page = cls(granularity=granularity, config=config)
        page.extend(fragments)
        return page

    # ============================================================
    # Ingestion
    # ============================================================

    def append(self, text: str, area: Optional[AreaLike]) -> None:
        """Add one raw fragment. Malformed fragments are dropped at reconstruction."""
        with self._lock:
            self._fragments.append(TextEntity(text, _as_rect(area)))
            self._result = None
            self._index = None

    def extend(self, fragments: Iterable[Tuple[str, AreaLike]]) -> None:
        with self._lock:
            for text, area in fragments:
                self._fragments.append(TextEntity(text, _as_rect(area)))
            self._result = None
            self._index = None

    def _state(self) -> Tuple[Reconstruction, TextIndex]:
        with self._lock:
            if self._result is None or self._index is None:
                result = LayoutReconstructor(self.config).run(self._fragments, self.granularity)
                self._index = TextIndex(result.entities, result.lines)
                self._result = result
            return self._result, self._index

    # ============================================================
    # Views
    # ============================================================

    @property
    def entities(self) -> Tuple[TextEntity, ...]:
        """Entities in reading order"""
        return self._state()[0].entities

    @property
    def line_ranges(self) -> Tuple[Tuple[int, int], ...]:
        return self._state()[0].lines

    @property
    def lines(self) -> Tuple[Tuple[TextEntity, ...], ...]:
        result = self._state()[0]
        return tuple(result.entities[start:end] for start, end in result.lines)

    @property
    def stats(self) -> ReconstructionStats:
        return self._state()[0].stats

    # ============================================================
    # Extraction
    # ============================================================

    def text(
        self,
        region: Optional[Region] = None,
        inclusion: InclusionBehaviour = InclusionBehaviour.ANY_PIXEL,
    ) -> str:
        """
        Text extraction.

        Returns:
        - the whole page text (lines joined by newlines) if region is None
        - an empty string if region is a null/degenerate area
        - the text of the entities inside region otherwise, in reading order
        """
        result, index = self._state()
        kind = classify_region(region)
        if kind is RegionKind.NONE:
            return index.text
        if kind is RegionKind.EMPTY:
            return ""

        if inclusion is InclusionBehaviour.CENTRAL_PIXEL:
            inside = region.contains_center
        else:
            inside = region.overlaps_any

        parts: List[str] = []
        last_line: Optional[int] = None
        for line_no, (start, end) in enumerate(result.lines):
            for ent in result.entities[start:end]:
                if not inside(ent.area):
                    continue
                if last_line is not None and line_no != last_line:
                    parts.append("\n")
                parts.append(ent.text)
                last_line = line_no
        return "".join(parts)

    def text_area(self, selection: TextSelection) -> Optional[RegularAreaRect]:
        """Area covered by ``selection``, one rect per line; None if it spans nothing."""
        _, index = self._state()
        start, end = selection.resolve(index)
        if start >= end:
            return None
        return index.area_of(start, end)

    # ============================================================
    # Search
    # ============================================================

    def find_text(
        self,
        search_id: int,
        needle: str,
        direction: SearchDirection = SearchDirection.FORWARD,
        case_sensitivity: CaseSensitivity = CaseSensitivity.CASE_SENSITIVE,
        resume_from: ResumePoint = None,
    ) -> Optional[RegularAreaRect]:
        """
        Area of the next match of ``needle`` or None if not found.

        ``resume_from`` None starts at the beginning of the page (end for a
        backward search); otherwise the search continues after (or before)
        the given previous hit.
        """
        _, index = self._state()
        match = self._engine.find(
            index, needle, direction, case_sensitivity, resume_from, search_id
        )
        return match.area if match else None

    def search(
        self,
        needle: str,
        cursor: Optional[SearchCursor] = None,
        direction: SearchDirection = SearchDirection.FORWARD,
        case_sensitivity: CaseSensitivity = CaseSensitivity.CASE_SENSITIVE,
        search_id: int = 0,
    ) -> Optional[SearchCursor]:
        """Like find_text but threads a cursor: pass the returned cursor back in."""
        if cursor is not None:
            search_id = cursor.search_id
        _, index = self._state()
        match = self._engine.find(index, needle, direction, case_sensitivity, cursor, search_id)
        return match.cursor(search_id, needle) if match else None

    # ============================================================
    # Debug
    # ============================================================

    def dump(self) -> List[str]:
        """One line per entity: text and box. Also logged at DEBUG."""
        out = []
        for ent in self.entities:
            a = ent.area
            out.append(f"{ent.text!r}\t{a.left:.4f} {a.top:.4f} {a.right:.4f} {a.bottom:.4f}")
        for line in out:
            logger.debug(line)
        return out

    def transformed(self, matrix: Matrix) -> List[Tuple[str, NormalizedRect]]:
        """Entities with their boxes mapped through ``matrix`` (e.g. page rotation)."""
        return [(ent.text, ent.transformed_area(matrix)) for ent in self.entities]

    def __len__(self) -> int:
        return len(self.entities)


def build_text_page(
    fragments: Sequence[Tuple[str, AreaLike]],
    granularity: Granularity = Granularity.CHARACTER,
    config: Optional[LayoutConfig] = None,
) -> TextPage:
    """
    Convenience function for building a page from (text, area) pairs.
    """
    return TextPage.from_fragments(fragments, granularity, config)
