"""
Text Index
==========
Flattened reading-order text of a page plus a parallel map from every
character offset back to the entity (and character inside it) it came from.
"""

from typing import List, Optional, Sequence, Tuple

from ..types import (
    CaseSensitivity,
    NormalizedRect,
    RegularAreaRect,
    Region,
    TextEntity,
)

# (entity index, character index inside the entity); None for line breaks
CharRef = Optional[Tuple[int, int]]

LINE_BREAK = "\n"


def fold_case(text: str) -> str:
    """
    Codepoint-wise lower-casing that never changes the string length,
    so offsets stay aligned with the unfolded text.
    """
    out = []
    for ch in text:
        low = ch.lower()
        out.append(low if len(low) == 1 else ch)
    return "".join(out)


class TextIndex:
    """
    Immutable search/selection index over reconstructed entities.

    Attributes:
        text: Page text, lines joined with LINE_BREAK
        refs: One CharRef per character of text
        line_offsets: [start, end) character offsets of each line
        line_areas: Bounding box of each line
    """

    def __init__(self, entities: Sequence[TextEntity], lines: Sequence[Tuple[int, int]]):
        self.entities: Tuple[TextEntity, ...] = tuple(entities)

        parts: List[str] = []
        refs: List[CharRef] = []
        line_offsets: List[Tuple[int, int]] = []
        line_areas: List[NormalizedRect] = []

        for n, (start, end) in enumerate(lines):
            if n:
                parts.append(LINE_BREAK)
                refs.append(None)
            line_start = len(refs)
            area: Optional[NormalizedRect] = None
            for i in range(start, end):
                ent = self.entities[i]
                parts.append(ent.text)
                refs.extend((i, k) for k in range(len(ent.text)))
                area = ent.area if area is None else area.union(ent.area)
            line_offsets.append((line_start, len(refs)))
            line_areas.append(area if area is not None else NormalizedRect(0.0, 0.0, 0.0, 0.0))

        self.text: str = "".join(parts)
        self.refs: Tuple[CharRef, ...] = tuple(refs)
        self.line_offsets: Tuple[Tuple[int, int], ...] = tuple(line_offsets)
        self.line_areas: Tuple[NormalizedRect, ...] = tuple(line_areas)

        # Line breaks compare as spaces so a phrase can match across lines
        self._search_text = self.text.replace(LINE_BREAK, " ")
        self._folded_text = fold_case(self._search_text)

    def __len__(self) -> int:
        return len(self.text)

    def haystack(self, case_sensitivity: CaseSensitivity) -> str:
        if case_sensitivity is CaseSensitivity.CASE_INSENSITIVE:
            return self._folded_text
        return self._search_text

    def char_area(self, offset: int) -> Optional[NormalizedRect]:
        ref = self.refs[offset]
        if ref is None:
            return None
        entity, k = ref
        return self.entities[entity].char_area(k)

    def area_of(self, start: int, end: int) -> Optional[RegularAreaRect]:
        """
        Region covering characters [start, end), one rect per line.
        Returns None when the range holds no located character.
        """
        start = max(0, start)
        end = min(len(self.refs), end)
        rects: List[NormalizedRect] = []

        run_entity: Optional[int] = None
        run_start = run_end = 0
        for offset in range(start, end):
            ref = self.refs[offset]
            if ref is not None and ref[0] == run_entity and ref[1] == run_end:
                run_end += 1
                continue
            if run_entity is not None:
                rects.append(self.entities[run_entity].span_area(run_start, run_end))
                run_entity = None
            if ref is not None:
                run_entity, run_start = ref
                run_end = run_start + 1
        if run_entity is not None:
            rects.append(self.entities[run_entity].span_area(run_start, run_end))

        if not rects:
            return None
        return RegularAreaRect.from_rects(rects)

    def span_of(self, region: Region) -> Optional[Tuple[int, int]]:
        """
        Offset range [start, end) of the characters whose box centre lies
        in ``region``. Used to resume a search after a previous hit.
        """
        if isinstance(region, NormalizedRect):
            region = RegularAreaRect([region])
        bounds = region.bounding_rect()
        if bounds is None:
            return None

        # Lines are sorted by top, so the scan stops at the first line below the region
        first: Optional[int] = None
        last: Optional[int] = None
        for (line_start, line_end), line_area in zip(self.line_offsets, self.line_areas):
            if line_area.top > bounds.bottom:
                break
            if not _may_touch(bounds, line_area):
                continue
            for offset in range(line_start, line_end):
                ref = self.refs[offset]
                entity = self.entities[ref[0]]
                if not _may_touch(bounds, entity.area):
                    continue
                if region.contains_center(entity.char_area(ref[1])):
                    if first is None:
                        first = offset
                    last = offset
        if first is None:
            return None
        return first, last + 1

    def offset_at_point(self, x: float, y: float) -> int:
        """
        Caret offset for a point: characters on the chosen line whose centre
        lies left of ``x`` come before the caret.
        """
        if not self.line_offsets:
            return 0

        line = self._line_at(y)
        if line is None:
            return 0 if y < self.line_areas[0].top else len(self.text)

        start, end = self.line_offsets[line]
        for offset in range(start, end):
            area = self.char_area(offset)
            if area is not None and x < area.center[0]:
                return offset
        return end

    def _line_at(self, y: float) -> Optional[int]:
        for i, area in enumerate(self.line_areas):
            if area.top <= y <= area.bottom:
                return i
        if y < self.line_areas[0].top or y > self.line_areas[-1].bottom:
            return None
        # Between two lines: nearest band wins
        return min(
            range(len(self.line_areas)),
            key=lambda i: self.line_areas[i].distance_sqr(self.line_areas[i].left, y),
        )


def _may_touch(a: NormalizedRect, b: NormalizedRect) -> bool:
    """Closed-interval overlap test, so zero-width boxes are not skipped."""
    return a.left <= b.right and b.left <= a.right and a.top <= b.bottom and b.top <= a.bottom
