"""
Layout Passes
=============
Each pass takes the current entity sequence and returns a new one.
Nothing is mutated in place; entities are immutable and passes only
build new lists.

Order:
    normalize -> remove_space -> make_word -> correct_text_order
    -> make_and_sort_lines -> add_necessary_space
"""

import statistics
from collections import defaultdict
from functools import cmp_to_key
from typing import Dict, List, Optional, Sequence, Tuple

from ..types import Granularity, NormalizedRect, TextEntity
from .config import LayoutConfig

# Index range [start, end) of one line in the entity sequence
LineRange = Tuple[int, int]

_LINE_BREAKS = "\r\n\u2028\u2029"


# ============================================================
# Geometry helpers
# ============================================================

def char_widths(entities: Sequence[TextEntity]) -> List[float]:
    """Per-entity average character width, skipping whitespace and empty boxes"""
    return [
        e.char_width for e in entities
        if e.text and not e.is_whitespace and e.area.width > 0
    ]


def median_char_width(entities: Sequence[TextEntity]) -> float:
    widths = char_widths(entities)
    return statistics.median(widths) if widths else 0.0


def average_char_width(entities: Sequence[TextEntity]) -> float:
    """Average glyph width weighted by character count."""
    chars = 0
    width = 0.0
    for e in entities:
        if e.text and not e.is_whitespace and e.area.width > 0:
            chars += len(e.text)
            width += e.area.width
    return width / chars if chars else 0.0


def vertical_overlap_ratio(a: NormalizedRect, b: NormalizedRect) -> float:
    """
    Shared vertical band as a fraction of the shorter height.
    A zero-height box counts as fully overlapping when it sits inside the other band.
    """
    shorter = min(a.height, b.height)
    if shorter <= 0:
        flat, other = (a, b) if a.height <= b.height else (b, a)
        return 1.0 if other.top <= flat.mid_y <= other.bottom else 0.0
    return a.vertical_overlap(b) / shorter


def same_line(a: NormalizedRect, b: NormalizedRect, ratio: float) -> bool:
    return vertical_overlap_ratio(a, b) > ratio


def _near(a: NormalizedRect, b: NormalizedRect, tolerance: float) -> bool:
    return (
        abs(a.left - b.left) <= tolerance and abs(a.top - b.top) <= tolerance
        and abs(a.right - b.right) <= tolerance and abs(a.bottom - b.bottom) <= tolerance
    )


def _cmp(a: float, b: float) -> int:
    return (a > b) - (a < b)


# ============================================================
# Passes
# ============================================================

def normalize(entities: Sequence[TextEntity], config: LayoutConfig) -> List[TextEntity]:
    """
    Filter malformed fragments.

    Drops fragments with empty text, text made only of line breaks, a
    missing or invalid box, and repeated emissions of the same glyph on the
    same spot (some producers draw bold text twice). Boxes kept within the
    coordinate tolerance are clamped into the unit square.
    """
    kept: List[TextEntity] = []
    seen: Dict[str, List[NormalizedRect]] = defaultdict(list)

    for e in entities:
        if e is None or not e.text or e.area is None:
            continue
        if not isinstance(e.area, NormalizedRect) or not e.area.is_valid():
            continue

        text = e.text.strip(_LINE_BREAKS)
        if not text:
            continue
        area = e.area.clamped()
        if text != e.text or area != e.area:
            e = TextEntity(text, area)

        if any(_near(e.area, r, config.duplicate_tolerance) for r in seen[e.text]):
            continue
        seen[e.text].append(e.area)
        kept.append(e)

    return kept


def remove_space(entities: Sequence[TextEntity], config: LayoutConfig) -> List[TextEntity]:
    """
    Drop lone space glyphs that are much wider than a normal character.
    Such separators distort line clustering and word spacing.
    """
    median = median_char_width(entities)
    if median <= 0:
        return list(entities)

    limit = median * config.oversized_space_ratio
    return [
        e for e in entities
        if not (len(e.text) == 1 and e.is_whitespace and e.area.width > limit)
    ]


def make_word(
    entities: Sequence[TextEntity],
    granularity: Granularity,
    config: LayoutConfig,
) -> List[TextEntity]:
    """
    Join character fragments into words.

    Only runs for character-granular pages. Consecutive glyphs are joined
    while the horizontal gap stays under word_gap_ratio average char widths
    and the glyphs share a line. Whitespace glyphs end the current word and
    are kept as their own entities.
    """
    if granularity is not Granularity.CHARACTER:
        return list(entities)

    avg = average_char_width(entities)
    if avg <= 0:
        return list(entities)

    max_gap = avg * config.word_gap_ratio
    min_gap = -avg * config.glyph_overlap_ratio

    words: List[TextEntity] = []
    current: List[TextEntity] = []

    def flush():
        if current:
            words.append(TextEntity.merge(current))
            current.clear()

    for e in entities:
        glyph = e.with_glyph_areas()
        if e.is_whitespace:
            flush()
            words.append(glyph)
            continue

        if current:
            prev = current[-1]
            gap = prev.area.horizontal_distance(glyph.area)
            if min_gap <= gap <= max_gap and same_line(prev.area, glyph.area, config.line_overlap_ratio):
                current.append(glyph)
                continue
            flush()
        current.append(glyph)

    flush()
    return words


def line_aware_compare(a: TextEntity, b: TextEntity, ratio: float) -> int:
    """Entities on the same line compare by left edge, others by top edge"""
    if same_line(a.area, b.area, ratio):
        return _cmp(a.area.left, b.area.left)
    return _cmp(a.area.top, b.area.top) or _cmp(a.area.left, b.area.left)


def correct_text_order(entities: Sequence[TextEntity], config: LayoutConfig) -> List[TextEntity]:
    """
    Reorder entities reported in drawing order into approximate reading
    order. Membership is unchanged.
    """
    ratio = config.line_overlap_ratio
    return sorted(entities, key=cmp_to_key(lambda a, b: line_aware_compare(a, b, ratio)))


def make_and_sort_lines(
    entities: Sequence[TextEntity],
    config: LayoutConfig,
) -> Tuple[List[TextEntity], List[LineRange]]:
    """
    Cluster entities into lines and produce the final reading order.

    Entities are scanned by top edge. An entity joins the line whose band
    contains its vertical centre or overlaps it by more than
    line_overlap_ratio; the band then grows to include it. Lines are sorted
    by top (then left of their first entity) and entities within a line by
    left edge.

    Returns:
        (ordered entities, line ranges as [start, end) index pairs)
    """
    ratio = config.line_overlap_ratio
    bands: List[NormalizedRect] = []
    members: List[List[TextEntity]] = []

    for e in sorted(entities, key=lambda x: (x.area.top, x.area.left)):
        best: Optional[int] = None
        best_score = 0.0
        for i, band in enumerate(bands):
            score = vertical_overlap_ratio(e.area, band)
            centred = band.top <= e.area.mid_y <= band.bottom
            if (centred or score > ratio) and (best is None or score > best_score):
                best, best_score = i, score
        if best is None:
            bands.append(e.area)
            members.append([e])
        else:
            bands[best] = bands[best].union(e.area)
            members[best].append(e)

    lines = [sorted(m, key=lambda x: (x.area.left, x.area.top)) for m in members]
    order = sorted(range(len(lines)), key=lambda i: (bands[i].top, lines[i][0].area.left))

    out: List[TextEntity] = []
    ranges: List[LineRange] = []
    for i in order:
        start = len(out)
        out.extend(lines[i])
        ranges.append((start, len(out)))
    return out, ranges


def _space_between(prev: TextEntity, nxt: TextEntity) -> TextEntity:
    x = (prev.area.right + nxt.area.left) / 2
    top = min(prev.area.top, nxt.area.top)
    bottom = max(prev.area.bottom, nxt.area.bottom)
    return TextEntity(" ", NormalizedRect(x, top, x, bottom))


def add_necessary_space(
    entities: Sequence[TextEntity],
    lines: Sequence[LineRange],
    config: LayoutConfig,
) -> Tuple[List[TextEntity], List[LineRange]]:
    """
    Insert a zero-width space entity between neighbours on a line whose gap
    is wider than the space threshold, unless one of them is already
    whitespace.
    """
    if config.space_gap_threshold is not None:
        threshold = config.space_gap_threshold
    else:
        threshold = average_char_width(entities) * config.space_gap_ratio
    if threshold <= 0:
        return list(entities), list(lines)

    out: List[TextEntity] = []
    ranges: List[LineRange] = []
    for start, end in lines:
        line_start = len(out)
        prev: Optional[TextEntity] = None
        for e in entities[start:end]:
            if prev is not None and not prev.is_whitespace and not e.is_whitespace:
                if prev.area.horizontal_distance(e.area) > threshold:
                    out.append(_space_between(prev, e))
            out.append(e)
            prev = e
        ranges.append((line_start, len(out)))
    return out, ranges
