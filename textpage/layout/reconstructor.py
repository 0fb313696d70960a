"""
Layout Reconstructor
====================
Single entry point for turning raw fragments into ordered words and lines.
Orchestrates: normalize -> removeSpace -> makeWord -> correctTextOrder
-> makeAndSortLines -> addNecessarySpace
"""

import logging
from dataclasses import dataclass, field
from typing import List, Optional, Sequence, Tuple

from ..types import Granularity, TextEntity
from .config import LayoutConfig
from .passes import (
    LineRange,
    add_necessary_space,
    correct_text_order,
    make_and_sort_lines,
    make_word,
    normalize,
    remove_space,
)

logger = logging.getLogger(__name__)


@dataclass
class ReconstructionStats:
    """Counters collected while the passes run"""
    fragments_in: int = 0
    malformed_dropped: int = 0
    oversized_spaces_removed: int = 0
    words_merged: int = 0
    lines: int = 0
    spaces_added: int = 0
    entities_out: int = 0
    granularity: str = ""

    def summary(self) -> str:
        """Generate summary string"""
        lines = [
            "=" * 60,
            "LAYOUT RECONSTRUCTION SUMMARY",
            "=" * 60,
            f"Granularity: {self.granularity}",
            f"Fragments In: {self.fragments_in}",
            f"Malformed/Duplicate Dropped: {self.malformed_dropped}",
            f"Oversized Spaces Removed: {self.oversized_spaces_removed}",
            f"Glyphs Merged Into Words: {self.words_merged}",
            f"Lines: {self.lines}",
            f"Spaces Added: {self.spaces_added}",
            f"Entities Out: {self.entities_out}",
            "=" * 60,
        ]
        return "\n".join(lines)


@dataclass(frozen=True)
class Reconstruction:
    """
    Result of one reconstructor run.

    Attributes:
        entities: Entities in reading order
        lines: [start, end) index ranges into entities, one per line
        stats: Pass counters
    """
    entities: Tuple[TextEntity, ...] = ()
    lines: Tuple[LineRange, ...] = ()
    stats: ReconstructionStats = field(default_factory=ReconstructionStats)

    def line_of(self, index: int) -> int:
        """Line number holding entity ``index`` (-1 if out of range)."""
        lo, hi = 0, len(self.lines)
        while lo < hi:
            mid = (lo + hi) // 2
            start, end = self.lines[mid]
            if index < start:
                hi = mid
            elif index >= end:
                lo = mid + 1
            else:
                return mid
        return -1


class LayoutReconstructor:
    """
    Run the fixed pass pipeline over one page.

    Usage:
        reconstructor = LayoutReconstructor()
        result = reconstructor.run(entities, Granularity.CHARACTER)
    """

    def __init__(self, config: Optional[LayoutConfig] = None):
        self.config = config or LayoutConfig.default()

    def run(
        self,
        entities: Sequence[TextEntity],
        granularity: Granularity = Granularity.CHARACTER,
    ) -> Reconstruction:
        cfg = self.config
        stats = ReconstructionStats(fragments_in=len(entities), granularity=granularity.value)

        current: List[TextEntity] = normalize(entities, cfg)
        stats.malformed_dropped = len(entities) - len(current)

        before = len(current)
        current = remove_space(current, cfg)
        stats.oversized_spaces_removed = before - len(current)

        before = len(current)
        current = make_word(current, granularity, cfg)
        stats.words_merged = before - len(current)

        current = correct_text_order(current, cfg)
        current, lines = make_and_sort_lines(current, cfg)
        stats.lines = len(lines)

        before = len(current)
        current, lines = add_necessary_space(current, lines, cfg)
        stats.spaces_added = len(current) - before
        stats.entities_out = len(current)

        logger.debug(
            "Reconstructed %d fragments into %d entities on %d lines "
            "(dropped=%d, spaces_removed=%d, merged=%d, spaces_added=%d)",
            stats.fragments_in, stats.entities_out, stats.lines,
            stats.malformed_dropped, stats.oversized_spaces_removed,
            stats.words_merged, stats.spaces_added,
        )
        if cfg.debug:
            logger.info("\n%s", stats.summary())

        return Reconstruction(entities=tuple(current), lines=tuple(lines), stats=stats)
