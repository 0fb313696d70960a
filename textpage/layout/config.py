"""
Layout Configuration
====================
Thresholds used by the reconstruction passes. All widths are expressed as
ratios of a per-page character width, so they work for any page size.
"""

import os
from dataclasses import dataclass, replace
from typing import Optional


@dataclass
class LayoutConfig:
    """Configuration for the layout reconstructor"""
    # removeSpace: a lone space wider than this many median chars is dropped
    oversized_space_ratio: float = 3.0

    # makeWord: max horizontal gap (in average char widths) inside a word
    word_gap_ratio: float = 0.5
    # makeWord: tolerated overlap between consecutive glyphs (in char widths)
    glyph_overlap_ratio: float = 0.5

    # Lines: two boxes share a line when their vertical overlap exceeds this
    # fraction of the shorter box height
    line_overlap_ratio: float = 0.5

    # addNecessarySpace: gap (in average char widths) that implies a space
    space_gap_ratio: float = 0.5
    # Absolute gap in page units; overrides space_gap_ratio when set
    space_gap_threshold: Optional[float] = None

    # normalize: boxes closer than this (page units) with equal text are duplicates
    duplicate_tolerance: float = 1e-4

    # Debug
    debug: bool = False

    @classmethod
    def default(cls) -> 'LayoutConfig':
        return cls()

    @classmethod
    def loose(cls) -> 'LayoutConfig':
        """Loose config: tolerant word joining for tightly kerned or scanned text"""
        return cls(
            word_gap_ratio=0.8,
            space_gap_ratio=0.8,
            line_overlap_ratio=0.3,
        )

    @classmethod
    def from_env(cls, base: Optional['LayoutConfig'] = None) -> 'LayoutConfig':
        """Apply TEXTPAGE_* environment overrides on top of ``base``."""
        config = replace(base) if base is not None else cls()

        if os.environ.get("TEXTPAGE_DEBUG", "").lower() == "true":
            config.debug = True

        for env_name, attr in (
            ("TEXTPAGE_SPACE_GAP_RATIO", "space_gap_ratio"),
            ("TEXTPAGE_WORD_GAP_RATIO", "word_gap_ratio"),
        ):
            raw = os.environ.get(env_name)
            if raw:
                try:
                    setattr(config, attr, float(raw))
                except ValueError:
                    raise ValueError(f"{env_name} must be a number, got {raw!r}") from None

        return config
