"""
Text Page Engine
================
Rebuilds readable, searchable page text from unordered positioned fragments.

Architecture:
- types: Geometry and entity primitives
- layout: Reconstruction passes (normalize, removeSpace, makeWord,
  correctTextOrder, makeAndSortLines, addNecessarySpace)
- search: Flattened page index and substring search
- selection: Offset or point based selections
- page: TextPage query surface
- sources: Fragment adapters (pdfplumber)

Usage:
    from textpage import TextPage, Granularity
    page = TextPage.from_fragments(fragments, Granularity.CHARACTER)
    page.text()
    page.find_text(1, "needle")
"""

from .types import (
    CaseSensitivity,
    Granularity,
    InclusionBehaviour,
    NormalizedPoint,
    NormalizedRect,
    RegionKind,
    RegularAreaRect,
    SearchDirection,
    TextEntity,
    classify_region,
)
from .layout import LayoutConfig, LayoutReconstructor, Reconstruction, ReconstructionStats
from .search import SearchCursor, SearchEngine, SearchMatch, TextIndex
from .selection import TextSelection
from .page import TextPage, build_text_page

__all__ = [
    'CaseSensitivity',
    'Granularity',
    'InclusionBehaviour',
    'NormalizedPoint',
    'NormalizedRect',
    'RegionKind',
    'RegularAreaRect',
    'SearchDirection',
    'TextEntity',
    'classify_region',
    'LayoutConfig',
    'LayoutReconstructor',
    'Reconstruction',
    'ReconstructionStats',
    'SearchCursor',
    'SearchEngine',
    'SearchMatch',
    'TextIndex',
    'TextSelection',
    'TextPage',
    'build_text_page',
]

__version__ = '1.0.0'
