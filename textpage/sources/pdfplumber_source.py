"""
pdfplumber Source
=================
Adapter from pdfplumber page objects to normalized text fragments.
pdfplumber does the PDF parsing; this module only maps its char and word
dicts into unit page coordinates.
"""

import logging
from typing import Any, Dict, Iterable, List, Optional, Tuple

from ..layout import LayoutConfig
from ..page import TextPage
from ..types import Granularity, NormalizedRect

logger = logging.getLogger(__name__)

Fragment = Tuple[str, NormalizedRect]


def _clamp(v: float) -> float:
    return min(1.0, max(0.0, v))


def fragment_from_pdfplumber(
    obj: Dict[str, Any],
    page_width: float,
    page_height: float,
) -> Optional[Fragment]:
    """
    Create a fragment from a pdfplumber char or word dictionary.
    Returns None when the object has no text or no usable page size.
    """
    text = obj.get('text', '')
    if not text or page_width <= 0 or page_height <= 0:
        return None
    rect = NormalizedRect(
        _clamp(obj.get('x0', 0) / page_width),
        _clamp(obj.get('top', 0) / page_height),
        _clamp(obj.get('x1', 0) / page_width),
        _clamp(obj.get('bottom', 0) / page_height),
    )
    return text, rect


def fragments_from_pdfplumber(
    objects: Iterable[Dict[str, Any]],
    page_width: float = 612.0,
    page_height: float = 792.0,
) -> List[Fragment]:
    """Convert a list of pdfplumber chars (or words) into fragments."""
    out: List[Fragment] = []
    for obj in objects:
        frag = fragment_from_pdfplumber(obj, page_width, page_height)
        if frag is not None:
            out.append(frag)
    return out


def text_page_from_pdfplumber(
    page: Any,
    granularity: Granularity = Granularity.CHARACTER,
    config: Optional[LayoutConfig] = None,
) -> TextPage:
    """
    Build a TextPage from a pdfplumber page.

    Args:
        page: pdfplumber Page
        granularity: CHARACTER reads page.chars, WORD reads page.extract_words()
        config: Layout configuration

    Returns:
        TextPage holding the page's fragments
    """
    width = page.width or 612.0
    height = page.height or 792.0
    if granularity is Granularity.CHARACTER:
        objects = page.chars
    else:
        objects = page.extract_words()
    return TextPage.from_fragments(
        fragments_from_pdfplumber(objects, width, height),
        granularity=granularity,
        config=config,
    )


def load_text_pages(
    pdf_path: str,
    granularity: Granularity = Granularity.CHARACTER,
    config: Optional[LayoutConfig] = None,
) -> List[TextPage]:
    """
    Open a PDF with pdfplumber and build one TextPage per page.
    """
    import pdfplumber

    pages: List[TextPage] = []
    with pdfplumber.open(pdf_path) as pdf:
        for i, page in enumerate(pdf.pages):
            text_page = text_page_from_pdfplumber(page, granularity, config)
            pages.append(text_page)
            logger.debug("Loaded page %d of %s", i + 1, pdf_path)
    return pages
