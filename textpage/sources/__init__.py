"""
Fragment Sources
================
Adapters that turn a parser's output into (text, NormalizedRect) fragments.
"""

from .pdfplumber_source import (
    fragment_from_pdfplumber,
    fragments_from_pdfplumber,
    load_text_pages,
    text_page_from_pdfplumber,
)

__all__ = [
    'fragment_from_pdfplumber',
    'fragments_from_pdfplumber',
    'load_text_pages',
    'text_page_from_pdfplumber',
]
