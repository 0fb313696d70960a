"""
Layout Module
=============
Passes that rebuild reading order, words and lines from raw fragments.
"""

from .config import LayoutConfig
from .passes import (
    add_necessary_space,
    correct_text_order,
    make_and_sort_lines,
    make_word,
    normalize,
    remove_space,
)
from .reconstructor import LayoutReconstructor, Reconstruction, ReconstructionStats

__all__ = [
    'LayoutConfig',
    'LayoutReconstructor', 'Reconstruction', 'ReconstructionStats',
    'normalize', 'remove_space', 'make_word', 'correct_text_order',
    'make_and_sort_lines', 'add_necessary_space',
]
