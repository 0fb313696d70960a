"""
Search Module
=============
Flattened page index and the substring search running over it.
"""

from .engine import SearchCursor, SearchEngine, SearchMatch
from .index import TextIndex, fold_case

__all__ = ['SearchCursor', 'SearchEngine', 'SearchMatch', 'TextIndex', 'fold_case']
