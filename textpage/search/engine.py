"""
Search Engine
=============
Stateless substring search over a TextIndex.

Searches resume from a caller-owned cursor (or the area of a previous hit),
so any number of callers can search one page at the same time.
"""

import logging
from dataclasses import dataclass
from typing import Optional, Tuple, Union

from ..types import (
    CaseSensitivity,
    NormalizedRect,
    RegularAreaRect,
    SearchDirection,
)
from .index import LINE_BREAK, TextIndex, fold_case

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SearchCursor:
    """
    Resumable search position owned by the caller.

    Attributes:
        search_id: Id of the search this cursor belongs to
        area: Area of the last hit (None before the first hit)
        needle: Text that produced the last hit
    """
    search_id: int = 0
    area: Optional[RegularAreaRect] = None
    needle: str = ""


ResumePoint = Union[SearchCursor, RegularAreaRect, NormalizedRect, None]


@dataclass(frozen=True)
class SearchMatch:
    """A hit: character range in the page text and its area"""
    start: int
    end: int
    area: RegularAreaRect
    text: str

    def cursor(self, search_id: int, needle: str) -> SearchCursor:
        return SearchCursor(search_id=search_id, area=self.area, needle=needle)


class SearchEngine:
    """
    Find text on a page.

    Usage:
        engine = SearchEngine()
        match = engine.find(index, "needle")
        again = engine.find(index, "needle", resume_from=match.area)
    """

    def find(
        self,
        index: TextIndex,
        needle: str,
        direction: SearchDirection = SearchDirection.FORWARD,
        case_sensitivity: CaseSensitivity = CaseSensitivity.CASE_SENSITIVE,
        resume_from: ResumePoint = None,
        search_id: int = 0,
    ) -> Optional[SearchMatch]:
        """
        Find the next occurrence of ``needle``.

        Args:
            index: Page index to search
            needle: Text to look for; an empty needle finds nothing
            direction: FORWARD searches after the resume point, BACKWARD before it
            case_sensitivity: Compare with or without codepoint case folding
            resume_from: None to start at the page start (or end for BACKWARD),
                otherwise the previous hit's area or cursor
            search_id: Id of this search; a cursor from the same search whose
                needle is a prefix of ``needle`` keeps the hit in place

        Returns:
            SearchMatch or None when not found
        """
        if not needle:
            return None

        haystack = index.haystack(case_sensitivity)
        pattern = needle.replace(LINE_BREAK, " ")
        if case_sensitivity is CaseSensitivity.CASE_INSENSITIVE:
            pattern = fold_case(pattern)

        span, growing = self._resume_span(index, resume_from, pattern, case_sensitivity, search_id)
        forward = direction is SearchDirection.FORWARD

        # Forward hits start at or after `start`; backward hits end at or before `stop`
        if span is None:
            start, stop = 0, len(haystack)
        elif growing:
            # Same hit extended as the user types: keep its start
            start, stop = span[0], span[0] + len(pattern)
        else:
            start, stop = span[1], span[0]

        while True:
            pos = haystack.find(pattern, start) if forward else haystack.rfind(pattern, 0, stop)
            if pos < 0:
                logger.debug("No match for %r (search %d, %s)", needle, search_id, direction.value)
                return None

            end = pos + len(pattern)
            area = index.area_of(pos, end)
            if area is not None:
                return SearchMatch(start=pos, end=end, area=area, text=index.text[pos:end])
            # Hit made only of line breaks: nothing to show, keep scanning
            if forward:
                start = pos + 1
            else:
                stop = end - 1

    @staticmethod
    def _resume_span(
        index: TextIndex,
        resume_from: ResumePoint,
        pattern: str,
        case_sensitivity: CaseSensitivity,
        search_id: int,
    ) -> Tuple[Optional[Tuple[int, int]], bool]:
        """Map the resume point to an offset span; flag incremental growth."""
        if resume_from is None:
            return None, False

        growing = False
        if isinstance(resume_from, SearchCursor):
            previous = resume_from.needle.replace(LINE_BREAK, " ")
            if case_sensitivity is CaseSensitivity.CASE_INSENSITIVE:
                previous = fold_case(previous)
            growing = (
                resume_from.search_id == search_id
                and bool(previous)
                and len(pattern) > len(previous)
                and pattern.startswith(previous)
            )
            area = resume_from.area
        else:
            area = resume_from

        if area is None:
            return None, False
        span = index.span_of(area)
        if span is None:
            return None, False
        return span, growing
