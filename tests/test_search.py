"""
Tests for the search engine
"""

import unittest
import sys
import os

sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from textpage import (
    CaseSensitivity,
    Granularity,
    NormalizedRect,
    RegularAreaRect,
    SearchCursor,
    SearchDirection,
    SearchEngine,
    TextIndex,
    TextPage,
)
from textpage.search import fold_case


def glyph_fragments(text, left, top=0.10, width=0.02, height=0.02):
    return [
        (ch, NormalizedRect(left + i * width, top, left + (i + 1) * width, top + height))
        for i, ch in enumerate(text)
    ]


def glyph_rect(left, index, top=0.10, width=0.02, height=0.02):
    return NormalizedRect(left + index * width, top, left + (index + 1) * width, top + height)


class TestFindText(unittest.TestCase):

    def setUp(self):
        self.page = TextPage.from_fragments(
            glyph_fragments("Hello", 0.10) + glyph_fragments("World", 0.23)
        )

    def test_forward_then_resume(self):
        hit = self.page.find_text(1, "lo")
        expected = glyph_rect(0.10, 3).union(glyph_rect(0.10, 4))
        self.assertEqual(hit, RegularAreaRect([expected]))

        # Resuming skips the 'o' already matched in "Hello"
        nxt = self.page.find_text(1, "o", SearchDirection.FORWARD, resume_from=hit)
        self.assertEqual(nxt, RegularAreaRect([glyph_rect(0.23, 1)]))

    def test_backward_single_occurrence(self):
        forward = self.page.find_text(2, "World", SearchDirection.FORWARD)
        backward = self.page.find_text(2, "World", SearchDirection.BACKWARD)
        self.assertIsNotNone(forward)
        self.assertEqual(forward, backward)

    def test_backward_resume(self):
        last_o = self.page.find_text(3, "o", SearchDirection.BACKWARD)
        self.assertEqual(last_o, RegularAreaRect([glyph_rect(0.23, 1)]))
        first_o = self.page.find_text(3, "o", SearchDirection.BACKWARD, resume_from=last_o)
        self.assertEqual(first_o, RegularAreaRect([glyph_rect(0.10, 4)]))
        self.assertIsNone(self.page.find_text(3, "o", SearchDirection.BACKWARD, resume_from=first_o))

    def test_case_sensitivity(self):
        self.assertIsNotNone(
            self.page.find_text(4, "WORLD", case_sensitivity=CaseSensitivity.CASE_INSENSITIVE)
        )
        self.assertIsNone(
            self.page.find_text(4, "WORLD", case_sensitivity=CaseSensitivity.CASE_SENSITIVE)
        )

    def test_match_across_synthetic_space(self):
        hit = self.page.find_text(5, "o W")
        self.assertIsNotNone(hit)
        self.assertEqual(len(hit), 1)
        self.assertEqual(hit[0].left, glyph_rect(0.10, 4).left)
        self.assertEqual(hit[0].right, glyph_rect(0.23, 0).right)

    def test_not_found_and_empty_needle(self):
        self.assertIsNone(self.page.find_text(6, "xyz"))
        self.assertIsNone(self.page.find_text(6, ""))

    def test_resume_from_normalized_rect(self):
        hit = self.page.find_text(7, "l")
        nxt = self.page.find_text(7, "l", resume_from=hit.bounding_rect())
        self.assertEqual(nxt, RegularAreaRect([glyph_rect(0.10, 3)]))


class TestMultiLineSearch(unittest.TestCase):

    def test_match_spans_lines(self):
        page = TextPage.from_fragments([
            ("alpha", NormalizedRect(0.10, 0.10, 0.20, 0.12)),
            ("beta", NormalizedRect(0.25, 0.10, 0.33, 0.12)),
            ("gamma", NormalizedRect(0.10, 0.20, 0.20, 0.22)),
        ], granularity=Granularity.WORD)
        hit = page.find_text(1, "beta gamma")
        self.assertEqual(len(hit), 2)
        self.assertEqual(hit[0], NormalizedRect(0.25, 0.10, 0.33, 0.12))
        self.assertEqual(hit[1], NormalizedRect(0.10, 0.20, 0.20, 0.22))

    def test_space_needle_skips_line_break(self):
        page = TextPage.from_fragments([
            ("ab", NormalizedRect(0.10, 0.10, 0.14, 0.12)),
            ("cd", NormalizedRect(0.10, 0.20, 0.14, 0.22)),
            ("ef", NormalizedRect(0.20, 0.20, 0.24, 0.22)),
        ], granularity=Granularity.WORD)
        self.assertEqual(page.text(), "ab\ncd ef")
        forward = page.find_text(1, " ")
        self.assertIsNotNone(forward)
        self.assertAlmostEqual(forward[0].left, 0.17)
        self.assertAlmostEqual(forward[0].top, 0.20)
        backward = page.find_text(2, " ", SearchDirection.BACKWARD)
        self.assertEqual(forward, backward)

    def test_resume_walks_down_lines(self):
        rows = [0.10, 0.20, 0.30]
        page = TextPage.from_fragments(
            [("ab", NormalizedRect(0.10, top, 0.14, top + 0.02)) for top in rows],
            granularity=Granularity.WORD,
        )
        hit = None
        for top in rows:
            hit = page.find_text(1, "ab", resume_from=hit)
            self.assertEqual(hit, RegularAreaRect([NormalizedRect(0.10, top, 0.14, top + 0.02)]))
        self.assertIsNone(page.find_text(1, "ab", resume_from=hit))
        back = page.find_text(1, "ab", SearchDirection.BACKWARD, resume_from=hit)
        self.assertEqual(back, RegularAreaRect([NormalizedRect(0.10, 0.20, 0.14, 0.22)]))

    def test_word_granular_sub_rect(self):
        page = TextPage.from_fragments(
            [("abcd", NormalizedRect(0.0, 0.1, 0.4, 0.2))], granularity=Granularity.WORD
        )
        hit = page.find_text(1, "bc")
        self.assertAlmostEqual(hit[0].left, 0.1)
        self.assertAlmostEqual(hit[0].right, 0.3)


class TestIncrementalSearch(unittest.TestCase):

    def setUp(self):
        self.page = TextPage.from_fragments(
            glyph_fragments("Hello", 0.10) + glyph_fragments("Help", 0.23)
        )

    def test_growing_needle_keeps_hit(self):
        cursor = self.page.search("He", search_id=9)
        grown = self.page.search("Hel", cursor)
        self.assertEqual(grown.search_id, 9)
        self.assertEqual(grown.needle, "Hel")
        expected = glyph_rect(0.10, 0).union(glyph_rect(0.10, 2))
        self.assertEqual(grown.area, RegularAreaRect([expected]))

    def test_find_next_moves_on(self):
        cursor = self.page.search("He", search_id=9)
        nxt = self.page.search("He", cursor)
        expected = glyph_rect(0.23, 0).union(glyph_rect(0.23, 1))
        self.assertEqual(nxt.area, RegularAreaRect([expected]))
        self.assertIsNone(self.page.search("He", nxt))

    def test_other_search_id_does_not_grow(self):
        cursor = self.page.search("He", search_id=9)
        area = self.page.find_text(10, "Hel", resume_from=cursor)
        expected = glyph_rect(0.23, 0).union(glyph_rect(0.23, 2))
        self.assertEqual(area, RegularAreaRect([expected]))


class TestSearchEngine(unittest.TestCase):

    def test_match_offsets(self):
        page = TextPage.from_fragments(
            glyph_fragments("Hello", 0.10) + glyph_fragments("World", 0.23)
        )
        index = TextIndex(page.entities, page.line_ranges)
        match = SearchEngine().find(index, "lo")
        self.assertEqual((match.start, match.end, match.text), (3, 5, "lo"))
        cursor = match.cursor(4, "lo")
        self.assertEqual(cursor, SearchCursor(search_id=4, area=match.area, needle="lo"))

    def test_fold_case_keeps_length(self):
        text = "İstanbul STRASSE"
        self.assertEqual(len(fold_case(text)), len(text))
        self.assertEqual(fold_case("WoRlD"), "world")


if __name__ == "__main__":
    unittest.main()
