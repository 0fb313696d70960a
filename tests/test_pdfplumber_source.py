"""
Tests for the pdfplumber fragment source
"""

import unittest
import sys
import os
from unittest.mock import MagicMock, patch

sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from textpage import Granularity, NormalizedRect
from textpage.sources import (
    fragment_from_pdfplumber,
    fragments_from_pdfplumber,
    load_text_pages,
    text_page_from_pdfplumber,
)


def mock_page(chars=None, words=None, width=100.0, height=200.0):
    page = MagicMock()
    page.width = width
    page.height = height
    page.chars = chars or []
    page.extract_words.return_value = words or []
    return page


class TestFragments(unittest.TestCase):

    def test_normalizes_coordinates(self):
        frag = fragment_from_pdfplumber(
            {'text': 'A', 'x0': 10, 'x1': 20, 'top': 50, 'bottom': 60}, 100.0, 200.0
        )
        self.assertEqual(frag, ('A', NormalizedRect(0.1, 0.25, 0.2, 0.3)))

    def test_clamps_and_skips(self):
        frags = fragments_from_pdfplumber([
            {'text': '', 'x0': 10, 'x1': 20, 'top': 50, 'bottom': 60},
            {'text': 'B', 'x0': -2, 'x1': 105, 'top': 50, 'bottom': 60},
        ], 100.0, 200.0)
        self.assertEqual(len(frags), 1)
        self.assertEqual(frags[0][1].left, 0.0)
        self.assertEqual(frags[0][1].right, 1.0)

    def test_zero_page_size(self):
        self.assertIsNone(fragment_from_pdfplumber({'text': 'A'}, 0, 0))


class TestTextPageFromPdfplumber(unittest.TestCase):

    def test_chars_reassembled(self):
        page = mock_page(chars=[
            {'text': 'H', 'top': 100, 'bottom': 110, 'x0': 10, 'x1': 15},
            {'text': 'i', 'top': 100, 'bottom': 110, 'x0': 15, 'x1': 20},
            # Gap (x0=25, prev x1=20) -> space
            {'text': 'T', 'top': 100, 'bottom': 110, 'x0': 25, 'x1': 30},
            # Next line
            {'text': 'N', 'top': 120, 'bottom': 130, 'x0': 10, 'x1': 15},
        ])
        text_page = text_page_from_pdfplumber(page)
        self.assertEqual(text_page.text(), "Hi T\nN")

    def test_words(self):
        page = mock_page(words=[
            {'text': 'world', 'top': 100, 'bottom': 110, 'x0': 50, 'x1': 75},
            {'text': 'hello', 'top': 100, 'bottom': 110, 'x0': 10, 'x1': 35},
        ])
        text_page = text_page_from_pdfplumber(page, Granularity.WORD)
        self.assertEqual(text_page.text(), "hello world")
        page.extract_words.assert_called_once()


class TestLoadTextPages(unittest.TestCase):

    def test_load(self):
        with patch("pdfplumber.open") as mock_open:
            mock_pdf = MagicMock()
            mock_pdf.pages = [
                mock_page(chars=[{'text': 'A', 'top': 10, 'bottom': 20, 'x0': 10, 'x1': 15}]),
                mock_page(chars=[{'text': 'B', 'top': 10, 'bottom': 20, 'x0': 10, 'x1': 15}]),
            ]
            mock_open.return_value.__enter__.return_value = mock_pdf

            pages = load_text_pages("dummy.pdf")

        mock_open.assert_called_once_with("dummy.pdf")
        self.assertEqual([p.text() for p in pages], ["A", "B"])


if __name__ == "__main__":
    unittest.main()
