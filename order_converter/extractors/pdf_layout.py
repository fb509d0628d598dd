"""
PDF layout reader - rebuild logical text lines from positioned words
"""
import io
from typing import Dict, List, Any, Iterator
import logging
import pdfplumber

from .token_parser import clean

logger = logging.getLogger(__name__)

DEFAULT_Y_TOLERANCE = 6


def group_fragments(fragments: List[Dict[str, Any]],
                    tolerance: float = DEFAULT_Y_TOLERANCE) -> List[str]:
    """
    Group positioned fragments of one page into text lines

    A fragment joins the first row whose anchor ``y`` is within the
    tolerance, otherwise it opens a new row. Rows are read top to bottom
    (PDF ``y`` grows upward) and fragments left to right.

    Args:
        fragments: Dicts with ``text``, ``x`` and ``y``
        tolerance: Vertical tolerance band

    Returns:
        Logical lines; empty and single-character rows are dropped
    """
    rows = []

    for fragment in fragments:
        row = next((r for r in rows if abs(r["y"] - fragment["y"]) <= tolerance), None)
        if row is None:
            row = {"y": fragment["y"], "cells": []}
            rows.append(row)
        row["cells"].append(fragment)

    lines = []
    for row in sorted(rows, key=lambda r: r["y"], reverse=True):
        cells = sorted(row["cells"], key=lambda c: c["x"])
        text = clean(" ".join(str(c["text"]) for c in cells))
        if len(text) > 1:
            lines.append(text)

    return lines


class PdfLayoutReader:
    """Read positioned words from a PDF with pdfplumber"""

    def __init__(self, y_tolerance: float = DEFAULT_Y_TOLERANCE):
        """
        Initialize layout reader

        Args:
            y_tolerance: Vertical band within which words share a row
        """
        self.y_tolerance = y_tolerance

    def iter_page_fragments(self, data: bytes) -> Iterator[List[Dict[str, Any]]]:
        """Yield the fragments of each page, in page order"""
        with pdfplumber.open(io.BytesIO(data)) as pdf:
            for page_no, page in enumerate(pdf.pages, start=1):
                words = page.extract_words(keep_blank_chars=False, use_text_flow=False) or []
                height = float(page.height)
                logger.debug(f"Page {page_no}: {len(words)} words")
                # pdfplumber measures from the top; flip to PDF user space
                yield [
                    {"text": w["text"], "x": float(w["x0"]), "y": height - float(w["bottom"])}
                    for w in words
                ]

    def read_lines(self, data: bytes) -> List[str]:
        """
        Rebuild the document's logical lines

        Args:
            data: PDF file bytes

        Returns:
            Ordered lines, pages concatenated
        """
        lines = []
        for fragments in self.iter_page_fragments(data):
            lines.extend(group_fragments(fragments, self.y_tolerance))
        return lines
