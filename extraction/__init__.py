"""PDF extraction module: glyph runs to reading-order page text."""
from __future__ import annotations

from extraction.document_builder import build_document, extract_document
from extraction.pdf_parser import open_pdf, read_glyph_runs
from extraction.text_reconstruction import (
    LINE_BREAK_THRESHOLD,
    WORD_GAP_THRESHOLD,
    reconstruct_page_text,
)

__all__ = [
    "LINE_BREAK_THRESHOLD",
    "WORD_GAP_THRESHOLD",
    "build_document",
    "extract_document",
    "open_pdf",
    "read_glyph_runs",
    "reconstruct_page_text",
]
