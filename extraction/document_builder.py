"""Build per-document page models from glyph runs."""
from __future__ import annotations

import os
from pathlib import Path
from typing import Iterable, List, Optional, Sequence

from comparison.models import Document, GlyphRun, PageText
from extraction.pdf_parser import PdfSource, open_pdf, read_glyph_runs, require_fitz
from extraction.text_reconstruction import reconstruct_page_text
from utils.errors import ExtractionError
from utils.logging import logger

IN_MEMORY_NAME = "document.pdf"


def build_document(name: str, page_runs: Iterable[Sequence[GlyphRun]]) -> Document:
    """Reconstruct each page's text in order and assemble a Document (pages numbered from 1)."""
    pages = tuple(
        PageText(page_number=index, text=reconstruct_page_text(runs))
        for index, runs in enumerate(page_runs, start=1)
    )
    return Document(name=name, pages=pages)


def _source_name(source: PdfSource, name: Optional[str]) -> str:
    if name:
        return name
    if isinstance(source, (bytes, bytearray)):
        return IN_MEMORY_NAME
    return Path(os.fspath(source)).name


def extract_document(source: PdfSource, name: Optional[str] = None) -> Document:
    """
    Extract a Document from a PDF path or raw PDF bytes.

    Pages are decoded one after another against a single document handle.
    Any failure aborts the whole build; no partial Document is returned.

    Args:
        source: Path to the PDF, or its bytes
        name: Display name; defaults to the file's base name

    Returns:
        Document with one PageText per page

    Raises:
        ExtractionError: If the file cannot be opened, its page count is
            unavailable, or a page fails to decode
    """
    doc_name = _source_name(source, name)
    require_fitz()
    logger.info("Extracting text: %s", doc_name)

    try:
        pdf = open_pdf(source)
    except Exception as exc:
        raise ExtractionError(f"Could not open PDF: {exc}", source=doc_name) from exc

    try:
        try:
            page_count = len(pdf)
        except Exception as exc:
            raise ExtractionError(f"Page count unavailable: {exc}", source=doc_name) from exc

        page_runs: List[List[GlyphRun]] = []
        for index in range(page_count):
            try:
                page_runs.append(read_glyph_runs(pdf[index]))
            except Exception as exc:
                raise ExtractionError(
                    f"Could not decode page text: {exc}",
                    source=doc_name,
                    page_number=index + 1,
                ) from exc
    finally:
        close = getattr(pdf, "close", None)
        if close is not None:
            close()

    document = build_document(doc_name, page_runs)
    logger.info("Extracted %d pages from %s", document.total_pages, doc_name)
    return document
