"""Digital PDF glyph-run extraction using PyMuPDF."""
from __future__ import annotations

import os
from pathlib import Path
from typing import Any, List, Union

from comparison.models import GlyphRun
from utils.logging import logger

PdfSource = Union[str, os.PathLike, bytes, bytearray]


def require_fitz():
    try:
        import fitz  # PyMuPDF
    except ImportError as exc:
        raise RuntimeError(
            "PyMuPDF is required for PDF parsing. Install via `pip install PyMuPDF`."
        ) from exc
    return fitz


def _get_text_flags(fitz_module: Any) -> int:
    """Text extraction flags, tolerating PyMuPDF builds that lack some constants."""
    flags = 0
    for name in ("TEXT_PRESERVE_LIGATURES", "TEXT_PRESERVE_WHITESPACE"):
        flags |= int(getattr(fitz_module, name, 0))
    return flags


def open_pdf(source: PdfSource):
    """Open a PDF from a filesystem path or from raw bytes."""
    fitz = require_fitz()
    if isinstance(source, (bytes, bytearray)):
        logger.debug("Opening in-memory PDF (%d bytes)", len(source))
        return fitz.open(stream=bytes(source), filetype="pdf")
    path = Path(source)
    logger.debug("Opening PDF: %s", path)
    return fitz.open(str(path))


def _span_to_run(span: dict) -> GlyphRun:
    x0, _, x1, _ = span.get("bbox", (0.0, 0.0, 0.0, 0.0))
    origin = span.get("origin") or (x0, 0.0)
    return GlyphRun(
        text=span.get("text", ""),
        x=float(origin[0]),
        width=float(x1) - float(x0),
        y=float(origin[1]),
    )


def read_glyph_runs(page) -> List[GlyphRun]:
    """
    Convert every text span of a PyMuPDF page into a glyph run.

    Spans are returned in the order PyMuPDF emits them (block, line, span).
    Image blocks are skipped. The span baseline origin gives ``x``/``y`` and
    the span bbox gives ``width``.
    """
    fitz = require_fitz()
    content = page.get_text("dict", flags=_get_text_flags(fitz))

    runs: List[GlyphRun] = []
    for block in content.get("blocks", []):
        if block.get("type", 0) != 0:  # Not a text block
            continue
        for line in block.get("lines", []):
            for span in line.get("spans", []):
                runs.append(_span_to_run(span))
    return runs
