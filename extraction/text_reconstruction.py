"""Reading-order text reconstruction from positioned glyph runs."""
from __future__ import annotations

from typing import List, Optional, Sequence

from comparison.models import GlyphRun

# Fixed heuristic tolerances in PDF points, tuned for single-column body text.
LINE_BREAK_THRESHOLD = 5.0  # vertical jump that starts a new line
WORD_GAP_THRESHOLD = 2.0  # horizontal gap that counts as a word boundary


def needs_line_break(previous_y: Optional[float], current_y: float) -> bool:
    """True when a run sits on a different line than the one before it."""
    if previous_y is None:
        return False
    return abs(current_y - previous_y) > LINE_BREAK_THRESHOLD


def needs_space(run: GlyphRun, next_run: Optional[GlyphRun]) -> bool:
    """True when the gap between the end of ``run`` and the start of ``next_run`` separates words."""
    if next_run is None:
        return False
    return next_run.x - (run.x + run.width) > WORD_GAP_THRESHOLD


def reconstruct_page_text(runs: Sequence[GlyphRun]) -> str:
    """
    Rebuild a page's plain text from its glyph runs in upstream order.

    Line breaks are inferred from vertical jumps between consecutive runs and
    single spaces from horizontal gaps. Runs are never reordered, so
    multi-column or rotated layouts come out in extraction order.

    Args:
        runs: Glyph runs of one page, in the order the decoder emitted them

    Returns:
        The page text; an empty string for a page without runs
    """
    parts: List[str] = []
    last_y: Optional[float] = None

    for index, run in enumerate(runs):
        if needs_line_break(last_y, run.y):
            parts.append("\n")
        last_y = run.y

        parts.append(run.text)

        next_run = runs[index + 1] if index + 1 < len(runs) else None
        if needs_space(run, next_run):
            parts.append(" ")

    return "".join(parts)
