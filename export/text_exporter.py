"""Generate plain-text diff reports."""
from __future__ import annotations

from datetime import datetime
from pathlib import Path
from typing import Iterable, List, Optional

from comparison.models import ComparisonResult, DiffFragment, DiffStats
from utils.logging import logger

_RULE = "=" * 60


def _fragment_lines(fragment: DiffFragment) -> List[str]:
    if fragment.added:
        prefix = "+ "
    elif fragment.removed:
        prefix = "- "
    else:
        prefix = "  "
    return [prefix + line for line in fragment.value.split("\n") if line.strip()]


def _stats_lines(stats: DiffStats) -> List[str]:
    return [
        f"  Additions: +{stats.additions}",
        f"  Deletions: -{stats.deletions}",
        f"  Unchanged: {stats.unchanged}",
        f"  Changed:   {stats.change_percentage:.1f}%",
    ]


def render_fragments(fragments: Iterable[DiffFragment]) -> List[str]:
    """One report line per non-blank line of each fragment, prefixed "+ ", "- " or two spaces."""
    lines: List[str] = []
    for fragment in fragments:
        lines.extend(_fragment_lines(fragment))
    return lines


def render_text_report(result: ComparisonResult, generated_at: Optional[datetime] = None) -> str:
    """Render the full report as a string."""
    generated_at = generated_at or datetime.now()
    lines = [
        "PDF Diff Report",
        _RULE,
        f"Generated on: {generated_at:%Y-%m-%d %H:%M:%S}",
        f"Total Pages: {result.total_pages}",
        f"Original: {result.original.name}",
        f"Modified: {result.modified.name}",
        "",
        "Overall Statistics",
        *_stats_lines(result.stats),
        "",
    ]

    if result.mode == "document":
        lines.append("Whole document")
        lines.extend(render_fragments(result.fragments))
    else:
        for page in result.pages:
            lines.append(
                f"Page {page.page_number} (+{page.stats.additions} -{page.stats.deletions})"
            )
            lines.extend(render_fragments(page.fragments))
            lines.append("")

    return "\n".join(lines).rstrip("\n") + "\n"


def export_text_report(result: ComparisonResult, output_path: str | Path) -> Path:
    """Write a plain-text report with overall statistics and per-page +/- lines."""
    output = Path(output_path)
    logger.info("Generating text report -> %s", output)
    output.write_text(render_text_report(result), encoding="utf-8")
    return output
