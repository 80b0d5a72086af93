"""Export diff results as JSON."""
from __future__ import annotations

import json
from pathlib import Path

from comparison.models import ComparisonResult, PageDiffResult
from utils.logging import logger


def _page_to_dict(page: PageDiffResult) -> dict:
    return {
        "page_num": page.page_number,
        "has_changes": page.has_changes,
        "similarity": page.similarity,
        "stats": page.stats.to_dict(),
        "fragments": [fragment.to_dict() for fragment in page.fragments],
    }


def result_to_dict(result: ComparisonResult) -> dict:
    """Build the JSON-serializable payload for a comparison result."""
    payload = {
        "metadata": {
            "original": {"name": result.original.name, "total_pages": result.original.total_pages},
            "modified": {"name": result.modified.name, "total_pages": result.modified.total_pages},
            "granularity": result.granularity,
            "mode": result.mode,
            "selected_pages": result.metadata.get("selected_pages"),
        },
        "summary": result.stats.to_dict(),
        "pages": [_page_to_dict(page) for page in result.pages],
    }
    if result.mode == "document":
        payload["fragments"] = [fragment.to_dict() for fragment in result.fragments]
    if "metrics" in result.metadata:
        payload["metrics"] = result.metadata["metrics"]
    return payload


def export_json(result: ComparisonResult, output_path: str | Path) -> Path:
    """
    Export a comparison result as JSON.

    Per-page entries carry their statistics and the full fragment list, so
    either document's page text can be rebuilt from the file.
    """
    output = Path(output_path)
    logger.info("Writing JSON diff to %s", output)
    output.write_text(json.dumps(result_to_dict(result), ensure_ascii=False, indent=2), encoding="utf-8")
    return output
