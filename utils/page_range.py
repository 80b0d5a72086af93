"""Page selection from comma-separated page specs such as "1,3,5-8"."""
from __future__ import annotations

import re
from typing import List, Optional, Set

from utils.logging import logger

_LEADING_INT_RE = re.compile(r"\s*([+-]?\d+)")


def _parse_int(text: str) -> Optional[int]:
    """Parse the leading integer of ``text`` ("7", " 7", "7abc" -> 7); None when there is none."""
    match = _LEADING_INT_RE.match(text)
    if match is None:
        return None
    return int(match.group(1))


def parse_page_spec(spec: str, max_pages: int) -> List[int]:
    """
    Parse a page spec into sorted, unique page numbers within 1..max_pages.

    Tokens are separated by commas and are either a single page ("3") or an
    inclusive range ("5-8"). Out-of-range pages and tokens that are not
    numbers are skipped rather than rejected.

    Examples:
        >>> parse_page_spec("1,3,5-8", 10)
        [1, 3, 5, 6, 7, 8]
        >>> parse_page_spec("5-8", 6)
        [5, 6]
        >>> parse_page_spec("", 4)
        []
    """
    pages: Set[int] = set()

    for part in spec.split(","):
        token = part.strip()
        if "-" in token:
            bounds = token.split("-")
            start = _parse_int(bounds[0])
            end = _parse_int(bounds[1])
            if start is None or end is None:
                logger.debug("Ignoring page range %r", token)
                continue
            for page in range(max(start, 1), min(end, max_pages) + 1):
                pages.add(page)
        else:
            page = _parse_int(token)
            if page is None or not 1 <= page <= max_pages:
                if token:
                    logger.debug("Ignoring page %r (document has %d pages)", token, max_pages)
                continue
            pages.add(page)

    return sorted(pages)
