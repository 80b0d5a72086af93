"""Word-count statistics over diff fragments and their aggregation across pages."""
from __future__ import annotations

from typing import Iterable

from rapidfuzz import fuzz

from comparison.models import DiffFragment, DiffStats


def count_words(value: str) -> int:
    """Number of maximal non-whitespace runs in a string."""
    return len(value.split())


def _change_percentage(total_changes: int, total_words: int) -> float:
    if total_words == 0:
        return 0.0
    return total_changes / total_words * 100


def compute_stats(fragments: Iterable[DiffFragment]) -> DiffStats:
    """
    Count added, removed and unchanged words in a fragment sequence.

    Returns:
        DiffStats whose change percentage is the share of all counted words
        that were added or removed (0.0 when there are no words at all)
    """
    additions = 0
    deletions = 0
    unchanged = 0

    for fragment in fragments:
        words = count_words(fragment.value)
        if fragment.added:
            additions += words
        elif fragment.removed:
            deletions += words
        else:
            unchanged += words

    total_changes = additions + deletions
    return DiffStats(
        additions=additions,
        deletions=deletions,
        unchanged=unchanged,
        total_changes=total_changes,
        change_percentage=_change_percentage(total_changes, additions + deletions + unchanged),
    )


def combine_stats(stats_list: Iterable[DiffStats]) -> DiffStats:
    """
    Sum per-page statistics into one total.

    The change percentage is recomputed from the summed counts, never averaged.
    """
    additions = deletions = unchanged = total_changes = 0
    for stats in stats_list:
        additions += stats.additions
        deletions += stats.deletions
        unchanged += stats.unchanged
        total_changes += stats.total_changes

    return DiffStats(
        additions=additions,
        deletions=deletions,
        unchanged=unchanged,
        total_changes=total_changes,
        change_percentage=_change_percentage(total_changes, additions + deletions + unchanged),
    )


def page_similarity(old_text: str, new_text: str) -> float:
    """Character-level similarity of two page texts on a 0-100 scale."""
    if not old_text and not new_text:
        return 100.0
    return float(fuzz.ratio(old_text, new_text))
