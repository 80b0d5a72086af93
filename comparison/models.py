"""Shared data models for extraction and comparison."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Literal, Optional, Tuple

Granularity = Literal["word", "line"]
ComparisonMode = Literal["pages", "document"]


@dataclass(frozen=True)
class GlyphRun:
    """A rendered text token on a page: content, horizontal origin and advance, vertical origin."""
    text: str
    x: float
    width: float
    y: float


@dataclass(frozen=True)
class PageText:
    page_number: int  # 1-based
    text: str


@dataclass(frozen=True)
class Document:
    name: str
    pages: Tuple[PageText, ...] = ()

    @property
    def total_pages(self) -> int:
        return len(self.pages)

    def page_text(self, page_number: int) -> str:
        """Text of a 1-based page, or an empty string if the document has no such page."""
        if 1 <= page_number <= len(self.pages):
            return self.pages[page_number - 1].text
        return ""

    def full_text(self) -> str:
        """All page texts joined by newlines, used for whole-document comparison."""
        return "\n".join(page.text for page in self.pages)


@dataclass(frozen=True)
class DiffFragment:
    value: str
    added: bool = False
    removed: bool = False

    def __post_init__(self) -> None:
        if self.added and self.removed:
            raise ValueError("A diff fragment cannot be both added and removed")

    @property
    def unchanged(self) -> bool:
        return not self.added and not self.removed

    def to_dict(self) -> dict:
        return {"value": self.value, "added": self.added, "removed": self.removed}


@dataclass(frozen=True)
class DiffStats:
    additions: int = 0
    deletions: int = 0
    unchanged: int = 0
    total_changes: int = 0
    change_percentage: float = 0.0

    @property
    def total_words(self) -> int:
        return self.additions + self.deletions + self.unchanged

    def to_dict(self) -> dict:
        return {
            "additions": self.additions,
            "deletions": self.deletions,
            "unchanged": self.unchanged,
            "total_changes": self.total_changes,
            "change_percentage": self.change_percentage,
        }


@dataclass(frozen=True)
class PageDiffResult:
    page_number: int
    fragments: Tuple[DiffFragment, ...]
    stats: DiffStats
    similarity: float = 100.0  # 0-100 character similarity of the two page texts

    @property
    def has_changes(self) -> bool:
        return any(not fragment.unchanged for fragment in self.fragments)


@dataclass
class ComparisonResult:
    original: Document
    modified: Document
    granularity: Granularity = "word"
    mode: ComparisonMode = "pages"
    pages: List[PageDiffResult] = field(default_factory=list)
    fragments: List[DiffFragment] = field(default_factory=list)  # whole-document mode only
    stats: DiffStats = field(default_factory=DiffStats)
    metadata: Dict[str, object] = field(default_factory=dict)

    @property
    def total_pages(self) -> int:
        return max(self.original.total_pages, self.modified.total_pages)

    def page(self, page_number: int) -> Optional[PageDiffResult]:
        for page_result in self.pages:
            if page_result.page_number == page_number:
                return page_result
        return None
