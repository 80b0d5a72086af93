"""
Main orchestrator: end-to-end PDF text comparison pipeline.

Provides a single entrypoint that:
1. Validates both input files
2. Extracts reading-order page text from both documents (optionally in two worker processes)
3. Selects the pages to compare
4. Diffs page by page, or the whole documents at once
5. Aggregates word statistics into a ComparisonResult
"""
from __future__ import annotations

import time
from concurrent.futures import ProcessPoolExecutor, ThreadPoolExecutor
from contextlib import contextmanager
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Iterator, List, Optional, Sequence, Tuple

from comparison.diff_engine import diff
from comparison.models import ComparisonResult, Document, Granularity, PageDiffResult
from comparison.stats import combine_stats, compute_stats, page_similarity
from config.settings import settings
from extraction import extract_document
from utils.errors import ExtractionError, ValidationError
from utils.logging import logger
from utils.page_range import parse_page_spec
from utils.validation import validate_pdf_path

ORIGINAL = "original"
MODIFIED = "modified"


@dataclass
class PipelineConfig:
    """Configuration for the comparison pipeline."""

    granularity: Granularity = field(default_factory=lambda: settings.default_granularity)
    pages: Optional[str] = None  # page spec such as "1,3,5-8"; None = all pages
    whole_document: bool = False  # one diff over the concatenated texts

    # Concurrency
    parallel_extraction: bool = field(default_factory=lambda: settings.parallel_extraction)
    parallel_pages: bool = field(default_factory=lambda: settings.parallel_pages)
    max_workers: int = field(default_factory=lambda: settings.num_workers)

    validate_inputs: bool = True


@dataclass
class PipelineMetrics:
    """Performance metrics from pipeline execution."""
    total_time: float = 0.0
    extraction_time: float = 0.0
    comparison_time: float = 0.0
    timing_breakdown: Dict[str, float] = field(default_factory=dict)
    pages_processed: int = 0

    @property
    def time_per_page(self) -> float:
        return self.total_time / max(1, self.pages_processed)

    def to_dict(self) -> dict:
        """Export to JSON-serializable dict."""
        return {
            "total_time": self.total_time,
            "extraction_time": self.extraction_time,
            "comparison_time": self.comparison_time,
            "timing_breakdown": dict(self.timing_breakdown),
            "pages_processed": self.pages_processed,
            "time_per_page": self.time_per_page,
        }


def compare_page(
    original: Document,
    modified: Document,
    page_number: int,
    granularity: Granularity = "word",
) -> PageDiffResult:
    """Diff one page pair; a page missing from either side compares as empty text."""
    old_text = original.page_text(page_number)
    new_text = modified.page_text(page_number)
    fragments = diff(old_text, new_text, granularity)
    stats = compute_stats(fragments)
    logger.debug(
        "Page %d: +%d -%d =%d (%.1f%%)",
        page_number,
        stats.additions,
        stats.deletions,
        stats.unchanged,
        stats.change_percentage,
    )
    return PageDiffResult(
        page_number=page_number,
        fragments=tuple(fragments),
        stats=stats,
        similarity=page_similarity(old_text, new_text),
    )


def compare_pages(
    original: Document,
    modified: Document,
    page_numbers: Sequence[int],
    granularity: Granularity = "word",
    *,
    parallel: bool = False,
    max_workers: int = 4,
) -> List[PageDiffResult]:
    """Diff the given pages, keeping results in page order."""
    if not parallel or len(page_numbers) < 2:
        return [compare_page(original, modified, number, granularity) for number in page_numbers]

    with ThreadPoolExecutor(max_workers=max(1, max_workers)) as pool:
        return list(
            pool.map(lambda number: compare_page(original, modified, number, granularity), page_numbers)
        )


def _load_document(pdf_path: str | Path, validate: bool = True) -> Tuple[Document, float]:
    """Validate and extract one PDF, returning the document and the seconds it took."""
    start = time.perf_counter()
    if validate:
        validate_pdf_path(pdf_path)
    document = extract_document(pdf_path)
    return document, time.perf_counter() - start


@contextmanager
def _tag_failures(side: str) -> Iterator[None]:
    """Re-raise validation and extraction errors naming the document they came from."""
    try:
        yield
    except ValidationError as exc:
        raise ValidationError(f"{side.capitalize()} document: {exc}") from exc
    except ExtractionError as exc:
        raise ExtractionError(
            exc.message,
            source=exc.source,
            page_number=exc.page_number,
            side=side,
        ) from exc


class ComparisonPipeline:
    """
    End-to-end document comparison pipeline.

    Usage:
        pipeline = ComparisonPipeline(config)
        result = pipeline.compare(pdf_a, pdf_b)

        # Or step-by-step:
        original, modified = pipeline.extract_pair(pdf_a, pdf_b)
        result = pipeline.diff(original, modified)

    A pipeline holds only its config and the metrics of its last run, so
    independent comparisons should use independent instances.
    """

    def __init__(self, config: Optional[PipelineConfig] = None):
        self.config = config or PipelineConfig()
        self.metrics = PipelineMetrics()

    def compare(self, pdf_a: str | Path, pdf_b: str | Path) -> ComparisonResult:
        """
        Full end-to-end comparison of two PDF documents.

        Raises:
            ValidationError: If either input fails validation
            ExtractionError: If either document cannot be extracted; ``side``
                names which one
        """
        start_time = time.perf_counter()
        self.metrics = PipelineMetrics()

        logger.info("=== Starting comparison pipeline ===")
        logger.info("Original: %s", pdf_a)
        logger.info("Modified: %s", pdf_b)

        original, modified = self.extract_pair(pdf_a, pdf_b)
        result = self.diff(original, modified)

        self.metrics.total_time = time.perf_counter() - start_time
        result.metadata["metrics"] = self.metrics.to_dict()

        logger.info("=== Pipeline complete ===")
        logger.info(
            "Time: %.2fs (%.2fs/page)",
            self.metrics.total_time,
            self.metrics.time_per_page,
        )
        return result

    def extract(self, pdf_path: str | Path, side: str = ORIGINAL) -> Document:
        """Validate and extract one document, tagging failures with the side they came from."""
        with _tag_failures(side):
            document, elapsed = _load_document(pdf_path, self.config.validate_inputs)
        self.metrics.timing_breakdown[f"extraction_{side}"] = elapsed
        return document

    def extract_pair(self, pdf_a: str | Path, pdf_b: str | Path) -> Tuple[Document, Document]:
        """
        Extract both documents; both must succeed before any diff runs.

        With ``parallel_extraction`` each document is decoded in its own worker
        process, since PyMuPDF does not support use from several threads.
        """
        extract_start = time.perf_counter()

        if self.config.parallel_extraction:
            documents: List[Document] = []
            with ProcessPoolExecutor(max_workers=2) as pool:
                futures = [
                    (side, pool.submit(_load_document, pdf_path, self.config.validate_inputs))
                    for side, pdf_path in ((ORIGINAL, pdf_a), (MODIFIED, pdf_b))
                ]
                for side, future in futures:
                    with _tag_failures(side):
                        document, elapsed = future.result()
                    self.metrics.timing_breakdown[f"extraction_{side}"] = elapsed
                    documents.append(document)
            original, modified = documents
        else:
            original = self.extract(pdf_a, ORIGINAL)
            modified = self.extract(pdf_b, MODIFIED)

        self.metrics.extraction_time = time.perf_counter() - extract_start
        logger.info(
            "Extracted %d / %d pages in %.2fs",
            original.total_pages,
            modified.total_pages,
            self.metrics.extraction_time,
        )
        return original, modified

    def select_pages(self, original: Document, modified: Document) -> List[int]:
        """Page numbers to compare: the page spec bounded by the longer document, or every page."""
        max_pages = max(original.total_pages, modified.total_pages)
        if self.config.pages is None:
            return list(range(1, max_pages + 1))

        selected = parse_page_spec(self.config.pages, max_pages)
        if not selected:
            logger.warning("Page selection %r matched no pages (documents have %d)", self.config.pages, max_pages)
        return selected

    def diff(self, original: Document, modified: Document) -> ComparisonResult:
        """Compare two extracted documents according to the pipeline config."""
        compare_start = time.perf_counter()
        granularity = self.config.granularity

        result = ComparisonResult(original=original, modified=modified, granularity=granularity)

        if self.config.whole_document:
            if self.config.pages is not None:
                logger.warning(
                    "Page selection %r is ignored in whole-document mode; comparing all pages",
                    self.config.pages,
                )
            result.mode = "document"
            result.fragments = diff(original.full_text(), modified.full_text(), granularity)
            result.stats = compute_stats(result.fragments)
            self.metrics.pages_processed = result.total_pages
        else:
            page_numbers = self.select_pages(original, modified)
            result.pages = compare_pages(
                original,
                modified,
                page_numbers,
                granularity,
                parallel=self.config.parallel_pages,
                max_workers=self.config.max_workers,
            )
            result.stats = combine_stats(page.stats for page in result.pages)
            result.metadata["selected_pages"] = page_numbers
            self.metrics.pages_processed = len(page_numbers)

        self.metrics.comparison_time = time.perf_counter() - compare_start
        logger.info(
            "Diff (%s, %s): +%d -%d =%d words, %.1f%% changed",
            result.mode,
            granularity,
            result.stats.additions,
            result.stats.deletions,
            result.stats.unchanged,
            result.stats.change_percentage,
        )
        return result


def compare_pdfs(
    pdf_a: str | Path,
    pdf_b: str | Path,
    *,
    granularity: Optional[Granularity] = None,
    pages: Optional[str] = None,
    whole_document: bool = False,
    parallel_pages: Optional[bool] = None,
) -> ComparisonResult:
    """
    Compare the text of two PDF documents end-to-end.

    This is the main entrypoint for programmatic usage.

    Args:
        pdf_a: Path to the original PDF
        pdf_b: Path to the modified PDF
        granularity: "word" or "line" (settings default when None)
        pages: Optional page spec such as "1,3,5-8"
        whole_document: Diff the concatenated documents once instead of per page
        parallel_pages: Diff pages on a thread pool (settings default when None)

    Returns:
        ComparisonResult with per-page results and combined statistics

    Example:
        from pipeline import compare_pdfs

        result = compare_pdfs("v1.pdf", "v2.pdf", pages="1-3")
        print(f"{result.stats.change_percentage:.1f}% changed")
    """
    config = PipelineConfig(pages=pages, whole_document=whole_document)
    if granularity is not None:
        config.granularity = granularity
    if parallel_pages is not None:
        config.parallel_pages = parallel_pages

    pipeline = ComparisonPipeline(config)
    return pipeline.compare(pdf_a, pdf_b)
