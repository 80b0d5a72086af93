from __future__ import annotations

import importlib
import logging
import pickle
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path

import pytest

from comparison.diff_engine import reconstruct_new, reconstruct_old
from comparison.models import Document, PageText
from utils.errors import ExtractionError, ValidationError

PDF_BYTES = b"%PDF-1.4\n"

DOCS = {
    "v1.pdf": ("Hello world", "Page two"),
    "v2.pdf": ("Hello there world", "Page two", "Extra page"),
}


def _pipeline_module():
    # ``pipeline.compare_pdfs`` as an attribute is the re-exported function
    return importlib.import_module("pipeline.compare_pdfs")


def _document(name):
    texts = DOCS[name]
    return Document(name=name, pages=tuple(PageText(i, t) for i, t in enumerate(texts, start=1)))


@pytest.fixture
def fake_extract(monkeypatch):
    """Replace PDF extraction with in-memory documents keyed by file name."""
    calls = []

    def extract_document(source, name=None):
        calls.append(Path(source).name)
        return _document(Path(source).name)

    monkeypatch.setattr(_pipeline_module(), "extract_document", extract_document)
    return calls


@pytest.fixture
def in_process_pool(monkeypatch):
    """Run the extraction worker pool on threads so patched extraction stays visible."""
    pools = []

    class RecordingPool(ThreadPoolExecutor):
        def __init__(self, max_workers=None):
            super().__init__(max_workers=max_workers)
            pools.append(max_workers)

    monkeypatch.setattr(_pipeline_module(), "ProcessPoolExecutor", RecordingPool)
    return pools


@pytest.fixture
def pdf_pair(tmp_path):
    a = tmp_path / "v1.pdf"
    b = tmp_path / "v2.pdf"
    a.write_bytes(PDF_BYTES)
    b.write_bytes(PDF_BYTES)
    return a, b


def _pipeline(**kwargs):
    from pipeline import ComparisonPipeline, PipelineConfig

    kwargs.setdefault("granularity", "word")
    kwargs.setdefault("parallel_extraction", False)
    kwargs.setdefault("parallel_pages", False)
    return ComparisonPipeline(PipelineConfig(**kwargs))


# ---------------------------------------------------------------------------
# compare_page
# ---------------------------------------------------------------------------

def test_compare_page_treats_missing_page_as_empty():
    from pipeline import compare_page

    result = compare_page(_document("v1.pdf"), _document("v2.pdf"), 3)

    assert result.page_number == 3
    assert [f.value for f in result.fragments] == ["Extra page"]
    assert result.fragments[0].added is True
    assert result.stats.additions == 2
    assert result.stats.change_percentage == pytest.approx(100.0)


def test_compare_page_outside_both_documents_is_empty():
    from pipeline import compare_page

    result = compare_page(_document("v1.pdf"), _document("v2.pdf"), 9)
    assert result.fragments == ()
    assert result.stats.total_words == 0
    assert result.similarity == 100.0


def test_compare_pages_parallel_matches_sequential():
    from pipeline import compare_pages

    original, modified = _document("v1.pdf"), _document("v2.pdf")
    sequential = compare_pages(original, modified, [1, 2, 3])
    parallel = compare_pages(original, modified, [1, 2, 3], parallel=True, max_workers=3)
    assert parallel == sequential
    assert [p.page_number for p in parallel] == [1, 2, 3]


# ---------------------------------------------------------------------------
# ComparisonPipeline
# ---------------------------------------------------------------------------

class TestComparisonPipeline:
    def test_compares_every_page_of_the_longer_document(self, fake_extract, pdf_pair):
        result = _pipeline().compare(*pdf_pair)

        assert result.mode == "pages"
        assert [p.page_number for p in result.pages] == [1, 2, 3]
        assert result.metadata["selected_pages"] == [1, 2, 3]

        page1, page2, page3 = result.pages
        assert [(f.value, f.added, f.removed) for f in page1.fragments] == [
            ("Hello ", False, False),
            ("there ", True, False),
            ("world", False, False),
        ]
        assert page2.has_changes is False
        assert page3.stats.additions == 2

        assert result.stats.additions == 3
        assert result.stats.deletions == 0
        assert result.stats.unchanged == 4
        assert result.stats.change_percentage == pytest.approx(300 / 7)

    def test_page_selection_is_bounded_by_document_length(self, fake_extract, pdf_pair):
        result = _pipeline(pages="2-5").compare(*pdf_pair)
        assert [p.page_number for p in result.pages] == [2, 3]

    def test_empty_selection_yields_zero_stats(self, fake_extract, pdf_pair):
        result = _pipeline(pages="9").compare(*pdf_pair)
        assert result.pages == []
        assert result.stats.total_words == 0
        assert result.stats.change_percentage == 0.0

    def test_whole_document_mode(self, fake_extract, pdf_pair):
        result = _pipeline(whole_document=True).compare(*pdf_pair)

        assert result.mode == "document"
        assert result.pages == []
        assert reconstruct_old(result.fragments) == "Hello world\nPage two"
        assert reconstruct_new(result.fragments) == "Hello there world\nPage two\nExtra page"
        assert result.stats.additions == 3

    def test_line_granularity(self, fake_extract, pdf_pair):
        result = _pipeline(granularity="line").compare(*pdf_pair)
        assert result.granularity == "line"
        page1 = result.pages[0]
        assert [(f.value, f.added, f.removed) for f in page1.fragments] == [
            ("Hello world", False, True),
            ("Hello there world", True, False),
        ]

    @pytest.mark.parametrize("parallel_extraction", [False, True])
    def test_parallel_settings_do_not_change_result(
        self, fake_extract, in_process_pool, pdf_pair, parallel_extraction
    ):
        baseline = _pipeline().compare(*pdf_pair)
        result = _pipeline(parallel_extraction=parallel_extraction, parallel_pages=True).compare(*pdf_pair)
        assert result.pages == baseline.pages
        assert result.stats == baseline.stats

    def test_records_metrics(self, fake_extract, pdf_pair):
        pipeline = _pipeline()
        result = pipeline.compare(*pdf_pair)

        metrics = result.metadata["metrics"]
        assert metrics["pages_processed"] == 3
        assert set(metrics["timing_breakdown"]) == {"extraction_original", "extraction_modified"}
        assert pipeline.metrics.total_time >= pipeline.metrics.comparison_time

    def test_extracts_both_documents(self, fake_extract, in_process_pool, pdf_pair):
        pipeline = _pipeline(parallel_extraction=True)
        pipeline.compare(*pdf_pair)
        assert sorted(fake_extract) == ["v1.pdf", "v2.pdf"]
        assert set(pipeline.metrics.timing_breakdown) == {"extraction_original", "extraction_modified"}

    def test_parallel_extraction_uses_two_worker_processes(self, fake_extract, in_process_pool, pdf_pair):
        _pipeline(parallel_extraction=True).compare(*pdf_pair)
        assert in_process_pool == [2]

    def test_sequential_extraction_starts_no_pool(self, fake_extract, in_process_pool, pdf_pair):
        _pipeline().compare(*pdf_pair)
        assert in_process_pool == []

    def test_whole_document_mode_warns_about_page_selection(self, fake_extract, pdf_pair, caplog):
        with caplog.at_level(logging.WARNING, logger="pdfdiff"):
            result = _pipeline(whole_document=True, pages="1").compare(*pdf_pair)

        assert result.mode == "document"
        assert reconstruct_new(result.fragments) == "Hello there world\nPage two\nExtra page"
        assert "ignored in whole-document mode" in caplog.text

    def test_whole_document_mode_without_pages_does_not_warn(self, fake_extract, pdf_pair, caplog):
        with caplog.at_level(logging.WARNING, logger="pdfdiff"):
            _pipeline(whole_document=True).compare(*pdf_pair)
        assert "ignored" not in caplog.text


# ---------------------------------------------------------------------------
# Error propagation
# ---------------------------------------------------------------------------

@pytest.mark.parametrize("parallel_extraction", [False, True])
def test_extraction_error_names_failing_side(monkeypatch, in_process_pool, pdf_pair, parallel_extraction):
    def extract_document(source, name=None):
        if Path(source).name == "v2.pdf":
            raise ExtractionError("Could not decode page text", source="v2.pdf", page_number=2)
        return _document("v1.pdf")

    monkeypatch.setattr(_pipeline_module(), "extract_document", extract_document)

    with pytest.raises(ExtractionError) as excinfo:
        _pipeline(parallel_extraction=parallel_extraction).compare(*pdf_pair)

    err = excinfo.value
    assert err.side == "modified"
    assert err.page_number == 2
    assert err.source == "v2.pdf"
    assert "modified document" in str(err)


def test_extraction_error_survives_pickling():
    err = ExtractionError("Could not decode page text", source="v2.pdf", page_number=2, side="modified")
    restored = pickle.loads(pickle.dumps(err))

    assert type(restored) is ExtractionError
    assert (restored.message, restored.source, restored.page_number, restored.side) == (
        "Could not decode page text",
        "v2.pdf",
        2,
        "modified",
    )
    assert str(restored) == str(err)


def test_validation_error_names_failing_side(fake_extract, tmp_path):
    good = tmp_path / "v1.pdf"
    good.write_bytes(PDF_BYTES)

    with pytest.raises(ValidationError, match="^Modified document: File not found"):
        _pipeline().compare(good, tmp_path / "v2.pdf")
    assert fake_extract == ["v1.pdf"]


def test_validation_can_be_disabled(fake_extract, tmp_path):
    result = _pipeline(validate_inputs=False).compare(tmp_path / "v1.pdf", tmp_path / "v2.pdf")
    assert result.total_pages == 3


# ---------------------------------------------------------------------------
# compare_pdfs entrypoint
# ---------------------------------------------------------------------------

def test_compare_pdfs_entrypoint(fake_extract, pdf_pair):
    from pipeline import compare_pdfs

    result = compare_pdfs(*pdf_pair, granularity="word", pages="1", parallel_pages=False)
    assert [p.page_number for p in result.pages] == [1]
    assert result.stats.additions == 1
