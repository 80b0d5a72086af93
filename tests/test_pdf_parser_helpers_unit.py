from __future__ import annotations

import sys
import types

import pytest


def _text_page(blocks):
    calls = []

    def get_text(mode, flags=0):
        calls.append((mode, flags))
        return {"blocks": blocks}

    return types.SimpleNamespace(get_text=get_text, calls=calls)


def test_get_text_flags_is_robust_to_missing_constants():
    from extraction.pdf_parser import _get_text_flags

    class DummyFitz:
        TEXT_PRESERVE_LIGATURES = 2
        TEXT_PRESERVE_WHITESPACE = 4

    assert _get_text_flags(DummyFitz) == 6

    class DummyFitzMissing:
        pass

    assert _get_text_flags(DummyFitzMissing) == 0


def test_span_to_run_uses_origin_and_bbox_width():
    from extraction.pdf_parser import _span_to_run

    run = _span_to_run({"text": "Hello", "origin": (10.0, 100.0), "bbox": (10.0, 90.0, 40.5, 102.0)})
    assert run.text == "Hello"
    assert run.x == pytest.approx(10.0)
    assert run.y == pytest.approx(100.0)
    assert run.width == pytest.approx(30.5)


def test_read_glyph_runs_walks_text_blocks_in_order(monkeypatch):
    fake_fitz = types.SimpleNamespace(TEXT_PRESERVE_WHITESPACE=4)
    monkeypatch.setitem(sys.modules, "fitz", fake_fitz)
    from extraction.pdf_parser import read_glyph_runs

    page = _text_page(
        [
            {
                "type": 0,
                "lines": [
                    {"spans": [
                        {"text": "A", "origin": (0, 50), "bbox": (0, 40, 5, 52)},
                        {"text": "B", "origin": (9, 50), "bbox": (9, 40, 14, 52)},
                    ]},
                    {"spans": [{"text": "C", "origin": (0, 30), "bbox": (0, 20, 5, 32)}]},
                ],
            },
            {"type": 1, "image": b"..."},
            {"type": 0, "lines": [{"spans": [{"text": "D", "origin": (0, 10), "bbox": (0, 0, 5, 12)}]}]},
        ]
    )

    runs = read_glyph_runs(page)
    assert [r.text for r in runs] == ["A", "B", "C", "D"]
    assert page.calls == [("dict", 4)]


def test_require_fitz_raises_helpful_error_when_missing(monkeypatch):
    monkeypatch.setitem(sys.modules, "fitz", None)
    from extraction.pdf_parser import require_fitz

    with pytest.raises(RuntimeError, match="PyMuPDF"):
        require_fitz()


def test_open_pdf_dispatches_on_source_type(monkeypatch, tmp_path):
    opened = []

    def fake_open(*args, **kwargs):
        opened.append((args, kwargs))
        return object()

    monkeypatch.setitem(sys.modules, "fitz", types.SimpleNamespace(open=fake_open))
    from extraction.pdf_parser import open_pdf

    path = tmp_path / "a.pdf"
    open_pdf(path)
    open_pdf(b"%PDF-1.4")
    open_pdf(bytearray(b"%PDF-1.7"))

    assert opened[0] == ((str(path),), {})
    assert opened[1] == ((), {"stream": b"%PDF-1.4", "filetype": "pdf"})
    assert opened[2] == ((), {"stream": b"%PDF-1.7", "filetype": "pdf"})
