"""Custom exceptions used across the PDF diff pipeline."""
from __future__ import annotations

from typing import Optional

__all__ = ["PdfDiffError", "ExtractionError", "ValidationError"]


class PdfDiffError(Exception):
    """Base class for errors raised by this package."""

    pass


class ExtractionError(PdfDiffError):
    """Raised when a PDF cannot be opened or one of its pages cannot be decoded.

    ``source`` names the file (or in-memory document), ``page_number`` is the
    1-based page that failed, if any, and ``side`` is ``"original"`` or
    ``"modified"`` once the pipeline knows which input failed.
    """

    def __init__(
        self,
        message: str,
        *,
        source: Optional[str] = None,
        page_number: Optional[int] = None,
        side: Optional[str] = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.source = source
        self.page_number = page_number
        self.side = side

    def __str__(self) -> str:
        context = []
        if self.side:
            context.append(f"{self.side} document")
        if self.source:
            context.append(self.source)
        if self.page_number is not None:
            context.append(f"page {self.page_number}")
        if not context:
            return self.message
        return f"{self.message} ({', '.join(context)})"


class ValidationError(PdfDiffError):
    """Raised when an input file fails the size, type or signature checks."""

    pass
