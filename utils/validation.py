"""Input validation helpers."""
from __future__ import annotations

import math
import os
from pathlib import Path
from typing import Optional

from utils.errors import ValidationError

SUPPORTED_EXTENSIONS = {".pdf"}
MAX_FILE_SIZE = 500 * 1024 * 1024  # 500MB
PDF_MAGIC_BYTES = b"%PDF"

_SIZE_UNITS = ("Bytes", "KB", "MB", "GB")


def is_pdf_magic_bytes(data: bytes) -> bool:
    """True when data starts with the %PDF signature."""
    return len(data) >= 4 and bytes(data[:4]) == PDF_MAGIC_BYTES


def _size_limit(max_size: Optional[int]) -> int:
    if max_size is not None:
        return max_size
    from config.settings import settings

    return settings.max_file_size_bytes


def _check_size(size: int, limit: int) -> None:
    if size > limit:
        raise ValidationError(
            f"File size ({round(size / 1024 / 1024)}MB) exceeds the maximum allowed size "
            f"of {round(limit / 1024 / 1024)}MB"
        )


def validate_pdf_path(path: str | os.PathLike, max_size: Optional[int] = None) -> Path:
    """
    Check that a path points at a readable PDF within the size limit.

    Symlinks are resolved first so the checks apply to the real file.

    Returns:
        The resolved path

    Raises:
        ValidationError: If the file is missing, not a regular file, not a
            .pdf, too large, or does not start with %PDF
    """
    pdf_path = Path(path)
    if not pdf_path.exists():
        raise ValidationError(f"File not found: {pdf_path}")

    real_path = pdf_path.resolve()
    if not real_path.is_file():
        raise ValidationError(f"Path is not a regular file: {real_path}")
    if real_path.suffix.lower() not in SUPPORTED_EXTENSIONS:
        raise ValidationError(f"Unsupported file type: {real_path.suffix or '(none)'}")

    _check_size(real_path.stat().st_size, _size_limit(max_size))

    with real_path.open("rb") as fh:
        header = fh.read(4)
    if not is_pdf_magic_bytes(header):
        raise ValidationError("File does not appear to be a valid PDF (invalid header)")
    return real_path


def validate_pdf_bytes(data: bytes, max_size: Optional[int] = None) -> bytes:
    """Check size and %PDF signature of an in-memory PDF."""
    _check_size(len(data), _size_limit(max_size))
    if not is_pdf_magic_bytes(data):
        raise ValidationError("File does not appear to be a valid PDF (invalid header)")
    return data


def format_file_size(size: int) -> str:
    """
    Format a byte count for display.

    Examples:
        >>> format_file_size(0)
        '0 Bytes'
        >>> format_file_size(1536)
        '1.5 KB'
    """
    if size <= 0:
        return "0 Bytes"

    index = 0
    while index < len(_SIZE_UNITS) - 1 and size >= 1024 ** (index + 1):
        index += 1
    # Round half up to two decimals
    value = math.floor(size / 1024 ** index * 100 + 0.5) / 100
    text = f"{value:.2f}".rstrip("0").rstrip(".")
    return f"{text} {_SIZE_UNITS[index]}"
