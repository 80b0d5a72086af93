"""Configuration management for validation limits, diff defaults, and concurrency."""
from __future__ import annotations

from functools import lru_cache
from typing import Literal, Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    # Input validation
    max_file_size_mb: int = Field(
        default=500,
        description="Largest PDF accepted by the validator, in MiB",
    )

    # Diff defaults
    default_granularity: Literal["word", "line"] = Field(
        default="word",
        description="Tokenization unit used when the caller does not choose one",
    )

    # Concurrency
    parallel_extraction: bool = Field(
        default=False,
        description="Extract the original and modified documents in two worker processes",
    )
    parallel_pages: bool = Field(
        default=False,
        description="Diff pages on a thread pool instead of sequentially",
    )
    num_workers: int = Field(default=4, description="Worker threads for per-page diffing")

    # Logging
    log_level: str = Field(default="INFO", description="Log level used by the CLI")
    log_file: Optional[str] = Field(default=None, description="Optional log file for the CLI")

    model_config = SettingsConfigDict(
        env_prefix="PDF_DIFF_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    @property
    def max_file_size_bytes(self) -> int:
        return self.max_file_size_mb * 1024 * 1024


def get_settings() -> Settings:
    """Return a cached settings instance."""
    return _get_settings()


@lru_cache()
def _get_settings() -> Settings:
    return Settings()


settings = get_settings()
