"""Pipeline module - orchestrates end-to-end document comparison."""
from pipeline.compare_pdfs import (
    compare_pdfs,
    compare_page,
    compare_pages,
    ComparisonPipeline,
    PipelineConfig,
    PipelineMetrics,
)

__all__ = [
    "compare_pdfs",
    "compare_page",
    "compare_pages",
    "ComparisonPipeline",
    "PipelineConfig",
    "PipelineMetrics",
]
