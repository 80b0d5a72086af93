"""Entry point for the PDF text diff command line tool."""
from __future__ import annotations

import argparse
from typing import List, Optional

from comparison.models import ComparisonResult
from config.settings import settings
from export import export_json, export_text_report
from pipeline import ComparisonPipeline, PipelineConfig
from utils.errors import ExtractionError, ValidationError
from utils.logging import configure_logging, logger


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="pdf-text-diff",
        description="Compare the text of two PDF documents and report added, removed and unchanged words.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s v1.pdf v2.pdf
  %(prog)s v1.pdf v2.pdf --pages 1,3,5-8 --granularity line
  %(prog)s v1.pdf v2.pdf --whole-document --json diff.json --report diff.txt
        """,
    )
    parser.add_argument("original", help="Path to the original PDF")
    parser.add_argument("modified", help="Path to the modified PDF")
    parser.add_argument(
        "--granularity",
        choices=["word", "line"],
        default=settings.default_granularity,
        help="Diff tokens (default: %(default)s)",
    )
    parser.add_argument("--pages", help='Pages to compare, e.g. "1,3,5-8" (default: all)')
    parser.add_argument(
        "--whole-document",
        action="store_true",
        help="Diff the concatenated document texts once instead of page by page",
    )
    parser.add_argument("--parallel", action="store_true", help="Diff pages on a thread pool")
    parser.add_argument("--json", dest="json_path", help="Write the full result as JSON")
    parser.add_argument("--report", dest="report_path", help="Write a plain-text report")
    parser.add_argument("--log-level", default=settings.log_level, help="Logging level (default: %(default)s)")
    parser.add_argument("--log-file", default=settings.log_file, help="Also log to this file")
    return parser


def _print_summary(result: ComparisonResult) -> None:
    stats = result.stats
    print(f"Original: {result.original.name} ({result.original.total_pages} pages)")
    print(f"Modified: {result.modified.name} ({result.modified.total_pages} pages)")
    print(f"Granularity: {result.granularity}")
    print()
    print(f"Additions: +{stats.additions} words")
    print(f"Deletions: -{stats.deletions} words")
    print(f"Unchanged: {stats.unchanged} words")
    print(f"Change percentage: {stats.change_percentage:.1f}%")

    if result.mode == "pages":
        if not result.pages:
            print("\nNo pages matched the selection.")
            return
        print()
        for page in result.pages:
            marker = "*" if page.has_changes else " "
            print(
                f"{marker} Page {page.page_number}: +{page.stats.additions} -{page.stats.deletions} "
                f"({page.stats.change_percentage:.1f}% changed, similarity {page.similarity:.1f})"
            )


def main(argv: Optional[List[str]] = None) -> int:
    """Command-line interface."""
    args = build_parser().parse_args(argv)
    configure_logging(args.log_level, args.log_file)

    config = PipelineConfig(
        granularity=args.granularity,
        pages=args.pages,
        whole_document=args.whole_document,
    )
    if args.parallel:
        config.parallel_pages = True

    try:
        result = ComparisonPipeline(config).compare(args.original, args.modified)
    except (ValidationError, ExtractionError) as exc:
        logger.error("Comparison failed: %s", exc)
        print(f"Error: {exc}")
        return 1

    _print_summary(result)

    if args.json_path:
        export_json(result, args.json_path)
        print(f"\nJSON saved to: {args.json_path}")
    if args.report_path:
        export_text_report(result, args.report_path)
        print(f"Report saved to: {args.report_path}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
