#!/usr/bin/env python
"""
Command-line interface for the Page Reconstruction Pipeline.

Usage:
    page-recon --input <pdf_or_runs_json> --output <output_dir> [options]

Examples:
    # Reconstruct a PDF into linearized text and Markdown
    page-recon --input paper.pdf --output ./output --format text markdown

    # Only the first five pages, forcing single-column reading order
    page-recon --input paper.pdf --output ./output --pages 1-5 --single-column
"""

import argparse
import dataclasses
import logging
import sys
import time
from pathlib import Path
from typing import List

from . import __version__
from .config import get_config

logger = logging.getLogger("page_recon")


def setup_argparser() -> argparse.ArgumentParser:
    """Create argument parser."""
    parser = argparse.ArgumentParser(
        description="Page Reconstruction Pipeline - Rebuild reading order from positioned PDF text",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  Reconstruct a PDF and export all formats:
    page-recon --input paper.pdf --output ./output --format all

  Reconstruct pre-extracted runs:
    page-recon --input runs.json --output ./output --format json

  Process only specific pages:
    page-recon --input paper.pdf --output ./output --pages 1-5
        """
    )

    # Required arguments
    parser.add_argument(
        "--input", "-i",
        required=True,
        help="Input PDF file or JSON file of pre-extracted runs"
    )

    parser.add_argument(
        "--output", "-o",
        required=True,
        help="Output directory for generated files"
    )

    # Optional arguments
    parser.add_argument(
        "--format", "-f",
        nargs="+",
        default=["text", "markdown"],
        choices=["text", "markdown", "json", "all"],
        help="Output format(s) (default: text markdown)"
    )

    parser.add_argument(
        "--pages",
        type=str,
        default=None,
        help="Page range to process, e.g., '1-5' or '1,3,5' (default: all)"
    )

    parser.add_argument(
        "--max-pages",
        type=int,
        default=None,
        help="Stop after this many pages (default: PAGE_RECON_MAX_PAGES or 20; 0 = no cap)"
    )

    parser.add_argument(
        "--single-column",
        action="store_true",
        help="Disable two-column detection"
    )

    parser.add_argument(
        "--debug",
        action="store_true",
        help="Enable debug mode (re-raises processing errors)"
    )

    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Enable verbose output"
    )

    parser.add_argument(
        "--quiet", "-q",
        action="store_true",
        help="Suppress non-error output"
    )

    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}"
    )

    return parser


def parse_page_range(page_str: str, max_pages: int) -> List[int]:
    """Parse page range string to list of page numbers."""
    pages = []

    for part in page_str.split(","):
        part = part.strip()
        if not part:
            continue
        if "-" in part:
            start, end = part.split("-", 1)
            start = max(int(start), 1)
            end = min(int(end), max_pages)
            pages.extend(range(start, end + 1))
        else:
            page = int(part)
            if 1 <= page <= max_pages:
                pages.append(page)

    return sorted(set(pages))


def run_pipeline(args) -> int:
    """Run the page reconstruction pipeline."""
    from .utils.assembler import DocumentAssembler
    from .utils.export import DocumentExporter
    from .utils.io import detect_input_type, ensure_dir, load_pdf, load_runs_json

    start_time = time.time()

    config = get_config()
    if args.max_pages is not None:
        config.max_pages = args.max_pages if args.max_pages > 0 else None
    if args.single_column:
        config.layout = dataclasses.replace(config.layout, force_single_column=True)
    config.debug_mode = config.debug_mode or args.debug

    output_dir = Path(args.output)
    ensure_dir(output_dir)

    input_path = Path(args.input)
    if not input_path.exists():
        raise FileNotFoundError(f"Input file not found: {input_path}")
    input_type = detect_input_type(input_path)
    logger.info(f"Input type detected: {input_type}")

    assembler = DocumentAssembler(config)

    if input_type == "pdf":
        with load_pdf(input_path) as pdf:
            page_numbers = list(range(1, pdf.page_count + 1))
            if args.pages:
                page_numbers = parse_page_range(args.pages, pdf.page_count)
                logger.info(f"Processing pages: {page_numbers}")
            document = assembler.process_document(
                (pdf.page(n) for n in page_numbers),
                source_file=str(input_path),
                pages_total=pdf.page_count
            )
    elif input_type == "json":
        sources = load_runs_json(input_path)
        pages_total = len(sources)
        if args.pages:
            wanted = set(parse_page_range(args.pages, max((s.page_number for s in sources), default=0)))
            sources = [s for s in sources if s.page_number in wanted]
            logger.info(f"Processing pages: {sorted(wanted)}")
        document = assembler.process_document(
            sources,
            source_file=str(input_path),
            pages_total=pages_total
        )
    else:
        logger.error(f"Unsupported input: {input_path}")
        return 1

    if not document.pages:
        logger.error("No pages to process")
        return 1

    exporter = DocumentExporter(output_dir, input_path.stem, config.export)
    for fmt, path in exporter.export(document, args.format).items():
        logger.info(f"Exported {fmt}: {path}")

    # Print summary
    elapsed = time.time() - start_time
    metrics = document.metrics

    if not args.quiet:
        print("\n" + "=" * 60)
        print("PAGE RECONSTRUCTION COMPLETE")
        print("=" * 60)
        print(f"Source: {input_path}")
        print(f"Output: {output_dir}")
        print(f"Pages processed: {metrics.pages_processed} of {metrics.pages_total}"
              + (" (page cap reached)" if document.truncated else ""))
        print(f"Processing time: {elapsed:.2f}s")
        print()
        print("Blocks:")
        print(f"  Paragraphs: {metrics.paragraphs}")
        print(f"  Headings: {metrics.headings}")
        print(f"  Table rows: {metrics.table_rows}")
        print(f"  Figure placeholders: {metrics.figure_placeholders}")
        print(f"  Two-column pages: {metrics.two_column_pages}")
        print("=" * 60)

    return 0


def main(argv=None):
    """Main entry point."""
    parser = setup_argparser()
    args = parser.parse_args(argv)

    # Configure logging level
    if args.verbose:
        logging.getLogger().setLevel(logging.DEBUG)
    elif args.quiet:
        logging.getLogger().setLevel(logging.ERROR)

    try:
        exit_code = run_pipeline(args)
    except KeyboardInterrupt:
        logger.info("Interrupted by user")
        sys.exit(130)
    except (FileNotFoundError, RuntimeError, IndexError, ValueError) as e:
        logger.error(f"Processing failed: {e}")
        if args.debug:
            raise
        sys.exit(1)
    sys.exit(exit_code)


if __name__ == "__main__":
    main()
