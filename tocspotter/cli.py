import argparse
import json
import logging
import sys
from pathlib import Path

import pdfplumber

from tocspotter.detect_config import DetectTocConfig, DetectTocConfigParams
from tocspotter.item import Item
from tocspotter.item_io import ItemLoadError, items_from_json, items_from_pdf, items_to_json
from tocspotter.logger import configure_logger, dedent_and_log
from tocspotter.toc_detector import DetectToc
from tocspotter.transformer import PAGE_MAPPING, MissingColumnsError, PageMapping, TransformContext


def _parse_cli_args(argv=None):
    parser = argparse.ArgumentParser(description="Detect the table of contents in a PDF or an item stream and tag its items.")
    parser.add_argument("input_file", help="Input PDF file or JSON item list")
    parser.add_argument("-o", "--output_file", help="Where to write the tagged items as JSON (default: stdout)", default=None)
    parser.add_argument("--page-factor", type=int, default=0, help="Offset between page index and printed page numbers")
    parser.add_argument("--page-count", type=int, default=None, help="Page count of the document (default: derived from input)")
    parser.add_argument("--link-min-length", type=int, default=None, help="Minimal length of a line ending with a page number")
    parser.add_argument("--log-file", default=None, help="Also write the log to this file")
    parser.add_argument("-v", "--verbose", action="store_true", default=False, help="Debug logging")
    return parser.parse_args(argv)


def load_items(input_file: Path) -> tuple[list[Item], int]:
    """Return the items of the input file and the page count of the document."""
    if input_file.suffix.lower() == ".pdf":
        with pdfplumber.open(input_file) as pdf:
            return items_from_pdf(pdf), len(pdf.pages)
    items = items_from_json(input_file.read_text(encoding="utf-8"))
    return items, max((item.page for item in items), default=0)


def main(argv=None) -> int:
    args = _parse_cli_args(argv)
    logger = configure_logger(logging.DEBUG if args.verbose else logging.INFO, Path(args.log_file) if args.log_file else None)

    input_file = Path(args.input_file)
    if not input_file.exists():
        logger.error(f"Input file not found: {input_file}")
        return 1

    try:
        items, derived_page_count = load_items(input_file)
    except ItemLoadError:
        logger.exception(f"Could not read items from {input_file}")
        return 1

    page_count = args.page_count if args.page_count is not None else derived_page_count
    config = DetectTocConfig(DetectTocConfigParams(link_min_length=args.link_min_length))
    dedent_and_log(
        logger,
        f"""
        Detecting TOC with:
        ....input_file: {input_file}
        ....items: {len(items)}
        ....page_count: {page_count}
        ....page_factor: {args.page_factor}
        ....config: {config.__dict__}""",
    )

    context = TransformContext(page_count, {PAGE_MAPPING: PageMapping(page_factor=args.page_factor)})
    try:
        result = DetectToc(config, logger).execute(context, items)
    except MissingColumnsError:
        logger.exception("Input items cannot be processed")
        return 1

    output = json.dumps({"items": items_to_json(result.items), "messages": result.messages}, indent=2)
    if args.output_file:
        Path(args.output_file).write_text(output, encoding="utf-8")
        logger.info(f"Tagged items written to {args.output_file}")
    else:
        sys.stdout.write(output + "\n")
    return 0


if __name__ == "__main__":
    sys.exit(main())
