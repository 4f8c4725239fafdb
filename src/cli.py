"""
Command-line interface for the report generation service.

Subcommands:
    generate - Fetch a URL and write PDF/DOCX reports
    extract  - Print the structured extraction of a local file as JSON
    sniff    - Print the detected format of a local file
"""

import argparse
import asyncio
import json
import logging
import sys
from typing import Optional

from src.config.settings import load_config
from src.exceptions import ReportGenerationError
from src.extract import extract_document, sniff
from src.logging_config import configure_logging
from src.pipeline.models import ReportFormat, ReportRequest
from src.pipeline.orchestrator import build_report_generator


def _read_file(path: str) -> str:
    with open(path, 'r', encoding='utf-8', errors='replace') as f:
        return f.read()


def cmd_generate(args: argparse.Namespace) -> int:
    """Run the full pipeline for one URL."""
    config = load_config(args.config)
    if args.output_dir:
        config["storage"]["output_dir"] = args.output_dir

    def on_progress(request, state):
        if args.verbose:
            print(f"  [{state.value}] {request.id}")

    generator = build_report_generator(config, progress_callback=on_progress, write_files=True)
    request = ReportRequest(
        source_url=args.url,
        title=args.title,
        format=ReportFormat(args.format),
    )

    try:
        reports = asyncio.run(generator.generate_report(request))
    except ReportGenerationError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    output_dir = config["storage"]["output_dir"]
    print(f"Generated {len(reports)} report(s) for {args.url}")
    for report in reports:
        print(f"  {output_dir}/{report.file_name} ({report.size_in_bytes} bytes)")
    return 0


def cmd_extract(args: argparse.Namespace) -> int:
    """Extract a local file and print the result."""
    try:
        raw = _read_file(args.file)
    except OSError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    data = extract_document(raw, args.source_url or args.file)
    print(json.dumps(data.to_dict(), indent=2, ensure_ascii=False))
    return 0


def cmd_sniff(args: argparse.Namespace) -> int:
    """Print the detected format of a local file."""
    try:
        raw = _read_file(args.file)
    except OSError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    print(sniff(raw).value)
    return 0


def main(argv: Optional[list] = None) -> int:
    """Main CLI entrypoint."""
    parser = argparse.ArgumentParser(
        prog="report-service",
        description="Generate PDF/DOCX reports from web data sources"
    )
    parser.add_argument(
        "--config",
        default=None,
        help="Path to config file (default: config/report.yaml)"
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Verbose output"
    )

    subparsers = parser.add_subparsers(dest="command", help="Commands")

    # generate command
    generate_parser = subparsers.add_parser("generate", help="Generate reports from a URL")
    generate_parser.add_argument("url", help="Source URL")
    generate_parser.add_argument("--title", help="Report title (default: extracted title)")
    generate_parser.add_argument("--format", choices=[f.value for f in ReportFormat], default="PDF")
    generate_parser.add_argument("--output-dir", help="Directory for report files")
    generate_parser.set_defaults(func=cmd_generate)

    # extract command
    extract_parser = subparsers.add_parser("extract", help="Print extracted data for a local file")
    extract_parser.add_argument("file", help="Input file")
    extract_parser.add_argument("--source-url", help="Source URL recorded in the output")
    extract_parser.set_defaults(func=cmd_extract)

    # sniff command
    sniff_parser = subparsers.add_parser("sniff", help="Print the detected format of a local file")
    sniff_parser.add_argument("file", help="Input file")
    sniff_parser.set_defaults(func=cmd_sniff)

    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return 0

    configure_logging(logging.DEBUG if args.verbose else logging.INFO)
    return args.func(args)


if __name__ == "__main__":
    sys.exit(main())
