"""
Format-adaptive extraction.

Modules:
    sniffer - Cheap structural format detection (JSON, HTML, CSV, plain text)
    json_extractor - Recursive JSON tree walker
    html_extractor - DOM walker for tables, paragraphs and headings
    csv_extractor - Comma-separated row parser
    text_extractor - Paragraph splitter and number scanner
    dispatch - Sniff-then-extract entry point with fallback
"""

from .dispatch import extract_document, try_extract, ExtractionOutcome
from .sniffer import Format, sniff

__all__ = ["extract_document", "try_extract", "ExtractionOutcome", "Format", "sniff"]
