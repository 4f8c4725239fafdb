"""Plain-text extraction: blank-line paragraphs plus free-form number tokens."""

import re
from typing import List

from src.pipeline.models import (
    DataPoint, DataType, ExtractedData, SectionKind, TextSection, finite_or_none,
)

# Upper bound on free-text number tokens turned into data points
MAX_TEXT_NUMBERS = 50

TEXT_CATEGORY = "Text"

NUMBER_PATTERN = re.compile(r"\b\d+(?:\.\d+)?\b")
PARAGRAPH_BREAK = re.compile(r"\n[ \t\r\f\v]*\n")


def scan_numbers(text: str, limit: int = MAX_TEXT_NUMBERS) -> List[DataPoint]:
    """Turn up to ``limit`` number tokens in ``text`` into generically labelled points."""
    points: List[DataPoint] = []
    for match in NUMBER_PATTERN.finditer(text):
        if len(points) >= limit:
            break
        value = finite_or_none(match.group())
        if value is None:
            continue
        points.append(DataPoint(
            label=f"Number {len(points) + 1}",
            value=value,
            category=TEXT_CATEGORY,
        ))
    return points


def split_paragraphs(text: str) -> List[TextSection]:
    sections: List[TextSection] = []
    for paragraph in PARAGRAPH_BREAK.split(text):
        paragraph = paragraph.strip()
        if paragraph:
            sections.append(TextSection(
                content=paragraph,
                order=len(sections),
                kind=SectionKind.PARAGRAPH,
            ))
    return sections


def extract_text(raw: str, source_url: str) -> ExtractedData:
    return ExtractedData(
        source_url=source_url,
        title="Text Analysis",
        summary="Extracted data from plain text",
        data_points=scan_numbers(raw),
        text_sections=split_paragraphs(raw),
        metadata={"source_format": "text", "character_count": len(raw)},
        forced_data_type=DataType.TEXT_ONLY,
    )
