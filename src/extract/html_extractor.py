"""HTML extraction: table rows, paragraphs/headings, then a free-text number pass."""

import logging
import re
from typing import List, Optional

from bs4 import BeautifulSoup
from bs4.element import Tag

from src.pipeline.models import (
    DataPoint, ExtractedData, SectionKind, TextSection, finite_or_none,
)
from .text_extractor import scan_numbers

logger = logging.getLogger(__name__)

DEFAULT_TITLE = "Extracted Report"
TABLE_CATEGORY = "Table"
SECTION_SELECTOR = "p, h1, h2, h3, h4, h5, h6"
HEADING_TAGS = {"h1", "h2", "h3", "h4", "h5", "h6"}

_NON_NUMERIC = re.compile(r"[^0-9.\-]")


def _text(element: Tag) -> str:
    """Element text with whitespace runs collapsed."""
    return " ".join(element.get_text().split())


def parse_cell_number(text: str) -> Optional[float]:
    """Strip everything outside [0-9.-] and parse; None when unparsable."""
    cleaned = _NON_NUMERIC.sub("", text)
    try:
        value = float(cleaned)
    except ValueError:
        return None
    return finite_or_none(value)


def section_kind(tag_name: str) -> SectionKind:
    if tag_name.lower() in HEADING_TAGS:
        return SectionKind.HEADER
    return SectionKind.PARAGRAPH


def extract_page_title(soup: BeautifulSoup) -> str:
    if soup.title is not None:
        title = _text(soup.title)
        if title:
            return title
    h1 = soup.find("h1")
    if h1 is not None:
        heading = _text(h1)
        if heading:
            return heading
    return DEFAULT_TITLE


def extract_table_points(table: Tag) -> List[DataPoint]:
    """One point per row with two or more cells whose second cell is numeric."""
    points = []
    for row in table.find_all("tr"):
        cells = row.find_all(["td", "th"])
        if len(cells) < 2:
            continue
        value = parse_cell_number(_text(cells[1]))
        if value is None:
            continue
        points.append(DataPoint(
            label=_text(cells[0]),
            value=value,
            category=TABLE_CATEGORY,
        ))
    return points


def extract_sections(soup: BeautifulSoup) -> List[TextSection]:
    """Paragraphs and headings in document order, one shared order counter."""
    sections = []
    order = 0
    for element in soup.select(SECTION_SELECTOR):
        content = _text(element)
        if not content:
            continue
        kind = section_kind(element.name)
        sections.append(TextSection(
            title=content if kind is SectionKind.HEADER else None,
            content=content,
            order=order,
            kind=kind,
        ))
        order += 1
    return sections


def extract_html(raw: str, source_url: str) -> ExtractedData:
    """
    Extract structured data from an HTML page.

    Table-derived points come first, followed by points from a second scan
    over the full page text. Numbers that appear in a table are therefore
    counted twice; the two groups are told apart by category.
    """
    soup = BeautifulSoup(raw, "lxml")

    data_points: List[DataPoint] = []
    for table in soup.find_all("table"):
        data_points.extend(extract_table_points(table))

    text_sections = extract_sections(soup)

    page_text = " ".join(soup.get_text(" ").split())
    data_points.extend(scan_numbers(page_text))

    summary = (
        f"HTML document with {len(soup.find_all('p'))} paragraphs, "
        f"{len(soup.find_all('table'))} tables, and "
        f"{len(soup.find_all('a'))} links"
    )

    return ExtractedData(
        source_url=source_url,
        title=extract_page_title(soup),
        summary=summary,
        data_points=data_points,
        text_sections=text_sections,
        metadata={"source_format": "html", "word_count": len(page_text.split())},
    )
