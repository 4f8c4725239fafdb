"""CSV extraction: header line, then label/value/category rows."""

from typing import List

from src.pipeline.models import DataPoint, DataType, ExtractedData, finite_or_none
from .sniffer import split_lines
from .text_extractor import extract_text

DEFAULT_CATEGORY = "Default"


def parse_rows(lines: List[str]) -> List[DataPoint]:
    """
    Parse data lines (header excluded) into points.

    Lines with fewer than two fields, or whose second field is not a finite
    number, are skipped.
    """
    points = []
    for line in lines:
        fields = line.split(",")
        if len(fields) < 2:
            continue
        value = finite_or_none(fields[1].strip())
        if value is None:
            continue
        category = fields[2].strip() if len(fields) > 2 else ""
        points.append(DataPoint(
            label=fields[0].strip(),
            value=value,
            category=category or DEFAULT_CATEGORY,
        ))
    return points


def extract_csv(raw: str, source_url: str) -> ExtractedData:
    lines = split_lines(raw)
    if len(lines) < 2:
        return extract_text(raw, source_url)

    headers = lines[0].split(",")
    points = parse_rows(lines[1:])

    return ExtractedData(
        source_url=source_url,
        title="CSV Data Analysis",
        summary=f"CSV data with {len(points)} records",
        data_points=points,
        metadata={
            "source_format": "csv",
            "row_count": len(lines) - 1,
            "column_count": len(headers),
        },
        forced_data_type=DataType.TABLE_DATA,
    )
