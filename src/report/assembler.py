"""Assemble extracted data and rendered charts into one ReportContent."""

import uuid
from dataclasses import replace
from datetime import datetime, timezone
from typing import List, Optional, Sequence

from src.pipeline.models import (
    Chart, DataType, DataPoint, ExtractedData, ReportContent, ReportRequest, Table,
)
from . import chart_advisor

PRIMARY_CHART_TITLE = "Data Analysis"
TABLE_HEADERS = ("Label", "Value", "Category")


def _cell(value) -> str:
    return "" if value is None else str(value)


def build_table(points: Sequence[DataPoint]) -> Table:
    """One row per data point; missing fields become empty strings."""
    rows = tuple((_cell(p.label), _cell(p.value), _cell(p.category)) for p in points)
    return Table(
        title="Data Summary",
        headers=TABLE_HEADERS,
        rows=rows,
        description="Extracted data in tabular format",
    )


def build_primary_chart(points: Sequence[DataPoint]) -> Chart:
    chart_type = chart_advisor.suggest(points)
    return Chart(
        title=PRIMARY_CHART_TITLE,
        chart_type=chart_type,
        data_points=points,
        x_axis_label=chart_advisor.x_axis_label(points),
        y_axis_label=chart_advisor.y_axis_label(points),
        description=chart_advisor.describe(chart_type, points),
    )


def _merge_rendered(primary: Chart, rendered_charts: Sequence[Chart]) -> List[Chart]:
    """
    Attach the image of the first rendered chart matching the primary type;
    every other rendered chart follows as an additional view.
    """
    match: Optional[int] = next(
        (i for i, c in enumerate(rendered_charts) if c.chart_type is primary.chart_type), None)
    if match is None:
        return [primary] + list(rendered_charts)
    image = rendered_charts[match].image_bytes
    rest = [c for i, c in enumerate(rendered_charts) if i != match]
    return [replace(primary, image_bytes=image)] + rest


def assemble(data: ExtractedData, request: ReportRequest,
             rendered_charts: Sequence[Chart] = ()) -> ReportContent:
    """
    Build the report content for one request.

    Args:
        data: Extracted (optionally AI-enriched) document data
        request: The originating report request
        rendered_charts: Charts produced by the chart collaborator, if any

    Returns:
        ReportContent with a fresh id and the current time as generated_at
    """
    charts: List[Chart] = []
    if data.data_points:
        charts = _merge_rendered(build_primary_chart(data.data_points), rendered_charts)

    tables = []
    if data.data_type is DataType.TABLE_DATA:
        tables.append(build_table(data.data_points))

    return ReportContent(
        id=str(uuid.uuid4()),
        title=request.title or data.title,
        summary=data.summary,
        source_url=data.source_url,
        generated_at=datetime.now(timezone.utc),
        sections=tuple(sorted(data.text_sections, key=lambda s: s.order)),
        charts=tuple(charts),
        tables=tuple(tables),
    )
