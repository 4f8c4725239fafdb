"""
Chart generation: advisor-selected chart types rasterized to PNG with matplotlib.

Figures are built with ``matplotlib.figure.Figure`` rather than pyplot so that
independent requests never share global figure state.
"""

import asyncio
import io
import logging
from typing import Dict, List, Sequence

import matplotlib
matplotlib.use('Agg')  # Non-interactive backend
from matplotlib.figure import Figure

from src.pipeline.models import Chart, ChartType, DataPoint, ExtractedData
from . import chart_advisor

logger = logging.getLogger(__name__)

CHART_SIZE_INCHES = (8, 6)
CHART_COLORS = ['#1f77b4', '#ff7f0e', '#2ca02c', '#d62728', '#9467bd',
                '#8c564b', '#e377c2', '#7f7f7f', '#bcbd22', '#17becf']

# Minimum point count for a secondary view
ALTERNATE_VIEW_MIN_POINTS = 6


def fig_to_png(fig: Figure, dpi: int = 100) -> bytes:
    """Serialize a matplotlib figure to PNG bytes."""
    buf = io.BytesIO()
    fig.savefig(buf, format='png', dpi=dpi, bbox_inches='tight')
    return buf.getvalue()


def _labels_and_values(points: Sequence[DataPoint]):
    labels = [p.label or f"Item {i + 1}" for i, p in enumerate(points)]
    values = [p.value if p.value is not None else 0.0 for p in points]
    return labels, values


def _draw_bar(ax, points: Sequence[DataPoint]):
    labels, values = _labels_and_values(points)
    x = range(len(labels))
    ax.bar(x, values, color=[CHART_COLORS[i % len(CHART_COLORS)] for i in x],
           alpha=0.85, edgecolor='black', linewidth=0.5)
    ax.set_xticks(list(x))
    ax.set_xticklabels(labels, rotation=45, ha='right', fontsize=8)


def _draw_pie(ax, points: Sequence[DataPoint]):
    # Pie wedges need positive sizes
    pairs = [(label, value) for label, value in zip(*_labels_and_values(points)) if value > 0]
    if not pairs:
        _draw_bar(ax, points)
        return
    labels, values = zip(*pairs)
    ax.pie(values, labels=labels, colors=CHART_COLORS, autopct='%1.1f%%', startangle=90,
           textprops={'fontsize': 8})
    ax.axis('equal')


def _draw_line(ax, points: Sequence[DataPoint]):
    dated = sorted((p for p in points if p.date is not None and p.value is not None),
                   key=lambda p: p.date)
    if dated:
        ax.plot([p.date for p in dated], [p.value for p in dated], marker='o', color=CHART_COLORS[0])
        ax.figure.autofmt_xdate()
    else:
        _, values = _labels_and_values(points)
        ax.plot(range(1, len(values) + 1), values, marker='o', color=CHART_COLORS[0])


def _draw_scatter(ax, points: Sequence[DataPoint]):
    _, values = _labels_and_values(points)
    ax.scatter(range(1, len(values) + 1), values, color=CHART_COLORS[1], alpha=0.8)


def _draw_histogram(ax, points: Sequence[DataPoint]):
    _, values = _labels_and_values(points)
    bins = max(1, min(20, len(values) // 2))
    ax.hist(values, bins=bins, color=CHART_COLORS[2], edgecolor='black', alpha=0.85)


_DRAWERS = {
    ChartType.BAR: _draw_bar,
    ChartType.PIE: _draw_pie,
    ChartType.LINE: _draw_line,
    ChartType.SCATTER: _draw_scatter,
    ChartType.HISTOGRAM: _draw_histogram,
}


def rasterize(chart_type: ChartType, points: Sequence[DataPoint], title: str,
              x_label: str, y_label: str, dpi: int = 100) -> bytes:
    fig = Figure(figsize=CHART_SIZE_INCHES)
    ax = fig.add_subplot(111)
    _DRAWERS[chart_type](ax, points)
    ax.set_title(title, fontsize=13, fontweight='bold')
    if chart_type is not ChartType.PIE:
        ax.set_xlabel(x_label)
        ax.set_ylabel("Frequency" if chart_type is ChartType.HISTOGRAM else y_label)
        ax.spines['top'].set_visible(False)
        ax.spines['right'].set_visible(False)
        ax.grid(axis='y', alpha=0.3)
    fig.tight_layout()
    return fig_to_png(fig, dpi=dpi)


def category_totals(points: Sequence[DataPoint]) -> List[DataPoint]:
    """Sum values per category, in first-seen category order."""
    totals: Dict[str, float] = {}
    for p in points:
        if p.category and p.value is not None:
            totals[p.category] = totals.get(p.category, 0.0) + p.value
    return [DataPoint(label=name, value=total, category="Summary") for name, total in totals.items()]


class ChartGenerator:
    """Builds the chart set for an extracted document."""

    def __init__(self, dpi: int = 100):
        self.dpi = dpi

    def generate_chart(self, chart_type: ChartType, points: Sequence[DataPoint], title: str) -> Chart:
        x_label = chart_advisor.x_axis_label(points)
        y_label = chart_advisor.y_axis_label(points)
        return Chart(
            title=title,
            chart_type=chart_type,
            data_points=points,
            x_axis_label=x_label,
            y_axis_label=y_label,
            description=chart_advisor.describe(chart_type, points),
            image_bytes=rasterize(chart_type, points, title, x_label, y_label, dpi=self.dpi),
        )

    def generate_charts_sync(self, data: ExtractedData) -> List[Chart]:
        """
        Primary chart, an alternate view for larger data sets, and a
        category summary when categories are present.
        """
        points = data.data_points
        if not points:
            logger.info(f"No data points available for chart generation: {data.source_url}")
            return []

        primary_type = chart_advisor.suggest(points)
        title = data.title or "Data Analysis"
        charts = [self.generate_chart(primary_type, points, title)]

        if len(points) >= ALTERNATE_VIEW_MIN_POINTS:
            charts.append(self.generate_chart(
                chart_advisor.alternate(primary_type), points, f"Alternative View - {title}"))

        if chart_advisor.has_categories(points):
            totals = category_totals(points)
            if totals:
                charts.append(self.generate_chart(ChartType.PIE, totals, "Category Summary"))

        logger.info(f"Generated {len(charts)} charts for {data.source_url}")
        return charts

    async def generate_charts(self, data: ExtractedData) -> List[Chart]:
        return await asyncio.to_thread(self.generate_charts_sync, data)


class NullChartGenerator(ChartGenerator):
    """Passthrough used when chart rendering is disabled."""

    def generate_charts_sync(self, data: ExtractedData) -> List[Chart]:
        return []
