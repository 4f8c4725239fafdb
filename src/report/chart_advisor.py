"""Heuristic chart-type selection from data-point shape."""

from typing import Sequence

from src.pipeline.models import ChartType, DataPoint

# Point counts at which the advice changes
PIE_MAX_POINTS = 5
HISTOGRAM_MIN_POINTS = 21

ALTERNATE_CHART_TYPES = {
    ChartType.BAR: ChartType.PIE,
    ChartType.PIE: ChartType.BAR,
    ChartType.LINE: ChartType.SCATTER,
    ChartType.SCATTER: ChartType.LINE,
    ChartType.HISTOGRAM: ChartType.BAR,
}


def has_categories(points: Sequence[DataPoint]) -> bool:
    return any(p.category and p.category.strip() for p in points)


def has_dates(points: Sequence[DataPoint]) -> bool:
    return any(p.date is not None for p in points)


def suggest(points: Sequence[DataPoint]) -> ChartType:
    """
    Recommend a chart type. Rules are checked in order, first match wins:

    - at most 5 points with any category -> PIE
    - any dated point -> LINE
    - more than 20 points -> HISTOGRAM
    - anything else -> BAR
    """
    if len(points) <= PIE_MAX_POINTS and has_categories(points):
        return ChartType.PIE
    if has_dates(points):
        return ChartType.LINE
    if len(points) >= HISTOGRAM_MIN_POINTS:
        return ChartType.HISTOGRAM
    return ChartType.BAR


def alternate(chart_type: ChartType) -> ChartType:
    """Chart type for a second view of the same data."""
    return ALTERNATE_CHART_TYPES[chart_type]


def x_axis_label(points: Sequence[DataPoint]) -> str:
    if has_dates(points):
        return "Time"
    if has_categories(points):
        return "Category"
    return "Items"


def y_axis_label(points: Sequence[DataPoint]) -> str:
    units = {p.unit for p in points}
    if len(units) == 1:
        unit = next(iter(units))
        if unit:
            return f"Value ({unit})"
    return "Value"


def describe(chart_type: ChartType, points: Sequence[DataPoint]) -> str:
    values = [p.value for p in points if p.value is not None]
    if not values:
        return f"{chart_type.value.title()} chart displaying {len(points)} data points"
    return (
        f"{chart_type.value.title()} chart displaying {len(points)} data points "
        f"with values ranging from {min(values):.2f} to {max(values):.2f}"
    )
