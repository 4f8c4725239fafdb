"""Tests for chart-type selection."""
from datetime import date

import sys
import os
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from src.pipeline.models import ChartType, DataPoint
from src.report import chart_advisor


def _points(n, category=None, dated=False, unit=None):
    return [
        DataPoint(label=f"p{i}", value=float(i), category=category,
                  date=date(2024, 1, i + 1) if dated else None, unit=unit)
        for i in range(n)
    ]


class TestSuggest:

    def test_few_categorized_points_is_pie(self):
        """Test up to five categorized points suggest a pie."""
        assert chart_advisor.suggest(_points(3, category="Fruit")) == ChartType.PIE

    def test_blank_category_does_not_count(self):
        """Test whitespace-only categories are ignored."""
        assert chart_advisor.suggest(_points(3, category="   ")) == ChartType.BAR

    def test_dates_give_line_regardless_of_count(self):
        """Test any dated point suggests a line chart."""
        assert chart_advisor.suggest(_points(10, dated=True)) == ChartType.LINE
        assert chart_advisor.suggest(_points(25, dated=True)) == ChartType.LINE

    def test_pie_rule_checked_before_dates(self):
        """Test the pie rule takes precedence over dates."""
        assert chart_advisor.suggest(_points(4, category="A", dated=True)) == ChartType.PIE

    def test_many_plain_points_is_histogram(self):
        """Test more than twenty plain points suggest a histogram."""
        assert chart_advisor.suggest(_points(25)) == ChartType.HISTOGRAM
        assert chart_advisor.suggest(_points(21)) == ChartType.HISTOGRAM

    def test_default_is_bar(self):
        """Test everything else falls through to a bar chart."""
        assert chart_advisor.suggest(_points(20)) == ChartType.BAR
        assert chart_advisor.suggest(_points(6, category="A")) == ChartType.BAR
        assert chart_advisor.suggest([]) == ChartType.BAR

    def test_suggest_is_deterministic(self):
        """Test repeated advice on the same points agrees."""
        points = _points(12, category="A")
        assert chart_advisor.suggest(points) == chart_advisor.suggest(points)


class TestLabels:

    def test_x_axis(self):
        """Test x-axis label follows dates, then categories."""
        assert chart_advisor.x_axis_label(_points(2, dated=True)) == "Time"
        assert chart_advisor.x_axis_label(_points(2, category="A")) == "Category"
        assert chart_advisor.x_axis_label(_points(2)) == "Items"

    def test_y_axis_with_shared_unit(self):
        """Test a shared unit appears in the y-axis label."""
        assert chart_advisor.y_axis_label(_points(3, unit="USD")) == "Value (USD)"

    def test_y_axis_with_mixed_units(self):
        """Test mixed units fall back to a plain label."""
        points = _points(2, unit="USD") + _points(1, unit="EUR")
        assert chart_advisor.y_axis_label(points) == "Value"

    def test_describe(self):
        """Test the description states count and value range."""
        text = chart_advisor.describe(ChartType.BAR, _points(3))
        assert text == "Bar chart displaying 3 data points with values ranging from 0.00 to 2.00"

    def test_alternate(self):
        """Test alternate chart type mapping."""
        assert chart_advisor.alternate(ChartType.BAR) == ChartType.PIE
        assert chart_advisor.alternate(ChartType.LINE) == ChartType.SCATTER
