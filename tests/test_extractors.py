"""Tests for the per-format extractors and the extraction entry point."""
import pytest

import sys
import os
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from src.exceptions import ExtractionError
from src.extract import dispatch
from src.extract.csv_extractor import extract_csv
from src.extract.dispatch import extract_document, fallback_extracted_data, try_extract
from src.extract.html_extractor import extract_html, parse_cell_number
from src.extract.json_extractor import extract_json
from src.extract.sniffer import Format
from src.extract.text_extractor import MAX_TEXT_NUMBERS, extract_text
from src.pipeline.models import DataType, SectionKind

URL = "https://example.com/data"


class TestJsonExtractor:

    def test_numeric_leaves_become_points_with_paths(self):
        """Test numeric leaves are labelled with their JSON path."""
        raw = '{"title": "Sales", "items": [{"price": 3.5}, {"price": 4}], "total": 7.5}'
        data = extract_json(raw, URL)

        assert data.title == "Sales"
        labels = [p.label for p in data.data_points]
        assert labels == ["items[0].price", "items[1].price", "total"]
        assert [p.value for p in data.data_points] == [3.5, 4.0, 7.5]
        assert all(p.category == "JSON" for p in data.data_points)

    def test_booleans_are_not_numbers(self):
        """Test booleans are not treated as numeric leaves."""
        data = extract_json('{"flag": true, "n": 1}', URL)
        assert [p.label for p in data.data_points] == ["n"]

    def test_long_strings_become_sections(self):
        """Test strings over ten characters become sections."""
        raw = '{"name": "short", "body": "This is a longer piece of text"}'
        data = extract_json(raw, URL)

        assert len(data.text_sections) == 1
        section = data.text_sections[0]
        assert section.title == "body"
        assert section.kind == SectionKind.PARAGRAPH
        assert data.title == "short"

    def test_summary_counts(self):
        """Test summary counts objects, arrays and values."""
        data = extract_json('{"a": [1, 2], "b": {"c": "x"}}', URL)
        assert data.summary == "JSON data containing 2 objects, 1 arrays, and 3 values"
        assert data.metadata["source_format"] == "json"

    def test_default_title_and_root_scalar(self):
        """Test a scalar root gets the default title and label."""
        data = extract_json("12", URL)
        assert data.title == "JSON Data Analysis"
        assert data.data_points[0].label == "value"

    def test_invalid_json_raises_extraction_error(self):
        """Test malformed JSON raises ExtractionError."""
        with pytest.raises(ExtractionError):
            extract_json("{not json", URL)

    def test_data_type_derivation(self):
        """Test data type follows which of points and sections exist."""
        assert extract_json('{"n": 1}', URL).data_type == DataType.NUMERICAL
        assert extract_json('{"t": "a long text value"}', URL).data_type == DataType.TEXT_ONLY
        assert extract_json('{"n": 1, "t": "a long text value"}', URL).data_type == DataType.MIXED


class TestHtmlExtractor:

    PAGE = """
    <html>
      <head><title>Quarterly Results</title></head>
      <body>
        <h1>Overview</h1>
        <p>Revenue grew strongly.</p>
        <h2>   </h2>
        <h3>Details</h3>
        <table>
          <tr><th>Region</th><th>Sales</th></tr>
          <tr><td>North</td><td>$1,200</td></tr>
          <tr><td>South</td><td>n/a</td></tr>
          <tr><td>single</td></tr>
        </table>
        <a href="/x">link</a>
      </body>
    </html>
    """

    def test_title_from_title_tag(self):
        """Test the title tag is preferred."""
        assert extract_html(self.PAGE, URL).title == "Quarterly Results"

    def test_title_falls_back_to_h1_then_default(self):
        """Test title fallback to h1, then the default."""
        assert extract_html("<body><h1>Main</h1></body>", URL).title == "Main"
        assert extract_html("<body><p>x</p></body>", URL).title == "Extracted Report"

    def test_header_sections_match_non_empty_headings(self):
        """Test one header section per non-blank heading."""
        data = extract_html(self.PAGE, URL)
        headers = [s for s in data.text_sections if s.kind == SectionKind.HEADER]
        assert [h.content for h in headers] == ["Overview", "Details"]
        assert all(h.title == h.content for h in headers)

    def test_sections_in_document_order_with_shared_counter(self):
        """Test headings and paragraphs share one order counter."""
        data = extract_html(self.PAGE, URL)
        assert [s.content for s in data.text_sections] == ["Overview", "Revenue grew strongly.", "Details"]
        assert [s.order for s in data.text_sections] == [0, 1, 2]

    def test_table_rows_with_numeric_second_cell(self):
        """Test only rows with a numeric second cell become points."""
        data = extract_html(self.PAGE, URL)
        table_points = [p for p in data.data_points if p.category == "Table"]
        assert len(table_points) == 1
        assert table_points[0].label == "North"
        assert table_points[0].value == 1200.0

    def test_table_numbers_also_counted_by_text_scan(self):
        """Test table numbers are counted again by the text scan."""
        data = extract_html(self.PAGE, URL)
        text_points = [p for p in data.data_points if p.category == "Text"]
        assert [p.value for p in text_points] == [1.0, 200.0]

    def test_summary(self):
        """Test summary counts paragraphs, tables and links."""
        data = extract_html(self.PAGE, URL)
        assert data.summary == "HTML document with 1 paragraphs, 1 tables, and 1 links"

    def test_parse_cell_number(self):
        """Test cell numbers are parsed after stripping non-numeric characters."""
        assert parse_cell_number("12.5%") == 12.5
        assert parse_cell_number("-3") == -3.0
        assert parse_cell_number("abc") is None
        assert parse_cell_number("1.2.3") is None


class TestCsvExtractor:

    def test_n_rows_in_order(self):
        """Test N well-formed rows give N points in order."""
        raw = "name,value,category\nApple,10,Fruit\nCarrot,5,Veg\nPlum,2.5\n"
        data = extract_csv(raw, URL)

        assert [p.label for p in data.data_points] == ["Apple", "Carrot", "Plum"]
        assert [p.value for p in data.data_points] == [10.0, 5.0, 2.5]
        assert [p.category for p in data.data_points] == ["Fruit", "Veg", "Default"]
        assert data.summary == "CSV data with 3 records"
        assert data.data_type == DataType.TABLE_DATA

    def test_malformed_rows_skipped(self):
        """Test short and non-numeric rows are skipped."""
        raw = "a,b\nx,1\nonlylabel\ny,abc\nz,nan\nw,2\n"
        data = extract_csv(raw, URL)
        assert [p.label for p in data.data_points] == ["x", "w"]
        assert data.metadata["row_count"] == 5
        assert data.metadata["column_count"] == 2

    def test_digit_separators_rejected(self):
        """Test values written with underscores are skipped as unparsable."""
        data = extract_csv("a,b\nx,1_000\ny,7\n", URL)
        assert [p.label for p in data.data_points] == ["y"]

    def test_header_only_delegates_to_text(self):
        """Test a header-only CSV is handled as plain text."""
        data = extract_csv("a,b,c\n", URL)
        assert data.title == "Text Analysis"
        assert data.data_type == DataType.TEXT_ONLY


class TestTextExtractor:

    def test_paragraphs_and_numbers(self):
        """Test paragraphs split on blank lines and numbers are scanned."""
        raw = "First paragraph with 3 apples.\n\n  \nSecond one costs 4.50 dollars.\n"
        data = extract_text(raw, URL)

        assert [s.content for s in data.text_sections] == [
            "First paragraph with 3 apples.", "Second one costs 4.50 dollars."]
        assert [p.value for p in data.data_points] == [3.0, 4.5]
        assert [p.label for p in data.data_points] == ["Number 1", "Number 2"]
        assert data.data_type == DataType.TEXT_ONLY
        assert data.metadata["character_count"] == len(raw)

    def test_number_cap(self):
        """Test at most MAX_TEXT_NUMBERS numbers are kept."""
        raw = " ".join(str(i) for i in range(MAX_TEXT_NUMBERS + 25))
        assert len(extract_text(raw, URL).data_points) == MAX_TEXT_NUMBERS


class TestExtractDocument:

    def test_dispatches_on_sniffed_format(self):
        """Test extraction dispatches on the sniffed format."""
        outcome = try_extract("a,b\nx,1\n", URL)
        assert outcome.ok
        assert outcome.format == Format.CSV
        assert outcome.data.title == "CSV Data Analysis"

    def test_failure_becomes_fallback(self, monkeypatch):
        """Test an extractor failure yields the fallback data."""
        def boom(raw, source_url):
            raise ExtractionError("text", "broken")

        monkeypatch.setitem(dispatch.EXTRACTORS, Format.PLAIN_TEXT, boom)
        outcome = try_extract("plain words", URL)
        assert not outcome.ok
        assert isinstance(outcome.error, ExtractionError)

        data = extract_document("plain words", URL)
        assert data.title == "Data Analysis"
        assert data.summary == "Basic data extraction performed"
        assert data.metadata["source_format"] == "fallback"
        assert data.text_sections[0].content == "plain words"

    def test_unexpected_parser_error_is_wrapped(self, monkeypatch):
        """Test parser errors are wrapped in ExtractionError."""
        def boom(raw, source_url):
            raise ValueError("bad")

        monkeypatch.setitem(dispatch.EXTRACTORS, Format.PLAIN_TEXT, boom)
        outcome = try_extract("plain words", URL)
        assert outcome.error.source_format == "text"

    def test_fallback_truncates_long_input(self):
        """Test the fallback excerpt is cut at 1000 characters."""
        data = fallback_extracted_data("x" * 1500, URL)
        assert data.text_sections[0].content == "x" * 1000 + "..."
        assert data.metadata["original_length"] == 1500

    @pytest.mark.parametrize("raw", [
        '{"title": "t", "v": [1, 2, 3], "note": "some longer note"}',
        "<html><title>T</title><body><h1>H</h1><p>12 and 13</p></body></html>",
        "a,b,c\nApple,10,Fruit\nCarrot,5,Veg\n",
        "Some text with 1 number.\n\nAnother paragraph 2.",
    ])
    def test_extraction_is_deterministic(self, raw):
        """Extracting the same input twice yields identical results."""
        assert extract_document(raw, URL) == extract_document(raw, URL)
        assert extract_document(raw, URL).to_dict() == extract_document(raw, URL).to_dict()
