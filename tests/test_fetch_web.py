"""Tests for the HTTP fetcher."""
import asyncio
from unittest.mock import patch, MagicMock

import pytest
import requests

import sys
import os
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from src.exceptions import FetchError
from src.ingest import base_fetcher
from src.ingest.fetch_web import WebFetcher, REQUEST_TIMEOUT


class TestWebFetcher:
    """Test suite for WebFetcher."""

    @patch('src.ingest.fetch_web._session.get')
    def test_fetch_success(self, mock_get):
        """Body text is returned as-is."""
        mock_response = MagicMock()
        mock_response.text = "a,b\n1,2\n"
        mock_response.raise_for_status = MagicMock()
        mock_get.return_value = mock_response

        body = asyncio.run(WebFetcher().fetch_raw_data("https://example.com/data.csv"))

        assert body == "a,b\n1,2\n"
        _, kwargs = mock_get.call_args
        assert kwargs["timeout"] == REQUEST_TIMEOUT

    @patch('src.ingest.fetch_web._session.get')
    def test_config_overrides(self, mock_get):
        """Test timeouts and user agent come from config."""
        mock_response = MagicMock()
        mock_response.text = "ok"
        mock_get.return_value = mock_response

        fetcher = WebFetcher({"connect_timeout_seconds": 2, "read_timeout_seconds": 5, "user_agent": "test-agent"})
        fetcher.fetch_sync("https://example.com")

        _, kwargs = mock_get.call_args
        assert kwargs["timeout"] == (2, 5)
        assert kwargs["headers"]["User-Agent"] == "test-agent"

    @patch('src.ingest.fetch_web._session.get')
    def test_http_error(self, mock_get):
        """Non-2xx statuses become FetchError."""
        mock_response = MagicMock()
        mock_response.raise_for_status.side_effect = requests.HTTPError("404 Client Error")
        mock_get.return_value = mock_response

        with pytest.raises(FetchError) as exc_info:
            WebFetcher().fetch_sync("https://example.com/missing")

        assert exc_info.value.url == "https://example.com/missing"
        assert isinstance(exc_info.value.original_error, requests.HTTPError)

    @patch('src.ingest.fetch_web._session.get')
    def test_connection_error(self, mock_get):
        """Test connection errors become FetchError."""
        mock_get.side_effect = requests.ConnectionError("refused")

        with pytest.raises(FetchError):
            asyncio.run(WebFetcher().fetch_raw_data("https://example.com"))

    @patch('src.ingest.fetch_web._session.get')
    def test_unexpected_error_wrapped(self, mock_get):
        """Test unexpected errors are wrapped in FetchError."""
        mock_get.side_effect = RuntimeError("weird")

        with pytest.raises(FetchError, match="Unexpected fetch failure"):
            WebFetcher().fetch_sync("https://example.com")

    @patch('src.ingest.fetch_web._session.get')
    def test_long_body_truncated(self, mock_get, monkeypatch):
        """Test oversized bodies are truncated."""
        monkeypatch.setattr(base_fetcher, "MAX_RAW_TEXT_LENGTH", 10)
        mock_response = MagicMock()
        mock_response.text = "x" * 50
        mock_get.return_value = mock_response

        assert WebFetcher().fetch_sync("https://example.com") == "x" * 10
