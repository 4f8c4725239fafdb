"""HTTP fetcher for report source URLs."""

import logging
from typing import Any, Dict, Optional

import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from src.exceptions import FetchError
from .base_fetcher import BaseFetcher

logger = logging.getLogger(__name__)

# Request timeout (connect, read) in seconds
REQUEST_TIMEOUT = (10, 30)

# Session-level retry for network transients
_retry = Retry(total=1, allowed_methods=["GET"], backoff_factor=1, status_forcelist=[502, 503, 504])
_session = requests.Session()
_session.mount("https://", HTTPAdapter(max_retries=_retry))
_session.mount("http://", HTTPAdapter(max_retries=_retry))

DEFAULT_HEADERS = {
    'User-Agent': 'Mozilla/5.0 (ReportGenerator/1.0)',
    'Accept': 'application/json,text/html,text/csv,text/plain;q=0.9,*/*;q=0.8',
    'Accept-Language': 'en-US,en;q=0.9',
}


class WebFetcher(BaseFetcher):
    """Fetch raw document text over HTTP(S)."""

    def __init__(self, config: Optional[Dict[str, Any]] = None):
        super().__init__(config)
        self.timeout = (
            self.config.get('connect_timeout_seconds', REQUEST_TIMEOUT[0]),
            self.config.get('read_timeout_seconds', REQUEST_TIMEOUT[1]),
        )
        self.headers = dict(DEFAULT_HEADERS)
        if self.config.get('user_agent'):
            self.headers['User-Agent'] = self.config['user_agent']

    def _fetch_impl(self, url: str) -> str:
        """Fetch a single URL (internal implementation)."""
        try:
            response = _session.get(url, timeout=self.timeout, headers=self.headers)
            response.raise_for_status()
        except requests.RequestException as e:
            raise FetchError(url, f"Web fetch failed: {e}", e) from e

        return response.text
