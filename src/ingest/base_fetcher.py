"""Abstract base class for raw-content fetchers."""

import asyncio
import logging
from abc import ABC, abstractmethod
from typing import Any, Dict, Optional

from src.exceptions import FetchError

logger = logging.getLogger(__name__)

# Maximum length for fetched raw text (characters). Longer bodies are truncated.
MAX_RAW_TEXT_LENGTH = 5_000_000


class BaseFetcher(ABC):
    """
    Abstract base for fetchers.

    Subclasses implement the blocking ``_fetch_impl``; callers await
    ``fetch_raw_data``, which runs it on a worker thread. There is no retry
    here: a failure ends the request's pipeline.
    """

    def __init__(self, config: Optional[Dict[str, Any]] = None):
        self.config = config or {}

    @abstractmethod
    def _fetch_impl(self, url: str) -> str:
        """
        Internal fetch implementation - to be overridden by subclasses.

        Args:
            url: Source URL

        Returns:
            Decoded body text

        Raises:
            FetchError on fetch failure
        """
        pass

    def fetch_sync(self, url: str) -> str:
        """Blocking fetch with error normalisation and truncation."""
        logger.info(f"Fetching data from URL: {url}")
        try:
            body = self._fetch_impl(url)
        except FetchError:
            raise
        except Exception as e:
            raise FetchError(url, f"Unexpected fetch failure: {e}", e) from e

        if len(body) > MAX_RAW_TEXT_LENGTH:
            logger.warning(f"Truncating {len(body)} characters from {url} to {MAX_RAW_TEXT_LENGTH}")
            body = body[:MAX_RAW_TEXT_LENGTH]

        logger.info(f"Successfully fetched {len(body)} characters from {url}")
        return body

    async def fetch_raw_data(self, url: str) -> str:
        return await asyncio.to_thread(self.fetch_sync, url)
