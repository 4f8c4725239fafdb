"""
Analysis collaborators: raw text → ExtractedData.

HeuristicAnalyzer runs format sniffing and extraction. OpenAIAnalyzer runs the
same extraction and then asks a chat model for a short summary, returning a
copy of the extracted data with the new summary.
"""

import asyncio
import logging
from abc import ABC, abstractmethod
from dataclasses import replace
from typing import Any, Dict, Optional

from src.extract import extract_document
from src.pipeline.models import ExtractedData

logger = logging.getLogger(__name__)

SUMMARY_SYSTEM_PROMPT = (
    "You are a professional report writer. Create a concise, professional summary "
    "of the provided content in 2-3 sentences."
)


def truncate_content(content: str, max_length: int) -> str:
    if len(content) <= max_length:
        return content
    return content[:max_length] + "..."


class Analyzer(ABC):
    """Interface the orchestrator uses for the analysis step."""

    @abstractmethod
    def analyze_sync(self, raw: str, source_url: str) -> ExtractedData:
        pass

    async def analyze_and_structure(self, raw: str, source_url: str) -> ExtractedData:
        return await asyncio.to_thread(self.analyze_sync, raw, source_url)


class HeuristicAnalyzer(Analyzer):
    """Rule-based analysis using the format extractors only."""

    def analyze_sync(self, raw: str, source_url: str) -> ExtractedData:
        return extract_document(raw, source_url)


class OpenAIAnalyzer(Analyzer):
    """
    Heuristic extraction enriched with an LLM-written summary.

    Provider failures are logged and the heuristic result is returned as-is.
    """

    def __init__(self, model: str = "gpt-4o-mini", max_input_chars: int = 3000, client: Any = None):
        self.model = model
        self.max_input_chars = max_input_chars
        self._client = client

    def _get_client(self):
        """Lazy-load OpenAI client."""
        if self._client is None:
            from openai import OpenAI
            from src.config.secrets import get_openai_key
            self._client = OpenAI(api_key=get_openai_key())
        return self._client

    def summarize(self, content: str) -> str:
        response = self._get_client().chat.completions.create(
            model=self.model,
            messages=[
                {"role": "system", "content": SUMMARY_SYSTEM_PROMPT},
                {"role": "user", "content": "Please summarize this content: "
                                            + truncate_content(content, self.max_input_chars)},
            ],
            max_tokens=200,
            temperature=0.3,
        )
        return (response.choices[0].message.content or "").strip()

    def analyze_sync(self, raw: str, source_url: str) -> ExtractedData:
        data = extract_document(raw, source_url)
        try:
            summary = self.summarize(raw)
        except Exception as e:
            logger.warning(f"AI summary failed for {source_url}, keeping heuristic summary: {e}")
            return data

        if not summary:
            return data
        return replace(data, summary=summary, metadata={**data.metadata, "ai_model": self.model})


def build_analyzer(config: Optional[Dict[str, Any]] = None) -> Analyzer:
    """Build the analyzer named by the ``analysis.provider`` config value."""
    config = config or {}
    provider = config.get("provider", "heuristic")
    if provider == "openai":
        return OpenAIAnalyzer(
            model=config.get("model", "gpt-4o-mini"),
            max_input_chars=config.get("max_input_chars", 3000),
        )
    if provider != "heuristic":
        raise ValueError(f"Unknown analysis provider: {provider}")
    return HeuristicAnalyzer()
