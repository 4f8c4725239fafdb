"""
Sniff-then-extract entry point.

``try_extract`` reports failures as an explicit outcome; ``extract_document``
collapses a failed outcome into a minimal fallback so callers always receive
an ExtractedData.
"""

import logging
from dataclasses import dataclass
from typing import Callable, Dict, Optional

from src.exceptions import ExtractionError
from src.pipeline.models import ExtractedData, SectionKind, TextSection
from .csv_extractor import extract_csv
from .html_extractor import extract_html
from .json_extractor import extract_json
from .sniffer import Format, sniff
from .text_extractor import extract_text

logger = logging.getLogger(__name__)

# Raw-text excerpt length kept in the fallback section
FALLBACK_EXCERPT_LENGTH = 1000

EXTRACTORS: Dict[Format, Callable[[str, str], ExtractedData]] = {
    Format.JSON: extract_json,
    Format.HTML: extract_html,
    Format.CSV: extract_csv,
    Format.PLAIN_TEXT: extract_text,
}


@dataclass(frozen=True)
class ExtractionOutcome:
    format: Format
    data: Optional[ExtractedData] = None
    error: Optional[ExtractionError] = None

    @property
    def ok(self) -> bool:
        return self.error is None


def try_extract(raw: str, source_url: str) -> ExtractionOutcome:
    """Sniff the format and run the matching extractor."""
    fmt = sniff(raw)
    extractor = EXTRACTORS[fmt]
    try:
        return ExtractionOutcome(format=fmt, data=extractor(raw, source_url))
    except ExtractionError as e:
        return ExtractionOutcome(format=fmt, error=e)
    except (ValueError, TypeError, RecursionError) as e:
        return ExtractionOutcome(
            format=fmt,
            error=ExtractionError(fmt.value, str(e), e),
        )


def fallback_extracted_data(raw: str, source_url: str) -> ExtractedData:
    excerpt = raw
    if len(raw) > FALLBACK_EXCERPT_LENGTH:
        excerpt = raw[:FALLBACK_EXCERPT_LENGTH] + "..."
    return ExtractedData(
        source_url=source_url,
        title="Data Analysis",
        summary="Basic data extraction performed",
        text_sections=[TextSection(content=excerpt, order=0, kind=SectionKind.PARAGRAPH)],
        metadata={"source_format": "fallback", "original_length": len(raw)},
    )


def extract_document(raw: str, source_url: str) -> ExtractedData:
    """
    Extract structured data from raw text of unknown format.

    Never raises for malformed input: extractor failures are logged and
    replaced by a fallback carrying a truncated excerpt of the raw text.
    """
    outcome = try_extract(raw, source_url)
    if outcome.ok:
        logger.info(f"Extracted {outcome.format.value} from {source_url}: "
                    f"{len(outcome.data.data_points)} data points, "
                    f"{len(outcome.data.text_sections)} text sections")
        return outcome.data

    logger.warning(f"Extraction failed for {source_url}, using fallback: {outcome.error}")
    return fallback_extracted_data(raw, source_url)
