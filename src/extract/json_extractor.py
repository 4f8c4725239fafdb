"""JSON tree walker producing data points and text sections in one pass."""

import logging
from typing import Any, List

from src.exceptions import ExtractionError
from src.pipeline.models import DataPoint, ExtractedData, SectionKind, TextSection
from .sniffer import parse_json_strict

logger = logging.getLogger(__name__)

JSON_CATEGORY = "JSON"
MIN_TEXT_LENGTH = 10
TITLE_FIELDS = ("title", "name", "subject", "heading", "label")
DEFAULT_TITLE = "JSON Data Analysis"


class _JsonWalk:
    """Accumulates points, sections and node counts during a single traversal."""

    def __init__(self):
        self.data_points: List[DataPoint] = []
        self.text_sections: List[TextSection] = []
        self.object_count = 0
        self.array_count = 0
        self.value_count = 0

    def visit(self, node: Any, path: str):
        if isinstance(node, dict):
            self.object_count += 1
            for key, child in node.items():
                self.visit(child, f"{path}.{key}" if path else str(key))
        elif isinstance(node, list):
            self.array_count += 1
            for i, child in enumerate(node):
                self.visit(child, f"{path}[{i}]")
        else:
            self.value_count += 1
            self._visit_scalar(node, path)

    def _visit_scalar(self, node: Any, path: str):
        # bool is an int subclass but not a numeric leaf
        if isinstance(node, (int, float)) and not isinstance(node, bool):
            self.data_points.append(DataPoint(
                label=path or "value",
                value=node,
                category=JSON_CATEGORY,
            ))
        elif isinstance(node, str) and len(node) > MIN_TEXT_LENGTH:
            self.text_sections.append(TextSection(
                title=path,
                content=node,
                order=len(self.text_sections),
                kind=SectionKind.PARAGRAPH,
            ))


def extract_title(root: Any) -> str:
    """First string-valued root field from TITLE_FIELDS, else a generic title."""
    if isinstance(root, dict):
        for name in TITLE_FIELDS:
            if isinstance(root.get(name), str):
                return root[name]
    return DEFAULT_TITLE


def extract_json(raw: str, source_url: str) -> ExtractedData:
    """
    Extract data points and text sections from a JSON document.

    Numeric leaves are labelled with their path from the root
    (``items[2].price``); strings longer than 10 characters become sections.

    Raises:
        ExtractionError: if the document is not strict JSON or nests too deeply
    """
    try:
        root = parse_json_strict(raw)
        walk = _JsonWalk()
        walk.visit(root, "")
    except (ValueError, RecursionError) as e:
        raise ExtractionError("json", f"Cannot walk JSON document: {e}", e) from e

    summary = (
        f"JSON data containing {walk.object_count} objects, "
        f"{walk.array_count} arrays, and {walk.value_count} values"
    )
    logger.debug(f"JSON walk of {source_url}: {len(walk.data_points)} points, "
                 f"{len(walk.text_sections)} sections")

    return ExtractedData(
        source_url=source_url,
        title=extract_title(root),
        summary=summary,
        data_points=walk.data_points,
        text_sections=walk.text_sections,
        metadata={
            "source_format": "json",
            "object_count": walk.object_count,
            "array_count": walk.array_count,
            "value_count": walk.value_count,
        },
    )
