"""
Pipeline data models for source document → extracted data → rendered report.

Extraction results and report content are frozen dataclasses; enrichment steps
produce copies with ``dataclasses.replace`` instead of mutating.
"""

from __future__ import annotations

import math
import uuid
from dataclasses import dataclass, field
from datetime import date, datetime, timezone
from enum import Enum
from typing import Optional, Tuple, Dict, Any


class SectionKind(Enum):
    HEADER = "HEADER"
    PARAGRAPH = "PARAGRAPH"
    BULLET = "BULLET"
    QUOTE = "QUOTE"
    CONCLUSION = "CONCLUSION"


class DataType(Enum):
    NUMERICAL = "NUMERICAL"
    CATEGORICAL = "CATEGORICAL"
    MIXED = "MIXED"
    TEXT_ONLY = "TEXT_ONLY"
    TABLE_DATA = "TABLE_DATA"


class ChartType(Enum):
    BAR = "BAR"
    PIE = "PIE"
    LINE = "LINE"
    SCATTER = "SCATTER"
    HISTOGRAM = "HISTOGRAM"


class ReportFormat(Enum):
    PDF = "PDF"
    DOCX = "DOCX"
    BOTH = "BOTH"

    def expand(self) -> Tuple["ReportFormat", ...]:
        """Concrete output formats requested by this value, PDF first."""
        if self is ReportFormat.BOTH:
            return (ReportFormat.PDF, ReportFormat.DOCX)
        return (self,)


def finite_or_none(value: Any) -> Optional[float]:
    """Coerce a value to a finite float, or None if that is not possible."""
    if value is None or isinstance(value, bool):
        return None
    # Digit separators ("1_000") are not accepted as numbers
    if isinstance(value, str) and "_" in value:
        return None
    try:
        number = float(value)
    except (TypeError, ValueError, OverflowError):
        return None
    return number if math.isfinite(number) else None


@dataclass(frozen=True)
class DataPoint:
    label: Optional[str] = None
    value: Optional[float] = None
    category: Optional[str] = None
    date: Optional[date] = None
    unit: Optional[str] = None
    description: Optional[str] = None

    def __post_init__(self):
        # NaN and ±Inf are never stored
        object.__setattr__(self, "value", finite_or_none(self.value))

    def to_dict(self) -> Dict[str, Any]:
        return {
            "label": self.label,
            "value": self.value,
            "category": self.category,
            "date": self.date.isoformat() if self.date else None,
            "unit": self.unit,
            "description": self.description,
        }


@dataclass(frozen=True)
class TextSection:
    content: str
    order: int
    kind: SectionKind = SectionKind.PARAGRAPH
    title: Optional[str] = None

    def __post_init__(self):
        if self.order < 0:
            raise ValueError(f"TextSection.order must be non-negative, got {self.order}")

    def to_dict(self) -> Dict[str, Any]:
        return {
            "title": self.title,
            "content": self.content,
            "order": self.order,
            "kind": self.kind.value,
        }


def derive_data_type(data_points, text_sections) -> DataType:
    """Classify content from which of points/sections are present."""
    if data_points and text_sections:
        return DataType.MIXED
    if data_points:
        return DataType.NUMERICAL
    return DataType.TEXT_ONLY


@dataclass(frozen=True)
class ExtractedData:
    """
    Structured result of one extractor branch.

    ``data_type`` is derived from ``data_points``/``text_sections``; only the
    CSV and plain-text branches pin it through ``forced_data_type``.
    """
    source_url: str
    title: str
    summary: str
    data_points: Tuple[DataPoint, ...] = ()
    text_sections: Tuple[TextSection, ...] = ()
    metadata: Dict[str, Any] = field(default_factory=dict)
    forced_data_type: Optional[DataType] = None

    def __post_init__(self):
        object.__setattr__(self, "data_points", tuple(self.data_points))
        object.__setattr__(self, "text_sections", tuple(self.text_sections))
        orders = [s.order for s in self.text_sections]
        if len(orders) != len(set(orders)):
            raise ValueError("TextSection.order values must be unique")

    @property
    def data_type(self) -> DataType:
        if self.forced_data_type is not None:
            return self.forced_data_type
        return derive_data_type(self.data_points, self.text_sections)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "source_url": self.source_url,
            "title": self.title,
            "summary": self.summary,
            "data_type": self.data_type.value,
            "data_points": [p.to_dict() for p in self.data_points],
            "text_sections": [s.to_dict() for s in self.text_sections],
            "metadata": dict(self.metadata),
        }


@dataclass(frozen=True)
class Chart:
    title: str
    chart_type: ChartType
    data_points: Tuple[DataPoint, ...] = ()
    x_axis_label: str = ""
    y_axis_label: str = ""
    description: str = ""
    image_bytes: Optional[bytes] = None

    def __post_init__(self):
        object.__setattr__(self, "data_points", tuple(self.data_points))


@dataclass(frozen=True)
class Table:
    title: str
    headers: Tuple[str, ...]
    rows: Tuple[Tuple[str, ...], ...]
    description: str = ""


@dataclass(frozen=True)
class ReportContent:
    id: str
    title: str
    summary: str
    source_url: str
    generated_at: datetime
    sections: Tuple[TextSection, ...] = ()
    charts: Tuple[Chart, ...] = ()
    tables: Tuple[Table, ...] = ()


@dataclass(frozen=True)
class ReportRequest:
    source_url: str
    id: str = field(default_factory=lambda: str(uuid.uuid4()))
    title: Optional[str] = None
    format: ReportFormat = ReportFormat.PDF
    custom_parameters: Dict[str, Any] = field(default_factory=dict)
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def __post_init__(self):
        if not self.source_url:
            raise ValueError("ReportRequest.source_url is required")


@dataclass(frozen=True)
class GeneratedReport:
    id: str
    file_name: str
    format: ReportFormat
    content: bytes
    mime_type: str
    generated_at: datetime
    request_id: str = ""
    source_url: str = ""
    download_url: Optional[str] = None

    @property
    def size_in_bytes(self) -> int:
        return len(self.content)

    def to_dict(self) -> Dict[str, Any]:
        """Metadata view (content bytes omitted)."""
        return {
            "id": self.id,
            "file_name": self.file_name,
            "format": self.format.value,
            "mime_type": self.mime_type,
            "size_in_bytes": self.size_in_bytes,
            "generated_at": self.generated_at.isoformat(),
            "request_id": self.request_id,
            "source_url": self.source_url,
            "download_url": self.download_url,
        }
