"""Report persistence: keyed in-memory store with optional file output."""

from .report_store import DirectoryReportStore, InMemoryReportStore

__all__ = ["InMemoryReportStore", "DirectoryReportStore"]
