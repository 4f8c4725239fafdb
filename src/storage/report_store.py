"""
Report store.

Generated reports are kept in a dict keyed by report id and guarded by an
RLock, so one store instance can be shared by concurrent pipeline runs.
``DirectoryReportStore`` additionally writes each artifact to disk.
"""

import logging
import os
import tempfile
import threading
from dataclasses import replace
from typing import Dict, List, Optional

from src.pipeline.models import GeneratedReport

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "http://localhost:8080"


class InMemoryReportStore:
    """Thread-safe report store keyed by GeneratedReport.id."""

    def __init__(self, base_url: str = DEFAULT_BASE_URL):
        self.base_url = base_url.rstrip("/")
        self._reports: Dict[str, GeneratedReport] = {}
        self._lock = threading.RLock()

    def generate_download_url(self, report_id: str) -> str:
        return f"{self.base_url}/api/reports/{report_id}/download"

    def save(self, report: GeneratedReport) -> GeneratedReport:
        """
        Store a report and return the stored copy.

        The stored copy carries its download URL; the input is not modified.
        """
        stored = replace(report, download_url=self.generate_download_url(report.id))
        with self._lock:
            self._reports[stored.id] = stored
        logger.info(f"Saved report {stored.id} ({stored.file_name}, {stored.size_in_bytes} bytes)")
        return stored

    def find_by_id(self, report_id: str) -> Optional[GeneratedReport]:
        with self._lock:
            return self._reports.get(report_id)

    def find_by_source_url(self, source_url: str) -> List[GeneratedReport]:
        with self._lock:
            return [r for r in self._reports.values() if r.source_url == source_url]

    def find_all(self) -> List[GeneratedReport]:
        with self._lock:
            return list(self._reports.values())

    def delete(self, report_id: str) -> bool:
        """Remove a report. Returns False if the id was unknown."""
        with self._lock:
            removed = self._reports.pop(report_id, None)
        if removed is None:
            logger.debug(f"Delete requested for unknown report {report_id}")
            return False
        logger.info(f"Deleted report {report_id}")
        return True

    def count(self) -> int:
        with self._lock:
            return len(self._reports)

    def clear(self):
        with self._lock:
            self._reports.clear()


class DirectoryReportStore(InMemoryReportStore):
    """In-memory store that also writes artifacts to ``output_dir``."""

    def __init__(self, output_dir: str, base_url: str = DEFAULT_BASE_URL):
        super().__init__(base_url)
        self.output_dir = output_dir

    def path_for(self, report: GeneratedReport) -> str:
        return os.path.join(self.output_dir, report.file_name)

    def save(self, report: GeneratedReport) -> GeneratedReport:
        os.makedirs(self.output_dir, exist_ok=True)
        path = self.path_for(report)
        # Temp file then rename: a failed write leaves nothing at path
        fd, tmp_path = tempfile.mkstemp(dir=self.output_dir, suffix=".part")
        try:
            with os.fdopen(fd, 'wb') as f:
                f.write(report.content)
            os.replace(tmp_path, path)
        except Exception:
            if os.path.exists(tmp_path):
                os.remove(tmp_path)
            raise
        logger.info(f"Wrote {path}")
        return super().save(report)

    def delete(self, report_id: str) -> bool:
        report = self.find_by_id(report_id)
        if not super().delete(report_id):
            return False
        path = self.path_for(report)
        if os.path.exists(path):
            os.remove(path)
        return True

    def clear(self):
        for report in self.find_all():
            self.delete(report.id)
