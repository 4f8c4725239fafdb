"""Read and delete access to stored reports."""

import logging
from typing import List, Optional

from src.pipeline.models import GeneratedReport
from src.storage.report_store import InMemoryReportStore

logger = logging.getLogger(__name__)


class ReportQueryService:
    """Lookup use cases over a report store."""

    def __init__(self, store: InMemoryReportStore):
        self.store = store

    def get_report(self, report_id: str) -> Optional[GeneratedReport]:
        logger.info(f"Retrieving report: {report_id}")
        return self.store.find_by_id(report_id)

    def get_reports_by_source_url(self, source_url: str) -> List[GeneratedReport]:
        logger.info(f"Retrieving reports for source URL: {source_url}")
        return self.store.find_by_source_url(source_url)

    def delete_report(self, report_id: str) -> bool:
        """Delete a report; False when no report has that id."""
        logger.info(f"Deleting report: {report_id}")
        return self.store.delete(report_id)
