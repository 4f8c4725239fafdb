"""
Exception hierarchy for the report generation service.

FetchError and RenderError are fatal for a single request. ExtractionError
never leaves the extraction layer. ReportGenerationError is the one error the
orchestrator surfaces to its caller.
"""

from typing import Optional


class ReportServiceError(Exception):
    """Base exception for report service errors"""
    pass


class FetchError(ReportServiceError):
    """Raised when raw content cannot be fetched from a source URL."""
    def __init__(self, url: str, message: str, original_error: Optional[Exception] = None):
        self.url = url
        self.message = message
        self.original_error = original_error
        super().__init__(f"{url}: {message}")


class ExtractionError(ReportServiceError):
    """Raised inside an extractor branch when a document cannot be parsed."""
    def __init__(self, source_format: str, message: str, original_error: Optional[Exception] = None):
        self.source_format = source_format
        self.message = message
        self.original_error = original_error
        super().__init__(f"{source_format}: {message}")


class RenderError(ReportServiceError):
    """Raised when a renderer fails to produce an output document."""
    def __init__(self, report_format: str, message: str, original_error: Optional[Exception] = None):
        self.report_format = report_format
        self.message = message
        self.original_error = original_error
        super().__init__(f"{report_format}: {message}")


class ReportGenerationError(ReportServiceError):
    """Raised by the orchestrator when any pipeline stage fails."""
    def __init__(self, request_id: str, message: str):
        self.request_id = request_id
        self.message = message
        super().__init__(f"Report generation failed for request {request_id}: {message}")
