"""
Report generation pipeline.

One request moves through:

    FETCHING -> ANALYZING -> CHART_ENRICHING -> ASSEMBLING -> RENDERING
             -> PERSISTING -> NOTIFIED

or ends in FAILED from any of those states. Renders for the requested formats
run concurrently and are all joined before persistence. Any failure produces
exactly one failure notification, removes whatever this run already persisted,
and surfaces as ReportGenerationError.
"""

import asyncio
import copy
import logging
from dataclasses import replace
from enum import Enum
from typing import Any, Callable, Dict, List, Optional

from src.analysis.analyzer import Analyzer, build_analyzer
from src.exceptions import ReportGenerationError
from src.ingest.base_fetcher import BaseFetcher
from src.ingest.fetch_web import WebFetcher
from src.notify.notifier import LoggingNotifier
from src.pipeline.models import GeneratedReport, ReportContent, ReportFormat, ReportRequest
from src.report.assembler import assemble
from src.report.charts import ChartGenerator, NullChartGenerator
from src.report.renderers import ReportRenderer, build_renderers
from src.storage.report_store import DirectoryReportStore, InMemoryReportStore

logger = logging.getLogger(__name__)


class PipelineState(Enum):
    FETCHING = "FETCHING"
    ANALYZING = "ANALYZING"
    CHART_ENRICHING = "CHART_ENRICHING"
    ASSEMBLING = "ASSEMBLING"
    RENDERING = "RENDERING"
    PERSISTING = "PERSISTING"
    NOTIFIED = "NOTIFIED"
    FAILED = "FAILED"


ProgressCallback = Callable[[ReportRequest, PipelineState], None]


class ReportGenerator:
    """
    Drives one report request through the pipeline.

    All collaborators are injected; the generator holds no per-request state,
    so one instance can serve concurrent requests.
    """

    def __init__(
        self,
        fetcher: BaseFetcher,
        analyzer: Analyzer,
        chart_generator: ChartGenerator,
        renderers: Dict[ReportFormat, ReportRenderer],
        store: InMemoryReportStore,
        notifier: LoggingNotifier,
        progress_callback: Optional[ProgressCallback] = None,
    ):
        self.fetcher = fetcher
        self.analyzer = analyzer
        self.chart_generator = chart_generator
        self.renderers = renderers
        self.store = store
        self.notifier = notifier
        self.progress_callback = progress_callback

    def _transition(self, request: ReportRequest, state: PipelineState):
        logger.debug(f"Request {request.id}: {state.value}")
        if self.progress_callback:
            self.progress_callback(request, state)

    def _renderer_for(self, report_format: ReportFormat) -> ReportRenderer:
        renderer = self.renderers.get(report_format)
        if renderer is None:
            raise ValueError(f"No renderer configured for format {report_format.value}")
        return renderer

    async def _render_all(self, content: ReportContent, request: ReportRequest) -> List[GeneratedReport]:
        renderers = [self._renderer_for(f) for f in request.format.expand()]
        tasks = [
            asyncio.to_thread(renderer.render, copy.deepcopy(content), request)
            for renderer in renderers
        ]
        results = await asyncio.gather(*tasks, return_exceptions=True)
        for result in results:
            if isinstance(result, BaseException):
                raise result
        return list(results)

    def _rollback(self, persisted: List[GeneratedReport]):
        for report in persisted:
            try:
                self.store.delete(report.id)
            except OSError as e:
                logger.warning(f"Could not remove report {report.id} during rollback: {e}")

    async def generate_report(self, request: ReportRequest) -> List[GeneratedReport]:
        """
        Run the full pipeline for a request.

        Returns:
            Stored reports, one per concrete format, PDF first for BOTH

        Raises:
            ReportGenerationError: wrapping the first failure of the run
        """
        logger.info(f"Starting report generation for request: {request.id} ({request.source_url})")
        persisted: List[GeneratedReport] = []
        try:
            self._transition(request, PipelineState.FETCHING)
            raw = await self.fetcher.fetch_raw_data(request.source_url)

            self._transition(request, PipelineState.ANALYZING)
            data = await self.analyzer.analyze_and_structure(raw, request.source_url)

            self._transition(request, PipelineState.CHART_ENRICHING)
            charts = await self.chart_generator.generate_charts(data)

            self._transition(request, PipelineState.ASSEMBLING)
            content = assemble(data, request, charts)

            self._transition(request, PipelineState.RENDERING)
            reports = await self._render_all(content, request)

            self._transition(request, PipelineState.PERSISTING)
            for report in reports:
                persisted.append(self.store.save(report))

            for report in persisted:
                self.notifier.notify_success(report)
            self._transition(request, PipelineState.NOTIFIED)
        except Exception as e:
            self._rollback(persisted)
            self._transition(request, PipelineState.FAILED)
            message = str(e) or type(e).__name__
            self.notifier.notify_failure(request.id, message)
            raise ReportGenerationError(request.id, message) from e

        logger.info(f"Report generation completed for request {request.id}: {len(persisted)} file(s)")
        return persisted

    async def generate_pdf_report(self, request: ReportRequest) -> GeneratedReport:
        reports = await self.generate_report(replace(request, format=ReportFormat.PDF))
        return reports[0]

    async def generate_docx_report(self, request: ReportRequest) -> GeneratedReport:
        reports = await self.generate_report(replace(request, format=ReportFormat.DOCX))
        return reports[0]


def build_report_generator(config: Optional[Dict[str, Any]] = None,
                           progress_callback: Optional[ProgressCallback] = None,
                           write_files: bool = False) -> ReportGenerator:
    """
    Wire a ReportGenerator from a config dict (see src.config.settings).

    Args:
        config: Full service config; defaults apply to missing sections
        progress_callback: Optional state-transition observer
        write_files: Also write artifacts to ``storage.output_dir``
    """
    config = config or {}
    storage = config.get("storage", {})
    charts = config.get("charts", {})
    base_url = storage.get("base_url", "http://localhost:8080")

    if write_files:
        store: InMemoryReportStore = DirectoryReportStore(storage.get("output_dir", "outputs/reports"), base_url)
    else:
        store = InMemoryReportStore(base_url)

    if charts.get("enabled", True):
        chart_generator = ChartGenerator(dpi=charts.get("dpi", 100))
    else:
        chart_generator = NullChartGenerator()

    return ReportGenerator(
        fetcher=WebFetcher(config.get("fetch")),
        analyzer=build_analyzer(config.get("analysis")),
        chart_generator=chart_generator,
        renderers=build_renderers(config.get("rendering")),
        store=store,
        notifier=LoggingNotifier(config.get("notifications", {}).get("log_path") or None),
        progress_callback=progress_callback,
    )
