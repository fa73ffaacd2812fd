"""Service orchestrating report preview, summary and export."""

from dataclasses import dataclass
from datetime import date
from time import time
from typing import Optional

from washtrack.exceptions import ReportTooLargeError
from washtrack.reporting.aggregator import summarize
from washtrack.reporting.configuration import ReportConfiguration, validate_configuration
from washtrack.reporting.executor import ReportExecutor
from washtrack.reporting.exporter import ExcelExporter, export_filename
from washtrack.reporting.rows import ReportResult, SummaryRow
from washtrack.reporting.session import ReportSession
from washtrack.utils.logger import get_logger

log = get_logger(__name__)


@dataclass(frozen=True)
class PreviewResult:
    result: ReportResult
    total_count: int
    summary: Optional[SummaryRow] = None


@dataclass(frozen=True)
class ExportFile:
    filename: str
    content: bytes
    row_count: int


class ReportService:
    """Runs report configurations end to end."""

    def __init__(
        self,
        executor: ReportExecutor,
        exporter: ExcelExporter,
        preview_limit: int = 50,
    ):
        self.executor = executor
        self.exporter = exporter
        self.preview_limit = preview_limit

    async def preview(
        self,
        config: ReportConfiguration,
        *,
        include_summary: bool = False,
        today: Optional[date] = None,
    ) -> PreviewResult:
        """
        First rows of a report plus the total number of matching records.

        The summary, when requested, covers the full result set rather than
        only the previewed rows.
        """
        validate_configuration(config, self.executor.registry)
        result = await self.executor.execute(config, limit=self.preview_limit, today=today)
        total_count = await self.executor.count(config, today=today)
        summary = None
        if include_summary:
            summary = await self.summary(config, today=today)
        return PreviewResult(result=result, total_count=total_count, summary=summary)

    async def preview_in_session(
        self,
        session: ReportSession,
        config: ReportConfiguration,
        *,
        include_summary: bool = False,
        today: Optional[date] = None,
    ) -> Optional[PreviewResult]:
        """Preview through a single-flight session; None when superseded."""

        async def fetch(cfg: ReportConfiguration) -> PreviewResult:
            return await self.preview(cfg, include_summary=include_summary, today=today)

        return await session.run(fetch, config)

    async def summary(
        self, config: ReportConfiguration, *, today: Optional[date] = None
    ) -> SummaryRow:
        """Summary row over every matching record."""
        result = await self._execute_full(config, today=today)
        return summarize(result.rows, config.columns, self.executor.registry)

    async def export(
        self,
        config: ReportConfiguration,
        *,
        include_summary_row: bool = False,
        template_name: Optional[str] = None,
        today: Optional[date] = None,
    ) -> ExportFile:
        """Execute the full report and render it as an Excel workbook."""
        start_time = time()
        result = await self._execute_full(config, today=today)

        summary = None
        if include_summary_row:
            summary = summarize(result.rows, config.columns, self.executor.registry)

        content = self.exporter.render(
            result.rows,
            config.columns,
            include_summary_row=include_summary_row,
            summary=summary,
        )
        filename = export_filename(config.report_type, template_name, today)

        log.info(
            "report exported",
            report_type=config.report_type.value,
            filename=filename,
            rows=len(result),
            duration_ms=int((time() - start_time) * 1000),
        )
        return ExportFile(filename=filename, content=content, row_count=len(result))

    async def _execute_full(
        self, config: ReportConfiguration, *, today: Optional[date] = None
    ) -> ReportResult:
        # Exports and summaries must cover every matching record
        result = await self.executor.execute(config, today=today)
        if result.truncated:
            log.warning(
                "report exceeds row limit",
                report_type=config.report_type.value,
                row_limit=self.executor.max_rows,
            )
            raise ReportTooLargeError(self.executor.max_rows)
        return result
