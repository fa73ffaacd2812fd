"""Run translated report queries and build typed result rows."""

import asyncio
import time
from datetime import date
from typing import Any, Mapping, Optional

from sqlalchemy.exc import SQLAlchemyError

from washtrack.config import get_settings
from washtrack.exceptions import DataAccessError
from washtrack.reporting.columns import ColumnRegistry, registry
from washtrack.reporting.configuration import ReportConfiguration
from washtrack.reporting.query import RECORD_ID_LABEL, QueryTranslator
from washtrack.reporting.rows import Cell, ReportResult, ResultRow
from washtrack.repositories.report_data_repository import ReportDataRepository
from washtrack.utils.logger import get_logger

log = get_logger(__name__)


class ReportExecutor:
    """
    Executes report configurations through a ``ReportDataRepository``.

    Store failures and timeouts surface as ``DataAccessError``. There is no
    automatic retry; a report run is user-initiated and can simply be re-run.
    """

    def __init__(
        self,
        repository: ReportDataRepository,
        translator: Optional[QueryTranslator] = None,
        column_registry: ColumnRegistry = registry,
        max_rows: Optional[int] = None,
        timeout_seconds: Optional[float] = None,
    ):
        settings = get_settings()
        self.repository = repository
        self.registry = column_registry
        self.translator = translator or QueryTranslator(column_registry)
        self.max_rows = max_rows if max_rows is not None else settings.max_report_rows
        self.timeout_seconds = (
            timeout_seconds if timeout_seconds is not None else settings.report_query_timeout_seconds
        )

    async def execute(
        self,
        config: ReportConfiguration,
        *,
        limit: Optional[int] = None,
        today: Optional[date] = None,
    ) -> ReportResult:
        """
        Fetch the rows for ``config``.

        Args:
            config: Validated report configuration
            limit: Optional cap below ``max_rows`` (previews)
            today: Reference day for relative date ranges

        Returns:
            ReportResult whose rows follow the configuration's column order.
            ``truncated`` is set when more rows matched than were returned.
        """
        cap = self.max_rows if limit is None else min(limit, self.max_rows)
        stmt = self.translator.translate(config, today=today, limit=cap + 1)

        start = time.perf_counter()
        raw_rows = await self._run("execute", self.repository.fetch_rows(stmt))
        duration_ms = int((time.perf_counter() - start) * 1000)

        truncated = len(raw_rows) > cap
        rows = tuple(self._build_row(config, raw) for raw in raw_rows[:cap])

        log.info(
            "report executed",
            report_type=config.report_type.value,
            config_version=config.version,
            rows=len(rows),
            truncated=truncated,
            duration_ms=duration_ms,
        )
        return ReportResult(
            columns=config.columns,
            rows=rows,
            config_version=config.version,
            truncated=truncated,
        )

    async def count(self, config: ReportConfiguration, *, today: Optional[date] = None) -> int:
        """Count every record matching the configuration's filters."""
        stmt = self.translator.translate_count(config, today=today)
        return await self._run("count", self.repository.count(stmt))

    async def _run(self, operation: str, awaitable: Any) -> Any:
        try:
            async with asyncio.timeout(self.timeout_seconds):
                return await awaitable
        except TimeoutError as e:
            log.error(
                "report query timed out",
                operation=operation,
                timeout_seconds=self.timeout_seconds,
            )
            raise DataAccessError(operation, "The report query took too long to complete") from e
        except (SQLAlchemyError, OSError) as e:
            log.error("report query failed", operation=operation, error=str(e), exc_info=True)
            raise DataAccessError(operation) from e

    def _build_row(self, config: ReportConfiguration, raw: Mapping[str, Any]) -> ResultRow:
        cells = [
            Cell.from_raw(self.registry.get(column_id), raw[column_id])
            for column_id in config.columns
        ]
        record_id = raw.get(RECORD_ID_LABEL)
        return ResultRow(cells, record_id=str(record_id) if record_id is not None else None)
