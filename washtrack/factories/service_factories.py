"""Factory functions for business logic services."""

from functools import lru_cache

from sqlalchemy.ext.asyncio import AsyncSession

from washtrack.config import get_settings
from washtrack.reporting.columns import registry
from washtrack.reporting.executor import ReportExecutor
from washtrack.reporting.exporter import ExcelExporter
from washtrack.reporting.templates import TemplateCodec
from washtrack.repositories.report_data_repository import ReportDataRepository
from washtrack.repositories.report_template_repository import ReportTemplateRepository
from washtrack.services.report_service import ReportService
from washtrack.services.template_service import TemplateService


@lru_cache(maxsize=1)
def get_excel_exporter() -> ExcelExporter:
    """
    Create singleton Excel exporter.

    Returns:
        ExcelExporter instance
    """
    settings = get_settings()
    return ExcelExporter(
        column_registry=registry,
        placeholder=settings.export_placeholder,
        sheet_name=settings.export_sheet_name,
    )


@lru_cache(maxsize=1)
def get_template_codec() -> TemplateCodec:
    """
    Create singleton template codec using the configured drift policy.

    Returns:
        TemplateCodec instance
    """
    settings = get_settings()
    return TemplateCodec(column_registry=registry, policy=settings.template_drift_policy)


def get_report_executor(db_session: AsyncSession) -> ReportExecutor:
    """
    Create ReportExecutor bound to a request-scoped session.

    Note: Not cached because depends on request-scoped db session.
    """
    settings = get_settings()
    return ReportExecutor(
        repository=ReportDataRepository(db_session),
        column_registry=registry,
        max_rows=settings.max_report_rows,
        timeout_seconds=settings.report_query_timeout_seconds,
    )


def get_report_service(db_session: AsyncSession) -> ReportService:
    """
    Create ReportService with dependencies.

    Note: Not cached because depends on request-scoped db session.

    Args:
        db_session: Database session

    Returns:
        ReportService instance
    """
    settings = get_settings()
    return ReportService(
        executor=get_report_executor(db_session),
        exporter=get_excel_exporter(),
        preview_limit=settings.preview_row_limit,
    )


def get_template_service(db_session: AsyncSession) -> TemplateService:
    """
    Create TemplateService with dependencies.

    Note: Not cached because depends on request-scoped db session.
    """
    return TemplateService(
        repository=ReportTemplateRepository(db_session),
        codec=get_template_codec(),
        report_service=get_report_service(db_session),
    )
