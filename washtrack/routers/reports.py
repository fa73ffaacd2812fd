"""Report builder router: catalog, preview, summary and export."""

from fastapi import APIRouter, Query, Response

from washtrack.dependencies import DbSession, ReportServiceDep, ReportSessionsDep
from washtrack.reporting.aggregator import summable_columns
from washtrack.reporting.columns import ReportType, registry
from washtrack.reporting.configuration import default_configuration
from washtrack.schemas.reports import (
    ColumnListResponse,
    ColumnSchema,
    ExportRequest,
    PreviewRequest,
    PreviewResponse,
    ReportConfigSchema,
    ReportTypeListResponse,
    ReportTypeSchema,
    SummaryRequest,
    SummaryResponse,
)
from washtrack.services.report_service import ExportFile
from washtrack.utils.logger import get_logger

log = get_logger(__name__)

router = APIRouter(prefix="/reports", tags=["Reports"])

XLSX_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"


def excel_response(export: ExportFile) -> Response:
    """Wrap a rendered workbook as a download."""
    return Response(
        content=export.content,
        media_type=XLSX_MEDIA_TYPE,
        headers={
            "Content-Disposition": f'attachment; filename="{export.filename}"',
            "X-Row-Count": str(export.row_count),
        },
    )


@router.get("/types", response_model=ReportTypeListResponse)
async def list_report_types() -> ReportTypeListResponse:
    """List the available report types."""
    return ReportTypeListResponse(
        report_types=[ReportTypeSchema(value=rt, label=rt.label) for rt in ReportType]
    )


@router.get("/columns", response_model=ColumnListResponse)
async def list_columns(
    report_type: ReportType = Query(ReportType.WORK_ENTRIES),
) -> ColumnListResponse:
    """Columns and filter fields offered for a report type."""
    return ColumnListResponse(
        report_type=report_type,
        columns=[ColumnSchema.from_definition(c) for c in registry.list_columns(report_type)],
        filter_fields=[ColumnSchema.from_definition(c) for c in registry.filter_fields(report_type)],
        default_columns=list(registry.default_columns(report_type)),
    )


@router.get("/default-config", response_model=ReportConfigSchema)
async def get_default_config(
    report_type: ReportType = Query(ReportType.WORK_ENTRIES),
) -> ReportConfigSchema:
    """Starting configuration for a new report."""
    return ReportConfigSchema.from_configuration(default_configuration(report_type))


@router.post("/preview", response_model=PreviewResponse)
async def preview_report(
    request: PreviewRequest,
    db: DbSession,
    report_service: ReportServiceDep,
    sessions: ReportSessionsDep,
) -> PreviewResponse:
    """
    Preview the first rows of a report.

    With a ``session_id``, a newer preview in the same session supersedes
    this one: the response then carries ``superseded=true`` and no rows.
    """
    config = request.config.to_configuration()

    if request.session_id:
        session = sessions.get_or_create(request.session_id)
        preview = await report_service.preview_in_session(
            session, config, include_summary=request.include_summary
        )
        if preview is None:
            # The cancelled query may have left the transaction unusable
            await db.rollback()
            log.info("preview superseded", session_id=request.session_id, config_version=config.version)
            return PreviewResponse(
                columns=list(config.columns),
                rows=[],
                total_count=0,
                returned_count=0,
                truncated=False,
                config_version=config.version,
                superseded=True,
            )
    else:
        preview = await report_service.preview(config, include_summary=request.include_summary)

    return PreviewResponse(
        columns=list(preview.result.columns),
        rows=[row.to_dict() for row in preview.result.rows],
        total_count=preview.total_count,
        returned_count=len(preview.result),
        truncated=preview.result.truncated,
        summary=preview.summary.to_dict() if preview.summary is not None else None,
        config_version=preview.result.config_version,
    )


@router.post("/summary", response_model=SummaryResponse)
async def summarize_report(
    request: SummaryRequest,
    report_service: ReportServiceDep,
) -> SummaryResponse:
    """Summary row (sums, counts and averages) over every matching record."""
    config = request.config.to_configuration()
    summary = await report_service.summary(config)
    return SummaryResponse(
        columns=list(config.columns),
        summable_columns=summable_columns(config.columns),
        summary=summary.to_dict(),
        config_version=config.version,
    )


@router.post("/export")
async def export_report(
    request: ExportRequest,
    report_service: ReportServiceDep,
) -> Response:
    """Export the full report as an Excel workbook."""
    config = request.config.to_configuration()
    export = await report_service.export(
        config,
        include_summary_row=request.include_summary_row,
        template_name=request.template_name,
    )
    return excel_response(export)
