"""Report template router."""

from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Query, Response, status

from washtrack.dependencies import CurrentUserId, TemplateServiceDep
from washtrack.reporting.columns import ReportType
from washtrack.routers.reports import excel_response
from washtrack.schemas.reports import ReportConfigSchema
from washtrack.schemas.templates import (
    TemplateCreateRequest,
    TemplateDetailResponse,
    TemplateListResponse,
    TemplateResponse,
    TemplateRunRequest,
)
from washtrack.utils.logger import get_logger

log = get_logger(__name__)

router = APIRouter(prefix="/report-templates", tags=["Report Templates"])


@router.get("", response_model=TemplateListResponse)
async def list_templates(
    template_service: TemplateServiceDep,
    report_type: Optional[ReportType] = Query(None),
) -> TemplateListResponse:
    """List templates, system templates first."""
    templates = await template_service.list_templates(
        report_type=report_type.value if report_type else None
    )
    return TemplateListResponse(
        templates=[TemplateResponse.model_validate(t) for t in templates],
        total=len(templates),
    )


@router.post("", response_model=TemplateResponse, status_code=status.HTTP_201_CREATED)
async def create_template(
    request: TemplateCreateRequest,
    current_user_id: CurrentUserId,
    template_service: TemplateServiceDep,
) -> TemplateResponse:
    """Save a report configuration as a named template."""
    config = request.config.to_configuration()
    template = await template_service.save(
        config,
        request.template_name,
        description=request.description,
        author_id=current_user_id,
        is_system_template=request.is_system_template,
    )
    return TemplateResponse.model_validate(template)


@router.get("/{template_id}", response_model=TemplateDetailResponse)
async def get_template(
    template_id: UUID,
    template_service: TemplateServiceDep,
) -> TemplateDetailResponse:
    """Load a template's configuration (counts as a use)."""
    loaded = await template_service.load(template_id)
    metadata = TemplateResponse.model_validate(loaded.template)
    return TemplateDetailResponse(
        **metadata.model_dump(),
        config=ReportConfigSchema.from_configuration(loaded.config),
        dropped_columns=list(loaded.dropped_columns),
        dropped_filters=list(loaded.dropped_filters),
    )


@router.delete("/{template_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_template(
    template_id: UUID,
    template_service: TemplateServiceDep,
) -> Response:
    """Delete a user template."""
    await template_service.delete(template_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post("/{template_id}/export")
async def run_template(
    template_id: UUID,
    request: TemplateRunRequest,
    current_user_id: CurrentUserId,
    template_service: TemplateServiceDep,
) -> Response:
    """Export a saved template, optionally with another date range or saved under a new name."""
    run = await template_service.run(
        template_id,
        date_range=request.date_range,
        include_summary_row=request.include_summary_row,
        save_as=request.save_as,
        author_id=current_user_id,
    )
    response = excel_response(run.export)
    if run.saved_as is not None:
        response.headers["X-Saved-Template-Id"] = str(run.saved_as.id)
    return response
