"""Schemas for report template operations."""

from datetime import date, datetime
from typing import Optional, Union
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from washtrack.reporting.columns import ReportType
from washtrack.reporting.filters import DateRangePreset
from washtrack.schemas.reports import ReportConfigSchema


class TemplateCreateRequest(BaseModel):
    template_name: str = Field(..., min_length=1, max_length=200)
    description: Optional[str] = Field(None, max_length=2000)
    config: ReportConfigSchema
    is_system_template: bool = False


class TemplateResponse(BaseModel):
    """Template metadata."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    template_name: str
    description: Optional[str] = None
    report_type: ReportType
    created_by: Optional[UUID] = None
    is_system_template: bool
    use_count: int
    last_used_at: Optional[datetime] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class TemplateDetailResponse(TemplateResponse):
    """Template with its restored configuration."""

    config: ReportConfigSchema
    dropped_columns: list[str] = Field(
        default_factory=list, description="Stored columns no longer available"
    )
    dropped_filters: list[str] = Field(
        default_factory=list, description="Stored filters no longer available"
    )


class TemplateListResponse(BaseModel):
    templates: list[TemplateResponse]
    total: int


class TemplateRunRequest(BaseModel):
    date_range: Optional[Union[DateRangePreset, list[date]]] = Field(
        None, description="Override the work date range: [from, to] or a relative range"
    )
    include_summary_row: bool = False
    save_as: Optional[str] = Field(
        None, min_length=1, max_length=200, description="Also save as a new template"
    )
