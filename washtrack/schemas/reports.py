"""Schemas for report builder operations."""

import dataclasses
from typing import Any, Optional

from pydantic import BaseModel, Field

from washtrack.exceptions import ValidationError
from washtrack.reporting.columns import ColumnDefinition, ColumnType, ReportType, registry
from washtrack.reporting.configuration import (
    ReportConfiguration,
    SortDirection,
    default_configuration,
    set_columns,
    set_sort,
)
from washtrack.reporting.filters import FilterOperator, set_filter


class FilterSchema(BaseModel):
    """One filter predicate."""

    field: str = Field(..., description="Column id to filter on")
    operator: FilterOperator = Field(..., description="equals, in or between")
    value: Any = Field(
        ...,
        description="Scalar for equals, list for in, [from, to] or a relative range name for between",
    )


class SortSchema(BaseModel):
    field: str = Field("work_date", description="Column id to sort by")
    direction: SortDirection = Field(SortDirection.DESC, description="asc or desc")


class ReportConfigSchema(BaseModel):
    """Report configuration as exchanged with clients."""

    report_type: ReportType = Field(ReportType.WORK_ENTRIES, description="Report type")
    columns: list[str] = Field(
        default_factory=list,
        description="Ordered column ids; empty selects the report type's defaults",
    )
    filters: list[FilterSchema] = Field(default_factory=list)
    sorting: list[SortSchema] = Field(default_factory=lambda: [SortSchema()])
    version: int = Field(0, ge=0, description="Client-side configuration version")

    def to_configuration(self) -> ReportConfiguration:
        """Validate against the column registry and build the domain value."""
        config = default_configuration(self.report_type, registry)
        if self.columns:
            config = set_columns(config, self.columns, registry)

        seen = set()
        for f in self.filters:
            if f.field in seen:
                raise ValidationError(f.field, "Only one filter per field is allowed")
            seen.add(f.field)
            config = set_filter(config, f.field, f.operator, f.value, registry)

        if len(self.sorting) != 1:
            raise ValidationError("sorting", "Exactly one sort key is required")
        config = set_sort(config, self.sorting[0].field, self.sorting[0].direction, registry)
        return dataclasses.replace(config, version=self.version)

    @classmethod
    def from_configuration(cls, config: ReportConfiguration) -> "ReportConfigSchema":
        return cls(
            report_type=config.report_type,
            columns=list(config.columns),
            filters=[
                FilterSchema(
                    field=p.field,
                    operator=p.operator,
                    value=list(p.value) if isinstance(p.value, tuple) else p.value,
                )
                for p in config.filters
            ],
            sorting=[SortSchema(field=k.field, direction=k.direction) for k in config.sorting],
            version=config.version,
        )


class ReportTypeSchema(BaseModel):
    value: ReportType
    label: str


class ReportTypeListResponse(BaseModel):
    report_types: list[ReportTypeSchema]


class ColumnSchema(BaseModel):
    """A reportable column as shown in column pickers."""

    id: str
    label: str
    type: ColumnType
    required: bool
    summable: bool
    derived: bool
    category: str
    advanced: bool

    @classmethod
    def from_definition(cls, column: ColumnDefinition) -> "ColumnSchema":
        return cls(
            id=column.id,
            label=column.label,
            type=column.type,
            required=column.required,
            summable=column.summable,
            derived=column.is_derived,
            category=column.category,
            advanced=column.advanced,
        )


class ColumnListResponse(BaseModel):
    report_type: ReportType
    columns: list[ColumnSchema] = Field(..., description="Selectable columns")
    filter_fields: list[ColumnSchema] = Field(..., description="Fields usable in filters")
    default_columns: list[str]


class PreviewRequest(BaseModel):
    config: ReportConfigSchema = Field(default_factory=ReportConfigSchema)
    include_summary: bool = Field(False, description="Compute the summary over all matching rows")
    session_id: Optional[str] = Field(
        None,
        max_length=100,
        description="Preview session; a newer request in the same session supersedes this one",
    )


class PreviewResponse(BaseModel):
    columns: list[str]
    rows: list[dict[str, Any]]
    total_count: int = Field(..., description="Records matching the filters")
    returned_count: int
    truncated: bool = Field(..., description="More records matched than were returned")
    summary: Optional[dict[str, Any]] = None
    config_version: int
    superseded: bool = Field(False, description="A newer request replaced this one; no data returned")


class SummaryRequest(BaseModel):
    config: ReportConfigSchema = Field(default_factory=ReportConfigSchema)


class SummaryResponse(BaseModel):
    columns: list[str]
    summable_columns: list[str]
    summary: dict[str, Any]
    config_version: int


class ExportRequest(BaseModel):
    config: ReportConfigSchema = Field(default_factory=ReportConfigSchema)
    include_summary_row: bool = Field(False, description="Append a totals row")
    template_name: Optional[str] = Field(None, max_length=200, description="Used for the file name")
