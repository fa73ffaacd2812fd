"""Report configuration: the immutable value every report operation consumes.

Transformations return new values with ``version`` incremented, so holders
of an older configuration never observe an edit and the preview session can
tell superseded requests apart.
"""

import dataclasses
from enum import Enum
from typing import Iterable, Union

from washtrack.exceptions import ValidationError
from washtrack.reporting.columns import (
    ColumnRegistry,
    ComputationKind,
    ReportType,
    registry,
)
from washtrack.reporting.filters import FilterPredicate


class SortDirection(str, Enum):
    ASC = "asc"
    DESC = "desc"


@dataclasses.dataclass(frozen=True)
class SortKey:
    field: str
    direction: SortDirection = SortDirection.DESC

    def __post_init__(self):
        try:
            object.__setattr__(self, "direction", SortDirection(self.direction))
        except ValueError:
            raise ValidationError("sorting", f"Unknown sort direction: {self.direction}") from None


DEFAULT_SORT = SortKey("work_date", SortDirection.DESC)


@dataclasses.dataclass(frozen=True)
class ReportConfiguration:
    """What to query, filter and sort for one report.

    ``columns`` is ordered (display order) and duplicate-free, ``filters`` is
    unique by field and ``sorting`` holds exactly one key.
    """

    report_type: ReportType
    columns: tuple[str, ...]
    filters: tuple[FilterPredicate, ...] = ()
    sorting: tuple[SortKey, ...] = (DEFAULT_SORT,)
    version: int = 0

    def __post_init__(self):
        try:
            object.__setattr__(self, "report_type", ReportType(self.report_type))
        except ValueError:
            raise ValidationError("report_type", f"Unknown report type: {self.report_type}") from None

        columns = tuple(self.columns)
        duplicates = sorted({c for c in columns if columns.count(c) > 1})
        if duplicates:
            raise ValidationError("columns", f"Duplicate columns: {', '.join(duplicates)}")
        object.__setattr__(self, "columns", columns)

        filters = tuple(self.filters)
        fields = [p.field for p in filters]
        if len(fields) != len(set(fields)):
            raise ValidationError("filters", "Only one filter per field is allowed")
        object.__setattr__(self, "filters", filters)

        sorting = tuple(self.sorting)
        if len(sorting) != 1:
            raise ValidationError("sorting", "Exactly one sort key is required")
        object.__setattr__(self, "sorting", sorting)

    @property
    def sort(self) -> SortKey:
        return self.sorting[0]


def default_configuration(
    report_type: Union[ReportType, str] = ReportType.WORK_ENTRIES,
    column_registry: ColumnRegistry = registry,
) -> ReportConfiguration:
    """Minimal configuration for a report type: default columns, no filters, newest first."""
    report_type = ReportType(report_type)
    return ReportConfiguration(
        report_type=report_type,
        columns=column_registry.default_columns(report_type),
    )


def validate_configuration(
    config: ReportConfiguration, column_registry: ColumnRegistry = registry
) -> ReportConfiguration:
    """Check a configuration against the registry before it reaches the executor.

    Unknown ids raise ``InvalidConfigurationError`` (via ``registry.get``);
    ids that exist but are not usable here raise ``ValidationError``.
    """
    offered = {c.id for c in column_registry.list_columns(config.report_type)}

    for column_id in config.columns:
        column = column_registry.get(column_id)
        if column.id not in offered:
            raise ValidationError(
                "columns",
                f"'{column.label}' is not available for {config.report_type.label} reports",
            )

    missing = [cid for cid in column_registry.required_ids(config.report_type) if cid not in config.columns]
    if missing:
        raise ValidationError("columns", f"Required columns missing: {', '.join(missing)}")

    for predicate in config.filters:
        column = column_registry.get(predicate.field)
        if column.is_derived or not column.offered_for(config.report_type):
            raise ValidationError(predicate.field, f"Cannot filter on '{column.label}'")

    _check_sort_field(config.sort.field, config.report_type, column_registry)
    return config


def _check_sort_field(field: str, report_type: ReportType, column_registry: ColumnRegistry) -> None:
    column = column_registry.get(field)
    if not column.offered_for(report_type):
        raise ValidationError("sorting", f"Cannot sort on '{column.label}'")
    if column.computation and column.computation.kind is ComputationKind.COUNT:
        raise ValidationError("sorting", f"Cannot sort on '{column.label}'")


def _with_columns(config: ReportConfiguration, columns: Iterable[str]) -> ReportConfiguration:
    return dataclasses.replace(config, columns=tuple(columns), version=config.version + 1)


def add_column(
    config: ReportConfiguration, column_id: str, column_registry: ColumnRegistry = registry
) -> ReportConfiguration:
    """Append a column to the selection (no-op if already selected)."""
    column = column_registry.get(column_id)
    if not column.selectable or not column.offered_for(config.report_type):
        raise ValidationError(
            "columns", f"'{column.label}' is not available for {config.report_type.label} reports"
        )
    if column_id in config.columns:
        return config
    return _with_columns(config, config.columns + (column_id,))


def remove_column(
    config: ReportConfiguration, column_id: str, column_registry: ColumnRegistry = registry
) -> ReportConfiguration:
    """Drop a column from the selection; required columns cannot be removed."""
    if column_registry.is_required(column_id):
        raise ValidationError(
            "columns", f"'{column_registry.get(column_id).label}' is required and cannot be removed"
        )
    if column_id not in config.columns:
        return config
    return _with_columns(config, (c for c in config.columns if c != column_id))


def move_column(config: ReportConfiguration, column_id: str, new_index: int) -> ReportConfiguration:
    """Move a selected column to ``new_index`` in display order."""
    if column_id not in config.columns:
        raise ValidationError("columns", f"Column '{column_id}' is not selected")
    columns = [c for c in config.columns if c != column_id]
    new_index = max(0, min(new_index, len(columns)))
    columns.insert(new_index, column_id)
    if tuple(columns) == config.columns:
        return config
    return _with_columns(config, columns)


def set_columns(
    config: ReportConfiguration,
    column_ids: Iterable[str],
    column_registry: ColumnRegistry = registry,
) -> ReportConfiguration:
    """Replace the whole selection; missing required columns are prepended."""
    column_ids = list(column_ids)
    if len(column_ids) != len(set(column_ids)):
        raise ValidationError("columns", "Duplicate columns are not allowed")

    required = [
        cid for cid in column_registry.required_ids(config.report_type) if cid not in column_ids
    ]
    updated = dataclasses.replace(
        config, columns=tuple(required + column_ids), version=config.version + 1
    )
    validate_configuration(updated, column_registry)
    return updated


def set_sort(
    config: ReportConfiguration,
    field: str,
    direction: Union[SortDirection, str] = SortDirection.DESC,
    column_registry: ColumnRegistry = registry,
) -> ReportConfiguration:
    """Replace the active sort key."""
    _check_sort_field(field, config.report_type, column_registry)
    key = SortKey(field, direction)
    if config.sort == key:
        return config
    return dataclasses.replace(config, sorting=(key,), version=config.version + 1)
