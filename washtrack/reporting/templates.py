"""Serialisation of report configurations for template storage.

Stored templates outlive registry changes: a column may be renamed or
removed after a template was saved. ``TemplateCodec.decode`` reconciles the
stored payload with the current registry under a ``DriftPolicy``.
"""

import dataclasses
from datetime import date
from decimal import Decimal
from enum import Enum
from typing import Any, Mapping, Optional, Union

from washtrack.exceptions import InvalidConfigurationError, ValidationError
from washtrack.reporting.columns import ColumnRegistry, ReportType, registry
from washtrack.reporting.configuration import (
    DEFAULT_SORT,
    ReportConfiguration,
    SortKey,
    validate_configuration,
)
from washtrack.reporting.filters import DateRangePreset, FilterPredicate, build_predicate
from washtrack.utils.logger import get_logger

log = get_logger(__name__)

SCHEMA_VERSION = 1


class DriftPolicy(str, Enum):
    """How to treat stored ids that the current registry no longer knows."""

    DROP = "drop"
    WARN = "warn"
    STRICT = "strict"


@dataclasses.dataclass(frozen=True)
class DecodedConfiguration:
    config: ReportConfiguration
    dropped_columns: tuple[str, ...] = ()
    dropped_filters: tuple[str, ...] = ()
    dropped_sort: Optional[str] = None

    @property
    def has_drift(self) -> bool:
        return bool(self.dropped_columns or self.dropped_filters or self.dropped_sort)


def _encode_value(value: Any) -> Any:
    if isinstance(value, DateRangePreset):
        return value.value
    if isinstance(value, date):
        return value.isoformat()
    if isinstance(value, Decimal):
        return str(value)
    if isinstance(value, tuple):
        return [_encode_value(v) for v in value]
    return value


class TemplateCodec:
    """Encodes configurations to JSON-safe dicts and decodes them back."""

    def __init__(
        self,
        column_registry: ColumnRegistry = registry,
        policy: Union[DriftPolicy, str] = DriftPolicy.DROP,
    ):
        self.registry = column_registry
        self.policy = DriftPolicy(policy)

    def encode(self, config: ReportConfiguration) -> dict[str, Any]:
        return {
            "schema_version": SCHEMA_VERSION,
            "report_type": config.report_type.value,
            "columns": list(config.columns),
            "filters": [
                {
                    "field": p.field,
                    "operator": p.operator.value,
                    "value": _encode_value(p.value),
                }
                for p in config.filters
            ],
            "sorting": [
                {"field": key.field, "direction": key.direction.value} for key in config.sorting
            ],
        }

    def decode(
        self,
        payload: Mapping[str, Any],
        report_type: Optional[Union[ReportType, str]] = None,
    ) -> DecodedConfiguration:
        """
        Rebuild a configuration from a stored payload.

        Args:
            payload: Dict produced by ``encode`` (possibly by an older registry)
            report_type: Fallback when the payload does not name one

        Raises:
            InvalidConfigurationError: under the strict policy when the payload
                references ids the registry no longer offers, or when the
                payload is unusable under any policy
        """
        raw_type = payload.get("report_type") or report_type
        try:
            resolved_type = ReportType(raw_type)
        except ValueError:
            raise InvalidConfigurationError(f"Unknown report type in template: {raw_type}") from None

        offered = {c.id for c in self.registry.list_columns(resolved_type)}
        stored_columns = list(payload.get("columns") or [])
        columns = [cid for cid in dict.fromkeys(stored_columns) if cid in offered]
        dropped_columns = tuple(cid for cid in stored_columns if cid not in offered)

        filters: list[FilterPredicate] = []
        dropped_filters: list[str] = []
        unknown_filters: list[str] = []
        for entry in payload.get("filters") or []:
            field = entry.get("field")
            if field not in self.registry or not self.registry.get(field).offered_for(resolved_type):
                unknown_filters.append(str(field))
                continue
            if any(p.field == field for p in filters):
                dropped_filters.append(field)
                continue
            try:
                filters.append(
                    build_predicate(self.registry.get(field), entry.get("operator"), entry.get("value"))
                )
            except ValidationError as e:
                log.warning(
                    "stored template filter no longer valid",
                    field=field,
                    error=e.message,
                )
                dropped_filters.append(field)

        dropped_sort = None
        sorting = payload.get("sorting") or []
        sort_key = DEFAULT_SORT
        if sorting:
            stored = sorting[0]
            field = stored.get("field")
            if field in self.registry and self.registry.get(field).offered_for(resolved_type):
                try:
                    sort_key = SortKey(field, stored.get("direction", "desc"))
                except ValidationError:
                    dropped_sort = field
            else:
                dropped_sort = str(field)

        unknown = list(dropped_columns) + unknown_filters + ([dropped_sort] if dropped_sort else [])
        if unknown and self.policy is DriftPolicy.STRICT:
            raise InvalidConfigurationError(
                f"Template references fields that are no longer available: {', '.join(unknown)}",
                column_ids=unknown,
            )

        required = [cid for cid in self.registry.required_ids(resolved_type) if cid not in columns]
        config = ReportConfiguration(
            report_type=resolved_type,
            columns=tuple(required + columns),
            filters=tuple(filters),
            sorting=(sort_key,),
        )
        try:
            validate_configuration(config, self.registry)
        except ValidationError as e:
            raise InvalidConfigurationError(f"Stored template is not usable: {e.message}") from e

        decoded = DecodedConfiguration(
            config=config,
            dropped_columns=dropped_columns,
            dropped_filters=tuple(unknown_filters + dropped_filters),
            dropped_sort=dropped_sort,
        )
        if decoded.has_drift:
            log.warning(
                "template schema drift",
                policy=self.policy.value,
                report_type=resolved_type.value,
                dropped_columns=list(decoded.dropped_columns),
                dropped_filters=list(decoded.dropped_filters),
                dropped_sort=dropped_sort,
                restored_required=required,
            )
        return decoded
