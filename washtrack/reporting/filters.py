"""Filter model: typed predicates and pure transformations over configurations.

A configuration holds at most one predicate per field; ``set_filter`` on a
field that already has one replaces it in place. All functions return a new
``ReportConfiguration`` and never mutate the one passed in.
"""

import calendar
import dataclasses
from datetime import date, datetime, timedelta
from decimal import Decimal, InvalidOperation
from enum import Enum
from typing import TYPE_CHECKING, Any, Optional, Union

from washtrack.exceptions import ValidationError
from washtrack.reporting.columns import ColumnDefinition, ColumnRegistry, ColumnType, registry

if TYPE_CHECKING:
    from washtrack.reporting.configuration import ReportConfiguration

Scalar = Union[str, Decimal, date]


class FilterOperator(str, Enum):
    EQUALS = "equals"
    IN = "in"
    BETWEEN = "between"


class DateRangePreset(str, Enum):
    """Relative date ranges, resolved against today at query time."""

    TODAY = "today"
    LAST_7_DAYS = "last_7_days"
    CURRENT_WEEK = "current_week"
    CURRENT_MONTH = "current_month"
    LAST_MONTH = "last_month"


@dataclasses.dataclass(frozen=True)
class FilterPredicate:
    """One ``field <operator> value`` predicate.

    ``value`` is a scalar for ``equals``, a non-empty tuple for ``in`` and
    either a ``(from, to)`` tuple or a ``DateRangePreset`` for ``between``.
    Shape rules are checked on construction; ``build_predicate`` additionally
    coerces raw input against the column type.
    """

    field: str
    operator: FilterOperator
    value: Any

    def __post_init__(self):
        try:
            operator = FilterOperator(self.operator)
        except ValueError:
            raise ValidationError(self.field, f"Unknown filter operator: {self.operator}") from None
        object.__setattr__(self, "operator", operator)

        if operator is FilterOperator.EQUALS:
            if self.value is None or isinstance(self.value, (list, tuple, set, dict)):
                raise ValidationError(self.field, "'equals' requires a single value")

        elif operator is FilterOperator.IN:
            if isinstance(self.value, (str, bytes)) or not isinstance(
                self.value, (list, tuple, set, frozenset)
            ):
                raise ValidationError(self.field, "'in' requires a list of values")
            values = tuple(self.value)
            if not values:
                raise ValidationError(self.field, "'in' requires at least one value")
            object.__setattr__(self, "value", values)

        else:
            if isinstance(self.value, DateRangePreset):
                return
            if isinstance(self.value, (str, bytes)) or not isinstance(self.value, (list, tuple)):
                raise ValidationError(self.field, "'between' requires a [from, to] pair")
            bounds = tuple(self.value)
            if len(bounds) != 2 or bounds[0] is None or bounds[1] is None:
                raise ValidationError(self.field, "'between' requires exactly two values")
            low, high = bounds
            try:
                inverted = low > high
            except TypeError:
                raise ValidationError(
                    self.field, "'between' bounds must be of the same comparable type"
                ) from None
            if inverted:
                raise ValidationError(self.field, f"Range start {low} is after range end {high}")
            object.__setattr__(self, "value", bounds)

    @property
    def is_relative(self) -> bool:
        return isinstance(self.value, DateRangePreset)


# ============================================================================
# Value coercion
# ============================================================================


def _coerce_date(field: str, value: Any) -> date:
    """Coerce to a calendar day; time-of-day is discarded."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        text = value.strip()
        try:
            return date.fromisoformat(text)
        except ValueError:
            pass
        try:
            return datetime.fromisoformat(text.replace("Z", "+00:00")).date()
        except ValueError:
            pass
    raise ValidationError(field, f"Invalid date: {value!r}. Expected format: YYYY-MM-DD")


def _coerce_decimal(field: str, value: Any) -> Decimal:
    if isinstance(value, bool):
        raise ValidationError(field, f"Invalid number: {value!r}")
    try:
        number = value if isinstance(value, Decimal) else Decimal(str(value).strip())
    except (InvalidOperation, ValueError):
        raise ValidationError(field, f"Invalid number: {value!r}") from None
    if not number.is_finite():
        raise ValidationError(field, f"Invalid number: {value!r}")
    return number


def coerce_scalar(column: ColumnDefinition, value: Any) -> Scalar:
    """Coerce one raw filter value to the comparable form of the column type."""
    if value is None:
        raise ValidationError(column.id, "Filter value is required")
    if isinstance(value, (list, tuple, set, dict)):
        raise ValidationError(column.id, "Expected a single value")

    if column.type is ColumnType.DATE:
        return _coerce_date(column.id, value)
    if column.type.is_numeric:
        return _coerce_decimal(column.id, value)
    # Strings, labels and foreign-key ids (UUIDs included) compare as text
    return str(value)


def build_predicate(
    column: ColumnDefinition, operator: Union[FilterOperator, str], value: Any
) -> FilterPredicate:
    """Validate and coerce raw input into a predicate on ``column``."""
    try:
        operator = FilterOperator(operator)
    except ValueError:
        raise ValidationError(column.id, f"Unknown filter operator: {operator}") from None

    if column.is_derived:
        raise ValidationError(column.id, f"Cannot filter on derived column '{column.label}'")

    if operator is FilterOperator.EQUALS:
        return FilterPredicate(column.id, operator, coerce_scalar(column, value))

    if operator is FilterOperator.IN:
        if isinstance(value, (str, bytes)) or not isinstance(value, (list, tuple, set, frozenset)):
            raise ValidationError(column.id, "'in' requires a list of values")
        coerced = tuple(dict.fromkeys(coerce_scalar(column, v) for v in value))
        return FilterPredicate(column.id, operator, coerced)

    if not column.type.is_comparable:
        raise ValidationError(
            column.id, f"'between' is only supported on date and numeric columns, not '{column.label}'"
        )

    if column.type is ColumnType.DATE and isinstance(value, str):
        try:
            return FilterPredicate(column.id, operator, DateRangePreset(value))
        except ValueError:
            raise ValidationError(column.id, f"Unknown date range: {value!r}") from None

    if isinstance(value, (str, bytes)) or not isinstance(value, (list, tuple)) or len(value) != 2:
        raise ValidationError(column.id, "'between' requires exactly two values")
    low, high = (coerce_scalar(column, v) for v in value)
    return FilterPredicate(column.id, operator, (low, high))


def resolve_date_range(preset: DateRangePreset, today: Optional[date] = None) -> tuple[date, date]:
    """Resolve a relative range to inclusive calendar-day bounds."""
    today = today or date.today()

    if preset is DateRangePreset.TODAY:
        return today, today
    if preset is DateRangePreset.LAST_7_DAYS:
        return today - timedelta(days=7), today
    if preset is DateRangePreset.CURRENT_WEEK:
        # Weeks run Sunday through Saturday
        start = today - timedelta(days=(today.weekday() + 1) % 7)
        return start, start + timedelta(days=6)
    if preset is DateRangePreset.CURRENT_MONTH:
        last_day = calendar.monthrange(today.year, today.month)[1]
        return today.replace(day=1), today.replace(day=last_day)

    last_month_end = today.replace(day=1) - timedelta(days=1)
    return last_month_end.replace(day=1), last_month_end


# ============================================================================
# Configuration transformations
# ============================================================================


def get_filter(config: "ReportConfiguration", field: str) -> Optional[FilterPredicate]:
    """Return the predicate on ``field``, if any."""
    for predicate in config.filters:
        if predicate.field == field:
            return predicate
    return None


def set_filter(
    config: "ReportConfiguration",
    field: str,
    operator: Union[FilterOperator, str],
    value: Any,
    column_registry: ColumnRegistry = registry,
) -> "ReportConfiguration":
    """Return a configuration whose predicate on ``field`` is ``operator value``.

    Replaces any existing predicate on the same field, keeping its position.
    """
    column = column_registry.get(field)
    if not column.offered_for(config.report_type):
        raise ValidationError(
            field, f"'{column.label}' is not available for {config.report_type.label} reports"
        )
    predicate = build_predicate(column, operator, value)

    filters = list(config.filters)
    for index, existing in enumerate(filters):
        if existing.field == field:
            filters[index] = predicate
            break
    else:
        filters.append(predicate)

    return dataclasses.replace(config, filters=tuple(filters), version=config.version + 1)


def clear_filter(config: "ReportConfiguration", field: str) -> "ReportConfiguration":
    """Return a configuration without a predicate on ``field``."""
    if get_filter(config, field) is None:
        return config
    filters = tuple(p for p in config.filters if p.field != field)
    return dataclasses.replace(config, filters=filters, version=config.version + 1)


def clear_all_filters(config: "ReportConfiguration") -> "ReportConfiguration":
    """Return a configuration with an empty filter set."""
    if not config.filters:
        return config
    return dataclasses.replace(config, filters=(), version=config.version + 1)
