"""Translate report configurations into SQLAlchemy statements."""

import uuid
from datetime import date
from typing import Any, Optional

from sqlalchemy import Integer, Select, func, literal, select
from sqlalchemy.orm import aliased
from sqlalchemy.sql import sqltypes
from sqlalchemy.sql.elements import ColumnElement

from washtrack.exceptions import InvalidConfigurationError, ValidationError
from washtrack.models.work_entry import WorkEntry
from washtrack.reporting.columns import (
    ColumnDefinition,
    ColumnRegistry,
    ComputationKind,
    registry,
)
from washtrack.reporting.configuration import (
    ReportConfiguration,
    SortDirection,
    validate_configuration,
)
from washtrack.reporting.filters import FilterOperator, FilterPredicate, resolve_date_range
from washtrack.utils.logger import get_logger

log = get_logger(__name__)

RECORD_ID_LABEL = "record_id"


class _JoinScope:
    """Resolves dotted source paths, creating one aliased outer join per path prefix."""

    def __init__(self, root: Any):
        self.root = root
        self._aliases: dict[str, Any] = {}
        self._joins: list[Any] = []

    def resolve(self, source_path: str) -> ColumnElement:
        *relations, attribute = source_path.split(".")
        entity = self.root
        prefix = ""
        try:
            for name in relations:
                prefix = f"{prefix}.{name}" if prefix else name
                if prefix not in self._aliases:
                    relationship_attr = getattr(entity, name)
                    target = relationship_attr.property.mapper.class_
                    alias = aliased(target, name=prefix.replace(".", "_"))
                    self._aliases[prefix] = alias
                    self._joins.append(relationship_attr.of_type(alias))
                entity = self._aliases[prefix]
            return getattr(entity, attribute)
        except AttributeError:
            raise InvalidConfigurationError(
                f"Source path '{source_path}' does not resolve to a stored field"
            ) from None

    def apply(self, stmt: Select) -> Select:
        for join_target in self._joins:
            stmt = stmt.outerjoin(join_target)
        return stmt


class QueryTranslator:
    """
    Builds ``SELECT`` statements for report configurations.

    Rules:
    - each selected column is labelled with its column id, joins resolved
      from the column's source path (LEFT OUTER, so missing relations yield nulls)
    - ``equals`` -> ``=``, ``in`` -> ``IN``, ``between`` -> inclusive ``BETWEEN``
    - ordering uses the single sort key, then the record id as tie-break
    """

    def __init__(self, column_registry: ColumnRegistry = registry, root: Any = WorkEntry):
        self.registry = column_registry
        self.root = root

    def translate(
        self,
        config: ReportConfiguration,
        *,
        today: Optional[date] = None,
        limit: Optional[int] = None,
    ) -> Select:
        """Build the row query for ``config``."""
        validate_configuration(config, self.registry)
        scope = _JoinScope(self.root)

        selected = [
            self._column_expression(scope, self.registry.get(column_id)).label(column_id)
            for column_id in config.columns
        ]
        stmt = select(self.root.id.label(RECORD_ID_LABEL), *selected).select_from(self.root)

        clauses = [self._predicate_clause(scope, p, today) for p in config.filters]
        sort_expr = self._column_expression(scope, self.registry.get(config.sort.field))
        if config.sort.direction is SortDirection.ASC:
            order = sort_expr.asc().nulls_last()
        else:
            order = sort_expr.desc().nulls_last()

        stmt = scope.apply(stmt)
        if clauses:
            stmt = stmt.where(*clauses)
        stmt = stmt.order_by(order, self.root.id.asc())
        if limit is not None:
            stmt = stmt.limit(limit)

        log.debug(
            "report query translated",
            report_type=config.report_type.value,
            columns=len(config.columns),
            filters=len(config.filters),
            limit=limit,
        )
        return stmt

    def translate_count(self, config: ReportConfiguration, *, today: Optional[date] = None) -> Select:
        """Build the ``COUNT(*)`` query matching the filters of ``config``."""
        validate_configuration(config, self.registry)
        scope = _JoinScope(self.root)
        clauses = [self._predicate_clause(scope, p, today) for p in config.filters]
        stmt = scope.apply(select(func.count(self.root.id)).select_from(self.root))
        if clauses:
            stmt = stmt.where(*clauses)
        return stmt

    def _column_expression(self, scope: _JoinScope, column: ColumnDefinition) -> ColumnElement:
        if column.computation is not None and column.computation.kind is ComputationKind.COUNT:
            return literal(1, type_=Integer)
        return scope.resolve(self._value_path(column))

    def _value_path(self, column: ColumnDefinition) -> str:
        # An AVERAGE column's per-record value is its numerator's value
        if column.computation is not None and column.computation.kind is ComputationKind.AVERAGE:
            return self.registry.get(column.computation.numerator).source_path
        return column.source_path

    def _predicate_clause(
        self, scope: _JoinScope, predicate: FilterPredicate, today: Optional[date]
    ) -> ColumnElement:
        column = self.registry.get(predicate.field)
        expr = scope.resolve(column.source_path)

        if predicate.operator is FilterOperator.EQUALS:
            return expr == _bind_value(expr, predicate.field, predicate.value)

        if predicate.operator is FilterOperator.IN:
            return expr.in_([_bind_value(expr, predicate.field, v) for v in predicate.value])

        if predicate.is_relative:
            low, high = resolve_date_range(predicate.value, today)
        else:
            low, high = predicate.value
        return expr.between(low, high)


def _bind_value(expr: ColumnElement, field: str, value: Any) -> Any:
    """Adapt a coerced filter value to the stored column type."""
    if isinstance(expr.type, sqltypes.Uuid) and not isinstance(value, uuid.UUID):
        try:
            return uuid.UUID(str(value))
        except ValueError:
            raise ValidationError(field, f"Invalid identifier: {value!r}") from None
    return value
