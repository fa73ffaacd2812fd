"""Summary row computation over executed report rows."""

from decimal import Decimal
from typing import Any, Iterable, Sequence

from washtrack.reporting.columns import ColumnRegistry, ComputationKind, registry
from washtrack.reporting.rows import Cell, ResultRow, SummaryRow, ValueKind


def summable_columns(
    columns: Iterable[str], column_registry: ColumnRegistry = registry
) -> list[str]:
    """Selected columns that produce a value in the summary row."""
    return [cid for cid in columns if column_registry.is_summable(cid)]


def summarize(
    rows: Sequence[ResultRow],
    columns: Sequence[str],
    column_registry: ColumnRegistry = registry,
) -> SummaryRow:
    """
    Aggregate ``rows`` into a single summary row.

    Rules:
    - plain summable columns: sum, nulls count as zero
    - COUNT columns: one per row
    - AVERAGE columns: sum of the per-row values over the number of non-null
      values, zero when there are none
    - everything else is left blank (``None``)
    """
    totals: dict[str, Any] = {}
    denominators: dict[str, int] = {}
    summable = summable_columns(columns, column_registry)

    for column_id in summable:
        column = column_registry.get(column_id)
        kind = ValueKind.for_column(column)
        totals[column_id] = Decimal("0") if kind is ValueKind.CURRENCY else 0
        if column.computation and column.computation.kind is ComputationKind.AVERAGE:
            denominators[column_id] = 0

    for row in rows:
        for column_id in summable:
            column = column_registry.get(column_id)
            if column.computation and column.computation.kind is ComputationKind.COUNT:
                totals[column_id] += 1
                continue
            value = row.get(column_id)
            if value is None:
                continue
            totals[column_id] += value
            if column_id in denominators:
                denominators[column_id] += 1

    for column_id, denominator in denominators.items():
        if denominator:
            totals[column_id] = Decimal(totals[column_id]) / denominator
        else:
            totals[column_id] = Decimal("0")

    cells = []
    for column_id in columns:
        column = column_registry.get(column_id)
        cells.append(Cell(column_id, ValueKind.for_column(column), totals.get(column_id)))
    return SummaryRow(cells)
