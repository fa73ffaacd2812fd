"""Result and summary row types.

A row is an ordered, immutable mapping from column id to value. Each value is
held in a tagged ``Cell`` so formatting and summation dispatch on the kind
rather than on the Python type of whatever the driver returned.
"""

from collections.abc import Mapping
from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Any, Iterator, Optional, Sequence

from washtrack.reporting.columns import ColumnDefinition, ColumnType


class ValueKind(str, Enum):
    DATE = "date"
    STRING = "string"
    NUMBER = "number"
    CURRENCY = "currency"

    @classmethod
    def for_column(cls, column: ColumnDefinition) -> "ValueKind":
        if column.type is ColumnType.FOREIGN_KEY_LABEL:
            return cls.STRING
        return cls(column.type.value)


@dataclass(frozen=True)
class Cell:
    column_id: str
    kind: ValueKind
    value: Any

    @classmethod
    def from_raw(cls, column: ColumnDefinition, raw: Any) -> "Cell":
        """Normalise a driver value for ``column``; ``None`` stays ``None``."""
        kind = ValueKind.for_column(column)
        return cls(column.id, kind, _normalise(kind, raw))


def _normalise(kind: ValueKind, raw: Any) -> Any:
    if raw is None:
        return None
    if kind is ValueKind.DATE:
        if isinstance(raw, datetime):
            return raw.date()
        if isinstance(raw, str):
            return date.fromisoformat(raw[:10])
        return raw
    if kind is ValueKind.CURRENCY:
        return raw if isinstance(raw, Decimal) else Decimal(str(raw))
    if kind is ValueKind.NUMBER:
        if isinstance(raw, (int, Decimal)) and not isinstance(raw, bool):
            return raw
        return Decimal(str(raw))
    return raw if isinstance(raw, str) else str(raw)


class ResultRow(Mapping):
    """One report row keyed by column id, in configuration column order."""

    __slots__ = ("_cells", "_record_id")

    def __init__(self, cells: Sequence[Cell], record_id: Optional[str] = None):
        self._cells: dict[str, Cell] = {cell.column_id: cell for cell in cells}
        self._record_id = record_id

    def __getitem__(self, column_id: str) -> Any:
        return self._cells[column_id].value

    def __iter__(self) -> Iterator[str]:
        return iter(self._cells)

    def __len__(self) -> int:
        return len(self._cells)

    def __repr__(self) -> str:
        values = ", ".join(f"{k}={v!r}" for k, v in self.items())
        return f"{type(self).__name__}({values})"

    @property
    def record_id(self) -> Optional[str]:
        return self._record_id

    def cell(self, column_id: str) -> Cell:
        return self._cells[column_id]

    def cells(self) -> tuple[Cell, ...]:
        return tuple(self._cells.values())

    def to_dict(self) -> dict[str, Any]:
        return dict(self.items())


class SummaryRow(ResultRow):
    """Synthetic aggregate row; non-summable cells are ``None`` (left blank)."""

    __slots__ = ()


@dataclass(frozen=True)
class ReportResult:
    """Output of one execution.

    ``rows`` is a tuple and must be treated as immutable once returned.
    ``config_version`` records which configuration produced it.
    """

    columns: tuple[str, ...]
    rows: tuple[ResultRow, ...]
    config_version: int
    truncated: bool = False

    def __len__(self) -> int:
        return len(self.rows)
