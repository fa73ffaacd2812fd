"""Column registry: the static catalog of reportable logical columns.

Every column is addressed by a stable ``id`` and resolves to a stored field
through a dotted ``source_path`` rooted at the work entry, e.g.
``vehicle.client.client_name`` walks ``WorkEntry.vehicle -> Vehicle.client ->
Client.client_name``.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Iterable, Optional

from washtrack.exceptions import InvalidConfigurationError


class ReportType(str, Enum):
    """Logical report kinds offered by the builder."""

    WORK_ENTRIES = "work_entries"
    CLIENT_BILLING = "client_billing"
    EMPLOYEE_PERFORMANCE = "employee_performance"
    REVENUE_ANALYSIS = "revenue_analysis"

    @property
    def label(self) -> str:
        return self.value.replace("_", " ").title()


class ColumnType(str, Enum):
    """Data type of a column; drives filtering, summation and export formatting."""

    DATE = "date"
    STRING = "string"
    NUMBER = "number"
    CURRENCY = "currency"
    FOREIGN_KEY_LABEL = "foreign_key_label"

    @property
    def is_numeric(self) -> bool:
        return self in (ColumnType.NUMBER, ColumnType.CURRENCY)

    @property
    def is_comparable(self) -> bool:
        """Whether range (``between``) filters make sense for this type."""
        return self is ColumnType.DATE or self.is_numeric


class ComputationKind(str, Enum):
    COUNT = "count"
    AVERAGE = "average"


@dataclass(frozen=True)
class Computation:
    """Rule for a derived column.

    ``COUNT`` contributes 1 per record. ``AVERAGE`` carries the numerator
    column explicitly: its per-record value is the numerator's value, and its
    summary is ``sum(numerator) / count(records with a numerator)``.
    """

    kind: ComputationKind
    numerator: Optional[str] = None

    def __post_init__(self):
        if self.kind is ComputationKind.AVERAGE and not self.numerator:
            raise ValueError("AVERAGE computations need a numerator column")


@dataclass(frozen=True)
class ColumnDefinition:
    """A single reportable column."""

    id: str
    label: str
    source_path: str
    type: ColumnType
    required: bool = False
    summable: bool = False
    computation: Optional[Computation] = None
    category: str = "Work"
    advanced: bool = False
    # Filter-only fields (foreign keys) are never selectable as columns
    selectable: bool = True
    # None means every report type offers the column
    report_types: Optional[frozenset[ReportType]] = None

    def offered_for(self, report_type: ReportType) -> bool:
        return self.report_types is None or report_type in self.report_types

    @property
    def is_derived(self) -> bool:
        return self.computation is not None


_BILLING = frozenset({ReportType.WORK_ENTRIES, ReportType.CLIENT_BILLING})
_PERFORMANCE = frozenset({ReportType.WORK_ENTRIES, ReportType.EMPLOYEE_PERFORMANCE})
_REVENUE = frozenset(
    {ReportType.WORK_ENTRIES, ReportType.CLIENT_BILLING, ReportType.REVENUE_ANALYSIS}
)

WORK_ENTRY_COLUMNS: tuple[ColumnDefinition, ...] = (
    # Work
    ColumnDefinition("work_date", "Date", "work_date", ColumnType.DATE, required=True),
    ColumnDefinition("quantity", "Quantity", "quantity", ColumnType.NUMBER, summable=True),
    ColumnDefinition(
        "duration_minutes",
        "Duration (min)",
        "duration_minutes",
        ColumnType.NUMBER,
        summable=True,
        advanced=True,
        report_types=_PERFORMANCE,
    ),
    ColumnDefinition(
        "customer_po_number",
        "Client PO Number",
        "customer_po_number",
        ColumnType.STRING,
        advanced=True,
        report_types=_BILLING,
    ),
    ColumnDefinition(
        "damage_description",
        "Damage Description",
        "damage_description",
        ColumnType.STRING,
        advanced=True,
    ),
    ColumnDefinition("notes", "Notes", "notes", ColumnType.STRING, advanced=True),
    ColumnDefinition(
        "rate_override",
        "Custom Rate ($)",
        "rate_override",
        ColumnType.CURRENCY,
        advanced=True,
        report_types=_BILLING,
    ),
    # Vehicle
    ColumnDefinition(
        "vehicle_number",
        "Vehicle Number",
        "vehicle.vehicle_number",
        ColumnType.STRING,
        required=True,
        category="Vehicle",
    ),
    ColumnDefinition(
        "vehicle_type",
        "Vehicle Type",
        "vehicle.vehicle_type.type_name",
        ColumnType.FOREIGN_KEY_LABEL,
        category="Vehicle",
    ),
    ColumnDefinition(
        "rate_per_wash",
        "Rate ($)",
        "vehicle.vehicle_type.rate_per_wash",
        ColumnType.CURRENCY,
        category="Vehicle",
        report_types=_BILLING,
    ),
    # Client
    ColumnDefinition(
        "client_name",
        "Client Name",
        "vehicle.client.client_name",
        ColumnType.FOREIGN_KEY_LABEL,
        category="Client",
    ),
    ColumnDefinition(
        "client_id",
        "Client",
        "vehicle.client_id",
        ColumnType.STRING,
        category="Client",
        selectable=False,
    ),
    # Location
    ColumnDefinition(
        "location_name",
        "Location",
        "location.name",
        ColumnType.FOREIGN_KEY_LABEL,
        category="Location",
    ),
    ColumnDefinition(
        "location_id",
        "Location",
        "location_id",
        ColumnType.STRING,
        category="Location",
        selectable=False,
    ),
    # Employee
    ColumnDefinition(
        "employee_name",
        "Employee Name",
        "employee.name",
        ColumnType.FOREIGN_KEY_LABEL,
        category="Employee",
    ),
    ColumnDefinition(
        "employee_code",
        "Employee ID",
        "employee.employee_code",
        ColumnType.STRING,
        category="Employee",
        advanced=True,
    ),
    ColumnDefinition(
        "employee_id",
        "Employee",
        "employee_id",
        ColumnType.STRING,
        category="Employee",
        selectable=False,
    ),
    # Metrics
    ColumnDefinition(
        "total_revenue",
        "Total Revenue ($)",
        "final_amount",
        ColumnType.CURRENCY,
        summable=True,
        category="Metrics",
        report_types=_REVENUE,
    ),
    ColumnDefinition(
        "entry_count",
        "Total Entries",
        "id",
        ColumnType.NUMBER,
        summable=True,
        computation=Computation(ComputationKind.COUNT),
        category="Metrics",
    ),
    ColumnDefinition(
        "avg_entry_value",
        "Avg Entry Value ($)",
        "final_amount",
        ColumnType.CURRENCY,
        summable=True,
        computation=Computation(ComputationKind.AVERAGE, numerator="total_revenue"),
        category="Metrics",
        report_types=_REVENUE,
    ),
)

DEFAULT_COLUMNS: dict[ReportType, tuple[str, ...]] = {
    ReportType.WORK_ENTRIES: (
        "work_date",
        "vehicle_number",
        "client_name",
        "vehicle_type",
        "location_name",
        "employee_name",
    ),
    ReportType.CLIENT_BILLING: (
        "work_date",
        "vehicle_number",
        "client_name",
        "customer_po_number",
        "rate_per_wash",
        "total_revenue",
    ),
    ReportType.EMPLOYEE_PERFORMANCE: (
        "work_date",
        "vehicle_number",
        "employee_name",
        "employee_code",
        "duration_minutes",
        "entry_count",
    ),
    ReportType.REVENUE_ANALYSIS: (
        "work_date",
        "vehicle_number",
        "client_name",
        "location_name",
        "total_revenue",
        "entry_count",
        "avg_entry_value",
    ),
}


class ColumnRegistry:
    """Immutable lookup over a set of column definitions.

    Lookups are pure. An unknown id is a programmer or data error and raises
    ``InvalidConfigurationError``.
    """

    def __init__(
        self,
        columns: Iterable[ColumnDefinition],
        defaults: Optional[dict[ReportType, tuple[str, ...]]] = None,
    ) -> None:
        self._columns: dict[str, ColumnDefinition] = {}
        for column in columns:
            if column.id in self._columns:
                raise ValueError(f"Duplicate column id in registry: {column.id}")
            self._columns[column.id] = column

        for column in self._columns.values():
            if column.computation and column.computation.numerator:
                if column.computation.numerator not in self._columns:
                    raise ValueError(
                        f"Column {column.id} averages unknown column {column.computation.numerator}"
                    )

        if not any(c.required for c in self._columns.values()):
            raise ValueError("Registry needs at least one required column")

        self._defaults = dict(defaults or {})

    def __contains__(self, column_id: object) -> bool:
        return column_id in self._columns

    def __len__(self) -> int:
        return len(self._columns)

    def contains(self, column_id: str) -> bool:
        return column_id in self._columns

    def get(self, column_id: str) -> ColumnDefinition:
        """Get a column definition by id."""
        try:
            return self._columns[column_id]
        except KeyError:
            raise InvalidConfigurationError(
                f"Unknown report column: {column_id}", column_ids=[column_id]
            ) from None

    def list_columns(self, report_type: ReportType) -> list[ColumnDefinition]:
        """Selectable columns offered for a report type, in registry order."""
        return [
            c for c in self._columns.values() if c.selectable and c.offered_for(report_type)
        ]

    def filter_fields(self, report_type: ReportType) -> list[ColumnDefinition]:
        """Fields a predicate may reference for a report type (derived columns excluded)."""
        return [
            c for c in self._columns.values() if not c.is_derived and c.offered_for(report_type)
        ]

    def is_required(self, column_id: str) -> bool:
        return self.get(column_id).required

    def is_summable(self, column_id: str) -> bool:
        return self.get(column_id).summable

    def required_ids(self, report_type: ReportType) -> tuple[str, ...]:
        return tuple(c.id for c in self.list_columns(report_type) if c.required)

    def default_columns(self, report_type: ReportType) -> tuple[str, ...]:
        """Default selection for a new configuration; always includes required columns."""
        required = self.required_ids(report_type)
        defaults = self._defaults.get(report_type, ())
        offered = {c.id for c in self.list_columns(report_type)}
        extra = tuple(cid for cid in defaults if cid in offered and cid not in required)
        return required + extra


# Global registry instance
registry = ColumnRegistry(WORK_ENTRY_COLUMNS, DEFAULT_COLUMNS)
