"""Excel export of report rows (openpyxl).

Layout: one header row (bold, grey, frozen), one row per result row, and an
optional bold shaded summary row. A hidden ``_meta`` sheet records how many
data rows were written and which cells hold the placeholder, so
``read_export`` can leave the summary row out and tell a missing value from
text that reads the same.
"""

import io
import re
from datetime import date, datetime
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Any, Optional, Sequence

from openpyxl import Workbook, load_workbook
from openpyxl.styles import Font, PatternFill
from openpyxl.utils import get_column_letter

from washtrack.config import get_settings
from washtrack.exceptions import ExportError
from washtrack.reporting.columns import ColumnRegistry, ReportType, registry
from washtrack.reporting.rows import ResultRow, SummaryRow, ValueKind
from washtrack.utils.logger import get_logger

log = get_logger(__name__)

META_SHEET = "_meta"
DATE_FORMAT = "yyyy-mm-dd"
CURRENCY_FORMAT = "#,##0.00"
MAX_COLUMN_WIDTH = 50

HEADER_FONT = Font(bold=True)
HEADER_FILL = PatternFill(start_color="CCCCCC", end_color="CCCCCC", fill_type="solid")
SUMMARY_FONT = Font(bold=True)
SUMMARY_FILL = PatternFill(start_color="E7E6E6", end_color="E7E6E6", fill_type="solid")

_CENTS = Decimal("0.01")


class ExcelExporter:
    """Renders report rows to an ``.xlsx`` workbook."""

    def __init__(
        self,
        column_registry: ColumnRegistry = registry,
        placeholder: Optional[str] = None,
        sheet_name: Optional[str] = None,
    ):
        settings = get_settings()
        self.registry = column_registry
        self.placeholder = placeholder if placeholder is not None else settings.export_placeholder
        self.sheet_name = sheet_name or settings.export_sheet_name

    def render(
        self,
        rows: Sequence[ResultRow],
        columns: Sequence[str],
        *,
        include_summary_row: bool = False,
        summary: Optional[SummaryRow] = None,
        sheet_name: Optional[str] = None,
    ) -> bytes:
        """
        Render ``rows`` in ``columns`` order and return the workbook bytes.

        An empty ``rows`` sequence still produces a file with the header row.
        The summary row is written only when requested, supplied and at least
        one selected column is summable.
        """
        definitions = [self.registry.get(cid) for cid in columns]

        wb = Workbook()
        ws = wb.active
        # Excel limits sheet names to 31 characters
        ws.title = (sheet_name or self.sheet_name)[:31]

        widths = []
        for col_idx, column in enumerate(definitions, start=1):
            cell = ws.cell(row=1, column=col_idx, value=column.label)
            cell.font = HEADER_FONT
            cell.fill = HEADER_FILL
            widths.append(len(column.label))
        ws.freeze_panes = "A2"

        row_idx = 2
        placeholders: list[str] = []
        for row in rows:
            self._write_row(ws, row_idx, row, definitions, widths, placeholders)
            row_idx += 1

        has_summary = (
            include_summary_row
            and summary is not None
            and any(column.summable for column in definitions)
        )
        if has_summary:
            self._write_row(ws, row_idx, summary, definitions, widths, placeholders, blank_missing=True)
            for col_idx in range(1, len(definitions) + 1):
                ws.cell(row=row_idx, column=col_idx).font = SUMMARY_FONT
                ws.cell(row=row_idx, column=col_idx).fill = SUMMARY_FILL

        for col_idx, width in enumerate(widths, start=1):
            ws.column_dimensions[get_column_letter(col_idx)].width = min(width + 2, MAX_COLUMN_WIDTH)

        meta = wb.create_sheet(META_SHEET)
        meta["A1"] = "data_rows"
        meta["B1"] = len(rows)
        meta["A2"] = "summary_row"
        meta["B2"] = int(has_summary)
        meta["A3"] = "placeholder_cells"
        meta["B3"] = len(placeholders)
        # Column C lists the coordinates of cells holding the placeholder
        for meta_row, coordinate in enumerate(placeholders, start=1):
            meta.cell(row=meta_row, column=3, value=coordinate)
        meta.sheet_state = "hidden"

        buf = io.BytesIO()
        try:
            wb.save(buf)
        except (OSError, ValueError, TypeError) as e:
            log.error("excel export failed", rows=len(rows), error=str(e), exc_info=True)
            raise ExportError("The spreadsheet could not be generated") from e

        log.info(
            "excel export rendered",
            rows=len(rows),
            columns=len(definitions),
            summary_row=has_summary,
            size_bytes=buf.tell(),
        )
        return buf.getvalue()

    def _write_row(
        self, ws, row_idx, row, definitions, widths, placeholders, blank_missing=False
    ) -> None:
        for col_idx, column in enumerate(definitions, start=1):
            kind = ValueKind.for_column(column)
            value = row.get(column.id)
            if value is None and blank_missing:
                continue

            cell = ws.cell(row=row_idx, column=col_idx)
            try:
                formatted, number_format = self._format_value(kind, value)
            except (ValueError, TypeError, InvalidOperation) as e:
                log.warning(
                    "unformattable report cell",
                    column_id=column.id,
                    kind=kind.value,
                    record_id=row.record_id,
                    error=str(e),
                )
                formatted, number_format = None, None

            if formatted is None:
                formatted = self.placeholder
                placeholders.append(cell.coordinate)
            cell.value = formatted
            if isinstance(formatted, str):
                # Text is stored as text, never as a formula
                cell.data_type = "s"
            if number_format:
                cell.number_format = number_format

            text = formatted.isoformat() if isinstance(formatted, date) else str(formatted)
            widths[col_idx - 1] = max(widths[col_idx - 1], len(text))

    def _format_value(self, kind: ValueKind, value: Any) -> tuple[Any, Optional[str]]:
        if value is None:
            return None, None
        if kind is ValueKind.DATE:
            if isinstance(value, datetime):
                return value.date(), DATE_FORMAT
            if isinstance(value, date):
                return value, DATE_FORMAT
            raise TypeError(f"expected a date, got {type(value).__name__}")
        if kind is ValueKind.CURRENCY:
            return _to_decimal(value).quantize(_CENTS, rounding=ROUND_HALF_UP), CURRENCY_FORMAT
        if kind is ValueKind.NUMBER:
            return _to_decimal(value), None
        return str(value), None


def _to_decimal(value: Any) -> Decimal:
    if isinstance(value, bool):
        raise TypeError("expected a number, got bool")
    number = value if isinstance(value, Decimal) else Decimal(str(value))
    if not number.is_finite():
        raise ValueError(f"non-finite number: {value}")
    return number


def read_export(
    data: bytes,
    columns: Sequence[str],
    column_registry: ColumnRegistry = registry,
    placeholder: Optional[str] = None,
) -> list[dict[str, Any]]:
    """
    Read the data rows of a workbook produced by ``ExcelExporter.render``.

    The summary row is excluded. Placeholder cells come back as ``None``;
    dates, numbers and currency are coerced back to ``date``,
    ``Decimal``/``int``; every other string comes back verbatim, including
    ``""`` and text that happens to equal the placeholder. Workbooks without
    a ``_meta`` sheet fall back to matching the placeholder text.
    """
    placeholder = placeholder if placeholder is not None else get_settings().export_placeholder
    definitions = [column_registry.get(cid) for cid in columns]

    wb = load_workbook(io.BytesIO(data))
    ws = wb.worksheets[0]
    placeholder_cells: Optional[set[str]] = None
    if META_SHEET in wb.sheetnames:
        meta = wb[META_SHEET]
        data_rows = int(meta["B1"].value or 0)
        placeholder_count = int(meta["B3"].value or 0)
        placeholder_cells = {
            meta.cell(row=meta_row, column=3).value for meta_row in range(1, placeholder_count + 1)
        }
    else:
        data_rows = ws.max_row - 1

    records = []
    for cells in ws.iter_rows(min_row=2, max_row=data_rows + 1, max_col=len(definitions)):
        record = {}
        for column, cell in zip(definitions, cells):
            if placeholder_cells is None:
                is_placeholder = cell.value == placeholder
            else:
                is_placeholder = cell.coordinate in placeholder_cells
            if is_placeholder:
                record[column.id] = None
            else:
                record[column.id] = _read_value(ValueKind.for_column(column), cell.value)
        records.append(record)
    return records


def _read_value(kind: ValueKind, value: Any) -> Any:
    if kind is ValueKind.STRING:
        # Empty strings are stored as empty cells
        return "" if value is None else str(value)
    if value is None:
        return None
    if kind is ValueKind.DATE:
        return value.date() if isinstance(value, datetime) else value
    if kind is ValueKind.CURRENCY:
        return Decimal(str(value)).quantize(_CENTS)
    number = Decimal(str(value))
    return int(number) if number == number.to_integral_value() else number


def export_filename(
    report_type: ReportType,
    template_name: Optional[str] = None,
    today: Optional[date] = None,
) -> str:
    """``<slug>_<YYYY-MM-DD>.xlsx`` from the template name or the report type."""
    today = today or date.today()
    base = template_name or f"{ReportType(report_type).value}_report"
    slug = re.sub(r"[^a-z0-9]+", "_", base.lower()).strip("_") or "report"
    return f"{slug}_{today.isoformat()}.xlsx"
