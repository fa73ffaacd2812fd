"""Tests for summary row aggregation."""

from decimal import Decimal

import pytest

from washtrack.reporting.aggregator import summable_columns, summarize
from washtrack.reporting.rows import SummaryRow


class TestSummarize:
    """Tests for summarize."""

    def test_sum_treats_null_as_zero(self, row_factory):
        rows = [row_factory(total_revenue=v) for v in (10, 20, None, 30)]

        summary = summarize(rows, ["total_revenue"])

        assert summary["total_revenue"] == Decimal("60")

    @pytest.mark.parametrize(
        "columns",
        [
            ["total_revenue"],
            ["work_date", "vehicle_number", "quantity", "entry_count"],
            ["avg_entry_value", "total_revenue", "client_name"],
        ],
    )
    def test_empty_rows_yield_zeros(self, columns):
        summary = summarize([], columns)

        for column_id in summable_columns(columns):
            assert summary[column_id] == 0

    def test_non_summable_cells_are_blank(self, sample_rows):
        columns = ["work_date", "vehicle_number", "client_name", "total_revenue", "quantity"]

        summary = summarize(sample_rows, columns)

        assert isinstance(summary, SummaryRow)
        assert list(summary.keys()) == columns
        assert summary["work_date"] is None
        assert summary["client_name"] is None
        assert summary["total_revenue"] == Decimal("205.50")
        assert summary["quantity"] == Decimal("4.5")

    def test_count_counts_rows(self, row_factory):
        rows = [row_factory(entry_count=1) for _ in range(4)]

        assert summarize(rows, ["entry_count"])["entry_count"] == 4

    def test_average_uses_non_null_denominator(self, row_factory):
        rows = [
            row_factory(total_revenue=v, avg_entry_value=v, entry_count=1)
            for v in (10, 20, None, 30)
        ]

        summary = summarize(rows, ["total_revenue", "entry_count", "avg_entry_value"])

        assert summary["total_revenue"] == Decimal("60")
        assert summary["entry_count"] == 4
        # 60 over the three rows with a value, not over the four rows counted
        assert summary["avg_entry_value"] == Decimal("20")

    def test_average_of_all_null_is_zero(self, row_factory):
        rows = [row_factory(avg_entry_value=None) for _ in range(3)]

        assert summarize(rows, ["avg_entry_value"])["avg_entry_value"] == 0

    def test_summary_has_no_record_id(self, sample_rows):
        assert summarize(sample_rows, ["total_revenue"]).record_id is None

    def test_rows_are_not_modified(self, sample_rows):
        before = [row.to_dict() for row in sample_rows]

        summarize(sample_rows, ["total_revenue", "quantity"])

        assert [row.to_dict() for row in sample_rows] == before


def test_summable_columns():
    columns = ["work_date", "total_revenue", "client_name", "entry_count"]
    assert summable_columns(columns) == ["total_revenue", "entry_count"]
