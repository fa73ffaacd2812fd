"""Tests for QueryTranslator statement construction."""

import uuid
from datetime import date

import pytest
from sqlalchemy.dialects import postgresql

from washtrack.exceptions import InvalidConfigurationError, ValidationError
from washtrack.reporting.columns import (
    ColumnDefinition,
    ColumnRegistry,
    ColumnType,
    Computation,
    ComputationKind,
    ReportType,
)
from washtrack.reporting.configuration import (
    ReportConfiguration,
    default_configuration,
    set_columns,
    set_sort,
)
from washtrack.reporting.filters import set_filter
from washtrack.reporting.query import RECORD_ID_LABEL, QueryTranslator


def compile_pg(stmt):
    return stmt.compile(dialect=postgresql.dialect())


@pytest.fixture
def translator():
    return QueryTranslator()


@pytest.fixture
def config():
    return set_columns(
        default_configuration(ReportType.WORK_ENTRIES),
        ["work_date", "vehicle_number", "client_name"],
    )


class TestTranslateColumns:
    """Tests for selected columns and joins."""

    def test_labels_follow_configuration_order(self, translator, config):
        stmt = translator.translate(config)

        labels = [c.key for c in stmt.selected_columns]
        assert labels == [RECORD_ID_LABEL, "work_date", "vehicle_number", "client_name"]

    def test_one_outer_join_per_path_prefix(self, translator):
        config = set_columns(
            default_configuration(ReportType.CLIENT_BILLING),
            ["vehicle_number", "client_name", "rate_per_wash"],
        )

        sql = str(compile_pg(translator.translate(config)))

        # vehicle, vehicle.client, vehicle.vehicle_type
        assert sql.count("LEFT OUTER JOIN") == 3
        assert "JOIN vehicles AS vehicle" in sql
        assert "JOIN clients AS vehicle_client" in sql
        assert "JOIN vehicle_types AS vehicle_vehicle_type" in sql
        assert " INNER JOIN " not in sql

    def test_no_joins_for_root_columns(self, translator):
        config = ReportConfiguration(ReportType.WORK_ENTRIES, ("work_date", "vehicle_number"))
        config = set_columns(config, ["quantity"])

        sql = str(compile_pg(translator.translate(config)))

        # vehicle_number is required and always joins the vehicle
        assert sql.count("LEFT OUTER JOIN") == 1

    def test_average_column_reads_its_numerator(self):
        columns = [
            ColumnDefinition("work_date", "Date", "work_date", ColumnType.DATE, required=True),
            ColumnDefinition("total_revenue", "Total Revenue ($)", "final_amount", ColumnType.CURRENCY),
            ColumnDefinition(
                "avg_value",
                "Average ($)",
                "quantity",
                ColumnType.CURRENCY,
                summable=True,
                computation=Computation(ComputationKind.AVERAGE, numerator="total_revenue"),
            ),
        ]
        translator = QueryTranslator(ColumnRegistry(columns))
        config = ReportConfiguration(ReportType.WORK_ENTRIES, ("work_date", "avg_value"))

        sql = str(compile_pg(translator.translate(config)))

        assert "work_entries.final_amount AS avg_value" in sql
        assert "quantity" not in sql

    def test_count_column_is_literal_one(self, translator):
        config = set_columns(default_configuration(ReportType.REVENUE_ANALYSIS), ["entry_count"])

        stmt = translator.translate(config)
        compiled = compile_pg(stmt)

        assert "entry_count" in [c.key for c in stmt.selected_columns]
        assert 1 in compiled.params.values()

    def test_unknown_column_rejected(self, translator):
        config = ReportConfiguration(
            ReportType.WORK_ENTRIES, ("work_date", "vehicle_number", "mystery")
        )

        with pytest.raises(InvalidConfigurationError):
            translator.translate(config)


class TestTranslateFilters:
    """Tests for WHERE clause translation."""

    def test_equals(self, translator, config):
        config = set_filter(config, "client_name", "equals", "Acme")

        compiled = compile_pg(translator.translate(config))

        assert "vehicle_client.client_name = " in str(compiled)
        assert "Acme" in compiled.params.values()

    def test_in(self, translator, config):
        config = set_filter(config, "client_name", "in", ["Acme", "Blue"])

        sql = str(compile_pg(translator.translate(config)))

        assert "vehicle_client.client_name IN" in sql

    def test_between_dates(self, translator, config):
        config = set_filter(config, "work_date", "between", ["2024-01-01", "2024-01-07"])

        compiled = compile_pg(translator.translate(config))

        assert "work_entries.work_date BETWEEN" in str(compiled)
        assert date(2024, 1, 1) in compiled.params.values()
        assert date(2024, 1, 7) in compiled.params.values()

    def test_relative_range_resolved_against_today(self, translator, config):
        config = set_filter(config, "work_date", "between", "current_month")

        compiled = compile_pg(translator.translate(config, today=date(2024, 2, 10)))

        assert date(2024, 2, 1) in compiled.params.values()
        assert date(2024, 2, 29) in compiled.params.values()

    def test_filter_on_unselected_field_adds_join(self, translator):
        config = default_configuration(ReportType.WORK_ENTRIES)
        config = set_columns(config, [])
        config = set_filter(config, "employee_code", "equals", "E-7")

        sql = str(compile_pg(translator.translate(config)))

        assert "JOIN employees AS employee" in sql

    def test_foreign_key_filter_binds_uuid(self, translator, config):
        client_id = uuid.uuid4()
        config = set_filter(config, "client_id", "in", [str(client_id)])

        compiled = compile_pg(translator.translate(config))

        assert "vehicle.client_id IN" in str(compiled)
        values = compiled.params.values()
        assert any(v == [client_id] or v == client_id for v in values)

    def test_foreign_key_filter_rejects_garbage(self, translator, config):
        config = set_filter(config, "location_id", "equals", "not-a-uuid")

        with pytest.raises(ValidationError):
            translator.translate(config)


class TestTranslateOrdering:
    """Tests for ORDER BY and LIMIT."""

    def test_sort_then_stable_tie_break(self, translator, config):
        sql = str(compile_pg(translator.translate(config)))
        order_by = sql.split("ORDER BY", 1)[1]

        assert "work_entries.work_date DESC NULLS LAST" in order_by
        assert order_by.index("work_date") < order_by.index("work_entries.id ASC")

    def test_sort_on_joined_column(self, translator, config):
        config = set_sort(config, "client_name", "asc")

        order_by = str(compile_pg(translator.translate(config))).split("ORDER BY", 1)[1]

        assert "vehicle_client.client_name ASC" in order_by

    def test_limit(self, translator, config):
        compiled = compile_pg(translator.translate(config, limit=51))

        assert "LIMIT" in str(compiled)
        assert 51 in compiled.params.values()

    def test_no_limit_by_default(self, translator, config):
        assert "LIMIT" not in str(compile_pg(translator.translate(config)))


class TestTranslateCount:
    """Tests for the count statement."""

    def test_count_applies_filters(self, translator, config):
        config = set_filter(config, "client_name", "equals", "Acme")

        sql = str(compile_pg(translator.translate_count(config)))

        assert sql.startswith("SELECT count(work_entries.id)")
        assert "vehicle_client.client_name = " in sql
        assert "ORDER BY" not in sql

    def test_count_without_filters_has_no_joins(self, translator, config):
        sql = str(compile_pg(translator.translate_count(config)))
        assert "JOIN" not in sql
