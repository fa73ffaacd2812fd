"""Tests for report configurations and their transformations."""

import dataclasses

import pytest

from washtrack.exceptions import InvalidConfigurationError, ValidationError
from washtrack.reporting.columns import ReportType, registry
from washtrack.reporting.configuration import (
    DEFAULT_SORT,
    ReportConfiguration,
    SortDirection,
    SortKey,
    add_column,
    default_configuration,
    move_column,
    remove_column,
    set_columns,
    set_sort,
    validate_configuration,
)
from washtrack.reporting.filters import FilterPredicate


@pytest.fixture
def config():
    return default_configuration(ReportType.WORK_ENTRIES)


class TestReportConfiguration:
    """Tests for construction invariants."""

    def test_default_configuration(self, config):
        assert config.report_type is ReportType.WORK_ENTRIES
        assert config.columns == registry.default_columns(ReportType.WORK_ENTRIES)
        assert config.filters == ()
        assert config.sort == DEFAULT_SORT
        assert config.sort.direction is SortDirection.DESC
        assert config.version == 0

    def test_is_immutable(self, config):
        with pytest.raises(dataclasses.FrozenInstanceError):
            config.columns = ()

    def test_rejects_duplicate_columns(self):
        with pytest.raises(ValidationError, match="Duplicate"):
            ReportConfiguration("work_entries", ("work_date", "work_date"))

    def test_rejects_two_filters_on_one_field(self):
        with pytest.raises(ValidationError):
            ReportConfiguration(
                ReportType.WORK_ENTRIES,
                ("work_date", "vehicle_number"),
                filters=(
                    FilterPredicate("client_name", "equals", "Acme"),
                    FilterPredicate("client_name", "equals", "Blue"),
                ),
            )

    def test_requires_exactly_one_sort_key(self):
        with pytest.raises(ValidationError):
            ReportConfiguration(ReportType.WORK_ENTRIES, ("work_date",), sorting=())

    def test_unknown_report_type(self):
        with pytest.raises(ValidationError):
            ReportConfiguration("payroll", ("work_date",))

    def test_unknown_sort_direction(self):
        with pytest.raises(ValidationError):
            SortKey("work_date", "sideways")


class TestValidateConfiguration:
    """Tests for registry validation."""

    def test_valid_default(self, config):
        assert validate_configuration(config) is config

    def test_missing_required_column(self):
        config = ReportConfiguration(ReportType.WORK_ENTRIES, ("work_date", "client_name"))

        with pytest.raises(ValidationError, match="vehicle_number"):
            validate_configuration(config)

    def test_unknown_column(self):
        config = ReportConfiguration(
            ReportType.WORK_ENTRIES, ("work_date", "vehicle_number", "mystery")
        )

        with pytest.raises(InvalidConfigurationError):
            validate_configuration(config)

    def test_filter_only_field_not_selectable(self):
        config = ReportConfiguration(
            ReportType.WORK_ENTRIES, ("work_date", "vehicle_number", "client_id")
        )

        with pytest.raises(ValidationError):
            validate_configuration(config)

    def test_column_not_offered_for_report_type(self):
        config = ReportConfiguration(
            ReportType.EMPLOYEE_PERFORMANCE, ("work_date", "vehicle_number", "rate_per_wash")
        )

        with pytest.raises(ValidationError):
            validate_configuration(config)

    def test_sort_on_count_column_rejected(self, config):
        config = dataclasses.replace(config, sorting=(SortKey("entry_count"),))

        with pytest.raises(ValidationError):
            validate_configuration(config)


class TestColumnTransformations:
    """Tests for column add / remove / move / set."""

    def test_add_column(self, config):
        updated = add_column(config, "notes")

        assert updated.columns[-1] == "notes"
        assert updated.version == 1
        assert "notes" not in config.columns

    def test_add_existing_column_is_noop(self, config):
        assert add_column(config, "work_date") is config

    def test_add_filter_only_column_rejected(self, config):
        with pytest.raises(ValidationError):
            add_column(config, "employee_id")

    def test_remove_column(self, config):
        updated = remove_column(config, "client_name")
        assert "client_name" not in updated.columns

    def test_remove_required_column_rejected(self, config):
        with pytest.raises(ValidationError, match="required"):
            remove_column(config, "vehicle_number")

    def test_move_column(self, config):
        updated = move_column(config, "employee_name", 0)

        assert updated.columns[0] == "employee_name"
        assert sorted(updated.columns) == sorted(config.columns)

    def test_move_column_clamps_index(self, config):
        updated = move_column(config, "work_date", 99)
        assert updated.columns[-1] == "work_date"

    def test_move_unselected_column(self, config):
        with pytest.raises(ValidationError):
            move_column(config, "notes", 0)

    def test_set_columns_prepends_required(self, config):
        updated = set_columns(config, ["client_name", "notes"])

        assert updated.columns == ("work_date", "vehicle_number", "client_name", "notes")

    def test_set_columns_rejects_duplicates(self, config):
        with pytest.raises(ValidationError):
            set_columns(config, ["notes", "notes"])

    def test_set_columns_superset_of_required(self, config):
        for selection in (["notes"], ["vehicle_number"], ["client_name", "work_date"]):
            updated = set_columns(config, selection)
            assert set(registry.required_ids(config.report_type)) <= set(updated.columns)
            assert len(updated.columns) == len(set(updated.columns))


class TestSetSort:
    """Tests for set_sort."""

    def test_set_sort_replaces_key(self, config):
        updated = set_sort(config, "client_name", "asc")

        assert updated.sorting == (SortKey("client_name", SortDirection.ASC),)
        assert updated.version == config.version + 1

    def test_set_same_sort_is_noop(self, config):
        assert set_sort(config, "work_date", SortDirection.DESC) is config

    def test_set_sort_unknown_field(self, config):
        with pytest.raises(InvalidConfigurationError):
            set_sort(config, "mystery")
