"""
Unit tests for the SQL fragment builders.

Tests SET clause construction for partial updates and WHERE clause
construction for list filters.
"""

import pytest

from models.errors import ErrorCode, ToolError
from utils.sql import (
    FilterKind,
    FilterRule,
    SqlClause,
    check_min_max,
    sql_for_filters,
    sql_for_partial_update,
    where_sql,
)

JOB_RULES = (
    FilterRule("title", "title", FilterKind.CONTAINS),
    FilterRule("minSalary", "salary", FilterKind.MIN),
    FilterRule("hasEquity", "equity", FilterKind.FLAG),
)

COMPANY_RULES = (
    FilterRule("name", "name", FilterKind.CONTAINS),
    FilterRule("minEmployees", "num_employees", FilterKind.MIN),
    FilterRule("maxEmployees", "num_employees", FilterKind.MAX),
)


class TestSqlForPartialUpdate:
    """Tests for sql_for_partial_update."""

    def test_translates_and_numbers_columns(self):
        """Translated and untranslated keys are numbered in order."""
        result = sql_for_partial_update(
            {"firstName": "Aliya", "age": 32}, {"firstName": "first_name"}
        )

        assert result.text == '"first_name"=$1, "age"=$2'
        assert result.values == ["Aliya", 32]

    def test_returns_named_tuple(self):
        result = sql_for_partial_update({"name": "x"})

        assert isinstance(result, SqlClause)
        text, values = result
        assert text == '"name"=$1'
        assert values == ["x"]

    def test_translation_miss_uses_key_verbatim(self):
        """Keys absent from the table are used unchanged, even camelCase."""
        result = sql_for_partial_update({"logoUrl": "http://a.io"}, {"numEmployees": "num_employees"})

        assert result.text == '"logoUrl"=$1'

    def test_without_translation_table(self):
        result = sql_for_partial_update({"title": "Dev", "salary": 10})

        assert result.text == '"title"=$1, "salary"=$2'

    def test_sqlite_placeholder(self):
        """The '?' prefix yields SQLite numbered parameters."""
        result = sql_for_partial_update(
            {"name": "Acme", "numEmployees": 5}, {"numEmployees": "num_employees"}, placeholder="?"
        )

        assert result.text == '"name"=?1, "num_employees"=?2'
        assert result.values == ["Acme", 5]

    def test_preserves_none_values(self):
        """A None value still gets its own placeholder (sets the column NULL)."""
        result = sql_for_partial_update({"logoUrl": None, "name": "Acme"}, {"logoUrl": "logo_url"})

        assert result.text == '"logo_url"=$1, "name"=$2'
        assert result.values == [None, "Acme"]

    def test_empty_data_raises(self):
        with pytest.raises(ToolError) as exc_info:
            sql_for_partial_update({}, {"firstName": "first_name"})

        assert exc_info.value.code == ErrorCode.VALIDATION_ERROR
        assert exc_info.value.message == "No data"

    def test_values_follow_insertion_order(self):
        data = {"c": 3, "a": 1, "b": 2}

        result = sql_for_partial_update(data)

        assert result.text == '"c"=$1, "a"=$2, "b"=$3'
        assert result.values == [3, 1, 2]


class TestSqlForFilters:
    """Tests for sql_for_filters."""

    def test_no_filters_returns_empty_clause(self):
        assert sql_for_filters({}, JOB_RULES) == SqlClause("", [])
        assert sql_for_filters(None, JOB_RULES) == SqlClause("", [])

    def test_single_contains_filter(self):
        result = sql_for_filters({"title": "eng"}, JOB_RULES)

        assert result.text == "title ILIKE $1"
        assert result.values == ["%eng%"]

    def test_all_filters_are_combined(self):
        """Every supplied filter applies, not just the first one."""
        result = sql_for_filters({"minSalary": 50, "title": "eng"}, JOB_RULES)

        assert result.text == "salary >= $1 AND title ILIKE $2"
        assert result.values == [50, "%eng%"]

    def test_flag_takes_no_parameter(self):
        """A flag predicate does not consume a placeholder index."""
        result = sql_for_filters(
            {"title": "eng", "hasEquity": True, "minSalary": 100}, JOB_RULES
        )

        assert result.text == "title ILIKE $1 AND equity <> 0 AND salary >= $2"
        assert result.values == ["%eng%", 100]

    def test_false_flag_applies_nothing(self):
        result = sql_for_filters({"hasEquity": False}, JOB_RULES)

        assert result.text == ""
        assert result.values == []

    def test_none_values_are_skipped(self):
        result = sql_for_filters({"title": None, "minSalary": 10}, JOB_RULES)

        assert result.text == "salary >= $1"
        assert result.values == [10]

    def test_min_and_max_bounds(self):
        result = sql_for_filters(
            {"minEmployees": 10, "maxEmployees": 100},
            COMPANY_RULES,
            min_key="minEmployees",
            max_key="maxEmployees",
        )

        assert result.text == "num_employees >= $1 AND num_employees <= $2"
        assert result.values == [10, 100]

    def test_equal_bounds_are_allowed(self):
        result = sql_for_filters(
            {"minEmployees": 10, "maxEmployees": 10},
            COMPANY_RULES,
            min_key="minEmployees",
            max_key="maxEmployees",
        )

        assert result.values == [10, 10]

    def test_min_greater_than_max_raises(self):
        with pytest.raises(ToolError) as exc_info:
            sql_for_filters(
                {"minEmployees": 100, "maxEmployees": 10},
                COMPANY_RULES,
                min_key="minEmployees",
                max_key="maxEmployees",
            )

        assert exc_info.value.code == ErrorCode.VALIDATION_ERROR
        assert exc_info.value.message == "Invalid min/max range"

    def test_range_check_runs_before_any_predicate(self):
        """An inverted range fails even when other filters are valid."""
        with pytest.raises(ToolError):
            sql_for_filters(
                {"name": "acme", "minEmployees": 5, "maxEmployees": 1},
                COMPANY_RULES,
                min_key="minEmployees",
                max_key="maxEmployees",
            )

    def test_unknown_filter_raises(self):
        with pytest.raises(ToolError) as exc_info:
            sql_for_filters({"title": "eng", "color": "red"}, JOB_RULES)

        assert exc_info.value.code == ErrorCode.VALIDATION_ERROR
        assert exc_info.value.message == "Invalid filter: color"

    def test_exclusive_minimum(self):
        rules = (FilterRule("minSalary", "salary", FilterKind.MIN_EXCLUSIVE),)

        result = sql_for_filters({"minSalary": 0}, rules)

        assert result.text == "salary > $1"
        assert result.values == [0]

    def test_sqlite_style(self):
        result = sql_for_filters(
            {"name": "net", "maxEmployees": 3},
            COMPANY_RULES,
            placeholder="?",
            like_operator="LIKE",
        )

        assert result.text == "name LIKE ?1 AND num_employees <= ?2"
        assert result.values == ["%net%", 3]

    def test_case_fold_and_escape_clause(self):
        result = sql_for_filters(
            {"name": "net"},
            COMPANY_RULES,
            placeholder="?",
            like_operator="LIKE",
            case_fold="casefold",
            like_escape=True,
        )

        assert result.text == "casefold(name) LIKE casefold(?1) ESCAPE '\\'"
        assert result.values == ["%net%"]

    def test_contains_value_wildcards_are_escaped(self):
        result = sql_for_filters({"title": "50%_off\\"}, JOB_RULES)

        assert result.values == ["%50\\%\\_off\\\\%"]

    def test_zero_bound_is_applied(self):
        """0 is a real bound, not a missing one."""
        result = sql_for_filters({"minSalary": 0}, JOB_RULES)

        assert result.text == "salary >= $1"
        assert result.values == [0]


class TestCheckMinMax:
    """Tests for check_min_max."""

    def test_ignores_missing_keys(self):
        check_min_max({"min": 5}, "min", "max")
        check_min_max({"min": 5, "max": 1}, None, None)

    def test_rejects_inverted_range(self):
        with pytest.raises(ToolError):
            check_min_max({"min": 5, "max": 1}, "min", "max")


class TestWhereSql:
    """Tests for where_sql."""

    def test_empty_clause_has_no_keyword(self):
        assert where_sql(SqlClause("", [])) == ""

    def test_clause_gets_where_keyword(self):
        assert where_sql(SqlClause("a = $1", [1])) == "WHERE a = $1"
