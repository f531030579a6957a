"""Tests for tablecheck.lib.validator."""

import pytest

from tablecheck.lib.consistency import check_schema
from tablecheck.lib.errors import (
    CellTypeError,
    DuplicateKeyError,
    HeaderArityError,
    HeaderMismatchError,
    NullValueError,
    RowArityError,
    TableNotFoundError,
)
from tablecheck.lib.model import Column, ColumnSpec, DataType, Schema, TableSpec
from tablecheck.lib.source import MemoryRowSource, TableRows
from tablecheck.lib.validator import (
    ValidationSummary,
    build_row_checks,
    check_header,
    validate_data,
    validate_table,
)


def annotate(spec):
    return check_schema(Schema([spec]))[spec.name]


def rows_of(name, header, *rows):
    return TableRows(name=name, header=list(header), rows=iter([list(r) for r in rows]))


@pytest.fixture
def users(users_table):
    return annotate(users_table)


@pytest.fixture
def pairs():
    """pairs(a int, b string, note string) with composite key (a, b)."""
    return annotate(
        TableSpec(
            name="pairs",
            primary_key=Column.of("a", "b"),
            columns=[
                ColumnSpec("a", DataType.integer()),
                ColumnSpec("b", DataType.string()),
                ColumnSpec("note", DataType.string()),
            ],
        )
    )


class TestCheckHeader:
    """Tests for header validation."""

    def test_matching_header(self, users):
        """Declared names in declared order pass."""
        check_header(users, ["id", "name"])

    def test_arity_checked_first(self, users):
        """A short header fails on arity, not names."""
        with pytest.raises(HeaderArityError) as exc_info:
            check_header(users, ["name"])
        assert exc_info.value.expected == 2
        assert exc_info.value.found == 1
        assert exc_info.value.row == 1

    def test_arity_message(self, users):
        """The message reports wanted and found counts."""
        with pytest.raises(HeaderArityError, match="wanted 2 columns, found 3"):
            check_header(users, ["id", "name", "email"])

    def test_reordered_header(self, users):
        """Header names are compared by position."""
        with pytest.raises(HeaderMismatchError) as exc_info:
            check_header(users, ["name", "id"])
        assert exc_info.value.position == 1
        assert exc_info.value.expected == "id"
        assert exc_info.value.found == "name"

    def test_names_are_case_sensitive(self, users):
        """Case differences are mismatches."""
        with pytest.raises(HeaderMismatchError):
            check_header(users, ["id", "Name"])


class TestValidateTable:
    """Tests for row validation of a single table."""

    def test_valid_rows_counted(self, users):
        """Returns the number of data rows."""
        rows = rows_of("users", ["id", "name"], ["1", "Alice"], ["2", "Bob"])
        assert validate_table(users, rows) == 2

    def test_header_only(self, users):
        """A header-only table is valid with zero rows."""
        assert validate_table(users, rows_of("users", ["id", "name"])) == 0

    def test_row_arity(self, users):
        """Rows must have one cell per column."""
        rows = rows_of("users", ["id", "name"], ["1", "Alice"], ["2"])
        with pytest.raises(RowArityError) as exc_info:
            validate_table(users, rows)
        assert exc_info.value.row == 3
        assert exc_info.value.found == 1

    def test_type_error_located(self, users):
        """Type errors name the row, column and value."""
        rows = rows_of("users", ["id", "name"], ["abc", "Alice"])
        with pytest.raises(CellTypeError) as exc_info:
            validate_table(users, rows)
        error = exc_info.value
        assert error.table == "users"
        assert error.row == 2
        assert error.column == "id"
        assert error.value == "abc"
        assert "Illegal value for type 'int': 'abc'" in str(error)

    def test_null_in_not_null_column(self):
        """Empty cells in not-null string columns fail the not-null check."""
        table = annotate(
            TableSpec(
                name="tags",
                columns=[
                    ColumnSpec("id", DataType.integer()),
                    ColumnSpec("label", DataType.string(), not_null=True),
                ],
            )
        )
        with pytest.raises(NullValueError) as exc_info:
            validate_table(table, rows_of("tags", ["id", "label"], ["1", "red"], ["2", ""]))
        assert exc_info.value.column == "label"
        assert exc_info.value.row == 3

    def test_empty_string_in_nullable_string_column(self, users):
        """Nullable string columns accept empty cells."""
        assert validate_table(users, rows_of("users", ["id", "name"], ["1", ""])) == 1

    @pytest.mark.parametrize(
        "data_type",
        [DataType.integer(), DataType.boolean(), DataType.date("%Y-%m-%d")],
    )
    def test_empty_cell_fails_typed_nullable_column(self, data_type):
        """Empty cells still go through the column's value validator."""
        table = annotate(TableSpec(name="events", columns=[ColumnSpec("value", data_type)]))
        with pytest.raises(CellTypeError) as exc_info:
            validate_table(table, rows_of("events", ["value"], [""]))
        assert exc_info.value.value == ""
        assert exc_info.value.row == 2

    def test_empty_cell_in_not_null_int_is_a_type_error(self, users):
        """The type check runs before the not-null check."""
        rows = rows_of("users", ["id", "name"], ["", "Alice"])
        with pytest.raises(CellTypeError) as exc_info:
            validate_table(users, rows)
        assert exc_info.value.column == "id"

    def test_duplicate_primary_key(self, users):
        """The second occurrence of a key fails."""
        rows = rows_of("users", ["id", "name"], ["1", "Alice"], ["1", "Bob"])
        with pytest.raises(DuplicateKeyError) as exc_info:
            validate_table(users, rows)
        assert exc_info.value.row == 3
        assert exc_info.value.key == ("1",)
        assert "Found duplicate primary key 'id' value ('1',)" in str(exc_info.value)

    def test_key_comparison_is_textual(self, users):
        """Keys compare as raw strings, so 1 and 01 differ."""
        rows = rows_of("users", ["id", "name"], ["1", "Alice"], ["01", "Bob"])
        assert validate_table(users, rows) == 2

    def test_composite_key_distinct_tuples(self, pairs):
        """Tuples sharing one component are distinct."""
        rows = rows_of("pairs", ["a", "b", "note"], ["1", "x", ""], ["1", "y", ""], ["2", "x", ""])
        assert validate_table(pairs, rows) == 3

    def test_composite_key_duplicate(self, pairs):
        """A repeated composite tuple fails."""
        rows = rows_of("pairs", ["a", "b", "note"], ["1", "x", "first"], ["1", "x", "second"])
        with pytest.raises(DuplicateKeyError) as exc_info:
            validate_table(pairs, rows)
        assert exc_info.value.key == ("1", "x")

    def test_check_order_type_before_null(self, users):
        """The first failing check in pipeline order wins."""
        table = annotate(
            TableSpec(
                name="t",
                columns=[
                    ColumnSpec("a", DataType.string(), not_null=True),
                    ColumnSpec("b", DataType.integer()),
                ],
            )
        )
        with pytest.raises(CellTypeError):
            validate_table(table, rows_of("t", ["a", "b"], ["", "x"]))

    def test_stops_at_first_failure(self, users):
        """Rows after the first failure are never pulled."""
        pulled = []

        def rows():
            for row in (["1", "a"], ["x", "b"], ["3", "c"]):
                pulled.append(row[0])
                yield row

        with pytest.raises(CellTypeError):
            validate_table(users, TableRows("users", ["id", "name"], rows()))
        assert pulled == ["1", "x"]


class TestBuildRowChecks:
    """Tests for build_row_checks."""

    def test_no_key_check_without_primary_key(self):
        """Tables without a primary key get three checks."""
        table = annotate(TableSpec(name="t", columns=[ColumnSpec("a", DataType.string())]))
        assert len(build_row_checks(table)) == 3

    def test_key_check_with_primary_key(self, users):
        """Tables with a primary key get four checks."""
        assert len(build_row_checks(users)) == 4

    def test_fresh_key_set_per_pipeline(self, users):
        """Each pipeline starts with an empty key set."""
        for _ in range(2):
            checks = build_row_checks(users)
            for check in checks:
                check(2, ["1", "Alice"])


class TestValidateData:
    """Tests for validate_data."""

    def test_summary(self, shop_schema):
        """Counts rows per table."""
        source = MemoryRowSource(
            {
                "users": [["id", "name"], ["1", "Alice"], ["2", "Bob"]],
                "orders": [["id", "user_id", "placed_on"], ["10", "1", "2024-01-31"]],
            }
        )
        summary = validate_data(check_schema(shop_schema), source)
        assert summary.rows_per_table == {"users": 2, "orders": 1}
        assert summary.total_rows == 3
        assert str(summary) == "Validated 2 table(s), 3 row(s)"

    def test_tables_opened_in_schema_order(self, shop_schema):
        """Tables are validated one at a time, in order."""
        source = MemoryRowSource(
            {
                "users": [["id", "name"]],
                "orders": [["id", "user_id", "placed_on"]],
            }
        )
        validate_data(check_schema(shop_schema), source)
        assert source.opened == ["users", "orders"]
        assert source.closed == ["users", "orders"]

    def test_failure_releases_table(self, users_schema):
        """A failing table is closed before the error propagates."""
        source = MemoryRowSource({"users": [["id", "name"], ["x", "Alice"]]})
        with pytest.raises(CellTypeError):
            validate_data(check_schema(users_schema), source)
        assert source.closed == ["users"]

    def test_missing_table(self, users_schema):
        """A table missing from the source fails."""
        with pytest.raises(TableNotFoundError):
            validate_data(check_schema(users_schema), MemoryRowSource({}))

    def test_failure_stops_later_tables(self, shop_schema):
        """Later tables are not opened after a failure."""
        source = MemoryRowSource(
            {
                "users": [["id", "name"], ["1", "Alice"], ["1", "Bob"]],
                "orders": [["id", "user_id", "placed_on"]],
            }
        )
        with pytest.raises(DuplicateKeyError):
            validate_data(check_schema(shop_schema), source)
        assert source.opened == ["users"]

    def test_empty_summary(self):
        """An empty summary has zero rows."""
        assert ValidationSummary().total_rows == 0
