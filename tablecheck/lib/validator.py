"""Streaming data validation against a consistency-checked schema.

Tables are validated one at a time, in schema order. For each table the
header is checked (arity, then names by position), a fixed pipeline of
row checks is built once, and rows are pulled from the source one at a
time and run through it:

1. cell count
2. per-cell type
3. not-null
4. primary-key uniqueness (only when a primary key is declared)

The header is row 1; the first data row is row 2. The first failing
check raises and ends the whole pass. Every cell, empty or not, goes
through its column's value validator, so an empty cell only reaches the
not-null check in columns whose type accepts the empty string.

Not enforced: uniqueness of non-primary ``unique_columns``, existence of
foreign-key values in the referenced table, and null-freedom of the
individual columns of a composite primary key.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Mapping, Tuple

from tablecheck.lib.errors import (
    CellTypeError,
    DuplicateKeyError,
    HeaderArityError,
    HeaderMismatchError,
    NullValueError,
    RowArityError,
    ValueTypeError,
)
from tablecheck.lib.keyset import CompositeKeySet
from tablecheck.lib.model import AnnotatedTableSpec
from tablecheck.lib.source import RowSource, TableRows
from tablecheck.lib.values import validator_for

logger = logging.getLogger(__name__)

__all__ = [
    "RowCheck",
    "ValidationSummary",
    "build_row_checks",
    "check_header",
    "validate_data",
    "validate_table",
]

# Receives (row_number, cells); raises a DataError on violation.
RowCheck = Callable[[int, List[str]], None]

FIRST_DATA_ROW = 2


@dataclass
class ValidationSummary:
    """Row counts per validated table."""

    rows_per_table: Dict[str, int] = field(default_factory=dict)

    @property
    def total_rows(self) -> int:
        return sum(self.rows_per_table.values())

    def __str__(self) -> str:
        return f"Validated {len(self.rows_per_table)} table(s), {self.total_rows} row(s)"


def check_header(table: AnnotatedTableSpec, header: List[str]) -> None:
    """Header must name the declared columns, in declared order."""
    if len(header) != len(table.columns):
        raise HeaderArityError(table.name, len(table.columns), len(header))
    for position, (column, found) in enumerate(zip(table.columns, header), 1):
        if column.name != found:
            raise HeaderMismatchError(table.name, position, column.name, found)


def _cell_count_check(table: AnnotatedTableSpec) -> RowCheck:
    expected = len(table.columns)

    def check(row_number: int, row: List[str]) -> None:
        if len(row) != expected:
            raise RowArityError(table.name, row_number, expected, len(row))

    return check


def _type_check(table: AnnotatedTableSpec) -> RowCheck:
    validators = [(column.name, validator_for(column.data_type)) for column in table.columns]

    def check(row_number: int, row: List[str]) -> None:
        for (name, validate), value in zip(validators, row):
            try:
                validate(value)
            except ValueTypeError as e:
                raise CellTypeError(table.name, row_number, name, e) from e

    return check


def _not_null_check(table: AnnotatedTableSpec) -> RowCheck:
    required = [(i, column.name) for i, column in enumerate(table.columns) if column.not_null]

    def check(row_number: int, row: List[str]) -> None:
        for index, name in required:
            if row[index] == "":
                raise NullValueError(table.name, row_number, name)

    return check


def _primary_key_check(table: AnnotatedTableSpec) -> RowCheck:
    indices = table.primary_key_indices
    seen = CompositeKeySet()

    def check(row_number: int, row: List[str]) -> None:
        key = tuple(row[i] for i in indices)
        if seen.exists(key):
            raise DuplicateKeyError(table.name, row_number, table.primary_key, key)
        seen.insert(key)

    return check


def build_row_checks(table: AnnotatedTableSpec) -> Tuple[RowCheck, ...]:
    """Build the fixed, ordered row-check pipeline for ``table``.

    The primary-key check owns a fresh ``CompositeKeySet``, so the
    pipeline must not be reused across passes.
    """
    checks = [_cell_count_check(table), _type_check(table), _not_null_check(table)]
    if table.primary_key is not None:
        checks.append(_primary_key_check(table))
    return tuple(checks)


def validate_table(table: AnnotatedTableSpec, rows: TableRows) -> int:
    """Validate one open table.

    Returns:
        Number of data rows checked

    Raises:
        DataError: On the first violation
    """
    check_header(table, rows.header)
    checks = build_row_checks(table)

    count = 0
    for row_number, row in enumerate(rows.rows, FIRST_DATA_ROW):
        for check in checks:
            check(row_number, row)
        count += 1
    return count


def validate_data(
    tables: Mapping[str, AnnotatedTableSpec],
    source: RowSource,
) -> ValidationSummary:
    """Validate every table's data, in order.

    Args:
        tables: Output of ``check_schema``
        source: Where to read each table from

    Returns:
        Per-table row counts

    Raises:
        SourceError: If a table cannot be opened or read
        DataError: On the first row-level violation
    """
    summary = ValidationSummary()
    for table in tables.values():
        logger.debug("Validating table '%s'", table.name)
        count = source.with_table(table.name, lambda rows: validate_table(table, rows))
        summary.rows_per_table[table.name] = count
        logger.debug("Table '%s' passed: %d row(s)", table.name, count)
    return summary
