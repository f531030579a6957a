"""Schema consistency checking.

Proves a schema is well-formed without reading any data, and annotates
each table with the positions of its primary-key columns so the data
validator never resolves names again.

Checks run fail-fast in a fixed order; the first violation raises:

1. Table names are non-empty and unique across the schema.
2. Per table, column names are non-empty and unique.
3. Primary-key columns resolve to declared columns.
4. Unique columns resolve to declared columns.
5. Foreign keys, in declaration order: equal arity, foreign table exists
   (anywhere in the schema), foreign table has a primary key, foreign
   column is exactly that primary key, all names resolve, and paired
   column types are equal.
"""

from __future__ import annotations

import logging
from typing import Dict, List, Mapping, Optional, Sequence, Tuple

from tablecheck.lib.errors import (
    DuplicateColumnError,
    DuplicateTableError,
    EmptyTableError,
    ForeignKeyArityError,
    ForeignKeyTargetError,
    ForeignKeyTypeError,
    InvalidNameError,
    MissingPrimaryKeyError,
    UnresolvedColumnError,
    UnresolvedTableError,
)
from tablecheck.lib.model import (
    AnnotatedTableSpec,
    Column,
    ColumnSpec,
    ForeignKeyMapping,
    Schema,
    TableSpec,
)

logger = logging.getLogger(__name__)

__all__ = ["check_schema", "find_column_index"]


def find_column_index(columns: Sequence[ColumnSpec], name: str) -> Optional[int]:
    """Return the position of the column called ``name``, or None."""
    return next((i for i, column in enumerate(columns) if column.name == name), None)


def check_schema(schema: Schema) -> Dict[str, AnnotatedTableSpec]:
    """Validate ``schema`` in isolation.

    Args:
        schema: Schema to check

    Returns:
        Annotated tables keyed by name, in schema order

    Raises:
        SchemaError: On the first structural violation
    """
    _check_table_names(schema)
    tables_by_name = {table.name: table for table in schema}

    annotated: Dict[str, AnnotatedTableSpec] = {}
    for table in schema:
        _check_column_names(table)
        indices = _resolve_primary_key(table)
        _check_unique_columns(table)
        for mapping in table.foreign_keys:
            _check_foreign_key(table, mapping, tables_by_name)
        annotated[table.name] = AnnotatedTableSpec(table, indices)
        logger.debug(
            "Table '%s' is consistent (%d columns, primary key %s)",
            table.name,
            len(table.columns),
            table.primary_key,
        )

    logger.debug("Schema is consistent: %d table(s)", len(annotated))
    return annotated


def _check_table_names(schema: Schema) -> None:
    seen = set()
    for table in schema:
        if not table.name:
            raise InvalidNameError("Invalid table name: ''")
        if table.name in seen:
            raise DuplicateTableError(table.name)
        seen.add(table.name)


def _check_column_names(table: TableSpec) -> None:
    if not table.columns:
        raise EmptyTableError(table.name)
    seen = set()
    for column in table.columns:
        if not column.name:
            raise InvalidNameError("Invalid column name: ''", table=table.name)
        if column.name in seen:
            raise DuplicateColumnError(table.name, column.name)
        seen.add(column.name)


def _resolve(
    table: TableSpec,
    column: Column,
    role: str,
    *,
    reported_by: Optional[str] = None,
) -> List[int]:
    """Resolve every name in ``column`` against ``table``'s declared columns."""
    indices: List[int] = []
    for name in column:
        index = find_column_index(table.columns, name)
        if index is None:
            raise UnresolvedColumnError(reported_by or table.name, name, role, owner=table.name)
        indices.append(index)
    return indices


def _resolve_primary_key(table: TableSpec) -> Tuple[int, ...]:
    if table.primary_key is None:
        return ()
    return tuple(_resolve(table, table.primary_key, "primary key"))


def _check_unique_columns(table: TableSpec) -> None:
    for unique in table.unique_columns:
        _resolve(table, unique, "unique")


def _check_foreign_key(
    table: TableSpec,
    mapping: ForeignKeyMapping,
    tables_by_name: Mapping[str, TableSpec],
) -> None:
    local_column, foreign_column = mapping.local_column, mapping.foreign_column

    if len(local_column) != len(foreign_column):
        raise ForeignKeyArityError(table.name, local_column, foreign_column)

    foreign = tables_by_name.get(mapping.foreign_table)
    if foreign is None:
        raise UnresolvedTableError(table.name, mapping.foreign_table, local_column)

    if foreign.primary_key is None:
        raise MissingPrimaryKeyError(table.name, foreign.name)

    if foreign_column != foreign.primary_key:
        raise ForeignKeyTargetError(table.name, foreign.name, foreign_column, foreign.primary_key)

    local_indices = _resolve(table, local_column, "foreign key local")
    foreign_indices = _resolve(foreign, foreign_column, "foreign key", reported_by=table.name)

    for local_index, foreign_index in zip(local_indices, foreign_indices):
        local_spec = table.columns[local_index]
        foreign_spec = foreign.columns[foreign_index]
        if local_spec.data_type != foreign_spec.data_type:
            raise ForeignKeyTypeError(
                table.name,
                local_spec.name,
                local_spec.data_type,
                foreign.name,
                foreign_spec.name,
                foreign_spec.data_type,
            )
