"""Control-file schema front-end.

A control file describes a schema one column per row:

    table,column,not_null,unique,primary_key,type,references_table,references_column
    users,id,true,false,true,int,,
    users,name,false,false,false,string,,
    orders,id,true,false,true,int,,
    orders,user_id,false,false,false,int,users,id

The control file is itself checked with the regular two-phase validation
against a fixed metaschema before it is read. Rows are then lowered into
the canonical model:

- tables appear in first-appearance order, columns in row order
- columns flagged ``primary_key`` form the (possibly composite) primary
  key, in row order
- ``unique`` becomes a single-column unique constraint
- ``references_table`` + ``references_column`` becomes a single-column
  foreign key
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Union

from tablecheck.lib.errors import SchemaDefinitionError
from tablecheck.lib.model import (
    Column,
    ColumnSpec,
    DataType,
    ForeignKeyMapping,
    Schema,
    TableSpec,
    parse_data_type,
)
from tablecheck.lib.runner import check
from tablecheck.lib.source import FileSystemRowSource, TableRows

logger = logging.getLogger(__name__)

__all__ = [
    "CONTROL_FILE_COLUMNS",
    "CONTROL_FILE_NAME",
    "load_control_file",
    "metaschema",
]

CONTROL_FILE_NAME = "schema.csv"

CONTROL_FILE_COLUMNS = (
    ColumnSpec("table", DataType.string(), not_null=True),
    ColumnSpec("column", DataType.string(), not_null=True),
    ColumnSpec("not_null", DataType.boolean(), not_null=True),
    ColumnSpec("unique", DataType.boolean(), not_null=True),
    ColumnSpec("primary_key", DataType.boolean(), not_null=True),
    ColumnSpec("type", DataType.string(), not_null=True),
    ColumnSpec("references_table", DataType.string()),
    ColumnSpec("references_column", DataType.string()),
)

# Positions are fixed: the metaschema check enforces header order.
(
    _TABLE,
    _COLUMN,
    _NOT_NULL,
    _UNIQUE,
    _PRIMARY_KEY,
    _TYPE,
    _REFERENCES_TABLE,
    _REFERENCES_COLUMN,
) = range(len(CONTROL_FILE_COLUMNS))


def metaschema(file_name: str = CONTROL_FILE_NAME) -> Schema:
    """Schema that a control file called ``file_name`` must satisfy."""
    return Schema((TableSpec(name=file_name, columns=CONTROL_FILE_COLUMNS),))


@dataclass
class _TableBuilder:
    name: str
    columns: List[ColumnSpec] = field(default_factory=list)
    primary_key: List[str] = field(default_factory=list)
    unique_columns: List[Column] = field(default_factory=list)
    foreign_keys: List[ForeignKeyMapping] = field(default_factory=list)

    def build(self) -> TableSpec:
        return TableSpec(
            name=self.name,
            columns=tuple(self.columns),
            primary_key=Column(tuple(self.primary_key)) if self.primary_key else None,
            unique_columns=tuple(self.unique_columns),
            foreign_keys=tuple(self.foreign_keys),
        )


def _lower(rows: TableRows, path: str) -> Schema:
    builders: Dict[str, _TableBuilder] = {}
    for row_number, row in enumerate(rows.rows, 2):
        table_name, column_name = row[_TABLE], row[_COLUMN]
        builder = builders.setdefault(table_name, _TableBuilder(table_name))

        try:
            data_type = parse_data_type(row[_TYPE])
        except SchemaDefinitionError as e:
            raise SchemaDefinitionError(
                f"Error parsing column type: {e.message}",
                path=path,
                row=row_number,
                field="type",
            ) from e

        builder.columns.append(ColumnSpec(column_name, data_type, row[_NOT_NULL] == "true"))
        if row[_PRIMARY_KEY] == "true":
            builder.primary_key.append(column_name)
        if row[_UNIQUE] == "true":
            builder.unique_columns.append(Column.of(column_name))

        references_table, references_column = row[_REFERENCES_TABLE], row[_REFERENCES_COLUMN]
        if bool(references_table) != bool(references_column):
            raise SchemaDefinitionError(
                "references_table and references_column must be given together",
                path=path,
                row=row_number,
            )
        if references_table:
            builder.foreign_keys.append(
                ForeignKeyMapping(
                    Column.of(column_name),
                    references_table,
                    Column.of(references_column),
                )
            )

    return Schema(tuple(builder.build() for builder in builders.values()))


def load_control_file(
    path: Union[str, Path],
    *,
    delimiter: str = ",",
    encoding: str = "utf-8",
) -> Schema:
    """Load a schema from a control file.

    Args:
        path: The control file, or a directory containing ``schema.csv``

    Returns:
        The lowered Schema (not yet consistency-checked)

    Raises:
        TableCheckError: If the control file violates the metaschema
        SchemaDefinitionError: If a row cannot be lowered
    """
    path = Path(path)
    if path.is_dir():
        path = path / CONTROL_FILE_NAME

    source = FileSystemRowSource(
        path.parent,
        extension=path.suffix,
        delimiter=delimiter,
        encoding=encoding,
    )
    check(metaschema(path.name), source)

    schema = source.with_table(path.name, lambda rows: _lower(rows, str(path)))
    logger.debug("Loaded control file %s (%d tables)", path, len(schema))
    return schema
