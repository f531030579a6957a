"""Schema data model.

A schema is an ordered collection of tables. Each table declares typed
columns plus key constraints: an optional (possibly composite) primary
key, unique columns and foreign keys onto other tables' primary keys.

All model types are immutable; sequences are stored as tuples.

Example:
    schema = Schema([
        TableSpec(
            name="users",
            primary_key=Column.of("id"),
            columns=[
                ColumnSpec("id", DataType.integer(), not_null=True),
                ColumnSpec("name", DataType.string()),
            ],
        ),
    ])
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Iterator, List, Optional, Sequence, Tuple

from tablecheck.lib.errors import SchemaDefinitionError

__all__ = [
    "AnnotatedTableSpec",
    "Column",
    "ColumnSpec",
    "DataType",
    "ForeignKeyMapping",
    "Schema",
    "TableSpec",
    "TypeKind",
    "parse_data_type",
]


class TypeKind(Enum):
    """The closed set of supported cell types."""

    INT = "int"
    BOOL = "bool"
    STRING = "string"
    DATE = "date"


@dataclass(frozen=True)
class DataType:
    """A column data type.

    Dates carry a ``strptime`` format; two date types are equal only when
    their format strings are identical.
    """

    kind: TypeKind
    format: Optional[str] = None

    def __post_init__(self) -> None:
        if self.kind is TypeKind.DATE:
            if not self.format:
                raise ValueError("date types require a non-empty format")
        elif self.format is not None:
            raise ValueError(f"{self.kind.value} types do not take a format")

    @classmethod
    def integer(cls) -> "DataType":
        return cls(TypeKind.INT)

    @classmethod
    def boolean(cls) -> "DataType":
        return cls(TypeKind.BOOL)

    @classmethod
    def string(cls) -> "DataType":
        return cls(TypeKind.STRING)

    @classmethod
    def date(cls, fmt: str) -> "DataType":
        return cls(TypeKind.DATE, fmt)

    def __str__(self) -> str:
        if self.kind is TypeKind.DATE:
            return f"date({self.format})"
        return self.kind.value


def parse_data_type(text: str) -> DataType:
    """Parse the schema spelling of a type.

    Accepts ``int``, ``bool``, ``string`` and ``date(<format>)``.

    Raises:
        SchemaDefinitionError: If the text names no known type
    """
    simple = {
        "int": DataType.integer,
        "bool": DataType.boolean,
        "string": DataType.string,
    }
    if text in simple:
        return simple[text]()
    if text.startswith("date(") and text.endswith(")"):
        fmt = text[len("date(") : -len(")")]
        if fmt:
            return DataType.date(fmt)
    raise SchemaDefinitionError(f"Couldn't match type: '{text}'")


@dataclass(frozen=True)
class Column:
    """An ordered, non-empty sequence of column names.

    Represents a single column or a composite key. Equality is positional:
    ``('a', 'b')`` and ``('b', 'a')`` are different columns.
    """

    names: Tuple[str, ...]

    def __post_init__(self) -> None:
        names = tuple(self.names)
        if not names:
            raise ValueError("Composite columns must be at least one column long")
        object.__setattr__(self, "names", names)

    @classmethod
    def of(cls, *names: str) -> "Column":
        return cls(names)

    def __len__(self) -> int:
        return len(self.names)

    def __iter__(self) -> Iterator[str]:
        return iter(self.names)

    def __str__(self) -> str:
        if len(self.names) == 1:
            return f"'{self.names[0]}'"
        return "(" + ", ".join(f"'{name}'" for name in self.names) + ")"


@dataclass(frozen=True)
class ColumnSpec:
    """One physical column of a table."""

    name: str
    data_type: DataType
    not_null: bool = False


@dataclass(frozen=True)
class ForeignKeyMapping:
    """``local_column`` must match the primary key of ``foreign_table``."""

    local_column: Column
    foreign_table: str
    foreign_column: Column


@dataclass(frozen=True)
class TableSpec:
    """Declarative table definition."""

    name: str
    columns: Tuple[ColumnSpec, ...]
    primary_key: Optional[Column] = None
    unique_columns: Tuple[Column, ...] = ()
    foreign_keys: Tuple[ForeignKeyMapping, ...] = ()

    def __post_init__(self) -> None:
        object.__setattr__(self, "columns", tuple(self.columns))
        object.__setattr__(self, "unique_columns", tuple(self.unique_columns))
        object.__setattr__(self, "foreign_keys", tuple(self.foreign_keys))

    @property
    def column_names(self) -> List[str]:
        return [column.name for column in self.columns]


@dataclass(frozen=True)
class Schema:
    """An ordered sequence of tables."""

    tables: Tuple[TableSpec, ...] = field(default_factory=tuple)

    def __post_init__(self) -> None:
        object.__setattr__(self, "tables", tuple(self.tables))

    def __iter__(self) -> Iterator[TableSpec]:
        return iter(self.tables)

    def __len__(self) -> int:
        return len(self.tables)

    @property
    def table_names(self) -> List[str]:
        return [table.name for table in self.tables]

    def get(self, name: str) -> Optional[TableSpec]:
        """Return the first table called ``name``, if any."""
        return next((table for table in self.tables if table.name == name), None)


@dataclass(frozen=True)
class AnnotatedTableSpec:
    """A consistency-checked table with resolved primary-key positions.

    ``primary_key_indices`` holds, for each primary-key column name, its
    position within ``spec.columns``. Empty when the table has no primary key.
    """

    spec: TableSpec
    primary_key_indices: Tuple[int, ...] = ()

    @property
    def name(self) -> str:
        return self.spec.name

    @property
    def columns(self) -> Sequence[ColumnSpec]:
        return self.spec.columns

    @property
    def primary_key(self) -> Optional[Column]:
        return self.spec.primary_key
