"""Structured exception hierarchy for tablecheck.

Every failure surfaces as exactly one exception. Each carries enough
context (table, row, column, value) to locate the fault without
re-running, and renders as a single line suitable for a CLI diagnostic.
"""

from __future__ import annotations

from typing import Any, Dict, Optional, Sequence, TYPE_CHECKING

if TYPE_CHECKING:
    from tablecheck.lib.model import Column, DataType

__all__ = [
    "TableCheckError",
    "ConfigurationError",
    "SchemaDefinitionError",
    "SchemaError",
    "InvalidNameError",
    "EmptyTableError",
    "DuplicateTableError",
    "DuplicateColumnError",
    "UnresolvedColumnError",
    "ForeignKeyArityError",
    "UnresolvedTableError",
    "MissingPrimaryKeyError",
    "ForeignKeyTargetError",
    "ForeignKeyTypeError",
    "SourceError",
    "TableNotFoundError",
    "IllegalTableNameError",
    "SourceReadError",
    "ValueTypeError",
    "DataError",
    "HeaderArityError",
    "HeaderMismatchError",
    "RowArityError",
    "CellTypeError",
    "NullValueError",
    "DuplicateKeyError",
]


class TableCheckError(Exception):
    """Base exception for all tablecheck errors.

    Provides structured error information for debugging.
    """

    error_code: str = "TC000"

    def __init__(
        self,
        message: str,
        *,
        table: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
        suggestion: Optional[str] = None,
    ) -> None:
        self.message = message
        self.table = table
        self.details = details or {}
        self.suggestion = suggestion
        super().__init__(self._render())

    def location(self) -> Optional[str]:
        """Human-readable location of the fault, if known."""
        if self.table is None:
            return None
        return f"'{self.table}'"

    def _render(self) -> str:
        parts = [f"[{self.error_code}]"]
        location = self.location()
        if location:
            parts.append(f"{location}:")
        parts.append(self.message)
        if self.suggestion:
            parts.append(f"(hint: {self.suggestion})")
        return " ".join(parts)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for structured logging."""
        return {
            "error_type": self.__class__.__name__,
            "error_code": self.error_code,
            "message": self.message,
            "table": self.table,
            "details": self.details,
            "suggestion": self.suggestion,
        }


# ============================================
# Configuration
# ============================================


class ConfigurationError(TableCheckError):
    """Settings or command-line options are invalid."""

    error_code = "CFG001"

    def __init__(self, message: str, *, field: Optional[str] = None, **kwargs: Any) -> None:
        self.field = field
        details = kwargs.pop("details", {})
        if field:
            details["field"] = field
        super().__init__(message, details=details, **kwargs)


# ============================================
# Schema supply
# ============================================


class SchemaDefinitionError(TableCheckError):
    """A schema description could not be decoded.

    Raised by the schema front-ends (YAML/JSON documents, control files)
    for malformed input, including unknown type names.
    """

    error_code = "DEF001"

    def __init__(
        self,
        message: str,
        *,
        path: Optional[str] = None,
        field: Optional[str] = None,
        row: Optional[int] = None,
        **kwargs: Any,
    ) -> None:
        self.path = path
        self.field = field
        self.row = row

        details = kwargs.pop("details", {})
        if path:
            details["path"] = path
        if field:
            details["field"] = field
        if row is not None:
            details["row"] = row

        super().__init__(message, details=details, **kwargs)

    def location(self) -> Optional[str]:
        parts = []
        if self.path:
            parts.append(self.path)
        if self.row is not None:
            parts.append(f"row {self.row}")
        if self.field:
            parts.append(self.field)
        return " ".join(parts) or None


# ============================================
# Structural schema errors
# ============================================


class SchemaError(TableCheckError):
    """The schema itself is not well-formed."""

    error_code = "SCH000"


class InvalidNameError(SchemaError):
    """A table or column name is empty."""

    error_code = "SCH001"


class EmptyTableError(SchemaError):
    """A table declares no columns."""

    error_code = "SCH002"

    def __init__(self, table: str) -> None:
        super().__init__("Table declares no columns", table=table)


class DuplicateTableError(SchemaError):
    """Two tables in the schema share a name."""

    error_code = "SCH003"

    def __init__(self, table: str) -> None:
        super().__init__(f"Table name exists: '{table}'", table=table)


class DuplicateColumnError(SchemaError):
    """Two columns in a table share a name."""

    error_code = "SCH004"

    def __init__(self, table: str, column: str) -> None:
        self.column = column
        super().__init__(
            f"Column name exists: '{column}'",
            table=table,
            details={"column": column},
        )


class UnresolvedColumnError(SchemaError):
    """A key references a column that the table does not declare."""

    error_code = "SCH005"

    def __init__(
        self,
        table: str,
        column: str,
        role: str,
        *,
        owner: Optional[str] = None,
    ) -> None:
        self.column = column
        self.role = role
        self.owner = owner or table
        where = "the table" if self.owner == table else f"table '{self.owner}'"
        super().__init__(
            f"{role.capitalize()} column '{column}' is not declared in {where}",
            table=table,
            details={"column": column, "role": role, "owner": self.owner},
        )


class ForeignKeyArityError(SchemaError):
    """Local and foreign columns of a foreign key differ in length."""

    error_code = "SCH006"

    def __init__(self, table: str, local_column: "Column", foreign_column: "Column") -> None:
        super().__init__(
            f"Foreign key {local_column} has {len(local_column)} column(s) "
            f"but references {foreign_column} with {len(foreign_column)}",
            table=table,
        )


class UnresolvedTableError(SchemaError):
    """A foreign key references a table missing from the schema."""

    error_code = "SCH007"

    def __init__(self, table: str, foreign_table: str, local_column: "Column") -> None:
        self.foreign_table = foreign_table
        super().__init__(
            f"Foreign key {local_column} references table '{foreign_table}' "
            "but it is missing from the schema",
            table=table,
            details={"foreign_table": foreign_table},
        )


class MissingPrimaryKeyError(SchemaError):
    """A foreign key references a table without a primary key."""

    error_code = "SCH008"

    def __init__(self, table: str, foreign_table: str) -> None:
        self.foreign_table = foreign_table
        super().__init__(
            f"Foreign key references table '{foreign_table}' "
            "which declares no primary key",
            table=table,
            details={"foreign_table": foreign_table},
        )


class ForeignKeyTargetError(SchemaError):
    """A foreign key's foreign column is not exactly the foreign primary key."""

    error_code = "SCH009"

    def __init__(
        self,
        table: str,
        foreign_table: str,
        foreign_column: "Column",
        primary_key: "Column",
    ) -> None:
        self.foreign_table = foreign_table
        super().__init__(
            f"Foreign key references {foreign_column} in '{foreign_table}', "
            f"but that table's primary key is {primary_key}",
            table=table,
            details={"foreign_table": foreign_table},
            suggestion="foreign keys must name the primary key columns in declaration order",
        )


class ForeignKeyTypeError(SchemaError):
    """A foreign key pairs columns of different types."""

    error_code = "SCH010"

    def __init__(
        self,
        table: str,
        local_column: str,
        local_type: "DataType",
        foreign_table: str,
        foreign_column: str,
        foreign_type: "DataType",
    ) -> None:
        super().__init__(
            f"Column type mismatch: '{local_column}' is {local_type} "
            f"but '{foreign_table}'.'{foreign_column}' is {foreign_type}",
            table=table,
            details={
                "local_column": local_column,
                "foreign_table": foreign_table,
                "foreign_column": foreign_column,
            },
        )


# ============================================
# Row source errors
# ============================================


class SourceError(TableCheckError):
    """The row source could not supply a table."""

    error_code = "SRC000"


class TableNotFoundError(SourceError):
    """The named table cannot be located."""

    error_code = "SRC001"

    def __init__(self, table: str, *, path: Optional[str] = None) -> None:
        self.path = path
        message = "Table not found"
        if path:
            message = f"Table not found at {path}"
        super().__init__(message, table=table, details={"path": path} if path else None)


class IllegalTableNameError(SourceError):
    """The table name cannot be mapped to a location safely."""

    error_code = "SRC002"

    def __init__(self, table: str, reason: str) -> None:
        super().__init__(f"Illegal table identifier: {reason}", table=table)


class SourceReadError(SourceError):
    """The table was found but could not be read."""

    error_code = "SRC003"

    def __init__(
        self,
        table: str,
        message: str,
        *,
        line: Optional[int] = None,
        cause: Optional[Exception] = None,
    ) -> None:
        self.line = line
        self.cause = cause
        details: Dict[str, Any] = {}
        if line is not None:
            details["line"] = line
            message = f"line {line}: {message}"
        if cause is not None:
            details["cause"] = str(cause)
            details["cause_type"] = type(cause).__name__
        super().__init__(message, table=table, details=details)


# ============================================
# Row validation errors
# ============================================


class ValueTypeError(TableCheckError):
    """A raw cell value does not conform to its declared data type."""

    error_code = "VAL001"

    def __init__(self, data_type: "DataType", value: str, message: Optional[str] = None) -> None:
        self.data_type = data_type
        self.value = value
        super().__init__(
            message or f"Illegal value for type '{data_type}': '{value}'",
            details={"type": str(data_type), "value": value},
        )


class DataError(TableCheckError):
    """The data of a table violates the schema."""

    error_code = "DAT000"

    def __init__(
        self,
        message: str,
        *,
        table: str,
        row: Optional[int] = None,
        column: Optional[str] = None,
        **kwargs: Any,
    ) -> None:
        self.row = row
        self.column = column

        details = kwargs.pop("details", {})
        if row is not None:
            details["row"] = row
        if column is not None:
            details["column"] = column

        super().__init__(message, table=table, details=details, **kwargs)

    def location(self) -> Optional[str]:
        parts = [f"'{self.table}'"]
        if self.row is not None:
            parts.append(f"row {self.row}")
        if self.column is not None:
            parts.append(f"column '{self.column}'")
        return " ".join(parts)


class HeaderArityError(DataError):
    """The header has a different number of columns than the schema."""

    error_code = "DAT001"

    def __init__(self, table: str, expected: int, found: int) -> None:
        self.expected = expected
        self.found = found
        super().__init__(
            f"Column number mismatch; wanted {expected} columns, found {found}",
            table=table,
            row=1,
        )


class HeaderMismatchError(DataError):
    """A header name differs from the declared column at that position."""

    error_code = "DAT002"

    def __init__(self, table: str, position: int, expected: str, found: str) -> None:
        self.position = position
        self.expected = expected
        self.found = found
        super().__init__(
            f"Header mismatch at position {position}; wanted '{expected}', found '{found}'",
            table=table,
            row=1,
            details={"position": position},
            suggestion="header names must match the declared columns in order",
        )


class RowArityError(DataError):
    """A data row has the wrong number of cells."""

    error_code = "DAT003"

    def __init__(self, table: str, row: int, expected: int, found: int) -> None:
        self.expected = expected
        self.found = found
        super().__init__(
            f"Column count mismatch; wanted {expected} columns, found {found}",
            table=table,
            row=row,
        )


class CellTypeError(DataError):
    """A cell value does not conform to its column's type."""

    error_code = "DAT004"

    def __init__(self, table: str, row: int, column: str, cause: ValueTypeError) -> None:
        self.value = cause.value
        self.cause = cause
        super().__init__(
            cause.message,
            table=table,
            row=row,
            column=column,
            details={"value": cause.value, "type": str(cause.data_type)},
        )


class NullValueError(DataError):
    """A not-null column holds an empty cell."""

    error_code = "DAT005"

    def __init__(self, table: str, row: int, column: str) -> None:
        super().__init__(
            "Found null value in not-null column",
            table=table,
            row=row,
            column=column,
        )


class DuplicateKeyError(DataError):
    """A primary-key tuple occurs more than once."""

    error_code = "DAT006"

    def __init__(self, table: str, row: int, key_column: "Column", key: Sequence[str]) -> None:
        self.key_column = key_column
        self.key = tuple(key)
        super().__init__(
            f"Found duplicate primary key {key_column} value {self.key!r}",
            table=table,
            row=row,
            details={"key": list(self.key)},
        )
