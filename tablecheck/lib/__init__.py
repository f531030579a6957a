"""tablecheck library modules.

This package contains the schema model, the consistency checker, the
streaming data validator and the schema front-ends.
"""

from tablecheck.lib.consistency import check_schema, find_column_index
from tablecheck.lib.control_file import load_control_file, metaschema
from tablecheck.lib.errors import (
    DataError,
    SchemaDefinitionError,
    SchemaError,
    SourceError,
    TableCheckError,
    ValueTypeError,
)
from tablecheck.lib.keyset import CompositeKeySet
from tablecheck.lib.model import (
    AnnotatedTableSpec,
    Column,
    ColumnSpec,
    DataType,
    ForeignKeyMapping,
    Schema,
    TableSpec,
    TypeKind,
    parse_data_type,
)
from tablecheck.lib.runner import check, check_directory
from tablecheck.lib.schema_loader import load_schema, load_schema_document, load_schema_from_dict
from tablecheck.lib.source import FileSystemRowSource, MemoryRowSource, RowSource, TableRows
from tablecheck.lib.validator import ValidationSummary, validate_data
from tablecheck.lib.values import validate_value, validator_for

__all__ = [
    # Model
    "AnnotatedTableSpec",
    "Column",
    "ColumnSpec",
    "DataType",
    "ForeignKeyMapping",
    "Schema",
    "TableSpec",
    "TypeKind",
    "parse_data_type",
    # Checking
    "CompositeKeySet",
    "ValidationSummary",
    "check",
    "check_directory",
    "check_schema",
    "find_column_index",
    "validate_data",
    "validate_value",
    "validator_for",
    # Sources
    "FileSystemRowSource",
    "MemoryRowSource",
    "RowSource",
    "TableRows",
    # Schema front-ends
    "load_control_file",
    "load_schema",
    "load_schema_document",
    "load_schema_from_dict",
    "metaschema",
    # Errors
    "DataError",
    "SchemaDefinitionError",
    "SchemaError",
    "SourceError",
    "TableCheckError",
    "ValueTypeError",
]
