"""Offline integrity checks for tabular data in delimited files.

Declares a relational-style schema (typed columns, not-null, primary,
unique and foreign keys) and checks both the schema itself and the data
files it names, without a database engine.

Usage:
    python -m tablecheck ./schema.yaml
    python -m tablecheck ./exports/ --format control
"""

from tablecheck.lib.errors import TableCheckError
from tablecheck.lib.model import Column, ColumnSpec, DataType, ForeignKeyMapping, Schema, TableSpec
from tablecheck.lib.runner import check, check_directory

__all__ = [
    "Column",
    "ColumnSpec",
    "DataType",
    "ForeignKeyMapping",
    "Schema",
    "TableCheckError",
    "TableSpec",
    "check",
    "check_directory",
]
