"""YAML/JSON schema document loader.

Lets schemas be written as plain documents and decoded into the
canonical model through pydantic models.

Example YAML (schema.yaml):
    data_dir: ./data
    tables:
      - name: users
        primary_key: [id]
        columns:
          - {name: id, type: int, not_null: true}
          - {name: name, type: string}
      - name: orders
        primary_key: id
        foreign_keys:
          - local_column: user_id
            foreign_table: users
            foreign_column: id
        columns:
          - {name: id, type: int, not_null: true}
          - {name: user_id, type: int}
          - {name: placed_on, type: "date(%Y-%m-%d)"}

A column list may be written as a bare string when it names one column.

Usage:
    from tablecheck.lib.schema_loader import load_schema
    schema = load_schema("./schema.yaml")
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from tablecheck.lib.env import expand_env_vars
from tablecheck.lib.errors import SchemaDefinitionError
from tablecheck.lib.model import (
    Column,
    ColumnSpec,
    ForeignKeyMapping,
    Schema,
    TableSpec,
    parse_data_type,
)

logger = logging.getLogger(__name__)

__all__ = [
    "ColumnDocument",
    "ForeignKeyDocument",
    "LoadedSchema",
    "SchemaDocument",
    "TableDocument",
    "load_schema",
    "load_schema_document",
    "load_schema_from_dict",
]

YAML_SUFFIXES = (".yaml", ".yml")
JSON_SUFFIXES = (".json",)


def _as_name_list(value: Any) -> Any:
    """Accept a bare column name where a column list is expected."""
    if isinstance(value, str):
        return [value]
    return value


class ColumnDocument(BaseModel):
    """One column declaration."""

    model_config = ConfigDict(extra="forbid")

    name: str
    type: str
    not_null: bool = False

    @field_validator("type")
    @classmethod
    def validate_type(cls, v: str) -> str:
        try:
            parse_data_type(v)
        except SchemaDefinitionError as e:
            raise ValueError(e.message) from None
        return v

    def to_spec(self) -> ColumnSpec:
        return ColumnSpec(self.name, parse_data_type(self.type), self.not_null)


class ForeignKeyDocument(BaseModel):
    """One foreign key declaration."""

    model_config = ConfigDict(extra="forbid")

    local_column: List[str] = Field(..., min_length=1)
    foreign_table: str
    foreign_column: List[str] = Field(..., min_length=1)

    @field_validator("local_column", "foreign_column", mode="before")
    @classmethod
    def normalize_columns(cls, v: Any) -> Any:
        return _as_name_list(v)

    def to_mapping(self) -> ForeignKeyMapping:
        return ForeignKeyMapping(
            Column(tuple(self.local_column)),
            self.foreign_table,
            Column(tuple(self.foreign_column)),
        )


class TableDocument(BaseModel):
    """One table declaration."""

    model_config = ConfigDict(extra="forbid")

    name: str
    primary_key: Optional[List[str]] = None
    unique_columns: List[List[str]] = Field(default_factory=list)
    foreign_keys: List[ForeignKeyDocument] = Field(default_factory=list)
    columns: List[ColumnDocument] = Field(..., min_length=1)

    @field_validator("primary_key", mode="before")
    @classmethod
    def normalize_primary_key(cls, v: Any) -> Any:
        return _as_name_list(v)

    @field_validator("primary_key")
    @classmethod
    def validate_primary_key(cls, v: Optional[List[str]]) -> Optional[List[str]]:
        if v is not None and not v:
            raise ValueError("primary key must name at least one column")
        return v

    @field_validator("unique_columns", mode="before")
    @classmethod
    def normalize_unique_columns(cls, v: Any) -> Any:
        if isinstance(v, list):
            return [_as_name_list(item) for item in v]
        return v

    @field_validator("unique_columns")
    @classmethod
    def validate_unique_columns(cls, v: List[List[str]]) -> List[List[str]]:
        if any(not names for names in v):
            raise ValueError("unique columns must name at least one column")
        return v

    def to_spec(self) -> TableSpec:
        return TableSpec(
            name=self.name,
            columns=tuple(column.to_spec() for column in self.columns),
            primary_key=Column(tuple(self.primary_key)) if self.primary_key else None,
            unique_columns=tuple(Column(tuple(names)) for names in self.unique_columns),
            foreign_keys=tuple(fk.to_mapping() for fk in self.foreign_keys),
        )


class SchemaDocument(BaseModel):
    """A complete schema document."""

    model_config = ConfigDict(extra="forbid")

    data_dir: Optional[str] = Field(default=None, description="Directory holding the table files")
    tables: List[TableDocument] = Field(..., min_length=1)

    def to_schema(self) -> Schema:
        return Schema(tuple(table.to_spec() for table in self.tables))


@dataclass(frozen=True)
class LoadedSchema:
    """A decoded schema plus the data directory its document names."""

    schema: Schema
    data_dir: Optional[Path] = None


def _format_validation_error(error: ValidationError) -> str:
    errors = error.errors()
    first = errors[0]
    location = ".".join(str(part) for part in first["loc"]) or "<document>"
    message = f"{location}: {first['msg']}"
    if len(errors) > 1:
        message += f" (and {len(errors) - 1} more)"
    return message


def _parse_document(config: Any, path: Optional[str] = None) -> SchemaDocument:
    if not isinstance(config, dict):
        raise SchemaDefinitionError("Schema document must be a mapping", path=path)
    try:
        return SchemaDocument.model_validate(config)
    except ValidationError as e:
        raise SchemaDefinitionError(_format_validation_error(e), path=path) from e


def load_schema_from_dict(config: Dict[str, Any]) -> Schema:
    """Create a Schema from already-parsed document data.

    Raises:
        SchemaDefinitionError: If the document is malformed
    """
    return _parse_document(config).to_schema()


def _detect_format(path: Path) -> str:
    suffix = path.suffix.lower()
    if suffix in YAML_SUFFIXES:
        return "yaml"
    if suffix in JSON_SUFFIXES:
        return "json"
    raise SchemaDefinitionError(
        f"Unsupported schema file type '{suffix}'",
        path=str(path),
        suggestion="use .yaml, .yml or .json, or name the format explicitly",
    )


def _read_document(path: Path, file_format: str) -> Any:
    try:
        with open(path, "r", encoding="utf-8") as f:
            if file_format == "yaml":
                return yaml.safe_load(f)
            return json.load(f)
    except FileNotFoundError as e:
        raise SchemaDefinitionError("Schema file not found", path=str(path)) from e
    except OSError as e:
        raise SchemaDefinitionError(f"Cannot read schema file: {e}", path=str(path)) from e
    except yaml.YAMLError as e:
        raise SchemaDefinitionError(f"Invalid YAML syntax: {e}", path=str(path)) from e
    except json.JSONDecodeError as e:
        raise SchemaDefinitionError(f"Invalid JSON syntax: {e}", path=str(path)) from e


def _resolve_data_dir(value: str, config_dir: Path) -> Path:
    """Expand env vars; relative paths are relative to the schema file."""
    expanded = Path(expand_env_vars(value))
    if expanded.is_absolute():
        return expanded
    return config_dir / expanded


def load_schema_document(
    path: Union[str, Path],
    *,
    file_format: Optional[str] = None,
) -> LoadedSchema:
    """Load a YAML or JSON schema document.

    Args:
        path: Path to the document
        file_format: "yaml" or "json"; detected from the suffix when None

    Returns:
        LoadedSchema with the schema and the resolved data_dir, if any

    Raises:
        SchemaDefinitionError: If the file is missing or malformed
    """
    path = Path(path)
    if file_format is None:
        file_format = _detect_format(path)
    elif file_format not in ("yaml", "json"):
        raise SchemaDefinitionError(f"Unknown schema format '{file_format}'", path=str(path))

    document = _parse_document(_read_document(path, file_format), path=str(path))

    data_dir = None
    if document.data_dir:
        data_dir = _resolve_data_dir(document.data_dir, path.parent.resolve())

    logger.debug("Loaded schema document %s (%d tables)", path, len(document.tables))
    return LoadedSchema(schema=document.to_schema(), data_dir=data_dir)


def load_schema(path: Union[str, Path], *, file_format: Optional[str] = None) -> Schema:
    """Load only the Schema from a YAML or JSON document."""
    return load_schema_document(path, file_format=file_format).schema
