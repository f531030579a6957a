"""Pytest configuration and fixtures."""

import sys
from pathlib import Path
from typing import List

import pytest

# Add the project root to the Python path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from tablecheck.lib.model import (  # noqa: E402
    Column,
    ColumnSpec,
    DataType,
    ForeignKeyMapping,
    Schema,
    TableSpec,
)


@pytest.fixture
def users_table() -> TableSpec:
    """users(id int not null, name string), primary key (id)."""
    return TableSpec(
        name="users",
        primary_key=Column.of("id"),
        columns=[
            ColumnSpec("id", DataType.integer(), not_null=True),
            ColumnSpec("name", DataType.string()),
        ],
    )


@pytest.fixture
def orders_table() -> TableSpec:
    """orders referencing users.id through user_id."""
    return TableSpec(
        name="orders",
        primary_key=Column.of("id"),
        foreign_keys=[
            ForeignKeyMapping(Column.of("user_id"), "users", Column.of("id")),
        ],
        columns=[
            ColumnSpec("id", DataType.integer(), not_null=True),
            ColumnSpec("user_id", DataType.integer(), not_null=True),
            ColumnSpec("placed_on", DataType.date("%Y-%m-%d")),
        ],
    )


@pytest.fixture
def users_schema(users_table) -> Schema:
    return Schema([users_table])


@pytest.fixture
def shop_schema(users_table, orders_table) -> Schema:
    return Schema([users_table, orders_table])


@pytest.fixture
def write_csv(tmp_path):
    """Write rows as a comma-separated file under tmp_path."""

    def _write(name: str, rows: List[str]) -> Path:
        path = tmp_path / name
        path.write_text("\n".join(rows) + "\n", encoding="utf-8")
        return path

    return _write
