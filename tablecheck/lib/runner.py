"""Two-phase check: schema consistency, then data validation."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Union

from tablecheck.lib.consistency import check_schema
from tablecheck.lib.model import Schema
from tablecheck.lib.source import FileSystemRowSource, RowSource
from tablecheck.lib.validator import ValidationSummary, validate_data

logger = logging.getLogger(__name__)

__all__ = ["check", "check_directory"]


def check(schema: Schema, source: RowSource) -> ValidationSummary:
    """Check ``schema`` and then the data ``source`` supplies for it.

    No data is read unless the schema is consistent.

    Raises:
        TableCheckError: On the first violation of either phase
    """
    tables = check_schema(schema)
    summary = validate_data(tables, source)
    logger.info("%s", summary)
    return summary


def check_directory(
    schema: Schema,
    data_dir: Union[str, Path],
    **source_options: Any,
) -> ValidationSummary:
    """Run ``check`` against delimited files in ``data_dir``.

    Args:
        schema: Schema to check
        data_dir: Directory holding one file per table
        **source_options: Passed to FileSystemRowSource (extension, delimiter, encoding)
    """
    return check(schema, FileSystemRowSource(data_dir, **source_options))
