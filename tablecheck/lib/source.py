"""Row sources: where table headers and rows come from.

A row source hands out one table at a time as a header plus a
single-pass, forward-only iterator of rows. The underlying resource is
held only inside ``open_table``'s context and is released on every exit
path, however many rows were consumed.

Usage:
    source = FileSystemRowSource("./data")
    with source.open_table("users") as table:
        for row in table.rows:
            ...
"""

from __future__ import annotations

import csv
import logging
from abc import ABC, abstractmethod
from contextlib import contextmanager
from dataclasses import dataclass
from pathlib import Path
from typing import (
    Callable,
    ContextManager,
    Dict,
    Iterator,
    List,
    Mapping,
    Sequence,
    TypeVar,
    Union,
)

from tablecheck.lib.errors import (
    IllegalTableNameError,
    SourceReadError,
    TableNotFoundError,
)

logger = logging.getLogger(__name__)

__all__ = [
    "FileSystemRowSource",
    "MemoryRowSource",
    "RowSource",
    "TableRows",
]

T = TypeVar("T")


@dataclass
class TableRows:
    """Header and lazily-read rows of one table."""

    name: str
    header: List[str]
    rows: Iterator[List[str]]


class RowSource(ABC):
    """Supplies tables by name."""

    @abstractmethod
    def open_table(self, name: str) -> ContextManager[TableRows]:
        """Open ``name`` for reading.

        Raises:
            SourceError: If the table cannot be located or opened
        """

    def with_table(self, name: str, body: Callable[[TableRows], T]) -> T:
        """Run ``body`` against the open table and return its result."""
        with self.open_table(name) as table:
            return body(table)


class FileSystemRowSource(RowSource):
    """Reads delimited text files from a directory.

    Table ``users`` maps to ``<root>/users.csv``; a name that already ends
    with the extension is used as the file name unchanged.
    """

    def __init__(
        self,
        root_directory: Union[str, Path],
        *,
        extension: str = ".csv",
        delimiter: str = ",",
        encoding: str = "utf-8",
    ) -> None:
        self.root_directory = Path(root_directory)
        self.extension = extension
        self.delimiter = delimiter
        self.encoding = encoding

    def resolve_path(self, name: str) -> Path:
        """Map a table name to its file path."""
        if ".." in name:
            raise IllegalTableNameError(name, "'..' is not allowed")
        if Path(name).is_absolute():
            raise IllegalTableNameError(name, "absolute paths are not allowed")
        file_name = name if name.endswith(self.extension) else f"{name}{self.extension}"
        return self.root_directory / file_name

    @contextmanager
    def open_table(self, name: str) -> Iterator[TableRows]:
        path = self.resolve_path(name)
        try:
            handle = open(path, "r", encoding=self.encoding, newline="")
        except FileNotFoundError as e:
            raise TableNotFoundError(name, path=str(path)) from e
        except OSError as e:
            raise SourceReadError(name, f"cannot open {path}", cause=e) from e

        logger.debug("Opened table '%s' at %s", name, path)
        with handle:
            reader = csv.reader(handle, delimiter=self.delimiter)
            header = self._read_header(name, reader)
            yield TableRows(name=name, header=header, rows=self._iter_rows(name, reader))

    def _read_header(self, name: str, reader) -> List[str]:
        try:
            for record in reader:
                if record:
                    return record
        except (csv.Error, UnicodeDecodeError) as e:
            raise SourceReadError(name, str(e), line=reader.line_num, cause=e) from e
        raise SourceReadError(name, "missing header row")

    def _iter_rows(self, name: str, reader) -> Iterator[List[str]]:
        try:
            for record in reader:
                # csv yields [] for blank lines; they are not records
                if record:
                    yield record
        except (csv.Error, UnicodeDecodeError) as e:
            raise SourceReadError(name, str(e), line=reader.line_num, cause=e) from e


class MemoryRowSource(RowSource):
    """Serves tables from in-memory rows; the first row is the header.

    Keeps a log of opened and closed tables for inspection.

    Example:
        source = MemoryRowSource({"users": [["id", "name"], ["1", "Alice"]]})
    """

    def __init__(self, tables: Mapping[str, Sequence[Sequence[str]]]) -> None:
        self.tables: Dict[str, Sequence[Sequence[str]]] = dict(tables)
        self.opened: List[str] = []
        self.closed: List[str] = []

    @contextmanager
    def open_table(self, name: str) -> Iterator[TableRows]:
        if name not in self.tables:
            raise TableNotFoundError(name)
        records = self.tables[name]
        if not records:
            raise SourceReadError(name, "missing header row")

        self.opened.append(name)
        try:
            rows = (list(record) for record in records[1:])
            yield TableRows(name=name, header=list(records[0]), rows=rows)
        finally:
            self.closed.append(name)
