"""Tests for tablecheck.lib.source."""

import csv

import pytest

from tablecheck.lib.errors import (
    IllegalTableNameError,
    SourceError,
    SourceReadError,
    TableNotFoundError,
)
from tablecheck.lib.source import FileSystemRowSource, MemoryRowSource


class TestFileSystemRowSourcePaths:
    """Tests for table name to path mapping."""

    def test_appends_extension(self, tmp_path):
        """Table names map to <root>/<name>.csv."""
        source = FileSystemRowSource(tmp_path)
        assert source.resolve_path("users") == tmp_path / "users.csv"

    def test_keeps_existing_extension(self, tmp_path):
        """Names already ending in the extension are used as is."""
        source = FileSystemRowSource(tmp_path)
        assert source.resolve_path("users.csv") == tmp_path / "users.csv"

    def test_custom_extension(self, tmp_path):
        """The extension is configurable."""
        source = FileSystemRowSource(tmp_path, extension=".tsv")
        assert source.resolve_path("users") == tmp_path / "users.tsv"

    @pytest.mark.parametrize("name", ["..", "../users", "data/../../etc/passwd"])
    def test_rejects_parent_traversal(self, tmp_path, name):
        """Names containing '..' are rejected."""
        with pytest.raises(IllegalTableNameError):
            FileSystemRowSource(tmp_path).resolve_path(name)

    def test_rejects_absolute_path(self, tmp_path):
        """Absolute names are rejected."""
        with pytest.raises(IllegalTableNameError):
            FileSystemRowSource(tmp_path).resolve_path(str(tmp_path / "users"))

    def test_illegal_name_is_source_error(self, tmp_path):
        """Illegal names surface as source errors when opening."""
        with pytest.raises(SourceError):
            with FileSystemRowSource(tmp_path).open_table("../users"):
                pass


class TestFileSystemRowSourceReading:
    """Tests for reading tables from disk."""

    def test_reads_header_and_rows(self, tmp_path, write_csv):
        """Header and rows come back as lists of strings."""
        write_csv("users.csv", ["id,name", "1,Alice", "2,Bob"])
        with FileSystemRowSource(tmp_path).open_table("users") as table:
            assert table.name == "users"
            assert table.header == ["id", "name"]
            assert list(table.rows) == [["1", "Alice"], ["2", "Bob"]]

    def test_quoted_fields(self, tmp_path, write_csv):
        """Quoted fields may contain delimiters and newlines."""
        write_csv("notes.csv", ["id,text", '1,"a, b"', '2,"line one', 'line two"'])
        with FileSystemRowSource(tmp_path).open_table("notes") as table:
            assert list(table.rows) == [["1", "a, b"], ["2", "line one\nline two"]]

    def test_blank_lines_skipped(self, tmp_path, write_csv):
        """Blank lines are not records."""
        write_csv("users.csv", ["", "id,name", "1,Alice", "", "2,Bob", ""])
        with FileSystemRowSource(tmp_path).open_table("users") as table:
            assert table.header == ["id", "name"]
            assert list(table.rows) == [["1", "Alice"], ["2", "Bob"]]

    def test_empty_cells_preserved(self, tmp_path, write_csv):
        """Empty cells are empty strings."""
        write_csv("users.csv", ["id,name", ",", "1,"])
        with FileSystemRowSource(tmp_path).open_table("users") as table:
            assert list(table.rows) == [["", ""], ["1", ""]]

    def test_custom_delimiter(self, tmp_path):
        """The delimiter is configurable."""
        (tmp_path / "users.csv").write_text("id;name\n1;Alice\n", encoding="utf-8")
        with FileSystemRowSource(tmp_path, delimiter=";").open_table("users") as table:
            assert table.header == ["id", "name"]
            assert list(table.rows) == [["1", "Alice"]]

    def test_missing_file(self, tmp_path):
        """Missing files raise TableNotFoundError with the path."""
        with pytest.raises(TableNotFoundError) as exc_info:
            with FileSystemRowSource(tmp_path).open_table("users"):
                pass
        assert exc_info.value.table == "users"
        assert exc_info.value.path == str(tmp_path / "users.csv")

    def test_empty_file(self, tmp_path):
        """A file without a header fails."""
        (tmp_path / "users.csv").write_text("", encoding="utf-8")
        with pytest.raises(SourceReadError, match="missing header row"):
            with FileSystemRowSource(tmp_path).open_table("users"):
                pass

    def test_oversized_field(self, tmp_path):
        """Parser errors surface as read errors with a line number."""
        oversized = "x" * (csv.field_size_limit() + 1)
        (tmp_path / "users.csv").write_text(f"id,name\n1,{oversized}\n", encoding="utf-8")
        with pytest.raises(SourceReadError) as exc_info:
            with FileSystemRowSource(tmp_path).open_table("users") as table:
                list(table.rows)
        assert exc_info.value.table == "users"
        assert exc_info.value.line is not None

    def test_undecodable_bytes(self, tmp_path):
        """Bytes invalid in the encoding surface as read errors."""
        (tmp_path / "users.csv").write_bytes(b"id,name\n1,\xff\xfe\n")
        with pytest.raises(SourceReadError):
            with FileSystemRowSource(tmp_path).open_table("users") as table:
                list(table.rows)

    def test_file_released_on_error(self, tmp_path, write_csv, monkeypatch):
        """The file is closed when the body raises."""
        write_csv("users.csv", ["id,name", "1,Alice"])
        handles = []
        real_open = open

        def tracking_open(*args, **kwargs):
            handle = real_open(*args, **kwargs)
            handles.append(handle)
            return handle

        monkeypatch.setattr("builtins.open", tracking_open)
        with pytest.raises(RuntimeError):
            with FileSystemRowSource(tmp_path).open_table("users"):
                raise RuntimeError("boom")
        assert handles and all(handle.closed for handle in handles)

    def test_with_table_returns_body_result(self, tmp_path, write_csv):
        """with_table returns what the body returns."""
        write_csv("users.csv", ["id,name", "1,Alice", "2,Bob"])
        count = FileSystemRowSource(tmp_path).with_table("users", lambda t: sum(1 for _ in t.rows))
        assert count == 2


class TestMemoryRowSource:
    """Tests for MemoryRowSource."""

    def test_first_row_is_header(self):
        """The first record is the header."""
        source = MemoryRowSource({"users": [["id", "name"], ["1", "Alice"]]})
        with source.open_table("users") as table:
            assert table.header == ["id", "name"]
            assert list(table.rows) == [["1", "Alice"]]

    def test_records_open_and_close(self):
        """Opened and closed tables are logged."""
        source = MemoryRowSource({"users": [["id"]]})
        with pytest.raises(ValueError):
            with source.open_table("users"):
                assert source.opened == ["users"]
                assert source.closed == []
                raise ValueError("body failed")
        assert source.closed == ["users"]

    def test_missing_table(self):
        """Unknown names raise TableNotFoundError."""
        with pytest.raises(TableNotFoundError):
            with MemoryRowSource({}).open_table("users"):
                pass

    def test_no_header(self):
        """A table without records has no header."""
        with pytest.raises(SourceReadError):
            with MemoryRowSource({"users": []}).open_table("users"):
                pass
