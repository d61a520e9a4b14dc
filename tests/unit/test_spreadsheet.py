"""
Unit tests for spreadsheet import and export.
"""

import io
from datetime import datetime

import pytest
from openpyxl import Workbook, load_workbook

from processhub.core.decision import SpreadsheetError, build_workbook, parse_spreadsheet
from processhub.core.decision.spreadsheet import format_cell, infer_column_type


def _xlsx(rows) -> bytes:
    workbook = Workbook()
    sheet = workbook.active
    for row in rows:
        sheet.append(row)
    buffer = io.BytesIO()
    workbook.save(buffer)
    return buffer.getvalue()


class TestFormatCell:
    """Test display text of cell values."""

    def test_values(self) -> None:
        """Test rendering of common cell types."""
        assert format_cell(None) == ""
        assert format_cell(42) == "42"
        assert format_cell(42.0) == "42"
        assert format_cell(3.5) == "3.5"
        assert format_cell(True) == "TRUE"
        assert format_cell(datetime(2024, 1, 15)) == "2024-01-15"
        assert format_cell(datetime(2024, 1, 15, 9, 30)) == "2024-01-15 09:30:00"


class TestInferColumnType:
    """Test column type inference."""

    @pytest.mark.parametrize(
        "sample,expected",
        [
            ("42", "number"),
            ("-1.5", "number"),
            ("2024-01-15", "date"),
            ("hello", "string"),
            ("", "string"),
            ("TRUE", "string"),
            (True, "boolean"),
            (7, "number"),
            (None, "string"),
        ],
    )
    def test_infer(self, sample, expected) -> None:
        """Test inference from a single sample."""
        assert infer_column_type(sample) == expected


class TestParseSpreadsheet:
    """Test parsing uploaded files."""

    def test_xlsx_rows_and_types(self) -> None:
        """Rows are keyed by header and every cell is text."""
        content = _xlsx(
            [
                ["Name", "Amount", "Approved", "Due"],
                ["Alice", 42, True, datetime(2024, 1, 15)],
                ["Bob", 3.5, False, None],
            ]
        )

        result = parse_spreadsheet(content, "data.xlsx")

        assert result["rowCount"] == 2
        assert result["data"][0] == {
            "Name": "Alice",
            "Amount": "42",
            "Approved": "TRUE",
            "Due": "2024-01-15",
        }
        assert result["data"][1]["Due"] == ""
        types = {c["field"]: c["type"] for c in result["columns"]}
        assert types == {
            "Name": "string",
            "Amount": "number",
            "Approved": "string",
            "Due": "date",
        }

    def test_blank_rows_are_skipped(self) -> None:
        """Rows without any value are not imported."""
        content = _xlsx([["A", "B"], [None, None], ["x", "y"]])
        result = parse_spreadsheet(content, "data.xlsx")
        assert result["rowCount"] == 1
        assert result["data"] == [{"A": "x", "B": "y"}]

    def test_duplicate_and_empty_headers(self) -> None:
        """Header names are made unique."""
        content = _xlsx([["A", "A", None], ["1", "2", "3"]])
        result = parse_spreadsheet(content, "data.xlsx")
        assert list(result["data"][0]) == ["A", "A_1", "__EMPTY"]

    def test_csv_upload(self) -> None:
        """CSV files are read by extension or by content."""
        content = b"region,total\nnorth,10\nsouth,20\n"
        for filename in ("data.csv", None):
            result = parse_spreadsheet(content, filename)
            assert result["rowCount"] == 2
            assert result["data"][1] == {"region": "south", "total": "20"}
            assert result["columns"][1] == {"field": "total", "type": "number"}

    def test_empty_file(self) -> None:
        """An empty upload yields no rows and no columns."""
        result = parse_spreadsheet(b"", "empty.csv")
        assert result == {"data": [], "columns": [], "rowCount": 0}

    def test_broken_workbook(self) -> None:
        """A zip that is not a workbook is rejected."""
        with pytest.raises(SpreadsheetError):
            parse_spreadsheet(b"PK\x03\x04not really a zip", "data.xlsx")

    def test_cells_past_header_are_kept(self) -> None:
        """Rows longer than the header get blank header names."""
        content = b"region,total\nnorth,10,late,x\nsouth,20\n"

        result = parse_spreadsheet(content, "data.csv")

        assert result["data"][0] == {
            "region": "north",
            "total": "10",
            "__EMPTY": "late",
            "__EMPTY_1": "x",
        }
        assert result["data"][1]["__EMPTY"] == ""
        fields = [c["field"] for c in result["columns"]]
        assert fields == ["region", "total", "__EMPTY", "__EMPTY_1"]

    def test_legacy_xls_is_rejected(self) -> None:
        """Binary workbooks that are not xlsx are not read as text."""
        content = b"\xd0\xcf\x11\xe0\xa1\xb1\x1a\xe1" + b"\x00" * 64
        with pytest.raises(SpreadsheetError, match="Unsupported file format"):
            parse_spreadsheet(content, "old.xls")


class TestBuildWorkbook:
    """Test xlsx export."""

    def test_columns_follow_first_appearance(self) -> None:
        """Headers are collected across rows in order of appearance."""
        content = build_workbook(
            [{"a": 1, "b": "x"}, {"b": "y", "c": {"nested": True}}]
        )

        workbook = load_workbook(io.BytesIO(content))
        sheet = workbook["Sheet1"]
        rows = [list(r) for r in sheet.iter_rows(values_only=True)]

        assert rows[0] == ["a", "b", "c"]
        assert rows[1] == [1, "x", None]
        assert rows[2] == [None, "y", '{"nested": true}']

    def test_empty_export(self) -> None:
        """An export without rows is still a valid workbook."""
        content = build_workbook([])
        workbook = load_workbook(io.BytesIO(content))
        assert workbook.sheetnames == ["Sheet1"]
