"""
Spreadsheet import and export for decision data.

Imports read the first worksheet of an xlsx workbook (or a CSV file) into a
list of row dictionaries keyed by the header row. Every cell is rendered as
its display string, with empty cells defaulting to ``""``. Column types are
inferred in a single pass over the first data row.
"""

import csv
import io
import json
import re
import zipfile
from datetime import date, datetime, time
from typing import Any, Dict, Iterable, List, Optional, Tuple

from openpyxl import Workbook, load_workbook
from openpyxl.utils.exceptions import InvalidFileException

XLSX_MIME_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"
DEFAULT_EXPORT_FILENAME = "decision-results.xlsx"
EXPORT_SHEET_NAME = "Sheet1"

_DATE_PREFIX = re.compile(r"^\d{4}-\d{2}-\d{2}")
_ZIP_SIGNATURE = b"PK\x03\x04"
_SNIFF_BYTES = 4096


class SpreadsheetError(ValueError):
    """Raised when an uploaded file cannot be parsed."""


def format_cell(value: Any) -> str:
    """
    Render a cell value as display text.

    Args:
        value: Raw cell value from openpyxl or csv

    Returns:
        Display string; ``""`` for empty cells
    """
    if value is None:
        return ""
    if isinstance(value, bool):
        return "TRUE" if value else "FALSE"
    if isinstance(value, float):
        if value.is_integer():
            return str(int(value))
        return repr(value)
    if isinstance(value, datetime):
        if value.time() == time(0, 0):
            return value.date().isoformat()
        return value.isoformat(sep=" ", timespec="seconds")
    if isinstance(value, (date, time)):
        return value.isoformat()
    return str(value)


def _header_names(raw_headers: Iterable[Any]) -> List[str]:
    """Build unique column names from the header row."""
    names: List[str] = []
    seen: Dict[str, int] = {}
    for raw in raw_headers:
        base = format_cell(raw).strip() or "__EMPTY"
        if base in seen:
            seen[base] += 1
            name = f"{base}_{seen[base]}"
        else:
            seen[base] = 0
            name = base
        names.append(name)
    return names


def _rows_to_records(rows: List[List[Any]]) -> Tuple[List[str], List[Dict[str, str]]]:
    if not rows:
        return [], []

    # Cells past the end of the header row get blank header names.
    width = max(len(row) for row in rows)
    header_row = list(rows[0]) + [None] * (width - len(rows[0]))
    headers = _header_names(header_row)
    records = []
    for row in rows[1:]:
        cells = [format_cell(v) for v in row]
        if not any(cell.strip() for cell in cells):
            continue
        cells += [""] * (width - len(cells))
        records.append(dict(zip(headers, cells)))

    return headers, records


def infer_column_type(sample: Any) -> str:
    """
    Infer a column type from a single sample value.

    Args:
        sample: Value of the column in the first data row

    Returns:
        One of ``number``, ``boolean``, ``date`` or ``string``
    """
    if isinstance(sample, bool):
        return "boolean"
    if isinstance(sample, (int, float)):
        return "number"
    if isinstance(sample, str):
        if _DATE_PREFIX.match(sample):
            return "date"
        if sample.strip():
            try:
                float(sample)
            except ValueError:
                return "string"
            return "number"
    return "string"


def _read_xlsx(content: bytes) -> List[List[Any]]:
    try:
        workbook = load_workbook(io.BytesIO(content), read_only=True, data_only=True)
    except (InvalidFileException, zipfile.BadZipFile, OSError, KeyError) as e:
        raise SpreadsheetError(f"Unreadable workbook: {e}") from e
    try:
        if not workbook.sheetnames:
            return []
        sheet = workbook[workbook.sheetnames[0]]
        return [list(row) for row in sheet.iter_rows(values_only=True)]
    finally:
        workbook.close()


def _read_csv(content: bytes) -> List[List[Any]]:
    if b"\x00" in content[:_SNIFF_BYTES]:
        raise SpreadsheetError("Unsupported file format: binary content")
    try:
        text = content.decode("utf-8-sig")
    except UnicodeDecodeError:
        text = content.decode("latin-1")
    return [row for row in csv.reader(io.StringIO(text))]


def parse_spreadsheet(content: bytes, filename: Optional[str] = None) -> Dict[str, Any]:
    """
    Parse an uploaded spreadsheet.

    Args:
        content: Raw file bytes
        filename: Original file name, used to tell CSV from xlsx

    Returns:
        Dictionary with ``data``, ``columns`` (``field``/``type``) and
        ``rowCount``

    Raises:
        SpreadsheetError: If the file cannot be read
    """
    is_csv = bool(filename and filename.lower().endswith(".csv"))
    if not is_csv and not content.startswith(_ZIP_SIGNATURE):
        is_csv = True

    rows = _read_csv(content) if is_csv else _read_xlsx(content)
    headers, records = _rows_to_records(rows)

    columns = []
    if records:
        first = records[0]
        columns = [
            {"field": header, "type": infer_column_type(first.get(header))}
            for header in headers
        ]

    return {"data": records, "columns": columns, "rowCount": len(records)}


def _export_value(value: Any) -> Any:
    if isinstance(value, (dict, list)):
        return json.dumps(value)
    return value


def build_workbook(rows: List[Dict[str, Any]]) -> bytes:
    """
    Write rows to an xlsx workbook with a single ``Sheet1`` worksheet.

    Columns follow the order in which keys first appear across the rows.

    Args:
        rows: Row dictionaries

    Returns:
        Workbook file content
    """
    headers: List[str] = []
    for row in rows:
        for key in row:
            if key not in headers:
                headers.append(key)

    workbook = Workbook()
    sheet = workbook.active
    sheet.title = EXPORT_SHEET_NAME
    if headers:
        sheet.append(headers)
    for row in rows:
        sheet.append([_export_value(row.get(key)) for key in headers])

    buffer = io.BytesIO()
    workbook.save(buffer)
    return buffer.getvalue()
