"""Excel (.xlsx) adapter for donor imports, backed by openpyxl.

Only the first worksheet is read. Its first row supplies the headers; every
following non-blank row becomes one mapping, with empty cells as ``""``.
"""

from __future__ import annotations

from pathlib import Path
from zipfile import BadZipFile

import openpyxl
from openpyxl.utils.exceptions import InvalidFileException

from .csv_donors import SpreadsheetParseError, row_is_blank, sanitize_header


def read_xlsx_rows(path: Path | str) -> list[dict[str, object | None]]:
    try:
        workbook = openpyxl.load_workbook(path, read_only=True, data_only=True)
    except (BadZipFile, InvalidFileException, KeyError, OSError, ValueError) as exc:
        raise SpreadsheetParseError(f"Excel parsing error: {exc}") from exc

    try:
        worksheet = workbook.worksheets[0] if workbook.worksheets else None
        if worksheet is None:
            return []
        values = worksheet.iter_rows(values_only=True)
        header_row = next(values, None)
        if header_row is None:
            return []
        headers = [sanitize_header(cell) for cell in header_row]

        rows: list[dict[str, object | None]] = []
        for raw in values:
            row: dict[str, object | None] = {}
            for index, header in enumerate(headers):
                if not header:
                    continue
                cell = raw[index] if index < len(raw) else None
                row[header] = "" if cell is None else cell
            if row and not row_is_blank(row):
                rows.append(row)
        return rows
    finally:
        workbook.close()
