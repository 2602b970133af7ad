"""CSV adapter for donor imports.

Reads the header row, lower-cases and trims each header so the donor contract
aliases match regardless of spreadsheet casing, and yields one string-keyed
mapping per non-blank data row.
"""

from __future__ import annotations

import csv
from dataclasses import dataclass
from pathlib import Path
from typing import IO, Iterator


class SpreadsheetAdapterError(Exception):
    """Base exception for donor file adapter failures."""


class UnsupportedFileTypeError(SpreadsheetAdapterError):
    """Raised when an upload has an extension no adapter handles."""

    def __init__(self, extension: str) -> None:
        super().__init__("Unsupported file format" + (f": {extension}" if extension else ""))
        self.extension = extension


class SpreadsheetParseError(SpreadsheetAdapterError):
    """Raised when a file cannot be parsed as a whole."""


@dataclass
class SpreadsheetStatistics:
    """Accumulated statistics from spreadsheet parsing."""

    rows_processed: int = 0
    rows_skipped_blank: int = 0


def sanitize_header(header: object | None) -> str:
    token = "" if header is None else str(header)
    return token.lstrip("\ufeff").strip().lower()


def row_is_blank(row: dict[str, object | None]) -> bool:
    return all((value is None or (isinstance(value, str) and value.strip() == "")) for value in row.values())


class DonorCSVAdapter:
    """CSV reader producing lower-cased header mappings for the donor reconciler."""

    def __init__(self, file_obj: IO[str], *, skip_blank_rows: bool = True) -> None:
        self._file_obj = file_obj
        self.skip_blank_rows = skip_blank_rows
        self.headers: tuple[str, ...] = ()
        self.statistics = SpreadsheetStatistics()

    def iter_rows(self) -> Iterator[dict[str, object | None]]:
        self._file_obj.seek(0)
        reader = csv.DictReader(self._file_obj)
        try:
            if reader.fieldnames is None:
                return
            reader.fieldnames = [sanitize_header(header) for header in reader.fieldnames]
            self.headers = tuple(reader.fieldnames)
            for raw_row in reader:
                row = {key: value for key, value in raw_row.items() if key}
                if self.skip_blank_rows and row_is_blank(row):
                    self.statistics.rows_skipped_blank += 1
                    continue
                self.statistics.rows_processed += 1
                yield row
        except csv.Error as exc:
            raise SpreadsheetParseError(f"CSV parsing error: {exc}") from exc


def read_csv_rows(path: Path | str) -> list[dict[str, object | None]]:
    """Parse a CSV file into row mappings. UTF-8 with or without BOM."""

    with open(path, newline="", encoding="utf-8-sig") as handle:
        try:
            return list(DonorCSVAdapter(handle).iter_rows())
        except UnicodeDecodeError as exc:
            raise SpreadsheetParseError(f"CSV parsing error: {exc}") from exc
