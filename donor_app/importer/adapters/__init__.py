"""Donor file adapters: CSV via the csv module, Excel via openpyxl."""

from __future__ import annotations

from pathlib import Path
from typing import Callable, Dict

from .csv_donors import (
    DonorCSVAdapter,
    SpreadsheetAdapterError,
    SpreadsheetParseError,
    SpreadsheetStatistics,
    UnsupportedFileTypeError,
    read_csv_rows,
)
from .xlsx_donors import read_xlsx_rows

RowReader = Callable[[Path], list]

ADAPTERS_BY_EXTENSION: Dict[str, RowReader] = {
    "csv": read_csv_rows,
    "xlsx": read_xlsx_rows,
}


def get_supported_extensions() -> tuple[str, ...]:
    return tuple(ADAPTERS_BY_EXTENSION)


def load_donor_rows(path: Path | str) -> list[dict[str, object | None]]:
    """
    Parse an uploaded donor file into lower-cased header row mappings.

    Raises:
        UnsupportedFileTypeError: the extension has no adapter.
        SpreadsheetParseError: the file could not be parsed.
    """

    file_path = Path(path)
    extension = file_path.suffix.lower().lstrip(".")
    reader = ADAPTERS_BY_EXTENSION.get(extension)
    if reader is None:
        raise UnsupportedFileTypeError(extension)
    return reader(file_path)


__all__ = [
    "ADAPTERS_BY_EXTENSION",
    "DonorCSVAdapter",
    "SpreadsheetAdapterError",
    "SpreadsheetParseError",
    "SpreadsheetStatistics",
    "UnsupportedFileTypeError",
    "get_supported_extensions",
    "load_donor_rows",
    "read_csv_rows",
    "read_xlsx_rows",
]
