import io
from datetime import datetime

import openpyxl
import pytest

from donor_app.importer.adapters import (
    DonorCSVAdapter,
    SpreadsheetParseError,
    UnsupportedFileTypeError,
    get_supported_extensions,
    load_donor_rows,
    read_csv_rows,
)


def _make_csv(contents: str) -> io.StringIO:
    stream = io.StringIO(contents)
    stream.seek(0)
    return stream


def _write_xlsx(path, rows):
    workbook = openpyxl.Workbook()
    sheet = workbook.active
    for row in rows:
        sheet.append(row)
    workbook.save(path)
    return path


class TestDonorCSVAdapter:
    def test_lower_cases_headers_and_skips_blank_rows(self):
        adapter = DonorCSVAdapter(_make_csv("First Name,LAST NAME,City\nMei,Lee,Seattle\n,,\nAl,Ng,\n"))
        rows = list(adapter.iter_rows())

        assert adapter.headers == ("first name", "last name", "city")
        assert rows == [
            {"first name": "Mei", "last name": "Lee", "city": "Seattle"},
            {"first name": "Al", "last name": "Ng", "city": ""},
        ]
        assert adapter.statistics.rows_processed == 2
        assert adapter.statistics.rows_skipped_blank == 1

    def test_empty_input_yields_nothing(self):
        adapter = DonorCSVAdapter(_make_csv(""))
        assert list(adapter.iter_rows()) == []

    def test_header_only_file_has_no_rows(self, tmp_path):
        path = tmp_path / "donors.csv"
        path.write_text("first_name,last_name\n", encoding="utf-8")
        assert read_csv_rows(path) == []

    def test_bom_is_stripped_from_first_header(self, tmp_path):
        path = tmp_path / "donors.csv"
        path.write_bytes("\ufefffirst_name,last_name\nMei,Lee\n".encode("utf-8"))
        assert read_csv_rows(path) == [{"first_name": "Mei", "last_name": "Lee"}]

    def test_undecodable_file_raises_parse_error(self, tmp_path):
        path = tmp_path / "donors.csv"
        path.write_bytes(b"first_name\n\xff\xfe\xfa\n")
        with pytest.raises(SpreadsheetParseError) as excinfo:
            read_csv_rows(path)
        assert "CSV parsing error" in str(excinfo.value)


class TestXlsxAdapter:
    def test_reads_first_sheet_with_typed_cells(self, tmp_path):
        path = _write_xlsx(
            tmp_path / "donors.xlsx",
            [
                ["First Name", "Last Name", "Total Donations", "Last Gift Date"],
                ["Mei", "Lee", 1500, datetime(2024, 3, 1)],
                [None, None, None, None],
                ["Acme", None, None, None],
            ],
        )

        rows = load_donor_rows(path)

        assert len(rows) == 2
        assert rows[0]["first name"] == "Mei"
        assert rows[0]["total donations"] == 1500
        assert rows[0]["last gift date"] == datetime(2024, 3, 1)
        assert rows[1] == {"first name": "Acme", "last name": "", "total donations": "", "last gift date": ""}

    def test_empty_workbook_has_no_rows(self, tmp_path):
        path = _write_xlsx(tmp_path / "empty.xlsx", [])
        assert load_donor_rows(path) == []

    def test_corrupt_workbook_raises_parse_error(self, tmp_path):
        path = tmp_path / "broken.xlsx"
        path.write_bytes(b"this is not a zip archive")
        with pytest.raises(SpreadsheetParseError) as excinfo:
            load_donor_rows(path)
        assert "Excel parsing error" in str(excinfo.value)


def test_unsupported_extension_is_rejected(tmp_path):
    path = tmp_path / "donors.txt"
    path.write_text("first_name\nMei\n", encoding="utf-8")
    with pytest.raises(UnsupportedFileTypeError) as excinfo:
        load_donor_rows(path)
    assert excinfo.value.extension == "txt"
    assert str(excinfo.value) == "Unsupported file format: txt"


def test_supported_extensions():
    assert set(get_supported_extensions()) == {"csv", "xlsx"}
