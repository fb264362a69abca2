import io
import os
from pathlib import Path

import openpyxl
import pytest
import xlrd

from csv2vcard.errors import UnreadableInputError, UnsupportedFormatError
from csv2vcard.sources import (
    decode_text,
    output_filename_for,
    output_path_for,
    read_rows,
    read_rows_from_path,
    sniff_delimiter,
    spreadsheet_cell_text,
)

FIXTURES = Path(__file__).parent / "fixtures"

SEMICOLON_CSV = (
    "Jane;Doe;jane@doe.com;31612345678\n"
    "John;Smith;john@smith.com;31687654321\n"
    "Anna;Jansen;anna@jansen.nl;31611122233\n"
)


def make_xlsx(rows):
    workbook = openpyxl.Workbook()
    sheet = workbook.active
    for row in rows:
        sheet.append(row)
    buf = io.BytesIO()
    workbook.save(buf)
    return buf.getvalue()


def test_read_csv_detects_semicolons():
    rows = read_rows(SEMICOLON_CSV.encode("utf-8"), "contacts.csv")
    assert rows[0] == ["Jane", "Doe", "jane@doe.com", "31612345678"]
    assert len(rows) == 3


def test_read_csv_with_explicit_delimiter():
    raw = b"Jane,Doe,jane@doe.com,31612345678\n"
    assert read_rows(raw, "contacts.csv", delimiter=",") == [["Jane", "Doe", "jane@doe.com", "31612345678"]]


def test_read_csv_strips_utf8_bom():
    raw = SEMICOLON_CSV.encode("utf-8-sig")
    rows = read_rows(raw, "contacts.csv", delimiter=";")
    assert rows[0][0] == "Jane"


def test_read_csv_extension_is_case_insensitive():
    rows = read_rows(SEMICOLON_CSV.encode("utf-8"), "CONTACTS.CSV", delimiter=";")
    assert len(rows) == 3


def test_decode_text_handles_latin1():
    raw = "name;city\nPaul;Montréal\n".encode("latin-1")
    text, _ = decode_text(raw)
    assert "Montréal" in text


def test_sniff_delimiter_falls_back_to_semicolon():
    assert sniff_delimiter("justonecolumn\n") == ";"


def test_read_xlsx_first_sheet():
    raw = make_xlsx([
        ["Jane", "Doe", "jane@doe.com", 31612345678],
        ["John", None, "john@smith.com", 31687654321.0],
    ])
    rows = read_rows(raw, "contacts.xlsx")
    assert rows == [
        ["Jane", "Doe", "jane@doe.com", "31612345678"],
        ["John", "", "john@smith.com", "31687654321"],
    ]


def test_read_xlsx_garbage_is_unsupported():
    with pytest.raises(UnsupportedFormatError):
        read_rows(b"not a workbook", "contacts.xlsx")


def test_read_xls_first_sheet():
    # two rows; John has no last name, phone numbers stored as numeric cells
    rows = read_rows_from_path(FIXTURES / "contacts.xls")
    assert rows == [
        ["Jane", "Doe", "jane@doe.com", "31612345678"],
        ["John", "", "john@smith.com", "31687654321"],
    ]


def test_read_xls_releases_workbook(monkeypatch):
    released = []
    real_open_workbook = xlrd.open_workbook

    def open_workbook(**kwargs):
        book = real_open_workbook(**kwargs)
        real_release = book.release_resources

        def release_resources():
            released.append(True)
            real_release()

        book.release_resources = release_resources
        return book

    monkeypatch.setattr(xlrd, "open_workbook", open_workbook)
    rows = read_rows((FIXTURES / "contacts.xls").read_bytes(), "contacts.xls")
    assert len(rows) == 2
    assert released == [True]


def test_read_csv_oversized_field_is_unsupported():
    raw = ("Jane;" + "x" * 200000 + ";jane@doe.com;31612345678\n").encode("utf-8")
    with pytest.raises(UnsupportedFormatError, match="line 1"):
        read_rows(raw, "contacts.csv", delimiter=";")


def test_read_xls_garbage_is_unsupported():
    with pytest.raises(UnsupportedFormatError):
        read_rows(b"not a workbook", "contacts.xls")


def test_unknown_extension_is_unsupported():
    with pytest.raises(UnsupportedFormatError, match=r"\.ods"):
        read_rows(b"", "contacts.ods")


def test_spreadsheet_cell_text():
    assert spreadsheet_cell_text(None) == ""
    assert spreadsheet_cell_text(31612345678.0) == "31612345678"
    assert spreadsheet_cell_text(1.5) == "1.5"
    assert spreadsheet_cell_text("Jane") == "Jane"


def test_read_rows_from_path(tmp_path):
    path = tmp_path / "contacts.csv"
    path.write_text(SEMICOLON_CSV, encoding="utf-8")
    assert len(read_rows_from_path(path)) == 3


def test_read_rows_from_missing_path(tmp_path):
    with pytest.raises(UnreadableInputError):
        read_rows_from_path(tmp_path / "missing.csv")


def test_read_rows_from_directory_is_unreadable(tmp_path):
    with pytest.raises(UnreadableInputError):
        read_rows_from_path(tmp_path)


def test_output_filename_uses_basename_up_to_first_dot():
    assert output_filename_for("/data/export.2024.csv") == "export.vcf"
    assert output_filename_for("contacts.xlsx") == "contacts.vcf"


def test_output_path_for(tmp_path):
    assert output_path_for("in/contacts.csv") == output_path_for("contacts.csv", ".")
    assert output_path_for("in/contacts.csv", tmp_path) == tmp_path / "contacts.vcf"
    assert os.fspath(output_path_for("contacts.csv")) == "contacts.vcf"
