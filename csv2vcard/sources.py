"""
Row sources: turn an uploaded or on-disk file into raw rows.

Responsibilities:
- extension dispatch (.csv, .xlsx, .xls)
- encoding detection for delimited text
- delimiter detection when none is given
- rendering spreadsheet cells as text
"""

from __future__ import annotations

import csv
import io
import logging
import os
from pathlib import Path
from typing import Any, List, Optional, Tuple, Union

import openpyxl
import xlrd
from charset_normalizer import from_bytes

from .errors import UnreadableInputError, UnsupportedFormatError
from .rules import (
    CSV_EXTENSIONS,
    DEFAULT_CSV_DELIMITER,
    OUTPUT_EXTENSION,
    SNIFF_SAMPLE_SIZE,
    SNIFFABLE_DELIMITERS,
    SUPPORTED_EXTENSIONS,
    XLS_EXTENSIONS,
    XLSX_EXTENSIONS,
)

logger = logging.getLogger(__name__)

Rows = List[List[str]]
PathLike = Union[str, "os.PathLike[str]"]


def file_extension(filename: str) -> str:
    return os.path.splitext(filename)[1].lower()


def decode_text(raw: bytes) -> Tuple[str, str]:
    """
    Decode delimited text, returning (text, encoding used).

    Rules:
    - Detect encoding best-effort via charset-normalizer.
    - A UTF-8 BOM is stripped.
    - If decode fails, fall back to UTF-8, then to replacement characters.
    """
    match = from_bytes(raw).best()
    decode_used = match.encoding if match is not None else "utf-8"

    if raw.startswith(b"\xef\xbb\xbf") and (decode_used.lower().replace("-", "_") in ("utf_8", "utf8")):
        decode_used = "utf-8-sig"

    try:
        text = raw.decode(decode_used)
    except (UnicodeDecodeError, LookupError):
        try:
            text = raw.decode("utf-8-sig")
            decode_used = "utf-8-sig"
        except UnicodeDecodeError:
            text = raw.decode("utf-8", errors="replace")
            decode_used = "utf-8"
            logger.warning("Input is not valid text in any detected encoding; undecodable bytes replaced")

    return text, decode_used


def sniff_delimiter(text: str) -> str:
    try:
        dialect = csv.Sniffer().sniff(text[:SNIFF_SAMPLE_SIZE], delimiters=SNIFFABLE_DELIMITERS)
    except csv.Error:
        return DEFAULT_CSV_DELIMITER
    return dialect.delimiter


def read_csv_rows(raw: bytes, delimiter: Optional[str] = None) -> Rows:
    text, encoding = decode_text(raw)
    if not delimiter:
        delimiter = sniff_delimiter(text)
    logger.debug("Reading delimited text (encoding=%s, delimiter=%r)", encoding, delimiter)

    reader = csv.reader(io.StringIO(text, newline=""), delimiter=delimiter)
    try:
        return [row for row in reader]
    except csv.Error as exc:
        raise UnsupportedFormatError(f"Unable to parse delimited text at line {reader.line_num}: {exc}") from exc


def spreadsheet_cell_text(value: Any) -> str:
    if value is None:
        return ""
    # numeric cells holding phone numbers come back as floats
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def read_xlsx_rows(raw: bytes) -> Rows:
    try:
        workbook = openpyxl.load_workbook(io.BytesIO(raw), read_only=True, data_only=True)
    except Exception as exc:
        raise UnsupportedFormatError(f"Unable to read .xlsx workbook: {exc}") from exc

    try:
        first_worksheet = workbook.worksheets[0]
        return [
            [spreadsheet_cell_text(value) for value in row]
            for row in first_worksheet.iter_rows(values_only=True)
        ]
    finally:
        workbook.close()


def read_xls_rows(raw: bytes) -> Rows:
    try:
        book = xlrd.open_workbook(file_contents=raw)
    except Exception as exc:
        raise UnsupportedFormatError(f"Unable to read .xls workbook: {exc}") from exc

    try:
        sheet = book.sheet_by_index(0)
        return [
            [spreadsheet_cell_text(value) for value in sheet.row_values(i)]
            for i in range(sheet.nrows)
        ]
    finally:
        book.release_resources()


def read_rows(raw: bytes, filename: str, delimiter: Optional[str] = None) -> Rows:
    """
    Decode file contents into raw rows based on the filename's extension.

    `delimiter` only applies to delimited text; spreadsheets are read cell by cell.
    """
    extension = file_extension(filename)
    if extension in CSV_EXTENSIONS:
        return read_csv_rows(raw, delimiter)
    if extension in XLSX_EXTENSIONS:
        return read_xlsx_rows(raw)
    if extension in XLS_EXTENSIONS:
        return read_xls_rows(raw)

    supported = ", ".join(SUPPORTED_EXTENSIONS)
    raise UnsupportedFormatError(
        f'Unable to parse "{filename}": "{extension}" is not a supported format ({supported})'
    )


def read_rows_from_path(path: PathLike, delimiter: Optional[str] = None) -> Rows:
    path = Path(path)
    if not path.is_file() or not os.access(path, os.R_OK):
        raise UnreadableInputError(f'Input file "{path}" is not readable')

    try:
        raw = path.read_bytes()
    except OSError as exc:
        raise UnreadableInputError(f'Input file "{path}" is not readable: {exc}') from exc

    return read_rows(raw, path.name, delimiter)


def output_filename_for(input_name: str) -> str:
    """Name of the .vcf file for an input: its basename up to the first dot."""
    base_name = os.path.basename(input_name).split(".")[0]
    return f"{base_name}{OUTPUT_EXTENSION}"


def output_path_for(input_path: PathLike, output_dir: Optional[PathLike] = None) -> Path:
    return Path(output_dir or ".") / output_filename_for(os.fspath(input_path))
