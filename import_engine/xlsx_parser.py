"""
import_engine.xlsx_parser - Low-level workbook reading.

Responsibilities:
  • Open the first worksheet of an .xlsx upload
  • Drop the header row and trailing blank rows
  • Return positional cell tuples in sheet order

No semantic validation happens here; callers number rows as
index + 2 (header row + 1-based display).
"""

from __future__ import annotations

from io import BytesIO
from zipfile import BadZipFile

from openpyxl import load_workbook
from openpyxl.utils.exceptions import InvalidFileException

from errors import FormatError

HEADER_ROWS = 1


def read_rows(content: bytes) -> list[tuple]:
    """
    Parse raw .xlsx bytes into data rows (header discarded).
    Raises FormatError if the content is not a workbook.
    """
    if not content:
        raise FormatError("The uploaded file is empty")

    try:
        wb = load_workbook(BytesIO(content), read_only=True, data_only=True)
    except (InvalidFileException, BadZipFile, KeyError, ValueError, OSError) as exc:
        raise FormatError("Please choose a valid Excel file (.xlsx)") from exc

    try:
        if not wb.worksheets:
            raise FormatError("The workbook has no worksheets")
        # read-only sheets are parsed lazily, so broken sheet XML surfaces here
        try:
            rows = [tuple(r) for r in wb.worksheets[0].iter_rows(values_only=True)]
        except Exception as exc:
            raise FormatError("Please choose a valid Excel file (.xlsx)") from exc
    finally:
        wb.close()

    rows = rows[HEADER_ROWS:]
    while rows and _is_blank(rows[-1]):
        rows.pop()
    return rows


def _is_blank(row: tuple) -> bool:
    return all(v is None or str(v).strip() == "" for v in row)
