"""
import_engine.preview - Report-only validation pass shown before an import.

Uses the same RowValidator as the real run but never touches the store.
"""

from __future__ import annotations

from errors import FormatError
from import_engine.dedupe import Deduplicator
from import_engine.report import PreviewReport
from import_engine.row_validator import (
    COL_CODE, COL_NAME, COL_NATIONAL_ID, COL_GRADE, COL_STATUS,
    RowValidator, cell_text, to_number,
)
from import_engine.xlsx_parser import read_rows


def preview_import(content: bytes) -> PreviewReport:
    report = PreviewReport()
    try:
        raw_rows = read_rows(content)
    except FormatError as exc:
        report.error = str(exc)
        return report

    validator = RowValidator(Deduplicator())
    for index, raw in enumerate(raw_rows):
        outcome, _row = validator.validate(raw, index + 2)
        cells = list(raw) + [None] * 5
        report.add_row({
            "row_number": outcome.row_number,
            "student_code": cell_text(cells[COL_CODE]),
            "student_name": cell_text(cells[COL_NAME]),
            "national_id": cell_text(cells[COL_NATIONAL_ID]) or None,
            "grade": to_number(cells[COL_GRADE]),
            "status": cell_text(cells[COL_STATUS]).lower() or None,
            "valid": outcome.valid,
            "reasons": outcome.reasons,
        }, outcome.valid)

    return report
