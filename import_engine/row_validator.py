"""
import_engine.row_validator - Validate and type one spreadsheet row.

Single-responsibility: given a raw positional row and the run's
Deduplicator, return a ValidationOutcome and, when the row is valid,
an UploadRow ready for projection.  Rules are evaluated independently
so one row can collect several reasons.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Any, Optional

from db.models import STUDENT_STATUSES
from import_engine.dedupe import CODE, NATIONAL_ID, Deduplicator

# Column positions in the upload template
COL_CODE, COL_NAME, COL_NATIONAL_ID, COL_GRADE, COL_STATUS = range(5)

# Reason codes
MISSING_REQUIRED = "missing required fields"
NATIONAL_ID_MISSING = "national id missing"
DUPLICATE_NATIONAL_ID = "duplicate national id"
GRADE_MISSING = "grade missing"
INVALID_GRADE = "invalid grade"
LEGACY_FORMAT = "unsupported legacy format"
STATUS_MISSING = "status missing"
INVALID_STATUS = "invalid status"
DUPLICATE_CODE = "duplicate student code"

# A grade column this small in position 2 means the old code/name/grade layout
LEGACY_GRADE_MAX = 100

# grades.grade is a signed 64-bit INTEGER
GRADE_MIN = -(2 ** 63)
GRADE_MAX = 2 ** 63 - 1


@dataclass
class UploadRow:
    row_number: int
    student_code: str
    student_name: str
    national_id: str
    grade: int | float
    status: str


@dataclass
class ValidationOutcome:
    row_number: int
    reasons: list[str] = field(default_factory=list)

    @property
    def valid(self) -> bool:
        return not self.reasons

    @property
    def message(self) -> str:
        return f"Row {self.row_number}: " + "; ".join(self.reasons)


def cell_text(value: Any) -> str:
    """Stringify a cell the way the spreadsheet displays it."""
    if value is None:
        return ""
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value).strip()


def to_number(value: Any) -> Optional[int | float]:
    """Return a finite number or None."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        num = value
    else:
        text = str(value).strip()
        if not text:
            return None
        try:
            num = float(text)
        except ValueError:
            return None
    if not math.isfinite(num):
        return None
    if isinstance(num, float) and num.is_integer():
        return int(num)
    return num


class RowValidator:

    def __init__(self, dedupe: Deduplicator | None = None):
        self.dedupe = dedupe or Deduplicator()

    def validate(self, raw: tuple | list, row_number: int
                 ) -> tuple[ValidationOutcome, Optional[UploadRow]]:
        cells = list(raw) + [None] * (5 - len(raw))
        code = cell_text(cells[COL_CODE])
        name = cell_text(cells[COL_NAME])
        national_id = cell_text(cells[COL_NATIONAL_ID])
        grade_text = cell_text(cells[COL_GRADE])
        status = cell_text(cells[COL_STATUS]).lower()

        outcome = ValidationOutcome(row_number)
        reasons = outcome.reasons

        if not code or not name:
            reasons.append(MISSING_REQUIRED)

        if not national_id:
            reasons.append(NATIONAL_ID_MISSING)
        else:
            if self.dedupe.is_duplicate(national_id, NATIONAL_ID):
                reasons.append(DUPLICATE_NATIONAL_ID)
            self.dedupe.record(national_id, NATIONAL_ID)

        grade = to_number(cells[COL_GRADE])
        if not grade_text:
            # an empty column 2 counts as 0, so it reads as legacy too
            legacy = to_number(national_id) if national_id else 0
            if legacy is not None and legacy <= LEGACY_GRADE_MAX:
                reasons.append(LEGACY_FORMAT)
            else:
                reasons.append(GRADE_MISSING)
        elif grade is None or not GRADE_MIN <= grade <= GRADE_MAX:
            reasons.append(INVALID_GRADE)

        if not status:
            reasons.append(STATUS_MISSING)
        elif status not in STUDENT_STATUSES:
            reasons.append(INVALID_STATUS)

        if code:
            if self.dedupe.is_duplicate(code, CODE):
                reasons.append(DUPLICATE_CODE)
            self.dedupe.record(code, CODE)

        if not outcome.valid:
            return outcome, None

        return outcome, UploadRow(
            row_number=row_number,
            student_code=code,
            student_name=name,
            national_id=national_id,
            grade=grade,
            status=status,
        )
