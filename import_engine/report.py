"""
import_engine.report - Structured results of preview and import runs.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional


class RunState(str, Enum):
    IDLE = "idle"
    READING_FILE = "reading_file"
    VALIDATING = "validating"
    UPSERTING_PARENTS = "upserting_parents"
    RESOLVING_IDS = "resolving_ids"
    UPSERTING_CHILDREN = "upserting_children"
    LOGGING = "logging"
    DONE = "done"
    ABORTED = "aborted"


@dataclass
class RunResult:
    course_id: Optional[str] = None
    course_name: str = ""
    state: RunState = RunState.IDLE
    rows_processed: int = 0
    students_upserted: int = 0
    grades_upserted: int = 0
    skipped_unresolved: int = 0
    error: Optional[str] = None            # IngestError.kind when aborted
    message: str = ""
    reasons: list[str] = field(default_factory=list)   # first N row reasons
    overflow: int = 0

    @property
    def ok(self) -> bool:
        return self.state is RunState.DONE

    def to_dict(self) -> dict:
        return {
            "ok": self.ok,
            "state": self.state.value,
            "course_id": self.course_id,
            "course_name": self.course_name,
            "rows_processed": self.rows_processed,
            "students_upserted": self.students_upserted,
            "grades_upserted": self.grades_upserted,
            "skipped_unresolved": self.skipped_unresolved,
            "error": self.error,
            "message": self.message,
            "reasons": self.reasons,
            "overflow": self.overflow,
        }


@dataclass
class PreviewReport:
    total_rows: int = 0
    valid_rows: int = 0
    rows: list[dict] = field(default_factory=list)   # one entry per data row
    error: Optional[str] = None

    @property
    def invalid_rows(self) -> int:
        return self.total_rows - self.valid_rows

    def add_row(self, row: dict, valid: bool):
        self.rows.append(row)
        self.total_rows += 1
        if valid:
            self.valid_rows += 1

    def to_dict(self) -> dict:
        return {
            "total_rows": self.total_rows,
            "valid_rows": self.valid_rows,
            "invalid_rows": self.invalid_rows,
            "rows": self.rows,
            "error": self.error,
        }
