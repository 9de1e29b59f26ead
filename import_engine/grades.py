"""
import_engine.grades - Child stage: upsert one grade per (student, course).
"""

from __future__ import annotations

import logging
import math

import config
from import_engine.progress import CHILDREN_START, CHILDREN_END, ProgressReporter, band
from import_engine.row_validator import UploadRow
from import_engine.students import chunked
from services.record_store import RecordStore

logger = logging.getLogger(__name__)

GRADES = "grades"
GRADE_KEY = ("student_id", "course_id")

STATUS_OMIT = "omit"
STATUS_INHERIT = "inherit"
STATUS_POLICIES = (STATUS_OMIT, STATUS_INHERIT)


def whole_grade(value: int | float) -> int:
    """grades.grade is an integer column; halves round up."""
    return int(math.floor(value + 0.5))


class ChildUpserter:

    def __init__(self, store: RecordStore, progress: ProgressReporter,
                 course_id: str,
                 chunk_size: int = config.GRADE_CHUNK_SIZE,
                 status_policy: str = config.GRADE_STATUS_POLICY):
        if status_policy not in STATUS_POLICIES:
            raise ValueError(f"Unknown grade status policy '{status_policy}'")
        self.store = store
        self.progress = progress
        self.course_id = course_id
        self.chunk_size = chunk_size
        self.status_policy = status_policy
        self.upserted = 0

    def project(self, rows: list[UploadRow], ids: dict[str, str]) -> list[dict]:
        """Grade dicts for rows whose student resolved; the rest are dropped."""
        grades = []
        for row in rows:
            student_id = ids.get(row.student_code)
            if student_id is None:
                continue
            grade = {
                "student_id": student_id,
                "course_id": self.course_id,
                "grade": whole_grade(row.grade),
            }
            if self.status_policy == STATUS_INHERIT:
                grade["status"] = row.status
            grades.append(grade)
        return grades

    def upsert(self, grades: list[dict]) -> int:
        for chunk in chunked(grades, self.chunk_size):
            self.store.upsert(GRADES, list(chunk), GRADE_KEY)
            self.upserted += len(chunk)
            self.progress.update(band(CHILDREN_START, CHILDREN_END, self.upserted, len(grades)))
        logger.info("Upserted %d grades for course %s", self.upserted, self.course_id)
        return self.upserted
