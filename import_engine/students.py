"""
import_engine.students - Parent stage: upsert students, then read their ids back.

The store's upsert does not hand back ids for newly inserted rows, so
grades cannot be written straight from the upsert result.  The ids are
re-read in a second pass, chunked to stay under the store's filter-list
limit.
"""

from __future__ import annotations

import logging
from typing import Iterator, Sequence

import config
from import_engine.progress import PARENTS_START, PARENTS_END, ProgressReporter, band
from import_engine.row_validator import UploadRow
from services.record_store import RecordStore

logger = logging.getLogger(__name__)

STUDENTS = "students"
STUDENT_KEY = ("student_code",)


def chunked(items: Sequence, size: int) -> Iterator[Sequence]:
    for start in range(0, len(items), size):
        yield items[start:start + size]


def project_student(row: UploadRow) -> dict:
    return {
        "student_code": row.student_code,
        "student_name": row.student_name,
        "national_id": row.national_id,
        "status": row.status,
    }


class ParentUpserter:

    def __init__(self, store: RecordStore, progress: ProgressReporter,
                 chunk_size: int = config.STUDENT_CHUNK_SIZE):
        self.store = store
        self.progress = progress
        self.chunk_size = chunk_size
        self.upserted = 0    # rows committed so far

    def upsert(self, rows: list[UploadRow]) -> int:
        """
        Write every row's student in chunks keyed on student_code.
        A failing chunk raises StoreError; earlier chunks stay committed.
        """
        students = [project_student(r) for r in rows]
        for chunk in chunked(students, self.chunk_size):
            self.store.upsert(STUDENTS, list(chunk), STUDENT_KEY)
            self.upserted += len(chunk)
            self.progress.update(band(PARENTS_START, PARENTS_END, self.upserted, len(students)))
        logger.info("Upserted %d students in %d-row chunks", self.upserted, self.chunk_size)
        return self.upserted


class IdResolver:

    def __init__(self, store: RecordStore,
                 chunk_size: int = config.ID_LOOKUP_CHUNK_SIZE):
        self.store = store
        self.chunk_size = chunk_size

    def resolve(self, codes: list[str]) -> dict[str, str]:
        """Map student_code → id.  Codes the store no longer has are left out."""
        mapping: dict[str, str] = {}
        for chunk in chunked(codes, self.chunk_size):
            found, _total = self.store.select(
                STUDENTS, {"student_code": list(chunk)},
                columns=("id", "student_code"),
            )
            for rec in found:
                mapping[rec["student_code"]] = rec["id"]

        missing = len(set(codes)) - len(mapping)
        if missing:
            logger.warning("%d student codes did not resolve to an id", missing)
        return mapping
