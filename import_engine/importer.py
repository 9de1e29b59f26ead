"""
import_engine.importer - Top-level orchestrator.

Coordinates xlsx_parser → row_validator → students → grades → audit
and produces a RunResult.  run_import() is the error boundary: every
IngestError becomes an aborted RunResult with one user-facing message.

Writes are all-or-nothing only at the validation boundary.  Once the
first chunk is committed a store failure aborts the run but leaves the
committed chunks in place.
"""

from __future__ import annotations

import hashlib
import logging
import threading
from contextlib import contextmanager
from typing import Optional

import config
from errors import IngestError, PreconditionError, StoreError, ValidationError
from import_engine.dedupe import Deduplicator
from import_engine.grades import ChildUpserter
from import_engine.progress import (
    READ_START, VALIDATE_START, VALIDATE_END, PARENTS_START, CHILDREN_START,
    LOGGING, DONE, ProgressCallback, ProgressReporter, band,
)
from import_engine.report import RunResult, RunState
from import_engine.row_validator import RowValidator, UploadRow
from import_engine.students import IdResolver, ParentUpserter
from import_engine.xlsx_parser import read_rows
from services.audit_service import AuditLogger
from services.record_store import RecordStore

logger = logging.getLogger(__name__)

# (course_id, file digest) pairs with a run in flight in this process
_active_runs: set[tuple[str, str]] = set()
_active_lock = threading.Lock()


class RunInProgressError(PreconditionError):
    kind = "in_progress"


@contextmanager
def _run_guard(course_id: str, content: bytes):
    key = (course_id, hashlib.sha256(content).hexdigest())
    with _active_lock:
        if key in _active_runs:
            raise RunInProgressError("An import of this file for this course is already running")
        _active_runs.add(key)
    try:
        yield
    finally:
        with _active_lock:
            _active_runs.discard(key)


class BulkImporter:

    def __init__(
        self,
        store: Optional[RecordStore] = None,
        audit: Optional[AuditLogger] = None,
        on_progress: Optional[ProgressCallback] = None,
        *,
        student_chunk_size: int = config.STUDENT_CHUNK_SIZE,
        grade_chunk_size: int = config.GRADE_CHUNK_SIZE,
        lookup_chunk_size: int = config.ID_LOOKUP_CHUNK_SIZE,
        status_policy: Optional[str] = None,
    ):
        self.store = store or RecordStore()
        self.audit = audit or AuditLogger(self.store)
        self.progress = ProgressReporter(on_progress)
        self.student_chunk_size = student_chunk_size
        self.grade_chunk_size = grade_chunk_size
        self.lookup_chunk_size = lookup_chunk_size
        self.status_policy = status_policy or config.GRADE_STATUS_POLICY
        self.result = RunResult()

    # ── State ──────────────────────────────────────────────────────────

    def _enter(self, state: RunState, percent: int, label: str) -> None:
        self.result.state = state
        self.progress.phase(percent, label)

    # ── Run ────────────────────────────────────────────────────────────

    def run(self, content: bytes, course_id: Optional[str],
            actor_code: Optional[str]) -> RunResult:
        """
        Execute one import.  Raises IngestError on any abort; use
        run_import() for the non-raising form.
        """
        self.result = RunResult(course_id=course_id)

        if not actor_code:
            raise PreconditionError("Your session has expired, please sign in again")
        course = self._load_course(course_id)
        self.result.course_name = course["course_name"]

        with _run_guard(course_id, content):
            self._enter(RunState.READING_FILE, READ_START, "Reading file...")
            raw_rows = read_rows(content)

            self._enter(RunState.VALIDATING, VALIDATE_START, "Validating data...")
            rows = self._validate(raw_rows)

            self._enter(RunState.UPSERTING_PARENTS, PARENTS_START,
                        "Updating student records...")
            parents = ParentUpserter(self.store, self.progress, self.student_chunk_size)
            try:
                parents.upsert(rows)
            finally:
                self.result.students_upserted = parents.upserted

            self._enter(RunState.RESOLVING_IDS, CHILDREN_START, "Recording grades...")
            ids = IdResolver(self.store, self.lookup_chunk_size).resolve(
                [r.student_code for r in rows]
            )

            self.result.state = RunState.UPSERTING_CHILDREN
            children = ChildUpserter(self.store, self.progress, course_id,
                                     self.grade_chunk_size, self.status_policy)
            grades = children.project(rows, ids)
            self.result.skipped_unresolved = len(rows) - len(grades)
            try:
                children.upsert(grades)
            finally:
                self.result.grades_upserted = children.upserted
            self.result.rows_processed = len(rows)

            self._enter(RunState.LOGGING, LOGGING, "Saving audit record...")
            self.audit.log(actor_code, "bulk_upload", "upsert", {
                "course_id": course_id,
                "total_rows": self.result.rows_processed,
                "students_processed": self.result.students_upserted,
                "grades_inserted": self.result.grades_upserted,
            })

            self._enter(RunState.DONE, DONE, "Upload completed successfully!")

        self.result.message = (
            f"Processed {self.result.rows_processed} records "
            f"({self.result.students_upserted} students added/updated, "
            f"{self.result.grades_upserted} grades) for course: {self.result.course_name}"
        )
        return self.result

    def abort(self, exc: IngestError) -> RunResult:
        """Record exc on the current result and mark the run aborted."""
        result = self.result
        result.state = RunState.ABORTED
        result.error = exc.kind
        if isinstance(exc, ValidationError):
            result.reasons = exc.shown
            result.overflow = exc.overflow
            result.message = str(exc)
        elif isinstance(exc, StoreError):
            result.message = f"An error occurred while saving the data: {exc}"
        else:
            result.message = str(exc)
        logger.error("Import aborted (%s): %s", exc.kind, exc)
        return result

    # ── Stages ─────────────────────────────────────────────────────────

    def _load_course(self, course_id: Optional[str]) -> dict:
        if not course_id:
            raise PreconditionError("Please select a course first")
        found, _total = self.store.select("courses", {"id": course_id},
                                          columns=("id", "course_name"))
        if not found:
            raise PreconditionError("The selected course is no longer available")
        return found[0]

    def _validate(self, raw_rows: list[tuple]) -> list[UploadRow]:
        """Authoritative pass: any invalid row aborts before the first write."""
        validator = RowValidator(Deduplicator())
        accepted: list[UploadRow] = []
        reasons: list[str] = []
        total = len(raw_rows)

        for index, raw in enumerate(raw_rows):
            if index % config.VALIDATE_PROGRESS_EVERY == 0:
                self.progress.update(band(VALIDATE_START, VALIDATE_END, index, total))
            outcome, row = validator.validate(raw, index + 2)   # row 1 = header
            if outcome.valid:
                accepted.append(row)
            else:
                reasons.append(outcome.message)

        if reasons:
            raise ValidationError(reasons)
        if not accepted:
            raise ValidationError(["The file contains no data rows"])
        self.progress.update(VALIDATE_END)
        logger.info("Validated %d rows", len(accepted))
        return accepted


def run_import(
    content: bytes,
    course_id: Optional[str],
    actor_code: Optional[str],
    *,
    on_progress: Optional[ProgressCallback] = None,
    store: Optional[RecordStore] = None,
    audit: Optional[AuditLogger] = None,
) -> RunResult:
    """
    Import an .xlsx workbook of students + grades into one course.

    Returns a RunResult; aborted runs carry the error kind and message
    instead of raising.
    """
    importer = BulkImporter(store, audit, on_progress)
    try:
        return importer.run(content, course_id, actor_code)
    except IngestError as exc:
        return importer.abort(exc)
