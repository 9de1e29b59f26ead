"""
services.course_service - Course listing and bulk clean-up.

Destructive operations are audited.  Grades go first, then students,
then courses, so foreign keys never dangle mid-purge.
"""

from __future__ import annotations

import logging

from errors import PreconditionError
from services.audit_service import AuditLogger
from services.record_store import RecordStore

logger = logging.getLogger(__name__)


class CourseService:

    def __init__(self, store: RecordStore | None = None,
                 audit: AuditLogger | None = None):
        self.store = store or RecordStore()
        self.audit = audit or AuditLogger(self.store)

    @staticmethod
    def _require_actor(actor_code: str | None) -> None:
        if not actor_code:
            raise PreconditionError("Your session has expired, please sign in again")

    def list_courses(self) -> list[dict]:
        courses, _total = self.store.select(
            "courses", columns=("id", "course_name"), order_by="course_name",
        )
        return courses

    def delete_course_grades(self, actor_code: str | None, course_id: str | None) -> int:
        """Remove every grade of one course.  Students are kept."""
        self._require_actor(actor_code)
        if not course_id:
            raise PreconditionError("Please select the course whose grades should be deleted")

        deleted = self.store.delete("grades", {"course_id": course_id})
        logger.info("Deleted %d grades of course %s", deleted, course_id)
        self.audit.log(actor_code, "grades", "delete_course_grades",
                       {"course_id": course_id, "deleted": deleted})
        return deleted

    def purge_all(self, actor_code: str | None) -> dict[str, int]:
        """Delete all grades, students and courses."""
        self._require_actor(actor_code)

        counts = {}
        for table in ("grades", "students", "courses"):
            counts[table] = self.store.delete(table)
        logger.warning("Purged all data: %s", counts)
        self.audit.log(actor_code, "system", "delete_all_data", counts)
        return counts
