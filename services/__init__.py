"""
services - Storage-facing layer sitting between the API / import engine and DB.
"""

from services.record_store import RecordStore       # noqa: F401
from services.audit_service import AuditLogger      # noqa: F401
from services.course_service import CourseService   # noqa: F401
