"""
db - Database layer.

Public API:
    init_db()         → create engine + tables
    get_session()     → new Session
    session_scope()   → commit-or-rollback context manager
    Course, Student, Grade, AuditEntry → ORM models
"""

from db.engine import init_db, get_session, session_scope          # noqa: F401
from db.models import Base, Course, Student, Grade, AuditEntry    # noqa: F401
