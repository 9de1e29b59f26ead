"""
db.models - SQLAlchemy ORM declarations.

Tables
------
courses    - one row per course.  Read-only to the bulk importer.
students   - one row per student, natural key student_code.  The id is
             assigned on insert and never supplied by the importer.
grades     - one grade per (student, course) pair.  A second import for
             the same pair overwrites the value instead of adding a row.
audit_log  - append-only trail of administrative actions.
"""

from __future__ import annotations

import json
import uuid
from datetime import datetime, timezone

from sqlalchemy import (
    Column, String, Integer, DateTime, Text, ForeignKey, UniqueConstraint,
)
from sqlalchemy.orm import DeclarativeBase, relationship


STUDENT_STATUSES = ("active", "absent", "hide")


def _new_id() -> str:
    return str(uuid.uuid4())


def _now() -> datetime:
    return datetime.now(timezone.utc)


class Base(DeclarativeBase):
    pass


class Course(Base):
    __tablename__ = "courses"

    id          = Column(String(36), primary_key=True, default=_new_id)
    course_name = Column(String(200), nullable=False, unique=True)
    created_at  = Column(DateTime, default=_now)

    grades = relationship("Grade", back_populates="course",
                          cascade="all, delete-orphan", passive_deletes=True)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "course_name": self.course_name,
            "created_at": self.created_at.isoformat() if self.created_at else "",
        }


class Student(Base):
    __tablename__ = "students"

    # ── Identity ───────────────────────────────────────────────────────
    id           = Column(String(36), primary_key=True, default=_new_id)
    student_code = Column(String(100), nullable=False, unique=True, index=True)

    # ── Overwritten on every import of the same code ───────────────────
    student_name = Column(String(300), nullable=False, default="")
    national_id  = Column(String(50), index=True, default="")
    status       = Column(String(10), nullable=False, default="active")

    created_at = Column(DateTime, default=_now)

    grades = relationship("Grade", back_populates="student",
                          cascade="all, delete-orphan", passive_deletes=True)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "student_code": self.student_code,
            "student_name": self.student_name or "",
            "national_id": self.national_id or "",
            "status": self.status,
        }


class Grade(Base):
    __tablename__ = "grades"

    id         = Column(String(36), primary_key=True, default=_new_id)
    student_id = Column(String(36),
                        ForeignKey("students.id", ondelete="CASCADE"),
                        nullable=False, index=True)
    course_id  = Column(String(36),
                        ForeignKey("courses.id", ondelete="CASCADE"),
                        nullable=False, index=True)
    grade      = Column(Integer, nullable=False)
    status     = Column(String(10), default="active")
    created_at = Column(DateTime, default=_now)

    student = relationship("Student", back_populates="grades")
    course  = relationship("Course", back_populates="grades")

    __table_args__ = (
        UniqueConstraint("student_id", "course_id", name="uq_grade_student_course"),
    )

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "student_id": self.student_id,
            "course_id": self.course_id,
            "grade": self.grade,
            "status": self.status,
        }


class AuditEntry(Base):
    __tablename__ = "audit_log"

    id         = Column(Integer, primary_key=True, autoincrement=True)
    actor_code = Column(String(100), nullable=False, index=True)
    subject    = Column(String(100), nullable=False)
    operation  = Column(String(100), nullable=False)
    payload    = Column(Text, default="{}")
    created_at = Column(DateTime, default=_now)

    def to_dict(self) -> dict:
        try:
            payload = json.loads(self.payload or "{}")
        except (json.JSONDecodeError, TypeError):
            payload = {}
        return {
            "id": self.id,
            "actor_code": self.actor_code,
            "subject": self.subject,
            "operation": self.operation,
            "payload": payload,
            "created_at": self.created_at.isoformat() if self.created_at else "",
        }
