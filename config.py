"""
GradeDB - Centralised configuration.

All tunables live here.  Every other module imports from config
instead of reading os.environ directly.
"""

from __future__ import annotations
import os
from pathlib import Path


# ── Paths ──────────────────────────────────────────────────────────────
BASE_DIR = Path(__file__).resolve().parent

# ── Database ───────────────────────────────────────────────────────────
DB_URL = os.environ.get("GRADEDB_DB", f"sqlite:///{BASE_DIR / 'gradedb.sqlite'}")

# ── Server ─────────────────────────────────────────────────────────────
HOST      = os.environ.get("GRADEDB_HOST", "0.0.0.0")
PORT      = int(os.environ.get("GRADEDB_PORT", "5000"))
DEBUG     = os.environ.get("GRADEDB_DEBUG", "0") == "1"
SECRET    = os.environ.get("GRADEDB_SECRET", "gradedb-dev-key-change-in-prod")
LOG_LEVEL = os.environ.get("GRADEDB_LOG_LEVEL", "INFO").upper()

# Flask rejects larger request bodies with 413
MAX_UPLOAD_BYTES = int(os.environ.get("GRADEDB_MAX_UPLOAD_MB", "16")) * 1024 * 1024

# ── Bulk import ────────────────────────────────────────────────────────
STUDENT_CHUNK_SIZE   = 100    # rows per students upsert
GRADE_CHUNK_SIZE     = 100    # rows per grades upsert
ID_LOOKUP_CHUNK_SIZE = 500    # codes per IN (...) filter when re-reading ids
MAX_REPORTED_ERRORS  = 5      # row reasons shown in a validation failure
VALIDATE_PROGRESS_EVERY = 50  # rows between progress updates while validating

# "omit"    - bulk grade writes never touch grades.status
# "inherit" - grades.status takes the row's validated status
GRADE_STATUS_POLICY = os.environ.get("GRADEDB_GRADE_STATUS", "omit").lower()
