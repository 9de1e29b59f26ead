"""
import_engine - Spreadsheet import pipeline for students and grades.

Public API:
    run_import(file_content, course_id, actor_code) → RunResult
    preview_import(file_content)                    → PreviewReport
"""

from import_engine.importer import BulkImporter, run_import      # noqa: F401
from import_engine.preview import preview_import                  # noqa: F401
from import_engine.report import PreviewReport, RunResult, RunState   # noqa: F401
