"""
services.audit_service - Fire-and-forget audit trail.

A failing audit write is logged locally and never reaches the caller:
an import that already committed its rows must still report success.
"""

from __future__ import annotations

import json
import logging

from services.record_store import RecordStore

logger = logging.getLogger(__name__)


class AuditLogger:

    def __init__(self, store: RecordStore | None = None):
        self.store = store or RecordStore()

    def log(self, actor_code: str, subject: str, operation: str,
            payload: dict | None = None) -> None:
        try:
            self.store.insert("audit_log", [{
                "actor_code": actor_code,
                "subject": subject,
                "operation": operation,
                "payload": json.dumps(payload or {}, ensure_ascii=False, default=str),
            }])
        except Exception as exc:
            logger.warning("Audit log failed (%s/%s by %s): %s",
                           subject, operation, actor_code, exc)
