"""
import_engine.dedupe - In-file duplicate tracking.

Scoped to one run.  Storage is never consulted: a code that already
exists from an earlier import is simply overwritten by the upsert.
"""

from __future__ import annotations

CODE = "code"
NATIONAL_ID = "national_id"


class Deduplicator:

    def __init__(self):
        self._seen: dict[str, set[str]] = {}
        self.reset()

    def reset(self) -> None:
        self._seen = {CODE: set(), NATIONAL_ID: set()}

    def is_duplicate(self, value: str, kind: str) -> bool:
        return value in self._seen[kind]

    def record(self, value: str, kind: str) -> None:
        self._seen[kind].add(value)
