"""
GradeDB - Failure taxonomy of an import run.

Every error raised inside the pipeline derives from IngestError so the
orchestrator can turn it into a single user-facing message.
"""

from __future__ import annotations

import config


class IngestError(Exception):
    """Base class for failures that abort a run."""

    kind = "error"


class FormatError(IngestError):
    """The upload is not a readable .xlsx workbook."""

    kind = "format"


class PreconditionError(IngestError):
    """No actor, no course selected, course vanished, or run already active."""

    kind = "precondition"


class StoreError(IngestError):
    """A chunked write or read against the record store failed."""

    kind = "store"


class ValidationError(IngestError):
    """
    One or more rows failed validation.  Carries every row-level reason;
    the message lists only the first few plus an overflow count.
    """

    kind = "validation"

    def __init__(self, reasons: list[str], limit: int | None = None):
        self.reasons = list(reasons)
        self.limit = config.MAX_REPORTED_ERRORS if limit is None else limit
        super().__init__(self._format())

    @property
    def shown(self) -> list[str]:
        return self.reasons[:self.limit]

    @property
    def overflow(self) -> int:
        return max(0, len(self.reasons) - self.limit)

    def _format(self) -> str:
        lines = ["Found errors in the file:"] + self.shown
        if self.overflow:
            lines.append(f"...and {self.overflow} more errors")
        return "\n".join(lines)
