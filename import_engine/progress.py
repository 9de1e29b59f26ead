"""
import_engine.progress - Percentage + phase label observed after every chunk.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, Optional

logger = logging.getLogger(__name__)

# Phase bands (percent)
READ_START, READ_END = 0, 10
VALIDATE_START, VALIDATE_END = 10, 30
PARENTS_START, PARENTS_END = 35, 65
CHILDREN_START, CHILDREN_END = 65, 95
LOGGING = 98
DONE = 100


@dataclass(frozen=True)
class RunProgress:
    percent: int
    phase_label: str


ProgressCallback = Callable[[RunProgress], None]


def band(start: int, end: int, done: int, total: int) -> int:
    """Position inside [start, end] after `done` of `total` items."""
    if total <= 0:
        return end
    return start + round(done / total * (end - start))


class ProgressReporter:
    """
    Keeps the percentage non-decreasing for the whole run and forwards
    every update to an optional observer.
    """

    def __init__(self, callback: Optional[ProgressCallback] = None):
        self.callback = callback
        self.percent = 0
        self.phase_label = ""
        self.history: list[RunProgress] = []

    def update(self, percent: int, phase_label: str | None = None) -> RunProgress:
        self.percent = max(self.percent, min(DONE, int(percent)))
        if phase_label is not None:
            self.phase_label = phase_label
        snapshot = RunProgress(self.percent, self.phase_label)
        self.history.append(snapshot)
        if self.callback is not None:
            self.callback(snapshot)
        return snapshot

    def phase(self, percent: int, phase_label: str) -> RunProgress:
        logger.info("%3d%% %s", percent, phase_label)
        return self.update(percent, phase_label)
