"""Eviction policies applied when the report store is compacted."""

from __future__ import annotations

from typing import List, Protocol, Sequence

from models.records import WorkerReport


class RetentionPolicy(Protocol):
    def retain(self, reports: Sequence[WorkerReport], now: int) -> List[WorkerReport]:
        """Return the reports that should survive compaction, in order."""
        ...


class KeepAll:
    """Never evicts anything; the store stays append-only."""

    def retain(self, reports: Sequence[WorkerReport], now: int) -> List[WorkerReport]:
        return list(reports)


class DropOutsideWindow:
    """Evicts reports that can no longer fall inside the stats window."""

    def __init__(self, window_seconds: int = 300) -> None:
        if window_seconds <= 0:
            raise ValueError("window_seconds must be positive.")
        self.window_seconds = window_seconds

    def retain(self, reports: Sequence[WorkerReport], now: int) -> List[WorkerReport]:
        lower_bound = now - self.window_seconds
        return [report for report in reports if report.timestamp > lower_bound]
