from __future__ import annotations
from contextlib import contextmanager
from functools import lru_cache
from threading import Lock
from typing import Iterator, List, Optional, Tuple

from models.records import WorkerReport
from services.errors import StorageUnavailable
from settings import RETENTION_WINDOW, get_settings
from storage.retention import DropOutsideWindow, KeepAll, RetentionPolicy


class ReportStore:
    """Process-owned, append-only sequence of accepted worker reports.

    Every operation holds the same lock, so a snapshot never observes a
    partially applied append or compaction. Failing to obtain the lock within
    ``lock_timeout`` seconds, or touching a store whose critical section
    previously raised, surfaces as ``StorageUnavailable``.
    """

    def __init__(
        self,
        retention: Optional[RetentionPolicy] = None,
        lock_timeout: float = 5.0,
    ) -> None:
        self.retention: RetentionPolicy = retention or KeepAll()
        self.lock_timeout = lock_timeout
        self._reports: List[WorkerReport] = []
        self._lock = Lock()
        self._poisoned = False

    @property
    def poisoned(self) -> bool:
        return self._poisoned

    def append(self, report: WorkerReport) -> None:
        with self._locked("store report") as reports:
            reports.append(report)

    def snapshot(self) -> Tuple[WorkerReport, ...]:
        """Return an independent copy of all reports in insertion order."""

        with self._locked("access reports") as reports:
            return tuple(reports)

    def compact(self, now: int) -> int:
        """Apply the retention policy and return how many reports were evicted."""

        with self._locked("compact reports") as reports:
            kept = self.retention.retain(tuple(reports), now)
            evicted = len(reports) - len(kept)
            reports[:] = kept
            return evicted

    def __len__(self) -> int:
        with self._locked("count reports") as reports:
            return len(reports)

    @contextmanager
    def _locked(self, action: str) -> Iterator[List[WorkerReport]]:
        if not self._lock.acquire(timeout=self.lock_timeout):
            raise StorageUnavailable(
                f"Failed to {action}: lock not acquired within {self.lock_timeout}s."
            )
        try:
            if self._poisoned:
                raise StorageUnavailable(
                    f"Failed to {action}: store is in a broken state."
                )
            try:
                yield self._reports
            except Exception as exc:
                self._poisoned = True
                raise StorageUnavailable(f"Failed to {action}: {exc}") from exc
        finally:
            self._lock.release()


@lru_cache
def build_default_store(
    window_seconds: Optional[int] = None,
    retention_policy: Optional[str] = None,
) -> ReportStore:
    settings = get_settings()
    window = settings.window_seconds if window_seconds is None else window_seconds
    policy_name = settings.retention_policy if retention_policy is None else retention_policy
    retention: RetentionPolicy
    if policy_name == RETENTION_WINDOW:
        retention = DropOutsideWindow(window_seconds=window)
    else:
        retention = KeepAll()
    return ReportStore(retention=retention, lock_timeout=settings.lock_timeout)
