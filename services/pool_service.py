"""Ingestion and stats queries wired around a single report store."""

from __future__ import annotations

import logging
import time
from functools import lru_cache
from typing import Callable, Dict, Optional

from models.records import WorkerReport
from services.aggregator import Aggregator, PoolStats
from services.errors import StorageUnavailable, ValidationError
from services.validation import validate_report
from settings import get_settings
from storage.report_store import ReportStore, build_default_store

logger = logging.getLogger(__name__)

Clock = Callable[[], int]


def utc_now() -> int:
    return int(time.time())


class PoolStatsService:
    """Coordinates validation, storage, and aggregation of worker reports."""

    def __init__(
        self,
        store: ReportStore,
        aggregator: Aggregator,
        clock: Clock = utc_now,
    ) -> None:
        self.store = store
        self.aggregator = aggregator
        self.clock = clock

    def submit(self, report: WorkerReport) -> None:
        """Validate ``report`` and append it to the store.

        Raises a ``ValidationError`` subclass for the first invalid field, or
        ``StorageUnavailable`` when the store cannot be written.
        """
        try:
            validate_report(report)
        except ValidationError as exc:
            logger.warning(
                "Rejected worker report",
                extra={
                    "worker_id": report.worker_id or None,
                    "pool": report.pool or None,
                    "reason": exc.message,
                },
            )
            raise

        try:
            self.store.append(report)
        except StorageUnavailable as exc:
            logger.error(
                "Report store unavailable while storing report",
                extra={"worker_id": report.worker_id, "pool": report.pool, "reason": str(exc)},
            )
            raise

        logger.debug(
            "Accepted worker report",
            extra={"worker_id": report.worker_id, "pool": report.pool},
        )

    def query_stats(self, now: Optional[int] = None) -> Dict[str, PoolStats]:
        """Return per-pool statistics for the window ending at ``now``."""
        reference = self.clock() if now is None else now
        try:
            snapshot = self.store.snapshot()
        except StorageUnavailable as exc:
            logger.error(
                "Report store unavailable while reading reports",
                extra={"reason": str(exc)},
            )
            raise

        stats = self.aggregator.compute(snapshot, reference)
        logger.debug(
            "Computed pool statistics",
            extra={
                "report_count": len(snapshot),
                "pool_count": len(stats),
                "window_seconds": self.aggregator.window_seconds,
            },
        )
        return stats

    def compact(self, now: Optional[int] = None) -> int:
        """Evict reports according to the store's retention policy."""
        reference = self.clock() if now is None else now
        evicted = self.store.compact(reference)
        if evicted:
            logger.info("Compacted report store", extra={"evicted": evicted})
        return evicted


@lru_cache
def build_default_service() -> PoolStatsService:
    """Factory that wires the service with the process-wide store."""
    settings = get_settings()
    store = build_default_store()
    aggregator = Aggregator(window_seconds=settings.window_seconds)
    return PoolStatsService(store=store, aggregator=aggregator)
