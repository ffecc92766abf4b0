"""Background eviction of reports that fell out of the stats window."""

from __future__ import annotations

import logging
from threading import Event, Thread
from typing import Optional

from services.errors import StorageUnavailable
from services.pool_service import PoolStatsService

logger = logging.getLogger(__name__)


class CompactionWorker:
    """Runs ``service.compact()`` every ``interval`` seconds on a daemon thread."""

    def __init__(self, service: PoolStatsService, interval: float = 60.0) -> None:
        if interval <= 0:
            raise ValueError("interval must be positive.")
        self.service = service
        self.interval = interval
        self._stop = Event()
        self._thread: Optional[Thread] = None

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def start(self) -> None:
        if self.running:
            return
        self._stop.clear()
        self._thread = Thread(target=self._run, name="report-compaction", daemon=True)
        self._thread.start()

    def stop(self, timeout: Optional[float] = 5.0) -> None:
        self._stop.set()
        thread, self._thread = self._thread, None
        if thread is not None:
            thread.join(timeout=timeout)

    def run_once(self) -> int:
        try:
            return self.service.compact()
        except StorageUnavailable as exc:
            logger.error("Compaction skipped", extra={"reason": str(exc)})
            return 0

    def _run(self) -> None:
        while not self._stop.wait(self.interval):
            self.run_once()
