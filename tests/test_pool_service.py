"""Tests for the submit/query operations exposed to the transport layer."""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor

import pytest

from models.records import WorkerReport
from services.aggregator import Aggregator, PoolStats
from services.compaction import CompactionWorker
from services.errors import InvalidHashrate, InvalidPool, StorageUnavailable
from services.pool_service import PoolStatsService
from storage.report_store import ReportStore
from storage.retention import DropOutsideWindow

NOW = 1_700_000_000


def _service(store: ReportStore | None = None, now: int = NOW) -> PoolStatsService:
    return PoolStatsService(
        store=store if store is not None else ReportStore(),
        aggregator=Aggregator(),
        clock=lambda: now,
    )


def _report(worker_id: str = "worker-1", pool: str = "us-east", **overrides) -> WorkerReport:
    fields = {
        "worker_id": worker_id,
        "pool": pool,
        "hashrate": 50.0,
        "temperature": 65,
        "timestamp": NOW,
    }
    fields.update(overrides)
    return WorkerReport(**fields)


def test_query_stats_on_empty_store_returns_empty_mapping() -> None:
    assert _service().query_stats() == {}


def test_submitted_report_is_visible_within_window() -> None:
    service = _service()
    service.submit(_report(timestamp=NOW - 100))

    stats = service.query_stats(now=NOW)

    assert stats["us-east"].workers >= 1
    assert service.query_stats(now=NOW - 100)["us-east"].workers == 1
    assert service.query_stats(now=NOW + 200) == {}


def test_query_stats_uses_clock_when_now_omitted() -> None:
    service = _service(now=NOW + 1_000)
    service.submit(_report(timestamp=NOW))

    assert service.query_stats() == {}
    assert "us-east" in service.query_stats(now=NOW)


def test_concrete_average_scenario() -> None:
    service = _service()
    for index, (hashrate, temperature) in enumerate([(10.0, 60), (20.0, 70), (30.3, 80)]):
        service.submit(_report(f"worker-{index}", hashrate=hashrate, temperature=temperature))

    assert service.query_stats(NOW) == {
        "us-east": PoolStats(workers=3, avg_hashrate=20.1, avg_temp=70.0)
    }


def test_invalid_report_is_rejected_and_not_stored(caplog) -> None:
    store = ReportStore()
    service = _service(store)

    with caplog.at_level(logging.WARNING, logger="services.pool_service"):
        with pytest.raises(InvalidPool):
            service.submit(_report(pool=""))
        with pytest.raises(InvalidHashrate):
            service.submit(_report(hashrate=-3.0))

    assert store.snapshot() == ()
    reasons = [getattr(record, "reason", None) for record in caplog.records]
    assert "pool cannot be empty" in reasons


def test_storage_fault_propagates_from_submit_and_query() -> None:
    store = ReportStore(lock_timeout=0.01)
    service = _service(store)
    store._lock.acquire()
    try:
        with pytest.raises(StorageUnavailable):
            service.submit(_report())
        with pytest.raises(StorageUnavailable):
            service.query_stats()
    finally:
        store._lock.release()

    service.submit(_report())
    assert service.query_stats()["us-east"].workers == 1


def test_concurrent_submits_are_all_visible() -> None:
    service = _service()
    total = 300
    pools = ("us-east", "eu-west", "asia")

    def submit(index: int) -> None:
        service.submit(
            _report(f"worker-{index}", pool=pools[index % 3], timestamp=NOW - (index % 200))
        )

    with ThreadPoolExecutor(max_workers=16) as executor:
        list(executor.map(submit, range(total)))

    stats = service.query_stats(NOW)
    assert sum(entry.workers for entry in stats.values()) == total
    assert {pool: entry.workers for pool, entry in stats.items()} == {pool: 100 for pool in pools}


def test_compact_with_window_retention_keeps_stats_unchanged() -> None:
    store = ReportStore(retention=DropOutsideWindow(window_seconds=300))
    service = _service(store)
    service.submit(_report("old", timestamp=NOW - 600))
    service.submit(_report("new", timestamp=NOW - 10))
    before = service.query_stats()

    evicted = service.compact()

    assert evicted == 1
    assert service.query_stats() == before
    assert [report.worker_id for report in store.snapshot()] == ["new"]


def test_compaction_worker_run_once_and_lifecycle() -> None:
    store = ReportStore(retention=DropOutsideWindow(window_seconds=300))
    service = _service(store)
    service.submit(_report("old", timestamp=NOW - 600))
    worker = CompactionWorker(service, interval=30.0)

    assert worker.run_once() == 1

    worker.start()
    assert worker.running is True
    worker.stop()
    assert worker.running is False


def test_compaction_worker_logs_storage_faults(caplog) -> None:
    store = ReportStore(lock_timeout=0.01)
    worker = CompactionWorker(_service(store), interval=30.0)
    store._lock.acquire()
    try:
        with caplog.at_level(logging.ERROR, logger="services.compaction"):
            assert worker.run_once() == 0
    finally:
        store._lock.release()

    assert any(record.message == "Compaction skipped" for record in caplog.records)
