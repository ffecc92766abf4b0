"""Unit tests for the in-memory report store."""

from __future__ import annotations

import threading
from concurrent.futures import ThreadPoolExecutor

import pytest

from models.records import WorkerReport
from services.errors import StorageUnavailable
from storage.report_store import ReportStore
from storage.retention import DropOutsideWindow, KeepAll


def _report(worker_id: str = "worker-1", timestamp: int = 1_000, pool: str = "us-east") -> WorkerReport:
    return WorkerReport(
        worker_id=worker_id,
        pool=pool,
        hashrate=10.0,
        temperature=60,
        timestamp=timestamp,
    )


class ExplodingPolicy:
    def retain(self, reports, now):
        raise RuntimeError("boom")


def test_snapshot_preserves_insertion_order() -> None:
    store = ReportStore()
    first, second = _report("a"), _report("b")

    store.append(first)
    store.append(second)

    assert store.snapshot() == (first, second)
    assert len(store) == 2


def test_snapshot_is_independent_of_later_appends() -> None:
    store = ReportStore()
    store.append(_report("a"))

    snapshot = store.snapshot()
    store.append(_report("b"))

    assert len(snapshot) == 1
    assert len(store.snapshot()) == 2


def test_stored_reports_are_immutable() -> None:
    store = ReportStore()
    store.append(_report())

    with pytest.raises(AttributeError):
        store.snapshot()[0].hashrate = 99.0  # type: ignore[misc]


def test_lock_timeout_raises_storage_unavailable() -> None:
    store = ReportStore(lock_timeout=0.01)
    store._lock.acquire()
    try:
        with pytest.raises(StorageUnavailable):
            store.append(_report())
        with pytest.raises(StorageUnavailable):
            store.snapshot()
    finally:
        store._lock.release()

    store.append(_report())
    assert len(store.snapshot()) == 1


def test_failure_inside_critical_section_poisons_store() -> None:
    store = ReportStore(retention=ExplodingPolicy())
    store.append(_report())

    with pytest.raises(StorageUnavailable) as excinfo:
        store.compact(now=2_000)

    assert isinstance(excinfo.value.__cause__, RuntimeError)
    assert store.poisoned is True
    with pytest.raises(StorageUnavailable):
        store.append(_report())
    with pytest.raises(StorageUnavailable):
        store.snapshot()


def test_keep_all_compaction_evicts_nothing() -> None:
    store = ReportStore(retention=KeepAll())
    store.append(_report(timestamp=1))

    assert store.compact(now=1_000_000) == 0
    assert len(store.snapshot()) == 1


def test_window_compaction_drops_reports_outside_window() -> None:
    store = ReportStore(retention=DropOutsideWindow(window_seconds=300))
    old = _report("old", timestamp=700)
    edge = _report("edge", timestamp=701)
    future = _report("future", timestamp=5_000)
    for report in (old, edge, future):
        store.append(report)

    evicted = store.compact(now=1_000)

    assert evicted == 1
    assert store.snapshot() == (edge, future)


def test_drop_outside_window_rejects_non_positive_window() -> None:
    with pytest.raises(ValueError):
        DropOutsideWindow(window_seconds=0)


def test_concurrent_appends_and_snapshots_are_consistent() -> None:
    store = ReportStore()
    total = 400
    stop = threading.Event()
    observed_sizes: list[int] = []
    corrupted: list[WorkerReport] = []

    def reader() -> None:
        while not stop.is_set():
            snapshot = store.snapshot()
            corrupted.extend(
                report
                for report in snapshot
                if not report.worker_id.startswith("worker-")
                or report.pool not in {"pool-0", "pool-1", "pool-2"}
                or report.timestamp <= 0
            )
            observed_sizes.append(len(snapshot))

    reader_thread = threading.Thread(target=reader)
    reader_thread.start()
    try:
        with ThreadPoolExecutor(max_workers=8) as executor:
            list(
                executor.map(
                    lambda i: store.append(
                        _report(f"worker-{i}", timestamp=1_000 + i, pool=f"pool-{i % 3}")
                    ),
                    range(total),
                )
            )
    finally:
        stop.set()
        reader_thread.join(timeout=5)

    snapshot = store.snapshot()
    assert len(snapshot) == total
    assert {report.worker_id for report in snapshot} == {f"worker-{i}" for i in range(total)}
    assert corrupted == []
    assert observed_sizes == sorted(observed_sizes)
