"""Windowed per-pool aggregation of worker reports."""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Dict, Iterable, Set

from models.records import WorkerReport

DEFAULT_WINDOW_SECONDS = 300

# Floats at or above 2**52 have no fractional part.
_INTEGRAL_FLOAT_LIMIT = 2.0**52


def round_tenths(value: float) -> float:
    """Round to one decimal place, halves away from zero.

    The value is scaled by ten first and the scaled float is rounded to the
    nearest integer. Values too large to carry a fractional tenth, and
    non-finite values, are returned unchanged.
    """
    scaled = value * 10
    if not math.isfinite(scaled) or abs(scaled) >= _INTEGRAL_FLOAT_LIMIT:
        return value
    rounded = float(math.trunc(scaled))
    if abs(scaled - rounded) >= 0.5:
        rounded += math.copysign(1.0, scaled)
    return rounded / 10


@dataclass(frozen=True)
class PoolStats:
    """Derived statistics for one pool inside the window."""

    workers: int
    avg_hashrate: float
    avg_temp: float


@dataclass
class _PoolAccumulator:
    report_count: int = 0
    hashrate_total: float = 0.0
    temperature_total: float = 0.0
    worker_ids: Set[str] = field(default_factory=set)

    def add(self, report: WorkerReport) -> None:
        self.report_count += 1
        self.hashrate_total += report.hashrate
        self.temperature_total += float(report.temperature)
        self.worker_ids.add(report.worker_id)

    def finish(self) -> PoolStats:
        return PoolStats(
            workers=len(self.worker_ids),
            avg_hashrate=round_tenths(self.hashrate_total / self.report_count),
            avg_temp=round_tenths(self.temperature_total / self.report_count),
        )


class Aggregator:
    """Pure aggregation component that can be unit tested in isolation.

    Only reports with ``timestamp > now - window_seconds`` are counted. There
    is no upper bound, so reports stamped after ``now`` are included.
    """

    def __init__(self, window_seconds: int = DEFAULT_WINDOW_SECONDS) -> None:
        if window_seconds <= 0:
            raise ValueError("window_seconds must be positive.")
        self.window_seconds = window_seconds

    def compute(self, reports: Iterable[WorkerReport], now: int) -> Dict[str, PoolStats]:
        lower_bound = now - self.window_seconds
        groups: Dict[str, _PoolAccumulator] = {}

        for report in reports:
            if report.timestamp <= lower_bound:
                continue
            accumulator = groups.get(report.pool)
            if accumulator is None:
                accumulator = groups[report.pool] = _PoolAccumulator()
            accumulator.add(report)

        return {pool: accumulator.finish() for pool, accumulator in groups.items()}
