"""Domain models shared across services."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class WorkerReport:
    """A single telemetry sample submitted by a mining worker.

    ``timestamp`` is expressed in Unix epoch seconds. Instances are immutable
    once accepted by the report store.
    """

    worker_id: str
    pool: str
    hashrate: float
    temperature: int
    timestamp: int
