"""Pydantic schemas for the HTTP API layer."""

from __future__ import annotations

from typing import Dict

from pydantic import BaseModel, Field

from models.records import WorkerReport
from services.aggregator import PoolStats


class WorkerReportIn(BaseModel):
    """Inbound telemetry payload; semantic checks happen in the service."""

    worker_id: str
    pool: str
    hashrate: float = Field(..., allow_inf_nan=False)
    temperature: int
    timestamp: int = Field(..., description="Unix epoch seconds when the report was generated.")

    def to_record(self) -> WorkerReport:
        return WorkerReport(
            worker_id=self.worker_id,
            pool=self.pool,
            hashrate=self.hashrate,
            temperature=self.temperature,
            timestamp=self.timestamp,
        )


class ReportAccepted(BaseModel):
    """Response payload after a report was stored."""

    status: str = "ok"


class PoolStatsOut(BaseModel):
    """Aggregated statistics for a single pool."""

    workers: int = Field(..., ge=0)
    avg_hashrate: float
    avg_temp: float

    @classmethod
    def from_stats(cls, stats: PoolStats) -> "PoolStatsOut":
        return cls(
            workers=stats.workers,
            avg_hashrate=stats.avg_hashrate,
            avg_temp=stats.avg_temp,
        )


class StatsResponse(BaseModel):
    """Pools with at least one report inside the window."""

    pools: Dict[str, PoolStatsOut] = Field(default_factory=dict)
