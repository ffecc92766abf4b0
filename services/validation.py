"""Admission checks applied to reports before they are stored."""

from __future__ import annotations

from models.records import WorkerReport
from services.errors import (
    InvalidHashrate,
    InvalidPool,
    InvalidTimestamp,
    InvalidWorkerId,
)


def validate_report(report: WorkerReport) -> WorkerReport:
    """Return ``report`` unchanged or raise the error for its first bad field.

    Fields are checked in a fixed order: worker_id, pool, hashrate, timestamp.
    A NaN hashrate is rejected. Temperature is accepted with any sign.
    """
    if not report.worker_id:
        raise InvalidWorkerId("worker_id cannot be empty")
    if not report.pool:
        raise InvalidPool("pool cannot be empty")
    if not report.hashrate >= 0:
        raise InvalidHashrate("hashrate cannot be negative")
    if report.timestamp <= 0:
        raise InvalidTimestamp("timestamp must be positive")
    return report
