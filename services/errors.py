"""Typed failures raised by the ingestion and aggregation core."""

from __future__ import annotations


class PoolStatsError(Exception):
    """Base class for every error surfaced by the pool statistics core."""


class ValidationError(PoolStatsError, ValueError):
    """A submitted report was rejected before reaching the store."""

    field: str = ""

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class InvalidWorkerId(ValidationError):
    field = "worker_id"


class InvalidPool(ValidationError):
    field = "pool"


class InvalidHashrate(ValidationError):
    field = "hashrate"


class InvalidTimestamp(ValidationError):
    field = "timestamp"


class StorageUnavailable(PoolStatsError, RuntimeError):
    """The report store could not be locked or was left in a broken state."""
