from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache


_WINDOW_ENV = "STATS_WINDOW_SECONDS"
_RETENTION_ENV = "REPORT_RETENTION_POLICY"
_COMPACTION_INTERVAL_ENV = "COMPACTION_INTERVAL_SECONDS"
_LOCK_TIMEOUT_ENV = "REPORT_STORE_LOCK_TIMEOUT"
_LOG_LEVEL_ENV = "LOG_LEVEL"

RETENTION_KEEP_ALL = "keep_all"
RETENTION_WINDOW = "window"
_RETENTION_CHOICES = (RETENTION_KEEP_ALL, RETENTION_WINDOW)


@dataclass(frozen=True)
class Settings:
    window_seconds: int
    retention_policy: str
    compaction_interval: float
    lock_timeout: float
    log_level: str


def _read_positive_int(name: str, default: int) -> int:
    value = os.getenv(name)
    if value is None:
        return default
    candidate = value.strip()
    if not candidate:
        return default
    try:
        parsed = int(candidate)
    except ValueError:
        return default
    return parsed if parsed > 0 else default


def _read_positive_float(name: str, default: float) -> float:
    value = os.getenv(name)
    if value is None:
        return default
    candidate = value.strip()
    if not candidate:
        return default
    try:
        parsed = float(candidate)
    except ValueError:
        return default
    return parsed if parsed > 0 else default


def _read_retention_policy(default: str) -> str:
    value = os.getenv(_RETENTION_ENV)
    if value is None:
        return default
    candidate = value.strip().lower()
    return candidate if candidate in _RETENTION_CHOICES else default


def _read_log_level(default: str) -> str:
    value = os.getenv(_LOG_LEVEL_ENV)
    if value is None:
        return default
    candidate = value.strip()
    if not candidate:
        return default
    return candidate.upper()


@lru_cache
def get_settings() -> Settings:
    return Settings(
        window_seconds=_read_positive_int(_WINDOW_ENV, 300),
        retention_policy=_read_retention_policy(RETENTION_KEEP_ALL),
        compaction_interval=_read_positive_float(_COMPACTION_INTERVAL_ENV, 60.0),
        lock_timeout=_read_positive_float(_LOCK_TIMEOUT_ENV, 5.0),
        log_level=_read_log_level("INFO"),
    )
