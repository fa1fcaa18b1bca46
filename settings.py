from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache
from typing import Optional


_HISTORY_PATH_ENV = "RAINWATER_HISTORY_PATH"
_HISTORY_MAX_RECORDS_ENV = "RAINWATER_HISTORY_MAX_RECORDS"
_SAMPLE_INTERVAL_ENV = "RAINWATER_SAMPLE_INTERVAL_SECONDS"
_FLUSH_ON_SHUTDOWN_ENV = "RAINWATER_FLUSH_ON_SHUTDOWN"
_SIMULATOR_SEED_ENV = "RAINWATER_SIMULATOR_SEED"
_LOG_LEVEL_ENV = "LOG_LEVEL"

_TRUTHY = {"1", "true", "yes", "on"}
_FALSY = {"0", "false", "no", "off"}


@dataclass(frozen=True)
class Settings:
    history_path: Optional[str]
    history_max_records: Optional[int]
    sample_interval_seconds: float
    flush_on_shutdown: bool
    simulator_seed: Optional[int]
    log_level: str


def _read_optional_env(name: str, default: Optional[str]) -> Optional[str]:
    value = os.getenv(name)
    if value is None:
        return default
    candidate = value.strip()
    return candidate or None


def _read_positive_int(name: str) -> Optional[int]:
    value = os.getenv(name)
    if value is None:
        return None
    candidate = value.strip()
    if not candidate:
        return None
    try:
        parsed = int(candidate)
    except ValueError:
        return None
    return parsed if parsed > 0 else None


def _read_interval(default: float) -> float:
    value = os.getenv(_SAMPLE_INTERVAL_ENV)
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


def _read_bool(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    candidate = value.strip().lower()
    if candidate in _TRUTHY:
        return True
    if candidate in _FALSY:
        return False
    return default


def _read_seed() -> Optional[int]:
    value = os.getenv(_SIMULATOR_SEED_ENV)
    if value is None:
        return None
    try:
        return int(value.strip())
    except ValueError:
        return None


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
        history_path=_read_optional_env(
            _HISTORY_PATH_ENV, "./tmp/water_system_history.json"
        ),
        history_max_records=_read_positive_int(_HISTORY_MAX_RECORDS_ENV),
        sample_interval_seconds=_read_interval(5.0),
        flush_on_shutdown=_read_bool(_FLUSH_ON_SHUTDOWN_ENV, True),
        simulator_seed=_read_seed(),
        log_level=_read_log_level("INFO"),
    )
