from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in ("1", "true", "yes", "on")


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        value = int(raw.strip())
    except ValueError as e:
        raise ValueError(f"{name} must be an integer, got {raw!r}") from e
    if value < 0:
        raise ValueError(f"{name} must be >= 0, got {value}")
    return value


@dataclass(frozen=True)
class Settings:
    # Storage
    data_dir: Path | None
    default_collection: str

    # Host quota per invocation (0 = unlimited)
    request_budget: int
    time_budget_ms: int

    # Debug
    debug_log_requests: bool

    @property
    def time_budget_seconds(self) -> float | None:
        return self.time_budget_ms / 1000.0 if self.time_budget_ms else None


def get_settings() -> Settings:
    raw_data_dir = os.getenv("DATA_DIR", "").strip()
    data_dir = Path(raw_data_dir).expanduser() if raw_data_dir else None

    default_collection = os.getenv("DEFAULT_COLLECTION", "root").strip() or "root"

    # Stored procedures on the reference host get roughly five seconds.
    request_budget = _env_int("REQUEST_BUDGET", 1000)
    time_budget_ms = _env_int("TIME_BUDGET_MS", 5000)

    debug_log_requests = _env_bool("DEBUG_LOG_REQUESTS", True)

    return Settings(
        data_dir=data_dir,
        default_collection=default_collection,
        request_budget=request_budget,
        time_budget_ms=time_budget_ms,
        debug_log_requests=debug_log_requests,
    )
