from __future__ import annotations
import os
from dataclasses import dataclass


def _int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return int(raw)
    except ValueError:
        raise RuntimeError(f"{name} must be an integer, got {raw!r}")


@dataclass(frozen=True)
class Config:
    db_url: str = "sqlite+aiosqlite:///./htmx_lab.db"
    job_steps: int = 10
    job_interval_ms: int = 500
    job_max_running: int = 0
    job_max_age_s: int = 600
    job_sweep_s: int = 60
    search_url: str = "https://restcountries.com/v3.1/name"
    log_level: str = "INFO"

    @property
    def job_interval(self) -> float:
        return self.job_interval_ms / 1000.0


def load_config() -> Config:
    """Read HTMXLAB_* environment variables."""
    return Config(
        db_url=os.getenv("HTMXLAB_DB_URL", Config.db_url),
        job_steps=_int("HTMXLAB_JOB_STEPS", Config.job_steps),
        job_interval_ms=_int("HTMXLAB_JOB_INTERVAL_MS", Config.job_interval_ms),
        job_max_running=_int("HTMXLAB_JOB_MAX_RUNNING", Config.job_max_running),
        job_max_age_s=_int("HTMXLAB_JOB_MAX_AGE_S", Config.job_max_age_s),
        job_sweep_s=_int("HTMXLAB_JOB_SWEEP_S", Config.job_sweep_s),
        search_url=os.getenv("HTMXLAB_SEARCH_URL", Config.search_url).rstrip("/"),
        log_level=os.getenv("HTMXLAB_LOG_LEVEL", Config.log_level).upper(),
    )
