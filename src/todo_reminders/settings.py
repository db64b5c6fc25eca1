from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import List

DEFAULT_REMINDER_INTERVAL_SECONDS = 60.0
DEFAULT_REMINDER_JOB_NAME = "reminder-check"


@dataclass(frozen=True)
class Settings:
    """
    Application settings loaded from environment variables.

    Env vars:
    - REMINDER_INTERVAL_SECONDS: seconds between reminder sweeps. Default 60
    - REMINDER_JOB_NAME: scheduler name of the reminder sweep. Default 'reminder-check'
    - ENABLE_SCHEDULER: 'false' to disable the background reminder sweep (default: true)
    - LOG_LEVEL: logging level name. Default 'INFO'
    - CORS_ALLOW_ORIGINS: comma-separated list of allowed origins; '*' by default
    """

    reminder_interval_seconds: float = DEFAULT_REMINDER_INTERVAL_SECONDS
    reminder_job_name: str = DEFAULT_REMINDER_JOB_NAME
    enable_scheduler: bool = True
    log_level: str = "INFO"
    cors_allow_origins: List[str] = field(default_factory=lambda: ["*"])


def _get_env(name: str, default: str) -> str:
    value = os.getenv(name, default)
    if value is None or value == "":
        return default
    return value


def _parse_bool(value: str, default: bool = False) -> bool:
    v = value.strip().lower()
    if v in {"1", "true", "yes", "on"}:
        return True
    if v in {"0", "false", "no", "off"}:
        return False
    return default


def _parse_interval(value: str, default: float) -> float:
    """Parse a positive number of seconds, falling back to `default`."""
    try:
        seconds = float(value.strip())
    except ValueError:
        return default
    return seconds if seconds > 0 else default


def _parse_origins(origins_value: str) -> List[str]:
    """
    Parse CORS origins from env. Supports:
    - '*' to allow all origins
    - Comma-separated list of origins
    """
    value = origins_value.strip()
    if value == "*":
        return ["*"]
    return [o.strip() for o in value.split(",") if o.strip()]


# PUBLIC_INTERFACE
def get_settings() -> Settings:
    """Return application settings loaded from environment variables."""
    interval = _parse_interval(
        _get_env("REMINDER_INTERVAL_SECONDS", str(DEFAULT_REMINDER_INTERVAL_SECONDS)),
        DEFAULT_REMINDER_INTERVAL_SECONDS,
    )
    job_name = _get_env("REMINDER_JOB_NAME", DEFAULT_REMINDER_JOB_NAME).strip()
    enable_scheduler = _parse_bool(_get_env("ENABLE_SCHEDULER", "true"), True)
    log_level = _get_env("LOG_LEVEL", "INFO").strip().upper()
    origins = _parse_origins(_get_env("CORS_ALLOW_ORIGINS", "*"))

    return Settings(
        reminder_interval_seconds=interval,
        reminder_job_name=job_name or DEFAULT_REMINDER_JOB_NAME,
        enable_scheduler=enable_scheduler,
        log_level=log_level,
        cors_allow_origins=origins,
    )
