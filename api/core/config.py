"""
Environment-driven settings.

Values are read lazily through small helpers so tests can patch the
environment. A `.env` file in the working directory is loaded once by
`load_env()` (called from `api/main.py`).
"""

from __future__ import annotations

import os

from dotenv import load_dotenv


def load_env() -> None:
    # Real environment variables win over .env entries.
    load_dotenv(override=False)


def _env_str(name: str, default: str = "") -> str:
    return os.environ.get(name, "").strip() or default


def _env_int(name: str, default: int) -> int:
    raw = os.environ.get(name, "").strip()
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def _env_float(name: str) -> float | None:
    raw = os.environ.get(name, "").strip()
    if not raw:
        return None
    try:
        return float(raw)
    except ValueError:
        return None


def listen_host() -> str:
    return _env_str("HOST", "0.0.0.0")


def listen_port() -> int:
    return _env_int("PORT", 3000)


def pool_min_size() -> int:
    return max(0, _env_int("DB_POOL_MIN_SIZE", 1))


def pool_max_size() -> int:
    # One connection by default: requests share a single store link and see
    # each other's writes in order.
    return max(1, pool_min_size(), _env_int("DB_POOL_MAX_SIZE", 1))


def command_timeout() -> float | None:
    return _env_float("DB_COMMAND_TIMEOUT")


def cors_origins() -> list[str]:
    raw = _env_str("CORS_ORIGINS", "*")
    origins = [item.strip() for item in raw.split(",") if item.strip()]
    return origins or ["*"]


def log_level() -> str:
    return _env_str("LOG_LEVEL", "INFO").upper()


def log_format() -> str:
    return _env_str("LOG_FORMAT", "text").lower()
