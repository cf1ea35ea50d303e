"""
app/config.py

Application-level configuration helpers.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache

from db.config import load_env_files

RENDERER_BACKENDS = frozenset({"playwright", "http"})
STORAGE_BACKENDS = frozenset({"sqlalchemy", "memory"})

MIN_RENDER_TIMEOUT_SECONDS = 30.0
MAX_RENDER_TIMEOUT_SECONDS = 45.0


@lru_cache(maxsize=1)
def _load_env_once() -> None:
    """
    Ensure project `.env` files are loaded once before reading app settings.
    """

    load_env_files()


def _get_int_env(name: str, default: int) -> int:
    """
    Read an integer from environment variables with safe fallback.
    """

    _load_env_once()
    raw_value = os.getenv(name)
    if raw_value is None:
        return default
    try:
        return int(raw_value)
    except ValueError:
        return default


def _get_float_env(name: str, default: float) -> float:
    """
    Read a float from environment variables with safe fallback.
    """

    _load_env_once()
    raw_value = os.getenv(name)
    if raw_value is None:
        return default
    try:
        return float(raw_value)
    except ValueError:
        return default


def _get_str_env(name: str, default: str) -> str:
    """
    Read a string from environment variables with fallback.
    """

    _load_env_once()
    value = os.getenv(name)
    if value is None:
        return default
    stripped = value.strip()
    return stripped if stripped else default


def _get_choice_env(name: str, default: str, allowed: frozenset[str]) -> str:
    """
    Read a lower-cased choice, rejecting values outside `allowed`.
    """

    value = _get_str_env(name, default).lower()
    if value not in allowed:
        raise RuntimeError(
            f"{name}='{value}' is not valid. Allowed values: {sorted(allowed)}."
        )
    return value


@dataclass(frozen=True)
class RaceResultsSettings:
    """
    Runtime settings for race result extraction and batch processing.
    """

    max_concurrency: int = 3
    max_attempts: int = 3
    initial_retry_delay_seconds: float = 1.0
    render_timeout_seconds: float = 30.0
    settle_seconds: float = 2.0
    cache_ttl_hours: int = 24
    max_batch_size: int = 100
    recent_results_limit: int = 100
    renderer_backend: str = "playwright"
    storage_backend: str = "sqlalchemy"
    user_agent: str = "RaceResultsBot/1.0 (+https://example.com/bot)"


@lru_cache(maxsize=1)
def get_race_results_settings() -> RaceResultsSettings:
    """
    Return cached race result settings from environment variables.
    """

    render_timeout = _get_float_env("RACE_RESULTS_RENDER_TIMEOUT_SECONDS", 30.0)
    return RaceResultsSettings(
        max_concurrency=max(1, _get_int_env("RACE_RESULTS_MAX_CONCURRENCY", 3)),
        max_attempts=max(1, _get_int_env("RACE_RESULTS_MAX_ATTEMPTS", 3)),
        initial_retry_delay_seconds=max(
            0.0,
            _get_float_env("RACE_RESULTS_INITIAL_RETRY_DELAY_SECONDS", 1.0),
        ),
        render_timeout_seconds=min(
            MAX_RENDER_TIMEOUT_SECONDS,
            max(MIN_RENDER_TIMEOUT_SECONDS, render_timeout),
        ),
        settle_seconds=max(0.0, _get_float_env("RACE_RESULTS_SETTLE_SECONDS", 2.0)),
        cache_ttl_hours=max(1, _get_int_env("RACE_RESULTS_CACHE_TTL_HOURS", 24)),
        max_batch_size=max(1, _get_int_env("RACE_RESULTS_MAX_BATCH_SIZE", 100)),
        recent_results_limit=max(1, _get_int_env("RACE_RESULTS_RECENT_LIMIT", 100)),
        renderer_backend=_get_choice_env("RACE_RESULTS_RENDERER", "playwright", RENDERER_BACKENDS),
        storage_backend=_get_choice_env("RACE_RESULTS_STORAGE", "sqlalchemy", STORAGE_BACKENDS),
        user_agent=_get_str_env(
            "RACE_RESULTS_USER_AGENT",
            "RaceResultsBot/1.0 (+https://example.com/bot)",
        ),
    )
