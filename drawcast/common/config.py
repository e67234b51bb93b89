"""Application configuration via environment variables.

Uses pydantic-settings to load from .env file and environment variables.
All config is centralized here. Import `get_settings()` rather than
instantiating Settings directly.
"""

from __future__ import annotations

from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables and .env file."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # ─── App ───
    environment: str = "development"
    log_level: str = "INFO"
    api_version: str = "2.0.0"

    # ─── Upstream Draw Feed ───
    feed_url: str = "https://draw.ar-lottery01.com/WinGo/WinGo_1M/GetHistoryIssuePage.json"
    feed_timeout_seconds: float = 10.0
    feed_cache_ttl_seconds: float = 5.0
    feed_user_agent: str = (
        "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36"
    )
    data_source_label: str = "WinGo 1 Minute"

    # ─── Prediction Engine ───
    min_history: int = 20
    periods_per_day: int = 1440  # one draw per minute
    clock_timezone: str = "UTC"  # wall clock seen by the time-based algorithm

    # ─── Response Shaping ───
    top_algorithms_limit: int = 5
    recent_history_limit: int = 10


@lru_cache
def get_settings() -> Settings:
    """Get cached application settings singleton.

    Uses lru_cache so Settings is only instantiated once.
    In tests, call `get_settings.cache_clear()` to reset.
    """
    return Settings()
