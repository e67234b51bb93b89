"""Root test configuration: shared fixtures for all test modules.

IMPORTANT: Environment variables are set BEFORE any drawcast imports
so that config.py loads test settings regardless of a local .env file.
"""

from __future__ import annotations

import os

os.environ.setdefault("ENVIRONMENT", "testing")
os.environ.setdefault("FEED_URL", "https://feed.test/WinGo/WinGo_1M/GetHistoryIssuePage.json")
os.environ.setdefault("CLOCK_TIMEZONE", "UTC")

# Now safe to import drawcast modules
from datetime import UTC, datetime

import pytest

from drawcast.common.config import Settings, get_settings
from drawcast.prediction.ensemble import EnsemblePredictor
from drawcast.prediction.signals import Clock
from drawcast.prediction.tracker import TrackerState

# ─── Clear cached settings so test env vars are used ───
get_settings.cache_clear()

FIXED_NOW = datetime(2026, 10, 17, 14, 2, 0, tzinfo=UTC)


@pytest.fixture
def test_settings() -> Settings:
    return get_settings()


@pytest.fixture
def fixed_clock() -> Clock:
    """Clock frozen at 14:02 UTC so the time-based algorithm is repeatable."""
    return lambda: FIXED_NOW


@pytest.fixture
def predictor(fixed_clock: Clock) -> EnsemblePredictor:
    return EnsemblePredictor(clock=fixed_clock)


@pytest.fixture
def tracker_state() -> TrackerState:
    return TrackerState()
