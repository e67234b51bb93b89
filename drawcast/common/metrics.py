"""Prometheus metrics definitions for Drawcast.

All metric objects are centralized here as module-level singletons.
Import what you need from anywhere in the codebase:

    from drawcast.common.metrics import PREDICTION_CYCLES_TOTAL

The /metrics endpoint is mounted in drawcast/main.py via
prometheus_client.make_asgi_app().
"""

from __future__ import annotations

from prometheus_client import Counter, Gauge, Histogram, Info

# ─── App Info ───

APP_INFO = Info("app", "Application metadata")

# ─── HTTP Metrics ───

HTTP_REQUESTS_TOTAL = Counter(
    "http_requests_total",
    "Total HTTP requests",
    labelnames=["method", "path", "status_code"],
)

HTTP_REQUEST_DURATION_SECONDS = Histogram(
    "http_request_duration_seconds",
    "HTTP request duration in seconds",
    labelnames=["method", "path"],
    buckets=(0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0),
)

HTTP_REQUESTS_IN_PROGRESS = Gauge(
    "http_requests_in_progress",
    "HTTP requests currently in progress",
    labelnames=["method"],
)

# ─── Upstream Feed Metrics ───

FEED_FETCH_TOTAL = Counter(
    "feed_fetch_total",
    "Draw feed lookups by where the payload came from",
    labelnames=["source"],  # "cache", "network", "error"
)

FEED_FETCH_DURATION_SECONDS = Histogram(
    "feed_fetch_duration_seconds",
    "Upstream draw feed request duration in seconds",
    buckets=(0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0),
)

# ─── Business Metrics: Prediction ───

PREDICTION_CYCLES_TOTAL = Counter(
    "prediction_cycles_total",
    "Total prediction cycle outcomes",
    labelnames=["outcome"],  # "success", "insufficient_data", "error"
)

PREDICTION_OUTCOMES_TOTAL = Counter(
    "prediction_outcomes_total",
    "Resolved predictions by result",
    labelnames=["status"],  # "WIN", "LOSS"
)

TRACKER_WIN_STREAK = Gauge(
    "tracker_win_streak",
    "Current consecutive correct predictions",
)


def set_app_info(version: str, environment: str) -> None:
    """Set application metadata labels on the APP_INFO metric."""
    APP_INFO.info({"version": version, "environment": environment})
