"""Structured logging setup for Drawcast.

Every log line includes: timestamp, level, module tag, message, and structured data.

Usage:
    from drawcast.common.logging import get_logger
    logger = get_logger("MODEL")
    logger.info("Ensemble calculated", extra={"data": {"prediction": "BIG"}})
"""

from __future__ import annotations

import json
import logging
import sys
from contextvars import ContextVar
from datetime import UTC, datetime

# Module tags for structured logging
MODULE_TAGS = {
    "FEED",
    "MODEL",
    "TRACKER",
    "API",
    "SYSTEM",
    "TEST",
}

# Newest draw period of the cycle in progress (set by PredictionService)
cycle_period_var: ContextVar[str] = ContextVar("cycle_period", default="")


class StructuredFormatter(logging.Formatter):
    """Formats log records as structured, human-readable lines.

    Output format:
        2026-10-17T10:30:00Z | INFO | MODEL | Ensemble calculated | {"prediction": "BIG"}

    Lines emitted during a prediction cycle also carry the period being
    processed, e.g. `| period=202610170842 |` after the request id.
    """

    def format(self, record: logging.LogRecord) -> str:
        timestamp = datetime.now(UTC).strftime("%Y-%m-%dT%H:%M:%SZ")
        module_tag = getattr(record, "module_tag", "SYSTEM")

        # Include request ID when available (set by RequestIdMiddleware)
        from drawcast.common.middleware import request_id_var

        rid = request_id_var.get("")
        period = cycle_period_var.get()

        data = getattr(record, "data", None)
        if data is not None:
            try:
                data_str = json.dumps(data, default=str)
            except (TypeError, ValueError):
                data_str = str(data)
        else:
            data_str = ""

        parts = [timestamp, record.levelname]
        if rid:
            parts.append(f"rid={rid[:8]}")
        if period:
            parts.append(f"period={period}")
        parts.extend([module_tag, record.getMessage()])
        if data_str:
            parts.append(data_str)
        if record.exc_info:
            parts.append(self.formatException(record.exc_info))

        return " | ".join(parts)


class ModuleTagLogger(logging.LoggerAdapter):
    """Logger adapter that injects module_tag and supports structured data.

    Usage:
        logger = get_logger("FEED")
        logger.info("Fetched draws", extra={"data": {"count": 20}})
    """

    def process(self, msg: str, kwargs: dict) -> tuple[str, dict]:
        extra = kwargs.get("extra", {})
        extra["module_tag"] = self.extra.get("module_tag", "SYSTEM")
        kwargs["extra"] = extra
        return msg, kwargs


# Cache loggers to avoid duplicate handlers
_loggers: dict[str, ModuleTagLogger] = {}


def _configured_level() -> int:
    """Resolve the log level name from settings, defaulting to INFO."""
    from drawcast.common.config import get_settings

    level = logging.getLevelName(get_settings().log_level.upper())
    return level if isinstance(level, int) else logging.INFO


def get_logger(module_tag: str) -> ModuleTagLogger:
    """Get a structured logger with the given module tag.

    Args:
        module_tag: One of the MODULE_TAGS (FEED, MODEL, TRACKER, etc.)

    Returns:
        A logger adapter that injects the module tag into every log line.
    """
    if module_tag in _loggers:
        return _loggers[module_tag]

    logger = logging.getLogger(f"drawcast.{module_tag.lower()}")

    if not logger.handlers:
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(StructuredFormatter())
        logger.addHandler(handler)
        logger.setLevel(_configured_level())
        logger.propagate = False

    adapter = ModuleTagLogger(logger, {"module_tag": module_tag})
    _loggers[module_tag] = adapter
    return adapter
