"""FastAPI application factory for Drawcast.

Run with: uvicorn drawcast.main:app --reload
"""

from __future__ import annotations

import traceback

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from prometheus_client import make_asgi_app as make_metrics_app

from drawcast.api.predict import router as predict_router
from drawcast.api.response_schemas import ErrorResponse
from drawcast.common.config import get_settings
from drawcast.common.exceptions import DrawcastError
from drawcast.common.logging import get_logger
from drawcast.common.metrics import set_app_info
from drawcast.common.middleware import (
    NoCacheMiddleware,
    PrometheusMiddleware,
    RequestIdMiddleware,
    RequestLoggingMiddleware,
    request_id_var,
)
from drawcast.feed.exceptions import FeedError
from drawcast.prediction.exceptions import InsufficientDataError

logger = get_logger("SYSTEM")


def _error_response(status_code: int, error: str, message: str) -> JSONResponse:
    body = ErrorResponse(error=error, message=message)
    return JSONResponse(status_code=status_code, content=body.model_dump(mode="json", by_alias=True))


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    settings = get_settings()

    app = FastAPI(
        title="Drawcast",
        version=settings.api_version,
        description="Ensemble BIG/SMALL predictor for sequential number draws",
    )

    # Polling clients call from anywhere
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["Content-Type"],
    )

    # Last added = outermost = runs first on request
    app.add_middleware(NoCacheMiddleware)
    app.add_middleware(PrometheusMiddleware)
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(RequestIdMiddleware)

    # ─── Exception Handlers ───

    @app.exception_handler(InsufficientDataError)
    async def insufficient_data_handler(
        request: Request, exc: InsufficientDataError
    ) -> JSONResponse:
        """Too few draws upstream. Temporary, so the client should retry."""
        logger.warning(
            f"InsufficientDataError: {exc}",
            extra={"data": {"path": str(request.url), "context": exc.context}},
        )
        return _error_response(503, "InsufficientDataError", exc.message)

    @app.exception_handler(FeedError)
    async def feed_error_handler(request: Request, exc: FeedError) -> JSONResponse:
        """Upstream feed failures surface as 502 (bad gateway)."""
        logger.error(
            f"{type(exc).__name__}: {exc}",
            extra={"data": {"path": str(request.url), "context": exc.context}},
        )
        return _error_response(502, type(exc).__name__, exc.message)

    @app.exception_handler(DrawcastError)
    async def drawcast_exception_handler(request: Request, exc: DrawcastError) -> JSONResponse:
        """Handle all remaining Drawcast exceptions with structured JSON responses."""
        logger.error(
            f"{type(exc).__name__}: {exc}",
            extra={"data": {"path": str(request.url), "context": exc.context}},
        )
        return _error_response(400, type(exc).__name__, exc.message)

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        """Catch-all for unhandled exceptions: log the traceback and return 500."""
        logger.error(
            f"Unhandled {type(exc).__name__}: {exc}",
            extra={
                "data": {
                    "path": str(request.url),
                    "request_id": request_id_var.get(""),
                    "traceback": traceback.format_exc(),
                }
            },
        )
        return _error_response(500, "InternalServerError", "An unexpected error occurred")

    # ─── Health ───

    @app.get("/health")
    async def health_check() -> dict:
        """Liveness check confirming the process is running."""
        return {"status": "ok", "version": settings.api_version}

    # ─── Prometheus Metrics ───

    app.mount("/metrics", make_metrics_app())
    set_app_info(version=settings.api_version, environment=settings.environment)

    # ─── Router Mounting ───

    app.include_router(predict_router, prefix="/api/predict", tags=["predict"])

    logger.info("App started", extra={"data": {"version": settings.api_version}})

    return app


app = create_app()
