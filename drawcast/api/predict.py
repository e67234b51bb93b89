"""Prediction endpoint.

One request runs one full cycle: fetch latest draws, resolve the previous
prediction, vote, and issue the prediction for the next period.
"""

from __future__ import annotations

import time

from fastapi import APIRouter, Depends, Response

from drawcast.api.response_schemas import ErrorResponse, PredictResponse, build_predict_response
from drawcast.common.config import Settings, get_settings
from drawcast.common.logging import get_logger
from drawcast.prediction.service import PredictionService, get_prediction_service

logger = get_logger("API")

router = APIRouter()


@router.api_route(
    "",
    methods=["GET", "POST"],
    response_model=PredictResponse,
    responses={502: {"model": ErrorResponse}, 503: {"model": ErrorResponse}},
)
async def predict(
    service: PredictionService = Depends(get_prediction_service),
    settings: Settings = Depends(get_settings),
) -> PredictResponse:
    """Run one prediction cycle and report the previous outcome plus the new call.

    No request body is required. Failures are rendered by the exception
    handlers in drawcast.main as an ErrorResponse.
    """
    start = time.perf_counter()
    cycle = await service.run_cycle()
    elapsed_ms = (time.perf_counter() - start) * 1000

    return build_predict_response(
        cycle,
        elapsed_ms=elapsed_ms,
        version=settings.api_version,
        data_source=settings.data_source_label,
        top_limit=settings.top_algorithms_limit,
        recent_limit=settings.recent_history_limit,
    )


@router.options("", include_in_schema=False)
async def predict_options() -> Response:
    """Answer bare OPTIONS requests; CORS preflights are handled by the middleware."""
    return Response(status_code=200, headers={"Allow": "GET, POST, OPTIONS"})
