"""Prediction cycle orchestrator.

Ties the engine together for one snapshot of history:
    1. Precondition: enough draws to run the ensemble
    2. Resolve the pending prediction against the new history
    3. Ensemble vote over all algorithms
    4. Compute the next period and issue the new pending prediction

Usage:
    from drawcast.prediction.pipeline import run_prediction_cycle

    cycle = run_prediction_cycle(history, state, predictor)
"""

from __future__ import annotations

from dataclasses import replace

from pydantic import BaseModel, ConfigDict

from drawcast.common.logging import get_logger
from drawcast.common.schemas import DrawResult, EnsembleResult, History
from drawcast.prediction.ensemble import EnsemblePredictor
from drawcast.prediction.exceptions import InsufficientDataError
from drawcast.prediction.periods import DEFAULT_PERIODS_PER_DAY, next_period
from drawcast.prediction.tracker import (
    ResolvedOutcome,
    Stats,
    TrackerState,
    issue_prediction,
    resolve_pending,
)

logger = get_logger("MODEL")


class CycleResult(BaseModel):
    """Everything one cycle produced, ready for the response layer."""

    model_config = ConfigDict(arbitrary_types_allowed=True)

    outcome: ResolvedOutcome | None
    latest: DrawResult
    next_period: str
    ensemble: EnsembleResult
    stats: Stats
    history: list[DrawResult]


def run_prediction_cycle(
    history: History,
    state: TrackerState,
    predictor: EnsemblePredictor,
    periods_per_day: int = DEFAULT_PERIODS_PER_DAY,
) -> CycleResult:
    """Run one resolve-then-reissue cycle over ``history`` (newest first).

    Not safe to call concurrently on the same ``state``; the caller provides
    mutual exclusion.

    Raises:
        InsufficientDataError: Fewer draws than the predictor requires. Nothing
            is resolved or issued in that case.
        PeriodFormatError: The newest period cannot be incremented.
    """
    if len(history) < predictor.min_history:
        raise InsufficientDataError(available=len(history), required=predictor.min_history)

    latest = history[0]
    upcoming = next_period(latest.period, periods_per_day)

    outcome = resolve_pending(state, history)
    ensemble = predictor.predict(history)
    issue_prediction(state, upcoming, ensemble.final_prediction)

    logger.info(
        "Prediction issued",
        extra={
            "data": {
                "period": upcoming,
                "prediction": ensemble.final_prediction,
                "confidence": ensemble.confidence,
                "resolved": outcome.status if outcome else None,
            }
        },
    )

    return CycleResult(
        outcome=outcome,
        latest=latest,
        next_period=upcoming,
        ensemble=ensemble,
        stats=replace(state.stats),
        history=list(history),
    )
