"""Outcome tracking for issued predictions.

Holds at most one pending prediction and the running accuracy statistics.
State lives in an explicit TrackerState owned by the caller; these functions
mutate it but never lock it. Callers must run resolve → predict → issue as a
single critical section (see drawcast.prediction.service).
"""

from __future__ import annotations

from dataclasses import dataclass, field

from pydantic import BaseModel

from drawcast.common.logging import get_logger
from drawcast.common.metrics import PREDICTION_OUTCOMES_TOTAL, TRACKER_WIN_STREAK
from drawcast.common.schemas import Category, History, OutcomeStatus

logger = get_logger("TRACKER")

OUTCOME_MESSAGES: dict[str, str] = {
    "WIN": "Previous prediction WON!",
    "LOSS": "Previous prediction was a LOSS. New prediction ready.",
}


@dataclass(frozen=True)
class PendingPrediction:
    """The single prediction awaiting its draw."""

    target_period: str
    predicted_category: Category


@dataclass
class Stats:
    """Cumulative prediction accuracy counters."""

    total: int = 0
    wins: int = 0
    losses: int = 0
    current_streak: int = 0
    best_streak: int = 0

    @property
    def win_rate(self) -> float:
        """Percentage of resolved predictions that won (0 before any resolve)."""
        return self.wins / self.total * 100 if self.total else 0.0

    def record(self, status: OutcomeStatus) -> None:
        self.total += 1
        if status == "WIN":
            self.wins += 1
            self.current_streak += 1
            self.best_streak = max(self.best_streak, self.current_streak)
        else:
            self.losses += 1
            self.current_streak = 0


@dataclass
class TrackerState:
    """Mutable tracker state shared across cycles of one process."""

    pending: PendingPrediction | None = None
    stats: Stats = field(default_factory=Stats)


class ResolvedOutcome(BaseModel):
    """Result of checking the previous prediction against the actual draw."""

    status: OutcomeStatus
    predicted_period: str
    prediction: Category
    actual_result: Category
    actual_number: int

    @property
    def message(self) -> str:
        return OUTCOME_MESSAGES[self.status]


def resolve_pending(state: TrackerState, history: History) -> ResolvedOutcome | None:
    """Settle the pending prediction if its draw has appeared in ``history``.

    Nothing happens while the target period is still the newest draw or is
    absent from the history; the prediction stays pending in both cases.

    Returns:
        The outcome when the prediction was resolved, else None.
    """
    pending = state.pending
    if pending is None or not history:
        return None
    if pending.target_period == history[0].period:
        return None

    actual = next((d for d in history if d.period == pending.target_period), None)
    if actual is None:
        logger.debug(
            "Target period not yet observed",
            extra={"data": {"target_period": pending.target_period}},
        )
        return None

    status: OutcomeStatus = "WIN" if actual.category == pending.predicted_category else "LOSS"
    state.stats.record(status)
    PREDICTION_OUTCOMES_TOTAL.labels(status=status).inc()
    TRACKER_WIN_STREAK.set(state.stats.current_streak)

    outcome = ResolvedOutcome(
        status=status,
        predicted_period=pending.target_period,
        prediction=pending.predicted_category,
        actual_result=actual.category,
        actual_number=actual.number,
    )

    logger.info(
        f"Prediction resolved: {status}",
        extra={
            "data": {
                "period": pending.target_period,
                "predicted": pending.predicted_category,
                "actual": actual.category,
                "number": actual.number,
                "wins": state.stats.wins,
                "losses": state.stats.losses,
                "streak": state.stats.current_streak,
            }
        },
    )
    return outcome


def issue_prediction(state: TrackerState, target_period: str, category: Category) -> None:
    """Replace whatever prediction was pending with a new one."""
    state.pending = PendingPrediction(target_period=target_period, predicted_category=category)
