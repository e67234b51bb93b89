"""HTTP response schemas for the prediction endpoint.

Fields are snake_case in Python and serialized camelCase on the wire,
which is the shape polling clients already consume.
"""

from __future__ import annotations

from datetime import UTC, datetime

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from drawcast.common.schemas import Category, Color, DrawResult, OutcomeStatus
from drawcast.prediction.pipeline import CycleResult


class CamelModel(BaseModel):
    """Base for response models serialized with camelCase keys."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class PreviousResult(CamelModel):
    status: OutcomeStatus
    message: str
    predicted_period: str
    prediction: Category
    actual_result: Category
    actual_number: int


class DrawSummary(CamelModel):
    period: str
    number: int
    result: Category
    color: Color

    @classmethod
    def from_draw(cls, draw: DrawResult) -> DrawSummary:
        return cls(period=draw.period, number=draw.number, result=draw.category, color=draw.color)


class TopAlgorithm(CamelModel):
    method: str
    confidence: float


class PredictionBlock(CamelModel):
    period: str
    prediction: Category
    confidence: float
    agreement_ratio: str  # "73%"
    algorithms_agree: str  # "11/15"
    votes: dict[Category, float]
    top_algorithms: list[TopAlgorithm]


class StatisticsBlock(CamelModel):
    total_predictions: int
    wins: int
    losses: int
    win_rate: str  # "54.17%"
    current_win_streak: int
    best_win_streak: int


class ApiInfo(CamelModel):
    version: str
    algorithms: int
    data_source: str
    next_update: str = "Real-time on next request"


class PredictResponse(CamelModel):
    """Successful /api/predict payload."""

    success: bool = True
    timestamp: datetime = Field(default_factory=lambda: datetime.now(UTC))
    response_time: str
    previous_result: PreviousResult | None
    current_period: DrawSummary
    prediction: PredictionBlock
    statistics: StatisticsBlock
    recent_history: list[DrawSummary]
    api_info: ApiInfo


class ErrorResponse(CamelModel):
    """Failure payload: an error indicator and a human-readable message."""

    success: bool = False
    error: str
    message: str
    timestamp: datetime = Field(default_factory=lambda: datetime.now(UTC))
    suggestion: str = "Please try again in a few seconds"


def format_win_rate(wins: int, total: int) -> str:
    """Win rate as a percentage string; "0%" before anything resolved."""
    if total == 0:
        return "0%"
    return f"{wins / total * 100:.2f}%"


def build_predict_response(
    cycle: CycleResult,
    *,
    elapsed_ms: float,
    version: str,
    data_source: str,
    top_limit: int = 5,
    recent_limit: int = 10,
) -> PredictResponse:
    """Shape one CycleResult into the public response envelope."""
    ensemble = cycle.ensemble
    stats = cycle.stats

    previous = None
    if cycle.outcome is not None:
        previous = PreviousResult(
            status=cycle.outcome.status,
            message=cycle.outcome.message,
            predicted_period=cycle.outcome.predicted_period,
            prediction=cycle.outcome.prediction,
            actual_result=cycle.outcome.actual_result,
            actual_number=cycle.outcome.actual_number,
        )

    return PredictResponse(
        response_time=f"{round(elapsed_ms)}ms",
        previous_result=previous,
        current_period=DrawSummary.from_draw(cycle.latest),
        prediction=PredictionBlock(
            period=cycle.next_period,
            prediction=ensemble.final_prediction,
            confidence=ensemble.confidence,
            agreement_ratio=f"{ensemble.agreement_ratio}%",
            algorithms_agree=f"{ensemble.agreeing_count}/{ensemble.algorithms_used}",
            votes=ensemble.votes,
            top_algorithms=[
                TopAlgorithm(method=vote.method.value, confidence=round(vote.confidence, 2))
                for vote in ensemble.top_algorithms(top_limit)
            ],
        ),
        statistics=StatisticsBlock(
            total_predictions=stats.total,
            wins=stats.wins,
            losses=stats.losses,
            win_rate=format_win_rate(stats.wins, stats.total),
            current_win_streak=stats.current_streak,
            best_win_streak=stats.best_streak,
        ),
        recent_history=[DrawSummary.from_draw(d) for d in cycle.history[:recent_limit]],
        api_info=ApiInfo(
            version=version,
            algorithms=ensemble.algorithms_used,
            data_source=data_source,
        ),
    )
