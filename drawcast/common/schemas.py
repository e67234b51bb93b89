"""Pydantic schemas: the interface contracts between modules.

Defines the data shapes that flow from the draw feed into the prediction
engine and out of the ensemble. All cross-module communication uses these
types; HTTP response shapes live separately in drawcast.api.response_schemas.
"""

from __future__ import annotations

from collections.abc import Sequence
from datetime import datetime
from enum import StrEnum
from typing import Any, Literal

from pydantic import BaseModel, Field, computed_field, field_validator

# ─── Literal Types ───

Category = Literal["BIG", "SMALL"]
Parity = Literal["EVEN", "ODD"]
Color = Literal["VIOLET-RED", "VIOLET-GREEN", "GREEN", "RED"]
OutcomeStatus = Literal["WIN", "LOSS"]

BIG_THRESHOLD = 5  # numbers 5-9 are BIG, 0-4 are SMALL


def opposite(category: Category) -> Category:
    """Return the other category."""
    return "SMALL" if category == "BIG" else "BIG"


def category_of(number: int) -> Category:
    """Map a drawn number onto its BIG/SMALL category."""
    return "BIG" if number >= BIG_THRESHOLD else "SMALL"


def color_of(number: int) -> Color:
    """Map a drawn number onto its color tag."""
    if number == 0:
        return "VIOLET-RED"
    if number == 5:
        return "VIOLET-GREEN"
    if number in (1, 3, 7, 9):
        return "GREEN"
    return "RED"


# ─── Draw Schemas (Feed → Prediction) ───


class DrawResult(BaseModel):
    """One resolved draw of the game.

    Only ``period`` and ``number`` are stored; category, parity and color are
    derived on access so they can never disagree with the number.
    """

    model_config = {"frozen": True}

    period: str
    number: int = Field(ge=0, le=9)
    observed_at: datetime | None = None

    @computed_field  # type: ignore[prop-decorator]
    @property
    def category(self) -> Category:
        return category_of(self.number)

    @computed_field  # type: ignore[prop-decorator]
    @property
    def parity(self) -> Parity:
        return "EVEN" if self.number % 2 == 0 else "ODD"

    @computed_field  # type: ignore[prop-decorator]
    @property
    def color(self) -> Color:
        return color_of(self.number)


History = Sequence[DrawResult]


# ─── Algorithm Schemas (Algorithms → Ensemble) ───


class MethodTag(StrEnum):
    """Closed set of method tags an algorithm can report.

    One algorithm may emit several tags depending on which branch fired;
    the tag, not the algorithm, selects the voting weight.
    """

    MA_CONTRARIAN = "MA_CONTRARIAN"
    MA_MOMENTUM = "MA_MOMENTUM"
    STREAK_BREAK = "STREAK_BREAK"
    STREAK_CONTINUE = "STREAK_CONTINUE"
    STREAK_NEUTRAL = "STREAK_NEUTRAL"
    PATTERN_MATCH = "PATTERN_MATCH"
    PATTERN_DEFAULT = "PATTERN_DEFAULT"
    FIBONACCI_CYCLE = "FIBONACCI_CYCLE"
    DISTRIBUTION_MEAN_REVERT = "DISTRIBUTION_MEAN_REVERT"
    DISTRIBUTION_NEUTRAL = "DISTRIBUTION_NEUTRAL"
    MARKOV_CHAIN = "MARKOV_CHAIN"
    MARKOV_DEFAULT = "MARKOV_DEFAULT"
    RECENT_BIAS_CONTRARIAN = "RECENT_BIAS_CONTRARIAN"
    RECENT_BIAS_FOLLOW = "RECENT_BIAS_FOLLOW"
    ALTERNATION_HIGH = "ALTERNATION_HIGH"
    ALTERNATION_LOW = "ALTERNATION_LOW"
    ALTERNATION_NEUTRAL = "ALTERNATION_NEUTRAL"
    TIME_BASED_HIGH = "TIME_BASED_HIGH"
    TIME_BASED_LOW = "TIME_BASED_LOW"
    NEURAL_SIM = "NEURAL_SIM"
    LSTM_MEMORY = "LSTM_MEMORY"
    GRADIENT_BOOST = "GRADIENT_BOOST"
    RANDOM_FOREST = "RANDOM_FOREST"
    SVM_LINEAR = "SVM_LINEAR"
    KNN_WEIGHTED = "KNN_WEIGHTED"


class AlgorithmVote(BaseModel):
    """One algorithm's prediction for the next draw.

    ``metadata`` is diagnostic only (matched pattern, streak length, ...)
    and is never read by the ensemble.
    """

    method: MethodTag
    prediction: Category
    confidence: float = Field(ge=0.0, le=100.0)
    metadata: dict[str, Any] = Field(default_factory=dict)

    @field_validator("confidence", mode="before")
    @classmethod
    def clamp_confidence(cls, v: float) -> float:
        """Clamp confidence into [0, 100] instead of rejecting it."""
        return min(100.0, max(0.0, float(v)))


class EnsembleResult(BaseModel):
    """Output of the weighted-voting ensemble for one history snapshot."""

    final_prediction: Category
    confidence: float = Field(ge=0.0, le=95.0)
    agreement_ratio: int = Field(ge=0, le=100)  # percent of votes matching the final call
    votes: dict[Category, float]  # weighted vote totals per category
    predictions: list[AlgorithmVote]
    algorithms_used: int

    @property
    def agreeing_count(self) -> int:
        """Number of algorithms whose vote matches the final prediction."""
        return sum(1 for p in self.predictions if p.prediction == self.final_prediction)

    def top_algorithms(self, limit: int = 5) -> list[AlgorithmVote]:
        """Agreeing votes, highest confidence first, at most ``limit`` of them."""
        agreeing = [p for p in self.predictions if p.prediction == self.final_prediction]
        return sorted(agreeing, key=lambda p: p.confidence, reverse=True)[:limit]
