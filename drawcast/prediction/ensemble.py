"""Weighted-voting ensemble over all signal and simulated-learning algorithms.

Each vote contributes ``confidence / 100 × method weight`` to its category.
The category with the strictly larger total wins (ties go to SMALL), and the
reported confidence blends the weighted margin with raw head-count agreement:

    confidence = min(95, 0.7 × winning_share% + 30 × agreeing_fraction)

Usage:
    from drawcast.prediction.ensemble import EnsemblePredictor

    predictor = EnsemblePredictor(clock=system_clock("UTC"))
    result = predictor.predict(history)
"""

from __future__ import annotations

from collections.abc import Callable
from functools import partial

from drawcast.common.logging import get_logger
from drawcast.common.schemas import AlgorithmVote, Category, EnsembleResult, History
from drawcast.prediction import learners, signals
from drawcast.prediction.exceptions import InsufficientDataError
from drawcast.prediction.signals import Clock
from drawcast.prediction.weights import method_weight

logger = get_logger("MODEL")

MIN_HISTORY = 20
MAX_CONFIDENCE = 95.0
MARGIN_SHARE = 0.7
AGREEMENT_SHARE = 0.3

Algorithm = Callable[[History], AlgorithmVote]

LEARNING_ALGORITHMS: tuple[Algorithm, ...] = (
    learners.lstm_memory,
    learners.gradient_boost,
    learners.random_forest,
    learners.svm_linear,
    learners.knn,
)


def signal_algorithms(clock: Clock) -> tuple[Algorithm, ...]:
    """The ten signal algorithms in voting order, with the clock bound in."""
    return (
        signals.moving_average,
        signals.streak,
        signals.pattern_match,
        signals.fibonacci_cycle,
        signals.distribution,
        signals.markov_chain,
        signals.recent_bias,
        signals.alternation,
        partial(signals.time_based, clock=clock),
        signals.neural_sim,
    )


def combine_votes(predictions: list[AlgorithmVote]) -> EnsembleResult:
    """Fuse individual votes into one EnsembleResult.

    Raises:
        ValueError: If ``predictions`` is empty.
    """
    if not predictions:
        raise ValueError("No algorithm votes to combine")

    totals: dict[Category, float] = {"BIG": 0.0, "SMALL": 0.0}
    for vote in predictions:
        totals[vote.prediction] += (vote.confidence / 100) * method_weight(vote.method)

    big, small = totals["BIG"], totals["SMALL"]
    final: Category = "BIG" if big > small else "SMALL"

    vote_total = big + small
    ensemble_confidence = max(big, small) / vote_total * 100 if vote_total > 0 else 0.0

    agreeing = sum(1 for p in predictions if p.prediction == final)
    agreement = agreeing / len(predictions)
    adjusted = min(
        MAX_CONFIDENCE,
        ensemble_confidence * MARGIN_SHARE + agreement * 100 * AGREEMENT_SHARE,
    )

    return EnsembleResult(
        final_prediction=final,
        confidence=round(max(0.0, adjusted), 2),
        agreement_ratio=round(agreement * 100),
        votes={"BIG": round(big, 2), "SMALL": round(small, 2)},
        predictions=predictions,
        algorithms_used=len(predictions),
    )


class EnsemblePredictor:
    """Runs every algorithm over a history and combines their votes.

    Args:
        clock: Wall clock handed to the time-based algorithm.
        min_history: Shortest history the ensemble will accept.
    """

    def __init__(self, clock: Clock, min_history: int = MIN_HISTORY) -> None:
        self.clock = clock
        self.min_history = min_history
        self.algorithms: tuple[Algorithm, ...] = signal_algorithms(clock) + LEARNING_ALGORITHMS

    def predict(self, history: History) -> EnsembleResult:
        """Run all algorithms on ``history`` (newest first) and vote.

        Raises:
            InsufficientDataError: If fewer than ``min_history`` draws are given.
        """
        if len(history) < self.min_history:
            raise InsufficientDataError(available=len(history), required=self.min_history)

        predictions = [algorithm(history) for algorithm in self.algorithms]
        result = combine_votes(predictions)

        logger.info(
            "Ensemble calculated",
            extra={
                "data": {
                    "prediction": result.final_prediction,
                    "confidence": result.confidence,
                    "agreement_pct": result.agreement_ratio,
                    "votes": result.votes,
                    "newest_period": history[0].period,
                }
            },
        )
        return result
