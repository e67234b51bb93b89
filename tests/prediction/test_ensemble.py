"""Tests for drawcast.prediction.ensemble: weighted voting and the predictor.

Covers ``combine_votes`` arithmetic, the static weight table, and
``EnsemblePredictor`` preconditions, invariants and repeatability.
"""

from __future__ import annotations

import pytest

from drawcast.common.schemas import AlgorithmVote, MethodTag
from drawcast.prediction.ensemble import (
    LEARNING_ALGORITHMS,
    EnsemblePredictor,
    combine_votes,
    signal_algorithms,
)
from drawcast.prediction.exceptions import InsufficientDataError
from drawcast.prediction.weights import DEFAULT_METHOD_WEIGHT, METHOD_WEIGHTS, method_weight
from tests.factories import history_from_categories, random_history

# ─── Helpers ───


def _vote(prediction: str, confidence: float, method: MethodTag = MethodTag.MA_MOMENTUM):
    return AlgorithmVote(method=method, prediction=prediction, confidence=confidence)


# ═══════════════════════════════════════════════════════════════
# Weight table
# ═══════════════════════════════════════════════════════════════


class TestMethodWeights:
    def test_listed_methods_use_override(self) -> None:
        assert method_weight(MethodTag.STREAK_BREAK) == pytest.approx(1.5)
        assert method_weight(MethodTag.RANDOM_FOREST) == pytest.approx(1.35)
        assert method_weight(MethodTag.ALTERNATION_HIGH) == pytest.approx(1.15)

    def test_unlisted_methods_default_to_one(self) -> None:
        assert method_weight(MethodTag.MA_MOMENTUM) == DEFAULT_METHOD_WEIGHT == 1.0
        assert method_weight(MethodTag.TIME_BASED_LOW) == 1.0

    def test_table_is_read_only(self) -> None:
        with pytest.raises(TypeError):
            METHOD_WEIGHTS[MethodTag.MA_MOMENTUM] = 2.0  # type: ignore[index]


# ═══════════════════════════════════════════════════════════════
# combine_votes
# ═══════════════════════════════════════════════════════════════


class TestCombineVotes:
    def test_empty_votes_raise(self) -> None:
        with pytest.raises(ValueError, match="No algorithm votes"):
            combine_votes([])

    def test_tie_resolves_to_small(self) -> None:
        result = combine_votes([_vote("BIG", 50), _vote("SMALL", 50)])
        assert result.final_prediction == "SMALL"
        # 50 * 0.7 + 0.5 * 30
        assert result.confidence == pytest.approx(50.0)
        assert result.agreement_ratio == 50

    def test_method_weight_scales_vote(self) -> None:
        result = combine_votes(
            [
                _vote("BIG", 60, MethodTag.STREAK_BREAK),  # 0.6 * 1.5 = 0.9
                _vote("SMALL", 80, MethodTag.MA_MOMENTUM),  # 0.8 * 1.0 = 0.8
            ]
        )
        assert result.final_prediction == "BIG"
        assert result.votes == {"BIG": pytest.approx(0.9), "SMALL": pytest.approx(0.8)}

    def test_confidence_blend(self) -> None:
        votes = [_vote("BIG", 90)] * 10 + [_vote("SMALL", 30)] * 5
        result = combine_votes(votes)
        big, small = 10 * 0.9, 5 * 0.3
        expected = big / (big + small) * 100 * 0.7 + (10 / 15) * 30
        assert result.final_prediction == "BIG"
        assert result.confidence == pytest.approx(round(expected, 2))
        assert result.agreement_ratio == 67

    def test_confidence_capped_at_95(self) -> None:
        result = combine_votes([_vote("BIG", 100)] * 15)
        assert result.confidence == pytest.approx(95.0)
        assert result.agreement_ratio == 100

    def test_all_zero_confidence_yields_zero(self) -> None:
        result = combine_votes([_vote("BIG", 0)] * 15)
        assert result.final_prediction == "SMALL"
        assert result.confidence == pytest.approx(0.0)
        assert result.agreement_ratio == 0

    def test_top_algorithms_only_agreeing_and_sorted(self) -> None:
        votes = [
            _vote("BIG", 55),
            _vote("BIG", 90),
            _vote("SMALL", 99),
            _vote("BIG", 70),
            _vote("BIG", 60),
            _vote("BIG", 80),
            _vote("BIG", 65),
        ]
        result = combine_votes(votes)
        top = result.top_algorithms(5)
        assert [v.confidence for v in top] == [90, 80, 70, 65, 60]
        assert all(v.prediction == "BIG" for v in top)
        assert result.agreeing_count == 6


# ═══════════════════════════════════════════════════════════════
# EnsemblePredictor
# ═══════════════════════════════════════════════════════════════


class TestEnsemblePredictor:
    def test_runs_fifteen_algorithms(self, fixed_clock) -> None:
        assert len(signal_algorithms(fixed_clock)) == 10
        assert len(LEARNING_ALGORITHMS) == 5

    def test_rejects_short_history(self, predictor: EnsemblePredictor) -> None:
        with pytest.raises(InsufficientDataError) as exc_info:
            predictor.predict(random_history(seed=1, length=19))
        assert exc_info.value.available == 19
        assert exc_info.value.required == 20

    def test_accepts_exactly_twenty(self, predictor: EnsemblePredictor) -> None:
        result = predictor.predict(random_history(seed=1, length=20))
        assert result.algorithms_used == 15
        assert len(result.predictions) == 15

    @pytest.mark.parametrize("seed", range(20))
    def test_result_invariants(self, predictor: EnsemblePredictor, seed: int) -> None:
        result = predictor.predict(random_history(seed, length=20 + seed))

        big, small = result.votes["BIG"], result.votes["SMALL"]
        expected_final = "BIG" if big > small else "SMALL"
        assert result.final_prediction == expected_final

        agreeing = sum(1 for p in result.predictions if p.prediction == result.final_prediction)
        assert result.agreement_ratio == round(agreeing / 15 * 100)
        assert 0.0 <= result.confidence <= 95.0

    def test_idempotent_on_same_history(self, predictor: EnsemblePredictor) -> None:
        history = random_history(seed=42, length=50)
        first = predictor.predict(history)
        second = predictor.predict(history)
        assert first.model_dump() == second.model_dump()

    def test_long_big_streak_gets_broken(self, predictor: EnsemblePredictor) -> None:
        result = predictor.predict(history_from_categories("B" * 8 + "SB" * 12))
        streak_vote = next(p for p in result.predictions if p.method == MethodTag.STREAK_BREAK)
        assert streak_vote.prediction == "SMALL"
        assert streak_vote.metadata["streak_length"] == 8
