"""Tests for drawcast.prediction.pipeline: one resolve-then-reissue cycle."""

from __future__ import annotations

import pytest

from drawcast.prediction.ensemble import EnsemblePredictor
from drawcast.prediction.exceptions import InsufficientDataError, PeriodFormatError
from drawcast.prediction.pipeline import run_prediction_cycle
from drawcast.prediction.tracker import TrackerState, issue_prediction
from tests.factories import NEWEST_SEQUENCE, make_history, period_at, random_history


class TestRunPredictionCycle:
    def test_first_cycle_issues_without_outcome(
        self, tracker_state: TrackerState, predictor: EnsemblePredictor
    ) -> None:
        history = random_history(seed=3)
        cycle = run_prediction_cycle(history, tracker_state, predictor)

        assert cycle.outcome is None
        assert cycle.latest == history[0]
        assert cycle.next_period == period_at(-1)
        assert tracker_state.pending is not None
        assert tracker_state.pending.target_period == cycle.next_period
        assert tracker_state.pending.predicted_category == cycle.ensemble.final_prediction
        assert cycle.stats.total == 0

    def test_same_snapshot_twice_does_not_resolve(
        self, tracker_state: TrackerState, predictor: EnsemblePredictor
    ) -> None:
        history = random_history(seed=3)
        first = run_prediction_cycle(history, tracker_state, predictor)
        second = run_prediction_cycle(history, tracker_state, predictor)

        assert second.outcome is None
        assert second.next_period == first.next_period
        assert tracker_state.stats.total == 0

    def test_next_snapshot_resolves_previous(
        self, tracker_state: TrackerState, predictor: EnsemblePredictor
    ) -> None:
        older = random_history(seed=8)
        first = run_prediction_cycle(older, tracker_state, predictor)

        # The predicted period lands, then one more draw after it
        numbers = [4, 9] + [d.number for d in older]
        newer = make_history(numbers, newest_sequence=NEWEST_SEQUENCE + 2)
        second = run_prediction_cycle(newer, tracker_state, predictor)

        assert second.outcome is not None
        assert second.outcome.predicted_period == first.next_period
        assert second.outcome.actual_number == 9
        assert second.outcome.actual_result == "BIG"
        expected = "WIN" if first.ensemble.final_prediction == "BIG" else "LOSS"
        assert second.outcome.status == expected
        assert second.stats.total == 1
        assert tracker_state.pending.target_period == period_at(-1, NEWEST_SEQUENCE + 2)

    def test_insufficient_history_leaves_state_untouched(
        self, predictor: EnsemblePredictor
    ) -> None:
        state = TrackerState()
        issue_prediction(state, period_at(1), "BIG")
        before = state.pending

        with pytest.raises(InsufficientDataError):
            run_prediction_cycle(random_history(seed=1, length=19), state, predictor)

        assert state.pending == before
        assert state.stats.total == 0

    def test_bad_period_leaves_state_untouched(self, predictor: EnsemblePredictor) -> None:
        state = TrackerState()
        issue_prediction(state, period_at(1), "BIG")
        history = random_history(seed=2)
        broken = [history[0].model_copy(update={"period": "garbage"}), *history[1:]]

        with pytest.raises(PeriodFormatError):
            run_prediction_cycle(broken, state, predictor)

        assert state.stats.total == 0
        assert state.pending.target_period == period_at(1)

    def test_stats_are_a_snapshot(
        self, tracker_state: TrackerState, predictor: EnsemblePredictor
    ) -> None:
        cycle = run_prediction_cycle(random_history(seed=4), tracker_state, predictor)
        tracker_state.stats.record("WIN")
        assert cycle.stats.total == 0

    def test_day_rollover(self, tracker_state: TrackerState, predictor: EnsemblePredictor) -> None:
        history = make_history([3] * 20, newest_sequence=1440)
        cycle = run_prediction_cycle(history, tracker_state, predictor)
        assert cycle.next_period == "202610180001"
