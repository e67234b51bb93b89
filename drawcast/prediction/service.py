"""Process-wide prediction service.

Owns the tracker state, the ensemble predictor, and the feed client, and
serializes cycles. The upstream fetch and the synchronous resolve → predict →
issue sequence both run under one lock, so snapshots are applied in the order
they were fetched. Repeat fetches inside the feed TTL are served from cache.
"""

from __future__ import annotations

import asyncio

from drawcast.common.config import Settings
from drawcast.common.logging import cycle_period_var, get_logger
from drawcast.common.metrics import PREDICTION_CYCLES_TOTAL
from drawcast.feed.client import DrawFeedClient
from drawcast.prediction.ensemble import EnsemblePredictor
from drawcast.prediction.exceptions import InsufficientDataError
from drawcast.prediction.pipeline import CycleResult, run_prediction_cycle
from drawcast.prediction.signals import Clock, system_clock
from drawcast.prediction.tracker import TrackerState

logger = get_logger("TRACKER")


class PredictionService:
    """Runs prediction cycles against live feed data.

    Args:
        feed: Client used to pull the latest draws.
        predictor: Ensemble used for every cycle.
        periods_per_day: Daily sequence maximum for next-period arithmetic.
        state: Initial tracker state (fresh if omitted).
    """

    def __init__(
        self,
        feed: DrawFeedClient,
        predictor: EnsemblePredictor,
        periods_per_day: int = 1440,
        state: TrackerState | None = None,
    ) -> None:
        self.feed = feed
        self.predictor = predictor
        self.periods_per_day = periods_per_day
        self.state = state or TrackerState()
        self._lock = asyncio.Lock()

    @classmethod
    def from_settings(cls, settings: Settings, clock: Clock | None = None) -> PredictionService:
        return cls(
            feed=DrawFeedClient.from_settings(settings),
            predictor=EnsemblePredictor(
                clock=clock or system_clock(settings.clock_timezone),
                min_history=settings.min_history,
            ),
            periods_per_day=settings.periods_per_day,
        )

    async def run_cycle(self) -> CycleResult:
        """Fetch the latest draws and run one cycle, both under the state lock.

        Log lines emitted by the cycle carry the newest fetched period.

        Raises:
            FetchError / ParseError: Upstream failure, propagated unchanged.
            InsufficientDataError: Too few draws; state is left untouched.
        """
        try:
            async with self._lock:
                history = await self.feed.fetch_draws()
                token = cycle_period_var.set(history[0].period if history else "")
                try:
                    result = run_prediction_cycle(
                        history,
                        self.state,
                        self.predictor,
                        periods_per_day=self.periods_per_day,
                    )
                finally:
                    cycle_period_var.reset(token)
        except InsufficientDataError as exc:
            PREDICTION_CYCLES_TOTAL.labels(outcome="insufficient_data").inc()
            logger.warning(
                "Cycle skipped: insufficient data",
                extra={"data": {"available": exc.available, "required": exc.required}},
            )
            raise
        except Exception:
            PREDICTION_CYCLES_TOTAL.labels(outcome="error").inc()
            raise

        PREDICTION_CYCLES_TOTAL.labels(outcome="success").inc()
        return result


_service: PredictionService | None = None


def get_prediction_service() -> PredictionService:
    """Get or lazily create the process-wide PredictionService.

    Used as a FastAPI dependency; tests override it with their own instance.
    """
    global _service  # noqa: PLW0603
    if _service is None:
        from drawcast.common.config import get_settings

        _service = PredictionService.from_settings(get_settings())
    return _service
