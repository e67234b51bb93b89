"""Prediction engine: multi-algorithm ensemble for the next BIG/SMALL draw.

Orchestrates: outcome resolution → 15-algorithm weighted vote → next period → new pending prediction.
"""

from __future__ import annotations

from drawcast.prediction.ensemble import EnsemblePredictor
from drawcast.prediction.pipeline import CycleResult, run_prediction_cycle
from drawcast.prediction.tracker import TrackerState

__all__ = ["CycleResult", "EnsemblePredictor", "TrackerState", "run_prediction_cycle"]
