"""Prediction-specific exceptions.

The API layer catches PredictionError subclasses and turns them into
structured failure responses.
"""

from __future__ import annotations

from drawcast.common.exceptions import DrawcastError


class PredictionError(DrawcastError):
    """Base exception for prediction module errors."""


class InsufficientDataError(PredictionError):
    """Raised when the history is too short to run the ensemble."""

    def __init__(self, available: int, required: int) -> None:
        self.available = available
        self.required = required
        super().__init__(
            "Insufficient data for prediction",
            context={"available": available, "required": required},
        )


class PeriodFormatError(PredictionError):
    """Raised when a period identifier is not YYYYMMDD followed by a sequence."""
