"""Static voting weights per method tag.

Tags not listed vote with DEFAULT_METHOD_WEIGHT. The table is fixed at
import time; it is not a registry and nothing may extend it at runtime.
"""

from __future__ import annotations

from types import MappingProxyType

from drawcast.common.schemas import MethodTag

DEFAULT_METHOD_WEIGHT = 1.0

METHOD_WEIGHTS = MappingProxyType(
    {
        MethodTag.STREAK_BREAK: 1.5,
        MethodTag.PATTERN_MATCH: 1.4,
        MethodTag.MARKOV_CHAIN: 1.3,
        MethodTag.LSTM_MEMORY: 1.4,
        MethodTag.GRADIENT_BOOST: 1.3,
        MethodTag.RANDOM_FOREST: 1.35,
        MethodTag.SVM_LINEAR: 1.2,
        MethodTag.KNN_WEIGHTED: 1.25,
        MethodTag.NEURAL_SIM: 1.3,
        MethodTag.DISTRIBUTION_MEAN_REVERT: 1.2,
        MethodTag.ALTERNATION_HIGH: 1.15,
    }
)


def method_weight(method: MethodTag) -> float:
    """Voting multiplier for a method tag."""
    return METHOD_WEIGHTS.get(method, DEFAULT_METHOD_WEIGHT)
