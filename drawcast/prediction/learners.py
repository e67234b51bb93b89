"""Simulated-learning algorithms.

Styled after learned models (recurrent memory, boosting, bagged trees,
linear margin classifier, nearest neighbours) but built from fixed formulas:
nothing is fitted and nothing is random, so identical histories always
produce identical votes.

Categories are encoded as +1 (BIG) / -1 (SMALL) except in the KNN state
vector, which uses 1 / 0.
"""

from __future__ import annotations

import math
from collections.abc import Callable

import numpy as np

from drawcast.common.schemas import AlgorithmVote, Category, DrawResult, History, MethodTag

LSTM_CELLS = 10
LSTM_STEPS = 20
BOOST_LEARNERS = 5
BOOST_WINDOW = 4
FOREST_TREES = 7
SVM_POINTS = 20
SVM_SUPPORT = 5


def _sigmoid(x: float) -> float:
    return 1 / (1 + math.exp(-x))


def _signed(draw: DrawResult) -> int:
    return 1 if draw.category == "BIG" else -1


def lstm_memory(history: History) -> AlgorithmVote:
    """Gated memory cells updated over the last 20 draws.

    Draw ``idx`` writes into cell ``idx % 10``; the prediction is the sign of
    the mean hidden state once every draw has been absorbed.
    """
    cell = np.zeros(LSTM_CELLS)
    hidden = np.zeros(LSTM_CELLS)

    for idx, draw in enumerate(history[:LSTM_STEPS]):
        x = _signed(draw)
        j = idx % LSTM_CELLS
        forget_gate = _sigmoid(x * 0.5 + hidden[j] * 0.3)
        input_gate = _sigmoid(x * 0.7 - hidden[j] * 0.2)
        candidate = math.tanh(x * 0.9)

        cell[j] = forget_gate * cell[j] + input_gate * candidate
        hidden[j] = math.tanh(cell[j])

    output = float(hidden.mean())

    return AlgorithmVote(
        method=MethodTag.LSTM_MEMORY,
        prediction="BIG" if output > 0 else "SMALL",
        confidence=min(92, 50 + abs(output) * 50),
        metadata={"output": round(output, 4)},
    )


def gradient_boost(history: History) -> AlgorithmVote:
    """Five weak learners over consecutive 4-draw windows, weighted 1/rank.

    An aggregate beyond ±0.7 is treated as overextended and flipped.
    """
    total_vote = 0.0
    total_weight = 0.0

    for i in range(BOOST_LEARNERS):
        window = history[i * BOOST_WINDOW : (i + 1) * BOOST_WINDOW]
        big = sum(1 for d in window if d.category == "BIG")
        vote = 1 if big > BOOST_WINDOW // 2 else -1
        weight = 1 / (i + 1)
        total_vote += vote * weight
        total_weight += weight

    final_vote = total_vote / total_weight

    if abs(final_vote) > 0.7:
        prediction: Category = "SMALL" if final_vote > 0 else "BIG"
    else:
        prediction = "BIG" if final_vote > 0 else "SMALL"

    return AlgorithmVote(
        method=MethodTag.GRADIENT_BOOST,
        prediction=prediction,
        confidence=min(88, 55 + abs(final_vote) * 40),
        metadata={"aggregate_vote": round(final_vote, 4)},
    )


# ─── Random Forest ───

DecisionRule = Callable[[float, list[DrawResult]], Category]


def _rule_follow_majority(big_ratio: float, sample: list[DrawResult]) -> Category:
    return "BIG" if big_ratio > 0.5 else "SMALL"


def _rule_fade_heavy_big(big_ratio: float, sample: list[DrawResult]) -> Category:
    return "SMALL" if big_ratio > 0.6 else "BIG"


def _rule_fade_heavy_small(big_ratio: float, sample: list[DrawResult]) -> Category:
    return "BIG" if big_ratio < 0.4 else "SMALL"


def _rule_flip_newest(big_ratio: float, sample: list[DrawResult]) -> Category:
    return "SMALL" if sample[0].category == "BIG" else "BIG"


# Tree t uses DECISION_RULES[t % 4]
DECISION_RULES: tuple[DecisionRule, ...] = (
    _rule_follow_majority,
    _rule_fade_heavy_big,
    _rule_fade_heavy_small,
    _rule_flip_newest,
)


def tree_window(tree: int) -> tuple[int, int]:
    """Fixed (start, stop) slice of history examined by ``tree``."""
    start = tree % 3
    return start, start + 8 + tree % 5


def random_forest(history: History) -> AlgorithmVote:
    """Seven deterministic trees, each a fixed window plus one decision rule."""
    votes: dict[Category, int] = {"BIG": 0, "SMALL": 0}

    for tree in range(FOREST_TREES):
        start, stop = tree_window(tree)
        sample = list(history[start:stop]) or list(history[:1])
        big_ratio = sum(1 for d in sample if d.category == "BIG") / len(sample)
        rule = DECISION_RULES[tree % len(DECISION_RULES)]
        votes[rule(big_ratio, sample)] += 1

    prediction: Category = "BIG" if votes["BIG"] > votes["SMALL"] else "SMALL"

    return AlgorithmVote(
        method=MethodTag.RANDOM_FOREST,
        prediction=prediction,
        confidence=min(90, max(votes.values()) / FOREST_TREES * 100),
        metadata={"votes": votes},
    )


def svm_linear(history: History) -> AlgorithmVote:
    """Recency-discounted linear score plus a margin term from the newest points."""
    points = [(_signed(d), i / SVM_POINTS) for i, d in enumerate(history[:SVM_POINTS])]

    decision = sum(x * (1 - y) for x, y in points) / len(points)
    margin = sum(x * math.exp(-y * 2) for x, y in points[:SVM_SUPPORT])
    final_decision = decision + margin * 0.3

    return AlgorithmVote(
        method=MethodTag.SVM_LINEAR,
        prediction="BIG" if final_decision > 0 else "SMALL",
        confidence=min(87, 50 + abs(final_decision) * 25),
        metadata={"decision": round(final_decision, 4)},
    )


def knn(history: History, k: int = 5, width: int = 3) -> AlgorithmVote:
    """Distance-weighted vote of the ``k`` historical windows closest to the present.

    Window ``history[i:i + width]`` is followed in time by ``history[i - 1]``.
    Only complete windows with a follower are considered.
    """

    def encode(draws: History) -> np.ndarray:
        return np.array([1.0 if d.category == "BIG" else 0.0 for d in draws])

    current = encode(history[:width])
    neighbours: list[tuple[float, Category]] = []

    for i in range(width, len(history) - width + 1):
        pattern = encode(history[i : i + width])
        dist = float(np.linalg.norm(current - pattern))
        neighbours.append((dist, history[i - 1].category))

    if not neighbours:
        return AlgorithmVote(method=MethodTag.KNN_WEIGHTED, prediction="BIG", confidence=50)

    # stable sort keeps the most recent window first among equal distances
    nearest = sorted(neighbours, key=lambda n: n[0])[:k]
    votes: dict[Category, float] = {"BIG": 0.0, "SMALL": 0.0}
    for dist, follower in nearest:
        votes[follower] += 1 / (dist + 0.1)

    total = votes["BIG"] + votes["SMALL"]

    return AlgorithmVote(
        method=MethodTag.KNN_WEIGHTED,
        prediction="BIG" if votes["BIG"] > votes["SMALL"] else "SMALL",
        confidence=min(89, max(votes.values()) / total * 100),
        metadata={"neighbours": len(nearest)},
    )
