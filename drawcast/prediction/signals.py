"""Signal algorithms: independent statistical heuristics over the draw history.

Every function takes the history (newest first) and returns one AlgorithmVote.
All of them are pure except ``time_based``, which also reads a wall clock;
the clock is passed in so callers and tests control it.

Shorter-than-ideal histories are tolerated: each window simply covers
whatever draws exist. At least one draw is required.
"""

from __future__ import annotations

import math
from collections import Counter
from collections.abc import Callable
from datetime import datetime
from zoneinfo import ZoneInfo

import numpy as np

from drawcast.common.schemas import (
    AlgorithmVote,
    Category,
    History,
    MethodTag,
    opposite,
)

Clock = Callable[[], datetime]

FIBONACCI_LAGS = (1, 2, 3, 5, 8, 13, 21, 34)
RECENT_BIAS_WEIGHTS = (10, 8, 6, 5, 4, 3, 2, 1.5, 1, 0.5)


def system_clock(timezone: str = "UTC") -> Clock:
    """Build a clock that reads the current time in ``timezone``."""
    tz = ZoneInfo(timezone)
    return lambda: datetime.now(tz)


def _majority(big: float, small: float) -> Category:
    """BIG only when strictly ahead; ties go to SMALL."""
    return "BIG" if big > small else "SMALL"


def _big_count(draws: History) -> int:
    return sum(1 for d in draws if d.category == "BIG")


# ─── Trend & Streak ───


def moving_average(history: History, window: int = 10) -> AlgorithmVote:
    """Fade a lopsided window, otherwise follow its majority."""
    recent = history[:window]
    big = _big_count(recent)
    ratio = big / len(recent)

    if ratio > 0.7:
        return AlgorithmVote(
            method=MethodTag.MA_CONTRARIAN, prediction="SMALL", confidence=ratio * 100
        )
    if ratio < 0.3:
        return AlgorithmVote(
            method=MethodTag.MA_CONTRARIAN, prediction="BIG", confidence=(1 - ratio) * 100
        )

    return AlgorithmVote(
        method=MethodTag.MA_MOMENTUM,
        prediction=_majority(big, len(recent) - big),
        confidence=abs(0.5 - ratio) * 200,
    )


def current_streak(history: History) -> int:
    """Length of the run of identical categories ending at the newest draw."""
    first = history[0].category
    length = 1
    for draw in history[1:]:
        if draw.category != first:
            break
        length += 1
    return length


def streak(history: History) -> AlgorithmVote:
    """Bet on long runs breaking and short runs continuing."""
    first = history[0].category
    length = current_streak(history)
    metadata = {"streak_length": length}

    if length >= 4:
        return AlgorithmVote(
            method=MethodTag.STREAK_BREAK,
            prediction=opposite(first),
            confidence=min(95, 60 + length * 8),
            metadata=metadata,
        )
    if length <= 2:
        return AlgorithmVote(
            method=MethodTag.STREAK_CONTINUE,
            prediction=first,
            confidence=55 + length * 5,
            metadata=metadata,
        )
    return AlgorithmVote(
        method=MethodTag.STREAK_NEUTRAL,
        prediction=opposite(first),
        confidence=50 + length * 5,
        metadata=metadata,
    )


# ─── Sequence Structure ───


def pattern_match(history: History, depth: int = 5, lookback: int = 50) -> AlgorithmVote:
    """Look up what historically followed the current ``depth``-long sequence.

    Each window ``recent[i - depth:i]`` is keyed by its categories and
    credited with the draw that came right after it in time, which is the
    element just before the window in newest-first order.
    """
    recent = history[:lookback]
    followers: dict[tuple[str, ...], Counter[str]] = {}

    for i in range(depth + 1, len(recent)):
        key = tuple(d.category for d in recent[i - depth : i])
        follower = recent[i - depth - 1].category
        followers.setdefault(key, Counter())[follower] += 1

    current = tuple(d.category for d in history[:depth])
    counts = followers.get(current)

    if counts:
        big, small = counts["BIG"], counts["SMALL"]
        total = big + small
        return AlgorithmVote(
            method=MethodTag.PATTERN_MATCH,
            prediction=_majority(big, small),
            confidence=min(90, max(big, small) / total * 100),
            metadata={"pattern": "-".join(current), "occurrences": total},
        )

    return AlgorithmVote(method=MethodTag.PATTERN_DEFAULT, prediction="BIG", confidence=50)


def fibonacci_cycle(history: History) -> AlgorithmVote:
    """Contrarian vote over draws sampled at Fibonacci lags.

    Shorter lags carry more weight: rank ``idx`` weighs ``(8 - idx) / 8``.
    """
    recent = history[: FIBONACCI_LAGS[-1]]
    big_score = 0.0
    small_score = 0.0
    n_lags = len(FIBONACCI_LAGS)

    for idx, lag in enumerate(FIBONACCI_LAGS):
        if lag > len(recent):
            break
        weight = (n_lags - idx) / n_lags
        if recent[lag - 1].category == "BIG":
            big_score += weight
        else:
            small_score += weight

    total = big_score + small_score
    prediction: Category = "SMALL" if big_score > small_score else "BIG"

    return AlgorithmVote(
        method=MethodTag.FIBONACCI_CYCLE,
        prediction=prediction,
        confidence=min(85, abs(big_score - small_score) / total * 100 + 50),
    )


def distribution(history: History, window: int = 20) -> AlgorithmVote:
    """Mean reversion on the raw numbers of the last ``window`` draws."""
    numbers = np.array([d.number for d in history[:window]], dtype=float)
    mean = float(numbers.mean())
    std = float(numbers.std())
    metadata = {"average": round(mean, 2), "std_dev": round(std, 2)}

    if mean > 5.5:
        return AlgorithmVote(
            method=MethodTag.DISTRIBUTION_MEAN_REVERT,
            prediction="SMALL",
            confidence=min(85, 50 + (mean - 4.5) * 10),
            metadata=metadata,
        )
    if mean < 3.5:
        return AlgorithmVote(
            method=MethodTag.DISTRIBUTION_MEAN_REVERT,
            prediction="BIG",
            confidence=min(85, 50 + (4.5 - mean) * 10),
            metadata=metadata,
        )

    return AlgorithmVote(
        method=MethodTag.DISTRIBUTION_NEUTRAL,
        prediction="SMALL" if mean > 4.5 else "BIG",
        confidence=55,
        metadata=metadata,
    )


def markov_chain(history: History) -> AlgorithmVote:
    """First-order transitions over the whole history, conditioned on the newest draw."""
    transitions: dict[str, Counter[str]] = {"BIG": Counter(), "SMALL": Counter()}

    # history[i + 1] happened just before history[i]
    for newer, older in zip(history, history[1:], strict=False):
        transitions[older.category][newer.category] += 1

    last = history[0].category
    big, small = transitions[last]["BIG"], transitions[last]["SMALL"]
    total = big + small

    if total > 0:
        return AlgorithmVote(
            method=MethodTag.MARKOV_CHAIN,
            prediction=_majority(big, small),
            confidence=min(88, max(big, small) / total * 100),
            metadata={"transition_from": last},
        )

    return AlgorithmVote(method=MethodTag.MARKOV_DEFAULT, prediction="BIG", confidence=50)


# ─── Recency & Rhythm ───


def recent_bias(history: History) -> AlgorithmVote:
    """Decaying-weight BIG ratio: fade extremes, follow moderate bias."""
    weighted_big = 0.0
    total_weight = 0.0
    for draw, weight in zip(history, RECENT_BIAS_WEIGHTS, strict=False):
        if draw.category == "BIG":
            weighted_big += weight
        total_weight += weight

    big_ratio = weighted_big / total_weight

    if big_ratio > 0.65:
        return AlgorithmVote(
            method=MethodTag.RECENT_BIAS_CONTRARIAN, prediction="SMALL", confidence=big_ratio * 100
        )
    if big_ratio < 0.35:
        return AlgorithmVote(
            method=MethodTag.RECENT_BIAS_CONTRARIAN,
            prediction="BIG",
            confidence=(1 - big_ratio) * 100,
        )

    return AlgorithmVote(
        method=MethodTag.RECENT_BIAS_FOLLOW,
        prediction="BIG" if big_ratio > 0.5 else "SMALL",
        confidence=50 + abs(0.5 - big_ratio) * 100,
    )


def alternation(history: History, check_length: int = 10) -> AlgorithmVote:
    """Measure how often the category flips among the last ``check_length`` draws."""
    pairs = min(check_length - 1, len(history) - 1)
    flips = sum(1 for i in range(pairs) if history[i].category != history[i + 1].category)
    rate = flips / (check_length - 1)
    last = history[0].category

    if rate > 0.7:
        return AlgorithmVote(
            method=MethodTag.ALTERNATION_HIGH, prediction=opposite(last), confidence=rate * 95
        )
    if rate < 0.3:
        return AlgorithmVote(
            method=MethodTag.ALTERNATION_LOW, prediction=last, confidence=(1 - rate) * 80
        )
    return AlgorithmVote(
        method=MethodTag.ALTERNATION_NEUTRAL, prediction=opposite(last), confidence=55
    )


def time_based(history: History, clock: Clock) -> AlgorithmVote:
    """Blend a two-hour wall-clock cycle with the BIG count of the last 5 draws.

    The only algorithm whose output depends on something besides the history.
    """
    now = clock()
    time_score = ((now.hour * 60 + now.minute) % 120) / 120
    big = _big_count(history[:5])

    if time_score > 0.5:
        return AlgorithmVote(
            method=MethodTag.TIME_BASED_HIGH,
            prediction="SMALL" if big > 2 else "BIG",
            confidence=60 + time_score * 20,
            metadata={"time_score": round(time_score, 4)},
        )
    return AlgorithmVote(
        method=MethodTag.TIME_BASED_LOW,
        prediction="BIG" if big <= 2 else "SMALL",
        confidence=55 + (1 - time_score) * 20,
        metadata={"time_score": round(time_score, 4)},
    )


def neural_sim(history: History, window: int = 15) -> AlgorithmVote:
    """Exponentially decayed BIG activation squashed through a logistic curve."""
    weighted = 0.0
    total_weight = 0.0
    for i, draw in enumerate(history[:window]):
        weight = math.exp(-i * 0.2)
        weighted += (1 if draw.category == "BIG" else 0) * weight
        total_weight += weight

    activation = weighted / total_weight
    squashed = 1 / (1 + math.exp(-(activation - 0.5) * 5))

    return AlgorithmVote(
        method=MethodTag.NEURAL_SIM,
        prediction="BIG" if squashed > 0.5 else "SMALL",
        confidence=min(90, 50 + abs(squashed - 0.5) * 200),
        metadata={"activation": round(squashed, 4)},
    )
