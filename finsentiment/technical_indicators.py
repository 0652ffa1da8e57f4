from __future__ import annotations

from collections.abc import Sequence

import numpy as np

from finsentiment.sentiment_types import TechnicalIndicators, Trend

TREND_THRESHOLD = 0.1


def derive_indicators(sentence_scores: Sequence[float]) -> TechnicalIndicators:
    """
    Volatility, momentum and trend over a sequence of sentence scores.

    - volatility: population standard deviation
    - momentum: mean of successive differences (0.0 for a single score)
    - trend: up/down beyond +/-0.1 momentum, otherwise sideways

    Raises:
        ValueError: if sentence_scores is empty
    """
    if len(sentence_scores) == 0:
        raise ValueError("sentence_scores must not be empty")

    scores = np.asarray(sentence_scores, dtype=float)
    volatility = float(np.std(scores))
    momentum = float(np.mean(np.diff(scores))) if scores.size > 1 else 0.0

    return TechnicalIndicators(
        volatility=volatility,
        momentum=momentum,
        trend=_trend(momentum),
    )


def _trend(momentum: float) -> Trend:
    if momentum > TREND_THRESHOLD:
        return "up"
    if momentum < -TREND_THRESHOLD:
        return "down"
    return "sideways"
