from __future__ import annotations

import logging
from collections.abc import Iterator, Mapping
from types import MappingProxyType
from typing import Optional

from finsentiment.errors import LexiconConfigError

logger = logging.getLogger(__name__)


POSITIVE_TERMS: Mapping[str, float] = {
    "growth": 0.8, "increase": 0.7, "rise": 0.7, "gain": 0.6, "profit": 0.8,
    "revenue": 0.6, "earnings": 0.7, "beat": 0.9, "exceed": 0.8, "strong": 0.7,
    "positive": 0.6, "bullish": 0.9, "optimistic": 0.7, "outperform": 0.8,
    "upgrade": 0.8, "buy": 0.7, "rally": 0.8, "surge": 0.9, "soar": 0.9,
}

NEGATIVE_TERMS: Mapping[str, float] = {
    "decline": -0.7, "decrease": -0.7, "fall": -0.7, "drop": -0.7, "loss": -0.8,
    "weak": -0.6, "negative": -0.6, "bearish": -0.9, "concern": -0.6, "risk": -0.5,
    "miss": -0.8, "disappointing": -0.7, "downgrade": -0.8, "sell": -0.7,
    "crash": -0.9, "plunge": -0.9, "tumble": -0.8, "slump": -0.7,
}

NEUTRAL_TERMS: Mapping[str, float] = {
    "stable": 0.1, "maintain": 0.1, "hold": 0.0, "flat": 0.0, "unchanged": 0.0,
    "sideways": 0.0, "consolidate": 0.1, "range": 0.0,
}

# Neutral terms may carry a faint lean, never a directional weight.
NEUTRAL_TOLERANCE = 0.1

SECTOR_KEYWORDS: Mapping[str, tuple[str, ...]] = {
    "Technology": ("software", "hardware", "ai", "cloud", "saas", "semiconductor", "tech"),
    "Healthcare": ("pharma", "biotech", "medical", "drug", "clinical", "fda", "health"),
    "Financial": ("bank", "credit", "loan", "fintech", "payment", "insurance", "mortgage"),
    "Energy": ("oil", "gas", "renewable", "solar", "wind", "energy", "petroleum"),
    "Consumer": ("retail", "consumer", "brand", "sales", "shopping", "ecommerce"),
    "Industrial": ("manufacturing", "construction", "infrastructure", "industrial", "machinery"),
}


class FinancialLexicon(Mapping[str, float]):
    """
    Hand-curated term -> weight table in [-1, 1].

    Built once from three disjoint partitions and read-only afterwards, so a
    single instance can be shared between threads.

    Raises:
        LexiconConfigError: overlapping terms or out-of-range/mis-signed weights
    """

    def __init__(
        self,
        positive: Mapping[str, float] = POSITIVE_TERMS,
        negative: Mapping[str, float] = NEGATIVE_TERMS,
        neutral: Mapping[str, float] = NEUTRAL_TERMS,
    ):
        merged: dict[str, float] = {}
        partitions = (("positive", positive), ("negative", negative), ("neutral", neutral))
        for partition, terms in partitions:
            for raw_term, raw_weight in terms.items():
                term = raw_term.strip().lower()
                weight = float(raw_weight)
                _validate(partition, term, weight)
                if term in merged:
                    raise LexiconConfigError(
                        f"Lexicon term {term!r} defined more than once "
                        f"(weights {merged[term]} and {weight})"
                    )
                merged[term] = weight

        self._weights: Mapping[str, float] = MappingProxyType(merged)
        logger.debug(
            "Lexicon built: positive=%s negative=%s neutral=%s",
            len(positive),
            len(negative),
            len(neutral),
        )

    def weight_of(self, term: str) -> Optional[float]:
        return self._weights.get(term.lower())

    def __getitem__(self, term: str) -> float:
        return self._weights[term.lower()]

    def __contains__(self, term: object) -> bool:
        return isinstance(term, str) and term.lower() in self._weights

    def __iter__(self) -> Iterator[str]:
        return iter(self._weights)

    def __len__(self) -> int:
        return len(self._weights)


def _validate(partition: str, term: str, weight: float) -> None:
    if not term:
        raise LexiconConfigError(f"Empty term in {partition} partition")
    if not -1.0 <= weight <= 1.0:
        raise LexiconConfigError(f"Weight out of range for {term!r}: {weight}")
    if partition == "positive" and weight <= 0.0:
        raise LexiconConfigError(f"Positive term {term!r} must have weight > 0, got {weight}")
    if partition == "negative" and weight >= 0.0:
        raise LexiconConfigError(f"Negative term {term!r} must have weight < 0, got {weight}")
    if partition == "neutral" and abs(weight) > NEUTRAL_TOLERANCE:
        raise LexiconConfigError(f"Neutral term {term!r} weight too large: {weight}")
