from __future__ import annotations

from dataclasses import dataclass
from typing import Literal, NamedTuple, Optional, Union


SentimentLabel = Literal["bullish", "bearish", "neutral"]
Trend = Literal["up", "down", "sideways"]
ResultSource = Literal["model", "fallback"]


class ClassProbabilities(NamedTuple):
    """
    Per-class probabilities.

    Sums to ~1 as produced by a classifier. The engine never redistributes mass
    after adjusting confidence.
    """

    bullish: float
    bearish: float
    neutral: float

    def winner(self) -> SentimentLabel:
        # ties resolve bullish, then bearish, then neutral
        top = max(self.bullish, self.bearish, self.neutral)
        if self.bullish == top:
            return "bullish"
        if self.bearish == top:
            return "bearish"
        return "neutral"


@dataclass(frozen=True)
class TechnicalIndicators:
    volatility: float
    momentum: float
    trend: Trend


@dataclass(frozen=True)
class SentimentResult:
    """
    Engine output for one block of text.

    - confidence: winning-class confidence. On the model path it is scaled by
      the context multiplier and may exceed 1.0; callers clamp for display.
    - overall_score: (bullish - bearish) * confidence
    - sentence_scores: one lexicon score per sentence, in order
    - source: which classifier path produced the verdict
    """

    sentiment: SentimentLabel
    confidence: float
    probability: ClassProbabilities
    entities: tuple[str, ...]
    keywords: tuple[str, ...]
    sentence_scores: tuple[float, ...]
    overall_score: float
    technical_indicators: Optional[TechnicalIndicators] = None
    sectors: tuple[str, ...] = ()
    source: ResultSource = "model"


@dataclass(frozen=True)
class ServiceStats:
    is_initialized: bool
    accuracy: float
    model_complexity: str
    supported_languages: tuple[str, ...]


@dataclass(frozen=True)
class ClassifierOutput:
    """Verdict of one classifier path, before context adjustment."""

    sentiment: SentimentLabel
    confidence: float
    probabilities: ClassProbabilities


@dataclass(frozen=True)
class ClassifierError:
    """Path A could not produce a verdict; the engine falls back to rules."""

    reason: str
    exception: Optional[BaseException] = None


ClassifierOutcome = Union[ClassifierOutput, ClassifierError]
