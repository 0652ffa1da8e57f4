from __future__ import annotations

from finsentiment.sentiment_types import ClassifierOutput, ClassProbabilities, SentimentLabel
from finsentiment.text_processing import word_tokens

POSITIVE_WORDS = frozenset(
    {"growth", "increase", "rise", "beat", "exceed", "strong", "positive", "bullish"}
)
NEGATIVE_WORDS = frozenset(
    {"decline", "decrease", "fall", "miss", "weak", "negative", "bearish", "concern"}
)

NO_SIGNAL_CONFIDENCE = 0.5
TIED_CONFIDENCE = 0.6
MAX_CONFIDENCE = 0.9


def classify_by_rules(text: str) -> ClassifierOutput:
    """
    Deterministic word-count classifier, always available.

    Rules:
    - no sentiment words -> neutral, 0.5
    - more positive -> bullish, min(0.9, 0.5 + (pos - neg) / total)
    - more negative -> bearish, min(0.9, 0.5 + (neg - pos) / total)
    - tie -> neutral, 0.6
    The winner gets `confidence`, the other two split the rest evenly.
    """
    words = word_tokens(text.lower())
    positive = sum(1 for w in words if w in POSITIVE_WORDS)
    negative = sum(1 for w in words if w in NEGATIVE_WORDS)
    total = positive + negative

    sentiment: SentimentLabel
    if total == 0:
        sentiment, confidence = "neutral", NO_SIGNAL_CONFIDENCE
    elif positive > negative:
        sentiment = "bullish"
        confidence = min(MAX_CONFIDENCE, 0.5 + (positive - negative) / total)
    elif negative > positive:
        sentiment = "bearish"
        confidence = min(MAX_CONFIDENCE, 0.5 + (negative - positive) / total)
    else:
        sentiment, confidence = "neutral", TIED_CONFIDENCE

    rest = (1.0 - confidence) / 2
    probabilities = ClassProbabilities(
        bullish=confidence if sentiment == "bullish" else rest,
        bearish=confidence if sentiment == "bearish" else rest,
        neutral=confidence if sentiment == "neutral" else rest,
    )
    return ClassifierOutput(sentiment=sentiment, confidence=confidence, probabilities=probabilities)
