from __future__ import annotations

from finsentiment.lexicon import FinancialLexicon
from finsentiment.text_processing import split_sentences, word_tokens


def score_sentence(sentence: str, lexicon: FinancialLexicon) -> float:
    """Mean lexicon weight of the sentence's words; 0.0 when none match."""
    weights = [
        weight
        for weight in (lexicon.weight_of(w) for w in word_tokens(sentence.lower()))
        if weight is not None
    ]
    if not weights:
        return 0.0
    return sum(weights) / len(weights)


def score_sentences(text: str, lexicon: FinancialLexicon) -> list[float]:
    return [score_sentence(s, lexicon) for s in split_sentences(text)]
