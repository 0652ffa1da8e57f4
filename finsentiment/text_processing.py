"""
Text normalization and tokenization for financial text.

Two independent transforms feed the encoder:
- normalize(): masks prices, percentages, quarters and short alphabetic runs
- canonicalize_terms(): folds domain synonyms into canonical markers

Entity extraction never sees either of them; it works on the raw text.
"""

from __future__ import annotations

import re

from nltk.stem.porter import PorterStemmer
from nltk.tokenize import PunktSentenceTokenizer, RegexpTokenizer
from nltk.tokenize.punkt import PunktParameters

PRICE_TOKEN = "PRICE_TOKEN"
PERCENTAGE_TOKEN = "PERCENTAGE_TOKEN"
QUARTER_TOKEN = "QUARTER_TOKEN"
TICKER_TOKEN = "TICKER_TOKEN"

REVENUE_TERM = "REVENUE_TERM"
PROFIT_TERM = "PROFIT_TERM"
POSITIVE_TERM = "POSITIVE_TERM"
NEGATIVE_TERM = "NEGATIVE_TERM"

# Applied in order. The ticker pattern also swallows ordinary short words;
# masking favours recall over precision here.
_PLACEHOLDER_PATTERNS: tuple[tuple[re.Pattern[str], str], ...] = (
    (re.compile(r"\$(\d+\.?\d*[kmb]?)"), PRICE_TOKEN),
    (re.compile(r"(\d+\.?\d*)%"), PERCENTAGE_TOKEN),
    (re.compile(r"q[1-4]"), QUARTER_TOKEN),
    (re.compile(r"\b[a-z]{1,5}\b"), TICKER_TOKEN),
)

_SYNONYM_PATTERNS: tuple[tuple[re.Pattern[str], str], ...] = (
    (re.compile(r"\b(revenue|sales|income)\b"), REVENUE_TERM),
    (re.compile(r"\b(profit|earnings|eps)\b"), PROFIT_TERM),
    (re.compile(r"\b(growth|increase|rise)\b"), POSITIVE_TERM),
    (re.compile(r"\b(decline|decrease|fall|drop)\b"), NEGATIVE_TERM),
)

_word_tokenizer = RegexpTokenizer(r"\w+")
# Abbreviations common in financial news; Punkt stores them lower-cased
# without the final period.
SENTENCE_ABBREVIATIONS = frozenset({"u.s", "u.k", "inc", "corp", "co", "ltd", "plc", "llc", "vs"})

_punkt_params = PunktParameters()
_punkt_params.abbrev_types = set(SENTENCE_ABBREVIATIONS)
_sentence_tokenizer = PunktSentenceTokenizer(_punkt_params)
_stemmer = PorterStemmer()


def normalize(text: str) -> str:
    """Lower-case and replace financial surface patterns with placeholders."""
    processed = text.lower()
    for pattern, placeholder in _PLACEHOLDER_PATTERNS:
        processed = pattern.sub(placeholder, processed)
    return processed


def canonicalize_terms(text: str) -> str:
    """Lower-case and replace revenue/profit/growth/decline synonyms with markers."""
    processed = text.lower()
    for pattern, marker in _SYNONYM_PATTERNS:
        processed = pattern.sub(marker, processed)
    return processed


def word_tokens(text: str) -> list[str]:
    return _word_tokenizer.tokenize(text)


def tokenize(text: str) -> list[str]:
    """Word tokens reduced with the Porter stemmer."""
    return [_stemmer.stem(token) for token in word_tokens(text)]


def split_sentences(text: str) -> list[str]:
    """
    Split on terminal punctuation.

    Rules:
    - empty/blank -> []
    - no terminal punctuation -> [trimmed text]
    - known abbreviations (U.S., Inc., Corp.) do not end a sentence; other
      abbreviations still split
    """
    stripped = text.strip()
    if not stripped:
        return []
    sentences = [s.strip() for s in _sentence_tokenizer.tokenize(stripped)]
    sentences = [s for s in sentences if s]
    return sentences or [stripped]
