from __future__ import annotations

import re
from collections.abc import Iterable, Mapping

from finsentiment.lexicon import SECTOR_KEYWORDS, FinancialLexicon
from finsentiment.text_processing import word_tokens

# Candidate tickers: any uppercase run of 1-5 letters, so common abbreviations
# ("CEO", "US") are picked up as well.
_TICKER_RE = re.compile(r"\b[A-Z]{1,5}\b")
_MONEY_RE = re.compile(r"\$\d+(?:,\d{3})*(?:\.\d+)?")
_PERCENT_RE = re.compile(r"\d+(?:\.\d+)?%")


def extract_entities(text: str) -> tuple[str, ...]:
    """
    Tickers, money amounts and percentages from the original (unmodified) text.

    Deduplicated, ordered by first appearance.
    """
    found: list[tuple[int, str]] = []
    for pattern in (_TICKER_RE, _MONEY_RE, _PERCENT_RE):
        found.extend((m.start(), m.group(0)) for m in pattern.finditer(text))
    found.sort(key=lambda item: item[0])
    return _unique(value for _, value in found)


def extract_keywords(text: str, lexicon: FinancialLexicon) -> tuple[str, ...]:
    return _unique(w for w in word_tokens(text.lower()) if w in lexicon)


def extract_sectors(
    text: str,
    sector_keywords: Mapping[str, tuple[str, ...]] = SECTOR_KEYWORDS,
) -> tuple[str, ...]:
    """Sectors whose keywords occur as words in the text, in table order."""
    words = set(word_tokens(text.lower()))
    return tuple(
        sector for sector, keywords in sector_keywords.items() if words.intersection(keywords)
    )


def _unique(items: Iterable[str]) -> tuple[str, ...]:
    return tuple(dict.fromkeys(items))
