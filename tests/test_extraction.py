from __future__ import annotations

import pytest

from finsentiment.extraction import extract_entities, extract_keywords, extract_sectors
from finsentiment.lexicon import FinancialLexicon
from finsentiment.scoring import score_sentence, score_sentences


@pytest.fixture(scope="module")
def lexicon() -> FinancialLexicon:
    return FinancialLexicon()


def test_extract_entities_ticker_money_and_percentage():
    entities = extract_entities("AAPL rose to $185.45, up 1.28% today")
    assert entities == ("AAPL", "$185.45", "1.28%")


def test_extract_entities_thousands_separator_and_dedup():
    entities = extract_entities("MSFT paid $1,250,000 and MSFT gained 5% then 5% again")
    assert entities == ("MSFT", "$1,250,000", "5%")


def test_extract_entities_empty():
    assert extract_entities("") == ()


def test_extract_keywords_in_first_appearance_order(lexicon):
    keywords = extract_keywords("Strong growth, strong RALLY despite risk", lexicon)
    assert keywords == ("strong", "growth", "rally", "risk")


def test_extract_keywords_does_not_stem(lexicon):
    assert extract_keywords("profits rising", lexicon) == ()


def test_extract_sectors_in_table_order():
    assert extract_sectors("Bank loan demand lifts cloud software names") == ("Technology", "Financial")
    assert extract_sectors("nothing here") == ()


def test_score_sentence_averages_matched_weights(lexicon):
    assert score_sentence("Strong growth in the quarter", lexicon) == pytest.approx(0.75)


def test_score_sentence_without_matches_is_zero(lexicon):
    assert score_sentence("The board met on Tuesday", lexicon) == 0.0


def test_score_sentences_one_score_per_sentence(lexicon):
    assert score_sentences("Strong growth. Weak demand.", lexicon) == pytest.approx([0.75, -0.6])
