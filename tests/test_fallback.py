from __future__ import annotations

import pytest

from finsentiment.fallback import classify_by_rules


def test_bullish_text():
    out = classify_by_rules("Strong growth and rising profits beat expectations")
    assert out.sentiment == "bullish"
    assert out.confidence == pytest.approx(0.9)
    assert out.probabilities.bullish == pytest.approx(0.9)
    assert out.probabilities.bearish == pytest.approx(0.05)
    assert out.probabilities.neutral == pytest.approx(0.05)


def test_bearish_text():
    out = classify_by_rules("Earnings decline sharply amid weak demand and falling sales")
    assert out.sentiment == "bearish"
    assert out.confidence >= 0.7


def test_mixed_text_uses_count_difference():
    out = classify_by_rules("growth and rise offset by weak orders")
    assert out.sentiment == "bullish"
    assert out.confidence == pytest.approx(0.5 + 1 / 3)


def test_no_signal_is_neutral_half():
    out = classify_by_rules("The company held its annual meeting")
    assert out.sentiment == "neutral"
    assert out.confidence == 0.5
    assert out.probabilities.bullish == pytest.approx(0.25)


def test_tie_is_neutral_point_six():
    out = classify_by_rules("growth and decline")
    assert out.sentiment == "neutral"
    assert out.confidence == 0.6
    assert out.probabilities == pytest.approx((0.2, 0.2, 0.6))


def test_rules_are_deterministic():
    text = "Weak guidance raises concern but revenue beat"
    assert classify_by_rules(text) == classify_by_rules(text)


def test_inflected_words_are_not_counted():
    out = classify_by_rules("Operating costs rising")
    assert out.sentiment == "neutral"
    assert out.confidence == 0.5
