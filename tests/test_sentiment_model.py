from __future__ import annotations

import math
from dataclasses import replace

import pytest

from finsentiment.sentiment_model import (
    MAX_CONTEXT_MULTIPLIER,
    SentimentModelConfig,
    SequenceClassifier,
    build_classifier,
    context_multiplier,
    token_id,
)
from finsentiment.sentiment_types import ClassifierError, ClassifierOutput

TINY = SentimentModelConfig(
    vocab_size=997,
    max_sequence_length=24,
    embedding_dim=8,
    lstm_units=(6, 4),
    dense_units=(16, 8),
    seed=7,
)


@pytest.fixture(scope="module")
def classifier() -> SequenceClassifier:
    return SequenceClassifier(TINY)


def test_token_id_is_stable_and_in_range():
    assert token_id("profit", 997) == token_id("profit", 997)
    assert 0 <= token_id("profit", 997) < 997


def test_encode_pads_short_text(classifier):
    ids = classifier.encode("Revenue up")
    assert len(ids) == TINY.max_sequence_length
    assert ids[2:] == [0] * (TINY.max_sequence_length - 2)


def test_encode_truncates_long_text(classifier):
    ids = classifier.encode("growth " * 500)
    assert ids == [ids[0]] * TINY.max_sequence_length


def test_predict_proba_is_a_distribution(classifier):
    probs = classifier.predict_proba("Strong earnings beat expectations.")
    assert all(0.0 <= p <= 1.0 for p in probs)
    assert sum(probs) == pytest.approx(1.0, abs=1e-5)


def test_same_seed_gives_same_predictions(classifier):
    other = SequenceClassifier(TINY)
    text = "Shares slump after guidance cut."
    assert other.predict_proba(text) == pytest.approx(classifier.predict_proba(text))


def test_classify_returns_argmax_with_base_confidence(classifier):
    out = classifier.classify("Outlook raised on strong demand.")
    assert isinstance(out, ClassifierOutput)
    assert out.confidence == max(out.probabilities)
    assert getattr(out.probabilities, out.sentiment) == out.confidence


def test_classify_turns_exceptions_into_errors():
    class _Exploding(SequenceClassifier):
        def predict_proba(self, text):
            raise RuntimeError("tensor shape mismatch")

    out = _Exploding(TINY).classify("anything")
    assert isinstance(out, ClassifierError)
    assert "shape mismatch" in out.reason
    assert isinstance(out.exception, RuntimeError)


def test_context_multiplier_penalizes_short_text():
    # 1 term (+0.05) scaled by 13/1000
    assert context_multiplier("earnings beat") == pytest.approx(1.05 * 13 / 1000)


def test_context_multiplier_counts_each_term_once():
    text = "earnings earnings guidance " + "x" * 973
    assert len(text) == 1000
    assert context_multiplier(text) == pytest.approx(1.10)


def test_context_multiplier_is_capped():
    text = "earnings revenue profit eps guidance outlook " + "y" * 2000
    assert context_multiplier(text) == MAX_CONTEXT_MULTIPLIER


def test_fit_reduces_loss():
    clf = SequenceClassifier(TINY)
    texts = [
        "Strong growth and record profit",
        "Shares rally on upgrade",
        "Losses widen as sales plunge",
        "Downgrade after weak quarter",
        "Board meets on Tuesday",
        "Company holds annual meeting",
    ]
    labels = ["bullish", "bullish", "bearish", "bearish", "neutral", "neutral"]
    history = clf.fit(texts, labels, epochs=40, learning_rate=0.01, batch_size=6)
    assert len(history) == 40
    assert all(math.isfinite(h) for h in history)
    assert history[-1] < history[0]


def test_fit_rejects_unknown_labels():
    clf = SequenceClassifier(TINY)
    with pytest.raises(ValueError):
        clf.fit(["text"], ["positive"])


def test_checkpoint_round_trip(tmp_path, classifier):
    path = tmp_path / "model.pt"
    classifier.save(path)

    restored = SequenceClassifier(
        replace(TINY, seed=99, checkpoint_path=str(path))
    )
    text = "Revenue guidance lowered."
    assert restored.predict_proba(text) == pytest.approx(classifier.predict_proba(text))


def test_checkpoint_with_other_vocab_rejected(tmp_path, classifier):
    path = tmp_path / "model.pt"
    classifier.save(path)
    with pytest.raises(ValueError):
        SequenceClassifier(
            replace(TINY, vocab_size=500, checkpoint_path=str(path))
        )


def test_invalid_sizes_rejected():
    with pytest.raises(ValueError):
        SequenceClassifier(SentimentModelConfig(max_sequence_length=0))


def test_build_classifier_unknown_backend():
    with pytest.raises(ValueError):
        build_classifier(SentimentModelConfig(backend="svm"))
