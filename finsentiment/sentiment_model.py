from __future__ import annotations

import hashlib
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path
from typing import Optional, Sequence

import numpy as np
import torch
from torch import nn
from transformers import AutoModelForSequenceClassification, AutoTokenizer

from finsentiment.errors import ClassifierFailure
from finsentiment.sentiment_types import (
    ClassifierError,
    ClassifierOutcome,
    ClassifierOutput,
    ClassProbabilities,
    SentimentLabel,
)
from finsentiment.text_processing import canonicalize_terms, normalize, tokenize

logger = logging.getLogger(__name__)

# Network output order.
OUTPUT_ORDER: tuple[SentimentLabel, ...] = ("bearish", "neutral", "bullish")

CONTEXT_TERMS = ("earnings", "revenue", "profit", "eps", "guidance", "outlook")
CONTEXT_TERM_BOOST = 0.05
MAX_CONTEXT_MULTIPLIER = 1.2
REFERENCE_TEXT_LENGTH = 1000


@dataclass(frozen=True)
class SentimentModelConfig:
    backend: str = "bilstm"  # "bilstm" | "finbert"
    model_path: str = "ProsusAI/finbert"  # finbert backend only
    model_version: str = "finsent-bilstm-v1"
    vocab_size: int = 50000
    max_sequence_length: int = 512
    embedding_dim: int = 128
    lstm_units: tuple[int, int] = (64, 32)
    dense_units: tuple[int, int] = (256, 128)
    dropout: tuple[float, float] = (0.3, 0.2)
    seed: int = 42
    checkpoint_path: Optional[str] = None
    device: str = "cpu"  # "auto" | "cpu" | "cuda"
    accuracy: float = 0.925


def _select_device(device: str) -> torch.device:
    if device == "cpu":
        return torch.device("cpu")
    if device == "cuda":
        return torch.device("cuda")
    # auto
    return torch.device("cuda" if torch.cuda.is_available() else "cpu")


def context_multiplier(text: str) -> float:
    """
    Confidence multiplier from financial context.

    1.0 + 0.05 per high-signal term present, scaled by min(len / 1000, 1.2),
    capped at 1.2. Short texts are penalized even with strong wording.
    """
    lowered = text.lower()
    found = sum(1 for term in CONTEXT_TERMS if term in lowered)
    adjustment = 1.0 + found * CONTEXT_TERM_BOOST
    adjustment *= min(len(text) / REFERENCE_TEXT_LENGTH, MAX_CONTEXT_MULTIPLIER)
    return min(adjustment, MAX_CONTEXT_MULTIPLIER)


def token_id(token: str, vocab_size: int) -> int:
    # Stand-in for a real subword vocabulary: stable across processes.
    digest = hashlib.blake2b(token.encode("utf-8"), digest_size=8).digest()
    return int.from_bytes(digest, "big") % vocab_size


class FinSentimentNet(nn.Module):
    """
    Embedding -> BiLSTM (sequence) -> BiLSTM (final state) -> MLP -> 3 logits.

    Logit order follows OUTPUT_ORDER: [bearish, neutral, bullish].
    """

    def __init__(
        self,
        vocab_size: int,
        embedding_dim: int,
        lstm_units: tuple[int, int],
        dense_units: tuple[int, int],
        dropout: tuple[float, float],
        num_classes: int = 3,
    ):
        super().__init__()
        first_units, second_units = lstm_units
        self.embedding = nn.Embedding(vocab_size, embedding_dim, padding_idx=0)
        self.lstm_1 = nn.LSTM(embedding_dim, first_units, batch_first=True, bidirectional=True)
        self.lstm_2 = nn.LSTM(first_units * 2, second_units, batch_first=True, bidirectional=True)
        self.recurrent_dropout = nn.Dropout(0.2)
        self.head = nn.Sequential(
            nn.Linear(second_units * 2, dense_units[0]),
            nn.ReLU(),
            nn.Dropout(dropout[0]),
            nn.Linear(dense_units[0], dense_units[1]),
            nn.ReLU(),
            nn.Dropout(dropout[1]),
            nn.Linear(dense_units[1], num_classes),
        )

    def forward(self, ids: torch.Tensor) -> torch.Tensor:
        """
        ids: [B, L] token ids
        returns: [B, num_classes] logits
        """
        x = self.embedding(ids)  # [B, L, E]
        x, _ = self.lstm_1(x)  # [B, L, 2*H1]
        x = self.recurrent_dropout(x)
        _, (h_n, _) = self.lstm_2(x)  # h_n: [2, B, H2]
        x = torch.cat([h_n[0], h_n[1]], dim=-1)  # [B, 2*H2]
        return self.head(x)


class BaseSentimentClassifier(ABC):
    """
    Model-based classifier (Path A).

    Subclasses implement predict_proba and may raise anything; classify()
    converts failures into a ClassifierError so callers can pick the fallback.
    """

    model_complexity = "Unknown"

    @abstractmethod
    def predict_proba(self, text: str) -> ClassProbabilities:
        raise NotImplementedError

    def classify(self, text: str) -> ClassifierOutcome:
        try:
            probabilities = self.predict_proba(text)
        except Exception as e:
            logger.warning("Model inference failed, falling back to rules: %r", e)
            return ClassifierError(reason=str(e) or type(e).__name__, exception=e)

        sentiment = probabilities.winner()
        return ClassifierOutput(
            sentiment=sentiment,
            confidence=getattr(probabilities, sentiment),
            probabilities=probabilities,
        )


class SequenceClassifier(BaseSentimentClassifier):
    """
    Hash-vocabulary encoder + FinSentimentNet.

    - weights are initialized from cfg.seed, then optionally loaded from
      cfg.checkpoint_path
    - inference runs in eval mode without gradients, so concurrent calls only
      read the weights
    - fit() mutates weights; do not run it while serving

    Raises:
        ValueError: invalid sizes in cfg, or a checkpoint built for other sizes
        OSError: checkpoint file missing or unreadable
    """

    model_complexity = "Advanced (FinBERT-like BiLSTM)"

    def __init__(self, cfg: SentimentModelConfig):
        if cfg.vocab_size <= 1:
            raise ValueError("vocab_size must be > 1")
        if cfg.max_sequence_length <= 0:
            raise ValueError("max_sequence_length must be > 0")
        if cfg.embedding_dim <= 0 or min(cfg.lstm_units) <= 0 or min(cfg.dense_units) <= 0:
            raise ValueError("layer sizes must be > 0")

        self._cfg = cfg
        self._device = _select_device(cfg.device)

        with torch.random.fork_rng(devices=[]):
            torch.manual_seed(cfg.seed)
            net = FinSentimentNet(
                vocab_size=cfg.vocab_size,
                embedding_dim=cfg.embedding_dim,
                lstm_units=cfg.lstm_units,
                dense_units=cfg.dense_units,
                dropout=cfg.dropout,
            )
        self._net = net.to(self._device)

        if cfg.checkpoint_path:
            self._load_checkpoint(cfg.checkpoint_path)
        self._net.eval()

        logger.info(
            "Sequence classifier ready: version=%s device=%s vocab=%s max_length=%s checkpoint=%s",
            cfg.model_version,
            self._device.type,
            cfg.vocab_size,
            cfg.max_sequence_length,
            cfg.checkpoint_path or "-",
        )

    def encode(self, text: str) -> list[int]:
        """Token ids truncated or zero-padded to max_sequence_length."""
        tokens = tokenize(normalize(canonicalize_terms(text)))
        ids = [token_id(t, self._cfg.vocab_size) for t in tokens[: self._cfg.max_sequence_length]]
        return ids + [0] * (self._cfg.max_sequence_length - len(ids))

    def predict_proba(self, text: str) -> ClassProbabilities:
        ids = torch.tensor([self.encode(text)], dtype=torch.long, device=self._device)
        with torch.no_grad():
            logits = self._net(ids)  # (1, 3)
            probs = torch.softmax(logits, dim=-1).cpu().numpy()

        if probs.shape != (1, len(OUTPUT_ORDER)):
            raise ClassifierFailure(f"Unexpected model output shape: {probs.shape}")
        if not np.all(np.isfinite(probs)):
            raise ClassifierFailure("Model produced non-finite probabilities")

        by_label = dict(zip(OUTPUT_ORDER, (float(p) for p in probs[0])))
        return ClassProbabilities(**by_label)

    def fit(
        self,
        texts: Sequence[str],
        labels: Sequence[SentimentLabel],
        epochs: int = 3,
        learning_rate: float = 0.001,
        batch_size: int = 32,
    ) -> list[float]:
        """
        Train on labelled texts; returns the mean loss of each epoch.

        Raises:
            ValueError: empty or mismatched inputs, unknown labels, bad hyperparameters
        """
        if len(texts) != len(labels):
            raise ValueError("texts and labels must have the same length")
        if not texts:
            raise ValueError("at least one training example is required")
        if epochs <= 0 or batch_size <= 0:
            raise ValueError("epochs and batch_size must be > 0")
        unknown = sorted(set(labels) - set(OUTPUT_ORDER))
        if unknown:
            raise ValueError(f"Unknown labels: {unknown}")

        ids = torch.tensor([self.encode(t) for t in texts], dtype=torch.long)
        targets = torch.tensor([OUTPUT_ORDER.index(label) for label in labels], dtype=torch.long)
        optimizer = torch.optim.Adamax(self._net.parameters(), lr=learning_rate)
        loss_fn = nn.CrossEntropyLoss()
        generator = torch.Generator().manual_seed(self._cfg.seed)

        history: list[float] = []
        self._net.train()
        try:
            for epoch in range(epochs):
                order = torch.randperm(len(texts), generator=generator)
                total = 0.0
                for start in range(0, len(texts), batch_size):
                    idx = order[start : start + batch_size]
                    batch_ids = ids[idx].to(self._device)
                    batch_targets = targets[idx].to(self._device)

                    optimizer.zero_grad()
                    loss = loss_fn(self._net(batch_ids), batch_targets)
                    loss.backward()
                    optimizer.step()
                    total += float(loss.item()) * len(idx)

                history.append(total / len(texts))
                logger.info("Epoch %s/%s loss=%.4f", epoch + 1, epochs, history[-1])
        finally:
            self._net.eval()
        return history

    def save(self, path: str | Path) -> None:
        torch.save(
            {
                "model_version": self._cfg.model_version,
                "vocab_size": self._cfg.vocab_size,
                "max_sequence_length": self._cfg.max_sequence_length,
                "state_dict": self._net.state_dict(),
            },
            Path(path),
        )
        logger.info("Saved checkpoint: path=%s", path)

    def _load_checkpoint(self, path: str) -> None:
        logger.info("Loading checkpoint: path=%s", path)
        checkpoint = torch.load(Path(path), map_location=self._device)
        if checkpoint.get("vocab_size") != self._cfg.vocab_size:
            raise ValueError(
                f"Checkpoint vocab_size={checkpoint.get('vocab_size')} "
                f"does not match config vocab_size={self._cfg.vocab_size}"
            )
        self._net.load_state_dict(checkpoint["state_dict"])


# Hugging Face labels mapped onto engine labels.
_LABEL_ALIASES: dict[str, SentimentLabel] = {
    "positive": "bullish",
    "bullish": "bullish",
    "negative": "bearish",
    "bearish": "bearish",
    "neutral": "neutral",
}


@lru_cache(maxsize=1)
def _load_model_and_tokenizer(model_path: str):
    """
    Load once per process. Cached by model_path.

    Raises:
        OSError: if model files are missing or path is invalid.
    """
    logger.info("Loading pretrained sentiment model: path=%s", model_path)
    tokenizer = AutoTokenizer.from_pretrained(model_path)
    model = AutoModelForSequenceClassification.from_pretrained(model_path)
    return model, tokenizer


class PretrainedClassifier(BaseSentimentClassifier):
    """
    Transformer sequence classifier (e.g. FinBERT) with its own tokenizer.

    Raises:
        ClassifierFailure: if the model's labels cannot be mapped to bullish/bearish/neutral
        OSError: if model files are missing
    """

    model_complexity = "Pretrained transformer (FinBERT)"

    def __init__(self, cfg: SentimentModelConfig):
        self._cfg = cfg
        self._device = _select_device(cfg.device)

        model, tokenizer = _load_model_and_tokenizer(cfg.model_path)
        self._model = model.to(self._device)
        self._model.eval()
        self._tokenizer = tokenizer
        self._label_index = _map_labels(self._model.config.id2label)

        logger.info(
            "Pretrained classifier ready: version=%s device=%s labels=%s",
            cfg.model_version,
            self._device.type,
            self._label_index,
        )

    def predict_proba(self, text: str) -> ClassProbabilities:
        enc = self._tokenizer(
            text,
            truncation=True,
            max_length=self._cfg.max_sequence_length,
            return_tensors="pt",
        )
        enc = {k: v.to(self._device) for k, v in enc.items()}

        with torch.no_grad():
            logits = self._model(**enc).logits  # (1, C)
            probs = torch.softmax(logits, dim=-1).cpu().numpy()[0]

        return ClassProbabilities(
            **{label: float(probs[index]) for label, index in self._label_index.items()}
        )


def _map_labels(id2label: dict[int, str]) -> dict[SentimentLabel, int]:
    mapped: dict[SentimentLabel, int] = {}
    for index, name in id2label.items():
        label = _LABEL_ALIASES.get(str(name).strip().lower())
        if label is not None:
            mapped[label] = int(index)
    if set(mapped) != set(OUTPUT_ORDER):
        raise ClassifierFailure(f"Cannot map model labels to bullish/bearish/neutral: {id2label}")
    return mapped


def build_classifier(cfg: SentimentModelConfig) -> BaseSentimentClassifier:
    """
    Raises:
        ValueError: unknown backend
    """
    if cfg.backend == "bilstm":
        return SequenceClassifier(cfg)
    if cfg.backend == "finbert":
        return PretrainedClassifier(cfg)
    raise ValueError(f"Unknown sentiment backend: {cfg.backend!r}")
