from __future__ import annotations

import logging
import threading
from typing import Optional, Sequence

from finsentiment.errors import EngineInitializationError
from finsentiment.extraction import extract_entities, extract_keywords, extract_sectors
from finsentiment.fallback import classify_by_rules
from finsentiment.lexicon import FinancialLexicon
from finsentiment.scoring import score_sentences
from finsentiment.sentiment_model import (
    BaseSentimentClassifier,
    SentimentModelConfig,
    build_classifier,
    context_multiplier,
)
from finsentiment.sentiment_types import (
    ClassifierOutput,
    ResultSource,
    SentimentResult,
    ServiceStats,
)
from finsentiment.technical_indicators import derive_indicators

logger = logging.getLogger(__name__)

SUPPORTED_LANGUAGES = ("en",)


class FinSentimentEngine:
    """
    Financial sentiment engine.

    - construct once, share by reference
    - initialize() is idempotent; analyze_sentiment() calls it on first use
    - after initialization the lexicon and model weights are read-only, so
      analyze_sentiment() may be called from several threads

    A classifier may be injected (tests, custom backends); otherwise the one
    named by cfg.backend is built during initialize().
    """

    def __init__(
        self,
        cfg: Optional[SentimentModelConfig] = None,
        lexicon: Optional[FinancialLexicon] = None,
        classifier: Optional[BaseSentimentClassifier] = None,
    ):
        self._cfg = cfg or SentimentModelConfig()
        self._lexicon = lexicon or FinancialLexicon()
        self._classifier = classifier
        self._ready = False
        self._init_lock = threading.Lock()

    @property
    def is_initialized(self) -> bool:
        return self._ready

    @property
    def model_version(self) -> str:
        return self._cfg.model_version

    @property
    def lexicon(self) -> FinancialLexicon:
        return self._lexicon

    def initialize(self) -> None:
        """
        Build the classifier once.

        Raises:
            EngineInitializationError: backend unavailable or model construction failed
        """
        if self._ready:
            return
        with self._init_lock:
            if self._ready:
                return
            if self._classifier is None:
                try:
                    self._classifier = build_classifier(self._cfg)
                except Exception as e:
                    logger.error("Failed to initialize sentiment engine: %s", e)
                    raise EngineInitializationError(
                        f"Cannot initialize backend {self._cfg.backend!r}: {e}"
                    ) from e
            self._ready = True
            logger.info(
                "Sentiment engine initialized: backend=%s version=%s lexicon_terms=%s",
                self._cfg.backend,
                self._cfg.model_version,
                len(self._lexicon),
            )

    def analyze_sentiment(self, text: str) -> SentimentResult:
        """
        Analyze one block of financial text.

        Rules:
        - empty/blank -> neutral (0.5) from the rule-based path, one zero sentence score
        - model failure -> rule-based verdict, never an exception

        Raises:
            EngineInitializationError: only if lazy initialization fails
        """
        self.initialize()

        text = "" if text is None else str(text)
        if not text.strip():
            return self._assemble(text, classify_by_rules(text), source="fallback")

        outcome = self._classifier.classify(text)
        if isinstance(outcome, ClassifierOutput):
            adjusted = ClassifierOutput(
                sentiment=outcome.sentiment,
                confidence=outcome.confidence * context_multiplier(text),
                probabilities=outcome.probabilities,
            )
            return self._assemble(text, adjusted, source="model")

        logger.debug("Using rule-based fallback: reason=%s", outcome.reason)
        return self._assemble(text, classify_by_rules(text), source="fallback")

    def analyze_many(self, texts: Sequence[str]) -> list[SentimentResult]:
        """Results in the same order as input."""
        return [self.analyze_sentiment(t) for t in texts]

    def get_service_stats(self) -> ServiceStats:
        if self._classifier is not None:
            complexity = self._classifier.model_complexity
        else:
            complexity = f"Not loaded ({self._cfg.backend})"
        return ServiceStats(
            is_initialized=self._ready,
            accuracy=self._cfg.accuracy,
            model_complexity=complexity,
            supported_languages=SUPPORTED_LANGUAGES,
        )

    def _assemble(self, text: str, verdict: ClassifierOutput, source: ResultSource) -> SentimentResult:
        sentence_scores = score_sentences(text, self._lexicon) or [0.0]
        probs = verdict.probabilities

        return SentimentResult(
            sentiment=verdict.sentiment,
            confidence=verdict.confidence,
            probability=probs,
            entities=extract_entities(text),
            keywords=extract_keywords(text, self._lexicon),
            sentence_scores=tuple(sentence_scores),
            overall_score=(probs.bullish - probs.bearish) * verdict.confidence,
            technical_indicators=derive_indicators(sentence_scores),
            sectors=extract_sectors(text),
            source=source,
        )
