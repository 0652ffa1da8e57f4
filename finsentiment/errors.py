from __future__ import annotations


class FinSentimentError(Exception):
    """Base class for engine errors."""


class LexiconConfigError(FinSentimentError):
    """The lexicon tables are inconsistent (overlapping terms, bad weights)."""


class EngineInitializationError(FinSentimentError):
    """
    The engine could not be made ready (backend unavailable, model construction
    or checkpoint loading failed). No analysis is accepted until a later
    initialize() succeeds.
    """


class ClassifierFailure(FinSentimentError):
    """Raised inside a model backend; converted into a ClassifierError outcome."""
