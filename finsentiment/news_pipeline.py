from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Optional, Sequence

from finsentiment.engine import FinSentimentEngine
from finsentiment.models import Article
from finsentiment.sentiment_types import SentimentResult

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AnalyzedArticle:
    """Article plus the engine verdict for its headline and summary."""

    title: str
    url: Optional[str]
    source: Optional[str]
    published_at: Optional[str]
    analyzed_at: str  # ISO8601 UTC

    result: SentimentResult
    model_version: str


def build_text(article: Article) -> str:
    """
    Select text used for inference.

    Rules:
    - title + ". " + summary when both exist
    - otherwise whichever one is present
    """
    title = (article.title or "").strip()
    summary = (article.summary or "").strip()
    if not summary:
        return title
    if not title:
        return summary
    return f"{title}. {summary}"


def analyze_articles(
        articles: Sequence[Article],
        engine: FinSentimentEngine,
) -> list[AnalyzedArticle]:
    """
    Analyze a batch of articles.

    - Does not mutate input articles
    - Keeps ordering
    """
    texts = [build_text(a) for a in articles]
    results = engine.analyze_many(texts)

    if len(results) != len(articles):
        raise RuntimeError("Sentiment results size mismatch")

    analyzed_at = datetime.now(timezone.utc).isoformat()
    fallback_count = sum(1 for r in results if r.source == "fallback")
    if fallback_count:
        logger.info("Rule-based fallback used for %s/%s articles", fallback_count, len(results))

    return [
        AnalyzedArticle(
            title=article.title,
            url=article.url,
            source=article.source,
            published_at=article.published_at,
            analyzed_at=analyzed_at,
            result=res,
            model_version=engine.model_version,
        )
        for article, res in zip(articles, results)
    ]
