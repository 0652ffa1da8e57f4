from __future__ import annotations

import argparse
import json
import logging
import sys
from typing import Any

from finsentiment.engine import FinSentimentEngine
from finsentiment.models import Article
from finsentiment.news_pipeline import analyze_articles
from finsentiment.sentiment_types import SentimentResult
from finsentiment.settings import load_settings

logger = logging.getLogger(__name__)


def result_to_dict(res: SentimentResult) -> dict[str, Any]:
    indicators = res.technical_indicators
    return {
        "sentiment": res.sentiment,
        "confidence": res.confidence,
        "probability": res.probability._asdict(),
        "entities": list(res.entities),
        "keywords": list(res.keywords),
        "sectors": list(res.sectors),
        "sentence_scores": list(res.sentence_scores),
        "overall_score": res.overall_score,
        "technical_indicators": (
            {
                "volatility": indicators.volatility,
                "momentum": indicators.momentum,
                "trend": indicators.trend,
            }
            if indicators
            else None
        ),
        "source": res.source,
    }


def _read_articles(path: str) -> list[Article]:
    if path == "-":
        raw = json.load(sys.stdin)
    else:
        with open(path, encoding="utf-8") as f:
            raw = json.load(f)
    if isinstance(raw, dict):
        raw = raw.get("articles", [])
    return [Article.from_dict(item) for item in raw]


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(description="Score financial text or news articles.")
    parser.add_argument(
        "articles",
        nargs="?",
        default="-",
        help="JSON file with a list of articles (or {'articles': [...]}); '-' reads stdin",
    )
    parser.add_argument("--text", default=None, help="Analyze a single text instead of articles")
    args = parser.parse_args(argv)

    s = load_settings()
    logging.basicConfig(
        level=s.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s - %(message)s",
    )

    engine = FinSentimentEngine(s.to_model_config())
    engine.initialize()

    if args.text is not None:
        print(json.dumps(result_to_dict(engine.analyze_sentiment(args.text)), ensure_ascii=False, indent=2))
        return

    articles = _read_articles(args.articles)
    logger.info("Loaded articles: %s", len(articles))
    if not articles:
        print("[]")
        return

    analyzed = analyze_articles(articles, engine=engine)
    logger.info("Analyzed articles: %s", len(analyzed))

    output = [
        {
            "title": a.title,
            "url": a.url,
            "source": a.source,
            "published_at": a.published_at,
            "analyzed_at": a.analyzed_at,
            "model_version": a.model_version,
            **result_to_dict(a.result),
        }
        for a in analyzed
    ]
    print(json.dumps(output, ensure_ascii=False, indent=2))


if __name__ == "__main__":
    main()
