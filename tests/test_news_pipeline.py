from __future__ import annotations

from finsentiment.engine import FinSentimentEngine
from finsentiment.models import Article
from finsentiment.news_pipeline import analyze_articles, build_text
from finsentiment.sentiment_model import BaseSentimentClassifier, SentimentModelConfig
from finsentiment.sentiment_types import ClassProbabilities


class _BrokenClassifier(BaseSentimentClassifier):
    def predict_proba(self, text: str) -> ClassProbabilities:
        raise RuntimeError("no model")


def _article(title: str, summary: str) -> Article:
    return Article(
        title=title,
        summary=summary,
        url="https://news.example.com/a/1",
        source="Example Wire",
        published_at="2026-01-28T13:28:48Z",
    )


def test_build_text_title_and_summary():
    assert build_text(_article("NVDA beats", "Revenue up 20%")) == "NVDA beats. Revenue up 20%"


def test_build_text_summary_missing():
    assert build_text(_article("NVDA beats", "  ")) == "NVDA beats"


def test_build_text_title_missing():
    assert build_text(_article("", "Revenue up 20%")) == "Revenue up 20%"


def test_article_from_upstream_dict():
    a = Article.from_dict(
        {
            "title": "Oil slumps",
            "summary": "Brent falls 3%",
            "url": "https://news.example.com/oil",
            "source": {"name": "Wire"},
            "publishedAt": "2026-03-01T08:00:00Z",
        }
    )
    assert a.source == "Wire"
    assert a.published_at == "2026-03-01T08:00:00Z"


def test_article_from_dict_tolerates_missing_fields():
    a = Article.from_dict({"title": None})
    assert a.title == ""
    assert a.summary == ""
    assert a.url is None


def test_analyze_articles_keeps_order_and_metadata():
    engine = FinSentimentEngine(
        SentimentModelConfig(model_version="test-v0"), classifier=_BrokenClassifier()
    )
    articles = [
        _article("Chipmaker posts strong growth", "Results beat estimates"),
        _article("Retailer warns", "Weak demand and falling margins"),
    ]

    analyzed = analyze_articles(articles, engine=engine)

    assert [a.title for a in analyzed] == [a.title for a in articles]
    assert [a.result.sentiment for a in analyzed] == ["bullish", "bearish"]
    assert all(a.model_version == "test-v0" for a in analyzed)
    assert all(a.analyzed_at.endswith("+00:00") for a in analyzed)
