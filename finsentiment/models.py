from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping, Optional


@dataclass(frozen=True)
class Article:
    """News article as delivered by the upstream news service."""

    title: str
    summary: str
    url: Optional[str] = None
    source: Optional[str] = None
    published_at: Optional[str] = None

    @staticmethod
    def from_dict(raw: Mapping[str, Any]) -> "Article":
        """
        Accepts the upstream shape {title, summary, url, source, publishedAt}.

        `source` may be a plain name or an object with a `name` key.
        """
        source = raw.get("source")
        if isinstance(source, Mapping):
            source = source.get("name")
        return Article(
            title=str(raw.get("title") or ""),
            summary=str(raw.get("summary") or ""),
            url=raw.get("url") or None,
            source=str(source) if source else None,
            published_at=raw.get("publishedAt") or raw.get("published_at") or None,
        )
