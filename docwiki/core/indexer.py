"""Article index: eligible files in the content root, newest first."""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any

from docwiki.core.cache import INDEX_CACHE_KEY, WORDCLOUD_CACHE_KEY, TTLCache
from docwiki.core.slugs import is_article_name, prettify, slugify, strip_article_suffix
from docwiki.providers.content_types import ContentStore, FileEntry

logger = logging.getLogger(__name__)

_EPOCH = datetime.fromtimestamp(0, tz=timezone.utc)


@dataclass(frozen=True)
class Article:
    """One eligible content file exposed under a slug."""

    id: str
    slug: str
    title: str
    updated_at: datetime

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "slug": self.slug,
            "title": self.title,
            "updated": self.updated_at.isoformat(),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Article:
        return cls(
            id=data["id"],
            slug=data["slug"],
            title=data["title"],
            updated_at=datetime.fromisoformat(data["updated"]),
        )

    @classmethod
    def from_file(cls, entry: FileEntry) -> Article:
        stem = strip_article_suffix(entry.name)
        return cls(
            id=entry.id,
            slug=slugify(stem),
            title=prettify(stem),
            updated_at=entry.modified_time or _EPOCH,
        )


def serialize_index(articles: list[Article]) -> str:
    return json.dumps([a.to_dict() for a in articles], ensure_ascii=False)


def deserialize_index(value: str) -> list[Article]:
    return [Article.from_dict(item) for item in json.loads(value)]


def filter_by_title(articles: list[Article], query: str) -> list[Article]:
    """Literal, case-insensitive substring match on titles."""
    needle = query.strip().casefold()
    if not needle:
        return list(articles)
    return [a for a in articles if needle in a.title.casefold()]


class ArticleIndexer:
    """Enumerates *.md files in the content root and caches the sorted index."""

    def __init__(self, store: ContentStore, root_id: str, cache: TTLCache) -> None:
        self.store = store
        self.root_id = root_id
        self.cache = cache

    def list_articles(self) -> list[Article]:
        """Fresh, uncached enumeration in listing order."""
        articles = [
            Article.from_file(entry)
            for entry in self.store.list_files(self.root_id)
            if is_article_name(entry.name)
        ]
        seen: set[str] = set()
        for article in articles:
            # Colliding slugs are not resolved; lookups take the last one listed
            if article.slug in seen:
                logger.warning(f"Duplicate slug '{article.slug}' (file {article.id})")
            seen.add(article.slug)
        return articles

    def find(self, slug: str) -> Article | None:
        """Look up a slug against a fresh listing."""
        by_slug = {article.slug: article for article in self.list_articles()}
        return by_slug.get(slug)

    def get_index(self) -> list[Article]:
        """Articles sorted by updated_at, newest first. Cached for the cache TTL."""
        cached = self.cache.get(INDEX_CACHE_KEY)
        if cached is not None:
            return deserialize_index(cached)

        articles = sorted(self.list_articles(), key=lambda a: a.updated_at, reverse=True)
        logger.info(f"Rebuilt article index: {len(articles)} articles")
        self.cache.put(INDEX_CACHE_KEY, serialize_index(articles))
        return articles

    def clear_cache(self) -> None:
        """Evict the index and word-cloud entries regardless of TTL."""
        self.cache.delete(INDEX_CACHE_KEY, WORDCLOUD_CACHE_KEY)
