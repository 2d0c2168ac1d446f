"""Public operations, returning JSON-serializable shapes."""

from __future__ import annotations

import json
import logging
from typing import Any

from docwiki.core.cache import WORDCLOUD_CACHE_KEY, TTLCache, get_cache
from docwiki.core.containment import is_descendant
from docwiki.core.indexer import ArticleIndexer, filter_by_title
from docwiki.core.metadata import MetadataResolver
from docwiki.core.pages import ArticleContent, ContentKind, PageResolver
from docwiki.core.settings import Settings
from docwiki.core.wordcloud import compute_word_cloud
from docwiki.providers.content_types import ContentStore

logger = logging.getLogger(__name__)


class AccessDenied(Exception):
    """The requested file may not be served. Carries no detail on purpose."""


class WikiService:
    def __init__(self, store: ContentStore, settings: Settings, cache: TTLCache) -> None:
        self.store = store
        self.settings = settings
        self.cache = cache
        self.indexer = ArticleIndexer(store, settings.content_root_id, cache)
        self.metadata = MetadataResolver(store)
        self.pages = PageResolver(store, self.indexer, self.metadata)

    def get_index(self, query: str = "") -> list[dict[str, str]]:
        """Index entries, newest first, optionally filtered by a literal title match."""
        articles = self.indexer.get_index()
        if query:
            articles = filter_by_title(articles, query)
        return [
            {"slug": a.slug, "title": a.title, "updated": a.updated_at.isoformat()}
            for a in articles
        ]

    def page_to_dict(self, content: ArticleContent) -> dict[str, Any]:
        article = content.article
        meta = content.metadata
        result: dict[str, Any] = {
            "kind": "pdf" if content.kind is ContentKind.PDF else "md",
            "slug": article.slug,
            "title": article.title,
            "updated": article.updated_at.isoformat(),
        }
        if content.kind is ContentKind.PDF:
            result["pdfBase64"] = content.body
        else:
            result["md"] = content.body
        result.update(
            {
                "updatedISO": meta.updated_at.isoformat() if meta.updated_at else "",
                "updatedBy": meta.updated_by,
                "updatedByPhoto": meta.updated_by_avatar,
                "updatedBySource": meta.source if self.settings.debug_metadata else meta.tier.value,
            }
        )
        return result

    def get_page(self, slug: str) -> dict[str, Any]:
        content = self.pages.get_page(slug)
        if content is None:
            return {"notFound": True}
        return self.page_to_dict(content)

    def get_word_cloud(self) -> dict[str, Any]:
        """Word cloud over the (possibly cached) index, cached for the cache TTL."""
        cached = self.cache.get(WORDCLOUD_CACHE_KEY)
        if cached is not None:
            return json.loads(cached)

        result = compute_word_cloud(self.indexer.get_index(), self.pages.read_markdown)
        logger.info(f"Computed word cloud over {result['totalDocs']} documents")
        self.cache.put(WORDCLOUD_CACHE_KEY, json.dumps(result, ensure_ascii=False))
        return result

    def clear_cache(self) -> None:
        self.indexer.clear_cache()

    def get_image(self, file_id: str) -> tuple[bytes, str]:
        """Raw bytes and original content type of a file inside the content root.

        Raises:
            AccessDenied: For files outside the root and read failures alike,
                so callers cannot probe for existence.
        """
        if not is_descendant(self.store, file_id, self.settings.content_root_id):
            raise AccessDenied()
        try:
            return self.store.read_bytes(file_id)
        except Exception as e:
            logger.warning(f"Image read failed for {file_id}: {e}")
            raise AccessDenied() from e


# Module-level instance for convenience
_service: WikiService | None = None


def get_service() -> WikiService:
    """Get or create the module-level WikiService backed by Google Drive."""
    global _service
    if _service is None:
        from docwiki.providers.drive import DriveClient

        settings = Settings.from_env()
        store = DriveClient(settings.drive_access_token, advanced_metadata=settings.advanced_metadata)
        _service = WikiService(store, settings, get_cache(settings.cache_namespace))
    return _service
