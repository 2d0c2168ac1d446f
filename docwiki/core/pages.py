"""Page resolution: slug -> article content in one of three kinds."""

from __future__ import annotations

import base64
from dataclasses import dataclass
from enum import Enum

from docwiki.core.converter import to_markdown
from docwiki.core.indexer import Article, ArticleIndexer
from docwiki.core.metadata import Metadata, MetadataResolver
from docwiki.providers.content_types import PDF_MIME, ContentStore

PDF_SIGNATURE = b"%PDF"


class ContentKind(str, Enum):
    MARKDOWN = "markdown"
    PDF = "pdf"
    RICH_DOCUMENT = "rich_document"


@dataclass(frozen=True)
class ArticleContent:
    article: Article
    kind: ContentKind
    body: str  # markdown text, or base64 of the PDF bytes
    metadata: Metadata


def is_pdf(data: bytes, *content_types: str) -> bool:
    """PDF if any declared type says so, or the bytes carry the %PDF signature."""
    return PDF_MIME in content_types or data[:4] == PDF_SIGNATURE


class PageResolver:
    """Resolves article content. Store failures propagate; there are no retries."""

    def __init__(self, store: ContentStore, indexer: ArticleIndexer, metadata: MetadataResolver) -> None:
        self.store = store
        self.indexer = indexer
        self.metadata = metadata

    def _resolve_body(self, article: Article) -> tuple[ContentKind, str]:
        entry = self.store.get_file(article.id)
        if entry.is_rich_document:
            return ContentKind.RICH_DOCUMENT, to_markdown(self.store.get_document(article.id))

        data, content_type = self.store.read_bytes(article.id)
        if is_pdf(data, entry.mime_type, content_type):
            return ContentKind.PDF, base64.b64encode(data).decode("ascii")
        return ContentKind.MARKDOWN, data.decode("utf-8", errors="replace")

    def get_page(self, slug: str) -> ArticleContent | None:
        """Resolve a page by slug. Returns None when no file has that slug."""
        article = self.indexer.find(slug)
        if article is None:
            return None
        kind, body = self._resolve_body(article)
        return ArticleContent(
            article=article,
            kind=kind,
            body=body,
            metadata=self.metadata.resolve(article.id),
        )

    def read_markdown(self, article: Article) -> str:
        """Markdown text of an article without metadata; PDFs yield ""."""
        kind, body = self._resolve_body(article)
        if kind is ContentKind.PDF:
            return ""
        return body
